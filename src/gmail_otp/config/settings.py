"""Configuration via pydantic-settings with .env support."""

from __future__ import annotations

from dataclasses import fields
from pathlib import Path
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

from gmail_otp.core.models import DEFAULT_CODE_PATTERN, AcquisitionConfig


class GmailOtpSettings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_prefix="GMAIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OAuth credentials
    credentials_path: Path = Path("credentials/credentials.json")
    token_path: Path = Path("credentials/token.json")
    user_id: str = "me"

    # Acquisition defaults
    query: str = "OTP"
    max_age_minutes: float | None = 10
    max_attempts: int = 40
    attempt_delay_seconds: float = 3.0
    pattern: str = DEFAULT_CODE_PATTERN
    match_header: str | None = None
    mark_consumed: bool = True
    result_cap: int = 20
    include_spam_trash: bool = True

    # Rate limiting & retry
    max_retries: int = 5
    initial_backoff_seconds: float = 1.0
    max_backoff_seconds: float = 60.0
    num_retries: int = 3

    # Logging
    log_level: str = "INFO"

    def to_acquisition_config(self, **overrides: Any) -> AcquisitionConfig:
        """Build an AcquisitionConfig from these settings.

        Overrides replace the matching setting; None values are ignored.

        Raises:
            ValueError: If an override names a field AcquisitionConfig lacks.
        """
        unknown = sorted(set(overrides) - {f.name for f in fields(AcquisitionConfig)})
        if unknown:
            raise ValueError(f"Unknown acquisition option(s): {', '.join(unknown)}")
        values: dict[str, Any] = {
            "query": self.query,
            "max_age_minutes": self.max_age_minutes,
            "max_attempts": self.max_attempts,
            "attempt_delay_seconds": self.attempt_delay_seconds,
            "pattern": self.pattern,
            "match_header": self.match_header,
            "mark_consumed": self.mark_consumed,
            "result_cap": self.result_cap,
            "include_spam_trash": self.include_spam_trash,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return AcquisitionConfig(**values)
