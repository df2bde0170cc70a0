"""Settings-driven entry point: load credentials once, acquire codes on demand."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from gmail_otp.config.settings import GmailOtpSettings
from gmail_otp.core.auth import build_gmail_service, load_credentials
from gmail_otp.core.gmail_client import GmailClient
from gmail_otp.core.models import AcquisitionProgress, CandidateMessage, FetchedMessage
from gmail_otp.pipeline.acquirer import CodeAcquirer

logger = logging.getLogger(__name__)


class GmailOtpReader:
    """Reads one-time passcodes from a Gmail inbox.

    Credentials are loaded on first use and the resulting client is reused by
    every later call. Each ``get_code`` call runs its own independent
    acquisition, so a test can ask for a login code and later for a transfer
    confirmation code with different filters.
    """

    def __init__(
        self,
        settings: GmailOtpSettings | None = None,
        on_progress: Callable[[AcquisitionProgress], None] | None = None,
    ) -> None:
        self._settings = settings or GmailOtpSettings()
        self._on_progress = on_progress
        self._client: GmailClient | None = None

    @property
    def settings(self) -> GmailOtpSettings:
        return self._settings

    def _ensure_initialized(self) -> GmailClient:
        """Load credentials and build the Gmail client if not already done."""
        if self._client is None:
            creds = load_credentials(
                self._settings.credentials_path,
                self._settings.token_path,
            )
            service = build_gmail_service(creds)
            self._client = GmailClient(
                service,
                self._settings.user_id,
                include_spam_trash=self._settings.include_spam_trash,
                max_retries=self._settings.max_retries,
                initial_backoff_seconds=self._settings.initial_backoff_seconds,
                max_backoff_seconds=self._settings.max_backoff_seconds,
                num_retries=self._settings.num_retries,
            )
            logger.info("Gmail API ready")
        return self._client

    def get_code(self, **overrides: Any) -> str:
        """Acquire the next matching code.

        Args:
            **overrides: AcquisitionConfig fields replacing the settings'
                defaults for this call only (e.g. ``query="Transfer token"``).

        Returns:
            The extracted code.
        """
        client = self._ensure_initialized()
        config = self._settings.to_acquisition_config(**overrides)
        acquirer = CodeAcquirer(client, config, on_progress=self._on_progress)
        return acquirer.run().code

    def list_candidates(self, query: str, limit: int = 10) -> list[FetchedMessage]:
        """Fetch the messages a search would consider, for debugging filters."""
        client = self._ensure_initialized()
        candidates: list[CandidateMessage] = client.search(query, limit)
        return [client.fetch(c.message_id) for c in candidates]
