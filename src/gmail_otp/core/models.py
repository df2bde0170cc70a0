"""Frozen dataclasses for the Gmail OTP reader domain model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

# First maximal run of exactly six digits.
DEFAULT_CODE_PATTERN = r"(?<!\d)(\d{6})(?!\d)"


@dataclass(frozen=True)
class CandidateMessage:
    """Lightweight message reference from the Gmail list API."""

    message_id: str
    thread_id: str = ""


@dataclass(frozen=True)
class Part:
    """One node of a message's MIME tree.

    Leaves carry at most one base64url-encoded body in ``data``; multipart
    containers carry none and list their children in ``parts``.
    """

    mime_type: str
    data: str | None = None
    parts: tuple[Part, ...] = field(default_factory=tuple)
    filename: str = ""

    @property
    def is_multipart(self) -> bool:
        return self.mime_type.startswith("multipart/")

    @property
    def is_attachment(self) -> bool:
        return bool(self.filename)


@dataclass(frozen=True)
class FetchedMessage:
    """A fully fetched message: headers plus the MIME part tree."""

    message_id: str
    payload: Part
    thread_id: str = ""
    label_ids: tuple[str, ...] = field(default_factory=tuple)
    headers: dict[str, str] = field(default_factory=dict)
    snippet: str = ""
    internal_date: datetime | None = None

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower())

    @property
    def subject(self) -> str:
        return self.header("subject") or ""


@dataclass(frozen=True)
class SearchCriteria:
    """A provider-native query built for one polling round."""

    query: str
    result_cap: int
    issued_at: datetime
    include_spam_trash: bool = True


@dataclass(frozen=True)
class ExtractedCode:
    """A matched code and the id of the message that yielded it."""

    code: str
    message_id: str

    @property
    def masked(self) -> str:
        """Code with the middle hidden, safe for log output."""
        if len(self.code) >= 4:
            return f"{self.code[:2]}****{self.code[-2:]}"
        return "***"


@dataclass(frozen=True)
class AcquisitionConfig:
    """Options for a single code acquisition call.

    ``match_header`` selects where the pattern is applied: ``None`` matches
    against the decoded message body, a header name (e.g. ``"Subject"``)
    matches against that header's value instead.
    """

    query: str = "OTP"
    max_age_minutes: float | None = 10
    max_attempts: int = 40
    attempt_delay_seconds: float = 3.0
    pattern: str = DEFAULT_CODE_PATTERN
    match_header: str | None = None
    mark_consumed: bool = True
    result_cap: int = 20
    include_spam_trash: bool = True

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.result_cap < 1:
            raise ValueError(f"result_cap must be at least 1, got {self.result_cap}")
        if self.attempt_delay_seconds < 0:
            raise ValueError(
                f"attempt_delay_seconds must be non-negative, got {self.attempt_delay_seconds}"
            )
        if self.max_age_minutes is not None and self.max_age_minutes < 0:
            raise ValueError(
                f"max_age_minutes must be non-negative, got {self.max_age_minutes}"
            )


class AcquisitionState(str, Enum):
    """States of the acquisition control loop."""

    IDLE = "idle"
    SEARCHING = "searching"
    FETCHING = "fetching"
    MATCHING = "matching"
    DELAYING = "delaying"
    FOUND = "found"
    EXHAUSTED = "exhausted"


@dataclass
class AcquisitionProgress:
    """Mutable progress tracker for acquisition status reporting."""

    state: AcquisitionState = AcquisitionState.IDLE
    attempt: int = 0
    max_attempts: int = 0
    candidates_seen: int = 0
    messages_fetched: int = 0
