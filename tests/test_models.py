"""Unit tests for gmail_otp.core.models dataclasses."""

from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from gmail_otp.core.models import (
    DEFAULT_CODE_PATTERN,
    AcquisitionConfig,
    AcquisitionProgress,
    AcquisitionState,
    CandidateMessage,
    ExtractedCode,
    FetchedMessage,
    Part,
)

# ---------------------------------------------------------------------------
# CandidateMessage / Part / FetchedMessage
# ---------------------------------------------------------------------------


class TestCandidateMessage:
    """CandidateMessage is a frozen dataclass with message_id and thread_id."""

    def test_stores_fields(self) -> None:
        stub = CandidateMessage(message_id="msg_1", thread_id="thread_1")
        assert stub.message_id == "msg_1"
        assert stub.thread_id == "thread_1"

    def test_thread_id_defaults_empty(self) -> None:
        assert CandidateMessage("msg_1").thread_id == ""

    def test_frozen(self) -> None:
        stub = CandidateMessage(message_id="msg_1")
        with pytest.raises(FrozenInstanceError):
            stub.message_id = "msg_2"  # type: ignore[misc]


class TestPart:
    """Part classifies itself as container, leaf or attachment."""

    def test_multipart_container(self) -> None:
        assert Part(mime_type="multipart/alternative").is_multipart is True

    def test_leaf(self) -> None:
        part = Part(mime_type="text/plain", data="SGk")
        assert part.is_multipart is False
        assert part.parts == ()

    def test_attachment(self) -> None:
        assert Part(mime_type="application/pdf", filename="a.pdf").is_attachment is True
        assert Part(mime_type="text/plain").is_attachment is False


class TestFetchedMessage:
    """Header access on FetchedMessage."""

    def test_header_lookup_is_case_insensitive(self) -> None:
        msg = FetchedMessage(
            message_id="m",
            payload=Part(mime_type="text/plain"),
            headers={"subject": "Your OTP", "from": "bank@example.com"},
        )
        assert msg.header("Subject") == "Your OTP"
        assert msg.header("FROM") == "bank@example.com"
        assert msg.header("To") is None

    def test_subject_defaults_empty(self) -> None:
        msg = FetchedMessage(message_id="m", payload=Part(mime_type="text/plain"))
        assert msg.subject == ""


# ---------------------------------------------------------------------------
# ExtractedCode
# ---------------------------------------------------------------------------


class TestExtractedCode:
    """ExtractedCode pairs a code with its message and masks it for logs."""

    def test_masked(self) -> None:
        assert ExtractedCode(code="482910", message_id="m").masked == "48****10"

    def test_masked_short_code(self) -> None:
        assert ExtractedCode(code="123", message_id="m").masked == "***"


# ---------------------------------------------------------------------------
# AcquisitionConfig
# ---------------------------------------------------------------------------


class TestAcquisitionConfig:
    """Defaults and validation of AcquisitionConfig."""

    def test_defaults(self) -> None:
        config = AcquisitionConfig()
        assert config.query == "OTP"
        assert config.max_age_minutes == 10
        assert config.max_attempts == 40
        assert config.attempt_delay_seconds == 3.0
        assert config.pattern == DEFAULT_CODE_PATTERN
        assert config.match_header is None
        assert config.mark_consumed is True
        assert config.result_cap == 20
        assert config.include_spam_trash is True

    def test_frozen(self) -> None:
        config = AcquisitionConfig()
        with pytest.raises(FrozenInstanceError):
            config.max_attempts = 1  # type: ignore[misc]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": 0},
            {"result_cap": 0},
            {"attempt_delay_seconds": -1},
            {"max_age_minutes": -5},
        ],
    )
    def test_rejects_invalid_values(self, kwargs: dict[str, float]) -> None:
        with pytest.raises(ValueError):
            AcquisitionConfig(**kwargs)  # type: ignore[arg-type]

    def test_no_recency_window_allowed(self) -> None:
        assert AcquisitionConfig(max_age_minutes=None).max_age_minutes is None


class TestAcquisitionProgress:
    """AcquisitionProgress starts idle and is mutable."""

    def test_defaults(self) -> None:
        progress = AcquisitionProgress()
        assert progress.state is AcquisitionState.IDLE
        assert progress.attempt == 0
        assert progress.candidates_seen == 0

    def test_mutable(self) -> None:
        progress = AcquisitionProgress()
        progress.state = AcquisitionState.SEARCHING
        progress.attempt = 2
        assert progress.state.value == "searching"
        assert progress.attempt == 2
