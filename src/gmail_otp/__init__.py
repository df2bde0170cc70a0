"""Gmail OTP Reader - Poll a Gmail inbox for one-time passcodes in UI tests."""

from gmail_otp.core.exceptions import (
    AttemptsExhaustedError,
    DecodeError,
    GmailOtpError,
    MisconfiguredPatternError,
    RateLimitError,
    SessionInvalidError,
    TransientFetchError,
)
from gmail_otp.core.models import (
    AcquisitionConfig,
    AcquisitionProgress,
    AcquisitionState,
    CandidateMessage,
    ExtractedCode,
    FetchedMessage,
    Part,
)
from gmail_otp.pipeline.acquirer import CodeAcquirer, acquire_code
from gmail_otp.pipeline.reader import GmailOtpReader

__all__ = [
    "AcquisitionConfig",
    "AcquisitionProgress",
    "AcquisitionState",
    "AttemptsExhaustedError",
    "CandidateMessage",
    "CodeAcquirer",
    "DecodeError",
    "ExtractedCode",
    "FetchedMessage",
    "GmailOtpError",
    "GmailOtpReader",
    "MisconfiguredPatternError",
    "Part",
    "RateLimitError",
    "SessionInvalidError",
    "TransientFetchError",
    "acquire_code",
]
