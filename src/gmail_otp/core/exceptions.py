"""Custom exceptions for the Gmail OTP reader."""


class GmailOtpError(Exception):
    """Base exception for all Gmail OTP reader errors."""


class SessionInvalidError(GmailOtpError):
    """The mailbox session cannot be used (missing, expired or revoked credentials)."""


class TransientFetchError(GmailOtpError):
    """A search, fetch or modify call failed in a way that may succeed on retry."""


class RateLimitError(TransientFetchError):
    """Gmail API rate limit exceeded."""


class DecodeError(GmailOtpError):
    """Failed to parse a message structure or decode a body payload."""


class MisconfiguredPatternError(GmailOtpError):
    """The configured code pattern is not a valid regular expression."""


class AttemptsExhaustedError(GmailOtpError):
    """No matching code was observed within the attempt budget."""

    def __init__(self, attempts: int, query: str) -> None:
        super().__init__(
            f"No matching code observed after {attempts} attempts (query: {query!r})"
        )
        self.attempts = attempts
        self.query = query
