"""Code extraction from decoded message text or a single header."""

from __future__ import annotations

import re

from gmail_otp.core.decoder import PayloadDecoder
from gmail_otp.core.exceptions import MisconfiguredPatternError
from gmail_otp.core.models import DEFAULT_CODE_PATTERN, FetchedMessage


class CodeMatcher:
    """Applies a code pattern to a message body or to one of its headers."""

    def __init__(
        self,
        pattern: str | re.Pattern[str] = DEFAULT_CODE_PATTERN,
        header: str | None = None,
    ) -> None:
        if isinstance(pattern, re.Pattern):
            self._regex = pattern
        else:
            try:
                self._regex = re.compile(pattern)
            except re.error as e:
                raise MisconfiguredPatternError(
                    f"Invalid code pattern {pattern!r}: {e}"
                ) from e
        self._header = header

    @property
    def pattern(self) -> str:
        return self._regex.pattern

    @property
    def header(self) -> str | None:
        return self._header

    def match(self, text: str | None) -> str | None:
        """Return the first capture group of the first match.

        Patterns without groups, or whose first group did not take part in the
        match, yield the whole match.
        """
        if not text:
            return None
        found = self._regex.search(text)
        if not found:
            return None
        if self._regex.groups and found.group(1) is not None:
            return found.group(1)
        return found.group(0)

    def source_text(self, message: FetchedMessage, decoder: PayloadDecoder) -> str | None:
        """Text the pattern is applied to: the configured header or the decoded body."""
        if self._header:
            return message.header(self._header)
        return decoder.decode(message.payload)
