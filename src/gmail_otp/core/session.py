"""Mailbox session interface consumed by the acquisition loop."""

from __future__ import annotations

from typing import Protocol

from gmail_otp.core.models import CandidateMessage, FetchedMessage


class MailboxSession(Protocol):
    """An authenticated mailbox handle.

    Implementations raise ``SessionInvalidError`` when credentials are no longer
    usable and ``TransientFetchError`` for failures worth retrying.
    """

    def search(
        self,
        query: str,
        limit: int,
        *,
        include_spam_trash: bool | None = None,
    ) -> list[CandidateMessage]:
        """Return up to ``limit`` matching messages, most recent first."""
        ...

    def fetch(self, message_id: str) -> FetchedMessage:
        """Fetch the full message, headers and part tree included."""
        ...

    def mark_consumed(self, message_id: str) -> None:
        """Flag a message so later searches do not pick it up again."""
        ...
