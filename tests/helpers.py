"""Message builders and an in-memory mailbox shared by the test modules."""

from __future__ import annotations

import base64
import threading

from gmail_otp.core.models import CandidateMessage, FetchedMessage, Part


def encode(text: str) -> str:
    """Base64url-encode text the way Gmail does (padding stripped)."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def text_part(text: str) -> Part:
    return Part(mime_type="text/plain", data=encode(text))


def html_part(markup: str) -> Part:
    return Part(mime_type="text/html", data=encode(markup))


def make_message(
    message_id: str,
    *,
    subject: str = "Your OTP",
    text: str | None = None,
    html: str | None = None,
    payload: Part | None = None,
) -> FetchedMessage:
    """Build a FetchedMessage with a multipart/alternative body from text and/or html."""
    if payload is None:
        children = []
        if text is not None:
            children.append(text_part(text))
        if html is not None:
            children.append(html_part(html))
        payload = Part(mime_type="multipart/alternative", parts=tuple(children))
    return FetchedMessage(
        message_id=message_id,
        thread_id=f"thread_{message_id}",
        headers={"subject": subject},
        payload=payload,
    )


class FakeMailbox:
    """In-memory mailbox session.

    ``search`` returns messages in insertion order (treated as newest first)
    whose subject contains every free-text term of the query; ``after:``
    clauses are ignored.
    """

    def __init__(
        self,
        messages: list[FetchedMessage] | None = None,
        *,
        fail_mark: bool = False,
    ) -> None:
        self._messages = {m.message_id: m for m in messages or []}
        self._order = [m.message_id for m in messages or []]
        self._fail_mark = fail_mark
        self._lock = threading.Lock()
        self.search_calls: list[tuple[str, int]] = []
        self.fetch_calls: list[str] = []
        self.mark_calls: list[str] = []
        self.spam_trash_flags: list[bool | None] = []

    def search(
        self,
        query: str,
        limit: int,
        *,
        include_spam_trash: bool | None = None,
    ) -> list[CandidateMessage]:
        with self._lock:
            self.search_calls.append((query, limit))
            self.spam_trash_flags.append(include_spam_trash)
        terms = [t.lower() for t in query.split() if not t.startswith("after:")]
        hits = [
            mid for mid in self._order
            if all(t in self._messages[mid].subject.lower() for t in terms)
        ]
        return [
            CandidateMessage(message_id=mid, thread_id=f"thread_{mid}") for mid in hits[:limit]
        ]

    def fetch(self, message_id: str) -> FetchedMessage:
        with self._lock:
            self.fetch_calls.append(message_id)
        return self._messages[message_id]

    def mark_consumed(self, message_id: str) -> None:
        with self._lock:
            self.mark_calls.append(message_id)
        if self._fail_mark:
            raise RuntimeError("modify rejected")


class RecordingSleep:
    """Stands in for time.sleep and records the requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
