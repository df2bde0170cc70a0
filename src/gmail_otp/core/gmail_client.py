"""Gmail API client implementing the mailbox session used for code acquisition."""

from __future__ import annotations

import json
import logging
import random
import time
from typing import Any

from google.auth.exceptions import RefreshError
from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError

from gmail_otp.core.exceptions import (
    RateLimitError,
    SessionInvalidError,
    TransientFetchError,
)
from gmail_otp.core.models import CandidateMessage, FetchedMessage
from gmail_otp.core.parser import GmailParser

logger = logging.getLogger(__name__)

UNREAD_LABEL = "UNREAD"

# Gmail error reasons (lower-cased) that mean "slow down", not "credentials rejected"
RATE_LIMIT_REASONS = frozenset({
    "ratelimitexceeded",
    "userratelimitexceeded",
    "dailylimitexceeded",
    "quotaexceeded",
})


def _error_reasons(exc: HttpError) -> set[str]:
    """Collect the lower-cased ``reason`` values from an API error body.

    A body that is not JSON is treated as a single bare reason.
    """
    try:
        data = json.loads(exc.content.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return {exc.content.decode("utf-8", errors="replace").strip().lower()}

    error = data.get("error") if isinstance(data, dict) else None
    if not isinstance(error, dict):
        return set()

    reasons: set[str] = set()
    for key in ("errors", "details"):
        entries = error.get(key)
        if not isinstance(entries, list):
            continue
        for entry in entries:
            if isinstance(entry, dict) and entry.get("reason"):
                reasons.add(str(entry["reason"]).lower())
    if error.get("status") == "RESOURCE_EXHAUSTED":
        reasons.add("quotaexceeded")
    return reasons


def _is_rate_limit_error(exc: Exception) -> bool:
    """Check whether an exception represents Gmail API rate limiting.

    ``HttpError`` is judged by status code and structured reasons only, since
    its string form includes the request URI.
    """
    if isinstance(exc, HttpError):
        if exc.status_code == 401:
            return False
        if exc.status_code == 429:
            return True
        return bool(_error_reasons(exc) & RATE_LIMIT_REASONS)
    error_str = str(exc).lower()
    return "429" in error_str or any(reason in error_str for reason in RATE_LIMIT_REASONS)


def _is_session_error(exc: Exception) -> bool:
    """Check whether an exception means the credentials are no longer usable."""
    if isinstance(exc, RefreshError):
        return True
    if isinstance(exc, HttpError):
        if exc.status_code == 401:
            return True
        if exc.status_code == 403:
            return not _is_rate_limit_error(exc)
        return "invalid_grant" in _error_reasons(exc)
    return "invalid_grant" in str(exc)


class GmailClient:
    """Thin wrapper around Gmail API for message search, fetch and unread-flag removal."""

    def __init__(
        self,
        service: Resource,
        user_id: str = "me",
        *,
        include_spam_trash: bool = True,
        max_retries: int = 5,
        initial_backoff_seconds: float = 1.0,
        max_backoff_seconds: float = 60.0,
        num_retries: int = 3,
        parser: GmailParser | None = None,
    ) -> None:
        self._service = service
        self._user_id = user_id
        self._include_spam_trash = include_spam_trash
        self._max_retries = max_retries
        self._initial_backoff = initial_backoff_seconds
        self._max_backoff = max_backoff_seconds
        self._num_retries = num_retries
        self._parser = parser or GmailParser()

    def _execute_with_retry(self, request: Any, context: str) -> Any:
        """Execute a single API request with exponential backoff on rate-limit errors.

        Args:
            request: A googleapiclient HttpRequest object.
            context: Description for log messages (e.g. "search messages").

        Returns:
            The API response dict.

        Raises:
            SessionInvalidError: On authentication or authorization failures.
            RateLimitError: When retries are exhausted on rate-limit errors.
            TransientFetchError: On any other API error.
        """
        backoff = self._initial_backoff

        for attempt in range(self._max_retries + 1):
            try:
                return request.execute(num_retries=self._num_retries)
            except Exception as e:
                if _is_session_error(e):
                    raise SessionInvalidError(
                        f"Gmail session rejected during {context}: {e}"
                    ) from e
                if _is_rate_limit_error(e):
                    if attempt >= self._max_retries:
                        raise RateLimitError(
                            f"Rate limited during {context} after "
                            f"{self._max_retries} retries: {e}"
                        ) from e
                    sleep_time = min(backoff, self._max_backoff)
                    jitter = random.uniform(0, sleep_time)
                    logger.warning(
                        "Rate limited during %s (attempt %d/%d), sleeping %.2fs",
                        context, attempt + 1, self._max_retries, jitter,
                    )
                    time.sleep(jitter)
                    backoff = min(backoff * 2, self._max_backoff)
                else:
                    raise TransientFetchError(f"Failed to {context}: {e}") from e

        raise RateLimitError(f"Rate limited during {context} after {self._max_retries} retries")

    def search(
        self,
        query: str,
        limit: int,
        *,
        include_spam_trash: bool | None = None,
    ) -> list[CandidateMessage]:
        """List messages matching a Gmail query, newest first.

        Args:
            query: Gmail search expression; empty matches everything.
            limit: Maximum number of candidates (1-500).
            include_spam_trash: Also search Spam and Trash; None uses the
                client default.

        Returns:
            Candidates in the order Gmail returned them.
        """
        kwargs: dict[str, Any] = {
            "userId": self._user_id,
            "maxResults": limit,
            "includeSpamTrash": (
                self._include_spam_trash if include_spam_trash is None else include_spam_trash
            ),
        }
        if query:
            kwargs["q"] = query

        request = self._service.users().messages().list(**kwargs)
        response = self._execute_with_retry(request, "search messages")

        candidates = [
            CandidateMessage(message_id=msg["id"], thread_id=msg.get("threadId", ""))
            for msg in response.get("messages", [])
        ]
        logger.debug("Search %r returned %d messages", query, len(candidates))
        return candidates

    def fetch(self, message_id: str) -> FetchedMessage:
        """Fetch and parse a full message.

        Raises:
            DecodeError: If the returned message cannot be parsed.
        """
        request = self._service.users().messages().get(
            userId=self._user_id,
            id=message_id,
            format="full",
        )
        raw = self._execute_with_retry(request, f"fetch message {message_id}")
        return self._parser.parse(raw)

    def mark_consumed(self, message_id: str) -> None:
        """Remove the UNREAD label; a no-op on messages already read."""
        request = self._service.users().messages().modify(
            userId=self._user_id,
            id=message_id,
            body={"removeLabelIds": [UNREAD_LABEL]},
        )
        self._execute_with_retry(request, f"mark message {message_id} as read")
