"""Gmail message parser: raw API dicts into FetchedMessage part trees."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from gmail_otp.core.exceptions import DecodeError
from gmail_otp.core.models import FetchedMessage, Part

logger = logging.getLogger(__name__)


class GmailParser:
    """Parses raw Gmail API message dicts into FetchedMessage objects."""

    def parse(self, raw_message: dict[str, Any]) -> FetchedMessage:
        """Parse a raw Gmail API message dict into a FetchedMessage.

        Args:
            raw_message: Full message dict from Gmail API (format=full).

        Returns:
            Parsed FetchedMessage.

        Raises:
            DecodeError: If the message structure is invalid.
        """
        try:
            message_id = raw_message["id"]
            payload = raw_message.get("payload") or {}

            return FetchedMessage(
                message_id=message_id,
                thread_id=raw_message.get("threadId", ""),
                label_ids=tuple(raw_message.get("labelIds", [])),
                headers=self._extract_headers(payload),
                snippet=raw_message.get("snippet", ""),
                internal_date=self._parse_internal_date(raw_message.get("internalDate")),
                payload=self._parse_part(payload),
            )
        except DecodeError:
            raise
        except Exception as e:
            msg_id = raw_message.get("id", "?") if isinstance(raw_message, dict) else "?"
            raise DecodeError(f"Failed to parse message {msg_id}: {e}") from e

    def _parse_part(self, part: dict[str, Any]) -> Part:
        """Recursively convert a MIME part dict into a Part node."""
        mime_type = part.get("mimeType", "")
        children = tuple(self._parse_part(sub) for sub in part.get("parts") or [])

        data: str | None = None
        # Containers never carry a body of their own
        if not mime_type.startswith("multipart/"):
            data = (part.get("body") or {}).get("data") or None

        return Part(
            mime_type=mime_type,
            data=data,
            parts=children,
            filename=part.get("filename", ""),
        )

    @staticmethod
    def _extract_headers(payload: dict[str, Any]) -> dict[str, str]:
        """Collect top-level headers keyed by lower-cased name; first occurrence wins."""
        headers: dict[str, str] = {}
        for h in payload.get("headers", []):
            name = h.get("name", "").lower()
            if name and name not in headers:
                headers[name] = h.get("value", "")
        return headers

    @staticmethod
    def _parse_internal_date(value: str | int | None) -> datetime | None:
        """Parse Gmail's internalDate (epoch milliseconds) into an aware datetime."""
        if value in (None, ""):
            return None
        try:
            return datetime.fromtimestamp(int(value) / 1000, tz=UTC)
        except (TypeError, ValueError, OverflowError):
            logger.warning("Failed to parse internalDate: %s", value)
            return None
