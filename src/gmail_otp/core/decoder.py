"""Payload decoding: MIME tree walking, base64url decoding, HTML stripping."""

from __future__ import annotations

import base64
import binascii
import html
import logging
import re

from gmail_otp.core.exceptions import DecodeError
from gmail_otp.core.models import Part

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")


def decode_base64url(data: str) -> str:
    """Decode base64url-encoded body data.

    Args:
        data: Base64url-encoded string from Gmail API, padded or not.

    Returns:
        Decoded UTF-8 string (undecodable bytes replaced).

    Raises:
        DecodeError: If the data is not valid base64.
    """
    # Gmail uses base64url encoding (RFC 4648 §5) with padding stripped
    padded = data + "=" * (-len(data) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64url body: {e}") from e
    return raw.decode("utf-8", errors="replace")


def strip_html(markup: str) -> str:
    """Replace every tag with a single space and unescape entities.

    Best-effort only: unbalanced or malformed markup is left as text.
    """
    return html.unescape(_TAG_RE.sub(" ", markup))


class PayloadDecoder:
    """Produces the best-effort plain text of a message part tree."""

    def decode(self, part: Part) -> str | None:
        """Depth-first search for decodable text.

        A ``text/plain`` body wins as soon as it is reached. Children are
        visited in order and the first non-empty result is returned. An HTML
        body is used only when nothing below it produced text.

        Args:
            part: Root of the part tree (usually the message payload).

        Returns:
            Decoded text, or None when the tree holds no text at all.

        Raises:
            DecodeError: If a body that would have been used is not valid base64url.
        """
        if part.mime_type == "text/plain" and part.data:
            return decode_base64url(part.data)

        for child in part.parts:
            # Skip attachments
            if child.is_attachment:
                continue
            text = self.decode(child)
            if text:
                return text

        if part.mime_type == "text/html" and part.data:
            return strip_html(decode_base64url(part.data))

        return None
