"""Best-effort consumption marking of matched messages."""

from __future__ import annotations

import logging

from gmail_otp.core.session import MailboxSession

logger = logging.getLogger(__name__)


def mark_consumed(session: MailboxSession, message_id: str) -> bool:
    """Mark a message as consumed, never raising.

    Marking only keeps stale codes out of later, unrelated acquisitions; the
    code already extracted stays valid whether or not this succeeds.

    Returns:
        True if the session accepted the change, False otherwise.
    """
    try:
        session.mark_consumed(message_id)
    except Exception as e:
        logger.warning("Failed to mark message %s as consumed: %s", message_id, e)
        return False
    logger.debug("Marked message %s as consumed", message_id)
    return True
