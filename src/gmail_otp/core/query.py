"""Gmail search query construction with a sliding recency window."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from gmail_otp.core.models import AcquisitionConfig, SearchCriteria


def build_query(
    text: str | None,
    max_age_minutes: float | None = None,
    *,
    now: datetime | None = None,
) -> str:
    """Compose a Gmail search expression from a free-text filter and a recency window.

    Gmail's ``newer_than:`` operator has no minute unit (``m`` is months), so
    the window is expressed as an absolute ``after:<unix seconds>`` bound.

    Args:
        text: Free-text filter, e.g. ``"OTP"`` or ``"from:bank@example.com"``.
        max_age_minutes: Only match messages received within this many minutes.
        now: Reference time for the window (defaults to the current UTC time).

    Returns:
        The query string; empty when neither input contributes a clause.
    """
    clauses: list[str] = []

    if text and text.strip():
        clauses.append(text.strip())

    if max_age_minutes and max_age_minutes > 0:
        reference = now or datetime.now(UTC)
        cutoff = reference - timedelta(minutes=max_age_minutes)
        clauses.append(f"after:{int(cutoff.timestamp())}")

    return " ".join(clauses)


def build_criteria(config: AcquisitionConfig, *, now: datetime | None = None) -> SearchCriteria:
    """Build the search criteria for one polling round."""
    issued_at = now or datetime.now(UTC)
    return SearchCriteria(
        query=build_query(config.query, config.max_age_minutes, now=issued_at),
        result_cap=config.result_cap,
        issued_at=issued_at,
        include_spam_trash=config.include_spam_trash,
    )
