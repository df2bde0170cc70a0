"""Acquisition loop: search → fetch → decode → match → mark, with bounded retries."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from gmail_otp.core.decoder import PayloadDecoder
from gmail_otp.core.exceptions import (
    AttemptsExhaustedError,
    DecodeError,
    TransientFetchError,
)
from gmail_otp.core.marker import mark_consumed
from gmail_otp.core.matcher import CodeMatcher
from gmail_otp.core.models import (
    AcquisitionConfig,
    AcquisitionProgress,
    AcquisitionState,
    ExtractedCode,
    SearchCriteria,
)
from gmail_otp.core.query import build_criteria
from gmail_otp.core.session import MailboxSession

logger = logging.getLogger(__name__)


class CodeAcquirer:
    """Polls a mailbox until a message yields a code or the attempt budget runs out.

    Each round rebuilds the search query (so the recency window slides
    forward), then fetches candidates one at a time in the order the mailbox
    returned them. The first candidate whose text matches wins; the rest of
    the round is skipped.

    Failure policy:
    - ``DecodeError`` on one candidate skips that candidate.
    - ``TransientFetchError`` or ``OSError`` (connection resets, timeouts from
      non-Gmail sessions) from search or fetch ends the round early.
    - ``SessionInvalidError`` propagates immediately.

    An instance holds the counters of one acquisition; create a new one per call.
    """

    def __init__(
        self,
        session: MailboxSession,
        config: AcquisitionConfig | None = None,
        *,
        decoder: PayloadDecoder | None = None,
        on_progress: Callable[[AcquisitionProgress], None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._session = session
        self._config = config or AcquisitionConfig()
        # Compiled up front so a bad pattern fails before any network call
        self._matcher = CodeMatcher(self._config.pattern, header=self._config.match_header)
        self._decoder = decoder or PayloadDecoder()
        self._on_progress = on_progress
        self._sleep = sleep
        self._progress = AcquisitionProgress(max_attempts=self._config.max_attempts)

    @property
    def progress(self) -> AcquisitionProgress:
        return self._progress

    def run(self) -> ExtractedCode:
        """Run the loop to completion.

        Returns:
            The first code found.

        Raises:
            AttemptsExhaustedError: If every round finished without a match.
            SessionInvalidError: If the mailbox rejected the session.
        """
        config = self._config
        query = ""

        for attempt in range(1, config.max_attempts + 1):
            self._progress.attempt = attempt
            criteria = build_criteria(config)
            query = criteria.query
            logger.info('Attempt %d/%d - query: "%s"', attempt, config.max_attempts, query)

            found = self._run_round(criteria)
            if found is not None:
                self._set_state(AcquisitionState.FOUND)
                logger.info(
                    "Code found in message %s: %s", found.message_id, found.masked
                )
                if config.mark_consumed:
                    mark_consumed(self._session, found.message_id)
                return found

            self._set_state(AcquisitionState.DELAYING)
            self._sleep(config.attempt_delay_seconds)

        self._set_state(AcquisitionState.EXHAUSTED)
        raise AttemptsExhaustedError(config.max_attempts, query)

    def _run_round(self, criteria: SearchCriteria) -> ExtractedCode | None:
        """Search once and scan candidates in order; None when nothing matched."""
        self._set_state(AcquisitionState.SEARCHING)
        try:
            candidates = self._session.search(
                criteria.query,
                criteria.result_cap,
                include_spam_trash=criteria.include_spam_trash,
            )
        except (TransientFetchError, OSError) as e:
            logger.warning("Search failed, retrying next round: %s", e)
            return None

        logger.debug("Found %d candidate messages", len(candidates))
        self._progress.candidates_seen += len(candidates)

        for candidate in candidates:
            self._set_state(AcquisitionState.FETCHING)
            try:
                message = self._session.fetch(candidate.message_id)
            except (TransientFetchError, OSError) as e:
                logger.warning(
                    "Fetch of %s failed, retrying next round: %s", candidate.message_id, e
                )
                return None
            except DecodeError as e:
                logger.warning("Skipping unparseable message %s: %s", candidate.message_id, e)
                continue
            self._progress.messages_fetched += 1

            self._set_state(AcquisitionState.MATCHING)
            try:
                text = self._matcher.source_text(message, self._decoder)
            except DecodeError as e:
                logger.warning("Skipping undecodable message %s: %s", message.message_id, e)
                continue

            code = self._matcher.match(text)
            if code is not None:
                return ExtractedCode(code=code, message_id=message.message_id)

        return None

    def _set_state(self, state: AcquisitionState) -> None:
        self._progress.state = state
        if self._on_progress:
            self._on_progress(self._progress)


def acquire_code(
    session: MailboxSession,
    config: AcquisitionConfig | None = None,
    **kwargs: Any,
) -> str:
    """Block until the mailbox yields a matching code and return it.

    Args:
        session: Authenticated mailbox session.
        config: Acquisition options (defaults apply when omitted).
        **kwargs: Passed through to CodeAcquirer (``on_progress``, ``sleep``, ...).

    Raises:
        AttemptsExhaustedError: No code observed within ``config.max_attempts`` rounds.
        SessionInvalidError: The session is unusable.
        MisconfiguredPatternError: ``config.pattern`` does not compile.
    """
    return CodeAcquirer(session, config, **kwargs).run().code
