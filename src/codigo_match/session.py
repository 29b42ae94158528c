"""Match session — input, matcher calls and UI state for one form."""
import asyncio
import logging

from src.codigo_match.classification.classifier import classify
from src.codigo_match.evaluation.summary import summarize
from src.codigo_match.matching.base import BaseMatcher
from src.codigo_match.models.schemas import (
    ClassificationResult,
    MatchRecord,
    SessionState,
)
from src.codigo_match.notifications import Notifier, destructive, log_notifier, success

logger = logging.getLogger(__name__)


class MatchSession:
    """
    Drives the code entry form: reclassifies on every input change and calls
    the matcher once both ICD and CPT codes are present.

    States: idle -> loading -> results | error.

    Each matcher call gets a request id. With `discard_stale_responses`
    enabled, a response whose id is no longer the latest is logged and
    dropped, so an edit made while a call is outstanding is never overwritten
    by the older call. Disable it to apply every response in arrival order.
    """

    def __init__(
        self,
        matcher: BaseMatcher,
        notifier: Notifier = log_notifier,
        discard_stale_responses: bool = True,
    ) -> None:
        self._matcher = matcher
        self._notify = notifier
        self._discard_stale = discard_stale_responses
        self._latest_request_id = 0

        self.codes = ClassificationResult()
        self.results: list[MatchRecord] = []
        self.state = SessionState.IDLE

    @property
    def is_loading(self) -> bool:
        return self.state == SessionState.LOADING

    @property
    def latest_request_id(self) -> int:
        return self._latest_request_id

    def update_input(self, text: str) -> ClassificationResult:
        """Reclassify the input; clear results when no ICD or CPT code is left."""
        self.codes = classify(text)

        if not self.codes.icd and not self.codes.cpt:
            self.results = []
            if self._discard_stale:
                # Invalidate any outstanding call
                self._latest_request_id += 1
                self.state = SessionState.IDLE
            elif not self.is_loading:
                self.state = SessionState.IDLE

        return self.codes

    async def handle_input(self, text: str) -> ClassificationResult:
        """Update the input and process matches automatically when possible."""
        codes = self.update_input(text)
        if codes.is_matchable:
            await self.process()
        return codes

    async def process(self) -> list[MatchRecord]:
        """Call the matcher with the current codes and report the outcome."""
        codes = self.codes
        if not codes.is_matchable:
            self._notify(destructive(
                "Missing codes",
                "Please enter both ICD-10 and CPT codes to process matches.",
            ))
            return self.results

        self._latest_request_id += 1
        request_id = self._latest_request_id
        self.state = SessionState.LOADING

        try:
            records = await asyncio.to_thread(
                self._matcher.match, list(codes.icd), list(codes.cpt)
            )
        except Exception as e:
            if self._is_stale(request_id):
                logger.warning(f"Discarding failure of stale request {request_id}: {e}")
                return self.results

            logger.error(f"Error processing codes (request {request_id}): {e}")
            self.results = []
            if request_id == self._latest_request_id:
                self.state = SessionState.ERROR
            self._notify(destructive(
                "Error processing codes",
                "Please try again or contact support if the issue persists.",
            ))
            return self.results

        if self._is_stale(request_id):
            logger.warning(
                f"Discarding stale response for request {request_id} "
                f"(latest is {self._latest_request_id})"
            )
            return self.results

        self.results = records
        # An older response never ends the loading state of a newer request
        if request_id == self._latest_request_id:
            self.state = SessionState.RESULTS

        summary = summarize(records)
        self._notify(success(
            "Code matching complete!",
            f"{summary.matched} CPT codes matched, "
            f"{summary.need_attention} need attention.",
        ))
        return records

    def _is_stale(self, request_id: int) -> bool:
        return self._discard_stale and request_id != self._latest_request_id
