"""Mock matcher — randomized placeholder records (no backend required)."""
import logging
import random
import time
from typing import Any, Optional, Sequence

from src.codigo_match.config import (
    MOCK_DELAY_SECONDS,
    MOCK_MATCH_PROBABILITY,
    MOCK_MAX_MATCHED_ICD,
)
from src.codigo_match.matching.base import BaseMatcher, MatcherError
from src.codigo_match.matching.registry import register_matcher
from src.codigo_match.models.schemas import (
    IcdEntry,
    MatcherMethodType,
    MatchRecord,
    SuggestedIcdCode,
)

logger = logging.getLogger(__name__)

MOCK_SUGGESTIONS = (
    ("M79.3", "Panniculitis, unspecified", 85),
    ("R51.9", "Headache, unspecified", 72),
)


@register_matcher(MatcherMethodType.MOCK)
class MockMatcher(BaseMatcher):
    """
    Simulates a matching service with random outcomes.

    Each CPT code matches with MOCK_MATCH_PROBABILITY; a match pairs it with
    the first one to three ICD codes, otherwise fixed suggestions are
    returned. Pass `seed` for reproducible output and `failure_rate` to
    exercise error handling.
    """

    def __init__(
        self,
        delay_seconds: float = MOCK_DELAY_SECONDS,
        seed: Optional[int] = None,
        failure_rate: float = 0.0,
    ) -> None:
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be within [0, 1], got {failure_rate}")
        self._delay_seconds = delay_seconds
        self._failure_rate = failure_rate
        self._rng = random.Random(seed)

    @property
    def method_type(self) -> MatcherMethodType:
        return MatcherMethodType.MOCK

    def initialize(self, **kwargs: Any) -> None:
        logger.info(
            f"Mock matcher initialized (delay={self._delay_seconds}s, "
            f"failure_rate={self._failure_rate})"
        )

    def match(
        self,
        icd_codes: Sequence[str],
        cpt_codes: Sequence[str],
    ) -> list[MatchRecord]:
        if self._delay_seconds > 0:
            time.sleep(self._delay_seconds)

        if self._failure_rate and self._rng.random() < self._failure_rate:
            raise MatcherError("Simulated matcher failure")

        return [self._mock_record(cpt, icd_codes) for cpt in cpt_codes]

    def _mock_record(self, cpt_code: str, icd_codes: Sequence[str]) -> MatchRecord:
        has_matches = bool(icd_codes) and self._rng.random() < MOCK_MATCH_PROBABILITY

        if not has_matches:
            return MatchRecord(
                cpt_code=cpt_code,
                cpt_description=f"Procedure Description for {cpt_code}",
                has_matches=False,
                suggested_icd_codes=[
                    SuggestedIcdCode(code=code, description=desc, confidence=conf)
                    for code, desc, conf in MOCK_SUGGESTIONS
                ],
            )

        count = self._rng.randint(1, MOCK_MAX_MATCHED_ICD)
        return MatchRecord(
            cpt_code=cpt_code,
            cpt_description=f"Procedure Description for {cpt_code}",
            matched_icd_codes=[
                IcdEntry(code=icd, description=f"Diagnosis description for {icd}")
                for icd in icd_codes[:count]
            ],
            has_matches=True,
        )
