"""Shared fixtures for the code matcher tests."""
import threading
import time
from typing import Sequence

import pytest

from src.codigo_match.matching.base import BaseMatcher, MatcherError
from src.codigo_match.matching.mock import MockMatcher
from src.codigo_match.models.schemas import (
    IcdEntry,
    MatcherMethodType,
    MatchRecord,
    Notification,
)


class EchoMatcher(BaseMatcher):
    """Matches every CPT code with every ICD code; records each call."""

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], list[str]]] = []

    @property
    def method_type(self) -> MatcherMethodType:
        return MatcherMethodType.MOCK

    def match(self, icd_codes: Sequence[str], cpt_codes: Sequence[str]) -> list[MatchRecord]:
        self.calls.append((list(icd_codes), list(cpt_codes)))
        return [
            MatchRecord(
                cpt_code=cpt,
                cpt_description=f"Procedure {cpt}",
                matched_icd_codes=[IcdEntry(code=icd, description=f"Diagnosis {icd}") for icd in icd_codes],
                has_matches=True,
            )
            for cpt in cpt_codes
        ]


class FailingMatcher(BaseMatcher):
    @property
    def method_type(self) -> MatcherMethodType:
        return MatcherMethodType.MOCK

    def match(self, icd_codes: Sequence[str], cpt_codes: Sequence[str]) -> list[MatchRecord]:
        raise MatcherError("service down")


class GatedMatcher(EchoMatcher):
    """Holds calls for CPT codes listed in `held` until `release` is set."""

    def __init__(self, held: set[str], extra_delay: float = 0.0) -> None:
        super().__init__()
        self.held = held
        self.extra_delay = extra_delay
        self.release = threading.Event()

    def match(self, icd_codes: Sequence[str], cpt_codes: Sequence[str]) -> list[MatchRecord]:
        if self.held & set(cpt_codes):
            self.release.wait(timeout=5)
            time.sleep(self.extra_delay)
        else:
            self.release.set()
        return super().match(icd_codes, cpt_codes)


@pytest.fixture
def notifications() -> list[Notification]:
    """Collects notifications sent by a session."""
    return []


@pytest.fixture
def echo_matcher() -> EchoMatcher:
    return EchoMatcher()


@pytest.fixture
def failing_matcher() -> FailingMatcher:
    return FailingMatcher()


@pytest.fixture
def mock_matcher() -> MockMatcher:
    """Seeded mock matcher without simulated latency."""
    return MockMatcher(delay_seconds=0, seed=7)


class DelayedMatcher(EchoMatcher):
    """Sleeps for the delay configured for the first CPT code of each call."""

    def __init__(self, delays: dict[str, float]) -> None:
        super().__init__()
        self.delays = delays

    def match(self, icd_codes: Sequence[str], cpt_codes: Sequence[str]) -> list[MatchRecord]:
        time.sleep(self.delays.get(cpt_codes[0], 0.0))
        return super().match(icd_codes, cpt_codes)


class UnmatchedMatcher(EchoMatcher):
    """Returns a record per CPT code, none of them matched."""

    def match(self, icd_codes: Sequence[str], cpt_codes: Sequence[str]) -> list[MatchRecord]:
        self.calls.append((list(icd_codes), list(cpt_codes)))
        return [
            MatchRecord(cpt_code=cpt, cpt_description=f"Procedure {cpt}", has_matches=False)
            for cpt in cpt_codes
        ]
