"""Abstract base class for matchers (strategy pattern)."""
from abc import ABC, abstractmethod
from typing import Any, Sequence

from src.codigo_match.models.schemas import MatcherMethodType, MatchRecord


class MatcherError(RuntimeError):
    """Raised when a matcher cannot produce match records."""


class BaseMatcher(ABC):
    """
    Capability contract: given ICD and CPT codes, return one match record
    per CPT code, or fail with MatcherError.

    Lifecycle:
        1. initialize(**kwargs)          — optional one-time setup
        2. match(icd_codes, cpt_codes)   — called per request

    Subclasses must implement `method_type` and `match()`.
    """

    @property
    @abstractmethod
    def method_type(self) -> MatcherMethodType:
        """Unique identifier for this matcher."""
        ...

    @abstractmethod
    def match(
        self,
        icd_codes: Sequence[str],
        cpt_codes: Sequence[str],
    ) -> list[MatchRecord]:
        """
        Pair every CPT code with the ICD codes that support it.

        Codes are already classified and normalized. May block; callers
        that must stay responsive run it off the event loop.
        """
        ...

    def initialize(self, **kwargs: Any) -> None:
        """One-time setup, e.g. warming a connection."""
        pass

    def close(self) -> None:
        """Release connections or other resources held by the matcher."""
        pass

    def __enter__(self) -> "BaseMatcher":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
