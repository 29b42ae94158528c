"""Lookup of matcher classes by MatcherMethodType."""
import importlib
from typing import Callable, Type

from src.codigo_match.matching.base import BaseMatcher
from src.codigo_match.models.schemas import MatcherMethodType

# Modules whose import registers a matcher
MATCHER_MODULES = (
    "src.codigo_match.matching.mock",
    "src.codigo_match.matching.http_service",
)

_matchers: dict[MatcherMethodType, Type[BaseMatcher]] = {}


def register_matcher(
    method_type: MatcherMethodType,
) -> Callable[[Type[BaseMatcher]], Type[BaseMatcher]]:
    def add(cls: Type[BaseMatcher]) -> Type[BaseMatcher]:
        _matchers[method_type] = cls
        return cls
    return add


def get_matcher(method_type: MatcherMethodType, **kwargs) -> BaseMatcher:
    """Build the matcher registered for `method_type`, passing kwargs to its constructor."""
    try:
        matcher_cls = _matchers[method_type]
    except KeyError:
        known = ", ".join(sorted(m.value for m in _matchers)) or "none"
        raise ValueError(
            f"Unknown matcher '{method_type.value}'. Available: {known}"
        ) from None
    return matcher_cls(**kwargs)


def available_matchers() -> list[MatcherMethodType]:
    return list(_matchers)


def discover_matchers() -> None:
    for module in MATCHER_MODULES:
        importlib.import_module(module)
