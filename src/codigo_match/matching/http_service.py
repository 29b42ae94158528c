"""HTTP matcher — delegates matching to a remote service."""
import logging
import os
from typing import Any, Optional, Sequence

import httpx
from pydantic import TypeAdapter, ValidationError

from src.codigo_match.config import (
    HTTP_TIMEOUT_SECONDS,
    MATCHER_TOKEN_ENV,
    MATCHER_URL_ENV,
)
from src.codigo_match.matching.base import BaseMatcher, MatcherError
from src.codigo_match.matching.registry import register_matcher
from src.codigo_match.models.schemas import MatcherMethodType, MatchRecord

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[MatchRecord])


@register_matcher(MatcherMethodType.HTTP)
class HttpMatcher(BaseMatcher):
    """
    POSTs the classified codes to a matching service.

    Request body: {"icd_codes": [...], "cpt_codes": [...]}.
    The response is either a JSON list of match records or an object with a
    "results" list. Records may use snake_case or camelCase keys.

    The endpoint comes from the `endpoint` argument or the
    CODIGO_MATCHER_URL environment variable; CODIGO_MATCHER_TOKEN, when set,
    is sent as a bearer token.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._endpoint = endpoint or os.environ.get(MATCHER_URL_ENV)
        if not self._endpoint:
            raise RuntimeError(
                f"No matcher endpoint configured. Pass --endpoint or set "
                f"{MATCHER_URL_ENV}, or use --method mock instead."
            )

        token = token or os.environ.get(MATCHER_TOKEN_ENV)
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.Client(
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    @property
    def method_type(self) -> MatcherMethodType:
        return MatcherMethodType.HTTP

    def initialize(self, **kwargs: Any) -> None:
        logger.info(f"HTTP matcher initialized (endpoint={self._endpoint})")

    def match(
        self,
        icd_codes: Sequence[str],
        cpt_codes: Sequence[str],
    ) -> list[MatchRecord]:
        payload = {"icd_codes": list(icd_codes), "cpt_codes": list(cpt_codes)}

        try:
            response = self._client.post(self._endpoint, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise MatcherError(
                f"Matcher service returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise MatcherError(f"Matcher service unreachable: {e}") from e
        except ValueError as e:
            raise MatcherError(f"Matcher service returned invalid JSON: {e}") from e

        if isinstance(data, dict):
            data = data.get("results")

        try:
            records = _RECORDS.validate_python(data)
        except ValidationError as e:
            raise MatcherError(
                f"Matcher service returned malformed records: {e.error_count()} errors"
            ) from e

        logger.debug(f"Matcher service returned {len(records)} records")
        return records

    def close(self) -> None:
        self._client.close()
        logger.debug("HTTP matcher client closed")
