"""Application-wide constants and defaults."""
from dataclasses import dataclass
from typing import Optional

APP_VERSION = "1.0.0"
SCHEMA_VERSION = "1.0.0"

DEFAULT_METHOD = "mock"

# Mock matcher parameters
MOCK_DELAY_SECONDS = 1.5
MOCK_MATCH_PROBABILITY = 0.7
MOCK_MAX_MATCHED_ICD = 3

# HTTP matcher parameters
HTTP_TIMEOUT_SECONDS = 30.0
MATCHER_URL_ENV = "CODIGO_MATCHER_URL"
MATCHER_TOKEN_ENV = "CODIGO_MATCHER_TOKEN"

# Batch input
DEFAULT_TEXT_COLUMN = "codes"
DEFAULT_ID_COLUMN = "entry_id"


@dataclass
class MatchConfig:
    """Typed configuration for a matcher run, decoupled from argparse."""
    text: Optional[str] = None
    input: Optional[str] = None
    output: Optional[str] = None
    method: str = DEFAULT_METHOD
    endpoint: Optional[str] = None
    timeout: float = HTTP_TIMEOUT_SECONDS
    seed: Optional[int] = None
    delay: float = MOCK_DELAY_SECONDS
    text_column: str = DEFAULT_TEXT_COLUMN
    id_column: str = DEFAULT_ID_COLUMN
    limit: Optional[int] = None
