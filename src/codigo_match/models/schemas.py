"""
Pydantic v2 models for the code matcher.

These models define the contract between the classifier, the matcher
implementations and the presentation shell. Match records accept the
camelCase keys used by the web front-end as well as snake_case.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from src.codigo_match.config import APP_VERSION, SCHEMA_VERSION


# ──────────────────────────────────────────────
# Enums
# ──────────────────────────────────────────────

class CodeType(str, Enum):
    """Bucket a token is classified into."""
    ICD = "icd"
    CPT = "cpt"
    INVALID = "invalid"


class MatcherMethodType(str, Enum):
    """Registry of known matcher identifiers."""
    MOCK = "mock"
    HTTP = "http"


class NotificationVariant(str, Enum):
    SUCCESS = "success"
    DESTRUCTIVE = "destructive"


class SessionState(str, Enum):
    """UI states of a match session."""
    IDLE = "idle"
    LOADING = "loading"
    RESULTS = "results"
    ERROR = "error"


# ──────────────────────────────────────────────
# Classification
# ──────────────────────────────────────────────

class ClassificationResult(BaseModel):
    """
    Tokens of one input text, split into ICD, CPT and invalid buckets.

    Each bucket holds unique uppercased tokens in first-seen order. The
    result is frozen: a new input produces a new result.
    """
    model_config = ConfigDict(frozen=True)

    icd: list[str] = Field(default_factory=list, description="ICD-10-CM codes")
    cpt: list[str] = Field(default_factory=list, description="CPT codes")
    invalid: list[str] = Field(
        default_factory=list,
        description="Tokens matching neither pattern",
    )

    @field_validator("icd", "cpt", "invalid")
    @classmethod
    def require_unique(cls, v: list[str]) -> list[str]:
        if len(set(v)) != len(v):
            raise ValueError("bucket tokens must be unique")
        return v

    @property
    def total(self) -> int:
        return len(self.icd) + len(self.cpt) + len(self.invalid)

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    @property
    def is_matchable(self) -> bool:
        """Both ICD and CPT codes are present, so the matcher can be called."""
        return bool(self.icd) and bool(self.cpt)


# ──────────────────────────────────────────────
# Match Records
# ──────────────────────────────────────────────

class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IcdEntry(_WireModel):
    """An ICD code paired with a CPT code."""
    code: str
    description: str


class SuggestedIcdCode(_WireModel):
    """An ICD code proposed for a CPT code that had no match in the input."""
    code: str
    description: str
    confidence: int = Field(..., ge=0, le=100, description="Match confidence in percent")


class MatchRecord(_WireModel):
    """Association between one CPT code and the ICD codes it was matched to."""
    cpt_code: str = Field(..., description="The CPT code, e.g., '99213'")
    cpt_description: str = Field(..., description="Human-readable procedure description")
    matched_icd_codes: list[IcdEntry] = Field(default_factory=list)
    has_matches: bool
    suggested_icd_codes: Optional[list[SuggestedIcdCode]] = Field(
        None,
        description="Ranked suggestions, only present when nothing matched",
    )

    @field_validator("suggested_icd_codes")
    @classmethod
    def rank_by_confidence(
        cls, v: Optional[list[SuggestedIcdCode]]
    ) -> Optional[list[SuggestedIcdCode]]:
        if v is None:
            return v
        return sorted(v, key=lambda x: x.confidence, reverse=True)

    @model_validator(mode="after")
    def validate_matches(self) -> MatchRecord:
        if self.has_matches and not self.matched_icd_codes:
            raise ValueError("has_matches requires at least one matched ICD code")
        if not self.has_matches and self.matched_icd_codes:
            raise ValueError("matched ICD codes given but has_matches is false")
        return self


class MatchSummary(BaseModel):
    """Counts shown above the result cards."""
    total: int = Field(..., ge=0)
    matched: int = Field(..., ge=0)
    need_attention: int = Field(..., ge=0)


# ──────────────────────────────────────────────
# Notifications
# ──────────────────────────────────────────────

class Notification(BaseModel):
    """A transient user-facing message (toast/banner)."""
    title: str
    description: str
    variant: NotificationVariant = NotificationVariant.SUCCESS


# ──────────────────────────────────────────────
# Batch Run Output (the JSON file)
# ──────────────────────────────────────────────

class EntryInput(BaseModel):
    """A single free-text entry to classify and match."""
    entry_id: str = Field(..., description="Row id, or the 1-based row number when absent")
    text: str = Field(..., description="Raw pasted text")


class EntryOutput(BaseModel):
    """Classification and match records for one entry."""
    entry_id: str
    codes: ClassificationResult
    results: list[MatchRecord] = Field(default_factory=list)
    error: Optional[str] = Field(None, description="Matcher failure message, if any")


class RunMetadata(BaseModel):
    """Top-level metadata about a batch run."""
    app_version: str = APP_VERSION
    schema_version: str = Field(
        default=SCHEMA_VERSION,
        description="Output schema version for consumer compatibility checks",
    )
    run_timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    method: MatcherMethodType
    input_file: Optional[str] = None
    total_entries: int
    matched_entries: int = Field(
        ...,
        description="Entries with at least one CPT code that matched an ICD code",
    )
    failed_entries: int
    summary: MatchSummary
    parameters: dict[str, Any] = Field(default_factory=dict)


class MatchRunOutput(BaseModel):
    """The root object serialized by the batch pipeline."""
    run_metadata: RunMetadata
    entries: list[EntryOutput]
