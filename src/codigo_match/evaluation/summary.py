"""Summary counts over match records."""
import logging
from typing import Iterable

from src.codigo_match.models.schemas import MatchRecord, MatchSummary

logger = logging.getLogger(__name__)


def summarize(records: Iterable[MatchRecord]) -> MatchSummary:
    """
    Count CPT codes that matched and those that need attention.

    Args:
        records: Match records, one per CPT code.

    Returns:
        MatchSummary with total, matched and need_attention counts.
    """
    total = 0
    matched = 0
    for record in records:
        total += 1
        if record.has_matches:
            matched += 1

    return MatchSummary(total=total, matched=matched, need_attention=total - matched)


def merge_summaries(summaries: Iterable[MatchSummary]) -> MatchSummary:
    """Add up per-entry summaries for a batch run."""
    total = matched = 0
    for summary in summaries:
        total += summary.total
        matched += summary.matched

    if total == 0:
        logger.warning("No match records to summarize")
    return MatchSummary(total=total, matched=matched, need_attention=total - matched)
