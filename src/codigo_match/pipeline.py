"""Pipeline orchestration — load, classify, match, aggregate, write."""
import asyncio
import logging
from typing import Any

from src.codigo_match.classification.classifier import classify
from src.codigo_match.config import MatchConfig
from src.codigo_match.evaluation.summary import merge_summaries, summarize
from src.codigo_match.io.loaders import load_entries
from src.codigo_match.io.writers import write_output
from src.codigo_match.matching.base import BaseMatcher
from src.codigo_match.matching.registry import discover_matchers, get_matcher
from src.codigo_match.models.schemas import (
    EntryInput,
    EntryOutput,
    MatcherMethodType,
    MatchRecord,
    MatchRunOutput,
    RunMetadata,
)
from src.codigo_match.notifications import Notifier, log_notifier
from src.codigo_match.session import MatchSession

logger = logging.getLogger(__name__)


def matcher_parameters(config: MatchConfig) -> dict[str, Any]:
    """Constructor arguments for the configured matcher."""
    method_type = MatcherMethodType(config.method)
    if method_type == MatcherMethodType.MOCK:
        return {"delay_seconds": config.delay, "seed": config.seed}
    if method_type == MatcherMethodType.HTTP:
        return {"endpoint": config.endpoint, "timeout": config.timeout}
    return {}


def build_matcher(config: MatchConfig) -> BaseMatcher:
    """Discover, instantiate and initialize the configured matcher."""
    discover_matchers()

    method_type = MatcherMethodType(config.method)
    matcher = get_matcher(method_type, **matcher_parameters(config))

    logger.info(f"Initializing matcher: {method_type.value}")
    matcher.initialize()
    return matcher


def run_text(config: MatchConfig, notifier: Notifier = log_notifier) -> list[MatchRecord]:
    """Classify and match a single text the way the form's process button does."""
    if config.text is None:
        raise ValueError("run_text requires config.text")

    with build_matcher(config) as matcher:
        session = MatchSession(matcher, notifier=notifier)
        codes = session.update_input(config.text)
        logger.info(
            f"Detected codes ({codes.total}): {len(codes.icd)} ICD, "
            f"{len(codes.cpt)} CPT, {len(codes.invalid)} invalid"
        )
        if codes.invalid:
            logger.warning(f"Invalid codes: {', '.join(codes.invalid)}")

        return asyncio.run(session.process())


def run_pipeline(config: MatchConfig, matcher: BaseMatcher | None = None) -> MatchRunOutput:
    """
    Execute the batch pipeline over a CSV of entries.

    A matcher passed in stays open; one built from `config` is closed
    when the run ends.
    """
    if config.input is None:
        raise ValueError("run_pipeline requires config.input")

    # 1. Load data
    logger.info("Loading entries...")
    entries = load_entries(
        config.input,
        text_column=config.text_column,
        id_column=config.id_column,
        limit=config.limit,
    )
    if not entries:
        raise RuntimeError(f"No entries loaded from {config.input}")

    # 2. Initialize matcher
    if matcher is not None:
        result = _match_entries(entries, matcher, config)
    else:
        with build_matcher(config) as owned:
            result = _match_entries(entries, owned, config)

    # 5. Write output
    if config.output:
        write_output(result, config.output)
    summary = result.run_metadata.summary
    logger.info(
        f"Pipeline complete: {len(result.entries)} entries, {summary.total} CPT codes, "
        f"{summary.matched} matched, {summary.need_attention} need attention"
    )
    return result


def _match_entries(
    entries: list[EntryInput],
    matcher: BaseMatcher,
    config: MatchConfig,
) -> MatchRunOutput:
    # 3. Classify and match per entry
    outputs: list[EntryOutput] = []
    failed = 0

    for i, entry in enumerate(entries):
        codes = classify(entry.text)
        output = EntryOutput(entry_id=entry.entry_id, codes=codes)

        if codes.is_matchable:
            try:
                output.results = matcher.match(codes.icd, codes.cpt)
            except Exception as e:
                logger.error(f"Error matching entry {entry.entry_id}: {e}")
                output.error = str(e)
                failed += 1
        else:
            logger.debug(f"Entry {entry.entry_id} lacks ICD or CPT codes, skipping matcher")

        outputs.append(output)

        if (i + 1) % 10 == 0 or (i + 1) == len(entries):
            logger.info(f"Processed {i + 1}/{len(entries)} entries")

    # 4. Aggregate output
    return MatchRunOutput(
        run_metadata=RunMetadata(
            method=matcher.method_type,
            input_file=config.input,
            total_entries=len(outputs),
            matched_entries=sum(
                1 for o in outputs if any(r.has_matches for r in o.results)
            ),
            failed_entries=failed,
            summary=merge_summaries(summarize(o.results) for o in outputs),
            parameters=matcher_parameters(config),
        ),
        entries=outputs,
    )
