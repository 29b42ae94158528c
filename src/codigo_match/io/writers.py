"""Serialize match output to JSON."""
import logging
from pathlib import Path

from pydantic import TypeAdapter

from src.codigo_match.models.schemas import MatchRecord, MatchRunOutput

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[MatchRecord])


def write_output(output: MatchRunOutput, path: str) -> None:
    """Serialize the full batch output to JSON with ISO datetime formatting."""
    json_str = output.model_dump_json(indent=2)
    Path(path).write_text(json_str, encoding="utf-8")
    logger.info(f"Wrote {len(output.entries)} entries to {path}")


def records_to_json(records: list[MatchRecord]) -> str:
    """Render the match records of a single interactive run."""
    return _RECORDS.dump_json(records, indent=2).decode("utf-8")


def write_records(records: list[MatchRecord], path: str) -> None:
    """Write the match records of a single interactive run to a JSON file."""
    Path(path).write_text(records_to_json(records), encoding="utf-8")
    logger.info(f"Wrote {len(records)} match records to {path}")
