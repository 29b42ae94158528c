"""Load batch entries from CSV into Pydantic models."""
import logging
from typing import Optional

import pandas as pd

from src.codigo_match.config import DEFAULT_ID_COLUMN, DEFAULT_TEXT_COLUMN
from src.codigo_match.models.schemas import EntryInput

logger = logging.getLogger(__name__)


def load_entries(
    csv_path: str,
    text_column: str = DEFAULT_TEXT_COLUMN,
    id_column: str = DEFAULT_ID_COLUMN,
    limit: Optional[int] = None,
) -> list[EntryInput]:
    """
    Load free-text code entries from a CSV file.

    Each row's `text_column` holds pasted codes. `id_column` is optional;
    rows fall back to their 1-based row number when it is absent or empty.
    Rows with an empty text cell are kept: they classify to empty buckets.
    """
    df = pd.read_csv(csv_path, nrows=limit, dtype=str, keep_default_na=False)
    logger.info(f"Loaded {len(df)} rows from {csv_path}")

    if text_column not in df.columns:
        raise ValueError(
            f"Input CSV '{csv_path}' is missing required column '{text_column}'. "
            f"Found columns: {', '.join(df.columns)}. "
            f"Use --text-column to pick the column holding the codes."
        )

    has_ids = id_column in df.columns
    if not has_ids:
        logger.warning(f"No '{id_column}' column in {csv_path}, using row numbers")

    entries = []
    for i, (_, row) in enumerate(df.iterrows(), start=1):
        entry_id = str(row[id_column]).strip() if has_ids else ""
        entries.append(EntryInput(
            entry_id=entry_id or str(i),
            text=str(row[text_column]),
        ))

    return entries
