"""
Codigo Medical Code Matcher — CLI Entrypoint.

Usage:
    python run_matcher.py --text "M79.3, R51.9; 99213 99214"
    python run_matcher.py --input entries.csv --output matches.json
    python run_matcher.py --input entries.csv --method http --endpoint http://localhost:8000/match
"""
import argparse
import logging
import sys


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Codigo Medical Code Matcher — classify ICD-10/CPT codes and pair them",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--text",
        help="Codes separated by spaces, commas, semicolons or new lines",
    )
    source.add_argument(
        "--input",
        help="Path to a CSV of entries to process in batch",
    )
    parser.add_argument(
        "--output", default=None,
        help="Output JSON path (default: print records in --text mode, no file in batch mode)",
    )
    parser.add_argument(
        "--method", default="mock",
        choices=["mock", "http"],
        help="Matcher to use (default: mock)",
    )
    parser.add_argument(
        "--endpoint", default=None,
        help="Matching service URL for --method http (default: $CODIGO_MATCHER_URL)",
    )
    parser.add_argument(
        "--timeout", type=float, default=30.0,
        help="HTTP timeout in seconds (default: 30)",
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed for the mock matcher",
    )
    parser.add_argument(
        "--delay", type=float, default=1.5,
        help="Simulated latency of the mock matcher in seconds (default: 1.5)",
    )
    parser.add_argument(
        "--text-column", default="codes",
        help="CSV column holding the codes (default: codes)",
    )
    parser.add_argument(
        "--id-column", default="entry_id",
        help="CSV column holding entry ids (default: entry_id)",
    )
    parser.add_argument(
        "--limit", type=int, default=None,
        help="Process only the first N entries (for testing)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        from src.codigo_match.config import MatchConfig
        from src.codigo_match.io.writers import records_to_json, write_records
        from src.codigo_match.pipeline import run_pipeline, run_text

        config = MatchConfig(
            text=args.text,
            input=args.input,
            output=args.output,
            method=args.method,
            endpoint=args.endpoint,
            timeout=args.timeout,
            seed=args.seed,
            delay=args.delay,
            text_column=args.text_column,
            id_column=args.id_column,
            limit=args.limit,
        )
        if config.text is not None:
            records = run_text(config)
            if config.output:
                write_records(records, config.output)
            else:
                print(records_to_json(records))
        else:
            run_pipeline(config)
    except Exception as e:
        logging.getLogger(__name__).error(f"Matcher run failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
