"""Tests for CSV loading, the batch pipeline and single-text runs."""
import json
import sys

import httpx
import pandas as pd
import pytest
from conftest import UnmatchedMatcher

import run_matcher

from src.codigo_match.config import MatchConfig
from src.codigo_match.io.loaders import load_entries
from src.codigo_match.io.writers import write_records
from src.codigo_match.matching.http_service import HttpMatcher
from src.codigo_match.models.schemas import MatcherMethodType, NotificationVariant
from src.codigo_match.pipeline import build_matcher, run_pipeline, run_text


@pytest.fixture
def entries_csv(tmp_path):
    path = tmp_path / "entries.csv"
    pd.DataFrame({
        "entry_id": ["claim-1", "claim-2", "claim-3"],
        "codes": ["M79.3, R51.9; 99213\n99213", "XYZ 0010", "a01.23b 00100"],
    }).to_csv(path, index=False)
    return path


class TestLoadEntries:

    def test_loads_ids_and_text(self, entries_csv):
        entries = load_entries(str(entries_csv))
        assert [e.entry_id for e in entries] == ["claim-1", "claim-2", "claim-3"]
        assert entries[0].text == "M79.3, R51.9; 99213\n99213"

    def test_leading_zeros_preserved(self, tmp_path):
        path = tmp_path / "zeros.csv"
        path.write_text("codes\n00100\n", encoding="utf-8")
        assert load_entries(str(path))[0].text == "00100"

    def test_row_numbers_without_id_column(self, tmp_path):
        path = tmp_path / "no_ids.csv"
        path.write_text("codes\nM79.3\n\n99213\n", encoding="utf-8")
        entries = load_entries(str(path))
        assert [e.entry_id for e in entries] == ["1", "2"]

    def test_limit(self, entries_csv):
        assert len(load_entries(str(entries_csv), limit=2)) == 2

    def test_missing_text_column(self, entries_csv):
        with pytest.raises(ValueError, match="missing required column 'diagnoses'"):
            load_entries(str(entries_csv), text_column="diagnoses")


class TestRunPipeline:

    def test_matches_only_matchable_entries(self, entries_csv, echo_matcher):
        output = run_pipeline(MatchConfig(input=str(entries_csv)), matcher=echo_matcher)

        assert echo_matcher.calls == [
            (["M79.3", "R51.9"], ["99213"]),
            (["A01.23B"], ["00100"]),
        ]
        by_id = {e.entry_id: e for e in output.entries}
        assert by_id["claim-2"].codes.invalid == ["XYZ", "0010"]
        assert by_id["claim-2"].results == []
        assert output.run_metadata.total_entries == 3
        assert output.run_metadata.matched_entries == 2
        assert output.run_metadata.summary.total == 2

    def test_failures_recorded_per_entry(self, entries_csv, failing_matcher):
        output = run_pipeline(MatchConfig(input=str(entries_csv)), matcher=failing_matcher)

        assert output.run_metadata.failed_entries == 2
        assert output.entries[0].error == "service down"
        assert output.entries[1].error is None

    def test_writes_json(self, entries_csv, tmp_path):
        out_path = tmp_path / "matches.json"
        config = MatchConfig(input=str(entries_csv), output=str(out_path), delay=0, seed=3)
        run_pipeline(config)

        data = json.loads(out_path.read_text(encoding="utf-8"))
        assert data["run_metadata"]["method"] == "mock"
        assert data["run_metadata"]["parameters"] == {"delay_seconds": 0, "seed": 3}
        assert [e["entry_id"] for e in data["entries"]] == ["claim-1", "claim-2", "claim-3"]
        assert data["entries"][0]["results"][0]["cpt_code"] == "99213"

    def test_requires_input(self):
        with pytest.raises(ValueError):
            run_pipeline(MatchConfig(text="M79.3"))


class TestRunText:

    def test_build_matcher_from_config(self):
        matcher = build_matcher(MatchConfig(text="x", delay=0))
        assert matcher.method_type == MatcherMethodType.MOCK

    def test_matchable_text(self, notifications):
        records = run_text(MatchConfig(text="M79.3 99213 99214", delay=0, seed=1), notifier=notifications.append)
        assert [r.cpt_code for r in records] == ["99213", "99214"]
        assert notifications[0].variant == NotificationVariant.SUCCESS

    def test_missing_codes(self, notifications):
        records = run_text(MatchConfig(text="99213", delay=0), notifier=notifications.append)
        assert records == []
        assert notifications[0].title == "Missing codes"


# ============================================================================
# Matcher Lifetime Tests
# ============================================================================


def _unmatched_service(request):
    body = json.loads(request.content)
    return httpx.Response(200, json=[
        {"cptCode": cpt, "cptDescription": "Office visit", "hasMatches": False}
        for cpt in body["cpt_codes"]
    ])


@pytest.fixture
def http_clients(monkeypatch):
    """Routes every httpx.Client to a fake matching service and records it."""
    clients = []

    class RecordingClient(httpx.Client):
        def __init__(self, **kwargs):
            kwargs["transport"] = httpx.MockTransport(_unmatched_service)
            super().__init__(**kwargs)
            clients.append(self)

    monkeypatch.setattr(httpx, "Client", RecordingClient)
    return clients


class TestMatcherLifetime:

    def test_pipeline_closes_built_matcher(self, entries_csv, http_clients):
        config = MatchConfig(
            input=str(entries_csv),
            method="http",
            endpoint="http://matcher.test/match",
        )
        output = run_pipeline(config)

        assert output.run_metadata.method == MatcherMethodType.HTTP
        assert output.run_metadata.summary.total == 2
        assert len(http_clients) == 1
        assert http_clients[0].is_closed

    def test_run_text_closes_built_matcher(self, http_clients, notifications):
        config = MatchConfig(
            text="M79.3 99213",
            method="http",
            endpoint="http://matcher.test/match",
        )
        records = run_text(config, notifier=notifications.append)

        assert [r.cpt_code for r in records] == ["99213"]
        assert http_clients[0].is_closed

    def test_pipeline_leaves_given_matcher_open(self, entries_csv):
        matcher = HttpMatcher(
            endpoint="http://matcher.test/match",
            transport=httpx.MockTransport(_unmatched_service),
        )
        run_pipeline(MatchConfig(input=str(entries_csv), method="http"), matcher=matcher)

        assert not matcher._client.is_closed
        matcher.close()
        assert matcher._client.is_closed

    def test_matcher_context_manager(self, mock_matcher):
        with mock_matcher as matcher:
            assert matcher is mock_matcher


# ============================================================================
# Output Tests
# ============================================================================


class TestOutputs:

    def test_matched_entries_counts_real_matches(self, entries_csv):
        output = run_pipeline(MatchConfig(input=str(entries_csv)), matcher=UnmatchedMatcher())

        assert output.run_metadata.matched_entries == 0
        assert output.run_metadata.summary.need_attention == 2
        assert all(not r.has_matches for e in output.entries for r in e.results)

    def test_write_records(self, echo_matcher, tmp_path):
        path = tmp_path / "records.json"
        write_records(echo_matcher.match(["M79.3"], ["99213"]), str(path))

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data[0]["cpt_code"] == "99213"
        assert data[0]["matched_icd_codes"][0]["code"] == "M79.3"

    def test_cli_text_mode_writes_output(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "records.json"
        monkeypatch.setattr(sys, "argv", [
            "run_matcher.py", "--text", "M79.3 99213 99214",
            "--delay", "0", "--seed", "5", "--output", str(path),
        ])
        run_matcher.main()

        data = json.loads(path.read_text(encoding="utf-8"))
        assert [r["cpt_code"] for r in data] == ["99213", "99214"]
        assert capsys.readouterr().out == ""
