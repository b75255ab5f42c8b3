"""Tests for CSV loading and summary export."""

import csv
import logging
from pathlib import Path

import pytest

from field_stats.csv_io import (
    SUMMARY_FIELDNAMES,
    iter_observation_records,
    load_observation_records,
    load_observation_rows,
    write_summaries_csv,
)
from field_stats.models import SeasonSummary

_HEADER = (
    "study_id,observation_unit_id,observation_variable_name,"
    "observation_variable_field_book_format,value,observation_time_stamp,collector\n"
)


def _write(tmp_path: Path, body: str, header: str = _HEADER) -> Path:
    p = tmp_path / "observations.csv"
    p.write_text(header + body, encoding="utf-8")
    return p


class TestLoadObservationRecords:
    def test_parses_columns(self, tmp_path: Path) -> None:
        p = _write(tmp_path, "1,1-plot-001,height,numeric,12.5,2024-06-01 09:30:15.250-05:00,alice\n")
        records, summary = load_observation_records(p)
        assert summary.rows_total == 1
        assert summary.rows_skipped == 0
        rec = records[0]
        assert rec.observation_unit_id == "1-plot-001"
        assert rec.time_stamp == "2024-06-01 09:30:15.250-05:00"
        assert rec.variable_format == "numeric"
        assert rec.variable_name == "height"
        assert rec.study_id == "1"
        assert rec.collector == "alice"

    def test_empty_optionals_become_none(self, tmp_path: Path) -> None:
        p = _write(tmp_path, ",p1,,,,2024-06-01 09:30:15.250-05:00,\n")
        records, _ = load_observation_records(p)
        assert records[0].variable_format is None
        assert records[0].variable_name is None
        assert records[0].study_id is None
        assert records[0].collector == ""

    def test_bad_timestamp_is_kept_as_text(self, tmp_path: Path) -> None:
        p = _write(tmp_path, "1,p1,height,numeric,1,yesterday,alice\n")
        records, summary = load_observation_records(p)
        assert summary.rows_parsed == 1
        assert records[0].time_stamp == "yesterday"

    def test_rows_without_unit_are_skipped(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        p = _write(
            tmp_path,
            "1,p1,height,numeric,1,2024-06-01 09:30:15.250-05:00,alice\n"
            "1,,height,numeric,1,2024-06-01 09:31:15.250-05:00,alice\n",
        )
        with caplog.at_level(logging.WARNING, logger="field_stats.csv_io"):
            records, summary = load_observation_records(p)
        assert len(records) == 1
        assert summary.rows_skipped == 1
        assert "observation_unit_id" in caplog.text

    def test_missing_required_column(self, tmp_path: Path) -> None:
        p = _write(tmp_path, "p1,alice\n", header="observation_unit_id,collector\n")
        with pytest.raises(KeyError):
            load_observation_records(p)

    def test_empty_file(self, tmp_path: Path) -> None:
        p = tmp_path / "empty.csv"
        p.write_text("", encoding="utf-8")
        records, summary = load_observation_records(p)
        assert records == []
        assert summary.rows_total == 0

    def test_season_column(self, tmp_path: Path) -> None:
        p = _write(
            tmp_path,
            "p1,2024-06-01 09:30:15.250-05:00, Spring \n",
            header="observation_unit_id,observation_time_stamp,season\n",
        )
        rows, _ = load_observation_rows(p)
        assert rows[0].season == "Spring"

    def test_header_with_bom(self, tmp_path: Path) -> None:
        p = tmp_path / "bom.csv"
        p.write_text(_HEADER + "1,p1,height,numeric,1,2024-06-01 09:30:15.250-05:00,alice\n", encoding="utf-8-sig")
        records, summary = load_observation_records(p)
        assert summary.fieldnames[1] == "observation_unit_id"
        assert summary.fieldnames[0] == "study_id"
        assert records[0].study_id == "1"


class TestIterObservationRecords:
    def test_yields_records_and_skips_rows_without_unit(self, tmp_path: Path) -> None:
        p = _write(
            tmp_path,
            "1,p1,height,numeric,1,2024-06-01 09:30:15.250-05:00,alice\n"
            "1,,height,numeric,1,2024-06-01 09:31:15.250-05:00,alice\n"
            "2,p2,canopy,photo,x.jpg,bad,bob\n",
        )
        records = list(iter_observation_records(p))
        assert [r.observation_unit_id for r in records] == ["p1", "p2"]
        assert records[1].time_stamp == "bad"
        assert records[1].variable_format == "photo"

    def test_missing_required_column(self, tmp_path: Path) -> None:
        p = _write(tmp_path, "p1,alice\n", header="observation_unit_id,collector\n")
        with pytest.raises(KeyError):
            list(iter_observation_records(p))

    def test_empty_file(self, tmp_path: Path) -> None:
        p = tmp_path / "empty.csv"
        p.write_text("", encoding="utf-8")
        assert list(iter_observation_records(p)) == []

    def test_header_with_bom(self, tmp_path: Path) -> None:
        p = tmp_path / "bom.csv"
        p.write_text("observation_unit_id,observation_time_stamp\np1,2024-06-01 09:30:15.250-05:00\n", encoding="utf-8-sig")
        assert [r.observation_unit_id for r in iter_observation_records(p)] == ["p1"]


class TestWriteSummariesCsv:
    def test_writes_one_row_per_season(self, tmp_path: Path) -> None:
        summaries = [
            SeasonSummary(
                season="2024",
                field_count=2,
                plot_count=40,
                observation_count=3,
                active_duration="00:12:00",
                active_seconds=720,
                collector_count=2,
                image_observation_count=1,
                busiest_day="06-01-2024",
                busiest_day_count=3,
                busiest_unit="p1",
                busiest_unit_count=2,
            ),
            SeasonSummary(
                season="2023",
                field_count=2,
                plot_count=40,
                observation_count=0,
                active_duration="00:00:00",
                active_seconds=0,
                collector_count=0,
                image_observation_count=0,
                busiest_day=None,
                busiest_day_count=0,
                busiest_unit=None,
                busiest_unit_count=0,
            ),
        ]
        out = tmp_path / "summaries.csv"
        write_summaries_csv(summaries, out)

        with out.open("r", encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            assert tuple(reader.fieldnames or ()) == SUMMARY_FIELDNAMES
            rows = list(reader)
        assert [r["season"] for r in rows] == ["2024", "2023"]
        assert rows[0]["active_duration"] == "00:12:00"
        assert rows[0]["busiest_unit"] == "p1"
        assert rows[1]["busiest_day"] == ""
