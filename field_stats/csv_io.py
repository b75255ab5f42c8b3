"""CSV input/output utilities for Field Book observation exports."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from field_stats.models import ObservationRecord, SeasonSummary

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: tuple[str, ...] = ("observation_unit_id", "observation_time_stamp")
# Exports saved by spreadsheet tools often start with a BOM.
CSV_ENCODING = "utf-8-sig"


@dataclass(frozen=True, slots=True)
class CsvSummary:
    """Quick summary of CSV parsing."""

    rows_total: int
    rows_parsed: int
    rows_skipped: int
    fieldnames: Sequence[str]


@dataclass(frozen=True, slots=True)
class CsvRow:
    """A parsed export row plus its optional season column."""

    record: ObservationRecord
    season: str | None


def _optional(row: dict[str, str], key: str) -> str | None:
    value = row.get(key)
    if value is None or value == "":
        return None
    return value


def _check_columns(fieldnames: Sequence[str] | None) -> None:
    missing = [c for c in REQUIRED_COLUMNS if c not in (fieldnames or ())]
    if missing:
        raise KeyError(f"CSV缺少必要字段：{missing}. 实际字段：{list(fieldnames or ())}")


def _row_to_csv_row(row: dict[str, str]) -> CsvRow | None:
    unit = (row.get("observation_unit_id") or "").strip()
    if not unit:
        return None
    record = ObservationRecord(
        collector=row.get("collector"),
        # Timestamps stay as text; a bad one fails when its season is summarized.
        time_stamp=row.get("observation_time_stamp") or "",
        variable_format=_optional(row, "observation_variable_field_book_format"),
        observation_unit_id=unit,
        variable_name=_optional(row, "observation_variable_name"),
        study_id=_optional(row, "study_id"),
    )
    season = (row.get("season") or "").strip() or None
    return CsvRow(record=record, season=season)


def iter_observation_records(csv_path: str | Path) -> Iterator[ObservationRecord]:
    """Yield ObservationRecord objects from an observation export.

    Args:
        csv_path: Path to the exported CSV.

    Yields:
        Records for every row that has an observation unit.

    Raises:
        KeyError: If a required column is missing.
    """

    p = Path(csv_path)
    with p.open("r", encoding=CSV_ENCODING, newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            return
        _check_columns(reader.fieldnames)
        for row in reader:
            item = _row_to_csv_row(row)
            if item is None:
                continue
            yield item.record


def load_observation_rows(csv_path: str | Path) -> tuple[list[CsvRow], CsvSummary]:
    """Load all rows into memory.

    Args:
        csv_path: Path to the exported CSV.

    Returns:
        (rows, summary)
    """

    p = Path(csv_path)
    rows_total = 0
    parsed: list[CsvRow] = []
    fieldnames: Sequence[str] = ()

    with p.open("r", encoding=CSV_ENCODING, newline="") as f:
        reader = csv.DictReader(f)
        fieldnames = reader.fieldnames or ()
        if reader.fieldnames is not None:
            _check_columns(fieldnames)
        for row in reader:
            rows_total += 1
            item = _row_to_csv_row(row)
            if item is not None:
                parsed.append(item)

    summary = CsvSummary(
        rows_total=rows_total,
        rows_parsed=len(parsed),
        rows_skipped=rows_total - len(parsed),
        fieldnames=fieldnames,
    )
    if summary.rows_skipped > 0:
        logger.warning("CSV中有 %s 行缺少 observation_unit_id 已跳过", summary.rows_skipped)
    return parsed, summary


def load_observation_records(csv_path: str | Path) -> tuple[list[ObservationRecord], CsvSummary]:
    """Load all records into memory, dropping the season column."""

    rows, summary = load_observation_rows(csv_path)
    return [r.record for r in rows], summary


SUMMARY_FIELDNAMES: tuple[str, ...] = (
    "season",
    "fields",
    "plots",
    "observations",
    "active_duration",
    "active_seconds",
    "collectors",
    "image_observations",
    "busiest_day",
    "busiest_day_observations",
    "busiest_unit",
    "busiest_unit_observations",
)


def write_summaries_csv(summaries: Iterable[SeasonSummary], out_path: str | Path) -> None:
    """Write one row per season."""

    p = Path(out_path)
    with p.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=list(SUMMARY_FIELDNAMES))
        w.writeheader()
        for s in summaries:
            w.writerow(
                {
                    "season": s.season,
                    "fields": s.field_count,
                    "plots": s.plot_count,
                    "observations": s.observation_count,
                    "active_duration": s.active_duration,
                    "active_seconds": s.active_seconds,
                    "collectors": s.collector_count,
                    "image_observations": s.image_observation_count,
                    "busiest_day": s.busiest_day or "",
                    "busiest_day_observations": s.busiest_day_count,
                    "busiest_unit": s.busiest_unit or "",
                    "busiest_unit_observations": s.busiest_unit_count,
                }
            )
