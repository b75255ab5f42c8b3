"""Observation repositories: where season records and field/plot counts come from."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Final, Iterable, Protocol, Sequence

from field_stats.csv_io import CsvSummary, load_observation_rows
from field_stats.models import ObservationRecord

UNKNOWN_SEASON: Final[str] = "unknown"


class ObservationRepository(Protocol):
    """Read-only source of observation records."""

    def field_count(self) -> int: ...

    def plot_count(self) -> int: ...

    def observations_for_season(self, season: str) -> Sequence[ObservationRecord]: ...

    def seasons(self) -> list[str]: ...


def season_from_time_stamp(record: ObservationRecord) -> str:
    """Season label of a record: the four-digit year its timestamp starts with."""

    year = record.time_stamp[:4]
    return year if len(year) == 4 and year.isdigit() else UNKNOWN_SEASON


class InMemoryObservationRepository:
    """Repository over records already loaded into memory.

    Args:
        pairs: (season, record) pairs in storage order.
        field_count: Total known fields. Defaults to distinct study ids.
        plot_count: Total known plots. Defaults to distinct observation units.
    """

    def __init__(
        self,
        pairs: Iterable[tuple[str, ObservationRecord]],
        field_count: int | None = None,
        plot_count: int | None = None,
    ) -> None:
        self._by_season: dict[str, list[ObservationRecord]] = {}
        studies: set[str] = set()
        units: set[str] = set()
        for season, rec in pairs:
            self._by_season.setdefault(season, []).append(rec)
            if rec.study_id:
                studies.add(rec.study_id)
            units.add(rec.observation_unit_id)
        self._field_count = len(studies) if field_count is None else field_count
        self._plot_count = len(units) if plot_count is None else plot_count

    @classmethod
    def from_records(
        cls,
        records: Iterable[ObservationRecord],
        season_of: Callable[[ObservationRecord], str] = season_from_time_stamp,
        field_count: int | None = None,
        plot_count: int | None = None,
    ) -> InMemoryObservationRepository:
        return cls(((season_of(r), r) for r in records), field_count=field_count, plot_count=plot_count)

    def field_count(self) -> int:
        return self._field_count

    def plot_count(self) -> int:
        return self._plot_count

    def observations_for_season(self, season: str) -> Sequence[ObservationRecord]:
        # Copy so callers never share the stored list.
        return tuple(self._by_season.get(season, ()))

    def seasons(self) -> list[str]:
        """Known seasons, newest first; the unknown bucket (bad timestamps) last."""

        labels = sorted((s for s in self._by_season if s != UNKNOWN_SEASON), reverse=True)
        if UNKNOWN_SEASON in self._by_season:
            labels.append(UNKNOWN_SEASON)
        return labels


class CsvObservationRepository(InMemoryObservationRepository):
    """Repository backed by a Field Book observation export (CSV).

    A non-empty `season` column overrides the year taken from the timestamp.
    """

    csv_summary: CsvSummary

    @classmethod
    def from_csv(
        cls,
        csv_path: str | Path,
        field_count: int | None = None,
        plot_count: int | None = None,
    ) -> CsvObservationRepository:
        rows, summary = load_observation_rows(csv_path)
        repo = cls(
            ((row.season or season_from_time_stamp(row.record), row.record) for row in rows),
            field_count=field_count,
            plot_count=plot_count,
        )
        repo.csv_summary = summary
        return repo
