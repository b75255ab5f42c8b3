"""Season statistics: aggregation engine and report assembly."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Iterable, Mapping, Sequence

from field_stats.models import MAX_ACTIVE_GAP_SECONDS, ObservationRecord, SeasonSummary, SummaryParams
from field_stats.timeutils import TimestampParseError, day_label, format_hhmmss, parse_time_stamp

if TYPE_CHECKING:
    from field_stats.repository import ObservationRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SeasonAggregates:
    """Values derived from one season's records."""

    collector_count: int
    image_observation_count: int
    active_seconds: int
    busiest_day: str | None
    busiest_day_count: int
    busiest_unit: str | None
    busiest_unit_count: int

    @property
    def active_duration(self) -> str:
        return format_hhmmss(self.active_seconds)


def active_seconds(
    instants: Sequence[datetime],
    max_gap_seconds: float = MAX_ACTIVE_GAP_SECONDS,
    ignore_negative_gaps: bool = False,
) -> int:
    """Sum the gaps between consecutive instants that look like continuous work.

    Args:
        instants: Parsed timestamps in record order (not re-sorted).
        max_gap_seconds: Gaps longer than this are breaks and add nothing.
        ignore_negative_gaps: Also drop gaps where time goes backwards.

    Returns:
        Total whole seconds. Each gap is truncated toward zero before summing, so
        with out-of-order input and ignore_negative_gaps=False the total can be
        negative.
    """

    window = timedelta(seconds=max_gap_seconds)
    total = 0
    for i in range(1, len(instants)):
        delta = instants[i] - instants[i - 1]
        if delta > window:
            continue
        if ignore_negative_gaps and delta < timedelta(0):
            continue
        total += int(delta.total_seconds())
    return total


def busiest(counts: Mapping[str, int]) -> tuple[str | None, int]:
    """Pick the key with the highest count.

    Iterates in mapping order and only replaces on a strictly greater count, so
    with an insertion-ordered dict the first key seen wins ties.

    Returns:
        (key, count), or (None, 0) for an empty mapping.
    """

    best_key: str | None = None
    best_count = 0
    for key, count in counts.items():
        if count > best_count:
            best_key = key
            best_count = count
    return best_key, best_count


def aggregate_observations(
    records: Sequence[ObservationRecord],
    params: SummaryParams | None = None,
) -> SeasonAggregates:
    """Derive collector, photo, busiest day/unit and active time statistics.

    Args:
        records: One season's records, in repository order.
        params: Aggregation parameters; defaults to SummaryParams().

    Returns:
        SeasonAggregates.

    Raises:
        TimestampParseError: If any record's timestamp cannot be parsed. Nothing
            is returned for the season in that case.
    """

    params = params or SummaryParams()

    collectors: set[str] = set()
    instants: list[datetime] = []
    day_counts: dict[str, int] = {}
    unit_counts: dict[str, int] = {}
    image_count = 0

    for index, rec in enumerate(records):
        if rec.collector is not None and rec.collector.strip():
            collectors.add(rec.collector)

        try:
            instant = parse_time_stamp(rec.time_stamp)
        except TimestampParseError as exc:
            raise TimestampParseError(rec.time_stamp, index=index) from exc
        instants.append(instant)

        if rec.variable_format == params.photo_format:
            image_count += 1

        day = day_label(instant, params.tz_name)
        day_counts[day] = day_counts.get(day, 0) + 1
        unit_counts[rec.observation_unit_id] = unit_counts.get(rec.observation_unit_id, 0) + 1

    total_s = active_seconds(
        instants,
        max_gap_seconds=params.max_active_gap_seconds,
        ignore_negative_gaps=params.ignore_negative_gaps,
    )
    day, day_n = busiest(day_counts)
    unit, unit_n = busiest(unit_counts)
    logger.debug(
        "aggregated records=%s days=%s units=%s active_seconds=%s", len(records), len(day_counts), len(unit_counts), total_s
    )
    return SeasonAggregates(
        collector_count=len(collectors),
        image_observation_count=image_count,
        active_seconds=total_s,
        busiest_day=day,
        busiest_day_count=day_n,
        busiest_unit=unit,
        busiest_unit_count=unit_n,
    )


def compute_season_summary(
    season: str,
    field_count: int,
    plot_count: int,
    records: Sequence[ObservationRecord],
    params: SummaryParams | None = None,
) -> SeasonSummary:
    """Build the summary card for one season.

    Args:
        season: Season label shown on the card.
        field_count: Total known fields (not season specific).
        plot_count: Total known plots (not season specific).
        records: The season's observation records.
        params: Aggregation parameters.

    Returns:
        SeasonSummary.

    Raises:
        TimestampParseError: If any timestamp is malformed.
    """

    agg = aggregate_observations(records, params)
    return SeasonSummary(
        season=season,
        field_count=field_count,
        plot_count=plot_count,
        observation_count=len(records),
        active_duration=agg.active_duration,
        active_seconds=agg.active_seconds,
        collector_count=agg.collector_count,
        image_observation_count=agg.image_observation_count,
        busiest_day=agg.busiest_day,
        busiest_day_count=agg.busiest_day_count,
        busiest_unit=agg.busiest_unit,
        busiest_unit_count=agg.busiest_unit_count,
    )


def summarize_season(
    repository: ObservationRepository,
    season: str,
    params: SummaryParams | None = None,
) -> SeasonSummary:
    """Fetch one season from the repository and summarize it."""

    records = list(repository.observations_for_season(season))
    summary = compute_season_summary(
        season,
        repository.field_count(),
        repository.plot_count(),
        records,
        params,
    )
    logger.info("季节 %s：observations=%s, active=%s", season, summary.observation_count, summary.active_duration)
    return summary


def summarize_seasons(
    repository: ObservationRepository,
    seasons: Iterable[str] | None = None,
    params: SummaryParams | None = None,
    workers: int = 1,
) -> list[SeasonSummary]:
    """Summarize several seasons, keeping the order of `seasons`.

    Args:
        repository: Source of records and counts.
        seasons: Season labels; defaults to repository.seasons().
        params: Aggregation parameters shared by all seasons (read-only).
        workers: >1 runs seasons on a thread pool. Each season still gets its own
            snapshot and accumulation state.

    Raises:
        TimestampParseError: The first failing season aborts the whole call.
    """

    labels = list(repository.seasons() if seasons is None else seasons)
    if workers <= 1 or len(labels) <= 1:
        return [summarize_season(repository, s, params) for s in labels]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(lambda s: summarize_season(repository, s, params), labels))


def trait_counts(records: Iterable[ObservationRecord]) -> dict[str, int]:
    """Count observations per trait, most observed first.

    Records without a variable name are skipped. Ties keep first-seen order.
    """

    counts: dict[str, int] = {}
    for rec in records:
        if not rec.variable_name:
            continue
        counts[rec.variable_name] = counts.get(rec.variable_name, 0) + 1
    return dict(sorted(counts.items(), key=lambda kv: kv[1], reverse=True))
