"""Data models for observation records and season summaries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True, slots=True)
class ObservationRecord:
    """A single field observation.

    Attributes:
        collector: Person who recorded the value. May be None or blank.
        time_stamp: Text timestamp, "yyyy-MM-dd HH:mm:ss.SSS+HH:MM".
        variable_format: Value type tag of the trait ("photo", "numeric", ...).
        observation_unit_id: Plot/unit the observation belongs to.
        variable_name: Trait name, if the export carries it.
        study_id: Field (study) id, if the export carries it.
    """

    collector: str | None
    time_stamp: str
    variable_format: str | None
    observation_unit_id: str
    variable_name: str | None = None
    study_id: str | None = None


@dataclass(frozen=True, slots=True)
class SeasonSummary:
    """Statistics card for one season.

    Note:
        field_count and plot_count are not season specific; they are passed in by
        the caller and copied as-is.
    """

    season: str
    field_count: int
    plot_count: int
    observation_count: int
    active_duration: str
    active_seconds: int
    collector_count: int
    image_observation_count: int
    busiest_day: str | None
    busiest_day_count: int
    busiest_unit: str | None
    busiest_unit_count: int


PHOTO_FORMAT: Final[str] = "photo"
MAX_ACTIVE_GAP_SECONDS: Final[float] = 30 * 60.0
# None means "use the local zone of this machine".
DEFAULT_TZ: Final[str | None] = None


@dataclass(frozen=True, slots=True)
class SummaryParams:
    """Parameters controlling season aggregation."""

    tz_name: str | None = DEFAULT_TZ
    # Consecutive observations closer than this are counted as continuous work.
    max_active_gap_seconds: float = MAX_ACTIVE_GAP_SECONDS
    photo_format: str = PHOTO_FORMAT
    # Out-of-order timestamps give negative gaps. By default they are summed like
    # any other gap below the window; set this to drop them instead.
    ignore_negative_gaps: bool = False
