from __future__ import annotations

import argparse
import csv
import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Final

from zoneinfo import ZoneInfo

from field_stats.csv_io import REQUIRED_COLUMNS
from field_stats.timeutils import format_time_stamp

TZ: Final[str] = "America/Chicago"


@dataclass(frozen=True, slots=True)
class Trait:
    name: str
    field_book_format: str


def generate_observations(
    *,
    rows: int,
    seed: int,
    start_local: datetime,
    traits: list[Trait],
    collectors: list[str],
    studies: int,
    plots_per_study: int,
) -> list[dict[str, str]]:
    """Generate fake observation export rows: sessions of plot-by-plot scoring."""

    rng = random.Random(seed)
    cur = start_local.replace(tzinfo=ZoneInfo(TZ))

    out: list[dict[str, str]] = []
    collector = rng.choice(collectors)

    for _ in range(rows):
        # Time step: usually 10s-5min between plots, sometimes a break or a new day
        r = rng.random()
        if r < 0.02:
            cur = cur + timedelta(days=rng.randint(1, 20))
            collector = rng.choice(collectors)
        elif r < 0.08:
            cur = cur + timedelta(minutes=rng.uniform(31, 180))
        else:
            cur = cur + timedelta(seconds=rng.uniform(10, 300))

        study = rng.randint(1, studies)
        plot = rng.randint(1, plots_per_study)
        trait = rng.choice(traits)
        out.append(
            {
                "study_id": str(study),
                "observation_unit_id": f"{study}-plot-{plot:03d}",
                "observation_variable_name": trait.name,
                "observation_variable_field_book_format": trait.field_book_format,
                "value": f"IMG_{rng.randint(1000, 9999)}.jpg" if trait.field_book_format == "photo" else f"{rng.uniform(0, 100):.1f}",
                "observation_time_stamp": format_time_stamp(cur),
                # Some records are written without a collector
                "collector": collector if rng.random() > 0.05 else "",
            }
        )

    return out


def main() -> int:
    p = argparse.ArgumentParser(description="Generate a fake Field Book observation export for demo/testing.")
    p.add_argument("--out", type=str, default="sample_data/observations.csv", help="Output CSV path")
    p.add_argument("--rows", type=int, default=2000, help="Number of rows")
    p.add_argument("--seed", type=int, default=42, help="Random seed (reproducible)")
    p.add_argument(
        "--start",
        type=str,
        default="2023-05-01 08:00:00",
        help="Start local time in America/Chicago, e.g. '2023-05-01 08:00:00'",
    )
    args = p.parse_args()

    rows = generate_observations(
        rows=args.rows,
        seed=args.seed,
        start_local=datetime.fromisoformat(args.start),
        traits=[
            Trait("height", "numeric"),
            Trait("disease_rating", "categorical"),
            Trait("flowering", "date"),
            Trait("canopy_photo", "photo"),
        ],
        collectors=["alice", "bob", "chen", "dana"],
        studies=3,
        plots_per_study=40,
    )
    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = [
        "study_id",
        *REQUIRED_COLUMNS,
        "observation_variable_name",
        "observation_variable_field_book_format",
        "value",
        "collector",
    ]
    with out_path.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        w.writerows(rows)

    print(f"Generated: {out_path} (rows={len(rows)}, seed={args.seed})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
