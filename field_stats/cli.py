"""Command-line interface for field_stats.

Run:
    python -m field_stats summary --csv observations.csv --season 2024
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict

from field_stats.csv_io import write_summaries_csv
from field_stats.models import DEFAULT_TZ, MAX_ACTIVE_GAP_SECONDS, SeasonSummary, SummaryParams
from field_stats.repository import CsvObservationRepository
from field_stats.stats import summarize_season, summarize_seasons, trait_counts


def _params_from_args(args: argparse.Namespace) -> SummaryParams:
    return SummaryParams(
        tz_name=args.tz,
        max_active_gap_seconds=float(args.max_gap_minutes) * 60.0,
        ignore_negative_gaps=bool(args.ignore_negative_gaps),
    )


def _print_summary(s: SeasonSummary) -> None:
    print(f"### 季节 {s.season}")
    print(f"fields={s.field_count}, plots={s.plot_count}, observations={s.observation_count}")
    print(f"active_time={s.active_duration}（{s.active_seconds}s）")
    print(f"collectors={s.collector_count}, image_observations={s.image_observation_count}")
    print(f"busiest_day={s.busiest_day or '-'}（{s.busiest_day_count}）")
    print(f"busiest_unit={s.busiest_unit or '-'}（{s.busiest_unit_count}）")


def _cmd_seasons(args: argparse.Namespace) -> int:
    repo = CsvObservationRepository.from_csv(args.csv)
    for season in repo.seasons():
        print(f"{season}\t{len(repo.observations_for_season(season))}")
    return 0


def _cmd_summary(args: argparse.Namespace) -> int:
    repo = CsvObservationRepository.from_csv(args.csv)
    try:
        summary = summarize_season(repo, args.season, _params_from_args(args))
    except ValueError as exc:  # TimestampParseError or a bad --tz
        print(f"季节 {args.season} 统计失败：{exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(asdict(summary), ensure_ascii=False, indent=2))
    else:
        _print_summary(summary)
    return 0


def _cmd_export_summaries(args: argparse.Namespace) -> int:
    repo = CsvObservationRepository.from_csv(args.csv)
    seasons = args.season or None
    try:
        summaries = summarize_seasons(repo, seasons, _params_from_args(args), workers=args.workers)
    except ValueError as exc:  # TimestampParseError or a bad --tz
        print(f"统计失败，未导出：{exc}", file=sys.stderr)
        return 1
    write_summaries_csv(summaries, args.out)
    print(f"已导出：{args.out}（季节数={len(summaries)}）")
    return 0


def _cmd_traits(args: argparse.Namespace) -> int:
    repo = CsvObservationRepository.from_csv(args.csv)
    counts = trait_counts(repo.observations_for_season(args.season))
    if not counts:
        print(f"季节 {args.season} 没有带性状名的观测")
        return 0
    for name, n in counts.items():
        print(f"{name}\t{n} observations")
    return 0


def _add_summary_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--tz", type=str, default=DEFAULT_TZ, help="按哪个时区（IANA）划分日期，默认本机时区")
    p.add_argument(
        "--max-gap-minutes",
        type=float,
        default=MAX_ACTIVE_GAP_SECONDS / 60.0,
        help="相邻两条观测间隔不超过该分钟数才计入工作时长（默认30）",
    )
    p.add_argument(
        "--ignore-negative-gaps",
        action="store_true",
        help="时间倒序（负间隔）不计入工作时长；默认按原样累加",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    p = argparse.ArgumentParser(prog="field_stats")
    p.add_argument("--log-level", type=str, default="WARNING", help="日志级别（DEBUG/INFO/WARNING）")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_se = sub.add_parser("seasons", help="列出导出文件中的季节及观测数")
    p_se.add_argument("--csv", type=str, default="observations.csv", help="输入CSV路径")
    p_se.set_defaults(func=_cmd_seasons)

    p_su = sub.add_parser("summary", help="输出单个季节的统计卡片")
    p_su.add_argument("--csv", type=str, default="observations.csv", help="输入CSV路径")
    p_su.add_argument("--season", type=str, required=True, help="季节标签（例如 2024）")
    p_su.add_argument("--json", action="store_true", help="以JSON输出（便于后处理）")
    _add_summary_options(p_su)
    p_su.set_defaults(func=_cmd_summary)

    p_ex = sub.add_parser("export-summaries", help="把所有季节的统计导出为CSV")
    p_ex.add_argument("--csv", type=str, default="observations.csv", help="输入CSV路径")
    p_ex.add_argument("--out", type=str, default="season_summaries.csv", help="输出CSV路径")
    p_ex.add_argument(
        "--season",
        type=str,
        action="append",
        default=None,
        help="只导出指定季节（可重复）；默认全部季节",
    )
    p_ex.add_argument("--workers", type=int, default=1, help="并发统计的线程数（>1 启用）")
    _add_summary_options(p_ex)
    p_ex.set_defaults(func=_cmd_export_summaries)

    p_tr = sub.add_parser("traits", help="按性状统计某季节的观测数")
    p_tr.add_argument("--csv", type=str, default="observations.csv", help="输入CSV路径")
    p_tr.add_argument("--season", type=str, required=True, help="季节标签")
    p_tr.set_defaults(func=_cmd_traits)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
