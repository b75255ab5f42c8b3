from __future__ import annotations

from pathlib import Path

import streamlit as st

from field_stats.models import MAX_ACTIVE_GAP_SECONDS, SeasonSummary, SummaryParams
from field_stats.repository import CsvObservationRepository
from field_stats.stats import summarize_season, trait_counts


@st.cache_resource(show_spinner=False)
def _load_repository(csv_path: str, mtime: float) -> CsvObservationRepository:
    _ = mtime  # part of cache key so updated files reload automatically
    return CsvObservationRepository.from_csv(csv_path)


def _params_from_inputs(tz_name: str, max_gap_minutes: float, ignore_negative: bool) -> SummaryParams:
    """Map sidebar inputs to SummaryParams; a blank zone means the local zone."""

    return SummaryParams(
        tz_name=tz_name.strip() or None,
        max_active_gap_seconds=float(max_gap_minutes) * 60.0,
        ignore_negative_gaps=bool(ignore_negative),
    )


def _season_card(s: SeasonSummary) -> None:
    with st.container(border=True):
        st.subheader(s.season)
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Fields", str(s.field_count))
        c2.metric("Plots", str(s.plot_count))
        c3.metric("Observations", str(s.observation_count))
        c4.metric("Active time", s.active_duration)
        c5, c6, c7, c8 = st.columns(4)
        c5.metric("Collectors", str(s.collector_count))
        c6.metric("Photos", str(s.image_observation_count))
        c7.metric("Busiest day", s.busiest_day or "-")
        c8.metric("Busiest unit", s.busiest_unit or "-")


def main() -> None:
    st.set_page_config(page_title="Field Book statistics", layout="wide")
    st.title("Field Book：按季节统计观测")

    with st.sidebar:
        st.subheader("数据")
        csv_path = st.text_input("观测导出 CSV 路径", value="observations.csv")
        tz_name = st.text_input("时区（IANA，留空=本机时区）", value="")

        with st.expander("高级参数（通常不用改）", expanded=False):
            max_gap_minutes = st.number_input(
                "工作时长间隔上限（分钟，默认 30）", value=MAX_ACTIVE_GAP_SECONDS / 60.0, step=5.0
            )
            ignore_negative = st.checkbox("时间倒序的间隔不计入工作时长", value=False)

    p = Path(csv_path)
    if not p.exists():
        st.error(f"找不到文件：{csv_path!r}")
        return

    try:
        repo = _load_repository(csv_path, p.stat().st_mtime)
    except Exception as exc:
        st.exception(exc)
        return

    params = _params_from_inputs(tz_name, max_gap_minutes, ignore_negative)

    seasons = repo.seasons()
    if not seasons:
        st.info("文件里没有观测记录。")
        return

    for season in seasons:
        try:
            summary = summarize_season(repo, season, params)
        except ValueError as exc:  # TimestampParseError or a bad timezone name
            st.error(f"季节 {season} 统计失败：{exc}")
            continue
        _season_card(summary)
        counts = trait_counts(repo.observations_for_season(season))
        if counts:
            with st.expander(f"{season} 按性状明细", expanded=False):
                st.dataframe(
                    [{"trait": k, "observations": v} for k, v in counts.items()],
                    use_container_width=True,
                )

    st.caption("说明：工作时长只累加相邻两条观测之间不超过上限的间隔；日期按所选时区划分。")


if __name__ == "__main__":
    main()
