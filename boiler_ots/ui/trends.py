"""Historical trend charts for key process variables."""

from __future__ import annotations

import pandas as pd
import streamlit as st

from boiler_ots.history.log import HistoryLog, sample_points
from boiler_ots.models.constants import ANOMALY_THRESHOLDS, COMBUSTION


def history_frame(history: HistoryLog, exclude_stops: bool = False,
                  target_count: int = 500) -> pd.DataFrame:
    """Downsampled chart data indexed by timestamp."""
    points = sample_points(history.points(exclude_stops), target_count)
    df = pd.DataFrame([p.to_dict() for p in points])
    if df.empty:
        return df
    df["timestamp"] = pd.to_datetime(df["timestamp"], errors="coerce")
    return df.set_index("timestamp")


def render_trends(history: HistoryLog, exclude_stops: bool = False) -> None:
    """Render trend charts from the history log."""

    if len(history) < 2:
        st.info("Trend charts will appear after a few ticks.")
        return

    df = history_frame(history, exclude_stops)
    if df.empty:
        st.info("No running-plant data to chart.")
        return

    st.markdown("### Process Trends")

    c1, c2 = st.columns(2)

    with c1:
        st.markdown("**SH5 Temperature (C)**")
        t_df = df[["sh5_temp"]].copy()
        t_df["Limit"] = COMBUSTION.sh5_safe_limit
        st.line_chart(t_df, height=200)

    with c2:
        st.markdown("**Flue-gas O2 (%)**")
        o2_df = df[["o2_level"]].copy()
        o2_df["Low"] = ANOMALY_THRESHOLDS.o2_min
        st.line_chart(o2_df, height=200)

    c3, c4 = st.columns(2)

    with c3:
        st.markdown("**Fire Barycenter**")
        b_df = df[["barycenter"]].copy()
        b_df["Rear limit"] = ANOMALY_THRESHOLDS.barycenter_max
        st.line_chart(b_df, height=200)

    with c4:
        st.markdown("**Zone Flows (Nm3/h)**")
        st.line_chart(df[["zone1_flow", "zone2_flow", "zone3_flow"]], height=200)


def render_statistics(stats) -> None:
    """Z-score and trend summary for SH5 and barycenter."""
    if stats is None:
        st.caption("Statistics need at least 10 history points.")
        return
    cols = st.columns(len(stats))
    for col, (name, s) in zip(cols, stats.items()):
        flag = " (outlier)" if s.is_anomaly else ""
        col.metric(
            name,
            f"{s.latest:.2f}",
            delta=f"z = {s.z_score:+.2f}{flag}, {s.trend}",
            delta_color="off",
        )
