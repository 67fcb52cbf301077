"""Waste Incineration Boiler Operator Training Simulator.

A real-time combustion simulation for training operators on a grate-fired
municipal waste boiler. Features primary-air zone control, fire barycenter
tracking, thermal inertia, automatic air-balance regulation, and an
explosion-risk advisory detector.
"""

from __future__ import annotations

import streamlit as st

from boiler_ots.advisory import AdvisoryClient, Mentor
from boiler_ots.config import load_settings
from boiler_ots.session import SimulationSession
from boiler_ots.ui.controls import render_controls
from boiler_ots.ui.dashboard import render_dashboard
from boiler_ots.ui.event_log import render_anomalies, render_event_log
from boiler_ots.ui.mentor_panel import render_mentor
from boiler_ots.ui.schematic import render_schematic
from boiler_ots.ui.sidebar import render_sidebar
from boiler_ots.ui.trends import render_statistics, render_trends

REFRESH_S = 1.0


# ---------------------------------------------------------------------------
# Session state initialization
# ---------------------------------------------------------------------------

def _init_session() -> None:
    """Set up session state on first load."""
    if "session" not in st.session_state:
        settings = load_settings()
        st.session_state.session = SimulationSession(settings=settings)
        client = (
            AdvisoryClient(settings.gemini_api_key, settings.advisory_model)
            if settings.advisory_enabled
            else None
        )
        st.session_state.mentor = Mentor(client)
    if "running" not in st.session_state:
        st.session_state.running = True


# ---------------------------------------------------------------------------
# Main app
# ---------------------------------------------------------------------------

def main() -> None:
    st.set_page_config(
        page_title="Boiler OTS",
        page_icon="🔥",
        layout="wide",
    )

    _init_session()
    session: SimulationSession = st.session_state.session

    st.markdown(
        "# Waste Incineration Boiler Training Simulator\n"
        "*Real-time grate combustion with air-balance regulation and risk detection*"
    )

    exclude_stops = render_sidebar(session)

    @st.fragment(run_every=REFRESH_S if st.session_state.running else None)
    def live_panel() -> None:
        if st.session_state.running:
            session.pump()
        else:
            session.scheduler.reset()
        snap = session.snapshot()

        render_dashboard(snap)
        st.divider()
        render_schematic(snap)
        render_anomalies(snap.anomaly)
        st.divider()

        col_left, col_right = st.columns([3, 2])
        with col_left:
            render_trends(session.history, exclude_stops)
            render_statistics(session.statistics())
        with col_right:
            render_event_log(session.events)

    live_panel()

    st.divider()
    tab_controls, tab_mentor = st.tabs(["Controls", "Mentor"])
    with tab_controls:
        render_controls(session)
    with tab_mentor:
        render_mentor(st.session_state.mentor, session.snapshot())


if __name__ == "__main__":
    main()
