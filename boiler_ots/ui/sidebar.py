"""Sidebar: scenario, simulation speed, maintenance, configurations, history."""

from __future__ import annotations

import streamlit as st

from boiler_ots.history.csv_import import HistoryImportError
from boiler_ots.models.constants import TIME_ACCELERATIONS
from boiler_ots.scenarios.library import SCENARIO_LIBRARY
from boiler_ots.session import SimulationSession


def _render_scenario(session: SimulationSession) -> None:
    st.sidebar.header("Training Scenario")

    names = [s.name for s in SCENARIO_LIBRARY]
    selected = st.sidebar.selectbox(
        "Scenario",
        names,
        index=names.index(session.scenario.name) if session.scenario.name in names else 0,
        help="Choose a pre-built scenario, then load it to restart the plant.",
    )
    scenario = next(s for s in SCENARIO_LIBRARY if s.name == selected)
    st.sidebar.markdown(f"**Difficulty:** {scenario.difficulty}")
    st.sidebar.markdown(f"*{scenario.description}*")

    if st.sidebar.button("Load / Reset Plant", type="secondary", use_container_width=True):
        session.load_scenario(scenario)
        st.rerun()


def _render_speed(session: SimulationSession) -> None:
    st.sidebar.header("Simulation")
    current = session.boiler.state.time_acceleration
    accel = st.sidebar.select_slider(
        "Time acceleration",
        options=list(TIME_ACCELERATIONS),
        value=current,
        format_func=lambda a: f"x{a}",
    )
    if accel != current:
        session.set_time_acceleration(accel)

    st.session_state.running = st.sidebar.toggle(
        "Run", value=st.session_state.get("running", True)
    )

    if st.sidebar.button("Soot Blow", use_container_width=True):
        session.soot_blow()


def _render_configurations(session: SimulationSession) -> None:
    if session.configurations is None:
        return
    st.sidebar.header("Configurations")

    with st.sidebar.form("save_config", clear_on_submit=True):
        name = st.text_input("Name")
        description = st.text_input("Description")
        if st.form_submit_button("Save current zones and mix") and name.strip():
            session.save_configuration(name.strip(), description.strip() or None)

    configs = session.configurations.configs
    if not configs:
        st.sidebar.caption("No saved configuration.")
        return
    chosen = st.sidebar.selectbox(
        "Saved", configs, format_func=lambda c: c.name, key="config_choice"
    )
    c1, c2 = st.sidebar.columns(2)
    if c1.button("Apply", use_container_width=True):
        session.apply_configuration(chosen.id)
    if c2.button("Delete", use_container_width=True):
        session.configurations.delete(chosen.id)
        st.rerun()


def _render_history(session: SimulationSession) -> bool:
    st.sidebar.header("History")
    exclude_stops = st.sidebar.toggle("Hide technical stops", value=True)

    upload = st.sidebar.file_uploader("Import data-logger CSV", type=["csv", "txt"])
    if upload is not None and st.session_state.get("imported_file") != upload.file_id:
        try:
            count = session.import_history(upload)
        except HistoryImportError as exc:
            st.sidebar.error(f"Import failed: {exc}")
        else:
            st.sidebar.success(f"{count} points imported")
        st.session_state.imported_file = upload.file_id

    st.sidebar.download_button(
        "Download history (CSV)",
        session.history.to_dataframe().to_csv(index=False),
        file_name="boiler_history.csv",
        mime="text/csv",
        use_container_width=True,
    )
    if st.sidebar.button("Clear history", use_container_width=True):
        session.clear_history()
    return exclude_stops


def render_sidebar(session: SimulationSession) -> bool:
    """Render the sidebar; returns whether technical stops are hidden."""
    _render_scenario(session)
    st.sidebar.divider()
    _render_speed(session)
    st.sidebar.divider()
    _render_configurations(session)
    st.sidebar.divider()
    return _render_history(session)
