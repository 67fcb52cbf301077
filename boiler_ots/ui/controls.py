"""Operator control panel: zones, waste mix, and setpoints."""

from __future__ import annotations

import streamlit as st

from boiler_ots.models.constants import SETPOINT_RANGES, WASTE_CATEGORIES, WasteCategory
from boiler_ots.models.zones import ZONE_IDS
from boiler_ots.session import SimulationSession


def _changed(new: float, old: float, tol: float = 1e-6) -> bool:
    return abs(float(new) - float(old)) > tol


def render_zone_controls(session: SimulationSession) -> None:
    """Zone percentages with locks, and the sub-zone split of each roller pair."""
    boiler = session.boiler
    state = boiler.state

    st.markdown("### Primary Air Zones")
    cols = st.columns(3)
    for col, zone_id in zip(cols, ZONE_IDS):
        with col:
            locked = state.locks[zone_id]
            value = st.slider(
                f"Zone {zone_id} (%)",
                0.0,
                100.0,
                float(round(state.zones.zone(zone_id), 1)),
                0.5,
                disabled=locked,
            )
            if _changed(value, round(state.zones.zone(zone_id), 1)):
                boiler.update_zone(zone_id, value)

            split = st.slider(
                f"Roller {2 * zone_id - 1} share (%)",
                0.0,
                100.0,
                float(state.zones.sub_zone(zone_id)),
                1.0,
            )
            if _changed(split, state.zones.sub_zone(zone_id)):
                boiler.update_sub_zone(zone_id, split)

            label = "Unlock" if locked else "Lock"
            if st.button(f"{label} zone {zone_id}", key=f"lock_{zone_id}", use_container_width=True):
                boiler.toggle_lock(zone_id)
                st.rerun()

    st.caption(f"Zone total: {boiler.state.zones.total:.1f} %")


def render_waste_controls(session: SimulationSession) -> None:
    boiler = session.boiler
    mix = boiler.state.waste_mix

    st.markdown("### Waste Mix")
    c1, c2 = st.columns(2)
    categories = list(WasteCategory)
    with c1:
        category = st.selectbox(
            "Declared category",
            categories,
            index=categories.index(mix.category),
            format_func=lambda c: WASTE_CATEGORIES[c].label,
        )
        st.caption(WASTE_CATEGORIES[category].description)
    with c2:
        ratio = st.slider("Mix ratio", 0.0, 1.0, float(mix.mix_ratio), 0.05)

    if category != mix.category or _changed(ratio, mix.mix_ratio):
        boiler.set_waste_mix(category, ratio)


def render_setpoint_controls(session: SimulationSession) -> None:
    boiler = session.boiler
    sp = boiler.state.setpoints

    st.markdown("### Setpoints")
    c1, c2, c3 = st.columns(3)
    changes = {}

    lo, hi = SETPOINT_RANGES["steam_target"]
    with c1:
        steam = st.slider("Steam target (t/h)", lo, hi, float(sp.steam_target), 0.1)
        lo, hi = SETPOINT_RANGES["measured_o2"]
        o2 = st.slider("Measured O2 (%)", lo, hi, float(sp.measured_o2), 0.1)
        lo, hi = SETPOINT_RANGES["kap"]
        kap = st.slider("Kap offset (Nm3/h)", lo, hi, float(sp.kap), 100.0)

    with c2:
        lo, hi = SETPOINT_RANGES["grate_speed"]
        grate = st.slider("Grate speed (%)", lo, hi, float(sp.grate_speed), 1.0)
        lo, hi = SETPOINT_RANGES["pusher_speed"]
        pusher = st.slider("Pusher speed (%)", lo, hi, float(round(sp.pusher_speed, 1)), 0.1,
                           disabled=sp.mode == 2)
        lo, hi = SETPOINT_RANGES["total_primary_air"]
        primary = st.slider("Total primary air (Nm3/h)", lo, hi, float(sp.total_primary_air), 500.0)

    with c3:
        mode = st.radio("Regulation", [1, 2], index=sp.mode - 1,
                        format_func=lambda m: "Mode 1 (fixed law)" if m == 1 else "Mode 2 (air balance)")
        unstable = st.toggle("Unstable process (noise)", value=sp.unstable)

    for key, new, old in (
        ("steam_target", steam, sp.steam_target),
        ("measured_o2", o2, sp.measured_o2),
        ("kap", kap, sp.kap),
        ("grate_speed", grate, sp.grate_speed),
        ("total_primary_air", primary, sp.total_primary_air),
    ):
        if _changed(new, old):
            changes[key] = new
    if sp.mode == 1 and _changed(pusher, round(sp.pusher_speed, 1)):
        changes["pusher_speed"] = pusher
    if mode != sp.mode:
        changes["mode"] = mode
    if unstable != sp.unstable:
        changes["unstable"] = unstable

    if changes:
        boiler.set_setpoints(**changes)


def render_controls(session: SimulationSession) -> None:
    """Render every operator control and apply changes to the session."""
    render_zone_controls(session)
    st.divider()
    render_waste_controls(session)
    st.divider()
    render_setpoint_controls(session)
