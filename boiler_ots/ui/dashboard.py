"""KPI dashboard with live metric display."""

from __future__ import annotations

import streamlit as st

from boiler_ots.models.constants import COMBUSTION
from boiler_ots.models.pci import classify_pci
from boiler_ots.session import SessionSnapshot


def render_dashboard(snap: SessionSnapshot) -> None:
    """Render the top KPI bar with key process metrics."""

    state = snap.state
    result = state.result

    st.markdown("### Key Process Indicators")

    c1, c2, c3, c4, c5, c6 = st.columns(6)

    with c1:
        st.metric(
            "SH5",
            f"{state.real_sh5:.1f} C",
            delta=f"{state.real_sh5 - COMBUSTION.sh5_safe_limit:+.1f} vs limit",
            delta_color="inverse",
        )

    with c2:
        st.metric(
            "O2",
            f"{result.simulated_o2:.1f} %",
            delta=f"{result.simulated_o2 - 6.0:+.1f}",
            delta_color="off",
        )

    with c3:
        st.metric(
            "Steam",
            f"{result.steam_flow:.1f} t/h",
            delta=f"{result.steam_flow - state.setpoints.steam_target:+.1f}",
            delta_color="normal",
        )

    with c4:
        st.metric("Barycenter", f"{snap.smoothed_barycenter:.2f}", delta=snap.fire.status,
                  delta_color="off")

    with c5:
        st.metric(
            "Estimated PCI",
            f"{snap.smoothed_pci:.0f} kJ/kg",
            delta=classify_pci(snap.smoothed_pci).value,
            delta_color="off",
        )

    with c6:
        st.metric(
            "Risk",
            snap.anomaly.risk_level.value,
            delta=f"{snap.anomaly.explosion_risk_score:.0f} / 100",
            delta_color="inverse",
        )

    d1, d2, d3, d4 = st.columns(4)
    d1.caption(f"Fouling {state.bed.fouling:.1f} %")
    d2.caption(f"Waste deposit {state.bed.deposit:.1f} | Kp {result.kp:.0f}")
    d3.caption(f"Secondary air {result.secondary_air:.0f} Nm3/h ({result.air_efficiency:.0%})")
    d4.caption(f"Mode {state.setpoints.mode} | x{state.time_acceleration} | tick {state.tick}")
