"""Event log display for risk changes, alerts, and operator actions."""

from __future__ import annotations

from typing import Dict, List

import streamlit as st


def render_event_log(log: List[Dict[str, str]], max_display: int = 20) -> None:
    """Render the event log, newest first."""

    st.markdown("### Event Log")

    if not log:
        st.caption("No events recorded yet.")
        return

    recent = log[-max_display:]
    recent.reverse()

    for entry in recent:
        severity = entry.get("severity", "info")
        stamp = f"{entry.get('time', '')} T{entry.get('tick', '?')}"
        msg = entry.get("message", "")

        if severity == "emergency":
            st.markdown(f"` {stamp} ` :red[**EMERGENCY** {msg}]")
        elif severity == "critical":
            st.markdown(f"` {stamp} ` :red[**CRITICAL** {msg}]")
        elif severity == "warning":
            st.markdown(f"` {stamp} ` :orange[**WARNING** {msg}]")
        else:
            st.markdown(f"` {stamp} ` {msg}")


def render_anomalies(anomaly) -> None:
    """Active anomaly signatures with their recommended actions."""
    if anomaly.is_clear:
        st.success("No active anomaly.")
        return
    for a in anomaly.active_anomalies:
        text = f"**{a.type.value}**: {a.message}  \n_{a.action}_"
        if a.severity == "critical":
            st.error(text)
        else:
            st.warning(text)
