"""Mentor chat: questions and console screenshots about the live plant."""

from __future__ import annotations

import base64

import streamlit as st

from boiler_ots.advisory.client import ImageAttachment
from boiler_ots.advisory.mentor import Mentor, MentorContext
from boiler_ots.session import SessionSnapshot


def mentor_context(snap: SessionSnapshot) -> MentorContext:
    state = snap.state
    return MentorContext(
        sh5_temp=state.real_sh5,
        o2=state.result.simulated_o2,
        barycenter=state.barycenter,
        mode=state.setpoints.mode,
        fouling=state.bed.fouling,
        pci=snap.smoothed_pci,
        as_flow=state.result.secondary_air,
    )


def render_mentor(mentor: Mentor, snap: SessionSnapshot) -> None:
    st.markdown("### Mentor")
    st.caption("Hosted model" if mentor.online else "Local lessons only")

    chat = st.session_state.setdefault("mentor_chat", [])
    for msg in chat[-10:]:
        with st.chat_message(msg["role"]):
            st.markdown(msg["content"])

    uploads = st.file_uploader(
        "Console screenshots", type=["png", "jpg", "jpeg"], accept_multiple_files=True
    )
    question = st.chat_input("Ask the mentor")
    if not question:
        return

    images = [
        ImageAttachment(base64.b64encode(f.getvalue()).decode("ascii"), f.type or "image/jpeg")
        for f in uploads or []
    ]
    answer = mentor.ask(question, mentor_context(snap), snap.anomaly, images)
    chat.append({"role": "user", "content": question})
    chat.append({"role": "assistant", "content": answer})
    st.rerun()
