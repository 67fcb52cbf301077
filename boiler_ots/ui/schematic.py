"""Grate and furnace diagram rendered with Pillow."""

from __future__ import annotations

import streamlit as st
from PIL import Image, ImageDraw

from boiler_ots.models.constants import COMBUSTION
from boiler_ots.models.zones import roller_flows
from boiler_ots.safety.anomaly_detector import RiskLevel
from boiler_ots.session import SessionSnapshot

# Color palette
BG = (15, 20, 35)
EQUIP = (50, 70, 100)
EQUIP_BORDER = (80, 120, 160)
TEXT_COLOR = (200, 215, 235)
AIR = (70, 130, 220)
BADGE_AMBER = (245, 180, 50)
BADGE_ORANGE = (240, 120, 40)
BADGE_RED = (220, 50, 50)
GREEN = (50, 200, 100)

W, H = 900, 460
GRATE_X0, GRATE_X1 = 120, 780
GRATE_Y = 300
ROLLER_R = 26


def _draw_badge(draw, x, y, text, color):
    tw = len(text) * 9 + 20
    draw.rounded_rectangle([x, y, x + tw, y + 26], radius=6, fill=color)
    draw.text((x + 10, y + 5), text, fill=(0, 0, 0))


def fire_x(barycenter: float) -> float:
    """Horizontal pixel position of a barycenter (roller 1 .. roller 6)."""
    pitch = (GRATE_X1 - GRATE_X0) / 6.0
    b = min(max(barycenter, 0.5), 6.5)
    return GRATE_X0 + (b - 0.5) * pitch


def draw_grate(snap: SessionSnapshot) -> Image.Image:
    """Furnace cross-section: six rollers, their air, and the fire position."""
    state = snap.state
    img = Image.new("RGB", (W, H), BG)
    draw = ImageDraw.Draw(img)

    # Furnace outline and boiler pass
    draw.rounded_rectangle([GRATE_X0 - 40, 40, GRATE_X1 + 40, GRATE_Y + 60],
                           radius=14, outline=EQUIP_BORDER, width=2)
    draw.text((GRATE_X0 - 30, 48), "FURNACE", fill=TEXT_COLOR)
    draw.rectangle([GRATE_X1 - 60, 10, GRATE_X1 + 20, 40], fill=EQUIP, outline=EQUIP_BORDER)
    sh5_color = BADGE_RED if state.real_sh5 > COMBUSTION.sh5_safe_limit else GREEN
    draw.text((GRATE_X1 - 52, 18), f"SH5 {state.real_sh5:.0f}C", fill=sh5_color)

    # Rollers with primary-air bars beneath
    flows = roller_flows(state.zones)
    peak = max(max(flows), 1.0)
    pitch = (GRATE_X1 - GRATE_X0) / 6.0
    for i, flow in enumerate(flows):
        cx = GRATE_X0 + (i + 0.5) * pitch
        draw.ellipse([cx - ROLLER_R, GRATE_Y - ROLLER_R, cx + ROLLER_R, GRATE_Y + ROLLER_R],
                     fill=EQUIP, outline=EQUIP_BORDER, width=2)
        draw.text((cx - 6, GRATE_Y - 7), str(i + 1), fill=TEXT_COLOR)
        bar_h = int(70 * flow / peak)
        draw.rectangle([cx - 10, GRATE_Y + 100 - bar_h, cx + 10, GRATE_Y + 100], fill=AIR)
        draw.text((cx - 14, GRATE_Y + 104), f"{flow:.0f}%", fill=TEXT_COLOR)

    # Fire marker
    x = fire_x(snap.smoothed_barycenter)
    color = snap.fire.color
    draw.polygon([(x - 30, GRATE_Y - ROLLER_R - 4), (x, GRATE_Y - 150),
                  (x + 30, GRATE_Y - ROLLER_R - 4)], fill=color)
    draw.text((x - 40, GRATE_Y - 172), f"B = {snap.smoothed_barycenter:.2f}", fill=TEXT_COLOR)
    draw.text((GRATE_X0, H - 40), snap.fire.status, fill=color)

    # HUD
    result = state.result
    hud_items = [
        f"O2: {result.simulated_o2:.1f} %",
        f"Steam: {result.steam_flow:.1f} t/h",
        f"AS: {result.secondary_air:.0f} Nm3/h",
        f"Pusher: {state.setpoints.pusher_speed:.1f} %",
        f"Fouling: {state.bed.fouling:.1f} %",
    ]
    x_pos = 20
    for item in hud_items:
        draw.text((x_pos, H - 20), item, fill=TEXT_COLOR)
        x_pos += 175

    level = snap.anomaly.risk_level
    if level == RiskLevel.EMERGENCY:
        _draw_badge(draw, 20, 8, "EMERGENCY", BADGE_RED)
    elif level == RiskLevel.CRITICAL:
        _draw_badge(draw, 20, 8, "CRITICAL", BADGE_ORANGE)
    elif level == RiskLevel.WARNING:
        _draw_badge(draw, 20, 8, "WARNING", BADGE_AMBER)
    else:
        _draw_badge(draw, 20, 8, "NORMAL", GREEN)
    return img


def render_schematic(snap: SessionSnapshot) -> None:
    st.image(draw_grate(snap), use_container_width=True)
