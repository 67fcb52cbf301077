"""Tests for the Pillow grate diagram."""

import pytest

from boiler_ots.config import Settings
from boiler_ots.session import SimulationSession
from boiler_ots.ui.schematic import GRATE_X0, GRATE_X1, H, W, draw_grate, fire_x


class TestSchematic:
    def test_image_size(self):
        session = SimulationSession(settings=Settings(), seed=0, persist=False)
        img = draw_grate(session.snapshot())
        assert img.size == (W, H)

    def test_fire_position(self):
        pitch = (GRATE_X1 - GRATE_X0) / 6.0
        assert fire_x(1.0) == pytest.approx(GRATE_X0 + 0.5 * pitch)
        assert fire_x(3.5) == pytest.approx(GRATE_X0 + 3.0 * pitch)

    def test_fire_position_clamped(self):
        assert fire_x(0.0) == pytest.approx(GRATE_X0)
        assert fire_x(9.0) == pytest.approx(GRATE_X1)
