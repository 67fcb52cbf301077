"""Tests for the history log, its file store, and saved configurations."""

import json

import pytest

from boiler_ots.history import (
    ConfigurationStore,
    HistoryLog,
    HistoryPoint,
    HistoryStore,
    sample_points,
)
from boiler_ots.models.constants import WasteCategory
from boiler_ots.models.plant_state import WasteMix, ZoneConfiguration


def _make_point(i: int, sh5: float = 610.0) -> HistoryPoint:
    return HistoryPoint(
        id=f"p{i}",
        timestamp=f"2024-01-01T00:00:{i % 60:02d}",
        zone1_flow=17080.0,
        zone2_flow=5320.0,
        zone3_flow=5600.0,
        sh5_temp=sh5,
        o2_level=6.0,
        steam_flow=30.6,
        barycenter=2.69,
    )


class FakeClock:
    def __init__(self, t: float = 0.0):
        self.t = t

    def __call__(self) -> float:
        return self.t


class TestHistoryLog:
    def test_bounded(self):
        log = HistoryLog(capacity=3)
        for i in range(5):
            log.append(_make_point(i))
        assert [p.id for p in log] == ["p2", "p3", "p4"]

    def test_revision_tracks_changes(self):
        log = HistoryLog()
        log.append(_make_point(0))
        log.replace([_make_point(1), _make_point(2)])
        assert log.revision == 2
        log.clear()
        assert len(log) == 0
        assert log.revision == 3

    def test_technical_stop_filter(self):
        log = HistoryLog([_make_point(0, 450.0), _make_point(1, 610.0)])
        assert [p.id for p in log.points(exclude_stops=True)] == ["p1"]
        assert len(log.points()) == 2

    def test_dataframe(self):
        log = HistoryLog([_make_point(i) for i in range(4)])
        df = log.to_dataframe()
        assert len(df) == 4
        assert "sh5_temp" in df.columns
        assert log.to_dataframe(exclude_stops=True).shape[0] == 4

    def test_empty_dataframe_has_columns(self):
        assert "barycenter" in HistoryLog().to_dataframe().columns


class TestSamplePoints:
    def test_short_series_untouched(self):
        data = list(range(10))
        assert sample_points(data, 20) == data

    def test_downsampled_keeps_last(self):
        data = list(range(1001))
        sampled = sample_points(data, 100)
        assert len(sampled) <= 102
        assert sampled[0] == 0
        assert sampled[-1] == 1000


class TestHistoryStore:
    def test_missing_file_loads_empty(self, tmp_path):
        assert HistoryStore(tmp_path / "history.json").load() == []

    def test_corrupt_file_loads_empty(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text("{not json", encoding="utf-8")
        assert HistoryStore(path).load() == []

    def test_roundtrip(self, tmp_path):
        store = HistoryStore(tmp_path / "history.json", clock=FakeClock())
        points = [_make_point(i) for i in range(3)]
        store.mark_dirty(points)
        assert store.flush()
        assert HistoryStore(tmp_path / "history.json").load() == points

    def test_debounced_flush(self, tmp_path):
        path = tmp_path / "history.json"
        store = HistoryStore(path, debounce_s=5.0, clock=FakeClock())
        store.mark_dirty([_make_point(0)])
        assert store.maybe_flush(now=0.0)
        assert not store.dirty

        store.mark_dirty([_make_point(0), _make_point(1)])
        assert not store.maybe_flush(now=2.0)
        assert len(json.loads(path.read_text(encoding="utf-8"))) == 1
        assert store.maybe_flush(now=5.5)
        assert len(json.loads(path.read_text(encoding="utf-8"))) == 2

    def test_nothing_to_flush(self, tmp_path):
        store = HistoryStore(tmp_path / "history.json")
        assert not store.maybe_flush(now=100.0)
        assert not (tmp_path / "history.json").exists()

    def test_malformed_entries_dropped(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text(
            json.dumps([_make_point(0).to_dict(), {"id": "x"}, "garbage", 3, None]),
            encoding="utf-8",
        )
        assert len(HistoryStore(path).load()) == 1


class TestConfigurationStore:
    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "configs.json"
        store = ConfigurationStore(path)
        mix = WasteMix(WasteCategory.BOOST, 0.4)
        config = store.save("Winter mix", ZoneConfiguration.default(), mix, "cold season")
        assert len(config.id) == 36
        assert config.timestamp > 0

        reloaded = ConfigurationStore(path)
        loaded = reloaded.load(config.id)
        assert loaded == config
        assert loaded.waste_mix.category == WasteCategory.BOOST

    def test_ids_unique(self, tmp_path):
        store = ConfigurationStore(tmp_path / "configs.json")
        a = store.save("a", ZoneConfiguration.default(), WasteMix())
        b = store.save("b", ZoneConfiguration.default(), WasteMix())
        assert a.id != b.id
        assert len(store.configs) == 2

    def test_delete(self, tmp_path):
        path = tmp_path / "configs.json"
        store = ConfigurationStore(path)
        config = store.save("a", ZoneConfiguration.default(), WasteMix())
        assert store.delete(config.id)
        assert not store.delete(config.id)
        assert ConfigurationStore(path).configs == []

    def test_unknown_id(self, tmp_path):
        assert ConfigurationStore(tmp_path / "configs.json").load("nope") is None

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "configs.json"
        path.write_text("[{]", encoding="utf-8")
        assert ConfigurationStore(path).configs == []

    def test_non_finite_zones_normalized(self, tmp_path):
        path = tmp_path / "configs.json"
        entry = {
            "id": "c1",
            "name": "Broken",
            "timestamp": 0,
            "zones": {"zone1": float("nan"), "zone2": 50.0, "zone3": 50.0},
            "waste_mix": {"category": "WET", "mix_ratio": float("nan")},
        }
        path.write_text(json.dumps([entry]), encoding="utf-8")
        config = ConfigurationStore(path).load("c1")
        assert config.zones.zone1 == 0.0
        assert config.zones.total == pytest.approx(100.0)
        assert config.waste_mix.mix_ratio == 0.0
