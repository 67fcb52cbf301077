"""Tests for environment-driven settings."""

from pathlib import Path

from boiler_ots.config import Settings, load_settings


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.history_file == Path(".ots_data") / "boiler_history.json"
        assert s.configurations_file.name == "boiler_configurations.json"
        assert not s.advisory_enabled

    def test_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("OTS_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("OTS_HISTORY_FLUSH_S", "2.5")
        monkeypatch.setenv("OTS_ADVISORY_MODEL", "gemini-test")
        monkeypatch.setenv("GEMINI_API_KEY", "secret")
        s = load_settings(str(tmp_path / "missing.env"))
        assert s.data_dir == tmp_path
        assert s.history_flush_s == 2.5
        assert s.advisory_model == "gemini-test"
        assert s.advisory_enabled

    def test_bad_flush_value(self, monkeypatch, tmp_path):
        monkeypatch.setenv("OTS_HISTORY_FLUSH_S", "soon")
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        s = load_settings(str(tmp_path / "missing.env"))
        assert s.history_flush_s == 5.0

    def test_env_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("OTS_ADVISORY_MODEL", "placeholder")
        monkeypatch.delenv("OTS_ADVISORY_MODEL")
        env = tmp_path / ".env"
        env.write_text("OTS_ADVISORY_MODEL=from-file\n", encoding="utf-8")
        assert load_settings(str(env)).advisory_model == "from-file"
