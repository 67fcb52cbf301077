"""Deployment settings read from the environment (and an optional .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Where the simulator keeps its files and how it reaches the advisory model."""

    data_dir: Path = Path(".ots_data")
    history_flush_s: float = 5.0
    advisory_model: str = "gemini-2.0-flash"
    gemini_api_key: Optional[str] = None

    @property
    def history_file(self) -> Path:
        return self.data_dir / "boiler_history.json"

    @property
    def configurations_file(self) -> Path:
        return self.data_dir / "boiler_configurations.json"

    @property
    def advisory_enabled(self) -> bool:
        return bool(self.gemini_api_key)


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build Settings from environment variables, loading a .env file first."""
    load_dotenv(env_file)

    flush = os.getenv("OTS_HISTORY_FLUSH_S", "")
    try:
        history_flush_s = float(flush) if flush else Settings.history_flush_s
    except ValueError:
        history_flush_s = Settings.history_flush_s

    return Settings(
        data_dir=Path(os.getenv("OTS_DATA_DIR", str(Settings.data_dir))),
        history_flush_s=max(0.0, history_flush_s),
        advisory_model=os.getenv("OTS_ADVISORY_MODEL", Settings.advisory_model),
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
    )
