from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
DATA_DIR_ENV = "GOALFOLIO_DATA_DIR"

def load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}

@dataclass(frozen=True)
class Settings:
    raw: Dict[str, Any]

    def _section(self, name: str) -> Dict[str, Any]:
        return self.raw.get(name) or {}

    @property
    def refresh_interval(self) -> float:
        return float(self._section("market").get("refresh_interval_seconds", 30.0))

    @property
    def max_change_pct(self) -> float:
        return float(self._section("market").get("max_change_pct", 5.0))

    @property
    def min_price(self) -> float:
        return float(self._section("market").get("min_price", 0.01))

    @property
    def fx_initial_rate(self) -> float:
        return float(self._section("fx").get("initial_rate", 1320))

    @property
    def fx_min_rate(self) -> float:
        return float(self._section("fx").get("min_rate", 1000))

    @property
    def fx_max_change_pct(self) -> float:
        return float(self._section("fx").get("max_change_pct", 2.0))

    @property
    def simulated_latency(self) -> float:
        return float(self._section("market").get("simulated_latency_seconds", 0.0))

    @property
    def autosave_delay(self) -> float:
        return float(self._section("autosave").get("delay_seconds", 2.0))

    @property
    def data_dir(self) -> Path:
        env = os.environ.get(DATA_DIR_ENV)
        if env:
            return Path(env).expanduser()
        return Path(self._section("storage").get("data_dir", "~/.goalfolio")).expanduser()

    @property
    def max_portfolios_per_user(self) -> Optional[int]:
        v = self._section("storage").get("max_portfolios_per_user")
        return int(v) if v is not None else None

    @property
    def top_holdings(self) -> int:
        return int(self._section("display").get("top_holdings", 6))

@dataclass(frozen=True)
class LoadedConfig:
    settings: Settings
    universe: Dict[str, Any]
    formations: Dict[str, Any]
    presets: Dict[str, Any]

def load_all(
    settings_path: str | Path = CONFIG_DIR / "settings.yaml",
    universe_path: str | Path = CONFIG_DIR / "stock_universe.yaml",
    formations_path: str | Path = CONFIG_DIR / "formations.yaml",
    presets_path: str | Path = CONFIG_DIR / "presets.yaml",
) -> LoadedConfig:
    return LoadedConfig(
        settings=Settings(load_yaml(settings_path)),
        universe=load_yaml(universe_path),
        formations=load_yaml(formations_path),
        presets=load_yaml(presets_path),
    )
