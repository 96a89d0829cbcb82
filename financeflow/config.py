import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional

ENV_PREFIX = "FINANCEFLOW_"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    seed_path: str = "data/seed.json"
    forecast_url: str = "http://127.0.0.1:5000/predict"
    forecast_field: str = "prediction"
    forecast_timeout: float = 5.0
    log_level: str = "INFO"


def _coerce(name: str, value):
    if name == "forecast_timeout":
        return float(value)
    return str(value)


def load_settings(path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> Settings:
    """Defaults, then the optional JSON file, then FINANCEFLOW_* variables."""
    settings = Settings()
    if path is not None and Path(path).exists():
        with Path(path).open("r", encoding="utf-8") as f:
            data = json.load(f)
        known = {f.name for f in fields(Settings)}
        settings = replace(settings, **{k: _coerce(k, v) for k, v in data.items() if k in known})

    env = os.environ if env is None else env
    overrides = {}
    for f in fields(Settings):
        key = ENV_PREFIX + f.name.upper()
        if key in env:
            overrides[f.name] = _coerce(f.name, env[key])
    return replace(settings, **overrides)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
