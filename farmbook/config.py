from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import streamlit as st

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "settings.json"
ENV_DATA_DIR = "FARMBOOK_DATA_DIR"
ENV_UNITS = "FARMBOOK_UNITS"
ENV_LOG_LEVEL = "FARMBOOK_LOG_LEVEL"
SESSION_DATA_DIR = "farmbook_data_dir"

DEFAULT_UNITS = ("A3", "B1", "B2", "B3", "B4", "B5", "B6", "B7", "B8", "B9", "B10")


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    units: tuple[str, ...] = DEFAULT_UNITS
    log_level: str = "INFO"


def _default_data_dir() -> Path:
    return Path.home() / ".farmbook"


def _load_persisted_settings(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if cfg.exists():
        try:
            return json.loads(cfg.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable settings file %s", cfg)
            return {}
    return {}


def _parse_units(raw) -> tuple[str, ...]:
    if isinstance(raw, str):
        raw = raw.split(",")
    units = []
    for u in raw or []:
        code = str(u).strip().upper()
        if code and code not in units:
            units.append(code)
    return tuple(units) or DEFAULT_UNITS


def persist_data_dir(data_dir_str: str) -> None:
    data_dir = Path(data_dir_str).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    cfg = data_dir / CONFIG_FILE_NAME
    payload = _load_persisted_settings(data_dir)
    payload["data_dir"] = str(data_dir)
    cfg.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    # Update session for immediate effect
    st.session_state[SESSION_DATA_DIR] = str(data_dir)


def load_settings(session_data_dir: Optional[str] = None, environ=None) -> Settings:
    # Priority order for the data directory:
    # 1) Session state (set via Data Management page)
    # 2) Environment variable
    # 3) Persisted settings in default folder
    # 4) Default folder
    environ = os.environ if environ is None else environ

    default_dir = _default_data_dir()
    persisted = _load_persisted_settings(default_dir)

    if session_data_dir:
        data_dir = Path(session_data_dir).expanduser().resolve()
    elif environ.get(ENV_DATA_DIR):
        data_dir = Path(environ[ENV_DATA_DIR]).expanduser().resolve()
    else:
        data_dir = Path(persisted.get("data_dir", default_dir)).expanduser().resolve()

    data_dir.mkdir(parents=True, exist_ok=True)
    if data_dir != default_dir.expanduser().resolve():
        persisted = {**persisted, **_load_persisted_settings(data_dir)}

    if environ.get(ENV_UNITS):
        units = _parse_units(environ[ENV_UNITS])
    else:
        units = _parse_units(persisted.get("units"))

    log_level = str(environ.get(ENV_LOG_LEVEL) or persisted.get("log_level") or "INFO").upper()

    return Settings(
        data_dir=data_dir,
        db_path=data_dir / "farmbook.db",
        units=units,
        log_level=log_level,
    )


@st.cache_resource
def get_settings() -> Settings:
    return load_settings(st.session_state.get(SESSION_DATA_DIR))
