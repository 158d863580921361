"""Runtime settings resolved from arguments, environment and config.toml."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional


DEFAULT_SESSIONS_DIR = "sessions"
DEFAULT_POLL_TIMEOUT = 15.0
DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_AGENT_TIMEOUT = 5.0
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    sessions_dir: str = DEFAULT_SESSIONS_DIR
    poll_timeout_seconds: float = DEFAULT_POLL_TIMEOUT
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL
    agent_timeout_seconds: float = DEFAULT_AGENT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL


def _load_config(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        return {}
    return tomllib.loads(config_path.read_text(encoding="utf-8"))


def _pick(env_name: str, config_value: Any, default: Any) -> Any:
    value = os.environ.get(env_name)
    if value is not None and value != "":
        return value
    if config_value is not None:
        return config_value
    return default


def load_settings(config_path: Optional[str] = None, sessions_dir: Optional[str] = None) -> Settings:
    """Build settings; explicit arguments win over TURN_GAMES_* variables,
    which win over config.toml, which wins over the defaults."""
    config = _load_config(Path(config_path or "config.toml"))
    storage = config.get("storage", {})
    polling = config.get("polling", {})
    agent = config.get("agent", {})
    logging_section = config.get("logging", {})

    return Settings(
        sessions_dir=sessions_dir
        or str(_pick("TURN_GAMES_SESSIONS_DIR", storage.get("sessions_dir"), DEFAULT_SESSIONS_DIR)),
        poll_timeout_seconds=float(
            _pick("TURN_GAMES_POLL_TIMEOUT", polling.get("timeout_seconds"), DEFAULT_POLL_TIMEOUT)
        ),
        poll_interval_seconds=float(
            _pick("TURN_GAMES_POLL_INTERVAL", polling.get("interval_seconds"), DEFAULT_POLL_INTERVAL)
        ),
        agent_timeout_seconds=float(
            _pick("TURN_GAMES_AGENT_TIMEOUT", agent.get("timeout_seconds"), DEFAULT_AGENT_TIMEOUT)
        ),
        log_level=str(_pick("TURN_GAMES_LOG_LEVEL", logging_section.get("level"), DEFAULT_LOG_LEVEL)).upper(),
    )
