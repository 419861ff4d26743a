"""Configuration loading and resolver helpers.

"""

from __future__ import annotations

import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from collabkit.config.defaults import DEFAULT_CONFIG
from collabkit.utils import deep_merge, parse_log_level

_ENV_OVERRIDES: Dict[str, Tuple[str, str]] = {
    "COLLABKIT_API_URL": ("api", "base_url"),
    "COLLABKIT_API_TIMEOUT": ("api", "timeout"),
    "COLLABKIT_BRAND_ID": ("session", "brand_id"),
    "COLLABKIT_INFLUENCER_ID": ("session", "influencer_id"),
    "COLLABKIT_AUTOSAVE_DELAY_S": ("autosave", "delay_s"),
    "COLLABKIT_LOG_LEVEL": ("logging", "level"),
}
LOGGER = logging.getLogger("collabkit.config")


def load_config(config_path: str | Path) -> Tuple[Dict[str, Any], Path, Path]:
    """Load config.

    Args:
        config_path (str | Path): Path to a YAML configuration file.

    Returns:
        Tuple[Dict[str, Any], Path, Path]: Normalized config, resolved config
        path and the project root (the config file's directory).

    Raises:
        FileNotFoundError: Raised when the config file does not exist.
        ValueError: Raised when the document is not a mapping or names an
            unknown top-level section.

    Side Effects / I/O:
        - Reads the config file and environment variables.

    Examples:
        >>> from collabkit.config.loader import load_config
        >>> cfg, path, root = load_config("config.yaml")

    """
    path = Path(config_path).expanduser().resolve()
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}

    if not isinstance(loaded, dict):
        raise ValueError("Config must be a YAML object.")
    _validate_sections(loaded)

    cfg = deep_merge(deepcopy(DEFAULT_CONFIG), loaded)
    _apply_env_overrides(cfg)
    _normalize_config(cfg)

    project_root = path.parent.resolve()
    return cfg, path, project_root


def _validate_sections(loaded: Dict[str, Any]) -> None:
    unknown = sorted(key for key in loaded if key not in DEFAULT_CONFIG)
    if unknown:
        raise ValueError(f"Unknown config section(s): {', '.join(unknown)}")
    for key, value in loaded.items():
        if value is not None and not isinstance(value, dict):
            raise ValueError(f"Config section `{key}` must be a mapping.")


def _apply_env_overrides(cfg: Dict[str, Any]) -> None:
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw is None or not raw.strip():
            continue
        section_cfg = cfg.get(section)
        if not isinstance(section_cfg, dict):
            section_cfg = {}
            cfg[section] = section_cfg
        section_cfg[key] = raw.strip()
        LOGGER.debug(f"[config] {section}.{key} overridden by {env_name}")

    api_cfg = cfg.get("api") or {}
    token_env = str(api_cfg.get("token_env") or "").strip()
    if token_env and not str(api_cfg.get("token") or "").strip():
        token = os.getenv(token_env, "")
        if token:
            api_cfg["token"] = token.strip()


def _normalize_config(cfg: Dict[str, Any]) -> None:
    for section in DEFAULT_CONFIG:
        if not isinstance(cfg.get(section), dict):
            cfg[section] = deepcopy(DEFAULT_CONFIG[section])

    api_cfg = cfg["api"]
    base_url = str(api_cfg.get("base_url") or "").strip().rstrip("/")
    if not base_url:
        raise ValueError("`api.base_url` must not be empty.")
    api_cfg["base_url"] = base_url
    api_cfg["timeout"] = _positive_float(api_cfg.get("timeout"), fallback=20.0)
    api_cfg["token"] = str(api_cfg.get("token") or "").strip()
    api_cfg["token_env"] = str(api_cfg.get("token_env") or "").strip()

    session_cfg = cfg["session"]
    session_cfg["brand_id"] = str(session_cfg.get("brand_id") or "").strip()
    session_cfg["influencer_id"] = str(session_cfg.get("influencer_id") or "").strip()

    autosave_cfg = cfg["autosave"]
    autosave_cfg["delay_s"] = _positive_float(autosave_cfg.get("delay_s"), fallback=0.6)
    autosave_cfg["saved_reset_s"] = _positive_float(autosave_cfg.get("saved_reset_s"), fallback=1.0)

    logging_cfg = cfg["logging"]
    logging_cfg["dir"] = str(logging_cfg.get("dir") or "logs").strip() or "logs"
    logging_cfg["level"] = str(logging_cfg.get("level") or "INFO").strip().upper() or "INFO"


def _positive_float(raw: Any, fallback: float) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return fallback
    return value if value > 0 else fallback


def resolve_api_settings(cfg: Dict[str, Any]) -> Dict[str, Any]:
    api_cfg = cfg.get("api") or {}
    return {
        "base_url": api_cfg.get("base_url", DEFAULT_CONFIG["api"]["base_url"]),
        "timeout": api_cfg.get("timeout", DEFAULT_CONFIG["api"]["timeout"]),
        "token": api_cfg.get("token", ""),
    }


def resolve_autosave_settings(cfg: Dict[str, Any]) -> Tuple[float, float]:
    autosave_cfg = cfg.get("autosave") or {}
    delay = _positive_float(autosave_cfg.get("delay_s"), fallback=0.6)
    saved_reset = _positive_float(autosave_cfg.get("saved_reset_s"), fallback=1.0)
    return delay, saved_reset


def resolve_log_level(cfg: Dict[str, Any]) -> int:
    return parse_log_level((cfg.get("logging") or {}).get("level"))


def resolve_logs_dir(cfg: Dict[str, Any], project_root: Path) -> Path:
    raw = Path(str((cfg.get("logging") or {}).get("dir") or "logs"))
    if raw.is_absolute():
        return raw
    return project_root / raw
