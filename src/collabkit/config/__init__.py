from collabkit.config.defaults import DEFAULT_CONFIG
from collabkit.config.loader import (
    load_config,
    resolve_api_settings,
    resolve_autosave_settings,
    resolve_log_level,
    resolve_logs_dir,
)

__all__ = [
    "DEFAULT_CONFIG",
    "load_config",
    "resolve_api_settings",
    "resolve_autosave_settings",
    "resolve_log_level",
    "resolve_logs_dir",
]
