from __future__ import annotations

import logging
from contextlib import suppress
from pathlib import Path
from typing import Dict


AREA_LOG_FILES: Dict[str, str] = {
    "collabkit.api": "api.log",
    "collabkit.config": "config.log",
    "collabkit.contract": "contract.log",
    "collabkit.onboarding": "onboarding.log",
    "collabkit.notify": "notify.log",
}
_FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(logs_dir: Path, level: int = logging.INFO) -> None:
    """Route the ``collabkit`` loggers to the console, ``run.log`` and one file per area.

    Calling it again with the same directory and level leaves the handlers in place.
    """
    logs_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger("collabkit")
    if getattr(root, "_collabkit_logging", None) == (str(logs_dir), level):
        return

    _close_handlers(root)
    root.setLevel(level)
    root.propagate = False

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(console_handler)
    root.addHandler(_file_handler(logs_dir / "run.log", level))

    for logger_name, filename in AREA_LOG_FILES.items():
        area_logger = logging.getLogger(logger_name)
        _close_handlers(area_logger)
        area_logger.setLevel(level)
        area_logger.propagate = True
        area_logger.addHandler(_file_handler(logs_dir / filename, level))

    root._collabkit_logging = (str(logs_dir), level)  # type: ignore[attr-defined]


def parse_log_level(raw: object, default: int = logging.INFO) -> int:
    if isinstance(raw, int):
        return raw
    name = str(raw or "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def _file_handler(path: Path, level: int) -> logging.FileHandler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    return handler


def _close_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        with suppress(Exception):
            handler.close()
