"""Dotenv loading for project settings and secrets.

"""

from __future__ import annotations

import os
import re
from pathlib import Path

_SECRET_KEY_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*_(TOKEN|API_KEY|SECRET)$")


def load_dotenv_files(project_root: Path) -> None:
    """Load dotenv files.

    Only ``COLLABKIT_*`` keys and secret-looking keys (``*_TOKEN``,
    ``*_API_KEY``, ``*_SECRET``) are loaded. Variables already present in the
    environment are never overwritten.

    Args:
        project_root (Path): Directory holding the ``.env`` file.

    Returns:
        None: No value is returned.

    Side Effects / I/O:
        - Reads ``<project_root>/.env`` and mutates ``os.environ``.

    Examples:
        >>> from pathlib import Path
        >>> from collabkit.utils.env import load_dotenv_files
        >>> load_dotenv_files(Path("."))

    """
    _load_dotenv_file(project_root / ".env")


def _is_allowed_dotenv_key(key: str) -> bool:
    if key.startswith("COLLABKIT_"):
        return True
    return bool(_SECRET_KEY_PATTERN.match(key))


def _load_dotenv_file(path: Path) -> None:
    if not path.exists():
        return
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip("\"'")
        if key and _is_allowed_dotenv_key(key) and key not in os.environ:
            os.environ[key] = value
