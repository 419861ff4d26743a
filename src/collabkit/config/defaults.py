"""Default configuration schema for collabkit.

"""

from __future__ import annotations

from typing import Any, Dict

DEFAULT_CONFIG: Dict[str, Any] = {
    "api": {
        "base_url": "http://localhost:5000",
        "timeout": 20,
        "token": "",
        "token_env": "COLLABKIT_API_TOKEN",
    },
    "session": {
        "brand_id": "",
        "influencer_id": "",
    },
    "autosave": {
        "delay_s": 0.6,
        "saved_reset_s": 1.0,
    },
    "logging": {
        "dir": "logs",
        "level": "INFO",
    },
}
