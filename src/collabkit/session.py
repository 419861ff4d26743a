from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


class PreconditionError(ValueError):
    """A local requirement is missing; raised before any network call."""


@dataclass
class SessionContext:
    """Identity values resolved once at the session boundary."""

    brand_id: str = ""
    influencer_id: str = ""
    token: str = ""

    def require_brand_id(self) -> str:
        brand_id = (self.brand_id or "").strip()
        if not brand_id:
            raise PreconditionError("Missing brand id for this session.")
        return brand_id

    def clear_token(self) -> None:
        self.token = ""


def build_session(cfg: Dict[str, Any]) -> SessionContext:
    session_cfg = cfg.get("session") or {}
    api_cfg = cfg.get("api") or {}
    return SessionContext(
        brand_id=str(session_cfg.get("brand_id") or "").strip(),
        influencer_id=str(session_cfg.get("influencer_id") or "").strip(),
        token=str(api_cfg.get("token") or "").strip(),
    )
