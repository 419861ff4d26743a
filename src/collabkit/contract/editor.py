from __future__ import annotations

import logging
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from collabkit.api import ApiClient, error_message
from collabkit.contract.fields import FieldRegistry
from collabkit.contract.payload import (
    PREVIEW_PATH,
    PlannedCall,
    Role,
    build_payload,
    build_sign_payload,
    pdf_filename,
)
from collabkit.notify import LoggingNotifier, Notifier, Toast
from collabkit.session import SessionContext

LOGGER = logging.getLogger("collabkit.contract")

_SAVED_TEXT = {
    Role.INFLUENCER: "Confirmation saved",
    Role.BRAND: "Brand updates saved",
}


@dataclass
class SaveResult:
    ok: bool
    notes_saved: Optional[bool] = None
    error: str = ""


class ContractEditor:
    """Load, edit, save, sign and export one contract for one role.

    Every public coroutine is an operation boundary: failures are logged and
    surfaced through the notifier instead of being raised.
    """

    def __init__(
        self,
        client: ApiClient,
        contract_id: str,
        role: Role | str,
        session: SessionContext,
        notifier: Optional[Notifier] = None,
        on_after_save: Optional[Callable[[], None]] = None,
        on_close: Optional[Callable[[], None]] = None,
    ) -> None:
        self.client = client
        self.contract_id = contract_id
        self.role = Role.parse(role)
        self.session = session
        self.notifier = notifier or LoggingNotifier()
        self.on_after_save = on_after_save
        self.on_close = on_close
        self.fields = FieldRegistry()
        self.html = ""
        self.closed = False

    async def load(self) -> str:
        try:
            data = await self.client.aget(
                PREVIEW_PATH,
                {"contractId": self.contract_id, "role": self.role.value, "editable": 1},
            )
        except Exception as err:
            LOGGER.error(f"[contract] preview load failed contract={self.contract_id}: {err}")
            self._toast("error", "Error", error_message(err, "Failed to load contract"))
            return ""
        self.html = str((data or {}).get("html") or "") if isinstance(data, dict) else ""
        self.fields = FieldRegistry.from_html(self.html)
        LOGGER.info(f"[contract] preview loaded contract={self.contract_id} fields={len(self.fields)}")
        return self.html

    async def save(self) -> SaveResult:
        try:
            payload = build_payload(
                self.fields.snapshot(),
                self.role,
                self.contract_id,
                brand_id=self.session.require_brand_id() if self.role is Role.BRAND else None,
            )
        except ValueError as err:
            return self._save_failed(err)

        notes_saved: Optional[bool] = None
        if payload.notes_call is not None:
            notes_saved = await self._send_notes(payload.notes_call)

        try:
            await self.client.apost(payload.main_call.path, payload.main_call.body)
            LOGGER.info(
                f"[contract] saved contract={self.contract_id} role={self.role.value} "
                f"endpoint={payload.main_call.path}"
            )
            self._toast("success", "Saved", _SAVED_TEXT[self.role])
            self._after_save()
        except Exception as err:
            result = self._save_failed(err)
            result.notes_saved = notes_saved
            return result
        return SaveResult(ok=True, notes_saved=notes_saved)

    async def sign(self) -> bool:
        try:
            call = build_sign_payload(self.fields.snapshot(), self.role, self.contract_id)
            await self.client.apost(call.path, call.body)
            LOGGER.info(f"[contract] signed contract={self.contract_id} role={self.role.value}")
            self._toast("success", "Signed", "Signature recorded")
            self._after_save()
            self.close()
        except Exception as err:
            LOGGER.error(f"[contract] sign failed contract={self.contract_id}: {err}")
            self._toast("error", "Sign error", error_message(err, "Failed to sign"))
            return False
        return True

    async def export_pdf(self, dest_dir: Path) -> Optional[Path]:
        target = Path(dest_dir) / pdf_filename(self.contract_id)
        tmp_target = target.with_name(target.name + ".tmp")
        try:
            content = await self.client.aget_bytes(PREVIEW_PATH, {"contractId": self.contract_id, "pdf": 1})
            target.parent.mkdir(parents=True, exist_ok=True)
            try:
                tmp_target.write_bytes(content)
                tmp_target.replace(target)
            finally:
                with suppress(FileNotFoundError):
                    tmp_target.unlink()
        except Exception as err:
            LOGGER.error(f"[contract] pdf export failed contract={self.contract_id}: {err}")
            self._toast("error", "PDF error", error_message(err, "Failed to generate PDF"))
            return None

        LOGGER.info(f"[contract] pdf exported contract={self.contract_id} path={target}")
        return target

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.on_close is not None:
            self.on_close()

    async def _send_notes(self, call: PlannedCall) -> bool:
        try:
            await self.client.apost(call.path, call.body)
        except Exception as err:
            LOGGER.error(f"[contract] notes update failed contract={self.contract_id}: {err}")
            self._toast("error", "Notes error", error_message(err, "Failed to save notes"))
            return False
        return True

    def _save_failed(self, err: Exception) -> SaveResult:
        message = error_message(err, "Failed to save")
        LOGGER.error(f"[contract] save failed contract={self.contract_id} role={self.role.value}: {message}")
        self._toast("error", "Save error", message)
        return SaveResult(ok=False, error=message)

    def _after_save(self) -> None:
        if self.on_after_save is not None:
            self.on_after_save()

    def _toast(self, icon: str, title: str, text: Optional[str] = None) -> None:
        self.notifier.show(Toast(icon=icon, title=title, text=text))
