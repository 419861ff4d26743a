"""Request planning for the contract-editor save and sign flows.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from collabkit.contract.paths import PathTree, build_tree
from collabkit.session import PreconditionError

CONFIRM_PATH = "/contract/influencerConfirm"
RESEND_PATH = "/contract/resend"
NOTES_PATH = "/contract/update-notes"
SIGN_PATH = "/contract/sign"
PREVIEW_PATH = "/contract/preview"


class Role(str, Enum):
    INFLUENCER = "influencer"
    BRAND = "brand"

    @property
    def namespace(self) -> str:
        return "purple" if self is Role.INFLUENCER else "yellow"

    @classmethod
    def parse(cls, raw: "Role | str") -> "Role":
        if isinstance(raw, Role):
            return raw
        text = str(raw or "").strip().lower()
        for role in cls:
            if role.value == text:
                return role
        raise ValueError(f"Unknown contract role: {raw!r} (expected 'influencer' or 'brand').")


@dataclass(frozen=True)
class PlannedCall:
    path: str
    body: Dict[str, Any]


@dataclass(frozen=True)
class ContractPayload:
    main_call: PlannedCall
    notes_call: Optional[PlannedCall] = None


def notes_key(role: Role) -> str:
    return f"additionalNotes.{role.value}"


def pdf_filename(contract_id: str) -> str:
    return f"Contract-{contract_id}.pdf"


def build_payload(
    snapshot: Mapping[str, str],
    role: Role | str,
    contract_id: str,
    brand_id: Optional[str] = None,
) -> ContractPayload:
    """Plan the notes and main calls for one save of the contract editor.

    Args:
        snapshot (Mapping[str, str]): Flat dotted key -> value field snapshot.
        role (Role | str): Active role; selects the ``purple`` or ``yellow``
            namespace and the main endpoint.
        contract_id (str): Contract being edited.
        brand_id (Optional[str]): Session brand id, required for the brand role.

    Returns:
        ContractPayload: The main call and, when ``additionalNotes.<role>`` is
        present in the snapshot (even as ``""``), the notes call.

    Raises:
        PreconditionError: Raised when ``contract_id`` is empty, or when the
            brand role has no ``brand_id``.
        ValueError: Raised for an unknown role.

    Examples:
        >>> from collabkit.contract.payload import build_payload
        >>> build_payload({"purple.profile.name": "Ada"}, "influencer", "C1").main_call.body
        {'contractId': 'C1', 'purple': {'profile': {'name': 'Ada'}}, 'type': 1}

    """
    active = Role.parse(role)
    contract_id = _require_contract_id(contract_id)
    tree: PathTree = build_tree(snapshot, active.namespace)

    if active is Role.INFLUENCER:
        main_call = PlannedCall(
            path=CONFIRM_PATH,
            body={"contractId": contract_id, "purple": tree, "type": 1},
        )
    else:
        resolved_brand_id = str(brand_id or "").strip()
        if not resolved_brand_id:
            raise PreconditionError("Missing brand id; cannot save brand contract updates.")
        main_call = PlannedCall(
            path=RESEND_PATH,
            body={"contractId": contract_id, "brandId": resolved_brand_id, "yellowUpdates": tree},
        )

    notes_call = None
    key = notes_key(active)
    if key in snapshot:
        notes_call = PlannedCall(
            path=NOTES_PATH,
            body={"contractId": contract_id, "notes": {active.value: snapshot[key]}},
        )
    return ContractPayload(main_call=main_call, notes_call=notes_call)


def build_sign_payload(snapshot: Mapping[str, str], role: Role | str, contract_id: str) -> PlannedCall:
    active = Role.parse(role)
    contract_id = _require_contract_id(contract_id)
    body: Dict[str, Any] = {"contractId": contract_id, "role": active.value}
    for field in ("name", "email"):
        value = str(snapshot.get(f"sign.{active.value}.{field}") or "").strip()
        if value:
            body[field] = value
    return PlannedCall(path=SIGN_PATH, body=body)


def _require_contract_id(contract_id: str) -> str:
    resolved = str(contract_id or "").strip()
    if not resolved:
        raise PreconditionError("Missing contract id.")
    return resolved
