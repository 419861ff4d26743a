from collabkit.contract.editor import ContractEditor, SaveResult
from collabkit.contract.fields import FieldRegistry, collect_fields
from collabkit.contract.paths import FieldSnapshot, PathTree, build_tree, coerce_phone, coerce_value
from collabkit.contract.payload import (
    ContractPayload,
    PlannedCall,
    Role,
    build_payload,
    build_sign_payload,
    pdf_filename,
)

__all__ = [
    "ContractEditor",
    "SaveResult",
    "FieldRegistry",
    "collect_fields",
    "FieldSnapshot",
    "PathTree",
    "build_tree",
    "coerce_phone",
    "coerce_value",
    "ContractPayload",
    "PlannedCall",
    "Role",
    "build_payload",
    "build_sign_payload",
    "pdf_filename",
]
