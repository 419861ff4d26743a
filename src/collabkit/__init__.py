"""Public package entrypoints for collabkit.

Contract-editor field merging and onboarding autosave for the brand/influencer
collaboration client.
"""

from __future__ import annotations

from collabkit.contract import ContractEditor, FieldRegistry, Role, build_payload, build_sign_payload, collect_fields
from collabkit.onboarding import AutosaveScheduler, AutosaveStatus, OnboardingWizard

__all__ = [
    "ContractEditor",
    "FieldRegistry",
    "Role",
    "build_payload",
    "build_sign_payload",
    "collect_fields",
    "AutosaveScheduler",
    "AutosaveStatus",
    "OnboardingWizard",
]
__version__ = "0.1.0"
