from collabkit.onboarding.autosave import AutosaveScheduler, AutosaveStatus
from collabkit.onboarding.wizard import SECTIONS, OnboardingWizard, default_sections

__all__ = [
    "AutosaveScheduler",
    "AutosaveStatus",
    "OnboardingWizard",
    "SECTIONS",
    "default_sections",
]
