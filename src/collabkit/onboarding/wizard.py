from __future__ import annotations

import logging
from typing import Any, Dict, List

from collabkit.api import ApiClient
from collabkit.config import resolve_autosave_settings
from collabkit.onboarding.autosave import (
    DEFAULT_DELAY_S,
    DEFAULT_SAVED_RESET_S,
    AutosaveScheduler,
    AutosaveStatus,
)
from collabkit.session import PreconditionError, SessionContext

LOGGER = logging.getLogger("collabkit.onboarding")

ONBOARDING_SAVE_PATH = "/influencer/onboarding/save"
SECTIONS = ("round1", "round2", "round3")

FORMATS = ["Reels/Shorts", "Stories", "Static", "Long-form", "Tutorials", "Live", "Reviews", "Unboxing"]
BUDGETS = ["₹5k–10k", "₹10k–25k", "₹25k–50k", "₹50k–1L", "₹1L+"]
PROJECT_LENGTHS = ["One-off (<2 wks)", "Short (2–8 wks)", "Long-term (3–6 m)", "Retainer (6+ m)"]
CAPACITIES = ["Light", "Normal", "Heavy"]
NICHES = ["Beauty", "Fashion", "Tech", "Fitness", "Travel", "Lifestyle", "Gaming", "Food", "Art", "Music"]
COLLAB_TYPES = ["Paid", "Product Gifting", "Ambassador", "Event"]
CADENCES = ["Single Deliverable", "Weekly Series", "Always-on"]
STORY_GROUPS: Dict[str, List[str]] = {
    "Content": [
        "What’s one thing your content always delivers—no exceptions?",
        "What’s your why—the thing that fuels your creativity?",
        "How do you stay real when the internet loves perfect?",
    ],
    "Audience": [
        "What’s one product your audience still thanks you for recommending?",
        "What’s one topic your followers can’t get enough of?",
        "How do you hope your audience feels after every post?",
    ],
    "Brand": [
        "What makes a brand an instant yes for you?",
        "What’s been your most unexpected collab—and why did it click?",
        "What’s one thing you won’t compromise on in a partnership?",
    ],
}

MAX_NICHES = 5
MAX_STORY_PROMPTS = 3
LAST_STEP = 3


def default_sections() -> Dict[str, Dict[str, Any]]:
    return {
        "round1": {"formats": [], "budgets": {}},
        "round2": {"niches": [], "industries": [], "collabs": [], "cadence": []},
        "round3": {"selected": []},
    }


def _require_option(value: str, options: List[str], label: str) -> None:
    if value not in options:
        raise ValueError(f"Unknown {label}: {value!r}")


def _toggle(items: List[str], value: str) -> None:
    if value in items:
        items.remove(value)
    else:
        items.append(value)


class OnboardingWizard:
    """Three-step influencer onboarding with per-section autosave.

    Mutations must happen inside a running event loop; each section owns
    an independent ``AutosaveScheduler`` that posts to the onboarding endpoint.
    """

    def __init__(
        self,
        client: ApiClient,
        influencer_id: str,
        delay: float = DEFAULT_DELAY_S,
        saved_reset: float = DEFAULT_SAVED_RESET_S,
    ) -> None:
        if not str(influencer_id or "").strip():
            raise PreconditionError("Missing influencer id; onboarding cannot be saved.")
        self.client = client
        self.influencer_id = str(influencer_id).strip()
        self.step = 1
        self.sections = default_sections()
        self.schedulers: Dict[str, AutosaveScheduler] = {}
        for section in SECTIONS:
            scheduler = AutosaveScheduler(
                self._persist_for(section),
                delay=delay,
                saved_reset=saved_reset,
                name=section,
            )
            scheduler.observe(self.sections[section])
            self.schedulers[section] = scheduler
        LOGGER.info(f"[onboarding] wizard ready influencer={self.influencer_id} delay={delay}s")

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], client: ApiClient, session: SessionContext) -> "OnboardingWizard":
        delay, saved_reset = resolve_autosave_settings(cfg)
        return cls(client, session.influencer_id, delay=delay, saved_reset=saved_reset)

    @property
    def round1(self) -> Dict[str, Any]:
        return self.sections["round1"]

    @property
    def round2(self) -> Dict[str, Any]:
        return self.sections["round2"]

    @property
    def round3(self) -> Dict[str, Any]:
        return self.sections["round3"]

    def status(self, section: str) -> AutosaveStatus:
        return self._scheduler(section).status

    def toggle_format(self, fmt: str) -> None:
        _require_option(fmt, FORMATS, "format")
        round1 = self.round1
        if fmt in round1["formats"]:
            round1["formats"].remove(fmt)
            round1["budgets"].pop(fmt, None)
        else:
            round1["formats"].append(fmt)
        self._changed("round1")

    def set_budget(self, fmt: str, budget: str) -> None:
        _require_option(budget, BUDGETS, "budget")
        if fmt not in self.round1["formats"]:
            raise ValueError(f"Format {fmt!r} is not selected.")
        self.round1["budgets"][fmt] = budget
        self._changed("round1")

    def set_project_length(self, value: str) -> None:
        _require_option(value, PROJECT_LENGTHS, "project length")
        self.round1["projectLength"] = value
        self._changed("round1")

    def set_capacity(self, value: str) -> None:
        _require_option(value, CAPACITIES, "capacity")
        self.round1["capacity"] = value
        self._changed("round1")

    def toggle_niche(self, niche: str) -> None:
        _require_option(niche, NICHES, "niche")
        niches = self.round2["niches"]
        if niche not in niches and len(niches) >= MAX_NICHES:
            return
        _toggle(niches, niche)
        self._changed("round2")

    def set_industries(self, text: str) -> None:
        self.round2["industries"] = [part.strip() for part in (text or "").split(",") if part.strip()]
        self._changed("round2")

    def toggle_collab(self, collab: str) -> None:
        _require_option(collab, COLLAB_TYPES, "collab type")
        _toggle(self.round2["collabs"], collab)
        self._changed("round2")

    def toggle_cadence(self, cadence: str) -> None:
        _require_option(cadence, CADENCES, "cadence")
        _toggle(self.round2["cadence"], cadence)
        self._changed("round2")

    def toggle_story_prompt(self, group: str, prompt: str) -> None:
        if group not in STORY_GROUPS:
            raise ValueError(f"Unknown story group: {group!r}")
        _require_option(prompt, STORY_GROUPS[group], "story prompt")
        selected = self.round3["selected"]
        for entry in selected:
            if entry["prompt"] == prompt:
                selected.remove(entry)
                self._changed("round3")
                return
        if len(selected) >= MAX_STORY_PROMPTS:
            return
        if any(entry["group"] == group for entry in selected):
            return
        selected.append({"group": group, "prompt": prompt})
        self._changed("round3")

    def can_advance(self, step: int) -> bool:
        if step == 1:
            round1 = self.round1
            return (
                bool(round1["formats"])
                and bool(round1.get("projectLength"))
                and bool(round1.get("capacity"))
                and all(round1["budgets"].get(fmt) for fmt in round1["formats"])
            )
        if step == 2:
            round2 = self.round2
            return bool(round2["niches"]) and bool(round2["industries"]) and bool(round2["collabs"])
        return True

    def next_step(self) -> int:
        if self.step >= LAST_STEP:
            return self.step
        if not self.can_advance(self.step):
            raise ValueError(f"Step {self.step} is incomplete.")
        self.step += 1
        return self.step

    async def finish(self) -> Dict[str, AutosaveStatus]:
        for scheduler in self.schedulers.values():
            await scheduler.flush()
        return {section: self.status(section) for section in SECTIONS}

    def close(self) -> None:
        for scheduler in self.schedulers.values():
            scheduler.close()

    def _scheduler(self, section: str) -> AutosaveScheduler:
        if section not in self.schedulers:
            raise ValueError(f"Unknown onboarding section: {section!r}")
        return self.schedulers[section]

    def _changed(self, section: str) -> None:
        self._scheduler(section).observe(self.sections[section])

    def _persist_for(self, section: str):
        async def _persist(value: Any) -> None:
            await self.client.apost(
                ONBOARDING_SAVE_PATH,
                {"influencerId": self.influencer_id, "section": section, "payload": value},
            )

        return _persist
