from __future__ import annotations

import asyncio
from typing import Any, List

from collabkit.onboarding.autosave import AutosaveScheduler, AutosaveStatus

DELAY = 0.02
SAVED_RESET = 0.05
SETTLE = 0.1


class _Recorder:
    def __init__(self, fail: bool = False) -> None:
        self.values: List[Any] = []
        self.fail = fail

    async def __call__(self, value: Any) -> None:
        self.values.append(value)
        if self.fail:
            raise RuntimeError("backend down")


def test_first_observed_value_is_never_persisted() -> None:
    recorder = _Recorder()

    async def _run() -> None:
        scheduler = AutosaveScheduler(recorder, delay=DELAY, saved_reset=SAVED_RESET)
        assert scheduler.observe({"a": 1}) is AutosaveStatus.IDLE
        await asyncio.sleep(SETTLE)
        assert scheduler.status is AutosaveStatus.IDLE

    asyncio.run(_run())
    assert recorder.values == []


def test_rapid_changes_collapse_into_one_save_with_final_value() -> None:
    recorder = _Recorder()

    async def _run() -> None:
        scheduler = AutosaveScheduler(recorder, delay=DELAY, saved_reset=SAVED_RESET)
        scheduler.observe({"a": 0})
        for value in (1, 2, 3):
            assert scheduler.observe({"a": value}) is AutosaveStatus.SAVING
        await asyncio.sleep(SETTLE)

    asyncio.run(_run())
    assert recorder.values == [{"a": 3}]


def test_structurally_equal_value_is_not_a_change() -> None:
    recorder = _Recorder()

    async def _run() -> None:
        scheduler = AutosaveScheduler(recorder, delay=DELAY, saved_reset=SAVED_RESET)
        scheduler.observe({"a": [1, 2], "b": {"c": "x"}})
        assert scheduler.observe({"b": {"c": "x"}, "a": [1, 2]}) is AutosaveStatus.IDLE
        assert not scheduler.pending
        await asyncio.sleep(SETTLE)

    asyncio.run(_run())
    assert recorder.values == []


def test_in_place_mutation_is_detected() -> None:
    recorder = _Recorder()

    async def _run() -> None:
        scheduler = AutosaveScheduler(recorder, delay=DELAY, saved_reset=SAVED_RESET)
        state = {"formats": []}
        scheduler.observe(state)
        state["formats"].append("Stories")
        assert scheduler.observe(state) is AutosaveStatus.SAVING
        state["formats"].append("Live")
        scheduler.observe(state)
        await asyncio.sleep(SETTLE)

    asyncio.run(_run())
    assert recorder.values == [{"formats": ["Stories", "Live"]}]


def test_success_moves_saving_saved_idle() -> None:
    recorder = _Recorder()
    history: List[AutosaveStatus] = []

    async def _run() -> AutosaveStatus:
        scheduler = AutosaveScheduler(
            recorder, delay=DELAY, saved_reset=SAVED_RESET, on_status=history.append
        )
        scheduler.observe({"a": 1})
        scheduler.observe({"a": 2})
        await asyncio.sleep(DELAY + SAVED_RESET + SETTLE)
        return scheduler.status

    final = asyncio.run(_run())
    assert history == [AutosaveStatus.SAVING, AutosaveStatus.SAVED, AutosaveStatus.IDLE]
    assert final is AutosaveStatus.IDLE


def test_failure_is_sticky_until_next_change() -> None:
    recorder = _Recorder(fail=True)

    async def _run() -> None:
        scheduler = AutosaveScheduler(recorder, delay=DELAY, saved_reset=SAVED_RESET)
        scheduler.observe({"a": 1})
        scheduler.observe({"a": 2})
        await asyncio.sleep(SETTLE)
        assert scheduler.status is AutosaveStatus.ERROR
        await asyncio.sleep(SAVED_RESET + SETTLE)
        assert scheduler.status is AutosaveStatus.ERROR

        assert scheduler.observe({"a": 3}) is AutosaveStatus.SAVING
        scheduler.close()

    asyncio.run(_run())
    assert recorder.values == [{"a": 2}]


def test_close_cancels_pending_save_and_returns_to_idle() -> None:
    recorder = _Recorder()

    async def _run() -> None:
        scheduler = AutosaveScheduler(recorder, delay=DELAY, saved_reset=SAVED_RESET)
        scheduler.observe({"a": 1})
        assert scheduler.observe({"a": 2}) is AutosaveStatus.SAVING
        scheduler.close()
        assert scheduler.status is AutosaveStatus.IDLE
        await asyncio.sleep(SETTLE)
        assert scheduler.status is AutosaveStatus.IDLE
        assert scheduler.observe({"a": 3}) is AutosaveStatus.IDLE
        assert not scheduler.pending

    asyncio.run(_run())
    assert recorder.values == []


def test_independent_instances_do_not_share_timers_or_status() -> None:
    first = _Recorder()
    second = _Recorder(fail=True)

    async def _run() -> None:
        one = AutosaveScheduler(first, delay=DELAY, saved_reset=SAVED_RESET)
        two = AutosaveScheduler(second, delay=DELAY, saved_reset=SAVED_RESET)
        one.observe({"x": 1})
        two.observe({"y": 1})
        one.observe({"x": 2})
        await asyncio.sleep(SETTLE)
        assert one.status is not AutosaveStatus.ERROR
        assert two.status is AutosaveStatus.IDLE

    asyncio.run(_run())
    assert first.values == [{"x": 2}]
    assert second.values == []


def test_stale_save_completion_does_not_override_newer_status() -> None:
    gate = None
    values: List[Any] = []

    async def persist(value: Any) -> None:
        values.append(value)
        if value == {"a": 1}:
            await gate.wait()
            raise RuntimeError("slow request finally failed")

    async def _run() -> None:
        nonlocal gate
        gate = asyncio.Event()
        scheduler = AutosaveScheduler(persist, delay=DELAY, saved_reset=10.0)
        scheduler.observe({"a": 0})
        scheduler.observe({"a": 1})
        await asyncio.sleep(SETTLE)
        scheduler.observe({"a": 2})
        await asyncio.sleep(SETTLE)
        assert scheduler.status is AutosaveStatus.SAVED

        gate.set()
        await asyncio.sleep(SETTLE)
        assert scheduler.status is AutosaveStatus.SAVED
        scheduler.close()

    asyncio.run(_run())
    assert values == [{"a": 1}, {"a": 2}]


def test_flush_fires_pending_save_immediately() -> None:
    recorder = _Recorder()

    async def _run() -> None:
        scheduler = AutosaveScheduler(recorder, delay=10.0, saved_reset=SAVED_RESET)
        scheduler.observe({"a": 1})
        scheduler.observe({"a": 2})
        await scheduler.flush()
        assert scheduler.status is AutosaveStatus.SAVED
        scheduler.close()

    asyncio.run(_run())
    assert recorder.values == [{"a": 2}]


def test_save_finishing_after_close_leaves_status_idle() -> None:
    gate = None
    values: List[Any] = []

    async def persist(value: Any) -> None:
        values.append(value)
        await gate.wait()

    async def _run() -> None:
        nonlocal gate
        gate = asyncio.Event()
        scheduler = AutosaveScheduler(persist, delay=DELAY, saved_reset=SAVED_RESET)
        scheduler.observe({"a": 0})
        scheduler.observe({"a": 1})
        await asyncio.sleep(SETTLE)
        scheduler.close()
        gate.set()
        await asyncio.sleep(SETTLE)
        assert scheduler.status is AutosaveStatus.IDLE

    asyncio.run(_run())
    assert values == [{"a": 1}]


def test_close_keeps_error_status() -> None:
    async def _run() -> None:
        scheduler = AutosaveScheduler(_Recorder(fail=True), delay=DELAY, saved_reset=SAVED_RESET)
        scheduler.observe({"a": 1})
        scheduler.observe({"a": 2})
        await asyncio.sleep(SETTLE)
        scheduler.close()
        assert scheduler.status is AutosaveStatus.ERROR

    asyncio.run(_run())
