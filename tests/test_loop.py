"""Tests for the async decision loop."""

import asyncio

import pytest

from mood_adapt.fusion.models import PulseReading
from mood_adapt.learning.models import Feedback
from mood_adapt.models import Context, Mood
from mood_adapt.runtime.loop import DecisionLoop


async def _stressed_sensors():
    return [PulseReading(bpm=115, variability=20)]


@pytest.mark.asyncio
async def test_poll_and_decide_once(core):
    decisions = []

    async def sink(decision):
        decisions.append(decision)

    loop = DecisionLoop(core, sensor_source=_stressed_sensors, on_decision=sink)
    state = await loop.poll_once()
    assert state.primary_mood == Mood.STRESSED

    decision = await loop.decide_once()
    assert decisions == [decision]
    assert any(c.rule_name == "stress_reduction" for c in decision.selected)
    assert loop.stats["polls"] == 1
    assert loop.stats["decisions"] == 1


@pytest.mark.asyncio
async def test_poll_without_source_is_noop(core):
    loop = DecisionLoop(core)
    assert await loop.poll_once() is None
    assert core.fusion.history == []


@pytest.mark.asyncio
async def test_feedback_goes_through_loop(core, stressed_context):
    loop = DecisionLoop(core)
    decision = await loop.decide(stressed_context)
    assert await loop.apply_feedback(decision.record_id, Feedback(positive=True))
    assert await loop.apply_feedback(decision.record_id, Feedback(positive=True)) is False
    assert loop.stats["feedback"] == 2


@pytest.mark.asyncio
async def test_concurrent_callers_are_serialised(core, stressed_context):
    loop = DecisionLoop(core)
    decisions = await asyncio.gather(*(loop.decide(stressed_context) for _ in range(20)))
    results = await asyncio.gather(
        *(loop.apply_feedback(d.record_id, Feedback(positive=True)) for d in decisions)
    )
    assert all(results)
    assert core.ledger.stats()["answered"] == 20


@pytest.mark.asyncio
async def test_schedules_run_until_stopped(core):
    contexts = []

    def provider(mood):
        contexts.append(mood)
        return Context(mood_state=mood)

    loop = DecisionLoop(
        core,
        sensor_source=_stressed_sensors,
        context_provider=provider,
        poll_interval=0.01,
        decision_interval=0.02,
    )
    task = asyncio.create_task(loop.start())
    await asyncio.sleep(0.1)
    assert loop.running
    await loop.stop()
    await task

    assert not loop.running
    assert loop.stats["polls"] >= 1
    assert loop.stats["decisions"] >= 1
    assert contexts

    # No new cycle once stopped.
    assert await loop.poll_once() is None
    assert await loop.decide_once() is None


@pytest.mark.asyncio
async def test_failing_step_is_counted(core):
    async def broken():
        raise ConnectionError("bridge down")

    loop = DecisionLoop(core, sensor_source=broken, poll_interval=0.01, decision_interval=10)
    task = asyncio.create_task(loop.start())
    await asyncio.sleep(0.05)
    await loop.stop()
    await task
    assert loop.stats["errors"] >= 1
