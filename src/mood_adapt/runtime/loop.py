"""Async decision loop — drives the core on two independent schedules.

The core is synchronous and not safe for concurrent use.  The
``DecisionLoop`` is the single owner that serialises every call into it:

- a sensor-poll schedule (default every 1 s) fetches readings and fuses them;
- a decision schedule (default every 5 s) smooths the recent mood, builds a
  :class:`Context` and runs one decision cycle;
- feedback and ad-hoc calls from other tasks (e.g. the HTTP API) go through
  the same :class:`asyncio.Lock`.

Once :meth:`stop` is requested no new cycle is started.

Integration::

    loop = DecisionLoop(core, sensor_source=read_sensors, context_provider=build_context)
    task = asyncio.create_task(loop.start())
    ...
    await loop.stop()
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Sequence

import structlog

from mood_adapt.core import MoodAdaptCore
from mood_adapt.fusion.models import ChannelReading, MoodTrend
from mood_adapt.learning.models import Feedback
from mood_adapt.models import ChannelEstimate, Context, Decision, MoodState

logger = structlog.get_logger(__name__)

SensorSource = Callable[[], Awaitable[Sequence[ChannelReading | ChannelEstimate | None]]]
ContextProvider = Callable[[MoodState], Context]
DecisionSink = Callable[[Decision], Awaitable[None]]


def _default_context(mood: MoodState) -> Context:
    return Context(mood_state=mood)


class DecisionLoop:
    """Serialised gateway and scheduler around a :class:`MoodAdaptCore`.

    Parameters
    ----------
    core : MoodAdaptCore
        The core to drive.
    sensor_source : SensorSource | None
        Async callable returning the latest channel readings.  Without it
        the poll schedule is not run.
    context_provider : ContextProvider | None
        Builds the decision context from the smoothed mood.
    on_decision : DecisionSink | None
        Async callback receiving every decision (e.g. the UI bridge).
    poll_interval, decision_interval : float
        Schedule periods in seconds.
    """

    def __init__(
        self,
        core: MoodAdaptCore,
        sensor_source: SensorSource | None = None,
        context_provider: ContextProvider | None = None,
        on_decision: DecisionSink | None = None,
        poll_interval: float = 1.0,
        decision_interval: float = 5.0,
    ) -> None:
        self._core = core
        self._sensor_source = sensor_source
        self._context_provider = context_provider or _default_context
        self._on_decision = on_decision
        self._poll_interval = poll_interval
        self._decision_interval = decision_interval

        self._lock = asyncio.Lock()
        self._running = False
        self._stopping = False
        self._tasks: list[asyncio.Task] = []
        self._stats = {"polls": 0, "decisions": 0, "feedback": 0, "errors": 0}

    @property
    def core(self) -> MoodAdaptCore:
        return self._core

    # ── Serialised core access ────────────────────────────────

    async def fuse(self, readings: Sequence[ChannelReading | ChannelEstimate | None]) -> MoodState:
        async with self._lock:
            return self._core.fuse(readings)

    async def decide(self, context: Context) -> Decision:
        async with self._lock:
            decision = self._core.decide(context)
        self._stats["decisions"] += 1
        return decision

    async def apply_feedback(self, record_id: str, feedback: Feedback) -> bool:
        async with self._lock:
            applied = self._core.apply_feedback(record_id, feedback)
        self._stats["feedback"] += 1
        return applied

    async def current_mood(self, window_seconds: float | None = None) -> MoodState:
        async with self._lock:
            return self._core.current_mood(window_seconds)

    async def mood_trends(self, minutes: float | None = None) -> MoodTrend | None:
        async with self._lock:
            return self._core.mood_trends(minutes)

    # ── Scheduled cycles ─────────────────────────────────────

    async def poll_once(self) -> MoodState | None:
        """Fetch readings and fuse them; ``None`` when stopping or unsourced."""
        if self._stopping or self._sensor_source is None:
            return None
        readings = await self._sensor_source()
        state = await self.fuse(readings)
        self._stats["polls"] += 1
        return state

    async def decide_once(self) -> Decision | None:
        """Run one decision cycle on the smoothed mood; ``None`` when stopping."""
        if self._stopping:
            return None
        mood = await self.current_mood()
        decision = await self.decide(self._context_provider(mood))
        if self._on_decision is not None:
            await self._on_decision(decision)
        return decision

    async def _every(self, interval: float, step: Callable[[], Awaitable[Any]], name: str) -> None:
        while self._running and not self._stopping:
            try:
                await step()
            except Exception as exc:
                self._stats["errors"] += 1
                logger.error("decision_loop.step_failed", step=name, error=str(exc))
            await asyncio.sleep(interval)

    # ── Lifecycle ─────────────────────────────────────────────

    async def start(self) -> None:
        """Run both schedules until :meth:`stop` (run as a background task)."""
        self._running = True
        self._stopping = False
        logger.info(
            "decision_loop.started",
            poll_interval=self._poll_interval,
            decision_interval=self._decision_interval,
        )
        if self._sensor_source is not None:
            self._tasks.append(
                asyncio.create_task(self._every(self._poll_interval, self.poll_once, "poll"))
            )
        self._tasks.append(
            asyncio.create_task(self._every(self._decision_interval, self.decide_once, "decide"))
        )
        try:
            await asyncio.gather(*self._tasks)
        except asyncio.CancelledError:
            pass
        finally:
            self._running = False

    async def stop(self) -> None:
        self._stopping = True
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        self._running = False
        logger.info("decision_loop.stopped", **self._stats)

    @property
    def running(self) -> bool:
        return self._running

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)
