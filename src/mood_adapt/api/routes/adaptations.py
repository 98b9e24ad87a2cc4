"""Adaptation decision, feedback and rule routes."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Request

from mood_adapt.api.deps import get_loop
from mood_adapt.api.schemas import DecideRequest, FeedbackResponse
from mood_adapt.learning.models import Feedback
from mood_adapt.models import Context

router = APIRouter(tags=["adaptations"])


@router.post("/adaptations/decide")
async def decide(req: DecideRequest, request: Request):
    """Run one decision cycle and return the selected candidates.

    The returned ``record_id`` identifies the decision for later feedback.
    """
    loop = get_loop(request)
    mood = req.mood_state or await loop.current_mood()
    context = Context(
        mood_state=mood,
        user_profile=req.user_profile,
        current_url=req.current_url,
        page_category=req.page_category,
        interactions=req.interactions,
        device=req.device,
        timestamp=req.timestamp or datetime.now(),
    )
    decision = await loop.decide(context)
    return decision.model_dump(mode="json")


@router.post("/feedback/{record_id}", response_model=FeedbackResponse)
async def submit_feedback(record_id: str, feedback: Feedback, request: Request):
    """Attach user feedback to a previous decision.

    Unknown or already-answered records are accepted and ignored
    (``applied: false``): feedback may legitimately arrive after the
    record was evicted.
    """
    loop = get_loop(request)
    applied = await loop.apply_feedback(record_id, feedback)
    return FeedbackResponse(record_id=record_id, applied=applied)


@router.get("/rules")
async def list_rules(request: Request):
    """Return the active adaptation rules."""
    loop = get_loop(request)
    return [r.model_dump(mode="json") for r in loop.core.rule_table.list_rules()]


@router.get("/ledger/stats")
async def ledger_stats(request: Request):
    """Summary counters of the feedback ledger."""
    loop = get_loop(request)
    return loop.core.ledger.stats()
