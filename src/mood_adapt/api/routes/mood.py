"""Mood fusion and query routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Request

from mood_adapt.api.deps import get_loop
from mood_adapt.api.schemas import FuseRequest

router = APIRouter(tags=["mood"])


@router.post("/mood/readings")
async def fuse_readings(req: FuseRequest, request: Request):
    """Fuse one batch of channel readings into a mood state.

    Missing or zero-confidence channels are ignored; an empty batch yields
    the neutral state with confidence 0.
    """
    loop = get_loop(request)
    state = await loop.fuse(req.readings)
    return state.model_dump(mode="json")


@router.get("/mood/current")
async def current_mood(
    request: Request,
    window_seconds: float | None = Query(None, gt=0, le=3600),
):
    """Confidence-weighted mood over the trailing window."""
    loop = get_loop(request)
    state = await loop.current_mood(window_seconds)
    return state.model_dump(mode="json")


@router.get("/mood/trends")
async def mood_trends(
    request: Request,
    minutes: float | None = Query(None, gt=0, le=1440),
):
    """Mood timeline and averages over the trailing *minutes* (configured default when omitted)."""
    loop = get_loop(request)
    trend = await loop.mood_trends(minutes)
    if trend is None:
        raise HTTPException(404, "Not enough mood history for a trend.")
    return trend.model_dump(mode="json")
