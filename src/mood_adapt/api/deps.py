"""Request-scoped access to the objects created in the application lifespan."""

from __future__ import annotations

from fastapi import HTTPException, Request

from mood_adapt.runtime.loop import DecisionLoop


def get_loop(request: Request) -> DecisionLoop:
    loop = getattr(request.app.state, "loop", None)
    if loop is None:
        raise HTTPException(503, "Decision core not ready.")
    return loop
