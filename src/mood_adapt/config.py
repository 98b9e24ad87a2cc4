"""Centralised application settings loaded from environment / .env file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """All runtime configuration for the mood-adaptation core.

    Values are read from environment variables first, then from a *.env* file
    located at the project root.  Every variable lives in the flat
    ``MOOD_ADAPT_`` namespace (stripped automatically by *pydantic-settings*).
    """

    model_config = SettingsConfigDict(
        env_prefix="MOOD_ADAPT_",
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Logging ───────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["auto", "console", "json"] = "auto"

    # ── Signal fusion ─────────────────────────────────────────
    mood_history_capacity: int = 200
    current_mood_window_seconds: float = 30.0
    mood_trend_minutes: float = 10.0

    # ── Candidate generation ──────────────────────────────────
    rules_file: str = ""  # JSON rule table; empty → built-in defaults
    night_start_hour: int = 22
    night_end_hour: int = 6  # inclusive
    history_similarity_threshold: float = 0.7
    history_top_k: int = 5
    predictor_kind: Literal["heuristic", "success_table", "null"] = "heuristic"

    # ── Scoring ───────────────────────────────────────────────
    weight_mood_match: float = 0.3
    weight_user_match: float = 0.3
    weight_context_match: float = 0.2
    weight_success_rate: float = 0.2

    # ── Selection ─────────────────────────────────────────────
    selection_confidence_target: float = 0.8
    selection_score_weight: float = 0.3

    # ── Feedback ledger ───────────────────────────────────────
    ledger_capacity: int = 500
    training_corpus_capacity: int = 1000
    retrain_every: int = 50

    # ── Host loop ─────────────────────────────────────────────
    sensor_poll_interval_seconds: float = 1.0
    decision_interval_seconds: float = 5.0

    # ── API server ────────────────────────────────────────────
    api_host: str = "127.0.0.1"
    api_port: int = 8000


@lru_cache
def get_settings() -> Settings:
    """Return a cached :class:`Settings` singleton."""
    return Settings()
