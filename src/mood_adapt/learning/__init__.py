"""Online learning from user feedback — decision ledger and training corpus."""

from mood_adapt.learning.models import (
    Feedback,
    HistoryRecord,
    Outcome,
    SuccessPattern,
    TrainingExample,
)

__all__ = [
    "Feedback",
    "HistoryRecord",
    "Outcome",
    "SuccessPattern",
    "TrainingExample",
]
