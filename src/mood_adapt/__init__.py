"""mood-adapt — infer a user's mood from noisy signals and adapt the interface."""

from mood_adapt.core import MoodAdaptCore, create_core

__version__ = "0.1.0"

__all__ = ["MoodAdaptCore", "create_core", "__version__"]
