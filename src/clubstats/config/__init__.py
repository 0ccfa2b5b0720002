"""Configuration helpers for engine settings and record scoring."""

from .scoring import DEFAULT_WEIGHTS, ScoringWeights
from .settings import EngineSettings

__all__ = [
    "DEFAULT_WEIGHTS",
    "EngineSettings",
    "ScoringWeights",
]
