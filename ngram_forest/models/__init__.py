"""
Data models for the n-gram forest classifier.
"""

from .data_models import (
    Token,
    Sample,
    Feature,
    LabeledSamples,
    ProbabilityResult
)

__all__ = [
    "Token",
    "Sample",
    "Feature",
    "LabeledSamples",
    "ProbabilityResult"
]
