"""
Core data models for the n-gram forest classifier.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional, Sequence, Tuple, Union

Token = Hashable
Sample = Sequence[Token]
Feature = Union[Token, Tuple[Token, ...]]
LabeledSamples = Dict[str, List[Sample]]


@dataclass
class ProbabilityResult:
    """Vote fractions produced by a random forest for one sample."""
    no_match: float
    any_category: float
    per_category: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        """Validate vote fractions."""
        for name, value in (("no_match", self.no_match), ("any_category", self.any_category)):
            if not isinstance(value, (int, float)) or not (0.0 <= value <= 1.0):
                raise ValueError(f"{name} must be a number between 0.0 and 1.0")
        for category, value in self.per_category.items():
            if not isinstance(value, (int, float)) or not (0.0 <= value <= 1.0):
                raise ValueError(f"Fraction for category '{category}' must be a number between 0.0 and 1.0")

    @property
    def most_likely(self) -> Optional[str]:
        """Category with the largest vote fraction, or None when no tree voted."""
        if not self.per_category:
            return None
        # max() keeps the first of equal values, i.e. the first category voted for
        return max(self.per_category, key=self.per_category.get)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "no_match": self.no_match,
            "any_category": self.any_category,
            "per_category": dict(self.per_category),
        }
