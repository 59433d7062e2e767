"""
N-gram forest: token sequence classification by exclusive n-gram features.
"""

from .models import ProbabilityResult
from .ngrams import ngrams, variants, training_variants, prediction_variants
from .tree import Tree
from .random_forest import RandomForest, default_forest_size
from .dataset_loader import SamplesDataset, save_model, load_model
from .config import ClassifierConfig
from .exceptions import (
    ClassifierError,
    InvalidInputError,
    ConfigurationError,
    ModelLoadingError,
    DatasetLoadingError
)

__version__ = "0.1.0"
__all__ = [
    "ProbabilityResult",
    "ngrams",
    "variants",
    "training_variants",
    "prediction_variants",
    "Tree",
    "RandomForest",
    "default_forest_size",
    "SamplesDataset",
    "save_model",
    "load_model",
    "ClassifierConfig",
    "ClassifierError",
    "InvalidInputError",
    "ConfigurationError",
    "ModelLoadingError",
    "DatasetLoadingError"
]
