"""
Configuration for the n-gram forest classifier library.
"""

import os
from typing import Optional
from dataclasses import dataclass


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


@dataclass
class ForestConfig:
    """Defaults for random forest creation."""
    # Bounds of the per-tree subset size, as fractions of the sample pool
    min_fraction: float = 0.1
    max_fraction: float = 0.9

    # Default forest size is 1 + round(sqrt(pool_size ** size_exponent))
    size_exponent: float = 1.4

    # Worker threads for tree training; mining holds the GIL, so this does not
    # speed training up. Results match sequential training.
    max_workers: int = 1

    random_seed: Optional[int] = None

    @classmethod
    def from_env(cls) -> 'ForestConfig':
        """Create forest config from environment variables."""
        return cls(
            min_fraction=float(os.getenv('FOREST_MIN_FRACTION', cls.min_fraction)),
            max_fraction=float(os.getenv('FOREST_MAX_FRACTION', cls.max_fraction)),
            size_exponent=float(os.getenv('FOREST_SIZE_EXPONENT', cls.size_exponent)),
            max_workers=int(os.getenv('FOREST_MAX_WORKERS', cls.max_workers)),
            random_seed=_optional_int(os.getenv('FOREST_RANDOM_SEED')),
        )


@dataclass
class StorageConfig:
    """Configuration for model and dataset files."""
    json_indent: int = 2
    encoding: str = "utf-8"

    @classmethod
    def from_env(cls) -> 'StorageConfig':
        """Create storage config from environment variables."""
        return cls(
            json_indent=int(os.getenv('MODEL_JSON_INDENT', cls.json_indent)),
            encoding=os.getenv('MODEL_FILE_ENCODING', cls.encoding),
        )


@dataclass
class ClassifierConfig:
    """Configuration for the classifier library."""
    forest: ForestConfig
    storage: StorageConfig

    @classmethod
    def from_env(cls) -> 'ClassifierConfig':
        """Create classifier config from environment variables."""
        return cls(
            forest=ForestConfig.from_env(),
            storage=StorageConfig.from_env(),
        )


# Global configuration instance
config = ClassifierConfig.from_env()
