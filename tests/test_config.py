"""
Tests for environment configuration.
"""

import pytest
from ngram_forest.config import ClassifierConfig, ForestConfig, StorageConfig


class TestConfig:
    """Test cases for environment configuration."""

    def test_defaults(self, monkeypatch):
        """Test default values without environment overrides."""
        for name in ("FOREST_MIN_FRACTION", "FOREST_MAX_FRACTION", "FOREST_SIZE_EXPONENT",
                     "FOREST_MAX_WORKERS", "FOREST_RANDOM_SEED", "MODEL_JSON_INDENT"):
            monkeypatch.delenv(name, raising=False)

        config = ClassifierConfig.from_env()

        assert config.forest == ForestConfig()
        assert config.forest.min_fraction == 0.1
        assert config.forest.max_fraction == 0.9
        assert config.forest.size_exponent == 1.4
        assert config.forest.random_seed is None
        assert config.storage.json_indent == 2

    def test_environment_overrides(self, monkeypatch):
        """Test values are read from environment variables."""
        monkeypatch.setenv("FOREST_MIN_FRACTION", "0.3")
        monkeypatch.setenv("FOREST_MAX_WORKERS", "4")
        monkeypatch.setenv("FOREST_RANDOM_SEED", "17")
        monkeypatch.setenv("MODEL_JSON_INDENT", "0")

        forest = ForestConfig.from_env()
        storage = StorageConfig.from_env()

        assert forest.min_fraction == 0.3
        assert forest.max_workers == 4
        assert forest.random_seed == 17
        assert storage.json_indent == 0
