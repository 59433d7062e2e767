"""
Exception classes for the n-gram forest classifier.
"""


class ClassifierError(Exception):
    """Base exception for classifier errors."""
    pass


class InvalidInputError(ClassifierError):
    """Raised when samples, features or parameters are invalid."""
    pass


class ConfigurationError(ClassifierError):
    """Raised when ensemble configuration is invalid."""
    pass


class ModelLoadingError(ClassifierError):
    """Raised when an exported model cannot be loaded."""
    pass


class DatasetLoadingError(ClassifierError):
    """Raised when dataset loading fails."""
    pass
