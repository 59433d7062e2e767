"""
Contiguous subsequence (n-gram) generation.

A window of size 1 is the bare token, larger windows are tuples, so a
single token and a one-token window are the same feature.
"""

from typing import Any, List, Optional
from .models.data_models import Feature, Sample
from .exceptions import InvalidInputError

_CONTAINER_TYPES = (list, tuple, dict, set, frozenset)


def validate_sample(sample: Any) -> None:
    """
    Check that a sample is an ordered sequence of scalar tokens.

    Tokens are compared with Python equality, so 1, 1.0 and True are the
    same token. Use strings when such values must stay apart.

    Raises:
        InvalidInputError: If the sample is not a list or tuple, or holds
            container or unhashable tokens
    """
    if isinstance(sample, (str, bytes)) or not isinstance(sample, (list, tuple)):
        raise InvalidInputError(
            f"Sample must be a list or tuple of tokens, got {type(sample).__name__}"
        )

    for position, token in enumerate(sample):
        if isinstance(token, _CONTAINER_TYPES):
            raise InvalidInputError(
                f"Token at position {position} must be a scalar, got {type(token).__name__}"
            )
        try:
            hash(token)
        except TypeError:
            raise InvalidInputError(
                f"Token at position {position} is not hashable: {type(token).__name__}"
            )


def normalize_feature(value: Any) -> Feature:
    """
    Bring an exported feature back to its canonical form.

    Lists and tuples of length 1 collapse to the bare token, longer ones
    become tuples. Scalars are returned unchanged.
    """
    if isinstance(value, (list, tuple)):
        if len(value) == 0:
            raise InvalidInputError("Feature cannot be an empty sequence")
        for token in value:
            if isinstance(token, _CONTAINER_TYPES):
                raise InvalidInputError(f"Feature tokens must be scalars, got {type(token).__name__}")
        return value[0] if len(value) == 1 else tuple(value)

    if isinstance(value, (dict, set, frozenset)):
        raise InvalidInputError(f"Feature must be a token or a list of tokens, got {type(value).__name__}")

    return value


def ngrams(sample: Sample, n: int) -> List[Feature]:
    """
    Get all contiguous windows of size n, left to right.

    Args:
        sample: Ordered sequence of tokens
        n: Window size, at least 1

    Returns:
        max(0, len(sample) - n + 1) features
    """
    if n < 1:
        raise InvalidInputError(f"Window size must be positive, got {n}")

    items = list(sample)
    if n == 1:
        return items
    return [tuple(items[i:i + n]) for i in range(len(items) - n + 1)]


def variants(sample: Sample, max_size: Optional[int] = None) -> List[Feature]:
    """
    Get windows of every size from 1 to max_size.

    Smaller windows come first and each size is scanned left to right.
    Without max_size the full-length window is left out (sizes 1..len - 1).
    """
    if max_size is None:
        max_size = len(sample) - 1

    result: List[Feature] = []
    for n in range(1, min(max_size, len(sample)) + 1):
        result.extend(ngrams(sample, n))
    return result


def training_variants(sample: Sample) -> List[Feature]:
    """Windows of sizes 1..len(sample), the full sample included."""
    return variants(sample, len(sample))


def prediction_variants(sample: Sample) -> List[Feature]:
    """
    Windows of sizes 1..len(sample) - 1 used to look a sample up.

    Single-token samples still yield their token.
    """
    return variants(sample, max(1, len(sample) - 1))
