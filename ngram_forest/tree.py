"""
Single n-gram classifier.

A Tree learns, for every category, a short list of n-grams that occur in
that category's samples and in no other category's samples. Prediction
returns the first category owning one of the sample's n-grams.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set
from .models.data_models import Feature, LabeledSamples, Sample
from .ngrams import normalize_feature, prediction_variants, training_variants, validate_sample
from .exceptions import InvalidInputError, ModelLoadingError

logger = logging.getLogger(__name__)


def validate_samples(samples: Any) -> None:
    """
    Validate labeled samples before training.

    Args:
        samples: Mapping of category name to list of samples

    Raises:
        InvalidInputError: If the structure, a category name or a sample is invalid
    """
    if not isinstance(samples, Mapping):
        raise InvalidInputError(
            f"Samples must be a mapping of category to samples, got {type(samples).__name__}"
        )

    for category, category_samples in samples.items():
        if not isinstance(category, str) or not category.strip():
            raise InvalidInputError(f"Category name must be a non-empty string, got {category!r}")

        if isinstance(category_samples, (str, bytes)) or not isinstance(category_samples, (list, tuple)):
            raise InvalidInputError(f"Samples of category '{category}' must be a list")

        for i, sample in enumerate(category_samples):
            try:
                validate_sample(sample)
            except InvalidInputError as e:
                raise InvalidInputError(f"Invalid sample {i} of category '{category}': {e}")


def rank_by_frequency(sample_variants: List[List[Feature]]) -> List[Feature]:
    """
    Distinct variants of a category, most frequent first.

    Every occurrence counts, including repeats inside one sample. Equally
    frequent variants keep the order in which they were first seen.
    """
    counts: Counter = Counter()
    for variant_list in sample_variants:
        counts.update(variant_list)
    return sorted(counts, key=lambda feature: counts[feature], reverse=True)


class Tree:
    """
    Classifier model made of per-category exclusive features.

    Category order matters: prediction returns the first category, in
    training order, whose features contain a variant of the sample.
    """

    def __init__(self, features: Mapping[str, Sequence[Any]], accuracy: float = 1.0):
        """
        Initialize the tree with already mined features.

        Args:
            features: Mapping of category name to ordered list of features
            accuracy: Share of training samples covered by the features

        Raises:
            InvalidInputError: If accuracy is out of range or a feature is malformed
        """
        if not isinstance(accuracy, (int, float)) or not (0.0 <= accuracy <= 1.0):
            raise InvalidInputError("Accuracy must be a number between 0.0 and 1.0")

        self._features: Dict[str, List[Feature]] = {
            str(category): [normalize_feature(feature) for feature in category_features]
            for category, category_features in features.items()
        }
        self._accuracy = float(accuracy)
        self._lookup: Dict[str, Set[Feature]] = {
            category: set(category_features) for category, category_features in self._features.items()
        }

    @property
    def features(self) -> Dict[str, List[Feature]]:
        return {category: list(category_features) for category, category_features in self._features.items()}

    @property
    def accuracy(self) -> float:
        return self._accuracy

    @property
    def categories(self) -> List[str]:
        return list(self._features)

    def __repr__(self) -> str:
        return f"Tree(categories={len(self._features)}, accuracy={self._accuracy:.4f})"

    @classmethod
    def train(cls, samples: LabeledSamples) -> 'Tree':
        """
        Train a tree on labeled samples.

        For every category the distinct n-grams of its samples are scanned
        from most to least frequent. An n-gram absent from all other
        categories that covers at least one still uncovered sample becomes
        a feature. Scanning stops once every sample of the category is
        covered.

        Args:
            samples: Mapping of category name to list of samples

        Returns:
            Trained Tree whose accuracy is the share of covered samples

        Raises:
            InvalidInputError: If samples are malformed
        """
        validate_samples(samples)

        sample_variants = {
            category: [training_variants(sample) for sample in category_samples]
            for category, category_samples in samples.items()
        }
        variant_sets = {
            category: [set(variant_list) for variant_list in variant_lists]
            for category, variant_lists in sample_variants.items()
        }
        category_pools: Dict[str, Set[Feature]] = {
            category: set().union(*sets) for category, sets in variant_sets.items()
        }

        features: Dict[str, List[Feature]] = {}
        total_samples = 0
        uncovered_samples = 0

        for category, sets in variant_sets.items():
            other_variants: Set[Feature] = set()
            for other_category, pool in category_pools.items():
                if other_category != category:
                    other_variants |= pool

            remaining = list(range(len(sets)))
            selected: List[Feature] = []

            for feature in rank_by_frequency(sample_variants[category]):
                if not remaining:
                    break
                if feature in other_variants:
                    continue

                still_remaining = [i for i in remaining if feature not in sets[i]]
                if len(still_remaining) == len(remaining):
                    continue

                selected.append(feature)
                remaining = still_remaining

            features[category] = selected
            total_samples += len(sets)
            uncovered_samples += len(remaining)

            if remaining:
                logger.debug(f"Category '{category}': {len(remaining)} of {len(sets)} samples not covered")

        accuracy = 1.0 - uncovered_samples / total_samples if total_samples > 0 else 1.0

        if uncovered_samples:
            logger.warning(f"{uncovered_samples} of {total_samples} training samples share all n-grams with other categories")

        logger.info(
            f"Trained tree on {total_samples} samples in {len(features)} categories: "
            f"{sum(len(f) for f in features.values())} features, accuracy {accuracy:.4f}"
        )

        return cls(features, accuracy)

    def predict(self, sample: Sample, make_variants: bool = True) -> Optional[str]:
        """
        Predict the category of a sample.

        Args:
            sample: Ordered sequence of tokens
            make_variants: If False, sample is taken as an already expanded
                list of features

        Returns:
            First matching category name, or None if nothing matches

        Raises:
            InvalidInputError: If sample is malformed
        """
        if make_variants:
            validate_sample(sample)
            candidates = prediction_variants(sample)
        else:
            candidates = sample

        for feature in candidates:
            for category, lookup in self._lookup.items():
                if feature in lookup:
                    return category

        return None

    def export(self) -> Dict[str, Any]:
        """
        Get the model's attributes as plain data.

        Single-token features stay scalars, longer ones become lists.

        Returns:
            Dictionary with 'features' and 'accuracy' keys
        """
        return {
            "features": {
                category: [list(feature) if isinstance(feature, tuple) else feature for feature in category_features]
                for category, category_features in self._features.items()
            },
            "accuracy": self._accuracy,
        }

    @classmethod
    def load(cls, data: Mapping[str, Any], accuracy: float = 1.0) -> 'Tree':
        """
        Load a tree from exported attributes.

        Args:
            data: Either the output of export() or a bare features mapping
            accuracy: Accuracy used with a bare features mapping

        Returns:
            Tree equivalent to the exported one

        Raises:
            ModelLoadingError: If data is malformed
        """
        if not isinstance(data, Mapping):
            raise ModelLoadingError(f"Tree data must be a mapping, got {type(data).__name__}")

        if "features" in data and "accuracy" in data:
            features, accuracy = data["features"], data["accuracy"]
        else:
            features = data

        if not isinstance(features, Mapping):
            raise ModelLoadingError("'features' must be a mapping of category to feature list")

        for category, category_features in features.items():
            if isinstance(category_features, (str, bytes)) or not isinstance(category_features, (list, tuple)):
                raise ModelLoadingError(f"Features of category '{category}' must be a list")

        try:
            return cls(features, accuracy)
        except InvalidInputError as e:
            raise ModelLoadingError(f"Invalid tree data: {e}")
