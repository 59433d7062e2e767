"""
Random forest of n-gram trees.

Every tree is trained on a random duplicate-free subset of the labeled
pool. Prediction turns the trees' votes into vote fractions.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
import numpy as np
from .models.data_models import LabeledSamples, ProbabilityResult, Sample
from .ngrams import prediction_variants, validate_sample
from .tree import Tree, validate_samples
from .exceptions import ConfigurationError, InvalidInputError, ModelLoadingError

logger = logging.getLogger(__name__)

RandomState = Union[None, int, np.random.Generator]

# Fractions are rounded before ceil/floor so that 0.7 * 10 counts as 7
_FRACTION_PRECISION = 9


def default_forest_size(pool_size: int, exponent: Optional[float] = None) -> int:
    """
    Number of trees used when the caller does not choose one.

    Args:
        pool_size: Total number of labeled samples
        exponent: Growth exponent (defaults to config value)

    Returns:
        1 + round(sqrt(pool_size ** exponent)), halves rounded up
    """
    from .config import config

    if exponent is None:
        exponent = config.forest.size_exponent
    return 1 + int(math.floor(math.sqrt(pool_size ** exponent) + 0.5))


def subset_bounds(pool_size: int, min_fraction: float, max_fraction: float) -> Tuple[int, int]:
    """
    Smallest and largest per-tree subset size.

    The bounds are ceil(min_fraction * pool_size) and
    floor(max_fraction * pool_size). When those cross or leave only 0, as
    happens on small pools, the upper bound becomes
    max_fraction * pool_size rounded half up and the lower bound is
    capped by it.

    Args:
        pool_size: Total number of labeled samples
        min_fraction: Lower bound as a fraction of pool_size
        max_fraction: Upper bound as a fraction of pool_size

    Returns:
        (lower, upper) subset sizes, both inclusive

    Raises:
        ConfigurationError: If fractions are out of [0, 1], inverted, or
            max_fraction * pool_size rounds to 0
    """
    for name, value in (("min_fraction", min_fraction), ("max_fraction", max_fraction)):
        if not isinstance(value, (int, float)) or not (0.0 <= value <= 1.0):
            raise ConfigurationError(f"{name} must be a number between 0.0 and 1.0, got {value!r}")

    if min_fraction > max_fraction:
        raise ConfigurationError(
            f"min_fraction ({min_fraction}) cannot be greater than max_fraction ({max_fraction})"
        )

    scaled_min = round(min_fraction * pool_size, _FRACTION_PRECISION)
    scaled_max = round(max_fraction * pool_size, _FRACTION_PRECISION)
    rounded_max = int(math.floor(scaled_max + 0.5))

    if rounded_max < 1:
        raise ConfigurationError(
            f"Subset size bounds [{min_fraction}, {max_fraction}] select no samples "
            f"from a pool of {pool_size}"
        )

    lower = math.ceil(scaled_min)
    upper = math.floor(scaled_max)

    if upper < 1 or lower > upper:
        upper = max(upper, rounded_max)
        lower = min(lower, upper)

    return lower, upper


def flatten_samples(samples: LabeledSamples) -> Tuple[List[Sample], List[str]]:
    """Pool all samples with a parallel list of their categories, in input order."""
    pool: List[Sample] = []
    labels: List[str] = []
    for category, category_samples in samples.items():
        for sample in category_samples:
            pool.append(sample)
            labels.append(category)
    return pool, labels


def group_by_category(indices: Sequence[int], pool: List[Sample], labels: List[str],
                      categories: Sequence[str]) -> LabeledSamples:
    """
    Regroup drawn pool indices by category.

    Categories keep their training order and samples keep pool order.
    Categories with no drawn sample are left out.
    """
    grouped: LabeledSamples = {category: [] for category in categories}
    for index in sorted(indices):
        grouped[labels[index]].append(pool[index])
    return {category: group for category, group in grouped.items() if group}


class RandomForest:
    """
    Ensemble of trees trained on random subsets of the labeled pool.
    """

    def __init__(self, trees: Sequence[Tree], accuracy: float = 1.0):
        """
        Initialize the forest with trained trees.

        Args:
            trees: Ordered list of trees
            accuracy: Mean accuracy of the trees
        """
        if not isinstance(accuracy, (int, float)) or not (0.0 <= accuracy <= 1.0):
            raise InvalidInputError("Accuracy must be a number between 0.0 and 1.0")

        self._trees: List[Tree] = list(trees)
        self._accuracy = float(accuracy)

    @property
    def trees(self) -> List[Tree]:
        return list(self._trees)

    @property
    def accuracy(self) -> float:
        return self._accuracy

    def __len__(self) -> int:
        return len(self._trees)

    def __repr__(self) -> str:
        return f"RandomForest(trees={len(self._trees)}, accuracy={self._accuracy:.4f})"

    @classmethod
    def create(
        cls,
        samples: LabeledSamples,
        min_fraction: Optional[float] = None,
        max_fraction: Optional[float] = None,
        forest_size: Optional[int] = None,
        random_state: RandomState = None,
        max_workers: Optional[int] = None
    ) -> 'RandomForest':
        """
        Train a random forest.

        Args:
            samples: Mapping of category name to list of samples
            min_fraction: Smallest subset size as a fraction of the pool (defaults to config value)
            max_fraction: Largest subset size as a fraction of the pool (defaults to config value)
            forest_size: Number of trees (defaults to 1 + round(sqrt(pool ** 1.4)))
            random_state: Seed or numpy Generator for reproducible draws
            max_workers: Worker threads for training (defaults to config value);
                the forest is identical to sequential training

        Returns:
            RandomForest whose accuracy is the mean tree accuracy

        Raises:
            InvalidInputError: If samples are malformed
            ConfigurationError: If subset bounds or forest size are invalid
        """
        from .config import config

        validate_samples(samples)

        if min_fraction is None:
            min_fraction = config.forest.min_fraction
        if max_fraction is None:
            max_fraction = config.forest.max_fraction
        if max_workers is None:
            max_workers = config.forest.max_workers
        if random_state is None:
            random_state = config.forest.random_seed

        pool, labels = flatten_samples(samples)
        pool_size = len(pool)

        lower, upper = subset_bounds(pool_size, min_fraction, max_fraction)

        if forest_size is None:
            forest_size = default_forest_size(pool_size)
        if not isinstance(forest_size, (int, np.integer)) or forest_size < 1:
            raise ConfigurationError(f"forest_size must be a positive integer, got {forest_size!r}")
        if max_workers < 1:
            raise ConfigurationError(f"max_workers must be a positive integer, got {max_workers!r}")

        rng = random_state if isinstance(random_state, np.random.Generator) else np.random.default_rng(random_state)

        # Draw every subset up front so results do not depend on thread scheduling
        categories = list(samples)
        subsets: List[LabeledSamples] = []
        for _ in range(forest_size):
            subset_size = int(rng.integers(lower, upper, endpoint=True))
            indices = rng.choice(pool_size, size=subset_size, replace=False)
            subsets.append(group_by_category(indices.tolist(), pool, labels, categories))

        logger.info(
            f"Training {forest_size} trees on subsets of {lower}-{upper} out of {pool_size} samples"
        )

        if max_workers > 1 and forest_size > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                trees = list(executor.map(Tree.train, subsets))
        else:
            trees = [Tree.train(subset) for subset in subsets]

        for i, tree in enumerate(trees):
            logger.debug(f"Tree {i}: {len(tree.categories)} categories, accuracy {tree.accuracy:.4f}")

        accuracy = float(np.mean([tree.accuracy for tree in trees]))
        logger.info(f"Forest of {forest_size} trees trained with mean accuracy {accuracy:.4f}")

        return cls(trees, accuracy)

    def probability(self, sample: Sample) -> ProbabilityResult:
        """
        Count the trees' votes for a sample.

        Args:
            sample: Ordered sequence of tokens

        Returns:
            ProbabilityResult with the no-match fraction, the fraction of
            trees matching any category, and per-category fractions for the
            categories that got at least one vote

        Raises:
            InvalidInputError: If sample is malformed
        """
        validate_sample(sample)

        total = len(self._trees)
        if total == 0:
            return ProbabilityResult(no_match=1.0, any_category=0.0)

        features = prediction_variants(sample)
        votes: Dict[str, int] = {}
        no_match = 0

        for tree in self._trees:
            category = tree.predict(features, make_variants=False)
            if category is None:
                no_match += 1
            else:
                votes[category] = votes.get(category, 0) + 1

        return ProbabilityResult(
            no_match=no_match / total,
            any_category=(total - no_match) / total,
            per_category={category: count / total for category, count in votes.items()}
        )

    def predict(self, sample: Sample) -> Optional[str]:
        """
        Most voted category for a sample, or None if no tree matches.
        """
        return self.probability(sample).most_likely

    def export(self) -> Dict[str, Any]:
        """
        Get the model's attributes as plain data.

        Returns:
            Dictionary with 'trees' (exported trees) and 'accuracy' keys
        """
        return {
            "trees": [tree.export() for tree in self._trees],
            "accuracy": self._accuracy,
        }

    @classmethod
    def load(cls, data: Union[Mapping[str, Any], Sequence[Any]], accuracy: float = 1.0) -> 'RandomForest':
        """
        Load a forest from exported attributes.

        Args:
            data: Either the output of export() or a bare list of exported trees
            accuracy: Accuracy used with a bare list of trees

        Returns:
            RandomForest equivalent to the exported one

        Raises:
            ModelLoadingError: If data is malformed
        """
        if isinstance(data, Mapping):
            if "trees" not in data:
                raise ModelLoadingError("Forest data missing required 'trees' field")
            trees_data = data["trees"]
            accuracy = data.get("accuracy", accuracy)
        else:
            trees_data = data

        if isinstance(trees_data, (str, bytes)) or not isinstance(trees_data, (list, tuple)):
            raise ModelLoadingError("'trees' must be a list of exported trees")

        trees = []
        for i, tree_data in enumerate(trees_data):
            try:
                trees.append(Tree.load(tree_data))
            except ModelLoadingError as e:
                raise ModelLoadingError(f"Failed to load tree {i}: {e}")

        try:
            return cls(trees, accuracy)
        except InvalidInputError as e:
            raise ModelLoadingError(f"Invalid forest data: {e}")
