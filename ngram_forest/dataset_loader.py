"""
Loading labeled samples from JSON files and persisting trained models.
"""

import gzip
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union
from .models.data_models import LabeledSamples, Sample
from .tree import Tree, validate_samples
from .random_forest import RandomForest
from .exceptions import DatasetLoadingError, InvalidInputError, ModelLoadingError

Model = Union[Tree, RandomForest]

_MODEL_KINDS = {"tree": Tree, "forest": RandomForest}


class SamplesDataset:
    """Loads labeled token samples from JSON dataset files."""

    def __init__(self, filepath: str = None):
        """
        Initialize the dataset loader with a JSON file path.

        Args:
            filepath: Path to the JSON dataset file
        """
        self.filepath = filepath
        self._samples: LabeledSamples = {}
        self._metadata: Dict[str, Any] = {}
        self._loaded = False

    @property
    def samples(self) -> LabeledSamples:
        if not self._loaded:
            raise DatasetLoadingError("Dataset not loaded. Call load_samples_from_json() first.")
        return self._samples

    @property
    def metadata(self) -> Dict[str, Any]:
        return self._metadata

    def get_category_names(self) -> List[str]:
        return list(self.samples)

    def get_sample_count(self) -> int:
        return sum(len(category_samples) for category_samples in self.samples.values())

    def load_samples_from_json(self, filepath: str = None) -> LabeledSamples:
        """
        Load labeled samples from a JSON file.

        The file holds {"categories": {name: [[token, ...], ...]}} and an
        optional "metadata" object. Category order in the file is kept.

        Args:
            filepath: Optional path to JSON file (uses instance filepath if not provided)

        Returns:
            Mapping of category name to list of samples

        Raises:
            DatasetLoadingError: If loading or validation fails
        """
        file_path = filepath or self.filepath

        if not file_path:
            raise DatasetLoadingError("No filepath provided")

        path = Path(file_path)
        if not path.exists():
            raise DatasetLoadingError(f"Dataset file not found: {file_path}")

        if not path.is_file():
            raise DatasetLoadingError(f"Path is not a file: {file_path}")

        try:
            data = _read_json(path)
        except json.JSONDecodeError as e:
            raise DatasetLoadingError(f"Invalid JSON in dataset file: {str(e)}")
        except (OSError, UnicodeDecodeError) as e:
            raise DatasetLoadingError(f"Failed to read dataset file: {str(e)}")

        if not isinstance(data, dict):
            raise DatasetLoadingError("Dataset must be a JSON object")

        if "categories" not in data:
            raise DatasetLoadingError("Dataset missing required 'categories' field")

        try:
            validate_samples(data["categories"])
        except InvalidInputError as e:
            raise DatasetLoadingError(f"Invalid dataset: {str(e)}")

        self._samples = {
            category: [list(sample) for sample in category_samples]
            for category, category_samples in data["categories"].items()
        }
        self._metadata = data.get("metadata", {})
        self._loaded = True

        return self._samples

    @staticmethod
    def from_labeled_lists(samples: Sequence[Sample], labels: Sequence[str]) -> LabeledSamples:
        """
        Group parallel lists of samples and labels by category.

        Categories are ordered by their first appearance in labels.

        Raises:
            InvalidInputError: If the lists differ in length or a sample is malformed
        """
        if len(samples) != len(labels):
            raise InvalidInputError(
                f"Got {len(samples)} samples but {len(labels)} labels"
            )

        grouped: LabeledSamples = {}
        for sample, label in zip(samples, labels):
            grouped.setdefault(label, []).append(sample)

        validate_samples(grouped)
        return grouped


def _read_json(path: Path) -> Any:
    from .config import config

    if path.suffix == ".gz":
        with gzip.open(path, 'rt', encoding=config.storage.encoding) as f:
            return json.load(f)
    with open(path, 'r', encoding=config.storage.encoding) as f:
        return json.load(f)


def _write_json(path: Path, data: Any) -> None:
    from .config import config

    if path.suffix == ".gz":
        with gzip.open(path, 'wt', encoding=config.storage.encoding) as f:
            json.dump(data, f, ensure_ascii=False)
    else:
        with open(path, 'w', encoding=config.storage.encoding) as f:
            json.dump(data, f, indent=config.storage.json_indent, ensure_ascii=False)


def save_model(model: Model, filepath: str) -> None:
    """
    Save a trained tree or forest as JSON.

    Paths ending in .gz are gzip-compressed.

    Args:
        model: Tree or RandomForest to save
        filepath: Destination path

    Raises:
        ModelLoadingError: If the model type is unknown or writing fails
    """
    kind = next((name for name, model_type in _MODEL_KINDS.items() if isinstance(model, model_type)), None)
    if kind is None:
        raise ModelLoadingError(f"Cannot save object of type {type(model).__name__}")

    payload = {"kind": kind, "model": model.export()}

    try:
        _write_json(Path(filepath), payload)
    except (OSError, TypeError, ValueError) as e:
        raise ModelLoadingError(f"Failed to save model: {str(e)}")


def load_model(filepath: str, kind: Optional[str] = None) -> Model:
    """
    Load a tree or forest saved with save_model().

    Args:
        filepath: Path to the model file
        kind: Expected model kind ('tree' or 'forest'); checked when given

    Returns:
        Loaded Tree or RandomForest

    Raises:
        ModelLoadingError: If the file is missing, malformed or of another kind
    """
    path = Path(filepath)
    if not path.is_file():
        raise ModelLoadingError(f"Model file not found: {filepath}")

    try:
        data = _read_json(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ModelLoadingError(f"Failed to read model file: {str(e)}")

    if not isinstance(data, dict) or "kind" not in data or "model" not in data:
        raise ModelLoadingError("Invalid model file format")

    stored_kind = data["kind"]
    if stored_kind not in _MODEL_KINDS:
        raise ModelLoadingError(f"Unknown model kind: {stored_kind!r}")

    if kind is not None and kind != stored_kind:
        raise ModelLoadingError(f"Expected a {kind} model, file holds a {stored_kind}")

    return _MODEL_KINDS[stored_kind].load(data["model"])
