"""
Tests for the single n-gram classifier.
"""

import pytest
from ngram_forest.tree import Tree, rank_by_frequency, validate_samples
from ngram_forest.ngrams import training_variants
from ngram_forest.exceptions import InvalidInputError, ModelLoadingError


class TestTreeTraining:
    """Test cases for Tree.train."""

    @pytest.fixture
    def greetings(self):
        """Two categories with one sample each."""
        return {
            "greeting": [["hi", "there"]],
            "farewell": [["bye", "now"]]
        }

    @pytest.fixture
    def sentences(self):
        """Categories sharing some tokens."""
        return {
            "animals": [["the", "cat", "sat"], ["a", "dog", "ran"], ["the", "cat", "ran"]],
            "vehicles": [["the", "car", "sped"], ["a", "bus", "stopped"]]
        }

    def test_features_are_exclusive(self, greetings):
        """Test each category gets a feature absent from the other category."""
        tree = Tree.train(greetings)

        assert tree.features == {"greeting": ["hi"], "farewell": ["bye"]}
        assert tree.accuracy == 1.0

    def test_known_predictions(self, greetings):
        """Test single-token queries and unknown tokens."""
        tree = Tree.train(greetings)

        assert tree.predict(["bye"]) == "farewell"
        assert tree.predict(["hi", "there"]) == "greeting"
        assert tree.predict(["nonexistent"]) is None

    def test_greedy_coverage(self, sentences):
        """Test frequent exclusive n-grams are chosen and redundant ones skipped."""
        tree = Tree.train(sentences)

        assert tree.features == {
            "animals": ["cat", "ran"],
            "vehicles": ["car", "bus"]
        }
        assert tree.accuracy == 1.0
        assert tree.categories == ["animals", "vehicles"]

    def test_training_samples_predict_their_category(self, sentences):
        """Test covered training samples are predicted as their own category."""
        tree = Tree.train(sentences)

        for category, category_samples in sentences.items():
            for sample in category_samples:
                assert tree.predict(sample) == category

    def test_first_match_wins(self, sentences):
        """Test the earliest matching n-gram decides between categories."""
        tree = Tree.train(sentences)

        # "car" precedes "ran" in the sample
        assert tree.predict(["the", "car", "ran"]) == "vehicles"
        assert tree.predict(["ran", "the", "car"]) == "animals"

    def test_repeated_tokens_count_towards_frequency(self):
        """Test every occurrence counts when ranking n-grams."""
        tree = Tree.train({"a": [["x", "y", "y"]], "b": [["q"]]})

        assert tree.features["a"] == ["y"]

    def test_redundant_exclusive_features_are_skipped(self):
        """Test exclusive n-grams covering no remaining sample are not recorded."""
        tree = Tree.train({"a": [["m", "n", "m", "n"], ["k"]], "b": [["z"]]})

        assert tree.features == {"a": ["m", "k"], "b": ["z"]}

    def test_shared_samples_are_uncovered(self):
        """Test samples whose n-grams all occur elsewhere lower accuracy."""
        tree = Tree.train({"a": [["x", "y"]], "b": [["x", "y"]], "c": [["z"]]})

        assert tree.features == {"a": [], "b": [], "c": ["z"]}
        assert tree.accuracy == pytest.approx(1 - 2 / 3)

    def test_fully_shared_pool_has_zero_accuracy(self):
        """Test accuracy is 0 when no sample can be covered."""
        tree = Tree.train({"a": [["x"]], "b": [["x"]]})

        assert tree.accuracy == 0.0

    def test_multi_token_features(self):
        """Test a tuple feature is chosen when single tokens are shared."""
        tree = Tree.train({"a": [["x", "y"]], "b": [["x"], ["y"]]})

        assert tree.features == {"a": [("x", "y")], "b": []}
        assert tree.accuracy == pytest.approx(1 / 3)
        assert tree.predict(["x", "y", "z"]) == "a"

    def test_features_compare_structurally(self):
        """Test tokens are never joined into strings when comparing n-grams."""
        tree = Tree.train({"a": [["ab", "c"]], "b": [["a", "bc"], ["ab"], ["c"]]})

        assert tree.features["a"] == [("ab", "c")]
        assert tree.features["b"] == ["a"]
        assert tree.accuracy == pytest.approx(0.5)

    def test_empty_pool(self):
        """Test training without samples gives a perfect empty model."""
        tree = Tree.train({})

        assert tree.features == {}
        assert tree.accuracy == 1.0
        assert tree.predict(["anything"]) is None

    def test_category_without_samples(self):
        """Test an empty category adds no features and no misses."""
        tree = Tree.train({"a": [], "b": [["x"]]})

        assert tree.features == {"a": [], "b": ["x"]}
        assert tree.accuracy == 1.0

    def test_empty_sample_is_uncovered(self):
        """Test an empty sample can never be covered."""
        tree = Tree.train({"a": [[], ["x"]]})

        assert tree.features == {"a": ["x"]}
        assert tree.accuracy == 0.5

    def test_accuracy_in_range(self, sentences):
        """Test accuracy stays between 0 and 1."""
        mixed = dict(sentences, other=[["the", "cat", "sat"]])
        tree = Tree.train(mixed)

        assert 0.0 <= tree.accuracy < 1.0

    @pytest.mark.parametrize("samples,message", [
        (["x"], "must be a mapping"),
        ({"": [["x"]]}, "non-empty string"),
        ({"a": "x y"}, "must be a list"),
        ({"a": ["hello"]}, "Invalid sample 0 of category 'a'"),
        ({"a": [[["x"]]]}, "must be a scalar"),
    ])
    def test_invalid_samples(self, samples, message):
        """Test malformed input is rejected before training."""
        with pytest.raises(InvalidInputError, match=message):
            Tree.train(samples)


class TestRankByFrequency:
    """Test cases for n-gram ranking."""

    def test_ties_keep_first_seen_order(self):
        """Test equally frequent n-grams stay in first-seen order."""
        sample_variants = [training_variants(["b", "a"]), training_variants(["a", "c"])]

        assert rank_by_frequency(sample_variants) == ["a", "b", ("b", "a"), "c", ("a", "c")]

    def test_validate_samples_accepts_tuples(self):
        """Test tuples of samples are accepted."""
        validate_samples({"a": (("x", "y"), ["z"])})


class TestTreePrediction:
    """Test cases for Tree.predict on hand-built models."""

    def test_shorter_ngrams_are_checked_first(self):
        """Test single tokens are matched before longer n-grams."""
        tree = Tree({"a": [("x", "y")], "b": ["y"]})

        assert tree.predict(["x", "y", "z"]) == "b"

    def test_category_order_breaks_ties(self):
        """Test the first category owning a feature wins."""
        tree = Tree({"a": ["y"], "b": ["y"]})

        assert tree.predict(["y", "k"]) == "a"

    def test_full_length_window_is_not_used(self):
        """Test prediction does not look up the whole sample as one n-gram."""
        tree = Tree({"a": [("x", "y")]})

        assert tree.predict(["x", "y"]) is None
        assert tree.predict(["x", "y", "z"]) == "a"

    def test_pre_expanded_features(self):
        """Test make_variants=False uses the given features directly."""
        tree = Tree({"a": [("x", "y")]})

        assert tree.predict([("x", "y")], make_variants=False) == "a"

    def test_empty_model(self):
        """Test an untrained model never matches."""
        assert Tree({}).predict(["x", "y", "z"]) is None

    def test_invalid_sample(self):
        """Test prediction rejects malformed samples."""
        with pytest.raises(InvalidInputError):
            Tree({"a": ["x"]}).predict("x")

    def test_invalid_accuracy(self):
        """Test accuracy outside [0, 1] raises error."""
        with pytest.raises(InvalidInputError, match="Accuracy must be a number"):
            Tree({}, accuracy=1.5)


class TestTreeExport:
    """Test cases for export and load."""

    def test_export_shape(self):
        """Test single tokens export as scalars and n-grams as lists."""
        tree = Tree({"a": ["x", ("x", "y")]}, accuracy=0.75)

        assert tree.export() == {"features": {"a": ["x", ["x", "y"]]}, "accuracy": 0.75}

    def test_round_trip_keeps_predictions(self):
        """Test a loaded tree predicts like the exported one."""
        samples = {
            "a": [["x", "y"], ["p", "q", "r"]],
            "b": [["x"], ["y"], ["q", "r"]]
        }
        tree = Tree.train(samples)
        loaded = Tree.load(tree.export())

        assert loaded.features == tree.features
        assert loaded.accuracy == tree.accuracy
        queries = [["x", "y", "z"], ["p", "q"], ["q", "r", "s"], ["y"], ["nothing"]]
        for query in queries:
            assert loaded.predict(query) == tree.predict(query)

    def test_load_bare_features(self):
        """Test loading a bare features mapping with separate accuracy."""
        tree = Tree.load({"a": ["x", ["x", "y"]]}, 0.5)

        assert tree.features == {"a": ["x", ("x", "y")]}
        assert tree.accuracy == 0.5

    def test_load_bare_features_default_accuracy(self):
        """Test accuracy defaults to 1.0."""
        assert Tree.load({"a": ["x"]}).accuracy == 1.0

    def test_load_one_token_list(self):
        """Test a one-token list loads as the bare token."""
        tree = Tree.load({"features": {"a": [["x"]]}, "accuracy": 1.0})

        assert tree.predict(["x"]) == "a"

    @pytest.mark.parametrize("data", [
        "not a mapping",
        {"features": ["x"], "accuracy": 1.0},
        {"features": {"a": "x"}, "accuracy": 1.0},
        {"features": {"a": ["x"]}, "accuracy": 2.0},
        {"features": {"a": [[]]}, "accuracy": 1.0},
    ])
    def test_load_invalid(self, data):
        """Test malformed exports raise error."""
        with pytest.raises(ModelLoadingError):
            Tree.load(data)


class TestTokenEquality:
    """Test cases for how tokens are compared."""

    def test_equal_numbers_are_one_token(self):
        """Test 1, 1.0 and True count as the same token."""
        tree = Tree.train({"a": [[1, "x"]], "b": [[1.0, "y"], [True, "z"]]})

        assert tree.features == {"a": ["x"], "b": ["y", "z"]}
        assert tree.predict([1]) is None

    def test_string_tokens_stay_distinct(self):
        """Test string forms of numbers are separate tokens."""
        tree = Tree.train({"a": [["1"]], "b": [["1.0"]]})

        assert tree.predict(["1"]) == "a"
        assert tree.predict(["1.0"]) == "b"
