"""
Tests for dataset generators (sortmachine.datasets).
"""

from __future__ import annotations

import pathlib
import sys

import numpy as np
import pytest

_REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
_SRC = _REPO_ROOT / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from sortmachine.datasets import SUPPORTED_DISTS, make_dataset


def _rng(seed: int = 0) -> np.random.Generator:
    return np.random.default_rng(seed)


@pytest.mark.parametrize(
    "spec",
    [
        {"dist": "random", "params": {"range": [0, 10]}},
        {"dist": "nearly_sorted", "params": {"swap_frac": 0.1}},
        {"dist": "few_uniques", "params": {"k": 3}},
        {"dist": "reversed"},
        {"dist": "words"},
        {"dist": "scores"},
    ],
)
def test_lengths_and_zero(spec) -> None:
    assert len(make_dataset(50, spec, _rng())) == 50
    assert make_dataset(0, spec, _rng()) == []


def test_all_dists_are_covered() -> None:
    assert SUPPORTED_DISTS == {"random", "nearly_sorted", "few_uniques", "reversed", "words", "scores"}


def test_random_is_inclusive_and_reproducible() -> None:
    spec = {"dist": "random", "params": {"range": [-2, 2]}}
    a = make_dataset(500, spec, _rng(42))
    assert set(a) <= {-2, -1, 0, 1, 2}
    assert {-2, 2} <= set(a)
    assert a == make_dataset(500, spec, _rng(42))
    assert all(type(x) is int for x in a)


def test_nearly_sorted_is_a_permutation() -> None:
    a = make_dataset(100, {"dist": "nearly_sorted", "params": {"swap_frac": 0.05}}, _rng(1))
    assert sorted(a) == list(range(100))
    assert make_dataset(10, {"dist": "nearly_sorted", "params": {"swap_frac": 0.0}}, _rng()) == list(range(10))


def test_few_uniques_has_at_most_k_values() -> None:
    a = make_dataset(200, {"dist": "few_uniques", "params": {"k": 4, "range": [0, 1000]}}, _rng(3))
    assert 1 <= len(set(a)) <= 4
    assert all(0 <= x <= 1000 for x in a)


def test_reversed() -> None:
    assert make_dataset(4, {"dist": "reversed"}, _rng()) == [3, 2, 1, 0]


def test_words() -> None:
    a = make_dataset(100, {"dist": "words", "params": {"min_len": 2, "max_len": 3}}, _rng(5))
    assert all(isinstance(w, str) and 2 <= len(w) <= 3 and w.isalpha() for w in a)


def test_scores_rounding() -> None:
    a = make_dataset(50, {"dist": "scores", "params": {"mean": 10.0, "std": 2.0, "decimals": 1}}, _rng(9))
    assert all(isinstance(x, float) and round(x, 1) == x for x in a)


@pytest.mark.parametrize(
    "n, spec",
    [
        (-1, {"dist": "reversed"}),
        (1.5, {"dist": "reversed"}),
        (5, "random"),
        (5, {"dist": "bogus"}),
        (5, {"dist": "random"}),
        (5, {"dist": "random", "params": {"range": [3, 1]}}),
        (5, {"dist": "random", "params": {"range": [0]}}),
        (5, {"dist": "nearly_sorted", "params": {"swap_frac": 2.0}}),
        (5, {"dist": "few_uniques", "params": {}}),
        (5, {"dist": "few_uniques", "params": {"k": 0}}),
        (5, {"dist": "words", "params": {"min_len": 4, "max_len": 2}}),
        (5, {"dist": "scores", "params": {"std": -1.0}}),
    ],
)
def test_invalid_inputs_raise(n, spec) -> None:
    with pytest.raises(ValueError):
        make_dataset(n, spec, _rng())
