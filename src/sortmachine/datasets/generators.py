"""
Workload generators for sorting-machine benchmarks.

Currently implemented:
- dist == "random":
    Integers drawn uniformly from an inclusive range.

- dist == "nearly_sorted":
    Start from [0, 1, ..., n-1], then perform ceil(swap_frac * n) random
    index swaps.

- dist == "few_uniques":
    Up to k distinct integers, repeated; exercises ties heavily.

- dist == "reversed":
    Deterministic [n-1, n-2, ..., 0]; ignores params and RNG.

- dist == "words":
    Random ASCII words of mixed case. Pair with the "case_insensitive" order
    to get many elements that tie ("Ab" vs "aB").

- dist == "scores":
    Normally distributed floats rounded to a number of decimals, the shape of
    a batch score-ranking workload.

Public API (stable):
    make_dataset(n: int, spec: dict, rng: numpy.random.Generator) -> list

Conventions:
- Integer ranges in params["range"] are **inclusive** on both ends.
- Returns a plain Python list (machines stay NumPy-agnostic).
- The caller supplies the RNG (seeded upstream for reproducibility).
"""

from __future__ import annotations

import string
from typing import Any, Dict, List, Tuple

import numpy as np

SUPPORTED_DISTS = {
    "random",
    "nearly_sorted",
    "few_uniques",
    "reversed",
    "words",
    "scores",
}
__all__ = ["SUPPORTED_DISTS", "make_dataset"]

_LETTERS = np.array(list(string.ascii_letters))


def make_dataset(n: int, spec: Dict[str, Any], rng: np.random.Generator) -> List[Any]:
    """
    Generate a dataset according to `spec`, using the provided RNG.

    Parameters
    ----------
    n : int
        Number of elements to generate. Must be >= 0.
    spec : dict
        Distribution specification, e.g.

            {"dist": "random", "params": {"range": [0, 1000]}}
            {"dist": "nearly_sorted", "params": {"swap_frac": 0.05}}
            {"dist": "few_uniques", "params": {"k": 10, "range": [0, 99]}}
            {"dist": "reversed"}
            {"dist": "words", "params": {"min_len": 1, "max_len": 8}}
            {"dist": "scores", "params": {"mean": 0.0, "std": 1.0, "decimals": 2}}

    rng : numpy.random.Generator
        Random number generator owned by the caller.

    Returns
    -------
    list
        A list of length `n`.

    Raises
    ------
    ValueError
        If inputs are invalid or if the distribution is unsupported.
    """
    _validate_n(n)

    if not isinstance(spec, dict):
        raise ValueError("spec must be a dict")

    dist = spec.get("dist", None)
    if dist not in SUPPORTED_DISTS:
        raise ValueError(
            f"Unsupported dataset dist: {dist!r}. Supported: {sorted(SUPPORTED_DISTS)}"
        )

    params = spec.get("params") or {}
    if not isinstance(params, dict):
        raise ValueError(f"{dist}.params must be a dict")

    if dist == "random":
        lo, hi = _parse_range(params, required=True, default=(0, 0), what="random")
        if n == 0:
            return []
        # Generator.integers is half-open; +1 makes the bound inclusive.
        return rng.integers(lo, hi + 1, size=n, dtype=np.int64).tolist()

    if dist == "nearly_sorted":
        swap_frac = _parse_fraction(params, "swap_frac", default=0.05)
        arr = list(range(n))
        num_swaps = int(np.ceil(swap_frac * n))
        if n == 0 or num_swaps == 0:
            return arr
        idxs = rng.integers(0, n, size=(num_swaps, 2))
        for i, j in idxs.tolist():
            arr[i], arr[j] = arr[j], arr[i]
        return arr

    if dist == "few_uniques":
        k = _parse_positive_int(params, "k", what="few_uniques")
        lo, hi = _parse_range(params, required=False, default=(0, 4294967295), what="few_uniques")
        if n == 0:
            return []
        actual_k = int(min(k, n, hi - lo + 1))
        # Distinct values drawn with the caller's RNG only, to stay reproducible.
        values: List[int] = []
        seen = set()
        while len(values) < actual_k:
            for v in rng.integers(lo, hi + 1, size=2 * (actual_k - len(values))).tolist():
                if v not in seen:
                    seen.add(v)
                    values.append(v)
                    if len(values) == actual_k:
                        break
        return [values[t] for t in rng.integers(0, actual_k, size=n).tolist()]

    if dist == "reversed":
        return list(range(n - 1, -1, -1))

    if dist == "words":
        min_len = _parse_positive_int(params, "min_len", what="words", default=1)
        max_len = _parse_positive_int(params, "max_len", what="words", default=8)
        if min_len > max_len:
            raise ValueError(f"words invalid: min_len > max_len ({min_len} > {max_len})")
        if n == 0:
            return []
        lengths = rng.integers(min_len, max_len + 1, size=n)
        return ["".join(rng.choice(_LETTERS, size=int(length))) for length in lengths]

    if dist == "scores":
        mean = float(params.get("mean", 0.0))
        std = float(params.get("std", 1.0))
        decimals = params.get("decimals", 2)
        if std < 0:
            raise ValueError(f"scores.params.std must be >= 0; got {std}")
        if not isinstance(decimals, int) or decimals < 0:
            raise ValueError(f"scores.params.decimals must be an integer >= 0; got {decimals!r}")
        if n == 0:
            return []
        return np.round(rng.normal(mean, std, size=n), decimals).tolist()

    raise ValueError(f"Unhandled dataset dist: {dist!r}")


# ------------------------- helpers ------------------------- #


def _validate_n(n: int) -> None:
    if not isinstance(n, int) or isinstance(n, bool):
        raise ValueError("n must be an int")
    if n < 0:
        raise ValueError("n must be nonnegative")


def _parse_range(
    params: Dict[str, Any], *, required: bool, default: Tuple[int, int], what: str
) -> Tuple[int, int]:
    """
    Parse params["range"] == [min_int, max_int] (both inclusive).
    Falls back to `default` when absent and not `required`.
    """
    if "range" not in params:
        if required:
            raise ValueError(f"{what}.params.range must be provided as [min, max] (inclusive)")
        return default
    spec = params["range"]
    if not isinstance(spec, (list, tuple)) or len(spec) != 2:
        raise ValueError(f"{what}.params.range must be a 2-element list/tuple [min, max]")
    lo_raw, hi_raw = spec
    if not _is_int_like(lo_raw) or not _is_int_like(hi_raw):
        raise ValueError(f"{what}.params.range values must be integers")
    lo, hi = int(lo_raw), int(hi_raw)
    if lo > hi:
        raise ValueError(f"{what}.params.range invalid: min > max ({lo} > {hi})")
    return lo, hi


def _parse_fraction(params: Dict[str, Any], key: str, default: float) -> float:
    val = params.get(key, default)
    try:
        x = float(val)
    except (TypeError, ValueError) as e:
        raise ValueError(f"params.{key} must be a float in [0.0, 1.0]; got {val!r}") from e
    if not (0.0 <= x <= 1.0):
        raise ValueError(f"params.{key} must be in [0.0, 1.0]; got {x}")
    return x


def _parse_positive_int(
    params: Dict[str, Any], key: str, *, what: str, default: int | None = None
) -> int:
    if key not in params:
        if default is None:
            raise ValueError(f"{what}.params.{key} must be provided (int >= 1)")
        return default
    val = params[key]
    if not _is_int_like(val) or int(val) < 1:
        raise ValueError(f"{what}.params.{key} must be an integer >= 1; got {val!r}")
    return int(val)


def _is_int_like(x: Any) -> bool:
    # Python ints and NumPy integer types; bool is deliberately rejected
    return isinstance(x, (int, np.integer)) and not isinstance(x, bool)
