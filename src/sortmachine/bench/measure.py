"""
Timing harness for sorting machines.

One sample is one full run of the two-phase protocol on a fresh machine:
construct, add every element, transition, drain. Each phase is timed
separately with a monotonic high-resolution clock; the sample's total is the
sum of the three. Copying the input, GC and warmup happen outside the timed
blocks.

Public API (stable):
    time_machine_run(...) -> dict

Returned dict schema:
    {
        "machine": str,
        "repeats": int,
        "samples_ns": list[int],            # total elapsed ns per successful sample
        "add_ns": list[int],                # per-sample insertion phase
        "transition_ns": list[int],         # per-sample transition
        "drain_ns": list[int],              # per-sample extraction phase
        "status": "ok" | "timeout" | "error" | "invalid",
        "error": str | None,                # populated if status is "error"/"invalid"
        "timed_out_on_repeat": int | None,  # 0-based repeat index if timeout occurred
    }
"""

from __future__ import annotations

import gc
import logging
import time
from typing import Any, Callable, Dict, List, Sequence, Tuple

from sortmachine.order import Order
from sortmachine.validate import equals_oracle, first_nondecreasing_violation_index

__all__ = ["time_machine_run", "run_protocol"]

logger = logging.getLogger(__name__)


def run_protocol(new_machine: Callable[[Order], Any], items: Sequence[Any], order: Order) -> Tuple[List[Any], int, int, int]:
    """
    Drive one machine through add* -> transition -> remove_first*.

    Returns (output, add_ns, transition_ns, drain_ns).
    """
    m = new_machine(order)
    add = m.add
    t0 = time.perf_counter_ns()
    for x in items:
        add(x)
    t1 = time.perf_counter_ns()
    m.transition_to_extraction()
    t2 = time.perf_counter_ns()
    remove_first = m.remove_first
    out = [remove_first() for _ in range(m.size())]
    t3 = time.perf_counter_ns()
    return out, t1 - t0, t2 - t1, t3 - t2


def time_machine_run(
    *,
    machine_name: str,
    new_machine: Callable[[Order], Any],
    items: List[Any],
    order: Order,
    repeats: int,
    warmup: bool,
    disable_gc: bool,
    timeout_seconds: float,
    validate: bool = False,
) -> Dict[str, Any]:
    """
    Time repeated protocol runs of the machine built by `new_machine(order)`.

    Parameters
    ----------
    machine_name : str
        Logical name of the machine (for logs/records).
    new_machine : Callable[[Order], machine]
        Factory returning a fresh insertion-mode machine.
    items : list
        Elements to add. Never mutated.
    order : Order
        Comparator the machine is bound to.
    repeats : int
        Number of timed samples to collect.
    warmup : bool
        If True, make one untimed run before timing.
    disable_gc : bool
        If True, collect and disable Python GC during the timed loop; restore afterward.
    timeout_seconds : float
        Per-sample threshold. A sample whose total exceeds it is kept, marks
        status="timeout" and stops further sampling.
    validate : bool
        If True, check the output of one untimed run against the oracle before
        timing; a mismatch marks status="invalid" and no samples are taken.

    Returns
    -------
    dict
        See module docstring for exact schema.
    """
    if repeats < 0:
        raise ValueError("repeats must be nonnegative")
    if timeout_seconds <= 0:
        raise ValueError("timeout_seconds must be positive")

    result: Dict[str, Any] = {
        "machine": machine_name,
        "repeats": repeats,
        "samples_ns": [],
        "add_ns": [],
        "transition_ns": [],
        "drain_ns": [],
        "status": "ok",
        "error": None,
        "timed_out_on_repeat": None,
    }

    # ---- Validation / warmup (untimed, GC untouched) ----
    if validate or (warmup and repeats > 0):
        try:
            out, _, _, _ = run_protocol(new_machine, list(items), order)
        except Exception as e:  # pragma: no cover
            result["status"] = "error"
            result["error"] = f"warmup failed: {e!r}"
            return result
        if validate and not equals_oracle(items, out, order):
            i = first_nondecreasing_violation_index(out, order)
            result["status"] = "invalid"
            result["error"] = (
                f"output does not match oracle (first order violation at index {i})"
                if i is not None
                else "output is not a permutation of the input"
            )
            logger.warning("%s failed validation at n=%d: %s", machine_name, len(items), result["error"])
            return result

    prev_gc_enabled = gc.isenabled()
    try:
        if disable_gc:
            gc.collect()
            gc.disable()

        threshold_ns = int(timeout_seconds * 1e9)
        for r in range(repeats):
            try:
                arg = list(items)
                _out, add_ns, trans_ns, drain_ns = run_protocol(new_machine, arg, order)
            except Exception as e:  # pragma: no cover
                result["status"] = "error"
                result["error"] = f"run failed at repeat {r}: {e!r}"
                break

            total = add_ns + trans_ns + drain_ns
            result["samples_ns"].append(int(total))
            result["add_ns"].append(int(add_ns))
            result["transition_ns"].append(int(trans_ns))
            result["drain_ns"].append(int(drain_ns))

            if total > threshold_ns:
                result["status"] = "timeout"
                result["timed_out_on_repeat"] = r
                break

    finally:
        # Leave GC disabled if the caller had it disabled.
        if disable_gc and prev_gc_enabled:
            gc.enable()

    return result
