"""
Tests for the timing harness and the YAML experiment runner.

Runs are tiny (a handful of elements, one or two repeats) so these stay fast;
they check plumbing and output files, not performance.
"""

from __future__ import annotations

import json
import pathlib
import sys

import pandas as pd
import pytest
import yaml

_REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
_SRC = _REPO_ROOT / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from sortmachine.bench.measure import run_protocol, time_machine_run
from sortmachine.bench.runner import (
    SUMMARY_COLUMNS,
    aggregate_summary,
    main,
    resolve_config,
    run_experiment,
)
from sortmachine.machines import heap, merge
from sortmachine.machines.heap import HeapSortingMachine
from sortmachine.order import natural_order


# ------------------------- measure ------------------------- #

def test_run_protocol_sorts() -> None:
    out, add_ns, trans_ns, drain_ns = run_protocol(heap.new_machine, [3, 1, 2], natural_order)
    assert out == [1, 2, 3]
    assert min(add_ns, trans_ns, drain_ns) >= 0


def test_time_machine_run_ok() -> None:
    items = [5, 4, 3, 2, 1]
    res = time_machine_run(
        machine_name="merge",
        new_machine=merge.new_machine,
        items=items,
        order=natural_order,
        repeats=3,
        warmup=True,
        disable_gc=True,
        timeout_seconds=60.0,
        validate=True,
    )
    assert res["status"] == "ok"
    assert res["error"] is None
    assert len(res["samples_ns"]) == 3
    assert len(res["add_ns"]) == len(res["transition_ns"]) == len(res["drain_ns"]) == 3
    assert items == [5, 4, 3, 2, 1]


def test_time_machine_run_flags_wrong_output() -> None:
    class Backwards(HeapSortingMachine):
        def __init__(self, order):
            super().__init__(lambda a, b: order(b, a))

    res = time_machine_run(
        machine_name="backwards",
        new_machine=Backwards,
        items=[1, 2, 3],
        order=natural_order,
        repeats=2,
        warmup=False,
        disable_gc=False,
        timeout_seconds=60.0,
        validate=True,
    )
    assert res["status"] == "invalid"
    assert "index 0" in res["error"]
    assert res["samples_ns"] == []


def test_time_machine_run_timeout() -> None:
    res = time_machine_run(
        machine_name="heap",
        new_machine=heap.new_machine,
        items=list(range(50)),
        order=natural_order,
        repeats=5,
        warmup=False,
        disable_gc=False,
        timeout_seconds=1e-12,
    )
    assert res["status"] == "timeout"
    assert res["timed_out_on_repeat"] == 0
    assert len(res["samples_ns"]) == 1


@pytest.mark.parametrize("kwargs", [{"repeats": -1}, {"timeout_seconds": 0.0}])
def test_time_machine_run_rejects_bad_args(kwargs) -> None:
    base = dict(
        machine_name="heap",
        new_machine=heap.new_machine,
        items=[],
        order=natural_order,
        repeats=1,
        warmup=False,
        disable_gc=False,
        timeout_seconds=1.0,
    )
    base.update(kwargs)
    with pytest.raises(ValueError):
        time_machine_run(**base)


# ------------------------- runner ------------------------- #

def _config(tmp_path: pathlib.Path, **overrides) -> dict:
    cfg = {
        "experiment_name": "tiny",
        "output_dir": str(tmp_path / "runs"),
        "seed": 123,
        "repeats": 2,
        "warmup": False,
        "disable_gc": False,
        "timeout_seconds": 60.0,
        "dataset": {"dist": "words", "params": {"min_len": 1, "max_len": 2}},
        "sizes": [0, 5, 20],
        "machines": [{"name": "heap"}, "merge"],
        "order": "case_insensitive",
    }
    cfg.update(overrides)
    return cfg


def _write(tmp_path: pathlib.Path, cfg: dict) -> pathlib.Path:
    path = tmp_path / "exp.yaml"
    path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return path


def test_resolve_config_fills_defaults(tmp_path) -> None:
    cfg = _config(tmp_path)
    del cfg["order"]
    resolved = resolve_config(cfg)
    assert resolved["order"] == "natural"
    assert resolved["validate"] is True
    assert resolved["log_level"] == "INFO"


@pytest.mark.parametrize(
    "overrides, match",
    [
        ({"sizes": []}, "sizes"),
        ({"sizes": [10, -1]}, "sizes"),
        ({"machines": []}, "machines"),
        ({"order": "sideways"}, "Unknown order"),
        ({"timeout_seconds": 0}, "timeout_seconds"),
    ],
)
def test_resolve_config_rejects(tmp_path, overrides, match) -> None:
    with pytest.raises(ValueError, match=match):
        resolve_config(_config(tmp_path, **overrides))


def test_resolve_config_missing_keys(tmp_path) -> None:
    cfg = _config(tmp_path)
    del cfg["seed"]
    with pytest.raises(ValueError, match="seed"):
        resolve_config(cfg)


def test_run_experiment_writes_outputs(tmp_path) -> None:
    run_dir = run_experiment(_write(tmp_path, _config(tmp_path)), show_progress=False)

    for name in ("config_resolved.yaml", "meta.json", "results.jsonl", "summary.csv"):
        assert (run_dir / name).exists(), name

    meta = json.loads((run_dir / "meta.json").read_text(encoding="utf-8"))
    assert "python" in meta and "machine" in meta

    lines = [json.loads(l) for l in (run_dir / "results.jsonl").read_text(encoding="utf-8").splitlines()]
    assert len(lines) == 2 * 3 * 2  # machines * sizes * repeats
    assert {l["machine"] for l in lines} == {"heap", "merge"}
    assert all("status" not in l for l in lines)

    summary = pd.read_csv(run_dir / "summary.csv")
    assert list(summary.columns) == SUMMARY_COLUMNS
    assert len(summary) == 6
    assert (summary["samples_ok"] == 2).all()


def test_run_experiment_unknown_machine(tmp_path) -> None:
    path = _write(tmp_path, _config(tmp_path, machines=["quantum"]))
    with pytest.raises(ImportError, match="quantum"):
        run_experiment(path, show_progress=False)


def test_run_experiment_duplicate_machine(tmp_path) -> None:
    path = _write(tmp_path, _config(tmp_path, machines=["heap", "heap"]))
    with pytest.raises(ValueError, match="Duplicate"):
        run_experiment(path, show_progress=False)


def test_aggregate_summary_without_samples(tmp_path) -> None:
    assert aggregate_summary(tmp_path / "missing.jsonl").empty
    status_only = tmp_path / "results.jsonl"
    status_only.write_text(json.dumps({"machine": "heap", "n": 5, "status": "timeout"}) + "\n", encoding="utf-8")
    out = aggregate_summary(status_only)
    assert out.empty
    assert list(out.columns) == SUMMARY_COLUMNS


def test_main_quiet(tmp_path) -> None:
    path = _write(tmp_path, _config(tmp_path, sizes=[3]))
    main([str(path), "--quiet", "--log-level", "WARNING"])
    runs = list((tmp_path / "runs").iterdir())
    assert len(runs) == 1


def test_main_missing_config(tmp_path) -> None:
    with pytest.raises(SystemExit):
        main([str(tmp_path / "nope.yaml")])


def test_main_reports_bad_log_level(tmp_path, capsys) -> None:
    path = _write(tmp_path, _config(tmp_path, sizes=[3]))
    with pytest.raises(ValueError):
        main([str(path), "--quiet", "--log-level", "LOUDEST"])
    assert "Runner failed" in capsys.readouterr().out
    assert not (tmp_path / "runs").exists()
