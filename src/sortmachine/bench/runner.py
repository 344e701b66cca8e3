"""
Experiment runner: orchestrates a sorting-machine benchmark sweep from a YAML config.

Usage (from repo root):
    python -m sortmachine.bench.runner experiments/configs/01_heap_vs_merge.yaml
    sortmachine-bench experiments/configs/01_heap_vs_merge.yaml --log-level DEBUG

Outputs in a new run directory:
    - config_resolved.yaml    # the config we actually used (defaults filled in)
    - meta.json               # environment info (python, numpy, cpu/ram, git commit)
    - results.jsonl           # one JSON line per timing sample, plus status lines
    - summary.csv             # median + IQR (+ per-phase medians) per (machine, n)
    - (console) rich/tqdm summaries

Design notes:
- For each size n, we generate ONE dataset and feed the same elements to every machine.
- On timeout/error/validation failure for a machine at size n, larger sizes are skipped for it.
"""

from __future__ import annotations

import argparse
import datetime as _dt
import importlib
import json
import logging
import os
import platform
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
import psutil
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from tqdm import tqdm

from sortmachine.bench.measure import time_machine_run
from sortmachine.datasets import make_dataset
from sortmachine.order import Order, get_order

logger = logging.getLogger(__name__)

_console = Console()

REQUIRED_KEYS = [
    "experiment_name",
    "output_dir",
    "seed",
    "repeats",
    "warmup",
    "disable_gc",
    "timeout_seconds",
    "dataset",
    "sizes",
    "machines",
]
DEFAULTS: Dict[str, Any] = {
    "order": "natural",
    "validate": True,
    "log_level": "INFO",
}
SUMMARY_COLUMNS = [
    "machine",
    "n",
    "samples_ok",
    "median_ns",
    "iqr_ns",
    "min_ns",
    "max_ns",
    "add_median_ns",
    "transition_median_ns",
    "drain_median_ns",
]


# ------------------------- data structures ------------------------- #

@dataclass(frozen=True)
class MachineSpec:
    name: str
    new_machine: Callable[[Order], Any]


# ------------------------- helpers: IO & meta ------------------------- #

def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    if not isinstance(cfg, dict):
        raise ValueError(f"Config {path} must be a YAML mapping")
    return cfg


def _write_yaml(obj: Dict[str, Any], path: Path) -> None:
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(obj, f, sort_keys=False)


def _append_jsonl(obj: Dict[str, Any], path: Path) -> None:
    with path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(obj, separators=(",", ":"), ensure_ascii=False))
        f.write("\n")


def _timestamp() -> str:
    return _dt.datetime.now().strftime("%Y%m%d_%H%M%S")


def _ensure_run_dir(base_dir: Path, experiment_name: str) -> Path:
    base_dir.mkdir(parents=True, exist_ok=True)
    run_dir = base_dir / f"{_timestamp()}_{experiment_name}"
    suffix = 1
    while run_dir.exists():
        run_dir = base_dir / f"{_timestamp()}_{experiment_name}_{suffix}"
        suffix += 1
    run_dir.mkdir(parents=False, exist_ok=False)
    return run_dir


def _git_commit_short() -> Optional[str]:
    try:
        out = subprocess.check_output(["git", "rev-parse", "--short", "HEAD"], stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError):
        return None
    return out.decode("utf-8").strip()


def _gather_meta() -> Dict[str, Any]:
    return {
        "python": platform.python_version(),
        "numpy": np.__version__,
        "pandas": pd.__version__,
        "psutil": psutil.__version__,
        "git_commit": _git_commit_short(),
        "machine": {
            "cpu": platform.processor() or platform.machine(),
            "cores_logical": psutil.cpu_count(logical=True),
            "cores_physical": psutil.cpu_count(logical=False),
            "ram_gb": round(psutil.virtual_memory().total / (1024**3), 2),
            "platform": platform.platform(),
        },
        "start_time": _dt.datetime.now().isoformat(timespec="seconds"),
        "pid": os.getpid(),
        "cwd": str(Path.cwd()),
    }


def setup_logging(level: str = "INFO") -> None:
    """Route log records through rich; called once by the CLI."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


# ------------------------- helpers: config ------------------------- #

def resolve_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Check required keys, fill defaults and validate value shapes."""
    missing = [k for k in REQUIRED_KEYS if k not in cfg]
    if missing:
        raise ValueError(f"Missing required config keys: {missing}")

    resolved = {**DEFAULTS, **cfg}

    sizes = resolved["sizes"]
    if not isinstance(sizes, list) or not sizes:
        raise ValueError("Config 'sizes' must be a non-empty list of nonnegative integers")
    if any(not isinstance(n, int) or isinstance(n, bool) or n < 0 for n in sizes):
        raise ValueError(f"Config 'sizes' must contain nonnegative integers; got {sizes!r}")

    if not isinstance(resolved["dataset"], dict):
        raise ValueError("Config 'dataset' must be a mapping with a 'dist' key")
    if not isinstance(resolved["machines"], list) or not resolved["machines"]:
        raise ValueError("Config 'machines' must be a non-empty list")
    if int(resolved["repeats"]) < 0:
        raise ValueError("Config 'repeats' must be nonnegative")
    if float(resolved["timeout_seconds"]) <= 0:
        raise ValueError("Config 'timeout_seconds' must be positive")

    get_order(str(resolved["order"]))  # fail early on unknown names
    return resolved


def _resolve_machines(cfg_machines: List[Any]) -> List[MachineSpec]:
    specs: List[MachineSpec] = []
    seen = set()
    for entry in cfg_machines:
        name = entry.get("name") if isinstance(entry, dict) else entry
        if not name or not isinstance(name, str):
            raise ValueError("Each machine must be a name or a mapping with a string 'name' field")
        if name in seen:
            raise ValueError(f"Duplicate machine name in config: {name}")
        seen.add(name)

        try:
            mod = importlib.import_module(f"sortmachine.machines.{name}")
        except ImportError as e:
            raise ImportError(f"Could not import machine module 'sortmachine.machines.{name}': {e!r}") from e

        factory = getattr(mod, "new_machine", None)
        if not callable(factory):
            raise AttributeError(f"Machine module '{name}' must define a callable `new_machine(order)`")

        specs.append(MachineSpec(name=name, new_machine=factory))
    return specs


# ------------------------- helpers: summary ------------------------- #

def _iqr(s: pd.Series) -> int:
    return int(s.quantile(0.75) - s.quantile(0.25))


def aggregate_summary(jsonl_path: Path) -> pd.DataFrame:
    """Collapse results.jsonl into one row per (machine, n)."""
    empty = pd.DataFrame(columns=SUMMARY_COLUMNS)
    if not jsonl_path.exists():
        return empty
    df = pd.read_json(jsonl_path, lines=True, convert_dates=False)
    if df.empty or "time_ns" not in df.columns:
        return empty
    df = df[df["time_ns"].notna()]
    if df.empty:
        return empty

    out = (
        df.groupby(["machine", "n"], as_index=False)
        .agg(
            samples_ok=("time_ns", "count"),
            median_ns=("time_ns", "median"),
            iqr_ns=("time_ns", _iqr),
            min_ns=("time_ns", "min"),
            max_ns=("time_ns", "max"),
            add_median_ns=("add_ns", "median"),
            transition_median_ns=("transition_ns", "median"),
            drain_median_ns=("drain_ns", "median"),
        )
    )
    int_cols = [c for c in SUMMARY_COLUMNS if c.endswith("_ns") or c in ("n", "samples_ok")]
    out[int_cols] = out[int_cols].astype("int64")
    return out[SUMMARY_COLUMNS].sort_values(["machine", "n"], ignore_index=True)


def _format_cell(median_ns: Optional[int], iqr_ns: Optional[int]) -> str:
    if median_ns is None:
        return "—"
    median_ms = median_ns / 1e6
    if iqr_ns is None:
        return f"{median_ms:.2f}"
    return f"{median_ms:.2f} ± {iqr_ns / 1e6:.2f}"


def _print_rich_summary(summary: pd.DataFrame, sizes: List[int]) -> None:
    # Columns for the first / middle / last size
    picks: List[Tuple[str, int]] = []
    for n in (sizes[0], sizes[len(sizes) // 2], sizes[-1]):
        if all(n != p for _, p in picks):
            picks.append((f"n={n}", n))

    table = Table(title="Benchmark Summary (median ± IQR in ms)")
    table.add_column("Machine", style="bold")
    for hdr, _ in picks:
        table.add_column(hdr, justify="right")

    for name in summary["machine"].unique():
        row = [str(name)]
        for _, npick in picks:
            s = summary[(summary["machine"] == name) & (summary["n"] == npick)]
            if s.empty:
                row.append("—")
            else:
                row.append(_format_cell(int(s["median_ns"].iloc[0]), int(s["iqr_ns"].iloc[0])))
        table.add_row(*row)
    _console.print()
    _console.print(table)
    _console.print()


# ------------------------- core runner ------------------------- #

def run_experiment(config_path: Path, *, show_progress: bool = True) -> Path:
    cfg = resolve_config(_load_yaml(config_path))

    experiment_name = str(cfg["experiment_name"])
    output_dir = Path(cfg["output_dir"])
    sizes: List[int] = list(cfg["sizes"])
    repeats = int(cfg["repeats"])
    warmup = bool(cfg["warmup"])
    disable_gc = bool(cfg["disable_gc"])
    timeout_seconds = float(cfg["timeout_seconds"])
    validate = bool(cfg["validate"])
    dataset_spec: Dict[str, Any] = dict(cfg["dataset"])
    order_name = str(cfg["order"])
    order = get_order(order_name)

    machines = _resolve_machines(list(cfg["machines"]))

    run_dir = _ensure_run_dir(output_dir, experiment_name)
    results_path = run_dir / "results.jsonl"
    summary_path = run_dir / "summary.csv"
    meta_path = run_dir / "meta.json"
    cfg_resolved_path = run_dir / "config_resolved.yaml"

    _write_yaml(cfg, cfg_resolved_path)
    with meta_path.open("w", encoding="utf-8") as f:
        json.dump(_gather_meta(), f, indent=2)

    rng = np.random.default_rng(int(cfg["seed"]))
    skipped = {m.name: False for m in machines}

    logger.info("Run directory: %s", run_dir)
    logger.info("Experiment %s: machines=%s order=%s", experiment_name, [m.name for m in machines], order_name)

    for n in tqdm(sizes, desc="Sizes", unit="n", disable=not show_progress):
        items = make_dataset(int(n), dataset_spec, rng)

        for spec in machines:
            if skipped[spec.name]:
                continue

            res = time_machine_run(
                machine_name=spec.name,
                new_machine=spec.new_machine,
                items=items,
                order=order,
                repeats=repeats,
                warmup=warmup,
                disable_gc=disable_gc,
                timeout_seconds=timeout_seconds,
                validate=validate,
            )

            for trial, (t_ns, a_ns, tr_ns, d_ns) in enumerate(
                zip(res["samples_ns"], res["add_ns"], res["transition_ns"], res["drain_ns"])
            ):
                _append_jsonl(
                    {
                        "machine": spec.name,
                        "n": int(n),
                        "dataset": dataset_spec,
                        "order": order_name,
                        "trial": trial,
                        "time_ns": int(t_ns),
                        "add_ns": int(a_ns),
                        "transition_ns": int(tr_ns),
                        "drain_ns": int(d_ns),
                    },
                    results_path,
                )

            status = res["status"]
            if status != "ok":
                skipped[spec.name] = True
                logger.warning("%s: status=%s at n=%d, skipping larger sizes", spec.name, status, n)
                _append_jsonl(
                    {
                        "machine": spec.name,
                        "n": int(n),
                        "status": status,
                        "error": res.get("error"),
                        "timed_out_on_repeat": res.get("timed_out_on_repeat"),
                    },
                    results_path,
                )

    summary_df = aggregate_summary(results_path)
    summary_df.to_csv(summary_path, index=False)

    if show_progress:
        _print_rich_summary(summary_df, sizes)
        _console.print("[bold green]Done.[/bold green] Wrote:")
        for p in (results_path, summary_path, meta_path, cfg_resolved_path):
            _console.print(f" - {p}")

    return run_dir


# ------------------------- CLI ------------------------- #

def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run a sorting-machine benchmark experiment from a YAML config.")
    p.add_argument("config", type=str, help="Path to YAML experiment config")
    p.add_argument("--log-level", default=None, help="Override the config's log_level (e.g. DEBUG)")
    p.add_argument("--quiet", action="store_true", help="No progress bar or summary table")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    config_path = Path(args.config).resolve()
    if not config_path.exists():
        raise SystemExit(f"Config file not found: {config_path}")

    try:
        level = args.log_level
        if level is None:
            # Peek at the config only for its log level; full validation happens in run_experiment.
            raw = _load_yaml(config_path)
            level = str(raw.get("log_level", DEFAULTS["log_level"]))
        setup_logging(level)
        run_experiment(config_path, show_progress=not args.quiet)
    except Exception as e:
        _console.print(f"[bold red]Runner failed:[/bold red] {e!r}")
        raise


if __name__ == "__main__":
    main()
