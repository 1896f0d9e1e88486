"""Pipeline assembly: config mapping -> dataset, network, trainer, artifacts."""

from __future__ import annotations

import json
import logging
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from ..core.network import (
    DEFAULT_ALPHA,
    DEFAULT_ETA,
    DEFAULT_SMOOTHING_FACTOR,
    Network,
    validate_topology,
)
from ..core.types import RunResult
from ..data import get_dataset
from ..data.registry import DatasetSpec
from ..reporting.metrics import CsvSink, JsonlSink, MetricsCapture
from ..reporting.summary import write_summary
from .trainer import Trainer

logger = logging.getLogger(__name__)

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor": {
        "data": {"name": "xor", "options": {}},
        "model": {"hidden": [4], "eta": 0.15, "alpha": 0.5},
        "train": {
            "epochs": 2000,
            "seed": 7,
            "shuffle": True,
            "target_error": 0.02,
            "run_dir": "runs/xor",
        },
    },
    "and": {
        "data": {"name": "and", "options": {}},
        "model": {"hidden": [2], "eta": 0.15, "alpha": 0.5},
        "train": {"epochs": 500, "seed": 3, "shuffle": True, "run_dir": "runs/and"},
    },
    "or": {
        "data": {"name": "or", "options": {}},
        "model": {"hidden": [2], "eta": 0.15, "alpha": 0.5},
        "train": {"epochs": 500, "seed": 5, "shuffle": True, "run_dir": "runs/or"},
    },
    "single-pair": {
        "data": {
            "name": "single-pair",
            "options": {"inputs": [1.0, 0.0], "targets": [1.0]},
        },
        "model": {"topology": [2, 2, 1], "eta": 0.15, "alpha": 0.5},
        "train": {
            "epochs": 2000,
            "seed": 0,
            "shuffle": False,
            "run_dir": "runs/single-pair",
        },
    },
}

_REQUIRED_SECTIONS = {"data", "model", "train"}


def presets() -> Mapping[str, Mapping[str, object]]:
    return {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}


def load_preset(name: str) -> Mapping[str, object]:
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        available = ", ".join(sorted(_PRESETS))
        raise KeyError(f"Unknown preset {name!r}. Available presets: {available}") from exc


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")

    data_cfg = dict(config["data"])
    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])

    dataset = get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    topology = resolve_topology(model_cfg, dataset)
    seed = int(train_cfg.get("seed", 0))
    epochs = int(train_cfg.get("epochs", 1))
    target_error = train_cfg.get("target_error")
    target_error = float(target_error) if target_error is not None else None

    network = Network(
        topology,
        eta=float(model_cfg.get("eta", DEFAULT_ETA)),
        alpha=float(model_cfg.get("alpha", DEFAULT_ALPHA)),
        smoothing_factor=float(model_cfg.get("smoothing_factor", DEFAULT_SMOOTHING_FACTOR)),
        seed=seed,
    )

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        samples=len(dataset.samples),
        topology=topology,
        eta=network.eta,
        alpha=network.alpha,
        epochs=epochs,
        param_count=network.parameter_count(),
    )

    epoch_jsonl = JsonlSink(run_dir / "metrics.jsonl", kind="epoch", seed=seed)
    epoch_csv = CsvSink(run_dir / "metrics.csv")
    capture = MetricsCapture()
    callbacks: List[object] = [epoch_jsonl, epoch_csv, capture]
    if train_cfg.get("step_metrics", False):
        callbacks.append(JsonlSink(run_dir / "steps.jsonl", kind="step", seed=seed))

    trainer = Trainer(network, callbacks=callbacks)
    result = trainer.run(
        dataset.samples,
        epochs=epochs,
        shuffle=bool(train_cfg.get("shuffle", True)),
        seed=seed,
        report_every=int(train_cfg.get("report_every", 1)),
        target_error=target_error,
    )
    evaluation = trainer.evaluate(dataset.samples)
    logger.info(
        "Finished %d epochs (%d steps); final loss %.6f, evaluation error %.6f",
        result.epochs,
        result.steps,
        result.final_error,
        evaluation.mean_error,
    )

    summary_path = write_summary(epoch_jsonl.path, run_dir / "summary.json")
    resolved = _safe_config(config, topology)
    resolved["dataset"] = dataset.provenance
    resolved["evaluation"] = {"mean_error": evaluation.mean_error}
    resolved["final_metrics"] = dict(capture.last)
    (run_dir / "config.json").write_text(json.dumps(resolved, indent=2, sort_keys=True))

    return RunResult(
        steps=result.steps,
        epochs=result.epochs,
        final_error=result.final_error,
        recent_average_error=result.recent_average_error,
        metrics_path=str(epoch_jsonl.path),
        summary_path=summary_path,
    )


def resolve_topology(model_cfg: Mapping[str, object], dataset: DatasetSpec) -> List[int]:
    """Build layer sizes from the model config and the dataset's widths."""

    if "topology" in model_cfg:
        topology = list(validate_topology(model_cfg["topology"]))  # type: ignore[arg-type]
        if topology[0] != dataset.d_in or topology[-1] != dataset.d_out:
            raise ValueError(
                f"Configured topology {topology} does not fit dataset "
                f"{dataset.name!r} with {dataset.d_in} inputs and {dataset.d_out} outputs"
            )
        return topology
    if "hidden" in model_cfg:
        hidden: Sequence[int] = [int(h) for h in model_cfg["hidden"]]  # type: ignore[union-attr]
    else:
        hidden = list(dataset.topology_hint[1:-1])
    return list(validate_topology([dataset.d_in, *hidden, dataset.d_out]))


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _safe_config(config: Mapping[str, object], topology: Sequence[int]) -> Dict[str, object]:
    copied = json.loads(json.dumps(config))
    copied.setdefault("model", {})["topology"] = list(topology)
    return copied


def _print_startup_summary(
    *,
    dataset_name: str,
    samples: int,
    topology: Sequence[int],
    eta: float,
    alpha: float,
    epochs: int,
    param_count: int,
) -> None:
    print("=== momentumnet run ===")
    print(f"Dataset       : {dataset_name} ({samples} samples)")
    print(f"Topology      : {list(topology)}")
    print(f"Eta / alpha   : {eta} / {alpha}")
    print(f"Epochs        : {epochs}")
    print(f"Parameters    : {param_count}")
    print("=======================")


__all__ = ["load_preset", "presets", "resolve_topology", "run_pipeline"]
