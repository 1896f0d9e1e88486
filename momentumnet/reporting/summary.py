"""Deterministic run summaries built from a metrics JSONL file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List, Mapping

import numpy as np

_INDEX_KEYS = {"epoch", "step", "seed"}


def _read_records(path: Path) -> List[Mapping[str, object]]:
    records: List[Mapping[str, object]] = []
    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if line:
                records.append(json.loads(line))
    return records


def _extract_numeric(records: Iterable[Mapping[str, object]]) -> Dict[str, List[float]]:
    metrics: Dict[str, List[float]] = {}
    for record in records:
        for key, value in record.items():
            if key in _INDEX_KEYS:
                continue
            if isinstance(value, (int, float)):
                metrics.setdefault(key, []).append(float(value))
    return metrics


def summarise(records: List[Mapping[str, object]]) -> Mapping[str, object]:
    summary_metrics: Dict[str, Mapping[str, float]] = {}
    for name, values in _extract_numeric(records).items():
        arr = np.asarray(values, dtype=np.float64)
        summary_metrics[name] = {
            "min": float(np.min(arr)),
            "max": float(np.max(arr)),
            "mean": float(np.mean(arr)),
            "last": float(arr[-1]),
            "argmin": int(np.argmin(arr)),
        }
    return {"version": 1, "records": len(records), "metrics": summary_metrics}


def write_summary(metrics_jsonl: str | Path, out_summary_json: str | Path) -> str:
    """Write a summary of ``metrics_jsonl`` to ``out_summary_json``."""

    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = summarise(_read_records(Path(metrics_jsonl)))
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["summarise", "write_summary"]
