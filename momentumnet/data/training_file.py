"""Plain-text training data files.

The format is line oriented::

    topology: 2 4 1
    in: 1.0 0.0
    out: 1.0

``topology:`` is optional and must come first when present. Every ``in:``
line is paired with the ``out:`` line that follows it. Blank lines and lines
starting with ``#`` are ignored.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from ..core.errors import InvalidTopology, TrainingDataError
from ..core.network import validate_topology
from ..core.types import Sample
from .registry import DatasetSpec, register_dataset
from .truth_tables import FUNCTIONS

logger = logging.getLogger(__name__)


def _parse_numbers(text: str, line: int, cast=float) -> List:
    try:
        return [cast(token) for token in text.split()]
    except ValueError as exc:
        raise TrainingDataError(f"cannot parse numbers from {text.strip()!r}", line) from exc


def parse_training_data(
    lines: Iterable[str],
) -> Tuple[Tuple[int, ...] | None, List[Sample]]:
    """Parse training data lines into an optional topology and samples."""

    topology: Tuple[int, ...] | None = None
    samples: List[Sample] = []
    pending: Tuple[List[float], int] | None = None
    seen_content = False

    for line_no, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        label, sep, rest = line.partition(":")
        if not sep:
            raise TrainingDataError(f"expected 'label: values', got {line!r}", line_no)
        label = label.strip().lower()

        if label == "topology":
            if seen_content:
                raise TrainingDataError("topology must be the first entry", line_no)
            try:
                topology = validate_topology(_parse_numbers(rest, line_no, int))
            except InvalidTopology as exc:
                raise TrainingDataError(str(exc), line_no) from exc
        elif label == "in":
            if pending is not None:
                raise TrainingDataError("'in:' line without a matching 'out:' line", pending[1])
            values = _parse_numbers(rest, line_no)
            if topology is not None and len(values) != topology[0]:
                raise TrainingDataError(
                    f"expected {topology[0]} inputs, got {len(values)}", line_no
                )
            pending = (values, line_no)
        elif label == "out":
            if pending is None:
                raise TrainingDataError("'out:' line without a preceding 'in:' line", line_no)
            values = _parse_numbers(rest, line_no)
            if topology is not None and len(values) != topology[-1]:
                raise TrainingDataError(
                    f"expected {topology[-1]} targets, got {len(values)}", line_no
                )
            samples.append(Sample.of(pending[0], values))
            pending = None
        else:
            raise TrainingDataError(f"unknown label {label!r}", line_no)
        seen_content = True

    if pending is not None:
        raise TrainingDataError("'in:' line without a matching 'out:' line", pending[1])
    return topology, samples


def read_training_file(path: str | Path) -> Tuple[Tuple[int, ...] | None, List[Sample]]:
    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        topology, samples = parse_training_data(handle)
    logger.info("Loaded %d samples from %s", len(samples), path)
    return topology, samples


def format_training_data(
    samples: Sequence[Sample], topology: Sequence[int] | None = None
) -> str:
    """Render ``samples`` in the training file format."""

    lines: List[str] = []
    if topology is not None:
        lines.append("topology: " + " ".join(str(int(n)) for n in topology))
    for sample in samples:
        lines.append("in: " + " ".join(repr(v) for v in sample.inputs))
        lines.append("out: " + " ".join(repr(v) for v in sample.targets))
    return "\n".join(lines) + "\n"


def generate_truth_table(
    name: str,
    n: int,
    seed: int = 0,
    topology: Sequence[int] = (2, 4, 1),
) -> List[Sample]:
    """Draw ``n`` random rows of the boolean function ``name``."""

    if name not in FUNCTIONS:
        raise KeyError(f"Unknown boolean function: {name}")
    if n < 1:
        raise ValueError(f"n must be at least 1, got {n}")
    topology = validate_topology(topology)
    if topology[0] != 2 or topology[-1] != 1:
        raise InvalidTopology(
            f"boolean functions need 2 inputs and 1 output, got {list(topology)}"
        )
    fn = FUNCTIONS[name]
    rng = np.random.default_rng(seed)
    bits = rng.integers(0, 2, size=(n, 2))
    return [Sample.of((a, b), (fn(int(a), int(b)),)) for a, b in bits]


def write_training_file(
    path: str | Path,
    samples: Sequence[Sample],
    topology: Sequence[int] | None = None,
) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_training_data(samples, topology), encoding="utf-8")
    logger.info("Wrote %d samples to %s", len(samples), path)
    return path


@register_dataset("training_file")
def load_training_file(path: str | Path | None = None, **_: object) -> DatasetSpec:
    if path is None:
        raise ValueError("training_file dataset requires a 'path' option")
    topology, samples = read_training_file(path)
    if not samples:
        raise TrainingDataError(f"{path} contains no samples")
    hint = topology or (len(samples[0].inputs), len(samples[0].targets))
    return DatasetSpec(
        name="training_file",
        samples=samples,
        topology_hint=tuple(hint),
        provenance={"type": "training_file", "path": str(path)},
    )


__all__ = [
    "format_training_data",
    "generate_truth_table",
    "load_training_file",
    "parse_training_data",
    "read_training_file",
    "write_training_file",
]
