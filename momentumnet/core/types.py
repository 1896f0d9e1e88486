"""Core typing contracts for momentumnet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

Topology = Tuple[int, ...]
Vector = List[float]


@dataclass
class Connection:
    """Outgoing edge owned by an upstream neuron.

    Only the downstream neuron's ``update_input_weights`` writes to a
    connection, and only through the slot matching its own index.
    """

    weight: float
    delta_weight: float = 0.0


@dataclass(frozen=True)
class Sample:
    """A single input/target training pair."""

    inputs: Tuple[float, ...]
    targets: Tuple[float, ...]

    @classmethod
    def of(cls, inputs: Sequence[float], targets: Sequence[float]) -> "Sample":
        return cls(tuple(float(v) for v in inputs), tuple(float(v) for v in targets))


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :meth:`momentumnet.training.trainer.Trainer.run`."""

    steps: int
    epochs: int
    final_error: float
    recent_average_error: float
    metrics_path: str = ""
    summary_path: str = ""


@dataclass(frozen=True)
class Evaluation:
    """Outcome of evaluating a network without updating its weights."""

    mean_error: float
    outputs: List[Vector]
