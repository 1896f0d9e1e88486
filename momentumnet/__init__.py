"""momentumnet public API."""

from .core.errors import (
    BiasNeuronError,
    InvalidTopology,
    NetworkError,
    ShapeMismatch,
    TrainingDataError,
)
from .core.network import DEFAULT_ALPHA, DEFAULT_ETA, Network
from .core.neuron import Neuron
from .core.types import Connection, RunResult, Sample
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer

__all__ = [
    "BiasNeuronError",
    "Connection",
    "DEFAULT_ALPHA",
    "DEFAULT_ETA",
    "InvalidTopology",
    "Network",
    "NetworkError",
    "Neuron",
    "RunResult",
    "Sample",
    "ShapeMismatch",
    "Trainer",
    "TrainingDataError",
    "load_preset",
    "presets",
    "run_pipeline",
]
