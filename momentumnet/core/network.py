"""Fully connected feed-forward network trained by backpropagation with momentum."""

from __future__ import annotations

import logging
import math
from numbers import Integral
from typing import List, Sequence

import numpy as np

from .errors import InvalidTopology, ShapeMismatch
from .neuron import Layer, Neuron
from .types import Topology, Vector

logger = logging.getLogger(__name__)

DEFAULT_ETA = 0.15
DEFAULT_ALPHA = 0.5
DEFAULT_SMOOTHING_FACTOR = 100.0


def validate_topology(topology: Sequence[int]) -> Topology:
    """Return ``topology`` as a tuple or raise :class:`InvalidTopology`."""

    try:
        sizes = list(topology)
    except TypeError as exc:
        raise InvalidTopology(f"topology must be a sequence, got {topology!r}") from exc
    if len(sizes) < 2:
        raise InvalidTopology(
            f"topology needs at least 2 layers, got {len(sizes)}"
        )
    for position, size in enumerate(sizes):
        if isinstance(size, bool) or not isinstance(size, Integral):
            raise InvalidTopology(
                f"layer {position} size must be an integer, got {size!r}"
            )
        if size <= 0:
            raise InvalidTopology(f"layer {position} size must be positive, got {size}")
    return tuple(int(size) for size in sizes)


class Network:
    """Layers of tanh neurons, each non-output layer ending in a bias neuron.

    Parameters
    ----------
    topology:
        Neuron count per layer, bias excluded. At least two layers.
    eta:
        Learning rate applied to every weight update of this network.
    alpha:
        Momentum, the fraction of the previous update carried into the next.
    smoothing_factor:
        Window of the exponentially smoothed ``recent_average_error``.
    seed:
        Seed for the weight initialisation generator. ``None`` draws fresh
        entropy.
    """

    def __init__(
        self,
        topology: Sequence[int],
        *,
        eta: float = DEFAULT_ETA,
        alpha: float = DEFAULT_ALPHA,
        smoothing_factor: float = DEFAULT_SMOOTHING_FACTOR,
        seed: int | None = None,
    ) -> None:
        self.topology = validate_topology(topology)
        if eta <= 0:
            raise ValueError(f"eta must be positive, got {eta}")
        if not 0.0 <= alpha < 1.0:
            raise ValueError(f"alpha must lie in [0, 1), got {alpha}")
        if smoothing_factor < 0:
            raise ValueError(f"smoothing_factor must be non-negative, got {smoothing_factor}")

        self.eta = float(eta)
        self.alpha = float(alpha)
        self.recent_average_smoothing_factor = float(smoothing_factor)
        self.seed = seed
        self.error = 0.0
        self.recent_average_error = 0.0

        rng = np.random.default_rng(seed)
        self.layers: List[Layer] = []
        last = len(self.topology) - 1
        for layer_num, size in enumerate(self.topology):
            num_outputs = 0 if layer_num == last else self.topology[layer_num + 1]
            layer: Layer = [Neuron(num_outputs, n, rng) for n in range(size)]
            layer.append(Neuron(num_outputs, size, rng, is_bias=True))
            self.layers.append(layer)
        logger.debug(
            "Built network topology=%s parameters=%d seed=%s",
            list(self.topology),
            self.parameter_count(),
            seed,
        )

    def __repr__(self) -> str:
        return (
            f"<Network topology={list(self.topology)} eta={self.eta} "
            f"alpha={self.alpha}>"
        )

    # ------------------------------------------------------------------
    # Forward and backward passes

    def feed_forward(self, input_vals: Sequence[float]) -> None:
        values = self._check_shape("input vector", input_vals, self.topology[0])

        for neuron, value in zip(self.layers[0], values):
            neuron.set_output_val(value)

        for layer_num in range(1, len(self.layers)):
            prev_layer = self.layers[layer_num - 1]
            for neuron in self.layers[layer_num][:-1]:
                neuron.feed_forward(prev_layer)

    def back_prop(self, target_vals: Sequence[float]) -> None:
        targets = self._check_shape("target vector", target_vals, self.topology[-1])
        output_layer = self.layers[-1]

        self.error = self._rms(targets)
        factor = self.recent_average_smoothing_factor
        self.recent_average_error = (
            self.recent_average_error * factor + self.error
        ) / (factor + 1.0)

        for neuron, target in zip(output_layer[:-1], targets):
            neuron.calc_output_gradients(target)

        # Gradients of every layer must exist before any weight moves, since
        # hidden gradients read the downstream weights.
        for layer_num in range(len(self.layers) - 2, 0, -1):
            hidden_layer = self.layers[layer_num]
            next_layer = self.layers[layer_num + 1]
            for neuron in hidden_layer:
                neuron.calc_hidden_gradients(next_layer)

        for layer_num in range(len(self.layers) - 1, 0, -1):
            prev_layer = self.layers[layer_num - 1]
            for neuron in self.layers[layer_num][:-1]:
                neuron.update_input_weights(prev_layer, self.eta, self.alpha)

    def get_results(self) -> Vector:
        return [neuron.output_val for neuron in self.layers[-1][:-1]]

    # ------------------------------------------------------------------
    # Inspection helpers

    def rms_error(self, target_vals: Sequence[float]) -> float:
        """RMS error of the current outputs against ``target_vals``."""

        targets = self._check_shape("target vector", target_vals, self.topology[-1])
        return self._rms(targets)

    def bias_outputs(self) -> Vector:
        return [layer[-1].output_val for layer in self.layers]

    def weights(self) -> List[List[List[float]]]:
        """Copy of every weight, indexed ``[layer][neuron][connection]``."""

        return [
            [[c.weight for c in neuron.connections] for neuron in layer]
            for layer in self.layers
        ]

    def parameter_count(self) -> int:
        return sum(
            (self.topology[i] + 1) * self.topology[i + 1]
            for i in range(len(self.topology) - 1)
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _rms(self, targets: Sequence[float]) -> float:
        total = 0.0
        for neuron, target in zip(self.layers[-1][:-1], targets):
            delta = target - neuron.output_val
            total += delta * delta
        total /= len(targets)
        return math.sqrt(total)

    @staticmethod
    def _check_shape(what: str, values: Sequence[float], expected: int) -> Vector:
        converted = [float(v) for v in values]
        if len(converted) != expected:
            raise ShapeMismatch(what, expected, len(converted))
        return converted


__all__ = [
    "DEFAULT_ALPHA",
    "DEFAULT_ETA",
    "DEFAULT_SMOOTHING_FACTOR",
    "Network",
    "validate_topology",
]
