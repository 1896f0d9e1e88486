"""Single tanh unit with outgoing weighted connections."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .activations import transfer, transfer_derivative
from .errors import BiasNeuronError
from .types import Connection

BIAS_OUTPUT = 1.0

Layer = List["Neuron"]


class Neuron:
    """A neuron owning the connections to every non-bias neuron of the next layer.

    Connections are indexed by the downstream neuron's position, so a neuron
    reads its incoming weights as ``prev_layer[n].connections[self.index]``.
    Weight ownership sits on the source side: :meth:`update_input_weights`
    mutates the previous layer's neurons, never ``self``.
    """

    __slots__ = ("index", "connections", "gradient", "is_bias", "_output_val")

    def __init__(
        self,
        num_outputs: int,
        index: int,
        rng: np.random.Generator | None = None,
        *,
        is_bias: bool = False,
    ) -> None:
        rng = rng if rng is not None else np.random.default_rng()
        self.index = index
        self.is_bias = is_bias
        self.gradient = 0.0
        self._output_val = BIAS_OUTPUT if is_bias else 0.0
        self.connections: List[Connection] = [
            Connection(weight=float(rng.random())) for _ in range(num_outputs)
        ]

    def __repr__(self) -> str:
        kind = "bias" if self.is_bias else "neuron"
        return (
            f"<{kind} index={self.index} output={self._output_val:.6g} "
            f"connections={len(self.connections)}>"
        )

    @property
    def output_val(self) -> float:
        return self._output_val

    def get_output_val(self) -> float:
        return self._output_val

    def set_output_val(self, value: float) -> None:
        if self.is_bias:
            raise BiasNeuronError(
                f"bias neuron {self.index} has a fixed output of {BIAS_OUTPUT}"
            )
        self._output_val = float(value)

    def feed_forward(self, prev_layer: Sequence["Neuron"]) -> None:
        """Set the output from the previous layer's outputs, bias included."""

        total = 0.0
        for neuron in prev_layer:
            total += neuron._output_val * neuron.connections[self.index].weight
        self._output_val = transfer(total)

    def calc_output_gradients(self, target_val: float) -> None:
        delta = target_val - self._output_val
        self.gradient = delta * transfer_derivative(self._output_val)

    def calc_hidden_gradients(self, next_layer: Sequence["Neuron"]) -> None:
        dow = self.sum_dow(next_layer)
        self.gradient = dow * transfer_derivative(self._output_val)

    def sum_dow(self, next_layer: Sequence["Neuron"]) -> float:
        """Sum of this neuron's contributions to the next layer's errors.

        The bias neuron at the end of ``next_layer`` has no incoming
        connections and is skipped.
        """

        total = 0.0
        for n in range(len(next_layer) - 1):
            total += self.connections[n].weight * next_layer[n].gradient
        return total

    def update_input_weights(
        self, prev_layer: Sequence["Neuron"], eta: float, alpha: float
    ) -> None:
        """Apply gradient descent with momentum to every incoming connection."""

        for neuron in prev_layer:
            connection = neuron.connections[self.index]
            old_delta_weight = connection.delta_weight
            new_delta_weight = (
                eta * neuron._output_val * self.gradient + alpha * old_delta_weight
            )
            connection.delta_weight = new_delta_weight
            connection.weight += new_delta_weight


__all__ = ["BIAS_OUTPUT", "Layer", "Neuron"]
