"""Core numerical primitives for momentumnet."""

from . import activations, errors, network, neuron, types

__all__ = ["activations", "errors", "network", "neuron", "types"]
