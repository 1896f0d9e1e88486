"""Exception hierarchy for contract violations."""

from __future__ import annotations


class NetworkError(ValueError):
    """Base class for every error raised by momentumnet."""


class InvalidTopology(NetworkError):
    """Raised when a topology cannot describe a network."""


class ShapeMismatch(NetworkError):
    """Raised when a vector's length does not match the layer it feeds."""

    def __init__(self, what: str, expected: int, actual: int) -> None:
        super().__init__(f"{what} has {actual} values, expected {expected}")
        self.expected = expected
        self.actual = actual


class BiasNeuronError(NetworkError):
    """Raised when code tries to overwrite a bias neuron's fixed output."""


class TrainingDataError(NetworkError):
    """Raised for malformed training data files."""

    def __init__(self, message: str, line: int | None = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


__all__ = [
    "BiasNeuronError",
    "InvalidTopology",
    "NetworkError",
    "ShapeMismatch",
    "TrainingDataError",
]
