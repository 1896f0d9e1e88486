"""Transfer function used by every neuron."""

from __future__ import annotations

import numpy as np


def transfer(x: float) -> float:
    """Return the hyperbolic tangent of ``x``."""

    return float(np.tanh(x))


def transfer_derivative(output: float) -> float:
    """Derivative of tanh expressed through its already computed output."""

    return 1.0 - output * output
