import math

import numpy as np
import pytest

from momentumnet.core.activations import transfer, transfer_derivative
from momentumnet.core.errors import BiasNeuronError
from momentumnet.core.neuron import BIAS_OUTPUT, Neuron


def _layer(num_outputs, size, seed=0):
    rng = np.random.default_rng(seed)
    layer = [Neuron(num_outputs, n, rng) for n in range(size)]
    layer.append(Neuron(num_outputs, size, rng, is_bias=True))
    return layer


def test_connections_start_uniform_with_zero_delta():
    neuron = Neuron(5, 0, np.random.default_rng(3))
    assert len(neuron.connections) == 5
    for connection in neuron.connections:
        assert 0.0 <= connection.weight < 1.0
        assert connection.delta_weight == 0.0


def test_output_neuron_has_no_connections():
    assert Neuron(0, 2, np.random.default_rng(0)).connections == []


def test_bias_output_is_fixed():
    bias = Neuron(2, 3, np.random.default_rng(0), is_bias=True)
    assert bias.get_output_val() == BIAS_OUTPUT == 1.0
    with pytest.raises(BiasNeuronError):
        bias.set_output_val(0.25)
    assert bias.output_val == 1.0


def test_set_and_get_output_val():
    neuron = Neuron(1, 0, np.random.default_rng(0))
    assert neuron.get_output_val() == 0.0
    neuron.set_output_val(0.75)
    assert neuron.get_output_val() == 0.75


def test_feed_forward_includes_bias_contribution():
    prev = _layer(num_outputs=2, size=2)
    prev[0].set_output_val(0.5)
    prev[1].set_output_val(-1.0)
    target = Neuron(0, 1, np.random.default_rng(1))

    target.feed_forward(prev)

    expected = math.tanh(
        0.5 * prev[0].connections[1].weight
        - 1.0 * prev[1].connections[1].weight
        + 1.0 * prev[2].connections[1].weight
    )
    assert target.output_val == pytest.approx(expected)


def test_transfer_derivative_uses_output():
    assert transfer(0.0) == 0.0
    assert transfer_derivative(0.0) == 1.0
    assert transfer_derivative(0.5) == pytest.approx(0.75)
    assert transfer_derivative(1.0) == 0.0


def test_calc_output_gradients():
    neuron = Neuron(0, 0, np.random.default_rng(0))
    neuron.set_output_val(0.6)
    neuron.calc_output_gradients(1.0)
    assert neuron.gradient == pytest.approx(0.4 * (1.0 - 0.36))


def test_sum_dow_skips_next_layer_bias():
    source = Neuron(2, 0, np.random.default_rng(0))
    source.connections[0].weight = 0.2
    source.connections[1].weight = 0.4
    next_layer = _layer(num_outputs=0, size=2, seed=4)
    next_layer[0].gradient = 1.5
    next_layer[1].gradient = -0.5
    next_layer[2].gradient = 100.0

    assert source.sum_dow(next_layer) == pytest.approx(0.2 * 1.5 + 0.4 * -0.5)

    source.set_output_val(0.3)
    source.calc_hidden_gradients(next_layer)
    assert source.gradient == pytest.approx((0.3 - 0.2) * (1.0 - 0.09))


def test_update_input_weights_closed_form():
    eta, alpha = 0.15, 0.5
    source = Neuron(1, 0, np.random.default_rng(0))
    source.connections[0].weight = 0.3
    source.connections[0].delta_weight = 0.1
    source.set_output_val(0.8)
    target = Neuron(0, 0, np.random.default_rng(0))
    target.gradient = 0.25

    target.update_input_weights([source], eta, alpha)

    new_delta = eta * 0.8 * 0.25 + alpha * 0.1
    assert source.connections[0].delta_weight == new_delta
    assert source.connections[0].weight == 0.3 + new_delta


def test_update_input_weights_only_touches_own_slot():
    prev = _layer(num_outputs=2, size=1)
    untouched = [(n.connections[1].weight, n.connections[1].delta_weight) for n in prev]
    target = Neuron(0, 0, np.random.default_rng(0))
    target.gradient = 0.5

    target.update_input_weights(prev, 0.15, 0.5)

    assert [(n.connections[1].weight, n.connections[1].delta_weight) for n in prev] == untouched
    assert prev[-1].connections[0].delta_weight == pytest.approx(0.15 * 1.0 * 0.5)
