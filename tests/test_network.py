import copy
import io
import random
import struct

import pytest

from brian.activations import Activation
from brian.network import Layer, Network, NetworkFormatError, cost, cost_prime

H = 1e-6
TANH_TABLE_INDEX = 0


def _small_network(seed=1):
    return Network(2, [(3, Activation.TANH), (2, Activation.SIGMOID)], random.Random(seed))


def test_cost_values():
    assert cost([1.0, 2.0], [1.0, 2.0]) == 0.0
    assert cost([3.0], [1.0]) == 2.0
    assert cost([0.2, -0.4], [0.5, 0.1]) == cost([0.5, 0.1], [0.2, -0.4])


def test_cost_length_mismatch():
    with pytest.raises(ValueError):
        cost([1.0, 2.0], [1.0])


def test_cost_prime():
    assert cost_prime(3.0, 1.0) == 2.0
    assert cost_prime(1.0, 3.0) == -cost_prime(3.0, 1.0)


def test_layer_initial_parameters_in_range():
    layer = Layer(4, 3, Activation.LINEAR, random.Random(7))
    assert len(layer.weights) == 3
    assert all(len(row) == 4 for row in layer.weights)
    assert len(layer.biases) == 3
    values = [w for row in layer.weights for w in row] + layer.biases
    assert all(-0.5 <= v < 0.5 for v in values)


def test_layer_seeded_init_is_reproducible():
    a = Layer(3, 2, Activation.TANH, random.Random(11))
    b = Layer(3, 2, Activation.TANH, random.Random(11))
    assert a.weights == b.weights
    assert a.biases == b.biases


def test_layer_forward_zero_inputs_gives_biases():
    layer = Layer(3, 2, Activation.LINEAR, random.Random(5))
    assert layer.forward([0.0, 0.0, 0.0]) == pytest.approx(layer.biases)


def test_layer_forward_is_affine_for_linear():
    layer = Layer(3, 2, Activation.LINEAR, random.Random(5))
    base = layer.forward([0.0, 0.0, 0.0])
    a = [0.3, -1.2, 0.8]
    b = [1.5, 0.4, -0.6]
    fa = layer.forward(a)
    fb = layer.forward(b)
    fab = layer.forward([p + q for p, q in zip(a, b)])
    for total, pa, pb, z in zip(fab, fa, fb, base):
        assert total - z == pytest.approx((pa - z) + (pb - z))


def test_layer_forward_wrong_length():
    layer = Layer(3, 2, Activation.LINEAR, random.Random(5))
    with pytest.raises(ValueError):
        layer.forward([1.0, 2.0])


def test_network_sizes():
    network = _small_network()
    assert network.layer_sizes == [2, 3, 2]
    assert network.input_count == 2
    assert network.output_count == 2


def test_network_without_layers_raises():
    with pytest.raises(ValueError):
        Network(2, [])


def test_network_forward_wrong_length():
    with pytest.raises(ValueError):
        _small_network().forward([1.0])


def test_softmax_output_sums_to_one():
    network = Network(2, [(5, Activation.LEAKY_RELU), (3, Activation.SOFTMAX)], random.Random(2))
    output = network.forward([0.4, -0.9])
    assert len(output) == 3
    assert sum(output) == pytest.approx(1.0)


def test_train_one_matches_numeric_gradient():
    network = _small_network(seed=4)
    x = [0.3, -0.7]
    y = [0.2, 0.9]
    gradients = network.train_one(x, y)
    assert len(gradients) == len(network.layers)

    for layer, (weight_grads, bias_grads) in zip(network.layers, gradients):
        for j, row in enumerate(layer.weights):
            for i in range(len(row)):
                original = row[i]
                row[i] = original + H
                up = cost(network.forward(x), y)
                row[i] = original - H
                down = cost(network.forward(x), y)
                row[i] = original
                assert weight_grads[j][i] == pytest.approx((up - down) / (2 * H), abs=1e-7)
        for j in range(len(layer.biases)):
            original = layer.biases[j]
            layer.biases[j] = original + H
            up = cost(network.forward(x), y)
            layer.biases[j] = original - H
            down = cost(network.forward(x), y)
            layer.biases[j] = original
            assert bias_grads[j] == pytest.approx((up - down) / (2 * H), abs=1e-7)


def test_train_one_leaves_parameters_alone():
    network = _small_network()
    before = copy.deepcopy([(l.weights, l.biases) for l in network.layers])
    network.train_one([0.1, 0.2], [0.3, 0.4])
    assert [(l.weights, l.biases) for l in network.layers] == before


def test_train_one_wrong_target_length():
    with pytest.raises(ValueError):
        _small_network().train_one([0.1, 0.2], [0.3])


def test_train_reduces_loss():
    network = Network(1, [(4, Activation.TANH), (1, Activation.LINEAR)], random.Random(3))
    xs = [[v] for v in (-1.0, -0.5, 0.0, 0.5, 1.0)]
    ys = [[0.5 * x[0]] for x in xs]
    before = network.loss(xs, ys)
    network.train(xs, ys, epochs=200, rate=0.1)
    assert network.loss(xs, ys) < before


def test_train_with_batches_reduces_loss():
    network = Network(1, [(4, Activation.TANH), (1, Activation.LINEAR)], random.Random(8))
    xs = [[v] for v in (-1.0, -0.5, 0.0, 0.5, 1.0, 1.5)]
    ys = [[0.5 * x[0]] for x in xs]
    before = network.loss(xs, ys)
    network.train(xs, ys, epochs=300, rate=0.05, batch_size=2)
    assert network.loss(xs, ys) < before


def test_train_zero_epochs_changes_nothing():
    network = _small_network()
    before = copy.deepcopy([(l.weights, l.biases) for l in network.layers])
    network.train([[0.1, 0.2]], [[0.3, 0.4]], epochs=0, rate=0.5)
    assert [(l.weights, l.biases) for l in network.layers] == before


@pytest.mark.parametrize("batch_size", [0, 3])
def test_train_invalid_batch_size(batch_size):
    network = _small_network()
    xs = [[0.1, 0.2], [0.3, 0.4]]
    ys = [[0.0, 1.0], [1.0, 0.0]]
    with pytest.raises(ValueError):
        network.train(xs, ys, epochs=1, rate=0.1, batch_size=batch_size)


def test_train_mismatched_data():
    with pytest.raises(ValueError):
        _small_network().train([[0.1, 0.2]], [], epochs=1, rate=0.1)


def test_loss_is_mean_of_costs():
    network = _small_network()
    xs = [[0.1, 0.2], [-0.5, 0.7]]
    ys = [[0.0, 1.0], [1.0, 0.0]]
    costs = [cost(network.forward(x), y) for x, y in zip(xs, ys)]
    assert network.loss(xs, ys) == pytest.approx(sum(costs) / 2)


def test_loss_of_empty_dataset_raises():
    with pytest.raises(ValueError):
        _small_network().loss([], [])


def test_save_load_round_trip():
    network = _small_network(seed=9)
    buffer = io.BytesIO()
    network.save(buffer)
    buffer.seek(0)
    loaded = Network.load(buffer)
    assert loaded.layer_sizes == network.layer_sizes
    assert [l.activation for l in loaded.layers] == [l.activation for l in network.layers]
    for original, copy_ in zip(network.layers, loaded.layers):
        assert copy_.weights == original.weights
        assert copy_.biases == original.biases
    x = [0.25, -0.75]
    assert loaded.forward(x) == network.forward(x)


def test_save_layout():
    network = _small_network()
    buffer = io.BytesIO()
    network.save(buffer)
    data = buffer.getvalue()
    assert struct.unpack("<ii", data[:8]) == (3, 2)
    assert struct.unpack("<ii", data[8:16]) == (3, TANH_TABLE_INDEX)
    first = network.layers[0]
    assert list(struct.unpack("<2d", data[16:32])) == first.weights[0]
    expected_length = 8 + sum(
        8 + 8 * (l.input_count * l.output_count + l.output_count) for l in network.layers
    )
    assert len(data) == expected_length


def test_load_truncated_raises():
    buffer = io.BytesIO()
    _small_network().save(buffer)
    data = buffer.getvalue()
    with pytest.raises(NetworkFormatError):
        Network.load(io.BytesIO(data[:-4]))


def test_load_unknown_activation_raises():
    data = struct.pack("<iiii", 2, 1, 1, 42) + struct.pack("<2d", 0.5, 0.5)
    with pytest.raises(NetworkFormatError):
        Network.load(io.BytesIO(data))


def test_load_invalid_layer_count_raises():
    with pytest.raises(NetworkFormatError):
        Network.load(io.BytesIO(struct.pack("<ii", 1, 2)))