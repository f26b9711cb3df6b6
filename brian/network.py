"""Fully connected feed-forward networks trained by gradient descent."""

from __future__ import annotations

import logging
import random
import struct
from typing import BinaryIO, Iterable, List, Optional, Sequence, Tuple

from brian.activations import Activation, activation_from_code

logger = logging.getLogger(__name__)

_INT = struct.Struct("<i")

Gradient = Tuple[List[List[float]], List[float]]


class NetworkFormatError(ValueError):
    """Raised when saved network data cannot be read."""


def cost(x: Iterable[float], y: Iterable[float]) -> float:
    """Half the sum of squared differences between outputs and targets."""
    x = list(x)
    y = list(y)
    if len(x) != len(y):
        raise ValueError(f"length mismatch: {len(x)} outputs, {len(y)} targets")
    return 0.5 * sum((a - b) * (a - b) for a, b in zip(x, y))


def cost_prime(x: float, y: float) -> float:
    """Derivative of the cost with respect to one output."""
    return x - y


class Layer:
    """A dense layer; weights[j][i] links input i to output j."""

    def __init__(
        self,
        input_count: int,
        output_count: int,
        activation: Activation,
        rng: Optional[random.Random] = None,
    ) -> None:
        if input_count < 1 or output_count < 1:
            raise ValueError("layer sizes must be positive")
        rng = rng if rng is not None else random.Random()
        self.input_count = input_count
        self.output_count = output_count
        self.activation = activation
        self.weights = [
            [rng.random() - 0.5 for _ in range(input_count)] for _ in range(output_count)
        ]
        self.biases = [rng.random() - 0.5 for _ in range(output_count)]
        self.unactivated = [0.0] * output_count
        self.activated = [0.0] * output_count

    def forward(self, inputs: Iterable[float]) -> List[float]:
        """Compute and remember the layer's outputs for the given inputs."""
        inputs = list(inputs)
        if len(inputs) != self.input_count:
            raise ValueError(f"expected {self.input_count} inputs, got {len(inputs)}")
        self.unactivated = [
            sum((w * v for w, v in zip(row, inputs)), bias)
            for row, bias in zip(self.weights, self.biases)
        ]
        self.activated = self.activation.apply(self.unactivated)
        return list(self.activated)


class Network:
    """A stack of dense layers."""

    def __init__(
        self,
        input_count: int,
        layers: Iterable[Tuple[int, Activation]],
        rng: Optional[random.Random] = None,
    ) -> None:
        if input_count < 1:
            raise ValueError("input count must be positive")
        rng = rng if rng is not None else random.Random()
        self.input_count = input_count
        self.layers: List[Layer] = []
        previous = input_count
        for size, activation in layers:
            self.layers.append(Layer(previous, size, activation, rng))
            previous = size
        if not self.layers:
            raise ValueError("a network needs at least one layer")

    @property
    def output_count(self) -> int:
        return self.layers[-1].output_count

    @property
    def layer_sizes(self) -> List[int]:
        return [self.input_count] + [layer.output_count for layer in self.layers]

    def forward(self, inputs: Iterable[float]) -> List[float]:
        """Run the inputs through every layer and return the outputs."""
        values = list(inputs)
        if len(values) != self.input_count:
            raise ValueError(f"expected {self.input_count} inputs, got {len(values)}")
        for layer in self.layers:
            values = layer.forward(values)
        return values

    def train_one(self, x: Iterable[float], y: Iterable[float]) -> List[Gradient]:
        """Backpropagate one sample; return (weight, bias) gradients per layer."""
        x = list(x)
        y = list(y)
        if len(y) != self.output_count:
            raise ValueError(f"expected {self.output_count} targets, got {len(y)}")
        self.forward(x)
        layer_inputs = [x] + [layer.activated for layer in self.layers[:-1]]

        gradients: List[Gradient] = []
        following: Optional[Layer] = None
        delta: List[float] = []
        for layer, inputs in zip(reversed(self.layers), reversed(layer_inputs)):
            primes = layer.activation.prime(layer.unactivated)
            if following is None:
                errors = [cost_prime(a, t) for a, t in zip(layer.activated, y)]
            else:
                errors = [
                    sum(d * w for d, w in zip(delta, column))
                    for column in zip(*following.weights)
                ]
            delta = [e * p for e, p in zip(errors, primes)]
            weight_grads = [[v * d for v in inputs] for d in delta]
            gradients.append((weight_grads, list(delta)))
            following = layer
        gradients.reverse()
        return gradients

    def train(
        self,
        xs: Sequence[Sequence[float]],
        ys: Sequence[Sequence[float]],
        epochs: int,
        rate: float,
        batch_size: Optional[int] = None,
    ) -> None:
        """Gradient descent, one batch per epoch, cycling through the batches."""
        xs = [list(x) for x in xs]
        ys = [list(y) for y in ys]
        if len(xs) != len(ys):
            raise ValueError("inputs and targets differ in length")
        if not xs:
            raise ValueError("no training data")
        if batch_size is None:
            batch_size = len(xs)
        if not 1 <= batch_size <= len(xs):
            raise ValueError(f"batch size must be between 1 and {len(xs)}")
        batch_count = len(xs) // batch_size

        batch = 0
        for epoch in range(epochs):
            if epoch % 100 == 0 and logger.isEnabledFor(logging.INFO):
                logger.info("epoch %d with loss %f", epoch, self.loss(xs, ys))

            totals = [
                ([[0.0] * layer.input_count for _ in range(layer.output_count)],
                 [0.0] * layer.output_count)
                for layer in self.layers
            ]
            start = batch * batch_size
            for x, y in zip(xs[start:start + batch_size], ys[start:start + batch_size]):
                for (total_w, total_b), (grad_w, grad_b) in zip(totals, self.train_one(x, y)):
                    for total_row, grad_row in zip(total_w, grad_w):
                        total_row[:] = [t + g for t, g in zip(total_row, grad_row)]
                    total_b[:] = [t + g for t, g in zip(total_b, grad_b)]

            for layer, (total_w, total_b) in zip(self.layers, totals):
                layer.biases = [
                    b - rate * t / batch_size for b, t in zip(layer.biases, total_b)
                ]
                layer.weights = [
                    [w - rate * t / batch_size for w, t in zip(row, total_row)]
                    for row, total_row in zip(layer.weights, total_w)
                ]

            batch = (batch + 1) % batch_count

    def loss(self, xs: Iterable[Iterable[float]], ys: Iterable[Iterable[float]]) -> float:
        """Mean cost over a dataset."""
        xs = list(xs)
        ys = list(ys)
        if len(xs) != len(ys):
            raise ValueError("inputs and targets differ in length")
        if not xs:
            raise ValueError("no data to measure loss on")
        return sum(cost(self.forward(x), y) for x, y in zip(xs, ys)) / len(xs)

    def save(self, file: BinaryIO) -> None:
        """Write the network in its binary layout."""
        file.write(_INT.pack(len(self.layers) + 1))
        file.write(_INT.pack(self.input_count))
        for layer in self.layers:
            file.write(_INT.pack(layer.output_count))
            file.write(_INT.pack(layer.activation.code))
            flat = [w for row in layer.weights for w in row]
            file.write(struct.pack(f"<{len(flat)}d", *flat))
            file.write(struct.pack(f"<{layer.output_count}d", *layer.biases))

    @classmethod
    def load(cls, file: BinaryIO) -> "Network":
        """Read a network written by save."""
        layer_count = _read_int(file)
        if layer_count < 2:
            raise NetworkFormatError(f"invalid layer count {layer_count}")
        input_count = _read_int(file)
        if input_count < 1:
            raise NetworkFormatError(f"invalid input count {input_count}")

        specs: List[Tuple[int, Activation]] = []
        parameters: List[Tuple[List[float], List[float]]] = []
        previous = input_count
        for _ in range(layer_count - 1):
            size = _read_int(file)
            if size < 1:
                raise NetworkFormatError(f"invalid layer size {size}")
            code = _read_int(file)
            try:
                activation = activation_from_code(code)
            except ValueError as exc:
                raise NetworkFormatError(str(exc)) from exc
            weights = _read_doubles(file, previous * size)
            biases = _read_doubles(file, size)
            specs.append((size, activation))
            parameters.append((weights, biases))
            previous = size

        network = cls(input_count, specs)
        for layer, (weights, biases) in zip(network.layers, parameters):
            width = layer.input_count
            layer.weights = [
                weights[start:start + width] for start in range(0, len(weights), width)
            ]
            layer.biases = biases
        return network


def _read_exact(file: BinaryIO, size: int) -> bytes:
    data = file.read(size)
    if len(data) != size:
        raise NetworkFormatError("truncated network data")
    return data


def _read_int(file: BinaryIO) -> int:
    return _INT.unpack(_read_exact(file, _INT.size))[0]


def _read_doubles(file: BinaryIO, count: int) -> List[float]:
    return list(struct.unpack(f"<{count}d", _read_exact(file, 8 * count)))