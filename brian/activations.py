"""Activation functions used by network layers."""

from __future__ import annotations

import math
from enum import Enum
from typing import Callable, Iterable, List


def tanh_prime(x: float) -> float:
    """Derivative of tanh."""
    t = math.tanh(x)
    return 1.0 - t * t


def leaky_relu(x: float) -> float:
    """Identity for positive inputs, a tenth of the input for negative ones."""
    if x > 0:
        return x
    if x < 0:
        return 0.1 * x
    return 0.0


def leaky_relu_prime(x: float) -> float:
    """Derivative of leaky_relu; zero exactly at the origin."""
    if x > 0:
        return 1.0
    if x < 0:
        return 0.1
    return 0.0


def linear(x: float) -> float:
    """Identity activation."""
    return x


def linear_prime(x: float) -> float:
    """Derivative of the identity."""
    return 1.0


def sigmoid(x: float) -> float:
    """Logistic function, computed without overflow for large magnitudes."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    e = math.exp(x)
    return e / (1.0 + e)


def sigmoid_prime(x: float) -> float:
    """Derivative of the logistic function."""
    s = sigmoid(x)
    return s * (1.0 - s)


def softmax(values: Iterable[float]) -> List[float]:
    """Normalised exponentials of the given values."""
    values = list(values)
    if not values:
        return []
    peak = max(values)
    exps = [math.exp(v - peak) for v in values]
    total = sum(exps)
    return [e / total for e in exps]


class Activation(Enum):
    """Layer activations; the value is the code stored in saved networks."""

    TANH = 0
    LEAKY_RELU = 1
    SIGMOID = 2
    LINEAR = 3
    SOFTMAX = 4

    @property
    def code(self) -> int:
        return self.value

    def apply(self, values: Iterable[float]) -> List[float]:
        """Activate a whole layer of unactivated neuron values."""
        if self is Activation.SOFTMAX:
            return softmax(values)
        func, _ = _ELEMENTWISE[self]
        return [func(v) for v in values]

    def prime(self, values: Iterable[float]) -> List[float]:
        """Derivatives for a layer of unactivated neuron values.

        Softmax reports ones, so the output error passes through unchanged.
        """
        if self is Activation.SOFTMAX:
            return [1.0 for _ in values]
        _, derivative = _ELEMENTWISE[self]
        return [derivative(v) for v in values]


_ELEMENTWISE: dict[Activation, tuple[Callable[[float], float], Callable[[float], float]]] = {
    Activation.TANH: (math.tanh, tanh_prime),
    Activation.LEAKY_RELU: (leaky_relu, leaky_relu_prime),
    Activation.SIGMOID: (sigmoid, sigmoid_prime),
    Activation.LINEAR: (linear, linear_prime),
}


def activation_from_code(code: int) -> Activation:
    """Look up an activation by its stored code."""
    try:
        return Activation(code)
    except ValueError:
        raise ValueError(f"unknown activation code {code}") from None