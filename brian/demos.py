"""Small demonstration problems: a sine curve, XOR and comparing two numbers."""

from __future__ import annotations

import argparse
import math
import random
from typing import List, Optional, Sequence, Tuple

from brian.activations import Activation
from brian.network import Network, cost

PI = 3.1415926535

Dataset = Tuple[List[List[float]], List[List[float]]]
DemoResult = Tuple[Network, float, float]


def sin_dataset(count: int = 99) -> Dataset:
    """Evenly spaced points over one period of the sine curve."""
    if count < 1:
        raise ValueError("count must be positive")
    step = 2 * PI / count
    xs = [[k * step] for k in range(count)]
    ys = [[math.sin(x[0])] for x in xs]
    return xs, ys


def xor_dataset() -> Dataset:
    """The four cases of exclusive or."""
    xs = [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]
    ys = [[0.0], [1.0], [1.0], [0.0]]
    return xs, ys


def comparison_dataset(count: int = 100, rng: Optional[random.Random] = None) -> Dataset:
    """Random pairs labelled first-greater, second-greater or equal."""
    if count < 1:
        raise ValueError("count must be positive")
    rng = rng if rng is not None else random.Random()
    xs: List[List[float]] = []
    ys: List[List[float]] = []
    for _ in range(count):
        a, b = rng.random(), rng.random()
        xs.append([a, b])
        ys.append([float(a > b), float(a < b), float(a == b)])
    return xs, ys


def _total_loss(network: Network, xs: Sequence[Sequence[float]], ys: Sequence[Sequence[float]]) -> float:
    return sum(cost(network.forward(x), y) for x, y in zip(xs, ys))


def _run(network: Network, data: Dataset, epochs: int, rate: float) -> DemoResult:
    xs, ys = data
    initial = _total_loss(network, xs, ys)
    network.train(xs, ys, epochs, rate)
    return network, initial, _total_loss(network, xs, ys)


def run_sin(epochs: int = 100000, rng: Optional[random.Random] = None) -> DemoResult:
    """Fit the sine curve; return the network and total loss before and after."""
    network = Network(
        1,
        [(10, Activation.LEAKY_RELU), (10, Activation.LEAKY_RELU), (1, Activation.TANH)],
        rng,
    )
    return _run(network, sin_dataset(), epochs, 5e-1)


def run_xor(epochs: int = 999999, rng: Optional[random.Random] = None) -> DemoResult:
    """Learn exclusive or; return the network and total loss before and after."""
    network = Network(
        2,
        [(10, Activation.LEAKY_RELU), (1, Activation.LEAKY_RELU)],
        rng,
    )
    return _run(network, xor_dataset(), epochs, 2e-4)


def run_comparison(epochs: int = 99999, rng: Optional[random.Random] = None) -> DemoResult:
    """Classify which of two numbers is larger; return network and losses."""
    rng = rng if rng is not None else random.Random()
    network = Network(
        2,
        [(10, Activation.LEAKY_RELU), (3, Activation.SOFTMAX)],
        rng,
    )
    return _run(network, comparison_dataset(100, rng), epochs, 5e-1)


_DEMOS = {
    "sin": (run_sin, sin_dataset),
    "xor": (run_xor, xor_dataset),
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one of the demonstrations and report its loss."""
    parser = argparse.ArgumentParser(prog="brian-demo", description="Train a network on a toy problem.")
    parser.add_argument("demo", nargs="?", choices=["sin", "xor", "prob"], default="prob")
    parser.add_argument("--epochs", type=int, default=None, help="override the number of epochs")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    args = parser.parse_args(argv)

    rng = random.Random(args.seed)
    kwargs = {"rng": rng}
    if args.epochs is not None:
        kwargs["epochs"] = args.epochs

    if args.demo == "prob":
        network, initial, final = run_comparison(**kwargs)
        samples: List[List[float]] = []
    else:
        runner, dataset = _DEMOS[args.demo]
        network, initial, final = runner(**kwargs)
        samples = dataset()[0]

    print(f"Total loss: {initial:f}")
    print("Training!")
    for inputs in samples:
        shown = " ".join(f"{v:f}" for v in inputs)
        print(f"Input: {shown} Output: {network.forward(inputs)[0]:f}")
    print(f"Total loss: {final:f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())