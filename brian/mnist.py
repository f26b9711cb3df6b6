"""Handwritten digit recognition on the MNIST training set."""

from __future__ import annotations

import argparse
import random
from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence, TextIO, Tuple

from brian.activations import Activation
from brian.network import Network, cost

IMAGE_SIDE = 28
IMAGE_SIZE = IMAGE_SIDE * IMAGE_SIDE
DATASET_SIZE = 60000
CLASSES = 10
IMAGES_FILE = "train-images.idx3-ubyte"
LABELS_FILE = "train-labels.idx1-ubyte"

_SHADES = " .:-=+*#%@"


def _skip_header(file: BinaryIO) -> None:
    header = file.read(4)
    if len(header) != 4:
        raise ValueError("truncated IDX header")
    dimension_bytes = header[3] * 4
    if len(file.read(dimension_bytes)) != dimension_bytes:
        raise ValueError("truncated IDX header")


def _read_body(file: BinaryIO, size: int) -> bytes:
    data = file.read(size)
    if len(data) != size:
        raise ValueError(f"truncated IDX data: wanted {size} bytes, got {len(data)}")
    return data


def read_idx_images(file: BinaryIO, count: int = DATASET_SIZE) -> List[List[float]]:
    """Read count 28x28 images, scaling each pixel into [0, 1]."""
    if count < 0:
        raise ValueError("count must not be negative")
    _skip_header(file)
    data = _read_body(file, count * IMAGE_SIZE)
    return [
        [byte / 255.0 for byte in data[start:start + IMAGE_SIZE]]
        for start in range(0, len(data), IMAGE_SIZE)
    ]


def read_idx_labels(file: BinaryIO, count: int = DATASET_SIZE) -> List[int]:
    """Read count digit labels."""
    if count < 0:
        raise ValueError("count must not be negative")
    _skip_header(file)
    return list(_read_body(file, count))


def one_hot(labels: Sequence[int], classes: int = CLASSES) -> List[List[float]]:
    """Turn labels into target vectors with a one at the label's position."""
    return [[1.0 if label == n else 0.0 for n in range(classes)] for label in labels]


def load_mnist(
    directory: str | Path = "mnist", count: int = DATASET_SIZE
) -> Tuple[List[List[float]], List[int], List[List[float]]]:
    """Load images, labels and one-hot targets from a directory."""
    directory = Path(directory)
    with open(directory / IMAGES_FILE, "rb") as image_file:
        xs = read_idx_images(image_file, count)
    with open(directory / LABELS_FILE, "rb") as label_file:
        labels = read_idx_labels(label_file, count)
    return xs, labels, one_hot(labels)


def _total_loss(network: Network, xs: Sequence[Sequence[float]], ys: Sequence[Sequence[float]]) -> float:
    return sum(cost(network.forward(x), y) for x, y in zip(xs, ys))


def _open_network(path: Path, rng: random.Random) -> Network:
    try:
        with open(path, "rb") as file:
            return Network.load(file)
    except FileNotFoundError:
        return Network(
            IMAGE_SIZE,
            [(34, Activation.LEAKY_RELU), (CLASSES, Activation.SOFTMAX)],
            rng,
        )


def _train(
    network: Network,
    xs: List[List[float]],
    ys: List[List[float]],
    epochs: int,
    rate: float,
    log: TextIO,
) -> float:
    log.write(f"Total loss: {_total_loss(network, xs, ys):f}\n")
    network.train(xs, ys, epochs, rate)
    loss = _total_loss(network, xs, ys)
    log.write(f"Total loss: {loss:f}\n")
    log.flush()
    return loss


def _describe(network: Network, pixels: Sequence[float], label: int, rate: float, loss: float) -> str:
    rows = []
    for start in range(0, IMAGE_SIZE, IMAGE_SIDE):
        row = pixels[start:start + IMAGE_SIDE]
        rows.append("".join(_SHADES[min(int(v * len(_SHADES)), len(_SHADES) - 1)] * 2 for v in row))
    rows.append(f"Number: {label}")
    rows.append(f"Rate: {rate:f}")
    rows.append(f"Loss: {loss:f}")
    guess = network.forward(pixels)
    rows.extend(f"{digit}: {value:f}" for digit, value in enumerate(guess))
    return "\n".join(rows)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Browse the dataset, train the network on request and save it on exit."""
    parser = argparse.ArgumentParser(prog="brian-mnist", description="Train a digit classifier on MNIST.")
    parser.add_argument("--data", default="mnist", help="directory holding the IDX files")
    parser.add_argument("--network", default="mnist.nn", help="network file to load and save")
    parser.add_argument("--log", default="log", help="file that receives loss reports")
    parser.add_argument("--count", type=int, default=DATASET_SIZE, help="number of samples to load")
    parser.add_argument("--rate", type=float, default=0.05, help="learning rate")
    parser.add_argument("--epochs", type=int, default=100, help="epochs per training run")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    args = parser.parse_args(argv)
    if args.count < 1:
        parser.error("--count must be at least 1")

    rng = random.Random(args.seed)
    network_path = Path(args.network)
    with open(args.log, "w", encoding="utf-8") as log:
        xs, labels, ys = load_mnist(args.data, args.count)
        network = _open_network(network_path, rng)
        rate = args.rate
        loss = _total_loss(network, xs, ys)
        index = rng.randrange(len(xs))

        while True:
            print(_describe(network, xs[index], labels[index], rate, loss))
            try:
                command = input("[n]ext  [i]ncrease rate  [t]rain  [q]uit > ").strip().lower()
            except EOFError:
                break
            if command == "q":
                break
            if command in ("", "n"):
                index = rng.randrange(len(xs))
            elif command == "i":
                rate *= 2
            elif command == "t":
                print("Training!")
                loss = _train(network, xs, ys, args.epochs, rate, log)
                index = rng.randrange(len(xs))
            else:
                print(f"unknown command {command!r}")

    with open(network_path, "wb") as file:
        network.save(file)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())