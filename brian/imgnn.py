"""Teach a network to reproduce an image from pixel coordinates."""

from __future__ import annotations

import argparse
import random
import struct
from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence, Tuple

from PIL import Image

from brian.activations import Activation
from brian.network import Network, NetworkFormatError

CANVAS_SIZE = 500
TRAINING_SIZE = 8
DEFAULT_RATE = 0.001
EPOCHS_PER_ROUND = 100
EXTENSION = "imgnn"

_DIMENSIONS = struct.Struct("<ii")


def image_dataset(
    image: Image.Image, size: int = TRAINING_SIZE
) -> Tuple[List[List[float]], List[List[float]]]:
    """Shrink the image to size x size; return coordinates and RGB targets."""
    if size < 1:
        raise ValueError("size must be positive")
    resized = image.convert("RGB").resize((size, size), Image.Resampling.BICUBIC)
    xs: List[List[float]] = []
    ys: List[List[float]] = []
    for y in range(size):
        for x in range(size):
            xs.append([x / size, y / size])
            r, g, b = resized.getpixel((x, y))
            ys.append([r / 255, g / 255, b / 255])
    return xs, ys


def _channel(value: float) -> int:
    return max(0, min(255, int(value * 255)))


def _pixel(rgb: Sequence[float]) -> Tuple[int, int, int]:
    return (_channel(rgb[0]), _channel(rgb[1]), _channel(rgb[2]))


def render_network(network: Network, width: int, height: int) -> Image.Image:
    """Draw the colour the network predicts for every pixel."""
    image = Image.new("RGB", (width, height))
    image.putdata([
        _pixel(network.forward([x / width, y / height]))
        for y in range(height)
        for x in range(width)
    ])
    return image


def render_targets(ys: Sequence[Sequence[float]], width: int, height: int) -> Image.Image:
    """Draw the training colours as an image."""
    if len(ys) != width * height:
        raise ValueError(f"expected {width * height} colours, got {len(ys)}")
    image = Image.new("RGB", (width, height))
    image.putdata([_pixel(rgb) for rgb in ys])
    return image


def save_image_network(network: Network, width: int, height: int, file: BinaryIO) -> None:
    """Write the network followed by the image dimensions."""
    network.save(file)
    file.write(_DIMENSIONS.pack(width, height))


def load_image_network(file: BinaryIO) -> Tuple[Network, int, int]:
    """Read what save_image_network wrote."""
    network = Network.load(file)
    data = file.read(_DIMENSIONS.size)
    if len(data) != _DIMENSIONS.size:
        raise NetworkFormatError("missing image dimensions")
    width, height = _DIMENSIONS.unpack(data)
    return network, width, height


def _extension(path: str) -> str:
    _, _, rest = Path(path).name.partition(".")
    return rest


def _scale(image: Image.Image, canvas: int) -> Image.Image:
    return image.resize((canvas, canvas), Image.Resampling.NEAREST)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Train on an image, or render a saved .imgnn network."""
    parser = argparse.ArgumentParser(prog="brian-imgnn", description="Fit an image with a neural network.")
    parser.add_argument("path", help="image to learn, or a saved .imgnn network")
    parser.add_argument("--rounds", type=int, default=10, help="training rounds")
    parser.add_argument("--epochs", type=int, default=EPOCHS_PER_ROUND, help="epochs per round")
    parser.add_argument("--rate", type=float, default=DEFAULT_RATE, help="learning rate")
    parser.add_argument("--size", type=int, default=TRAINING_SIZE, help="side of the training image")
    parser.add_argument("--canvas", type=int, default=CANVAS_SIZE, help="side of rendered output")
    parser.add_argument("--save", default="test_img.imgnn", help="where to save the trained network")
    parser.add_argument("--render", default=None, help="PNG file to render into")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    args = parser.parse_args(argv)

    if _extension(args.path) == EXTENSION:
        with open(args.path, "rb") as file:
            network, width, height = load_image_network(file)
        print(f"Loaded network for a {width}x{height} image")
        output = args.render or str(Path(args.path).with_suffix(".png"))
        _scale(render_network(network, width, height), args.canvas).save(output)
        return 0

    rng = random.Random(args.seed)
    with Image.open(args.path) as image:
        xs, ys = image_dataset(image, args.size)
    width = height = args.size
    network = Network(
        2,
        [
            (64, Activation.LEAKY_RELU),
            (64, Activation.LEAKY_RELU),
            (3, Activation.SIGMOID),
        ],
        rng,
    )
    for round_number in range(1, args.rounds + 1):
        network.train(xs, ys, args.epochs, args.rate)
        print(f"Round {round_number}: loss {network.loss(xs, ys):f}")

    with open(args.save, "wb") as file:
        save_image_network(network, width, height, file)

    if args.render:
        canvas = Image.new("RGB", (args.canvas * 2, args.canvas))
        canvas.paste(_scale(render_network(network, width, height), args.canvas), (0, 0))
        canvas.paste(_scale(render_targets(ys, width, height), args.canvas), (args.canvas, 0))
        canvas.save(args.render)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())