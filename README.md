# brian

`brian` is a small library for fully connected neural networks written in
plain Python. Networks are stacks of dense layers, each with its own
activation, trained with batch gradient descent on a squared-error cost.
Trained networks can be written to and read back from a compact binary file.
Pillow is its only dependency, used by the image program.

## Installation

```console
pip install .
```

To run the tests:

```console
pip install ".[test]"
pytest
```

## The library

### `brian.activations`

`Activation` is an enum with the members `TANH`, `LEAKY_RELU`, `SIGMOID`,
`LINEAR` and `SOFTMAX`. Its value (also available as `code`) is the number
stored in saved networks.

- `Activation.apply(values)` activates a whole layer of values.
- `Activation.prime(values)` returns the derivatives for a layer. For
  `SOFTMAX` it returns ones, so the output error passes straight through.
- `activation_from_code(code)` looks an activation up by its code and raises
  `ValueError` for an unknown one.

The scalar functions `leaky_relu`, `leaky_relu_prime`, `linear`,
`linear_prime`, `sigmoid`, `sigmoid_prime`, `tanh_prime` and the layer-wide
`softmax` are exported as well. Leaky ReLU passes positive values through,
scales negative ones by 0.1, and has derivative 0 at exactly zero.

### `brian.network`

- `Network(input_count, layers, rng=None)` builds a network; `layers` is a
  sequence of `(size, Activation)` pairs. Weights and biases start uniformly
  in [-0.5, 0.5) drawn from `rng` (a `random.Random`).
- `forward(inputs)` returns the outputs of the last layer.
- `train_one(x, y)` backpropagates one sample and returns a list of
  `(weight_gradients, bias_gradients)` per layer, without changing the
  network.
- `train(xs, ys, epochs, rate, batch_size=None)` runs one batch per epoch,
  cycling through the batches, and steps by the batch's mean gradient. With
  no `batch_size` the whole data set is one batch. Every 100 epochs the
  current loss is logged at INFO level through the `brian.network` logger.
- `loss(xs, ys)` is the mean cost over a data set.
- `save(file)` and `Network.load(file)` write and read the binary format
  (little-endian: layer count and input count as 32-bit integers, then for
  each layer its size, activation code, weights and biases as doubles).
  A truncated or malformed file raises `NetworkFormatError`.
- `input_count`, `output_count`, `layer_sizes` and `layers` describe the
  shape; each `Layer` holds `weights[output][input]` and `biases`.
- `cost(x, y)` is half the sum of squared differences and `cost_prime(x, y)`
  its derivative, `x - y`.

```python
import random

from brian.activations import Activation
from brian.network import Network

network = Network(2, [(10, Activation.LEAKY_RELU), (1, Activation.SIGMOID)], random.Random(1))
xs = [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]
ys = [[0.0], [1.0], [1.0], [0.0]]
network.train(xs, ys, epochs=2000, rate=0.5)
print(network.loss(xs, ys))

with open("xor.nn", "wb") as file:
    network.save(file)
```

## Command-line programs

### `brian-demos`

Trains a network on a toy problem and prints the total loss before and after
training, followed by the network's output for each input (sine and XOR).

```console
brian-demos            # "prob": which of two random numbers is larger
brian-demos sin        # fit one period of the sine curve
brian-demos xor --epochs 20000 --seed 3
```

The default epoch counts are large (99999, 100000 and 999999); use
`--epochs` for a quicker run. `brian.demos` also offers `sin_dataset`,
`xor_dataset`, `comparison_dataset` and `run_sin`, `run_xor`,
`run_comparison`, which return the network with its loss before and after.

### `brian-mnist`

Loads the MNIST training set from `train-images.idx3-ubyte` and
`train-labels.idx1-ubyte` in the `--data` directory (default `mnist`),
loads the network from `--network` (default `mnist.nn`) or creates a new
784–34–10 one, and shows a random digit as text with its label, the learning
rate, the total loss and the network's ten outputs. At the prompt:

- `n` or Enter shows another digit,
- `i` doubles the learning rate,
- `t` trains for `--epochs` epochs (default 100) and writes the total loss
  before and after to the `--log` file (default `log`),
- `q` or end of input quits.

On exit the network is saved back to `--network`. Other options are
`--count` (samples to load, default 60000), `--rate` (default 0.05) and
`--seed`.

```console
brian-mnist --count 1000 --epochs 20
```

The IDX readers are available as `read_idx_images`, `read_idx_labels`,
`one_hot` and `load_mnist`.

### `brian-imgnn`

Teaches a network to map a pixel's position to its colour. Given an image, it
shrinks it to `--size` × `--size` pixels (default 8), trains a 2–64–64–3
network for `--rounds` rounds (default 10) of `--epochs` epochs (default 100)
at `--rate` (default 0.001), printing the loss after each round, and saves the
network and image size to `--save` (default `test_img.imgnn`). With
`--render out.png` it also writes the learnt picture beside the training
picture, each scaled to `--canvas` pixels (default 500).

Given a file whose extension is `imgnn`, it loads it and renders the learnt
picture to `--render`, or to the same name with `.png`.

```console
brian-imgnn picture.jpeg --render compare.png
brian-imgnn test_img.imgnn
```

`brian.imgnn` also provides `image_dataset`, `render_network`,
`render_targets`, `save_image_network` and `load_image_network`.

## What it does not do

There is no graphical window. `brian-mnist` shows digits as text in the
terminal, and `brian-imgnn` writes its pictures to PNG files instead of
showing them live while training; the learning rate cannot be changed during
an image training run.