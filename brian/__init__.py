"""Small fully connected neural networks with gradient-descent training, plus MNIST, image-fitting and toy demo programs."""

__version__ = "0.1.0"

__all__ = ["activations", "network", "mnist", "imgnn", "demos"]