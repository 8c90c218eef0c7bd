"""Reverse-mode automatic differentiation on 2-D matrices, with an MLP, an MNIST CSV reader, a token embedding and transformer settings."""

__version__ = "0.1.0"
__all__ = ["matrix", "mlp", "mnist", "embedding", "transformer"]