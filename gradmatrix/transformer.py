"""Transformer model settings and its feed-forward block."""

from __future__ import annotations

from .mlp import MLP


class Transformer:
    """Holds the model hyper-parameters and its feed-forward block.

    The feed-forward block maps ``context_size`` inputs through ``n_layer``
    hidden layers of width ``4 * n_embd`` to ``vocab_size`` softmax outputs.
    """

    def __init__(
        self,
        vocab_size: int,
        context_size: int,
        batch_size: int,
        n_layer: int,
        n_embd: int,
        n_heads: int,
        dropout: float,
        lr: float,
    ) -> None:
        self.vocab_size = vocab_size
        self.context_size = context_size
        self.batch_size = batch_size
        self.n_layer = n_layer
        self.n_embd = n_embd
        self.n_heads = n_heads
        self.dropout = dropout
        self.lr = lr
        layer_sizes = [context_size, *([4 * n_embd] * n_layer), vocab_size]
        self.mlp = MLP(layer_sizes, batch_size, use_one_hot=True)