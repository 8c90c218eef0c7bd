"""A learnable token embedding with a shared projection."""

from __future__ import annotations

from typing import Optional

import numpy as np

from .matrix import Matrix


class Embedding:
    """Maps token ids to rows of ``table @ projection``.

    ``forward`` takes a (batch_size, context_size) matrix of token ids and
    returns a (batch_size * context_size, n_embd) matrix, one row per token.
    """

    def __init__(
        self,
        vocab_size: int,
        n_embd: int,
        batch_size: int,
        context_size: int,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.vocab_size = vocab_size
        self.n_embd = n_embd
        self.batch_size = batch_size
        self.context_size = context_size
        self.table = Matrix(vocab_size, n_embd, learnable=True)
        self.projection = Matrix(n_embd, n_embd, learnable=True)
        if rng is not None:
            self.table.randomize(rng)
            self.projection.randomize(rng)

    def forward(self, tokens: Matrix) -> Matrix:
        """Look up the projected embedding of every token."""
        expected = (self.batch_size, self.context_size)
        if tokens.shape != expected:
            raise ValueError(f"tokens must have shape {expected}, got {tokens.shape}")
        if (tokens.data < 0).any() or (tokens.data >= self.vocab_size).any():
            raise IndexError(f"token ids must lie in 0..{self.vocab_size - 1}")
        ids = tokens.data.astype(np.int64).ravel()

        projected = self.table @ self.projection
        result = Matrix(ids.size, self.n_embd)
        result.data[...] = projected.data[ids]
        result.op = "embedding"
        result._children = (projected,)

        def _backward() -> None:
            np.add.at(projected.grad, ids, result.grad)

        result._backward = _backward
        return result

    def update(self, lr: float) -> None:
        """Apply one gradient-descent step and clear gradients."""
        for parameter in (self.table, self.projection):
            parameter.grad_descent(lr)
            parameter.zero_grad()