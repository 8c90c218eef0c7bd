"""A fully connected feed-forward network built from differentiable matrices."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from .matrix import Matrix

_LOG_FLOOR = 1e-6


def _parameter(n_rows: int, n_cols: int, rng: Optional[np.random.Generator]) -> Matrix:
    matrix = Matrix(n_rows, n_cols, learnable=True)
    if rng is not None:
        matrix.randomize(rng)
    return matrix


def _scalar(value: float, op: str, children: tuple[Matrix, ...]) -> Matrix:
    result = Matrix(1, 1)
    result.fill(value)
    result.op = op
    result._children = children
    return result


class MLP:
    """A multi-layer perceptron with ReLU hidden layers.

    ``layer_sizes`` lists the input width, every hidden width and the output
    width. The output layer applies softmax when ``use_one_hot`` is set and
    ReLU otherwise.
    """

    def __init__(
        self,
        layer_sizes: Sequence[int],
        batch_size: int,
        use_one_hot: bool = True,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        sizes = tuple(int(size) for size in layer_sizes)
        if len(sizes) < 2:
            raise ValueError("an MLP needs at least an input and an output layer")
        if any(size <= 0 for size in sizes):
            raise ValueError(f"layer sizes must be positive, got {sizes}")
        if batch_size <= 0:
            raise ValueError(f"batch size must be positive, got {batch_size}")
        self.layer_sizes = sizes
        self.batch_size = batch_size
        self.use_one_hot = use_one_hot
        self.weights = [_parameter(n_in, n_out, rng) for n_in, n_out in zip(sizes, sizes[1:])]
        self.biases = [_parameter(n_out, 1, rng) for n_out in sizes[1:]]

    @property
    def input_size(self) -> int:
        return self.layer_sizes[0]

    @property
    def output_size(self) -> int:
        return self.layer_sizes[-1]

    @property
    def num_layers(self) -> int:
        return len(self.weights)

    def _check_input(self, inputs: Matrix) -> None:
        if inputs.n_cols != self.input_size:
            raise ValueError(f"expected {self.input_size} input columns, got {inputs.n_cols}")

    def forward(self, inputs: Matrix) -> Matrix:
        """Run the network on a batch of rows and return the output matrix."""
        self._check_input(inputs)
        output = inputs
        last = self.num_layers - 1
        for index, (weights, bias) in enumerate(zip(self.weights, self.biases)):
            output = (output @ weights).add_bias(bias)
            if index == last and self.use_one_hot:
                output = output.softmax()
            else:
                output = output.relu()
        return output

    def update(self, lr: float) -> None:
        """Apply one gradient-descent step to every parameter and clear gradients."""
        for weights, bias in zip(reversed(self.weights), reversed(self.biases)):
            weights.grad_descent(lr)
            bias.grad_descent(lr)
            bias.zero_grad()
            weights.zero_grad()

    def mse_loss(self, y_pred: Matrix, y_true: Matrix) -> Matrix:
        """Mean squared error between predictions and targets as a 1x1 matrix."""
        if self.use_one_hot and y_true.shape != (self.batch_size, self.output_size):
            raise ValueError(
                f"targets must have shape ({self.batch_size}, {self.output_size}), got {y_true.shape}"
            )
        diff_squared = (y_pred - y_true).square()
        total = diff_squared.data.size
        loss = _scalar(float(diff_squared.data.sum()) / total, "mse_loss", (diff_squared,))

        def _backward() -> None:
            diff_squared.grad += loss.grad[0, 0] / total

        loss._backward = _backward
        return loss

    def cross_entropy_loss(self, y_pred: Matrix, y_true: Matrix) -> Matrix:
        """Cross entropy between predicted probabilities and targets as a 1x1 matrix."""
        expected = (self.batch_size, self.output_size)
        if y_pred.shape != expected or y_true.shape != expected:
            raise ValueError(
                f"predictions and targets must have shape {expected}, "
                f"got {y_pred.shape} and {y_true.shape}"
            )
        clipped = np.maximum(y_pred.data, _LOG_FLOOR)
        value = -float((np.log(clipped) * y_true.data).sum()) / self.batch_size
        loss = _scalar(value, "cross_entropy_loss", (y_pred,))

        def _backward() -> None:
            local = np.where(y_pred.data > _LOG_FLOOR, -y_true.data / clipped, 0.0)
            y_pred.grad += loss.grad[0, 0] * local / self.batch_size

        loss._backward = _backward
        return loss

    def one_hot(self, labels: Matrix) -> Matrix:
        """Encode a (batch_size, 1) column of class labels as one-hot rows."""
        if labels.shape != (self.batch_size, 1):
            raise ValueError(f"labels must have shape ({self.batch_size}, 1), got {labels.shape}")
        encoded = Matrix(self.batch_size, self.output_size)
        for row, label in enumerate(labels.data[:, 0]):
            index = int(label)
            if not 0 <= index < self.output_size:
                raise ValueError(f"label {label} outside 0..{self.output_size - 1}")
            encoded[row, index] = 1.0
        return encoded

    def train(
        self,
        x: Matrix,
        y: Matrix,
        lr: float = 0.001,
        epochs: int = 5,
        verbose: bool = False,
    ) -> list[float]:
        """Train on mini-batches with MSE loss; return the mean loss of each epoch."""
        if x.n_rows != y.n_rows:
            raise ValueError(f"x has {x.n_rows} rows but y has {y.n_rows}")
        total = x.n_rows
        if total % self.batch_size:
            raise ValueError(f"{total} samples do not split into batches of {self.batch_size}")
        history: list[float] = []
        for epoch in range(epochs):
            epoch_loss = 0.0
            for start in range(0, total, self.batch_size):
                stop = start + self.batch_size
                target = self.one_hot(y.rows(start, stop))
                loss = self.mse_loss(self.forward(x.rows(start, stop)), target)
                loss.backward()
                self.update(lr)
                epoch_loss += loss[0, 0]
                if verbose:
                    print(f"Train Epoch: {epoch} [{stop}/{total}]  Loss: {epoch_loss / stop}")
            average = epoch_loss / total
            history.append(average)
            if verbose:
                print(f"Train loss: {average}")
        return history

    def predict(self, inputs: Matrix) -> list[int]:
        """Return the index of the highest output for each input row."""
        self._check_input(inputs)
        output = self.forward(inputs)
        return [int(index) for index in output.data.argmax(axis=1)]

    def __str__(self) -> str:
        parts = []
        last = self.num_layers - 1
        for index, (weights, bias) in enumerate(zip(self.weights, self.biases)):
            if index == last:
                parts.append(f"Output layer: \nWeights: \n{weights}bias \n{bias}")
            else:
                parts.append(f"hidden Layer {index + 1}\nWeights: \n{weights}bias \n{bias}\n")
        return "".join(parts) + "\n"