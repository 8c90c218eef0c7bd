"""Two-dimensional matrices of floats with reverse-mode automatic differentiation."""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Sequence

import numpy as np

_Index = tuple[int, int]


class Matrix:
    """A dense row-major matrix that records the operations producing it.

    Every operation returns a new matrix whose children are its operands.
    Calling :meth:`backward` on a result propagates gradients to every
    matrix it was computed from.
    """

    def __init__(self, n_rows: int, n_cols: int, learnable: bool = False) -> None:
        if n_rows <= 0 or n_cols <= 0:
            raise ValueError(f"matrix dimensions must be positive, got {n_rows}x{n_cols}")
        self.data = np.zeros((n_rows, n_cols), dtype=np.float64)
        self.grad = np.zeros((n_rows, n_cols), dtype=np.float64)
        self.learnable = learnable
        self.op = ""
        self._children: tuple[Matrix, ...] = ()
        self._backward: Optional[Callable[[], None]] = None
        if learnable:
            self.randomize()

    @classmethod
    def from_values(cls, values: Iterable[Sequence[float]], learnable: bool = False) -> "Matrix":
        """Build a matrix from nested rows of numbers."""
        array = np.array(values, dtype=np.float64)
        if array.ndim != 2 or array.size == 0:
            raise ValueError("values must describe a non-empty two-dimensional matrix")
        matrix = cls(array.shape[0], array.shape[1], False)
        matrix.data[...] = array
        matrix.learnable = learnable
        return matrix

    @property
    def n_rows(self) -> int:
        return self.data.shape[0]

    @property
    def n_cols(self) -> int:
        return self.data.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return self.data.shape

    def _check_index(self, index: _Index) -> _Index:
        if not isinstance(index, tuple) or len(index) != 2:
            raise TypeError("matrix index must be a (row, col) pair")
        row, col = index
        if not (0 <= row < self.n_rows and 0 <= col < self.n_cols):
            raise IndexError(f"index {index} out of range for {self.n_rows}x{self.n_cols} matrix")
        return row, col

    def __getitem__(self, index: _Index) -> float:
        return float(self.data[self._check_index(index)])

    def __setitem__(self, index: _Index, value: float) -> None:
        self.data[self._check_index(index)] = value

    def fill(self, value: float) -> None:
        """Set every entry to ``value``."""
        self.data.fill(value)

    def randomize(self, rng: Optional[np.random.Generator] = None) -> None:
        """Draw every entry uniformly from [-0.5, 0.5)."""
        generator = rng if rng is not None else np.random.default_rng()
        self.data[...] = generator.uniform(-0.5, 0.5, size=self.shape)

    def sum(self) -> float:
        return float(self.data.sum())

    def scale(self, factor: float) -> None:
        """Multiply every entry by ``factor`` in place."""
        self.data *= factor

    def grad_descent(self, lr: float) -> None:
        """Take one gradient-descent step in place."""
        self.data -= lr * self.grad

    def zero_grad(self) -> None:
        self.grad.fill(0.0)

    def _topological_order(self) -> list["Matrix"]:
        order: list[Matrix] = []
        visited: set[int] = set()
        stack: list[tuple[Matrix, bool]] = [(self, False)]
        while stack:
            node, expanded = stack.pop()
            if expanded:
                order.append(node)
                continue
            if id(node) in visited:
                continue
            visited.add(id(node))
            stack.append((node, True))
            stack.extend((child, False) for child in node._children if id(child) not in visited)
        return order

    def backward(self) -> None:
        """Seed this matrix's gradient with ones and propagate it to all inputs."""
        self.grad.fill(1.0)
        for node in reversed(self._topological_order()):
            if node._backward is not None:
                node._backward()

    def _result(self, data: np.ndarray, op: str, children: tuple["Matrix", ...]) -> "Matrix":
        result = Matrix(data.shape[0], data.shape[1], False)
        result.data[...] = data
        result.op = op
        result._children = children
        return result

    def _require_same_shape(self, other: "Matrix") -> None:
        if self.shape != other.shape:
            raise ValueError(f"shape mismatch: {self.shape} and {other.shape}")

    def __add__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        self._require_same_shape(other)
        result = self._result(self.data + other.data, "+", (self, other))

        def _backward() -> None:
            self.grad += result.grad
            other.grad += result.grad

        result._backward = _backward
        return result

    def __sub__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        self._require_same_shape(other)
        result = self._result(self.data - other.data, "-", (self, other))

        def _backward() -> None:
            self.grad += result.grad
            other.grad -= result.grad

        result._backward = _backward
        return result

    def __matmul__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        if self.n_cols != other.n_rows:
            raise ValueError(f"cannot multiply {self.shape} by {other.shape}")
        result = self._result(self.data @ other.data, "*", (self, other))

        def _backward() -> None:
            self.grad += result.grad @ other.data.T
            other.grad += self.data.T @ result.grad

        result._backward = _backward
        return result

    def relu(self) -> "Matrix":
        result = self._result(np.maximum(self.data, 0.0), "relu", (self,))

        def _backward() -> None:
            self.grad += np.where(result.data > 0, result.grad, 0.0)

        result._backward = _backward
        return result

    def sigmoid(self) -> "Matrix":
        result = self._result(1.0 / (1.0 + np.exp(-self.data)), "sigmoid", (self,))

        def _backward() -> None:
            self.grad += result.grad * result.data * (1.0 - result.data)

        result._backward = _backward
        return result

    def softmax(self) -> "Matrix":
        """Row-wise softmax, shifted by each row's maximum for stability."""
        shifted = np.exp(self.data - self.data.max(axis=1, keepdims=True))
        result = self._result(shifted / shifted.sum(axis=1, keepdims=True), "softmax", (self,))

        def _backward() -> None:
            s = result.data
            g = result.grad
            self.grad += s * (g - (g * s).sum(axis=1, keepdims=True))

        result._backward = _backward
        return result

    def add_bias(self, bias: "Matrix") -> "Matrix":
        """Add a column vector of length ``n_cols`` to every row."""
        if bias.shape != (self.n_cols, 1):
            raise ValueError(f"bias must have shape ({self.n_cols}, 1), got {bias.shape}")
        result = self._result(self.data + bias.data[:, 0], "add_bias", (self, bias))

        def _backward() -> None:
            self.grad += result.grad
            bias.grad[:, 0] += result.grad.sum(axis=0)

        result._backward = _backward
        return result

    def square(self) -> "Matrix":
        result = self._result(self.data * self.data, "square", (self,))

        def _backward() -> None:
            self.grad += result.grad * 2.0 * self.data

        result._backward = _backward
        return result

    def log(self) -> "Matrix":
        result = self._result(np.log(self.data), "log", (self,))

        def _backward() -> None:
            self.grad += result.grad / self.data

        result._backward = _backward
        return result

    def slice(self, row_start: int, row_end: int, col_start: int, col_end: int) -> "Matrix":
        """Copy the block between inclusive row and column bounds."""
        if not (0 <= row_start <= row_end < self.n_rows):
            raise IndexError(f"row range {row_start}..{row_end} invalid for {self.n_rows} rows")
        if not (0 <= col_start <= col_end < self.n_cols):
            raise IndexError(f"column range {col_start}..{col_end} invalid for {self.n_cols} columns")
        return Matrix.from_values(self.data[row_start:row_end + 1, col_start:col_end + 1])

    def select_row(self, row: int) -> "Matrix":
        return self.slice(row, row, 0, self.n_cols - 1)

    def select_col(self, col: int) -> "Matrix":
        return self.slice(0, self.n_rows - 1, col, col)

    def transpose(self) -> None:
        """Transpose the matrix in place."""
        self.data = np.ascontiguousarray(self.data.T)
        self.grad = np.ascontiguousarray(self.grad.T)

    def rows(self, start: int, stop: int) -> "Matrix":
        """Return a detached copy of rows ``start`` up to, not including, ``stop``."""
        if not (0 <= start < stop <= self.n_rows):
            raise IndexError(f"row range [{start}, {stop}) invalid for {self.n_rows} rows")
        return Matrix.from_values(self.data[start:stop])

    @staticmethod
    def _format_rows(array: np.ndarray) -> str:
        return "\n".join(" ".join(f"{value:g}" for value in row) for row in array)

    def __str__(self) -> str:
        return f"Operation: {self.op}\n{self._format_rows(self.data)}\n"

    def gradient_str(self) -> str:
        return f"Gradients:\n{self._format_rows(self.grad)}\n"

    def __repr__(self) -> str:
        return f"Matrix({self.n_rows}x{self.n_cols}, op={self.op!r})"