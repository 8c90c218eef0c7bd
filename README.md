# gradmatrix

`gradmatrix` is a small reverse-mode automatic differentiation library. Its
values are 2-D matrices of floats that remember the operations that produced
them, so one call to `backward()` fills in the gradient of every matrix the
result was computed from. On top of it sit a fully connected network (`MLP`),
a reader for MNIST data stored as CSV (`read_mnist`), a token `Embedding`, and
a `Transformer` class that holds model settings and a feed-forward block.

## Installation

```
pip install .
```

NumPy is the only runtime dependency. To run the tests as well:

```
pip install ".[test]"
pytest
```

## Matrices and gradients

`gradmatrix.matrix.Matrix(n_rows, n_cols, learnable=False)` creates a matrix.
Learnable matrices start with values drawn uniformly from `[-0.5, 0.5)`; all
others start at zero. Dimensions must be positive, otherwise `ValueError` is
raised.

```python
from gradmatrix.matrix import Matrix

a = Matrix(2, 3, learnable=False)
b = Matrix(3, 2, learnable=False)
a.fill(1.0)
b.fill(2.0)

c = a @ b            # matrix product, every entry is 6.0
c.backward()         # seeds c's gradient with ones and propagates it

print(a.gradient_str())   # every entry 4.0
print(b.gradient_str())   # every entry 2.0
```

A matrix can also be built from nested rows, and entries are read and written
with a `(row, col)` pair:

```python
x = Matrix.from_values([[1.0, 2.0, 3.0], [-1.0, 0.0, 1.0]], learnable=False)
x[1, 1] = 0.5
probs = x.softmax()       # each row sums to 1
print(probs[0, 2])
```

The values and gradients are NumPy arrays in `data` and `grad`; `n_rows`,
`n_cols` and `shape` give the size.

Operations that record gradients:

- `+` and `-` (element-wise, shapes must match), `@` (matrix product)
- `relu()`, `sigmoid()`, `softmax()` (row-wise, shifted by the row maximum),
  `square()`, `log()`
- `add_bias(bias)` adds a column vector of shape `(n_cols, 1)` to every row

Other methods:

- `select_row`, `select_col`, `slice` (inclusive bounds) and `rows`
  (half-open range) return detached copies
- `transpose()` swaps rows and columns in place
- `fill`, `randomize(rng=None)`, `scale`, `sum`, `grad_descent(lr)`, `zero_grad`
- `str(matrix)` shows the operation name and the values; `gradient_str()`
  shows the gradients

Shape mismatches raise `ValueError`; out-of-range indices raise `IndexError`.

## Training a network

```python
import numpy as np
from gradmatrix.matrix import Matrix
from gradmatrix.mlp import MLP

rng = np.random.default_rng(0)
net = MLP([784, 128, 10], batch_size=32, use_one_hot=True, rng=rng)

# x holds one sample per row; y holds one class label per row
history = net.train(x, y, lr=0.001, epochs=5, verbose=True)
predictions = net.predict(x.rows(0, 32))   # list of class indices
```

`layer_sizes` lists the input width, every hidden width and the output width.
Hidden layers use ReLU; the output layer uses softmax when `use_one_hot` is
set and ReLU otherwise.

`train` runs mini-batches of `batch_size` rows, encodes the labels with
`one_hot`, uses `mse_loss` as the loss and calls `update` after every batch.
The number of rows must be a multiple of `batch_size`. It returns the mean
loss of each epoch and, with `verbose=True`, prints progress.

`cross_entropy_loss(y_pred, y_true)` is also available for probability
outputs; both losses return a 1x1 matrix that can be passed to `backward()`.
`str(net)` lists the weights and biases of every layer.

## Reading MNIST data

```python
from gradmatrix.mnist import read_mnist

data = read_mnist("mnist_train.csv", 60000)
```

Each line of the file is a label followed by 784 pixel values. The result has
785 columns: the pixel values divided by 255, then the label in the last
column. At most `n_images` lines are read; rows beyond the end of the file
stay zero. The function prints how many images it read.

## Embedding and transformer

`gradmatrix.embedding.Embedding(vocab_size, n_embd, batch_size, context_size, rng=None)`
holds a learnable `(vocab_size, n_embd)` table and an `(n_embd, n_embd)`
projection. `forward(tokens)` takes a `(batch_size, context_size)` matrix of
token ids and returns one row of `table @ projection` per token, a
`(batch_size * context_size, n_embd)` matrix; gradients flow back to both the
table and the projection, and `update(lr)` applies them.

`gradmatrix.transformer.Transformer(vocab_size, context_size, batch_size, n_layer, n_embd, n_heads, dropout, lr)`
stores these settings and builds `mlp`, an `MLP` from `context_size` inputs
through `n_layer` hidden layers of width `4 * n_embd` to `vocab_size` softmax
outputs.

## What it does not do

- There is no command-line program; training is done from Python code.
- `read_mnist` only reads a CSV file you supply; it does not download data.
- `Transformer` has no attention, no forward pass and no training loop:
  `n_heads`, `dropout` and `lr` are stored but not used.