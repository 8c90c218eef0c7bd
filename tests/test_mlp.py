import numpy as np
import pytest

from gradmatrix.matrix import Matrix
from gradmatrix.mlp import MLP


def numeric_grad(matrix, compute, i, j, eps=1e-6):
    original = matrix[i, j]
    matrix[i, j] = original + eps
    plus = compute()[0, 0]
    matrix[i, j] = original - eps
    minus = compute()[0, 0]
    matrix[i, j] = original
    return (plus - minus) / (2 * eps)


@pytest.fixture
def rng():
    return np.random.default_rng(0)


def test_parameter_shapes(rng):
    model = MLP([4, 5, 3], batch_size=2, use_one_hot=True, rng=rng)
    assert [w.shape for w in model.weights] == [(4, 5), (5, 3)]
    assert [b.shape for b in model.biases] == [(5, 1), (3, 1)]
    assert all(w.learnable for w in model.weights)


def test_too_few_layers_rejected():
    with pytest.raises(ValueError):
        MLP([3], batch_size=1, use_one_hot=True)


def test_forward_softmax_rows_sum_to_one(rng):
    model = MLP([4, 6, 3], batch_size=2, use_one_hot=True, rng=rng)
    x = Matrix.from_values([[0.1, 0.2, 0.3, 0.4], [1.0, -1.0, 0.5, 0.0]])
    out = model.forward(x)
    assert out.shape == (2, 3)
    assert np.allclose(out.data.sum(axis=1), 1.0)


def test_forward_relu_output_non_negative(rng):
    model = MLP([3, 4, 2], batch_size=2, use_one_hot=False, rng=rng)
    out = model.forward(Matrix.from_values([[1.0, -2.0, 3.0], [-1.0, 0.5, 0.2]]))
    assert (out.data >= 0).all()


def test_forward_wrong_width(rng):
    model = MLP([4, 3], batch_size=1, use_one_hot=True, rng=rng)
    with pytest.raises(ValueError):
        model.forward(Matrix(1, 3))


def test_one_hot(rng):
    model = MLP([2, 3], batch_size=2, use_one_hot=True, rng=rng)
    encoded = model.one_hot(Matrix.from_values([[2], [0]]))
    assert encoded[0, 2] == 1.0
    assert encoded[1, 0] == 1.0
    assert encoded.sum() == 2.0


def test_one_hot_label_out_of_range(rng):
    model = MLP([2, 3], batch_size=1, use_one_hot=True, rng=rng)
    with pytest.raises(ValueError):
        model.one_hot(Matrix.from_values([[3]]))


def test_one_hot_wrong_shape(rng):
    model = MLP([2, 3], batch_size=2, use_one_hot=True, rng=rng)
    with pytest.raises(ValueError):
        model.one_hot(Matrix.from_values([[1]]))


def test_mse_zero_for_equal(rng):
    model = MLP([2, 3], batch_size=2, use_one_hot=True, rng=rng)
    values = [[0.2, 0.3, 0.5], [1.0, 0.0, 0.0]]
    loss = model.mse_loss(Matrix.from_values(values), Matrix.from_values(values))
    assert loss[0, 0] == pytest.approx(0.0)


def test_mse_gradient_matches_numeric(rng):
    model = MLP([2, 3], batch_size=2, use_one_hot=True, rng=rng)
    pred = Matrix.from_values([[0.2, 0.7, 0.1], [0.5, 0.3, 0.9]])
    true = Matrix.from_values([[0, 1, 0], [1, 0, 0]])
    model.mse_loss(pred, true).backward()
    for i in range(2):
        for j in range(3):
            expected = numeric_grad(pred, lambda: model.mse_loss(pred, true), i, j)
            assert pred.grad[i, j] == pytest.approx(expected, abs=1e-5)


def test_mse_rejects_wrong_target_shape(rng):
    model = MLP([2, 3], batch_size=2, use_one_hot=True, rng=rng)
    with pytest.raises(ValueError):
        model.mse_loss(Matrix(1, 3), Matrix(1, 3))


def test_cross_entropy_perfect_prediction(rng):
    model = MLP([2, 3], batch_size=2, use_one_hot=True, rng=rng)
    target = Matrix.from_values([[0, 1, 0], [1, 0, 0]])
    loss = model.cross_entropy_loss(Matrix.from_values([[0, 1, 0], [1, 0, 0]]), target)
    assert loss[0, 0] == pytest.approx(0.0)


def test_cross_entropy_gradient_matches_numeric(rng):
    model = MLP([2, 3], batch_size=2, use_one_hot=True, rng=rng)
    pred = Matrix.from_values([[0.2, 0.7, 0.1], [0.5, 0.3, 0.2]])
    true = Matrix.from_values([[0, 1, 0], [1, 0, 0]])
    model.cross_entropy_loss(pred, true).backward()
    for i in range(2):
        for j in range(3):
            expected = numeric_grad(pred, lambda: model.cross_entropy_loss(pred, true), i, j)
            assert pred.grad[i, j] == pytest.approx(expected, abs=1e-4)


def test_update_steps_and_clears(rng):
    model = MLP([2, 2], batch_size=1, use_one_hot=True, rng=rng)
    weights = model.weights[0]
    weights.grad.fill(1.0)
    before = weights.data.copy()
    model.update(0.5)
    assert np.allclose(weights.data, before - 0.5)
    assert not weights.grad.any()


def test_train_reduces_loss(rng):
    x = Matrix.from_values([[1, 0], [0, 1]] * 4)
    y = Matrix.from_values([[0], [1]] * 4)
    before = x.data.copy()
    model = MLP([2, 4, 2], batch_size=4, use_one_hot=True, rng=rng)
    losses = model.train(x, y, lr=0.1, epochs=50)
    assert len(losses) == 50
    assert losses[-1] < losses[0]
    assert np.array_equal(x.data, before)


def test_train_row_mismatch(rng):
    model = MLP([2, 2], batch_size=2, use_one_hot=True, rng=rng)
    with pytest.raises(ValueError):
        model.train(Matrix(4, 2), Matrix(2, 1))


def test_train_partial_batch(rng):
    model = MLP([2, 2], batch_size=3, use_one_hot=True, rng=rng)
    with pytest.raises(ValueError):
        model.train(Matrix(4, 2), Matrix(4, 1))


def test_train_verbose(rng, capsys):
    model = MLP([2, 2], batch_size=2, use_one_hot=True, rng=rng)
    model.train(Matrix(4, 2), Matrix(4, 1), epochs=1, verbose=True)
    out = capsys.readouterr().out
    assert "Train Epoch: 0 [2/4]" in out
    assert "Train loss:" in out


def test_predict_with_fixed_weights(rng):
    model = MLP([2, 2], batch_size=3, use_one_hot=True, rng=rng)
    model.weights[0].data[...] = np.eye(2)
    model.biases[0].fill(0.0)
    x = Matrix.from_values([[1, 0], [0, 1], [3, 5]])
    assert model.predict(x) == [0, 1, 1]


def test_str_lists_layers(rng):
    text = str(MLP([2, 3, 2], batch_size=1, use_one_hot=True, rng=rng))
    assert "hidden Layer 1" in text
    assert "Output layer" in text
    assert "hidden Layer 2" not in text