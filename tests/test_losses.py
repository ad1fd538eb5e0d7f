# tests/test_losses.py
import math

import numpy as np
import pytest

from Core.exceptions import DimensionMismatchError, EmptyInputError, InvalidLabelError
from Core.losses import (EPSILON, SoftmaxCrossEntropy, accuracy, categorical_cross_entropy,
                         softmax_cross_entropy_backward)

def test_cross_entropy_example():
    loss = categorical_cross_entropy([[0.7, 0.2, 0.1]], [0])
    assert loss == pytest.approx(-math.log(0.7))
    assert loss == pytest.approx(0.3567, abs=1e-4)

def test_cross_entropy_is_mean_over_batch():
    preds = [[0.7, 0.3], [0.2, 0.8]]
    assert categorical_cross_entropy(preds, [0, 1]) == pytest.approx(-(math.log(0.7) + math.log(0.8)) / 2)

def test_cross_entropy_zero_for_perfect_predictions():
    assert categorical_cross_entropy([[1.0, 0.0], [0.0, 1.0]], [0, 1]) == pytest.approx(0.0, abs=1e-12)

def test_cross_entropy_positive_when_not_certain():
    assert categorical_cross_entropy([[1.0, 0.0], [0.001, 0.999]], [0, 1]) > 0

def test_cross_entropy_clamps_zero_probability():
    loss = categorical_cross_entropy([[0.0, 1.0]], [0])
    assert loss == pytest.approx(-math.log(EPSILON))
    assert math.isfinite(loss)

def test_cross_entropy_errors():
    with pytest.raises(EmptyInputError):
        categorical_cross_entropy([], [])
    with pytest.raises(DimensionMismatchError):
        categorical_cross_entropy([[0.5, 0.5]], [0, 1])
    with pytest.raises(InvalidLabelError):
        categorical_cross_entropy([[0.5, 0.5]], [2])
    with pytest.raises(InvalidLabelError):
        categorical_cross_entropy([[0.5, 0.5]], [-1])

def test_huge_float_label_rejected_before_cast():
    # 1e20 is a whole number but wraps to a valid index when cast to int64
    with pytest.raises(InvalidLabelError):
        categorical_cross_entropy([[0.5, 0.5]], [1e20])
    with pytest.raises(InvalidLabelError):
        softmax_cross_entropy_backward([[0.5, 0.5], [0.5, 0.5]], [1.0, -1e20])

def test_whole_float_labels_accepted():
    loss = categorical_cross_entropy([[0.25, 0.75], [0.5, 0.5]], [1.0, 0.0])
    assert loss == pytest.approx(-(math.log(0.75) + math.log(0.5)) / 2)

def test_fused_backward_example():
    d = softmax_cross_entropy_backward([[0.7, 0.2, 0.1]], [0])
    np.testing.assert_allclose(d, [[-0.3, 0.2, 0.1]])

def test_fused_backward_divides_by_batch():
    d = softmax_cross_entropy_backward([[0.7, 0.3], [0.4, 0.6]], [0, 0])
    np.testing.assert_allclose(d, [[-0.15, 0.15], [-0.3, 0.3]])

def test_fused_backward_validates_labels():
    with pytest.raises(InvalidLabelError):
        softmax_cross_entropy_backward([[0.5, 0.5]], [3])

def test_fused_backward_matches_numeric_gradient(rng):
    from Core.activations import softmax
    logits = rng.normal(size=(4, 3))
    labels = np.array([0, 2, 1, 2])
    analytic = softmax_cross_entropy_backward(softmax(logits), labels)

    h = 1e-6
    numeric = np.zeros_like(logits)
    for i in range(logits.shape[0]):
        for j in range(logits.shape[1]):
            plus, minus = logits.copy(), logits.copy()
            plus[i, j] += h
            minus[i, j] -= h
            numeric[i, j] = (categorical_cross_entropy(softmax(plus), labels)
                             - categorical_cross_entropy(softmax(minus), labels)) / (2 * h)
    np.testing.assert_allclose(analytic, numeric, atol=1e-6)

def test_accuracy():
    assert accuracy([[0.9, 0.1], [0.2, 0.8], [0.6, 0.4]], [0, 1, 1]) == pytest.approx(2 / 3)

def test_loss_object_delegates():
    loss_fn = SoftmaxCrossEntropy()
    preds = [[0.7, 0.2, 0.1]]
    assert loss_fn.compute(preds, [0]) == categorical_cross_entropy(preds, [0])
    np.testing.assert_array_equal(loss_fn.gradient(preds, [0]), softmax_cross_entropy_backward(preds, [0]))
