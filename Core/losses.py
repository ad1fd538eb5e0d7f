import numpy as np
from Core.base import Loss
from Core.exceptions import DimensionMismatchError, InvalidLabelError
from Core.linalg import as_matrix

EPSILON = 1e-15  # keeps log() away from 0


def _check_labels(predictions, labels):
    predictions = as_matrix(predictions, "predictions")
    labels = np.asarray(labels).reshape(-1)
    if labels.shape[0] != predictions.shape[0]:
        raise DimensionMismatchError(
            f"predictions ({predictions.shape[0]}) and labels ({labels.shape[0]}) must have the same length"
        )
    if labels.size and not np.issubdtype(labels.dtype, np.integer):
        if not np.all(np.equal(np.mod(labels, 1), 0)):
            raise InvalidLabelError("labels must be integer class indices")

    # Range check on the raw values, before any cast to int can wrap around
    n_classes = predictions.shape[1]
    bad = np.flatnonzero((labels < 0) | (labels >= n_classes))
    if bad.size:
        i = int(bad[0])
        raise InvalidLabelError(f"invalid class index {labels[i]} at sample {i}")
    labels = labels.astype(np.int64, copy=False)
    return predictions, labels


def categorical_cross_entropy(predictions, labels):
    """
    Mean categorical cross-entropy.

    Args:
        predictions: softmax probabilities, shape (N, n_classes)
        labels: true class index per row, shape (N,)
    Formula:
        L = - (1/N) * sum(log(max(p[i, label_i], eps)))
    """
    predictions, labels = _check_labels(predictions, labels)
    correct = predictions[np.arange(predictions.shape[0]), labels]
    return float(-np.mean(np.log(np.maximum(correct, EPSILON))))


def softmax_cross_entropy_backward(predictions, labels):
    """
    Gradient of softmax + cross-entropy w.r.t. the pre-softmax logits:
    (p - one_hot(label)) / N. Only valid when softmax produced `predictions`.
    """
    predictions, labels = _check_labels(predictions, labels)
    n_samples = predictions.shape[0]
    d_inputs = predictions.copy()
    d_inputs[np.arange(n_samples), labels] -= 1.0
    return d_inputs / n_samples


def accuracy(predictions, labels):
    """Fraction of rows whose argmax equals the label."""
    predictions, labels = _check_labels(predictions, labels)
    return float(np.mean(np.argmax(predictions, axis=1) == labels))


class SoftmaxCrossEntropy(Loss):
    """
    Categorical cross-entropy over softmax outputs.
    gradient() returns the fused gradient w.r.t. the logits, so the
    backward chain skips the softmax Jacobian.
    """
    def compute(self, y_pred, y_true):
        return categorical_cross_entropy(y_pred, y_true)

    def gradient(self, y_pred, y_true):
        return softmax_cross_entropy_backward(y_pred, y_true)
