"""
Activation functions and their gradient rules.

Every forward function comes in an allocating form and an in-place form.
Backward functions take the cache they need as an explicit argument:
the ReLU family needs the pre-activation input, sigmoid and tanh need the
forward output.
"""
import numpy as np
from Core.exceptions import DimensionMismatchError
from Core.linalg import as_matrix

RELU = "relu"
LEAKY_RELU = "leaky_relu"
ELU = "elu"
SIGMOID = "sigmoid"
TANH = "tanh"
SOFTMAX = "softmax"
LINEAR = "linear"

ACTIVATIONS = (RELU, LEAKY_RELU, ELU, SIGMOID, TANH, SOFTMAX, LINEAR)

# Activations whose backward rule needs the pre-activation input
INPUT_CACHED = (RELU, LEAKY_RELU, ELU, LINEAR)

SIGMOID_CLIP = 20.0


def _write_back(x, values):
    """
    Copies already validated activation values into x.
    Float64 arrays are overwritten in one go, lists of lists row by row.
    """
    if isinstance(x, np.ndarray):
        if x.dtype != np.float64:
            raise TypeError(f"in-place activations need a float64 array, got {x.dtype}")
        x[...] = values
    else:
        for row, new_row in zip(x, values):
            row[:] = new_row.tolist()
    return x


def _check_grad(d_outputs, cache):
    d_outputs = as_matrix(d_outputs, "d_outputs")
    cache = as_matrix(cache, "cache")
    if d_outputs.shape[0] != cache.shape[0]:
        raise DimensionMismatchError("gradient and input have different batch sizes")
    if d_outputs.shape[1] != cache.shape[1]:
        raise DimensionMismatchError("gradient and input have different feature dimensions")
    return d_outputs, cache

# ------------------------------
# ReLU Family
# ------------------------------

def relu(x):
    """Formula: f(x) = max(0, x). Range: [0, inf)"""
    return np.maximum(0.0, as_matrix(x))


def relu_inplace(x):
    return _write_back(x, relu(x))


def relu_backward(d_outputs, inputs):
    # Derivative: 1 if x > 0 else 0, evaluated on the pre-activation input
    d_outputs, inputs = _check_grad(d_outputs, inputs)
    return d_outputs * (inputs > 0)


def leaky_relu(x, alpha=0.01):
    """f(x) = x if x > 0, else alpha * x"""
    x = as_matrix(x)
    return np.where(x > 0, x, alpha * x)


def leaky_relu_inplace(x, alpha=0.01):
    return _write_back(x, leaky_relu(x, alpha))


def leaky_relu_backward(d_outputs, inputs, alpha=0.01):
    d_outputs, inputs = _check_grad(d_outputs, inputs)
    return np.where(inputs > 0, d_outputs, alpha * d_outputs)


def elu(x, alpha=1.0):
    """Exponential Linear Unit: f(x) = x if x > 0, else alpha * (exp(x) - 1)"""
    x = as_matrix(x)
    # exp only sees the non-positive part, so it can't overflow
    return np.where(x > 0, x, alpha * np.expm1(np.minimum(x, 0.0)))


def elu_inplace(x, alpha=1.0):
    return _write_back(x, elu(x, alpha))


def elu_backward(d_outputs, inputs, alpha=1.0):
    # Derivative: 1 if x > 0 else alpha * exp(x)
    d_outputs, inputs = _check_grad(d_outputs, inputs)
    return np.where(inputs > 0, d_outputs, d_outputs * alpha * np.exp(np.minimum(inputs, 0.0)))

# ------------------------------
# Sigmoid / Tanh
# ------------------------------

def _sigmoid_values(x):
    # Saturate outside [-20, 20] instead of evaluating exp on huge arguments
    out = 1.0 / (1.0 + np.exp(-np.clip(x, -SIGMOID_CLIP, SIGMOID_CLIP)))
    out[x > SIGMOID_CLIP] = 1.0
    out[x < -SIGMOID_CLIP] = 0.0
    return out


def sigmoid(x):
    """
    Standard Sigmoid Activation Function.
    Formula: f(x) = 1 / (1 + exp(-x))
    Range: [0, 1]
    """
    return _sigmoid_values(as_matrix(x))


def sigmoid_inplace(x):
    return _write_back(x, sigmoid(x))


def sigmoid_backward(d_outputs, outputs):
    # Derivative: f(x) * (1 - f(x)), using the forward output
    d_outputs, outputs = _check_grad(d_outputs, outputs)
    return d_outputs * outputs * (1 - outputs)


def tanh(x):
    """
    Hyperbolic Tangent Activation.
    Range: (-1, 1)
    """
    return np.tanh(as_matrix(x))


def tanh_inplace(x):
    return _write_back(x, tanh(x))


def tanh_backward(d_outputs, outputs):
    # Derivative: 1 - tanh^2(x)
    d_outputs, outputs = _check_grad(d_outputs, outputs)
    return d_outputs * (1 - outputs ** 2)

# ------------------------------
# Softmax
# ------------------------------

def _softmax_values(x):
    e_x = np.exp(x - x.max(axis=1, keepdims=True))
    return e_x / e_x.sum(axis=1, keepdims=True)


def softmax(x):
    """Row-wise softmax, stabilized by subtracting the row maximum."""
    x = as_matrix(x)
    if x.shape[1] == 0:
        return x.copy()
    return _softmax_values(x)


def softmax_inplace(x):
    return _write_back(x, softmax(x))


def softmax_backward(d_outputs, outputs):
    """
    Softmax is always paired with categorical cross-entropy here, and the
    combined gradient comes from losses.softmax_cross_entropy_backward.
    This returns the incoming gradient unchanged.
    """
    d_outputs, _ = _check_grad(d_outputs, outputs)
    return d_outputs

# ------------------------------
# Linear
# ------------------------------

def linear(x):
    return as_matrix(x).copy()


def linear_inplace(x):
    return _write_back(x, as_matrix(x))


def linear_backward(d_outputs, inputs):
    d_outputs, _ = _check_grad(d_outputs, inputs)
    return d_outputs.copy()

# ------------------------------
# Dispatch
# ------------------------------

_FORWARD = {
    RELU: (relu, relu_inplace),
    LEAKY_RELU: (leaky_relu, leaky_relu_inplace),
    ELU: (elu, elu_inplace),
    SIGMOID: (sigmoid, sigmoid_inplace),
    TANH: (tanh, tanh_inplace),
    SOFTMAX: (softmax, softmax_inplace),
    LINEAR: (linear, linear_inplace),
}

_BACKWARD = {
    RELU: relu_backward,
    LEAKY_RELU: leaky_relu_backward,
    ELU: elu_backward,
    SIGMOID: sigmoid_backward,
    TANH: tanh_backward,
    SOFTMAX: softmax_backward,
    LINEAR: linear_backward,
}


def standardize_activation_name(activation):
    """Lower-cases the name and checks it is one we know."""
    name = str(activation).lower()
    if name == "rec":
        name = RELU
    if name not in _FORWARD:
        raise ValueError(f"Unrecognized activation: {activation}")
    return name


def apply(activation, x, in_place=False):
    """Applies the named activation to x. With in_place=True, x is overwritten and returned."""
    forward_fn, inplace_fn = _FORWARD[standardize_activation_name(activation)]
    if in_place:
        return inplace_fn(x)
    return forward_fn(x)


def backward(activation, d_outputs, inputs, outputs):
    """
    Routes d_outputs through the named activation's gradient rule,
    picking the pre-activation input or the forward output as needed.
    """
    name = standardize_activation_name(activation)
    cache = inputs if name in INPUT_CACHED else outputs
    return _BACKWARD[name](d_outputs, cache)


def apply_with_grad(activation, x):
    """
    Returns (output, backward_fn) where backward_fn(d_outputs) already
    holds the cache the gradient rule needs.
    """
    name = standardize_activation_name(activation)
    inputs = as_matrix(x)
    output = _FORWARD[name][0](inputs)

    def backward_fn(d_outputs):
        return backward(name, d_outputs, inputs, output)

    return output, backward_fn
