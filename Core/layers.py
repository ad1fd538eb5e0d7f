import numpy as np
from Core.base import Layer
from Core.exceptions import DimensionMismatchError, UninitializedLayerError
from Core.linalg import as_matrix, as_vector


class DenseLayer(Layer):
    """
    Fully-connected layer: output = inputs @ W.T + b, one row per sample.

    Attributes:
        weights: (n_neurons, n_inputs)
        biases: (n_neurons,)
        inputs, output: cache of the most recent forward pass (pre-activation output)
        d_weights, d_biases: gradients from the most recent backward pass
    """
    def __init__(self, n_inputs, n_neurons, rng=None, weight_std=0.01, initialize=True):
        super().__init__()
        if int(n_inputs) <= 0 or int(n_neurons) <= 0:
            raise DimensionMismatchError(
                f"layer widths must be positive, got ({n_inputs}, {n_neurons})"
            )
        self.n_inputs = int(n_inputs)
        self.n_neurons = int(n_neurons)

        self.weights = None
        self.biases = None
        if initialize:
            rng = rng if rng is not None else np.random.default_rng()
            # Small-variance Gaussian weights, zero biases
            self.weights = rng.normal(0.0, weight_std, (self.n_neurons, self.n_inputs))
            self.biases = np.zeros(self.n_neurons)

        self.inputs = None
        self.output = None
        self.d_weights = None
        self.d_biases = None

    @classmethod
    def from_params(cls, weights, biases):
        """Builds a layer around explicit weights (n_neurons, n_inputs) and biases (n_neurons,)."""
        weights = as_matrix(weights, "weights")
        layer = cls(weights.shape[1], weights.shape[0], initialize=False)
        layer.set_params(weights, biases)
        return layer

    @property
    def initialized(self):
        return self.weights is not None and self.biases is not None

    def _require_params(self):
        if not self.initialized:
            raise UninitializedLayerError(f"{self.name} has no weights/biases")

    def forward(self, x):
        self._require_params()
        x = as_matrix(x, "layer input")
        if x.shape[1] != self.n_inputs:
            raise DimensionMismatchError(
                f"{self.name} expects {self.n_inputs} input features, got {x.shape[1]}"
            )
        # Cache for the backward pass
        self.inputs = x
        self.output = x @ self.weights.T + self.biases
        return self.output

    def backward(self, output_gradient, learning_rate):
        """
        Computes parameter gradients averaged over the batch, the gradient
        w.r.t. the layer input, and then applies the gradient descent step.
        Callers that need the parameters untouched must snapshot them first.
        """
        self._require_params()
        if self.inputs is None:
            raise UninitializedLayerError(f"{self.name}.backward called before forward")

        output_gradient = as_matrix(output_gradient, "output gradient")
        batch_size = self.inputs.shape[0]
        if output_gradient.shape[0] != batch_size:
            raise DimensionMismatchError(
                f"gradient batch size {output_gradient.shape[0]} != cached batch size {batch_size}"
            )
        if output_gradient.shape[1] != self.n_neurons:
            raise DimensionMismatchError(
                f"gradient has {output_gradient.shape[1]} columns, layer has {self.n_neurons} neurons"
            )

        self.d_weights = output_gradient.T @ self.inputs / batch_size
        self.d_biases = output_gradient.sum(axis=0) / batch_size
        # Uses the weights before the update
        grad_input = output_gradient @ self.weights

        if self.trainable:
            self.weights -= learning_rate * self.d_weights
            self.biases -= learning_rate * self.d_biases
        return grad_input

    def get_params(self):
        self._require_params()
        return self.weights.copy(), self.biases.copy()

    def set_params(self, weights, biases):
        weights = as_matrix(weights, "weights")
        biases = as_vector(biases, "biases")
        if weights.shape != (self.n_neurons, self.n_inputs):
            raise DimensionMismatchError(
                f"weights must have shape {(self.n_neurons, self.n_inputs)}, got {weights.shape}"
            )
        if biases.shape != (self.n_neurons,):
            raise DimensionMismatchError(
                f"biases must have shape {(self.n_neurons,)}, got {biases.shape}"
            )
        self.weights = weights.copy()
        self.biases = biases.copy()

    def perturb(self, rng, scale):
        """Adds N(0, scale^2) noise to every weight and bias, in place."""
        self._require_params()
        self.weights += rng.normal(0.0, scale, self.weights.shape)
        self.biases += rng.normal(0.0, scale, self.biases.shape)

    def randomize(self, rng, std=0.01):
        """Replaces every weight and bias with a fresh N(0, std^2) draw."""
        self._require_params()
        self.weights = rng.normal(0.0, std, self.weights.shape)
        self.biases = rng.normal(0.0, std, self.biases.shape)

    @property
    def n_params(self):
        return self.n_neurons * self.n_inputs + self.n_neurons

    def __repr__(self):
        return f"<{self.name} {self.n_inputs} -> {self.n_neurons}>"
