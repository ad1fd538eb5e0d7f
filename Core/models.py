import numpy as np
from Core import activations
from Core.exceptions import DimensionMismatchError, InvalidParameterError, UninitializedLayerError
from Core.layers import DenseLayer
from Core.losses import SoftmaxCrossEntropy, accuracy

class Network:
    """
    Ordered chain of DenseLayers.

    The hidden activation runs after every layer except the last one,
    the output activation runs after the last one. The default policy
    (ReLU hidden, softmax output) pairs with SoftmaxCrossEntropy, whose
    gradient already covers the softmax step.
    """
    def __init__(self, layer_sizes=None, layers=None, hidden_activation="relu",
                 output_activation="softmax", rng=None, weight_std=0.01):
        if (layer_sizes is None) == (layers is None):
            raise ValueError("Pass exactly one of layer_sizes or layers")

        self.hidden_activation = activations.standardize_activation_name(hidden_activation)
        self.output_activation = activations.standardize_activation_name(output_activation)
        self.loss_fn = SoftmaxCrossEntropy()
        self.layers = []

        if layers is not None:
            for layer in layers:
                self.add(layer)
        else:
            if len(layer_sizes) < 2:
                raise DimensionMismatchError("layer_sizes needs at least an input and an output width")
            rng = rng if rng is not None else np.random.default_rng()
            for n_in, n_out in zip(layer_sizes, layer_sizes[1:]):
                self.add(DenseLayer(n_in, n_out, rng=rng, weight_std=weight_std))

        # Post-activation outputs of the hidden layers from the last forward pass
        self._hidden_outputs = []

    def add(self, layer):
        """Appends a layer. Its input width must match the previous layer's output width."""
        if not isinstance(layer, DenseLayer):
            raise TypeError("Network layers must be DenseLayer instances")
        if self.layers and self.layers[-1].n_neurons != layer.n_inputs:
            raise DimensionMismatchError(
                f"{layer!r} takes {layer.n_inputs} inputs but the previous layer "
                f"outputs {self.layers[-1].n_neurons}"
            )
        self.layers.append(layer)

    @property
    def shape(self):
        if not self.layers:
            return []
        return [self.layers[0].n_inputs] + [layer.n_neurons for layer in self.layers]

    @property
    def n_params(self):
        return sum(layer.n_params for layer in self.layers)

    def forward(self, x):
        """
        Passes input x through all layers sequentially and returns the
        output of the final activation.
        """
        if not self.layers:
            raise DimensionMismatchError("Network has no layers")
        self._hidden_outputs = []
        out = x
        last = len(self.layers) - 1
        for i, layer in enumerate(self.layers):
            z = layer.forward(out)
            if i < last:
                out = activations.apply(self.hidden_activation, z)
                self._hidden_outputs.append(out)
            else:
                out = activations.apply(self.output_activation, z)
        return out

    def backward(self, loss_grad, learning_rate):
        """
        Passes the gradient w.r.t. the final logits backward through all layers.
        Every layer applies its gradient descent update on the way.
        Used ONLY by the gradient descent strategy.

        loss_grad must come from SoftmaxCrossEntropy.gradient, which already
        covers the softmax step, so any other output activation is refused.
        Both checks run before the first layer is updated.
        """
        if self.output_activation != activations.SOFTMAX:
            raise InvalidParameterError(
                f"backward needs a softmax output activation, got {self.output_activation!r}"
            )
        last = len(self.layers) - 1
        stale = len(self._hidden_outputs) != last or any(
            layer.output is None or layer.output.shape != hidden.shape
            for layer, hidden in zip(self.layers, self._hidden_outputs)
        )
        if stale:
            raise UninitializedLayerError("Network.backward called without a matching Network.forward")

        grad = loss_grad
        for i in range(last, -1, -1):
            layer = self.layers[i]
            if i < last:
                grad = activations.backward(
                    self.hidden_activation, grad, layer.output, self._hidden_outputs[i]
                )
            grad = layer.backward(grad, learning_rate)
        return grad

    def loss(self, x, y):
        """Full-batch loss of the current parameters."""
        return self.loss_fn.compute(self.forward(x), y)

    def evaluate(self, x, y):
        """Returns (loss, accuracy) for the current parameters."""
        probs = self.forward(x)
        return self.loss_fn.compute(probs, y), accuracy(probs, y)

    def predict(self, x):
        """Predicted class index per sample."""
        return np.argmax(self.forward(x), axis=1)

    def snapshot(self):
        """Deep copy of every layer's (weights, biases)."""
        return [layer.get_params() for layer in self.layers]

    def restore(self, snapshot):
        if len(snapshot) != len(self.layers):
            raise DimensionMismatchError(
                f"snapshot holds {len(snapshot)} layers, network has {len(self.layers)}"
            )
        for layer, (weights, biases) in zip(self.layers, snapshot):
            layer.set_params(weights, biases)

    def summary(self):
        """Returns a printable summary of the model architecture."""
        lines = ["-" * 60, f"{'Layer (type)':<30} {'Param Shape / Details':<30}", "=" * 60]
        last = len(self.layers) - 1
        for i, layer in enumerate(self.layers):
            act = self.hidden_activation if i < last else self.output_activation
            details = f"Params: {layer.n_params} ({act})"
            lines.append(f"{layer.name + f' {layer.n_inputs}->{layer.n_neurons}':<30} {details:<30}")
        lines.append("=" * 60)
        lines.append(f"Total Trainable Parameters: {self.n_params}")
        lines.append("-" * 60)
        return "\n".join(lines)

    def __len__(self):
        return len(self.layers)
