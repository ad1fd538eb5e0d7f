from abc import ABC, abstractmethod

class Layer(ABC):
    """
    Abstract Base Class for all neural network layers.
    Establishes the contract for Forward, Backward, and Parameter handling.
    """

    def __init__(self):
        # Flag to indicate if the layer has trainable parameters
        self.trainable = True
        # Layer name can be useful for logging and summaries
        self.name = self.__class__.__name__

    @abstractmethod
    def forward(self, x):
        """
        Computes the output of the layer.
        Args:
            x: Input matrix of shape (batch, inputs).
        Returns:
            Output matrix of shape (batch, outputs).
        """
        pass

    @abstractmethod
    def backward(self, output_gradient, learning_rate):
        """
        Computes the gradient w.r.t input and updates parameters if trainable.

        Args:
            output_gradient: Gradient of the loss w.r.t the output of this layer.
            learning_rate: Step size for the in-place gradient descent update.

        Returns:
            input_gradient: Gradient of the loss w.r.t the input of this layer.
        """
        pass

    def get_params(self):
        """
        Returns deep copies of the trainable parameters.
        Layers without parameters return an empty tuple.
        """
        return ()

    def set_params(self, *params):
        """
        Overwrites the layer parameters with copies of `params`.
        Default: Do nothing
        """
        pass

    def __repr__(self):
        return f"<{self.name}>"


class Loss(ABC):
    """
    Abstract Base Class for loss functions.
    """

    @abstractmethod
    def compute(self, y_pred, y_true):
        """
        Computes the scalar loss value.
        Used for monitoring training progress and for accept/reject decisions.
        """
        pass

    @abstractmethod
    def gradient(self, y_pred, y_true):
        """
        Computes the gradient of the loss w.r.t the network logits.
        This starts the Backpropagation process.
        """
        pass


class Optimizer(ABC):
    """
    Abstract Base Class for parameter search strategies.
    One instance drives one network for the whole run.
    """

    @abstractmethod
    def update(self, model, x, y):
        """
        Performs a single iteration of the strategy.
        Args:
            model: The entire Neural Network model.
            x: Input data.
            y: Target labels.
        Returns:
            The loss observed during this iteration.
        """
        pass
