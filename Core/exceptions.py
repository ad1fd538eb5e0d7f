class NetworkError(Exception):
    """
    Root of every error raised by the Core package.
    All of them are recoverable by the immediate caller.
    """
    pass


class EmptyInputError(NetworkError, ValueError):
    """A matrix with zero rows was given where rows are required."""
    pass


class DimensionMismatchError(NetworkError, ValueError):
    """Vector/matrix shapes are incompatible for the requested operation."""
    pass


class RaggedMatrixError(NetworkError, ValueError):
    """Rows of a matrix have inconsistent lengths."""
    pass


class InvalidLabelError(NetworkError, ValueError):
    """A class index is outside [0, n_classes)."""
    pass


class InvalidParameterError(NetworkError, ValueError):
    """A hyperparameter (iterations, learning rate, scale...) is out of range."""
    pass


class UninitializedLayerError(NetworkError, RuntimeError):
    """
    Operation attempted on a layer that has no weights/biases yet,
    or a backward pass requested before any forward pass.
    """
    pass
