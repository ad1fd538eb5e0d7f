import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from Core.exceptions import DimensionMismatchError, InvalidParameterError
from Core.linalg import as_matrix
from Utils import netlog

log = netlog.setup_logging("nnets_data", level="INFO")

# Tomato, Royal Blue, Forest Green, Orange, Blue Violet
CLASS_COLORS = ["#ff6347", "#4169e1", "#228b22", "#ffa500", "#8a2be2"]


class DataHandler:
    """
    Utility class for dataset generation and plotting.
    The network code only ever sees the (X, y) arrays returned here.
    """

    @staticmethod
    def create_spiral_data(samples, classes, rng=None, noise=0.2):
        """
        Generates the 2-D spiral dataset (CS231n style).

        Args:
            samples: Number of points per class (at least 2).
            classes: Number of spirals.
            rng: numpy Generator; a fresh unseeded one if None.
            noise: Std of the Gaussian noise added to the angle.
        Returns:
            X: (samples * classes, 2) coordinates
            y: (samples * classes,) integer labels
        """
        if samples < 2:
            raise InvalidParameterError(f"samples must be at least 2, got {samples}")
        if classes < 1:
            raise InvalidParameterError(f"classes must be at least 1, got {classes}")
        rng = rng if rng is not None else np.random.default_rng()

        X = np.zeros((samples * classes, 2))
        y = np.zeros(samples * classes, dtype=np.int64)
        for class_num in range(classes):
            ix = slice(class_num * samples, (class_num + 1) * samples)
            r = np.linspace(0.0, 1.0, samples)  # radius
            t = class_num * 4.0 + r * 4.0 + rng.normal(0.0, noise, samples)
            X[ix] = np.column_stack([r * np.sin(t * 2.5), r * np.cos(t * 2.5)])
            y[ix] = class_num

        log.debug(f"Generated {len(X)} spiral points ({classes} classes)")
        return X, y

    @staticmethod
    def plot_data(X, y, classes, filename, title="Spiral Dataset"):
        """
        Saves a scatter plot of 2-D points colored by class.
        """
        X = as_matrix(X, "X")
        y = np.asarray(y).reshape(-1)
        if X.shape[1] != 2:
            raise DimensionMismatchError(f"plot_data needs 2 features, got {X.shape[1]}")
        if len(y) != len(X):
            raise DimensionMismatchError("X and y must have the same length")

        fig, ax = plt.subplots(figsize=(6, 6))
        for class_num in range(classes):
            pts = X[y == class_num]
            ax.scatter(pts[:, 0], pts[:, 1], s=10,
                       color=CLASS_COLORS[class_num % len(CLASS_COLORS)],
                       label=f"class {class_num}")
        ax.set_title(title)
        ax.set_xlabel("X1")
        ax.set_ylabel("X2")
        ax.legend(loc="upper right")
        fig.savefig(filename)
        plt.close(fig)
        log.info(f"Saved plot to {filename}")
        return filename
