"""
Parameter search strategies.

Exactly one strategy drives a network during a run:

- `GradientDescent`: forward -> loss -> fused backward/update, every step accepted.
- `HillClimbing`: Gaussian perturbation of every parameter, kept only if the
  full-batch loss strictly improves, otherwise reverted to the best snapshot.
- `RandomSearch`: fresh N(0, std^2) parameters every trial. The best loss and
  its iteration are recorded, but the network is left at the last trial.
"""
import math
import time
from dataclasses import dataclass, field

import numpy as np
from tqdm import tqdm

from Core import activations
from Core.base import Optimizer
from Core.exceptions import InvalidParameterError
from Core.models import Network
from Utils import netlog

log = netlog.setup_logging("nnets_optimizers", level="INFO")


@dataclass
class OptimizationResult:
    best_loss: float = math.inf
    best_iteration: int | None = None
    final_loss: float = math.inf
    history: list[float] = field(default_factory=list)


def as_network(model):
    """Wraps a plain list of DenseLayers with the ReLU-hidden / softmax-output policy."""
    if isinstance(model, Network):
        return model
    return Network(layers=list(model))


def _check_count(value, what):
    if int(value) != value or value < 0:
        raise InvalidParameterError(f"{what} must be a non-negative integer, got {value}")
    return int(value)


def _check_positive(value, what):
    if not value > 0 or not math.isfinite(value):
        raise InvalidParameterError(f"{what} must be a positive finite number, got {value}")
    return float(value)


class SearchOptimizer(Optimizer):
    """
    Shared training loop. Subclasses implement update(), which runs one
    iteration and returns the loss it observed.
    """
    mode_name = "search"

    def __init__(self):
        self.reset()

    def reset(self):
        """Forgets everything recorded by a previous fit()."""
        self.best_loss = math.inf
        self.best_iteration = None
        self.history = []

    def start(self, model, x, y):
        """Hook called once before the first iteration."""
        pass

    def _record(self, loss, iteration):
        self.history.append(loss)
        if loss < self.best_loss:
            self.best_loss = loss
            self.best_iteration = iteration

    def fit(self, model, x, y, iterations, verbose=True, log_freq=100):
        """
        Main optimization loop.

        Args:
            model: Network (or list of DenseLayers).
            x, y: Feature matrix (N, F) and integer labels (N,).
            iterations: Number of iterations / epochs.
            verbose: Show a progress bar and periodic progress logs.
            log_freq: Log every log_freq-th iteration.
        Returns:
            OptimizationResult
        """
        model = as_network(model)
        iterations = _check_count(iterations, "iterations")
        log_freq = max(1, int(log_freq))
        self.reset()

        log.info(f"Starting Training | Mode: {self.mode_name} | Iterations: {iterations} | "
                 f"Samples: {len(x)} | Params: {model.n_params}")
        start_time = time.time()

        self.start(model, x, y)

        loss = math.inf
        pbar = tqdm(range(iterations), desc=self.mode_name, unit="it", disable=not verbose)
        for iteration in pbar:
            loss = self.update(model, x, y)
            self._record(loss, iteration)

            if (iteration + 1) % log_freq == 0 or iteration == 0:
                pbar.set_postfix({"loss": f"{loss:.5f}", "best": f"{self.best_loss:.5f}"})
                log.debug(f"Iteration {iteration:6d} | Loss: {loss:.6f} | Best: {self.best_loss:.6f}")

        total_time = time.time() - start_time
        log.info(f"Training Complete. Best loss: {self.best_loss:.6f} "
                 f"(iteration {self.best_iteration}). Time: {total_time:.2f}s")
        return OptimizationResult(
            best_loss=self.best_loss,
            best_iteration=self.best_iteration,
            final_loss=loss,
            history=list(self.history),
        )


class GradientDescent(SearchOptimizer):
    """
    Full-batch gradient descent.
    The layers perform the weight updates internally during backward().
    """
    mode_name = "gradient_descent"

    def __init__(self, learning_rate=0.01):
        super().__init__()
        self.learning_rate = _check_positive(learning_rate, "learning_rate")

    def start(self, model, x, y):
        # The fused loss gradient only holds for a softmax output
        if model.output_activation != activations.SOFTMAX:
            raise InvalidParameterError(
                f"gradient descent needs a softmax output activation, got {model.output_activation!r}"
            )

    def update(self, model, x, y):
        # 1. Forward
        probs = model.forward(x)

        # 2. Compute Loss
        loss = model.loss_fn.compute(probs, y)

        # 3. Backward & Update
        grad = model.loss_fn.gradient(probs, y)
        model.backward(grad, self.learning_rate)
        return loss


class HillClimbing(SearchOptimizer):
    """
    Perturb every weight and bias by N(0, scale^2) noise; keep the change
    only when the loss strictly drops, otherwise restore the best snapshot.
    best_loss never increases.
    """
    mode_name = "hill_climbing"

    def __init__(self, scale=0.05, rng=None):
        super().__init__()
        self.scale = _check_positive(scale, "scale")
        self.rng = rng if rng is not None else np.random.default_rng()

    def reset(self):
        super().reset()
        self.best_snapshot = None
        self.accepted = 0
        self.rejected = 0

    def start(self, model, x, y):
        # The starting point is the first candidate
        self.best_loss = model.loss(x, y)
        self.best_snapshot = model.snapshot()
        log.debug(f"Initial loss: {self.best_loss:.6f}")

    def _record(self, loss, iteration):
        # best_loss/best_snapshot are maintained by update()
        self.history.append(self.best_loss)

    def update(self, model, x, y):
        if self.best_snapshot is None:
            self.start(model, x, y)

        for layer in model.layers:
            layer.perturb(self.rng, self.scale)
        loss = model.loss(x, y)

        if loss < self.best_loss:
            self.best_loss = loss
            self.best_snapshot = model.snapshot()
            self.best_iteration = len(self.history)
            self.accepted += 1
            log.debug(f"Accepted perturbation, new best loss {loss:.6f}")
        else:
            model.restore(self.best_snapshot)
            self.rejected += 1
        return loss

    def fit(self, model, x, y, iterations, verbose=True, log_freq=100):
        result = super().fit(model, x, y, iterations, verbose=verbose, log_freq=log_freq)
        log.info(f"Hill climbing accepted {self.accepted} / {self.accepted + self.rejected} perturbations")
        return result


class RandomSearch(SearchOptimizer):
    """
    Every iteration draws a completely new set of parameters.
    The network is NOT restored to the best parameters at the end;
    it keeps whatever the last trial produced.
    """
    mode_name = "random_search"

    def __init__(self, std=0.01, rng=None):
        super().__init__()
        self.std = _check_positive(std, "std")
        self.rng = rng if rng is not None else np.random.default_rng()

    def update(self, model, x, y):
        for layer in model.layers:
            layer.randomize(self.rng, self.std)
        return model.loss(x, y)

# ------------------------------
# Entry points
# ------------------------------

def train_gradient_descent(model, x, y, learning_rate=0.01, epochs=1000, verbose=False, log_freq=100):
    """Runs gradient descent for `epochs` full-batch steps."""
    optimizer = GradientDescent(learning_rate=learning_rate)
    return optimizer.fit(model, x, y, epochs, verbose=verbose, log_freq=log_freq)


def hill_climb(model, x, y, scale=0.05, iterations=1000, rng=None, verbose=False, log_freq=100):
    """
    Runs hill climbing; the network ends at the best parameters found.
    The starting point counts as a candidate, so iterations=0 returns its loss.
    """
    optimizer = HillClimbing(scale=scale, rng=rng)
    return optimizer.fit(model, x, y, iterations, verbose=verbose, log_freq=log_freq)


def random_search(model, x, y, iterations=1000, rng=None, std=0.01, verbose=False, log_freq=100):
    """
    Runs random search. With iterations=0 no trial is run and best_loss
    stays at math.inf.
    """
    optimizer = RandomSearch(std=std, rng=rng)
    return optimizer.fit(model, x, y, iterations, verbose=verbose, log_freq=log_freq)
