# tests/test_optimizers.py
import math

import numpy as np
import pytest

from Core.exceptions import DimensionMismatchError, InvalidParameterError
from Core.layers import DenseLayer
from Core.models import Network
from Core.optimizers import (GradientDescent, HillClimbing, RandomSearch, hill_climb,
                             random_search, train_gradient_descent)

def test_gradient_descent_reduces_loss(network_factory, spiral):
    X, y = spiral
    model = network_factory((2, 16, 3), weight_std=0.5)
    start = model.loss(X, y)
    result = train_gradient_descent(model, X, y, learning_rate=0.5, epochs=200)
    assert len(result.history) == 200
    assert result.history[0] == pytest.approx(start)
    assert result.best_loss < start
    assert model.loss(X, y) < start

def test_gradient_descent_is_deterministic(spiral):
    X, y = spiral
    losses = []
    for _ in range(2):
        model = Network(layer_sizes=[2, 8, 3], rng=np.random.default_rng(7))
        losses.append(train_gradient_descent(model, X, y, learning_rate=0.1, epochs=20).history)
    assert losses[0] == losses[1]

def test_gradient_descent_zero_epochs(network_factory, spiral):
    X, y = spiral
    result = train_gradient_descent(network_factory(), X, y, epochs=0)
    assert result.best_loss == math.inf
    assert result.history == []

def test_hill_climbing_best_loss_never_increases(network_factory, spiral, rng):
    X, y = spiral
    model = network_factory((2, 8, 3))
    result = hill_climb(model, X, y, scale=0.05, iterations=60, rng=rng)
    assert all(b <= a for a, b in zip(result.history, result.history[1:]))
    # the network is left at the best parameters found
    assert model.loss(X, y) == pytest.approx(result.best_loss)

def test_hill_climbing_reverts_rejected_perturbation(network_factory, spiral, rng):
    X, y = spiral
    model = network_factory((2, 8, 3))
    opt = HillClimbing(scale=0.05, rng=rng)
    opt.start(model, X, y)
    for _ in range(30):
        before = [p for pair in model.snapshot() for p in pair]
        best_before = opt.best_loss
        loss = opt.update(model, X, y)
        after = [p for pair in model.snapshot() for p in pair]
        if loss >= best_before:
            assert opt.best_loss == best_before
            for a, b in zip(before, after):
                np.testing.assert_array_equal(a, b)
        else:
            assert opt.best_loss == loss

def test_hill_climbing_zero_iterations_reports_initial_loss(network_factory, spiral, rng):
    X, y = spiral
    model = network_factory()
    initial = model.loss(X, y)
    result = hill_climb(model, X, y, iterations=0, rng=rng)
    assert result.best_loss == pytest.approx(initial)
    assert result.best_iteration is None

def test_random_search_records_best_but_does_not_restore(spiral):
    X, y = spiral
    model = Network(layer_sizes=[2, 4, 3], rng=np.random.default_rng(3))
    result = random_search(model, X, y, iterations=25, rng=np.random.default_rng(5))
    assert len(result.history) == 25
    assert result.best_loss == min(result.history)
    assert result.history[result.best_iteration] == result.best_loss
    # network holds the last trial, not the best one
    assert model.loss(X, y) == pytest.approx(result.history[-1])
    assert result.final_loss == result.history[-1]

def test_random_search_zero_iterations(network_factory, spiral, rng):
    X, y = spiral
    model = network_factory()
    snap = model.snapshot()
    result = random_search(model, X, y, iterations=0, rng=rng)
    assert result.best_loss == math.inf
    assert result.best_iteration is None
    for (w0, b0), (w1, b1) in zip(snap, model.snapshot()):
        np.testing.assert_array_equal(w0, w1)
        np.testing.assert_array_equal(b0, b1)

def test_random_search_is_reproducible(spiral):
    X, y = spiral
    results = []
    for _ in range(2):
        model = Network(layer_sizes=[2, 4, 3], rng=np.random.default_rng(0))
        results.append(random_search(model, X, y, iterations=5, rng=np.random.default_rng(11)).history)
    assert results[0] == results[1]

@pytest.mark.parametrize("make", [
    lambda: GradientDescent(learning_rate=0),
    lambda: GradientDescent(learning_rate=-1),
    lambda: HillClimbing(scale=0),
    lambda: RandomSearch(std=-0.1),
])
def test_invalid_hyperparameters(make):
    with pytest.raises(InvalidParameterError):
        make()

def test_negative_iterations(network_factory, spiral, rng):
    X, y = spiral
    with pytest.raises(InvalidParameterError):
        random_search(network_factory(), X, y, iterations=-1, rng=rng)

def test_layer_list_accepted(spiral, rng):
    X, y = spiral
    layers = [DenseLayer(2, 6, rng=rng), DenseLayer(6, 3, rng=rng)]
    result = hill_climb(layers, X, y, iterations=5, rng=rng)
    assert math.isfinite(result.best_loss)

def test_dimension_errors_propagate(network_factory, rng):
    model = network_factory((3, 4, 2))
    X = rng.normal(size=(5, 2))
    y = np.zeros(5, dtype=int)
    with pytest.raises(DimensionMismatchError):
        train_gradient_descent(model, X, y, epochs=3)

def test_refit_starts_from_clean_state(network_factory, spiral, rng):
    X, y = spiral
    opt = RandomSearch(std=0.01, rng=rng)
    opt.fit(network_factory(), X, y, 10, verbose=False)
    # best_loss from the first run must not leak into the second one
    opt.best_loss = -1.0
    result = opt.fit(network_factory(), X, y, 4, verbose=False)
    assert len(result.history) == 4
    assert result.best_loss == min(result.history)
    assert result.history[result.best_iteration] == result.best_loss

def test_refit_zero_iterations_forgets_previous_run(network_factory, spiral, rng):
    X, y = spiral
    opt = GradientDescent(learning_rate=0.1)
    opt.fit(network_factory(), X, y, 5, verbose=False)
    result = opt.fit(network_factory(), X, y, 0, verbose=False)
    assert result.best_loss == math.inf
    assert result.best_iteration is None
    assert result.history == []

def test_hill_climbing_refit_resets_counters(network_factory, spiral, rng):
    X, y = spiral
    opt = HillClimbing(scale=0.05, rng=rng)
    opt.fit(network_factory(), X, y, 20, verbose=False)
    assert opt.accepted + opt.rejected == 20

    model = network_factory((2, 4, 3))
    initial = model.loss(X, y)
    result = opt.fit(model, X, y, 6, verbose=False)
    assert opt.accepted + opt.rejected == 6
    assert len(result.history) == 6
    assert result.best_loss <= initial
    if opt.accepted == 0:
        assert result.best_iteration is None
        assert result.best_loss == pytest.approx(initial)
    # the snapshot belongs to the second network
    assert len(opt.best_snapshot[0][0]) == 4

def test_gradient_descent_refuses_non_softmax_output(network_factory, spiral):
    X, y = spiral
    model = network_factory(output_activation="sigmoid")
    before = model.snapshot()
    with pytest.raises(InvalidParameterError):
        train_gradient_descent(model, X, y, epochs=3)
    for (w0, _), (w1, _) in zip(before, model.snapshot()):
        np.testing.assert_array_equal(w0, w1)
