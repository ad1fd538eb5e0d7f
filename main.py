# main.py
import argparse
import sys

import numpy as np

from Core import activations
from Core.exceptions import NetworkError
from Core.models import Network
from Core.optimizers import hill_climb, random_search, train_gradient_descent
from Utils import netlog
from Utils.config import STRATEGIES, TrainingConfig
from Utils.data_utils import DataHandler

log = netlog.setup_logging("nnets_main", level="INFO")


def parse_args(argv=None):
    defaults = TrainingConfig()
    p = argparse.ArgumentParser(description="Train a dense network on the spiral dataset.")
    p.add_argument("strategy", choices=STRATEGIES)
    p.add_argument("--seed", type=int, default=defaults.seed)
    p.add_argument("--samples", type=int, default=defaults.samples, help="points per class")
    p.add_argument("--classes", type=int, default=defaults.classes)
    p.add_argument("--hidden", type=int, nargs="*", default=list(defaults.layer_sizes[1:-1]),
                   help="hidden layer widths")
    p.add_argument("--activation", choices=activations.ACTIVATIONS, default=defaults.hidden_activation)
    p.add_argument("--lr", type=float, default=defaults.learning_rate)
    p.add_argument("--epochs", type=int, default=defaults.epochs)
    p.add_argument("--scale", type=float, default=defaults.perturbation_scale)
    p.add_argument("--iterations", type=int, default=defaults.iterations)
    p.add_argument("--log-level", default=defaults.log_level)
    p.add_argument("--log-freq", type=int, default=defaults.log_freq)
    p.add_argument("--plot", default=None, help="save a scatter plot of the dataset here")
    p.add_argument("--quiet", action="store_true", help="no progress bar")
    return p.parse_args(argv)


def config_from_args(args):
    return TrainingConfig().with_(
        seed=args.seed,
        strategy=args.strategy,
        samples=args.samples,
        classes=args.classes,
        layer_sizes=(2, *args.hidden, args.classes),
        hidden_activation=args.activation,
        learning_rate=args.lr,
        epochs=args.epochs,
        perturbation_scale=args.scale,
        iterations=args.iterations,
        log_level=args.log_level.upper(),
        log_freq=args.log_freq,
        verbose=not args.quiet,
        plot_path=args.plot,
    )


def run(cfg):
    """Builds data and network from cfg, runs the selected strategy, returns the result."""
    rng = np.random.default_rng(cfg.seed)

    X, y = DataHandler.create_spiral_data(cfg.samples, cfg.classes, rng=rng)
    log.info(f"Generated {len(X)} points")
    if cfg.plot_path:
        DataHandler.plot_data(X, y, cfg.classes, cfg.plot_path)

    model = Network(layer_sizes=list(cfg.layer_sizes), hidden_activation=cfg.hidden_activation,
                    rng=rng, weight_std=cfg.weight_std)
    log.info("\n" + model.summary())

    if cfg.strategy == "gradient_descent":
        result = train_gradient_descent(model, X, y, learning_rate=cfg.learning_rate, epochs=cfg.epochs,
                                        verbose=cfg.verbose, log_freq=cfg.log_freq)
    elif cfg.strategy == "hill_climbing":
        result = hill_climb(model, X, y, scale=cfg.perturbation_scale, iterations=cfg.iterations,
                            rng=rng, verbose=cfg.verbose, log_freq=cfg.log_freq)
    else:
        result = random_search(model, X, y, iterations=cfg.iterations, rng=rng, std=cfg.weight_std,
                               verbose=cfg.verbose, log_freq=cfg.log_freq)

    loss, acc = model.evaluate(X, y)
    log.info(f"Best loss: {result.best_loss:.6f} (iteration {result.best_iteration})")
    log.info(f"Final network | loss: {loss:.6f} | accuracy: {acc:.2%}")
    return result


def main(argv=None):
    args = parse_args(argv)
    cfg = config_from_args(args)
    netlog.set_screen_level(cfg.log_level)
    try:
        run(cfg)
    except NetworkError as e:
        log.error(f"Run aborted: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
