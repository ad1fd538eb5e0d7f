from dataclasses import dataclass, replace
from typing import Literal, Optional

Strategy = Literal["gradient_descent", "hill_climbing", "random_search"]
STRATEGIES = ("gradient_descent", "hill_climbing", "random_search")


@dataclass(frozen=True, slots=True)
class TrainingConfig:
    # shared / global
    seed: Optional[int] = None
    strategy: Strategy = "gradient_descent"

    # dataset
    samples: int = 100          # points per class
    classes: int = 3
    noise: float = 0.2

    # network
    layer_sizes: tuple[int, ...] = (2, 8, 8, 6, 6, 4, 3)
    hidden_activation: str = "relu"
    weight_std: float = 0.01

    # gradient descent
    learning_rate: float = 0.01
    epochs: int = 10_000

    # hill climbing / random search
    perturbation_scale: float = 0.05
    iterations: int = 1000

    # output
    log_level: str = "INFO"
    log_freq: int = 100
    verbose: bool = True
    plot_path: Optional[str] = None

    def with_(self, **kwargs) -> "TrainingConfig":
        """Convenience: clone with updated values"""
        return replace(self, **kwargs)

    @property
    def n_iterations(self) -> int:
        """Loop length for the selected strategy."""
        return self.epochs if self.strategy == "gradient_descent" else self.iterations
