"""Classifier training and evaluation configuration."""

from typing import Any, Dict, List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.config._loader import config_section

Algorithm = Literal["elastic_net", "random_forest", "knn"]


def _get_config() -> dict:
    return config_section("modeling")


class ModelingConfig(BaseSettings):
    """
    Settings for the model trainer/evaluator.

    Grids map estimator parameter names (without the pipeline step prefix)
    to candidate value lists.
    """
    model_config = SettingsConfigDict(
        env_prefix='MODELING_',
        case_sensitive=False
    )

    test_size: float = Field(
        default_factory=lambda: _get_config().get('test_size', 0.25),
        gt=0.0,
        lt=1.0,
    )
    cv_folds: int = Field(
        default_factory=lambda: _get_config().get('cv_folds', 5),
        ge=2,
    )
    n_jobs: int = Field(
        default_factory=lambda: _get_config().get('n_jobs', -1)
    )
    undersampling_ratio: float = Field(
        default_factory=lambda: _get_config().get('undersampling_ratio', 1.0),
        gt=0.0,
        le=1.0,
        description="Minority/majority ratio after downsampling (1.0 = balanced)",
    )
    permutation_repeats: int = Field(
        default_factory=lambda: _get_config().get('permutation_repeats', 10),
        ge=1,
    )
    classification_threshold: float = Field(
        default_factory=lambda: _get_config().get('classification_threshold', 0.5),
        gt=0.0,
        lt=1.0,
    )
    algorithms: List[Algorithm] = Field(
        default_factory=lambda: _get_config().get(
            'algorithms', ["elastic_net", "random_forest", "knn"]
        )
    )
    elastic_net_grid: Dict[str, List[Any]] = Field(
        default_factory=lambda: _get_config().get(
            'elastic_net_grid',
            {"C": [0.001, 0.01, 0.1, 1.0], "l1_ratio": [0.0, 0.25, 0.5, 0.75, 1.0]},
        )
    )
    random_forest_grid: Dict[str, List[Any]] = Field(
        default_factory=lambda: _get_config().get(
            'random_forest_grid',
            {"max_features": [3, 7, 15], "min_samples_leaf": [1, 5, 20]},
        )
    )
    random_forest_trees: int = Field(
        default_factory=lambda: _get_config().get('random_forest_trees', 500),
        ge=1,
    )
    knn_grid: Dict[str, List[Any]] = Field(
        default_factory=lambda: _get_config().get(
            'knn_grid',
            {"n_neighbors": [5, 15, 35, 75], "weights": ["uniform", "distance"]},
        )
    )

    def grid_for(self, algorithm: str) -> Dict[str, List[Any]]:
        """Return the hyperparameter grid configured for an algorithm."""
        grids = {
            "elastic_net": self.elastic_net_grid,
            "random_forest": self.random_forest_grid,
            "knn": self.knn_grid,
        }
        if algorithm not in grids:
            raise ValueError(f"Unknown algorithm: {algorithm}")
        return grids[algorithm]
