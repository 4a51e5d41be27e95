"""Estimator factory for the three misstatement classifiers."""

import inspect
from typing import Optional

from sklearn.base import BaseEstimator
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.neighbors import KNeighborsClassifier

from src.config import settings

ALGORITHM_NAMES = {
    "elastic_net": "Elastic-net logistic regression",
    "random_forest": "Random forest",
    "knn": "k-nearest neighbours",
}

ELASTIC_NET_MAX_ITER = 5000

# scikit-learn >= 1.8 infers the penalty from l1_ratio and warns when it is passed
PENALTY_FROM_L1_RATIO = (
    inspect.signature(LogisticRegression).parameters["penalty"].default == "deprecated"
)


def _elastic_net(random_state: Optional[int]) -> LogisticRegression:
    params = {
        "solver": "saga",
        "l1_ratio": 0.5,
        "max_iter": ELASTIC_NET_MAX_ITER,
        "random_state": random_state,
    }
    if not PENALTY_FROM_L1_RATIO:
        params["penalty"] = "elasticnet"
    return LogisticRegression(**params)


def make_estimator(
    algorithm: str,
    random_state: Optional[int] = None,
    n_trees: Optional[int] = None,
) -> BaseEstimator:
    """
    Unfitted estimator for an algorithm name.

    Args:
        algorithm: elastic_net, random_forest or knn
        random_state: Seed for stochastic estimators
        n_trees: Forest size (defaults to settings.modeling.random_forest_trees)

    Raises:
        ValueError: For an unknown algorithm
    """
    if random_state is None:
        random_state = settings.reproducibility.random_seed

    if algorithm == "elastic_net":
        # saga is the only solver supporting the elastic-net penalty
        return _elastic_net(random_state)
    if algorithm == "random_forest":
        return RandomForestClassifier(
            n_estimators=n_trees or settings.modeling.random_forest_trees,
            random_state=random_state,
        )
    if algorithm == "knn":
        return KNeighborsClassifier()

    raise ValueError(f"Unknown algorithm: {algorithm}")
