"""
Preprocessing recipe shared by all classifiers.

One-hot dummies for categoricals, z-scores for numerics, then random
downsampling of the majority class. Everything sits in one imbalanced-learn
Pipeline, so during grid search the sampler only ever sees training folds
and validation folds keep their natural class balance.
"""

from typing import List, Optional

from imblearn.pipeline import Pipeline
from imblearn.under_sampling import RandomUnderSampler
from sklearn.base import BaseEstimator
from sklearn.compose import ColumnTransformer
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from src.config import settings

PREPROCESSOR_STEP = "preprocessor"
SAMPLER_STEP = "sampler"
CLASSIFIER_STEP = "classifier"


def build_preprocessor(numeric_columns: List[str], categorical_columns: List[str]) -> ColumnTransformer:
    return ColumnTransformer(
        transformers=[
            ("num", StandardScaler(), numeric_columns),
            ("cat", OneHotEncoder(handle_unknown="ignore", sparse_output=False), categorical_columns),
        ]
    )


def build_recipe(
    estimator: BaseEstimator,
    numeric_columns: List[str],
    categorical_columns: List[str],
    sampling_strategy: Optional[float] = None,
    random_state: Optional[int] = None,
) -> Pipeline:
    """
    Wrap an estimator in the preprocessing + downsampling pipeline.

    Args:
        estimator: Unfitted scikit-learn classifier
        numeric_columns: Columns to standardize
        categorical_columns: Columns to one-hot encode
        sampling_strategy: Minority/majority ratio after downsampling
            (defaults to settings.modeling.undersampling_ratio)
        random_state: Sampler seed (defaults to the global random seed)

    Returns:
        Unfitted imblearn Pipeline with steps preprocessor, sampler, classifier
    """
    if sampling_strategy is None:
        sampling_strategy = settings.modeling.undersampling_ratio
    if random_state is None:
        random_state = settings.reproducibility.random_seed

    return Pipeline(
        steps=[
            (PREPROCESSOR_STEP, build_preprocessor(numeric_columns, categorical_columns)),
            (SAMPLER_STEP, RandomUnderSampler(sampling_strategy=sampling_strategy, random_state=random_state)),
            (CLASSIFIER_STEP, estimator),
        ]
    )


def prefixed_grid(grid: dict) -> dict:
    """Prefix estimator parameter names with the classifier step name."""
    return {f"{CLASSIFIER_STEP}__{name}": list(values) for name, values in grid.items()}
