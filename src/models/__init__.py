"""
Models package for the misstatement classifiers.

Contains the preprocessing recipe, estimator factory, training and evaluation.
"""

from src.models.classifiers import make_estimator
from src.models.recipe import build_recipe
from src.models.schemas import ConfusionMatrix, FeatureImportance, ModelEvaluation
from src.models.trainer import FraudModelTrainer

__all__ = [
    "FraudModelTrainer",
    "build_recipe",
    "make_estimator",
    "ModelEvaluation",
    "ConfusionMatrix",
    "FeatureImportance",
]
