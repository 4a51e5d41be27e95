"""
Misstatement classifier trainer/evaluator.

Tunes elastic-net logistic regression, random forest and kNN on a
stratified training split by cross-validated ROC AUC, then scores each
tuned pipeline on the held-out test split.

Usage:
    from src.models import FraudModelTrainer

    trainer = FraudModelTrainer(sample)
    evaluations = trainer.run()
    trainer.save_results()
"""

import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional

import joblib
import numpy as np
import pandas as pd
from imblearn.pipeline import Pipeline
from sklearn.inspection import permutation_importance
from sklearn.metrics import confusion_matrix, roc_auc_score
from sklearn.model_selection import GridSearchCV, StratifiedKFold, train_test_split

from src.config import settings
from src.config.run_context import RunContext
from src.linking.record_linker import LinkedSample
from .classifiers import ALGORITHM_NAMES, make_estimator
from .recipe import CLASSIFIER_STEP, build_recipe, prefixed_grid
from .schemas import ConfusionMatrix, FeatureImportance, ModelEvaluation

logger = logging.getLogger(__name__)

SCORING = "roc_auc"
EVALUATIONS_FILENAME = "evaluations.json"


def _native(value: Any) -> Any:
    return value.item() if isinstance(value, np.generic) else value


def _finite_or_none(value: float) -> Optional[float]:
    value = float(value)
    return value if math.isfinite(value) else None


class FraudModelTrainer:
    """
    Trains and evaluates the misstatement classifiers on a linked sample.

    The split is made once and shared by every algorithm, so test metrics
    are comparable. Grid search parallelism (`n_jobs`) is the only
    concurrency in the pipeline.
    """

    def __init__(
        self,
        sample: LinkedSample,
        algorithms: Optional[List[str]] = None,
        grids: Optional[Dict[str, Dict[str, List[Any]]]] = None,
        test_size: Optional[float] = None,
        cv_folds: Optional[int] = None,
        n_jobs: Optional[int] = None,
        permutation_repeats: Optional[int] = None,
        threshold: Optional[float] = None,
        n_trees: Optional[int] = None,
        random_state: Optional[int] = None,
    ):
        config = settings.modeling
        self.sample = sample
        self.algorithms = list(algorithms or config.algorithms)
        self.grids = {alg: (grids or {}).get(alg) or config.grid_for(alg) for alg in self.algorithms}
        self.test_size = test_size if test_size is not None else config.test_size
        self.cv_folds = cv_folds if cv_folds is not None else config.cv_folds
        self.n_jobs = n_jobs if n_jobs is not None else config.n_jobs
        self.permutation_repeats = (
            permutation_repeats if permutation_repeats is not None else config.permutation_repeats
        )
        self.threshold = threshold if threshold is not None else config.classification_threshold
        self.n_trees = n_trees if n_trees is not None else config.random_forest_trees
        self.random_state = (
            random_state if random_state is not None else settings.reproducibility.random_seed
        )

        self.fitted_models: Dict[str, Pipeline] = {}
        self.evaluations: List[ModelEvaluation] = []
        self._split: Optional[tuple] = None

    def split(self) -> tuple:
        """
        Stratified train/test split of the linked sample (cached).

        Returns:
            Tuple of (X_train, X_test, y_train, y_test)

        Raises:
            ValueError: If the sample is empty or has a single class
        """
        if self._split is not None:
            return self._split

        if len(self.sample) == 0:
            raise ValueError("Linked sample is empty")
        y = self.sample.y.astype(int)
        if y.nunique() < 2:
            raise ValueError("Linked sample needs both misstatement and clean quarters")

        self._split = train_test_split(
            self.sample.X,
            y,
            test_size=self.test_size,
            stratify=y,
            random_state=self.random_state,
        )
        X_train, X_test, y_train, y_test = self._split
        logger.info(
            f"Split: {len(X_train):,} train ({int(y_train.sum()):,} positive), "
            f"{len(X_test):,} test ({int(y_test.sum()):,} positive)"
        )
        return self._split

    def tune(self, algorithm: str, X_train: pd.DataFrame, y_train: pd.Series) -> GridSearchCV:
        """Grid-search one algorithm on stratified folds of the training split."""
        estimator = make_estimator(algorithm, random_state=self.random_state, n_trees=self.n_trees)
        pipeline = build_recipe(
            estimator,
            self.sample.numeric_columns,
            self.sample.categorical_columns,
            random_state=self.random_state,
        )
        search = GridSearchCV(
            pipeline,
            param_grid=prefixed_grid(self.grids[algorithm]),
            scoring=SCORING,
            cv=StratifiedKFold(n_splits=self.cv_folds, shuffle=True, random_state=self.random_state),
            n_jobs=self.n_jobs,
        )
        logger.info(
            f"Tuning {ALGORITHM_NAMES.get(algorithm, algorithm)} over "
            f"{self._grid_size(algorithm)} grid points x {self.cv_folds} folds"
        )
        search.fit(X_train, y_train)
        logger.info(f"{algorithm}: best CV AUC {search.best_score_:.4f} with {search.best_params_}")
        return search

    def evaluate(
        self,
        algorithm: str,
        model: Pipeline,
        X_test: pd.DataFrame,
        y_test: pd.Series,
        best_params: Optional[Dict[str, Any]] = None,
        cv_auc: Optional[float] = None,
        train_samples: int = 0,
    ) -> ModelEvaluation:
        """
        Score a fitted pipeline on the test split.

        Returns:
            ModelEvaluation with AUC, confusion matrix, accuracy,
            sensitivity, specificity and permutation importances
        """
        proba = model.predict_proba(X_test)[:, 1]
        predicted = (proba >= self.threshold).astype(int)
        tn, fp, fn, tp = confusion_matrix(y_test, predicted, labels=[0, 1]).ravel()
        matrix = ConfusionMatrix(tp=int(tp), fp=int(fp), fn=int(fn), tn=int(tn))

        test_auc = None
        if pd.Series(y_test).nunique() == 2:
            test_auc = _finite_or_none(roc_auc_score(y_test, proba))
        else:
            logger.warning(f"{algorithm}: test split has one class, AUC undefined")

        importances = self._permutation_importance(model, X_test, y_test) if test_auc is not None else []

        params = {
            name.removeprefix(f"{CLASSIFIER_STEP}__"): _native(value)
            for name, value in (best_params or {}).items()
        }
        evaluation = ModelEvaluation(
            algorithm=algorithm,
            best_params=params,
            cv_auc=_finite_or_none(cv_auc) if cv_auc is not None else None,
            test_auc=test_auc,
            threshold=self.threshold,
            confusion_matrix=matrix,
            accuracy=matrix.accuracy,
            sensitivity=matrix.sensitivity,
            specificity=matrix.specificity,
            feature_importance=importances,
            train_samples=train_samples,
            test_samples=len(X_test),
            test_positives=int(pd.Series(y_test).sum()),
        )
        logger.info(evaluation.summary())
        return evaluation

    def run(self) -> List[ModelEvaluation]:
        """Tune and evaluate every configured algorithm."""
        X_train, X_test, y_train, y_test = self.split()

        self.evaluations = []
        for algorithm in self.algorithms:
            search = self.tune(algorithm, X_train, y_train)
            model = search.best_estimator_
            self.fitted_models[algorithm] = model
            self.evaluations.append(
                self.evaluate(
                    algorithm,
                    model,
                    X_test,
                    y_test,
                    best_params=search.best_params_,
                    cv_auc=search.best_score_,
                    train_samples=len(X_train),
                )
            )
        return self.evaluations

    def save_results(self, run: Optional[RunContext] = None) -> Path:
        """
        Persist fitted pipelines (joblib), evaluations and config into a run directory.

        Returns:
            Run output directory

        Raises:
            ValueError: If run() has not been called
        """
        if not self.evaluations:
            raise ValueError("No evaluations to save; call run() first")

        run = run or RunContext(name="misstatement_classifiers")
        run.create()

        for algorithm, model in self.fitted_models.items():
            joblib.dump(model, run.output_dir / f"{algorithm}_pipeline.joblib")

        run.save_json(
            EVALUATIONS_FILENAME,
            [evaluation.model_dump(mode="json") for evaluation in self.evaluations],
        )
        run.save_config({
            "modeling": settings.modeling.model_dump(mode="json"),
            "algorithms": self.algorithms,
            "grids": self.grids,
            "random_state": self.random_state,
            "samples": len(self.sample),
            "positive_rate": self.sample.positive_rate,
        })
        logger.info(f"Saved {len(self.fitted_models)} models to {run.output_dir}")
        return run.output_dir

    def _grid_size(self, algorithm: str) -> int:
        return int(np.prod([len(values) for values in self.grids[algorithm].values()]))

    def _permutation_importance(
        self, model: Pipeline, X_test: pd.DataFrame, y_test: pd.Series
    ) -> List[FeatureImportance]:
        result = permutation_importance(
            model,
            X_test,
            y_test,
            scoring=SCORING,
            n_repeats=self.permutation_repeats,
            random_state=self.random_state,
            n_jobs=self.n_jobs,
        )
        importances = [
            FeatureImportance(
                feature=str(feature),
                importance_mean=float(mean),
                importance_std=float(std),
            )
            for feature, mean, std in zip(X_test.columns, result.importances_mean, result.importances_std)
        ]
        return sorted(importances, key=lambda item: item.importance_mean, reverse=True)
