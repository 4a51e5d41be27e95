"""
Pydantic schemas for classifier evaluation reports.

One ModelEvaluation per algorithm; serialized to JSON in the run directory.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ConfusionMatrix(BaseModel):
    """
    Test-set confusion matrix at the classification threshold.

    Attributes:
        tp: Misstatements predicted as misstatements
        fp: Clean quarters predicted as misstatements
        fn: Misstatements predicted as clean
        tn: Clean quarters predicted as clean
    """
    tp: int = Field(..., ge=0)
    fp: int = Field(..., ge=0)
    fn: int = Field(..., ge=0)
    tn: int = Field(..., ge=0)

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.fn + self.tn

    @property
    def accuracy(self) -> float:
        return (self.tp + self.tn) / self.total if self.total else 0.0

    @property
    def sensitivity(self) -> float:
        """True positive rate (recall on misstatements)."""
        positives = self.tp + self.fn
        return self.tp / positives if positives else 0.0

    @property
    def specificity(self) -> float:
        """True negative rate."""
        negatives = self.tn + self.fp
        return self.tn / negatives if negatives else 0.0


class FeatureImportance(BaseModel):
    """Permutation importance of one input column (drop in test ROC AUC)."""
    feature: str
    importance_mean: float
    importance_std: float = Field(..., ge=0.0)


class ModelEvaluation(BaseModel):
    """
    Tuning and test results of one classifier.

    Attributes:
        algorithm: elastic_net, random_forest or knn
        best_params: Grid point selected by cross-validated ROC AUC
        cv_auc: Mean cross-validated ROC AUC of the best grid point
        test_auc: ROC AUC on the held-out test split
        threshold: Probability cut-off for the confusion matrix
        confusion_matrix: Test-set confusion matrix
        accuracy: (tp + tn) / n
        sensitivity: tp / (tp + fn)
        specificity: tn / (tn + fp)
        feature_importance: Permutation importances, most important first
        train_samples: Training rows before downsampling
        test_samples: Test rows
        test_positives: Misstatements in the test split
    """
    algorithm: str
    best_params: Dict[str, Any] = Field(default_factory=dict)
    cv_auc: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    test_auc: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    threshold: float = Field(default=0.5, gt=0.0, lt=1.0)
    confusion_matrix: ConfusionMatrix
    accuracy: float = Field(..., ge=0.0, le=1.0)
    sensitivity: float = Field(..., ge=0.0, le=1.0)
    specificity: float = Field(..., ge=0.0, le=1.0)
    feature_importance: List[FeatureImportance] = Field(default_factory=list)
    train_samples: int = Field(..., ge=0)
    test_samples: int = Field(..., ge=0)
    test_positives: int = Field(..., ge=0)

    def top_features(self, k: int = 10) -> List[FeatureImportance]:
        """The k features whose permutation hurts test AUC most."""
        return self.feature_importance[:k]

    def summary(self) -> str:
        """One-line summary for logs."""
        auc = f"{self.test_auc:.4f}" if self.test_auc is not None else "n/a"
        return (
            f"{self.algorithm}: test AUC {auc}, accuracy {self.accuracy:.4f}, "
            f"sensitivity {self.sensitivity:.4f}, specificity {self.specificity:.4f}"
        )
