"""
Feature Engineering Module

Feature construction for the misstatement classifiers.

Available features:
- Topic modeling using LDA over earnings-call transcripts
- Lagged, peer-adjusted financial ratios from quarterly fundamentals

Usage:
    from src.features import LDATrainer, FinancialRatioCalculator

    # Topic modeling
    trainer = LDATrainer()
    trainer.train(dtm)
    doc_topics = trainer.document_topic_matrix(dtm)

    # Financial ratios
    ratios = FinancialRatioCalculator().calculate(fundamentals)
"""

# Lazy imports to avoid circular dependency
# Use explicit imports: from src.features.topic_modeling import LDATrainer

__all__ = [
    # Topic Modeling
    "TopicModelingAnalyzer",
    "TopicModelingFeatures",
    "LDATrainer",
    # Financial ratios
    "FinancialRatioCalculator",
    "RATIO_COLUMNS",
]


def __getattr__(name):
    """Lazy import to avoid circular dependencies."""
    # Topic Modeling
    if name == "TopicModelingAnalyzer":
        from .topic_modeling import TopicModelingAnalyzer
        return TopicModelingAnalyzer
    elif name == "TopicModelingFeatures":
        from .topic_modeling import TopicModelingFeatures
        return TopicModelingFeatures
    elif name == "LDATrainer":
        from .topic_modeling import LDATrainer
        return LDATrainer
    # Financial ratios
    elif name == "FinancialRatioCalculator":
        from .financial_ratios import FinancialRatioCalculator
        return FinancialRatioCalculator
    elif name == "RATIO_COLUMNS":
        from .financial_ratios import RATIO_COLUMNS
        return RATIO_COLUMNS
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
