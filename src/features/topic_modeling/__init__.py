"""
Topic Modeling Feature Extraction Module

LDA topic modeling over earnings-call transcripts. Each transcript's topic
probability vector becomes 40 classifier features (topic_0 .. topic_39).

Key Components:
- LDATrainer: topic-count selection, training, top terms, document-topic matrix
- TopicModelingAnalyzer: features for individual transcripts (inference)
- LDAModelInfo / TopicSelectionResult / TopicModelingFeatures: pydantic schemas

Workflow:
    ```python
    from src.features.topic_modeling import LDATrainer

    trainer = LDATrainer()
    selection = trainer.select_num_topics(dtm)   # optional
    trainer.num_topics = selection.best_num_topics
    trainer.train(dtm, save_path="models/lda_transcripts")

    top_terms = trainer.top_terms(topn=20)
    doc_topics = trainer.document_topic_matrix(dtm)  # rows sum to 1
    ```
"""

from .analyzer import TopicModelingAnalyzer
from .lda_trainer import LDATrainer, corpus_perplexity
from .schemas import (
    TopicModelingFeatures,
    TopicDistribution,
    TopicSelectionResult,
    LDAModelInfo,
)
from .constants import (
    TOPIC_MODELING_MODULE_VERSION,
    TOPIC_FEATURE_PREFIX,
    topic_column,
    topic_columns,
)

__all__ = [
    # Main classes
    "TopicModelingAnalyzer",
    "LDATrainer",
    "corpus_perplexity",
    # Schemas
    "TopicModelingFeatures",
    "TopicDistribution",
    "TopicSelectionResult",
    "LDAModelInfo",
    # Constants
    "TOPIC_MODELING_MODULE_VERSION",
    "TOPIC_FEATURE_PREFIX",
    "topic_column",
    "topic_columns",
]

__version__ = TOPIC_MODELING_MODULE_VERSION
