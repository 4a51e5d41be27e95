"""
Topic Modeling Feature Analyzer

Inference-side interface: topic features for transcripts scored with an
already trained LDA model.

Usage:
    from src.features.topic_modeling import TopicModelingAnalyzer

    analyzer = TopicModelingAnalyzer(model_path="models/lda_transcripts")

    # One transcript, from its aggregated term counts
    features = analyzer.extract_features(term_counts)
    print(f"Dominant topic: {features.dominant_topic_id}")

    # Whole corpus, with dominant topic and entropy columns
    frame = analyzer.feature_frame(dtm)
"""

import logging
from collections import Counter
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from src.config import settings
from src.preprocessing.transcript_text import DocumentTermMatrix
from .lda_trainer import LDATrainer
from .schemas import TopicModelingFeatures, TopicDistribution

logger = logging.getLogger(__name__)


class TopicModelingAnalyzer:
    """
    Topic Modeling Feature Extractor for earnings-call transcripts.

    Wraps a trained LDATrainer and turns bag-of-words documents into
    dense probability vectors plus summary features.
    """

    def __init__(
        self,
        model_path: Optional[Path | str] = None,
        trainer: Optional[LDATrainer] = None,
    ):
        """
        Initialize topic modeling analyzer.

        Args:
            model_path: Path to pre-trained LDA model directory
            trainer: Optional pre-loaded LDATrainer instance

        Raises:
            FileNotFoundError: If neither source is given and no model exists
                at settings.paths.lda_model_dir
            ValueError: If the trainer holds no trained model
        """
        if trainer is not None:
            self.trainer = trainer
        else:
            model_path = Path(model_path) if model_path else settings.paths.lda_model_dir
            if not model_path.exists():
                raise FileNotFoundError(f"Model path not found: {model_path}")
            self.trainer = LDATrainer.load(model_path)

        if self.trainer.lda_model is None or self.trainer.dictionary is None:
            raise ValueError("Loaded trainer has no trained model")

        self.num_topics = self.trainer.num_topics
        logger.info(f"Initialized TopicModelingAnalyzer with {self.num_topics} topics")

    def extract_features(self, term_counts: Counter) -> TopicModelingFeatures:
        """
        Topic features of one transcript.

        Args:
            term_counts: Stemmed term counts of the transcript

        Returns:
            TopicModelingFeatures; empty when no term is in the model vocabulary
        """
        token2id = self.trainer.dictionary.token2id
        bow = sorted(
            (token2id[term], count) for term, count in term_counts.items() if term in token2id
        )
        if not bow:
            logger.warning("Document has no terms in the model vocabulary")
            return TopicModelingFeatures()

        probabilities = np.zeros(self.num_topics)
        for topic_id, prob in self.trainer.lda_model.get_document_topics(bow, minimum_probability=0.0):
            probabilities[topic_id] = prob
        probabilities = probabilities / probabilities.sum()

        return TopicModelingFeatures.from_probabilities(probabilities.tolist())

    def feature_frame(self, dtm: DocumentTermMatrix) -> pd.DataFrame:
        """
        Topic probabilities for every document, plus dominant topic and entropy.

        Returns:
            DataFrame indexed by transcript_id
        """
        frame = self.trainer.document_topic_matrix(dtm)
        values = frame.to_numpy()
        with np.errstate(divide='ignore', invalid='ignore'):
            logs = np.where(values > 0, np.log(values), 0.0)
        frame = frame.copy()
        frame["dominant_topic"] = values.argmax(axis=1)
        frame["topic_entropy"] = -(values * logs).sum(axis=1)
        return frame

    def top_topics(self, term_counts: Counter, k: int = 5, num_words: int = 10) -> list[TopicDistribution]:
        """The k most probable topics of a transcript, each with its top terms."""
        features = self.extract_features(term_counts)
        terms = self.trainer.top_terms(topn=num_words)
        return [
            dist.model_copy(update={"top_words": terms[dist.topic_id]})
            for dist in features.get_top_k_topics(k)
        ]
