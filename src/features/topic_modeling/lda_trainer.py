"""
LDA Model Training Utilities

This module provides utilities for training and managing LDA topic models
on earnings-call transcripts.

Usage:
    from src.features.topic_modeling.lda_trainer import LDATrainer

    # Pick the topic count by held-out perplexity, then train
    trainer = LDATrainer()
    selection = trainer.select_num_topics(dtm, candidates=[20, 40, 60])
    trainer.num_topics = selection.best_num_topics
    model_info = trainer.train(dtm, save_path="models/lda_transcripts")

    # Per-document topic probabilities (one row per transcript)
    doc_topics = trainer.document_topic_matrix(dtm)

    # Load existing model
    trainer = LDATrainer.load("models/lda_transcripts")
"""

import json
import logging
import pickle
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from gensim.models import CoherenceModel, LdaModel

from src.config import settings
from src.preprocessing.transcript_text import DocumentTermMatrix
from .constants import (
    DICTIONARY_FILENAME,
    LDA_MODEL_FILENAME,
    MIN_HOLDOUT_DOCUMENTS,
    MODEL_INFO_FILENAME,
    RECOMMENDED_MIN_CORPUS_SIZE,
    TOPIC_TERMS_FILENAME,
    topic_columns,
)
from .schemas import LDAModelInfo, TopicSelectionResult

logger = logging.getLogger(__name__)


def corpus_perplexity(model: LdaModel, corpus: Sequence[list]) -> float:
    """
    Perplexity of a fitted model on a corpus (held-out or training).

    gensim's ``log_perplexity`` returns the per-word likelihood bound in
    base 2; perplexity is ``2 ** -bound``.
    """
    bound = model.log_perplexity(list(corpus))
    return float(np.power(2.0, -bound))


class LDATrainer:
    """
    LDA Topic Model Trainer for earnings-call transcripts.

    This class handles:
    1. Selecting the topic count by held-out perplexity
    2. Training LDA on a pruned document-term matrix
    3. Extracting ordered top terms per topic
    4. Producing per-document topic probability vectors
    5. Saving/loading trained models
    """

    def __init__(
        self,
        num_topics: Optional[int] = None,
        passes: Optional[int] = None,
        iterations: Optional[int] = None,
        random_state: Optional[int] = None,
        alpha: Optional[str | float] = None,
        eta: Optional[str | float] = None,
    ):
        """
        Initialize LDA trainer. Unset arguments fall back to settings.topic_modeling.

        Args:
            num_topics: Number of topics to discover
            passes: Number of training passes through corpus
            iterations: Number of iterations during training
            random_state: Random seed for reproducibility
            alpha: Document-topic prior ('symmetric', 'auto' or float)
            eta: Topic-word prior ('auto' or float)
        """
        model_config = settings.topic_modeling.model
        self.num_topics = num_topics or model_config.num_topics
        self.passes = passes or model_config.passes
        self.iterations = iterations or model_config.iterations
        self.random_state = model_config.random_state if random_state is None else random_state
        self.alpha = alpha if alpha is not None else model_config.alpha
        self.eta = eta if eta is not None else model_config.eta

        # Model components (initialized during training or loading)
        self.dictionary = None
        self.lda_model: Optional[LdaModel] = None
        self.model_info: Optional[LDAModelInfo] = None

        logger.info(
            f"Initialized LDATrainer with {self.num_topics} topics, "
            f"{self.passes} passes, {self.iterations} iterations"
        )

    def _fit(self, dtm: DocumentTermMatrix, num_topics: int) -> LdaModel:
        return LdaModel(
            corpus=dtm.corpus,
            id2word=dtm.dictionary,
            num_topics=num_topics,
            random_state=self.random_state,
            passes=self.passes,
            iterations=self.iterations,
            alpha=self.alpha,
            eta=self.eta,
        )

    def select_num_topics(
        self,
        dtm: DocumentTermMatrix,
        candidates: Optional[List[int]] = None,
        holdout_fraction: Optional[float] = None,
    ) -> TopicSelectionResult:
        """
        Choose the topic count with the lowest held-out perplexity.

        Documents are split once (seeded) into a fitting set and a held-out
        set; every candidate is fitted on the same split.

        Args:
            dtm: Pruned document-term matrix
            candidates: Topic counts to compare
            holdout_fraction: Share of documents held out

        Returns:
            TopicSelectionResult with every candidate's perplexity

        Raises:
            ValueError: If there are too few documents to hold any out
        """
        selection = settings.topic_modeling.selection
        candidates = sorted(set(candidates or selection.candidate_topics))
        holdout_fraction = holdout_fraction or selection.holdout_fraction

        if not candidates:
            raise ValueError("No candidate topic counts given")

        n_docs = len(dtm)
        n_holdout = max(MIN_HOLDOUT_DOCUMENTS, int(round(n_docs * holdout_fraction)))
        if n_docs - n_holdout < 1:
            raise ValueError(
                f"Need at least 2 documents for held-out perplexity, got {n_docs}"
            )

        rng = np.random.default_rng(self.random_state)
        order = rng.permutation(n_docs)
        holdout = dtm.subset(sorted(order[:n_holdout]))
        train = dtm.subset(sorted(order[n_holdout:]))

        logger.info(
            f"Selecting topic count from {candidates} "
            f"({len(train)} fit / {len(holdout)} held-out documents)"
        )

        perplexities: Dict[int, float] = {}
        for k in candidates:
            model = self._fit(train, k)
            perplexities[k] = corpus_perplexity(model, holdout.corpus)
            logger.info(f"  k={k}: held-out perplexity {perplexities[k]:.2f}")

        best = min(perplexities, key=perplexities.get)
        logger.info(f"Selected {best} topics")

        return TopicSelectionResult(
            perplexities=perplexities,
            best_num_topics=best,
            train_documents=len(train),
            holdout_documents=len(holdout),
        )

    def train(
        self,
        dtm: DocumentTermMatrix,
        save_path: Optional[Path | str] = None,
        compute_coherence: Optional[bool] = None,
        texts: Optional[List[List[str]]] = None,
    ) -> LDAModelInfo:
        """
        Train LDA model on the document-term matrix.

        Args:
            dtm: Pruned document-term matrix
            save_path: Optional path to save trained model
            compute_coherence: Whether to compute coherence score (slower).
                Sliding-window metrics such as c_v need ``texts``.
            texts: Tokenized documents for coherence metrics that need them

        Returns:
            LDAModelInfo with training metadata

        Raises:
            ValueError: If the matrix is empty
        """
        if len(dtm) == 0:
            raise ValueError("No valid documents in document-term matrix")

        if len(dtm) < RECOMMENDED_MIN_CORPUS_SIZE:
            logger.warning(
                f"Corpus size ({len(dtm)}) is below recommended minimum "
                f"({RECOMMENDED_MIN_CORPUS_SIZE}). Results may be unreliable."
            )

        evaluation = settings.topic_modeling.evaluation
        if compute_coherence is None:
            compute_coherence = evaluation.compute_coherence

        logger.info(
            f"Training LDA with {self.num_topics} topics on {len(dtm)} documents, "
            f"{dtm.num_terms} terms"
        )
        self.dictionary = dtm.dictionary
        self.lda_model = self._fit(dtm, self.num_topics)
        logger.info("LDA training complete!")

        perplexity = corpus_perplexity(self.lda_model, dtm.corpus)
        logger.info(f"Training-corpus perplexity: {perplexity:.2f}")

        coherence_score = None
        if compute_coherence:
            metric = evaluation.coherence_metric
            if texts is None and metric != 'u_mass':
                logger.warning(f"Coherence '{metric}' needs tokenized texts; using u_mass")
                metric = 'u_mass'
            coherence_model = CoherenceModel(
                model=self.lda_model,
                texts=texts,
                corpus=dtm.corpus,
                dictionary=self.dictionary,
                coherence=metric,
            )
            coherence_score = coherence_model.get_coherence()
            logger.info(f"Coherence score ({metric}): {coherence_score:.4f}")

        self.model_info = LDAModelInfo(
            num_topics=self.num_topics,
            num_documents=len(dtm),
            vocabulary_size=dtm.num_terms,
            passes=self.passes,
            iterations=self.iterations,
            alpha=self.alpha,
            eta=self.eta,
            perplexity=perplexity,
            coherence_score=coherence_score,
            topic_top_words=self._top_words_with_weights(),
        )

        if save_path:
            self.save(save_path)

        return self.model_info

    def _require_model(self) -> LdaModel:
        if self.lda_model is None or self.dictionary is None:
            raise ValueError("Model not trained or loaded")
        return self.lda_model

    def _top_words_with_weights(self, topn: Optional[int] = None) -> Dict[int, List[Tuple[str, float]]]:
        model = self._require_model()
        topn = topn or settings.topic_modeling.output.num_topic_words
        return {
            topic_id: [(word, float(weight)) for word, weight in model.show_topic(topic_id, topn=topn)]
            for topic_id in range(self.num_topics)
        }

    def top_terms(self, topn: Optional[int] = None) -> Dict[int, List[str]]:
        """
        Ordered top terms of every topic.

        Args:
            topn: Terms per topic (default: settings.topic_modeling.output.num_topic_words)

        Returns:
            Mapping topic_id -> terms, most probable first
        """
        return {
            topic_id: [word for word, _ in words]
            for topic_id, words in self._top_words_with_weights(topn).items()
        }

    def document_topic_matrix(self, dtm: DocumentTermMatrix) -> pd.DataFrame:
        """
        Dense per-document topic probabilities.

        Every topic is reported (minimum_probability=0) and each row is
        renormalised so it sums to exactly 1.

        Returns:
            DataFrame indexed by transcript_id with columns topic_0..topic_{k-1}
        """
        model = self._require_model()
        matrix = np.zeros((len(dtm), self.num_topics), dtype=float)
        for row, bow in enumerate(dtm.corpus):
            for topic_id, prob in model.get_document_topics(bow, minimum_probability=0.0):
                matrix[row, topic_id] = prob

        totals = matrix.sum(axis=1, keepdims=True)
        empty = totals[:, 0] == 0
        matrix[empty] = 1.0 / self.num_topics
        totals[empty] = 1.0
        matrix = matrix / totals

        return pd.DataFrame(
            matrix,
            index=pd.Index(dtm.document_ids, name="transcript_id"),
            columns=topic_columns(self.num_topics),
        )

    def save(self, save_path: Path | str) -> None:
        """
        Save trained model to disk.

        Args:
            save_path: Directory to save model files
        """
        if self.lda_model is None or self.dictionary is None:
            raise ValueError("No trained model to save. Train a model first.")

        save_path = Path(save_path)
        save_path.mkdir(parents=True, exist_ok=True)

        model_path = save_path / LDA_MODEL_FILENAME
        with open(model_path, 'wb') as f:
            pickle.dump(self.lda_model, f)
        logger.info(f"Saved LDA model to {model_path}")

        dict_path = save_path / DICTIONARY_FILENAME
        with open(dict_path, 'wb') as f:
            pickle.dump(self.dictionary, f)
        logger.info(f"Saved dictionary to {dict_path}")

        terms_path = save_path / TOPIC_TERMS_FILENAME
        with open(terms_path, 'w', encoding='utf-8') as f:
            json.dump(self.top_terms(), f, indent=2)

        if self.model_info:
            info_path = save_path / MODEL_INFO_FILENAME
            with open(info_path, 'w', encoding='utf-8') as f:
                json.dump(self.model_info.model_dump(), f, indent=2, default=str)
            logger.info(f"Saved model info to {info_path}")

    @classmethod
    def load(cls, load_path: Path | str) -> "LDATrainer":
        """
        Load trained model from disk.

        Args:
            load_path: Directory containing saved model files

        Returns:
            LDATrainer instance with loaded model
        """
        load_path = Path(load_path)

        if not load_path.exists():
            raise FileNotFoundError(f"Model directory not found: {load_path}")

        model_path = load_path / LDA_MODEL_FILENAME
        with open(model_path, 'rb') as f:
            lda_model = pickle.load(f)
        logger.info(f"Loaded LDA model from {model_path}")

        dict_path = load_path / DICTIONARY_FILENAME
        with open(dict_path, 'rb') as f:
            dictionary = pickle.load(f)

        trainer = cls(num_topics=lda_model.num_topics)
        trainer.lda_model = lda_model
        trainer.dictionary = dictionary

        info_path = load_path / MODEL_INFO_FILENAME
        if info_path.exists():
            with open(info_path, 'r', encoding='utf-8') as f:
                trainer.model_info = LDAModelInfo.model_validate(json.load(f))

        logger.info("Model loaded successfully")
        return trainer
