"""Unit tests for the LDA topic model trainer and analyzer.

Uses a twelve-document, two-theme corpus so gensim runs in well under a second.
"""

import json
from collections import Counter

import numpy as np
import pytest
from pydantic import ValidationError

from src.features.topic_modeling import (
    LDATrainer,
    TopicModelingAnalyzer,
    TopicModelingFeatures,
    TopicSelectionResult,
    topic_columns,
)
from src.preprocessing.transcript_text import TranscriptTextNormalizer


@pytest.fixture(scope="module")
def dtm(two_theme_term_counts):
    counts = two_theme_term_counts
    normalizer = TranscriptTextNormalizer(use_call_stopwords=False)
    return normalizer.build_document_term_matrix(counts, no_below=2, no_above=1.0)


@pytest.fixture(scope="module")
def trained(dtm) -> LDATrainer:
    trainer = LDATrainer(num_topics=2, passes=5, iterations=50, random_state=1)
    trainer.train(dtm, compute_coherence=False)
    return trainer


class TestTrain:
    def test_model_info(self, trained, dtm):
        info = trained.model_info
        assert info.num_topics == 2
        assert info.num_documents == len(dtm)
        assert info.vocabulary_size == dtm.num_terms
        assert info.perplexity > 0

    def test_empty_matrix_rejected(self, dtm):
        with pytest.raises(ValueError):
            LDATrainer(num_topics=2).train(dtm.subset([]))

    def test_untrained_model_rejected(self):
        with pytest.raises(ValueError):
            LDATrainer(num_topics=2).top_terms()

    def test_coherence_falls_back_without_texts(self, dtm):
        trainer = LDATrainer(num_topics=2, passes=2, iterations=20, random_state=1)
        info = trainer.train(dtm, compute_coherence=True)
        assert info.coherence_score is not None


class TestTopTerms:
    def test_ordered_terms_per_topic(self, trained):
        terms = trained.top_terms(topn=3)
        assert set(terms) == {0, 1}
        assert all(len(words) == 3 for words in terms.values())

    def test_terms_come_from_vocabulary(self, trained, dtm):
        vocabulary = set(dtm.dictionary.token2id)
        for words in trained.top_terms(topn=5).values():
            assert set(words) <= vocabulary


class TestDocumentTopicMatrix:
    def test_shape_and_labels(self, trained, dtm):
        frame = trained.document_topic_matrix(dtm)
        assert frame.shape == (len(dtm), 2)
        assert list(frame.columns) == topic_columns(2)
        assert frame.index.name == "transcript_id"
        assert list(frame.index) == dtm.document_ids

    def test_rows_sum_to_one(self, trained, dtm):
        frame = trained.document_topic_matrix(dtm)
        np.testing.assert_allclose(frame.sum(axis=1).to_numpy(), 1.0)
        assert (frame.to_numpy() >= 0).all()


class TestSelectNumTopics:
    def test_selects_an_evaluated_candidate(self, dtm):
        trainer = LDATrainer(passes=2, iterations=20, random_state=1)
        result = trainer.select_num_topics(dtm, candidates=[2, 3], holdout_fraction=0.25)
        assert set(result.perplexities) == {2, 3}
        assert result.best_num_topics in (2, 3)
        assert result.holdout_documents == 3
        assert result.train_documents == len(dtm) - 3

    def test_too_few_documents(self, dtm):
        with pytest.raises(ValueError):
            LDATrainer(passes=1).select_num_topics(dtm.subset([0]), candidates=[2])

    def test_result_rejects_unknown_best(self):
        with pytest.raises(ValidationError):
            TopicSelectionResult(
                perplexities={2: 10.0}, best_num_topics=3, train_documents=5, holdout_documents=1
            )


class TestSaveLoad:
    def test_roundtrip(self, trained, dtm, tmp_path):
        trained.save(tmp_path / "lda")
        loaded = LDATrainer.load(tmp_path / "lda")

        assert loaded.num_topics == 2
        assert loaded.model_info.num_documents == len(dtm)
        np.testing.assert_allclose(
            loaded.document_topic_matrix(dtm).to_numpy(),
            trained.document_topic_matrix(dtm).to_numpy(),
        )

    def test_topic_terms_written(self, trained, tmp_path):
        trained.save(tmp_path / "lda")
        with open(tmp_path / "lda" / "topic_top_terms.json") as f:
            terms = json.load(f)
        assert set(terms) == {"0", "1"}

    def test_load_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            LDATrainer.load(tmp_path / "absent")


class TestTopicModelingAnalyzer:
    def test_extract_features(self, trained):
        analyzer = TopicModelingAnalyzer(trainer=trained)
        features = analyzer.extract_features(Counter({"cloud": 4, "server": 2}))
        assert features.num_topics == 2
        assert sum(features.probabilities) == pytest.approx(1.0)
        assert features.dominant_topic_id in (0, 1)

    def test_out_of_vocabulary_document(self, trained):
        analyzer = TopicModelingAnalyzer(trainer=trained)
        features = analyzer.extract_features(Counter({"zzz": 3}))
        assert features.probabilities == []
        assert features.dominant_topic_id is None

    def test_feature_frame_columns(self, trained, dtm):
        frame = TopicModelingAnalyzer(trainer=trained).feature_frame(dtm)
        assert {"topic_0", "topic_1", "dominant_topic", "topic_entropy"} <= set(frame.columns)
        assert (frame["topic_entropy"] >= 0).all()

    def test_top_topics_carry_terms(self, trained):
        analyzer = TopicModelingAnalyzer(trainer=trained)
        top = analyzer.top_topics(Counter({"margin": 3}), k=1, num_words=4)
        assert len(top) == 1
        assert len(top[0].top_words) == 4

    def test_missing_model_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            TopicModelingAnalyzer(model_path=tmp_path / "absent")

    def test_untrained_trainer_rejected(self):
        with pytest.raises(ValueError):
            TopicModelingAnalyzer(trainer=LDATrainer(num_topics=2))


class TestTopicModelingFeatures:
    def test_probabilities_must_sum_to_one(self):
        with pytest.raises(ValidationError):
            TopicModelingFeatures(probabilities=[0.2, 0.2])

    def test_rounding_within_tolerance_accepted(self):
        features = TopicModelingFeatures(probabilities=[0.5, 0.495])
        assert features.num_topics == 2

    def test_deviation_beyond_tolerance_rejected(self):
        with pytest.raises(ValidationError):
            TopicModelingFeatures(probabilities=[0.5, 0.48])

    def test_top_k_sorted(self):
        features = TopicModelingFeatures.from_probabilities([0.1, 0.6, 0.3])
        assert [t.topic_id for t in features.get_top_k_topics(2)] == [1, 2]
