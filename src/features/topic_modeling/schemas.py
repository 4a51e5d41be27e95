"""
Topic Modeling Schemas

Pydantic models for LDA topic modeling features and results.
"""

import math
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import PROBABILITY_TOLERANCE


class TopicDistribution(BaseModel):
    """
    Probability of one topic in one document.

    Attributes:
        topic_id: Integer topic ID (0 to num_topics - 1)
        probability: Probability of this topic in the document (0.0 to 1.0)
        top_words: Top N most representative terms for this topic
    """
    topic_id: int = Field(..., ge=0, description="Topic ID")
    probability: float = Field(..., ge=0.0, le=1.0, description="Topic probability")
    top_words: Optional[List[str]] = Field(default=None, description="Top representative terms")


class TopicModelingFeatures(BaseModel):
    """
    Topic features of a single transcript.

    Attributes:
        probabilities: Dense topic probability vector (index = topic id)
        dominant_topic_id: ID of the most prominent topic
        dominant_topic_probability: Probability of the dominant topic
        topic_entropy: Shannon entropy of the distribution (higher = more diverse)
    """
    probabilities: List[float] = Field(default_factory=list)
    dominant_topic_id: Optional[int] = Field(default=None)
    dominant_topic_probability: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    topic_entropy: float = Field(default=0.0, ge=0.0)

    @field_validator('probabilities')
    @classmethod
    def validate_probabilities_sum(cls, v: List[float]) -> List[float]:
        """Validate that probabilities sum to approximately 1.0."""
        if v:
            total = sum(v)
            if abs(total - 1.0) > PROBABILITY_TOLERANCE:
                raise ValueError(
                    f"Topic probabilities must sum to ~1.0, got {total:.4f}"
                )
        return v

    @property
    def num_topics(self) -> int:
        return len(self.probabilities)

    @classmethod
    def from_probabilities(cls, probabilities: List[float]) -> "TopicModelingFeatures":
        if not probabilities:
            return cls()
        dominant = max(range(len(probabilities)), key=lambda i: probabilities[i])
        entropy = -sum(p * math.log(p) for p in probabilities if p > 0)
        return cls(
            probabilities=list(probabilities),
            dominant_topic_id=dominant,
            dominant_topic_probability=min(1.0, probabilities[dominant]),
            topic_entropy=max(0.0, entropy),
        )

    def get_top_k_topics(self, k: int = 5) -> List[TopicDistribution]:
        """
        Get top K most prominent topics.

        Returns:
            List of TopicDistribution objects sorted by probability (descending)
        """
        ranked = sorted(enumerate(self.probabilities), key=lambda x: x[1], reverse=True)
        return [
            TopicDistribution(topic_id=topic_id, probability=min(1.0, prob))
            for topic_id, prob in ranked[:k]
        ]


class TopicSelectionResult(BaseModel):
    """
    Outcome of the held-out perplexity search over topic counts.

    Attributes:
        perplexities: Topic count -> held-out perplexity (lower is better)
        best_num_topics: Topic count with the lowest perplexity
        train_documents: Documents used to fit each candidate
        holdout_documents: Documents used to score each candidate
    """
    perplexities: Dict[int, float]
    best_num_topics: int = Field(..., ge=1)
    train_documents: int = Field(..., ge=1)
    holdout_documents: int = Field(..., ge=1)

    @model_validator(mode='after')
    def _best_was_evaluated(self) -> 'TopicSelectionResult':
        if self.best_num_topics not in self.perplexities:
            raise ValueError(f"best_num_topics {self.best_num_topics} was not evaluated")
        return self


class LDAModelInfo(BaseModel):
    """
    Information about a trained LDA model.

    Attributes:
        num_topics: Number of topics
        num_documents: Number of documents in training corpus
        vocabulary_size: Size of vocabulary
        passes: Number of training passes
        iterations: Number of iterations per pass
        alpha: Document-topic density hyperparameter
        eta: Topic-word density hyperparameter
        perplexity: Perplexity on the training corpus
        coherence_score: Topic coherence score
        topic_top_words: Ordered top terms for each topic with weights
    """
    num_topics: int = Field(..., ge=1)
    num_documents: int = Field(..., ge=0)
    vocabulary_size: int = Field(..., ge=0)
    passes: int = Field(..., ge=1)
    iterations: int = Field(..., ge=1)
    alpha: str | float = Field(..., description="Alpha hyperparameter")
    eta: str | float = Field(..., description="Eta hyperparameter")
    perplexity: Optional[float] = Field(default=None)
    coherence_score: Optional[float] = Field(default=None)
    topic_top_words: Optional[Dict[int, List[Tuple[str, float]]]] = Field(
        default=None,
        description="Top words for each topic with probabilities"
    )
