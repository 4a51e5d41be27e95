"""Feature extraction configuration modules."""

from src.config.features.topic_modeling import TopicModelingConfig

__all__ = [
    "TopicModelingConfig",
]
