"""Topic modeling configuration."""

from typing import List, Union

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.config._loader import load_yaml_section


def _get_config() -> dict:
    return load_yaml_section("features/topic_modeling.yaml", "topic_modeling")


class TopicModelingModelConfig(BaseSettings):
    """LDA model architecture settings."""
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_MODEL_',
        case_sensitive=False
    )

    num_topics: int = Field(
        default_factory=lambda: _get_config().get('model', {}).get('num_topics', 40)
    )
    passes: int = Field(
        default_factory=lambda: _get_config().get('model', {}).get('passes', 10)
    )
    iterations: int = Field(
        default_factory=lambda: _get_config().get('model', {}).get('iterations', 100)
    )
    random_state: int = Field(
        default_factory=lambda: _get_config().get('model', {}).get('random_state', 42)
    )
    alpha: Union[str, float] = Field(
        default_factory=lambda: _get_config().get('model', {}).get('alpha', 'symmetric')
    )
    eta: Union[str, float] = Field(
        default_factory=lambda: _get_config().get('model', {}).get('eta', 'auto')
    )


class TopicModelingPreprocessingConfig(BaseSettings):
    """Document-term matrix pruning settings."""
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_PREP_',
        case_sensitive=False
    )

    no_below: int = Field(
        default_factory=lambda: _get_config().get('preprocessing', {}).get('no_below', 20)
    )
    no_above: float = Field(
        default_factory=lambda: _get_config().get('preprocessing', {}).get('no_above', 0.5)
    )
    keep_n: int = Field(
        default_factory=lambda: _get_config().get('preprocessing', {}).get('keep_n', 20000)
    )
    use_call_stopwords: bool = Field(
        default_factory=lambda: _get_config().get('preprocessing', {}).get('use_call_stopwords', True)
    )


class TopicModelingSelectionConfig(BaseSettings):
    """Held-out perplexity search over candidate topic counts."""
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_SELECT_',
        case_sensitive=False
    )

    candidate_topics: List[int] = Field(
        default_factory=lambda: _get_config().get('selection', {}).get(
            'candidate_topics', [10, 20, 30, 40, 50, 60]
        )
    )
    holdout_fraction: float = Field(
        default_factory=lambda: _get_config().get('selection', {}).get('holdout_fraction', 0.2),
        gt=0.0,
        lt=1.0,
    )


class TopicModelingEvaluationConfig(BaseSettings):
    """Model evaluation settings."""
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_EVAL_',
        case_sensitive=False
    )

    compute_coherence: bool = Field(
        default_factory=lambda: _get_config().get('evaluation', {}).get('compute_coherence', False)
    )
    coherence_metric: str = Field(
        default_factory=lambda: _get_config().get('evaluation', {}).get('coherence_metric', 'c_v')
    )


class TopicModelingOutputConfig(BaseSettings):
    """Output settings for topic modeling."""
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_OUT_',
        case_sensitive=False
    )

    num_topic_words: int = Field(
        default_factory=lambda: _get_config().get('output', {}).get('num_topic_words', 20)
    )


class TopicModelingConfig(BaseSettings):
    """
    Topic modeling configuration.
    Loads from configs/features/topic_modeling.yaml with environment variable overrides.
    """
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_',
        env_nested_delimiter='__',
        case_sensitive=False
    )

    model: TopicModelingModelConfig = Field(
        default_factory=TopicModelingModelConfig
    )
    preprocessing: TopicModelingPreprocessingConfig = Field(
        default_factory=TopicModelingPreprocessingConfig
    )
    selection: TopicModelingSelectionConfig = Field(
        default_factory=TopicModelingSelectionConfig
    )
    evaluation: TopicModelingEvaluationConfig = Field(
        default_factory=TopicModelingEvaluationConfig
    )
    output: TopicModelingOutputConfig = Field(
        default_factory=TopicModelingOutputConfig
    )
