"""
Earnings-Call Misstatement Pipeline Configuration Package.

This module uses Pydantic Settings to:
1. Define the schema for all configuration
2. Load defaults from configs/config.yaml and configs/features/*.yaml
3. Automatically override with environment variables from .env or CI/CD secrets

Usage:
    from src.config import settings

    # Access paths
    raw_dir = settings.paths.raw_data_dir

    # Access the sample window
    start = settings.transcripts.sample_start_year

    # Access classifier grids
    grid = settings.modeling.grid_for("elastic_net")
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Core configs
from src.config.paths import PathsConfig
from src.config.reproducibility import ReproducibilityConfig
from src.config.run_context import RunContext
from src.config.transcripts import TranscriptsConfig
from src.config.financials import FinancialRatiosConfig
from src.config.linking import LinkingConfig, InputsConfig
from src.config.modeling import ModelingConfig

# Feature configs
from src.config.features import TopicModelingConfig


class Settings(BaseSettings):
    """
    Main settings class that combines all configuration sections.

    Usage:
        from src.config import settings

        settings.paths.analytic_table_path
        settings.topic_modeling.model.num_topics
        settings.modeling.cv_folds
    """
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    paths: PathsConfig = Field(default_factory=PathsConfig)
    inputs: InputsConfig = Field(default_factory=InputsConfig)
    reproducibility: ReproducibilityConfig = Field(default_factory=ReproducibilityConfig)
    transcripts: TranscriptsConfig = Field(default_factory=TranscriptsConfig)
    topic_modeling: TopicModelingConfig = Field(default_factory=TopicModelingConfig)
    financial_ratios: FinancialRatiosConfig = Field(default_factory=FinancialRatiosConfig)
    linking: LinkingConfig = Field(default_factory=LinkingConfig)
    modeling: ModelingConfig = Field(default_factory=ModelingConfig)


# ===========================
# Global Settings Instance
# ===========================

settings = Settings()


# ===========================
# Utility Functions
# ===========================

ensure_directories = settings.paths.ensure_directories


# ===========================
# Public API
# ===========================

__all__ = [
    # Main settings
    "settings",
    "Settings",
    # Utility
    "ensure_directories",
    "RunContext",
    # Section configs (for direct access if needed)
    "PathsConfig",
    "InputsConfig",
    "ReproducibilityConfig",
    "TranscriptsConfig",
    "TopicModelingConfig",
    "FinancialRatiosConfig",
    "LinkingConfig",
    "ModelingConfig",
]
