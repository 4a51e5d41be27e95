"""Reproducibility configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.config._loader import config_section


class ReproducibilityConfig(BaseSettings):
    """Seed shared by the LDA fit, train/test split, CV folds and downsampling."""
    model_config = SettingsConfigDict(
        env_prefix='REPRODUCIBILITY_',
        case_sensitive=False
    )

    random_seed: int = Field(
        default_factory=lambda: config_section("reproducibility").get('random_seed', 42)
    )
