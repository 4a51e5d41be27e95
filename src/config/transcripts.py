"""Transcript metadata and text normalization configuration."""

from typing import Dict, List

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.config._loader import config_section


def _get_config() -> dict:
    return config_section("transcripts")


class TranscriptsConfig(BaseSettings):
    """
    Settings for the transcript metadata normalizer and text normalizer.

    The sample window is inclusive on both ends and applies to the fiscal
    year parsed from the transcript headline, not the call date.
    """
    model_config = SettingsConfigDict(
        env_prefix='TRANSCRIPTS_',
        case_sensitive=False
    )

    sample_start_year: int = Field(
        default_factory=lambda: _get_config().get('sample_start_year', 2008)
    )
    sample_end_year: int = Field(
        default_factory=lambda: _get_config().get('sample_end_year', 2019)
    )
    excluded_component_types: List[str] = Field(
        default_factory=lambda: _get_config().get('excluded_component_types', ["operator"])
    )
    min_word_length: int = Field(
        default_factory=lambda: _get_config().get('min_word_length', 3)
    )
    max_word_length: int = Field(
        default_factory=lambda: _get_config().get('max_word_length', 25)
    )
    presentation_type_rank: Dict[str, int] = Field(
        default_factory=lambda: _get_config().get(
            'presentation_type_rank',
            {"audited": 4, "edited": 3, "proofed": 2, "preliminary": 1},
        )
    )

    @model_validator(mode='after')
    def _check_window(self) -> 'TranscriptsConfig':
        if self.sample_start_year > self.sample_end_year:
            raise ValueError(
                f"sample_start_year ({self.sample_start_year}) is after "
                f"sample_end_year ({self.sample_end_year})"
            )
        return self
