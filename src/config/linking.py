"""Record linker and raw input file configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.config._loader import config_section


def _get_config() -> dict:
    return config_section("linking")


def _get_inputs() -> dict:
    return config_section("inputs")


class LinkingConfig(BaseSettings):
    """Settings for joining transcripts, ratios, topics and AAER labels."""
    model_config = SettingsConfigDict(
        env_prefix='LINKING_',
        case_sensitive=False
    )

    label_column: str = Field(
        default_factory=lambda: _get_config().get('label_column', 'misstatement')
    )


class InputsConfig(BaseSettings):
    """File names of the extracted source tables under data/raw/."""
    model_config = SettingsConfigDict(
        env_prefix='INPUTS_',
        case_sensitive=False
    )

    transcript_metadata: str = Field(
        default_factory=lambda: _get_inputs().get('transcript_metadata', 'transcripts_metadata.csv')
    )
    transcript_components: str = Field(
        default_factory=lambda: _get_inputs().get('transcript_components', 'transcripts_components.parquet')
    )
    fundamentals: str = Field(
        default_factory=lambda: _get_inputs().get('fundamentals', 'fundamentals_quarterly.csv')
    )
    company_links: str = Field(
        default_factory=lambda: _get_inputs().get('company_links', 'companyid_cik_links.csv')
    )
    aaer: str = Field(
        default_factory=lambda: _get_inputs().get('aaer', 'aaer_misstatements.csv')
    )
