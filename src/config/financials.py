"""Financial ratio calculator configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.config._loader import config_section


def _get_config() -> dict:
    return config_section("financial_ratios")


class FinancialRatiosConfig(BaseSettings):
    """Winsorization bounds and peer-group settings for ratio construction."""
    model_config = SettingsConfigDict(
        env_prefix='RATIOS_',
        case_sensitive=False
    )

    winsorize_lower: float = Field(
        default_factory=lambda: _get_config().get('winsorize_lower', 0.01),
        ge=0.0,
        lt=0.5,
    )
    winsorize_upper: float = Field(
        default_factory=lambda: _get_config().get('winsorize_upper', 0.99),
        gt=0.5,
        le=1.0,
    )
    min_peer_count: int = Field(
        default_factory=lambda: _get_config().get('min_peer_count', 5),
        ge=1,
    )
    sic_digits: int = Field(
        default_factory=lambda: _get_config().get('sic_digits', 2),
        ge=1,
        le=4,
    )
