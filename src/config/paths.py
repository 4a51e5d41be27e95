"""Project path configuration."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PathsConfig(BaseSettings):
    """
    Project path configuration.
    All paths are computed from project_root.
    """
    model_config = SettingsConfigDict(
        env_prefix='PATHS_',
        case_sensitive=False
    )

    # Project root directory (computed)
    project_root: Path = Field(default_factory=lambda: Path(__file__).parent.parent.parent)

    @property
    def data_dir(self) -> Path:
        return self.project_root / "data"

    @property
    def raw_data_dir(self) -> Path:
        """Extracted source tables (transcripts, fundamentals, links, AAER)"""
        return self.data_dir / "raw"

    @property
    def interim_data_dir(self) -> Path:
        return self.data_dir / "interim"

    @property
    def transcripts_data_dir(self) -> Path:
        """Normalized transcript metadata and term counts"""
        return self.interim_data_dir / "transcripts"

    @property
    def dtm_dir(self) -> Path:
        """Pruned document-term matrix (gensim dictionary + corpus)"""
        return self.interim_data_dir / "dtm"

    @property
    def processed_data_dir(self) -> Path:
        return self.data_dir / "processed"

    @property
    def features_data_dir(self) -> Path:
        """Financial ratios and document-topic probabilities"""
        return self.processed_data_dir / "features"

    @property
    def analytic_table_path(self) -> Path:
        """Merged one-row-per-company-quarter modelling table"""
        return self.processed_data_dir / "analytic_table.parquet"

    @property
    def models_dir(self) -> Path:
        return self.project_root / "models"

    @property
    def lda_model_dir(self) -> Path:
        return self.models_dir / "lda_transcripts"

    @property
    def experiments_dir(self) -> Path:
        """Directory for classifier training runs"""
        return self.models_dir / "experiments"

    @property
    def logs_dir(self) -> Path:
        return self.project_root / "logs"

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        directories = [
            self.raw_data_dir,
            self.interim_data_dir,
            self.transcripts_data_dir,
            self.dtm_dir,
            self.processed_data_dir,
            self.features_data_dir,
            self.models_dir,
            self.lda_model_dir,
            self.experiments_dir,
            self.logs_dir,
        ]
        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)
