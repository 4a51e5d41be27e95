"""Run context and versioning management."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RunContext(BaseSettings):
    """
    Manages versioning and output paths for a training run.
    Keeps fitted classifiers, evaluation reports and the config snapshot together.

    Usage:
        run = RunContext(name="aaer_classifiers")
        run.create()
        output_path = run.output_dir  # e.g., models/experiments/20231201_143022_aaer_classifiers/
        run.save_config(settings.modeling.model_dump())
    """
    model_config = SettingsConfigDict(
        arbitrary_types_allowed=True,
        validate_default=True
    )

    name: str = Field(..., description="Name identifier for this run")
    base_dir: Optional[Path] = Field(
        default=None,
        description="Base directory for run outputs. Defaults to experiments_dir"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="Timestamp for this run"
    )

    def model_post_init(self, __context) -> None:
        """Set default base_dir after settings are available."""
        if self.base_dir is None:
            # Import here to avoid circular dependency
            from src.config import settings
            object.__setattr__(self, 'base_dir', settings.paths.experiments_dir)

    @property
    def run_id(self) -> str:
        """Generate run ID from timestamp."""
        return self.timestamp.strftime("%Y%m%d_%H%M%S")

    @property
    def output_dir(self) -> Path:
        """Construct unique output directory path."""
        return self.base_dir / f"{self.run_id}_{self.name}"

    def create(self) -> "RunContext":
        """Create the run directory."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self

    def save_config(self, config: Dict) -> Path:
        """
        Save the configuration used for this run.

        Returns:
            Path to the saved config file
        """
        self.create()
        config_path = self.output_dir / "run_config.yaml"
        with open(config_path, 'w') as f:
            yaml.safe_dump(config, f, default_flow_style=False)
        return config_path

    def save_json(self, filename: str, payload: Any) -> Path:
        """Write a JSON artifact (evaluation report, topic terms) into the run directory."""
        self.create()
        path = self.output_dir / filename
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, default=str)
        return path
