"""
Stage runner for the earnings-call misstatement pipeline.

    python -m src.pipeline --stage all
"""

from .stages import STAGES, run_all, run_stage

__all__ = ["STAGES", "run_all", "run_stage"]
