"""
CLI entry point for the earnings-call misstatement pipeline.

Usage:
    # Everything, in dependency order
    python -m src.pipeline --stage all

    # Single stages
    python -m src.pipeline --stage transcripts
    python -m src.pipeline --stage topics --select-topics
    python -m src.pipeline --stage models --workers 4
"""

import argparse
import logging
import sys

from src.config import ensure_directories
from .stages import STAGES, run_all, run_stage

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main() -> None:
    ap = argparse.ArgumentParser(
        description="Earnings-call misstatement pipeline: "
                    "transcripts -> text -> topics -> ratios -> link -> models"
    )
    ap.add_argument('--stage', choices=STAGES + ['all'], default='all',
                    help='Stage to run (default: all)')
    ap.add_argument('--select-topics', action='store_true', dest='select_topics',
                    help='Choose the topic count by held-out perplexity before training')
    ap.add_argument('--workers', type=int, default=None,
                    help='Parallel grid-search jobs (default: MODELING_N_JOBS)')
    args = ap.parse_args()

    ensure_directories()

    try:
        if args.stage == 'all':
            run_all(select_topics=args.select_topics, workers=args.workers)
        else:
            result = run_stage(args.stage, select_topics=args.select_topics, workers=args.workers)
            logger.info(f"Stage '{args.stage}' finished: {result}")
    except (FileNotFoundError, ValueError) as exc:
        logger.error(f"Stage '{args.stage}' failed: {exc}")
        sys.exit(1)


if __name__ == '__main__':
    main()
