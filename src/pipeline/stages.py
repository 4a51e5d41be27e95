"""
Pipeline stages.

Each stage reads its inputs from data/raw/ or an upstream stage's output
and writes its own output, so stages can be rerun independently:

    transcripts -> data/interim/transcripts/transcripts.parquet
    text        -> data/interim/dtm/ (dictionary, corpus, ids)
    topics      -> models/lda_transcripts/, data/processed/features/document_topics.parquet
    ratios      -> data/processed/features/financial_ratios.parquet
    link        -> data/processed/analytic_table.parquet
    models      -> models/experiments/{run_id}_misstatement_classifiers/
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from src.config import settings
from src.features.financial_ratios import FinancialRatioCalculator
from src.features.topic_modeling import LDATrainer
from src.linking import LinkedSample, RecordLinker
from src.models import FraudModelTrainer, ModelEvaluation
from src.preprocessing import (
    DocumentTermMatrix,
    TranscriptMetadataNormalizer,
    TranscriptTextNormalizer,
)
from src.preprocessing.constants import COL_TRANSCRIPT_ID
from src.utils.frames import read_table, write_table

logger = logging.getLogger(__name__)

TRANSCRIPTS_FILENAME = "transcripts.parquet"
DOCUMENT_TOPICS_FILENAME = "document_topics.parquet"
RATIOS_FILENAME = "financial_ratios.parquet"

STAGES: List[str] = ["transcripts", "text", "topics", "ratios", "link", "models"]


def _raw(name: str) -> Path:
    return settings.paths.raw_data_dir / name


def transcripts_path() -> Path:
    return settings.paths.transcripts_data_dir / TRANSCRIPTS_FILENAME


def document_topics_path() -> Path:
    return settings.paths.features_data_dir / DOCUMENT_TOPICS_FILENAME


def ratios_path() -> Path:
    return settings.paths.features_data_dir / RATIOS_FILENAME


def run_transcripts() -> Path:
    """Stage 1: normalize transcript metadata."""
    raw = read_table(_raw(settings.inputs.transcript_metadata))
    metadata = TranscriptMetadataNormalizer().normalize(raw)
    return write_table(metadata, transcripts_path())


def run_text() -> Path:
    """Stage 2: tokenize the retained transcripts and build the document-term matrix."""
    metadata = read_table(transcripts_path())
    components = read_table(_raw(settings.inputs.transcript_components))
    components = components[components[COL_TRANSCRIPT_ID].isin(metadata[COL_TRANSCRIPT_ID])]

    normalizer = TranscriptTextNormalizer()
    term_counts = normalizer.aggregate_term_counts(components)
    dtm = normalizer.build_document_term_matrix(term_counts)
    return dtm.save(settings.paths.dtm_dir)


def run_topics(select_topics: bool = False) -> Path:
    """Stage 3: train the LDA model and write per-transcript topic probabilities."""
    dtm = DocumentTermMatrix.load(settings.paths.dtm_dir)
    trainer = LDATrainer()

    if select_topics:
        selection = trainer.select_num_topics(dtm)
        trainer.num_topics = selection.best_num_topics

    trainer.train(dtm, save_path=settings.paths.lda_model_dir)
    doc_topics = trainer.document_topic_matrix(dtm).reset_index()
    return write_table(doc_topics, document_topics_path())


def run_ratios() -> Path:
    """Stage 4: lagged, peer-adjusted financial ratios."""
    fundamentals = read_table(_raw(settings.inputs.fundamentals))
    ratios = FinancialRatioCalculator().calculate(fundamentals)
    return write_table(ratios, ratios_path())


def run_link() -> Path:
    """Stage 5: build the analytic table."""
    sample = RecordLinker().link(
        transcripts=read_table(transcripts_path()),
        links=read_table(_raw(settings.inputs.company_links)),
        ratios=read_table(ratios_path()),
        doc_topics=read_table(document_topics_path()),
        aaer=read_table(_raw(settings.inputs.aaer)),
    )
    return write_table(sample.frame, settings.paths.analytic_table_path)


def run_models(workers: Optional[int] = None) -> List[ModelEvaluation]:
    """Stage 6: tune, evaluate and save the three classifiers."""
    sample = LinkedSample.from_frame(read_table(settings.paths.analytic_table_path))
    trainer = FraudModelTrainer(sample, n_jobs=workers)
    evaluations = trainer.run()
    trainer.save_results()
    return evaluations


def run_stage(stage: str, select_topics: bool = False, workers: Optional[int] = None):
    """Run one named stage."""
    if stage == "transcripts":
        return run_transcripts()
    if stage == "text":
        return run_text()
    if stage == "topics":
        return run_topics(select_topics=select_topics)
    if stage == "ratios":
        return run_ratios()
    if stage == "link":
        return run_link()
    if stage == "models":
        return run_models(workers=workers)
    raise ValueError(f"Unknown stage: {stage}")


def run_all(select_topics: bool = False, workers: Optional[int] = None) -> Dict[str, object]:
    """Run every stage in dependency order."""
    results = {}
    for stage in STAGES:
        logger.info(f"=== Stage: {stage} ===")
        results[stage] = run_stage(stage, select_topics=select_topics, workers=workers)
    return results
