"""
Transcript preprocessing package.

Stage 1 (metadata) and stage 2 (text) of the pipeline:

    from src.preprocessing import TranscriptMetadataNormalizer, TranscriptTextNormalizer

    metadata = TranscriptMetadataNormalizer().normalize(raw_metadata)

    text = TranscriptTextNormalizer()
    counts = text.aggregate_term_counts(components)
    dtm = text.build_document_term_matrix(counts)
"""

from .transcript_metadata import TranscriptMetadataNormalizer, parse_fiscal_period
from .transcript_text import DocumentTermMatrix, TranscriptTextNormalizer

__all__ = [
    "TranscriptMetadataNormalizer",
    "parse_fiscal_period",
    "TranscriptTextNormalizer",
    "DocumentTermMatrix",
]
