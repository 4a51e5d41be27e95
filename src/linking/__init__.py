"""
Record linking package.

Joins transcripts, financial ratios, topic probabilities and AAER labels
into the analytic table used by the classifiers.
"""

from .record_linker import (
    LinkedSample,
    RecordLinker,
    normalize_cik,
    sic_division,
    topic_feature_columns,
)

__all__ = [
    "RecordLinker",
    "LinkedSample",
    "normalize_cik",
    "sic_division",
    "topic_feature_columns",
]
