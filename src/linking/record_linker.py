"""
Record Linker

Joins the normalized transcripts, the financial ratios, the document-topic
matrix and the AAER labels into one analytic table with one row per
company fiscal quarter.

Usage:
    from src.linking import RecordLinker

    linker = RecordLinker()
    sample = linker.link(transcripts, links, ratios, doc_topics, aaer)
    print(f"{len(sample.frame):,} rows, positive rate {sample.positive_rate:.4f}")
"""

import logging
from typing import List, Optional

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict

from src.config import settings
from src.features.financial_ratios.constants import RATIO_COLUMNS
from src.features.topic_modeling.constants import TOPIC_FEATURE_PREFIX
from src.preprocessing.constants import (
    COL_CALL_DATE,
    COL_COMPANY_ID,
    COL_FISCAL_QUARTER,
    COL_FISCAL_YEAR,
    COL_TRANSCRIPT_ID,
)
from src.utils.frames import require_columns
from .constants import (
    AAER_PERIOD_COLUMNS,
    AAER_RANGE_COLUMNS,
    CATEGORICAL_COLUMNS,
    COL_CIK,
    COL_LINK_END,
    COL_LINK_START,
    COL_MISSTATEMENT_BEGIN,
    COL_MISSTATEMENT_END,
    COL_SIC_DIVISION,
    LINK_REQUIRED_COLUMNS,
    SIC_DIVISIONS,
    UNKNOWN_SIC_DIVISION,
)

logger = logging.getLogger(__name__)

PERIOD_KEYS = [COL_CIK, COL_FISCAL_YEAR, COL_FISCAL_QUARTER]


def normalize_cik(values: pd.Series) -> pd.Series:
    """CIKs as nullable integers, so '0000320193' and 320193 join."""
    return pd.to_numeric(values, errors='coerce').astype('Int64')


def sic_division(sic) -> str:
    """Map a 4-digit SIC code to its SIC division name."""
    try:
        two_digit = int(float(sic)) // 100
    except (TypeError, ValueError):
        return UNKNOWN_SIC_DIVISION
    for first, last, division in SIC_DIVISIONS:
        if first <= two_digit <= last:
            return division
    return UNKNOWN_SIC_DIVISION


def topic_feature_columns(frame: pd.DataFrame) -> List[str]:
    """Topic probability columns (topic_0, topic_1, ...) in topic-id order."""
    columns = [
        col for col in frame.columns
        if col.startswith(TOPIC_FEATURE_PREFIX) and col[len(TOPIC_FEATURE_PREFIX):].isdigit()
    ]
    return sorted(columns, key=lambda col: int(col[len(TOPIC_FEATURE_PREFIX):]))


class LinkedSample(BaseModel):
    """
    Analytic table ready for the classifiers.

    Attributes:
        frame: One row per company fiscal quarter
        numeric_columns: Ratio and topic feature columns
        categorical_columns: Columns one-hot encoded by the model recipe
        label_column: Binary misstatement label
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    frame: pd.DataFrame
    numeric_columns: List[str]
    categorical_columns: List[str]
    label_column: str

    def __len__(self) -> int:
        return len(self.frame)

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, label_column: Optional[str] = None) -> "LinkedSample":
        """Rebuild a sample from a saved analytic table."""
        label_column = label_column or settings.linking.label_column
        require_columns(
            frame,
            list(RATIO_COLUMNS) + list(CATEGORICAL_COLUMNS) + [label_column],
            "analytic table",
        )
        return cls(
            frame=frame,
            numeric_columns=list(RATIO_COLUMNS) + topic_feature_columns(frame),
            categorical_columns=list(CATEGORICAL_COLUMNS),
            label_column=label_column,
        )

    @property
    def feature_columns(self) -> List[str]:
        return self.numeric_columns + self.categorical_columns

    @property
    def X(self) -> pd.DataFrame:
        return self.frame[self.feature_columns]

    @property
    def y(self) -> pd.Series:
        return self.frame[self.label_column]

    @property
    def positive_rate(self) -> float:
        if self.frame.empty:
            return 0.0
        return float(self.frame[self.label_column].mean())


class RecordLinker:
    """Links transcripts, ratios, topics and AAER labels."""

    def __init__(self, label_column: Optional[str] = None):
        self.label_column = label_column or settings.linking.label_column

    def link_company_ids(self, transcripts: pd.DataFrame, links: pd.DataFrame) -> pd.DataFrame:
        """
        Attach a CIK to each transcript via the date-bounded link table.

        A link applies when the call date lies in [start_date, end_date];
        a null end_date is open-ended. When several links apply, the most
        recent start_date wins. Transcripts without a link are dropped.
        """
        require_columns(transcripts, [COL_TRANSCRIPT_ID, COL_COMPANY_ID, COL_CALL_DATE], "transcripts")
        require_columns(links, LINK_REQUIRED_COLUMNS, "company links")

        links = links[LINK_REQUIRED_COLUMNS].copy()
        links[COL_CIK] = normalize_cik(links[COL_CIK])
        links[COL_LINK_START] = pd.to_datetime(links[COL_LINK_START], errors='coerce')
        links[COL_LINK_END] = pd.to_datetime(links[COL_LINK_END], errors='coerce')
        links = links.dropna(subset=[COL_CIK])

        df = transcripts.drop(columns=[COL_CIK], errors='ignore').copy()
        df[COL_CALL_DATE] = pd.to_datetime(df[COL_CALL_DATE], errors='coerce')

        merged = df.merge(links, on=COL_COMPANY_ID, how='inner')
        starts_ok = merged[COL_LINK_START].isna() | (merged[COL_CALL_DATE] >= merged[COL_LINK_START])
        ends_ok = merged[COL_LINK_END].isna() | (merged[COL_CALL_DATE] <= merged[COL_LINK_END])
        merged = merged[starts_ok & ends_ok]

        merged = (
            merged.sort_values(COL_LINK_START, ascending=False, na_position='last', kind='mergesort')
            .drop_duplicates(subset=[COL_TRANSCRIPT_ID], keep='first')
            .drop(columns=[COL_LINK_START, COL_LINK_END])
        )

        unmatched = len(df) - len(merged)
        if unmatched:
            logger.info(f"Dropped {unmatched:,} transcripts with no valid CIK link")
        logger.info(f"Linked {len(merged):,} transcripts to CIKs")
        return merged.reset_index(drop=True)

    def expand_aaer_periods(self, aaer: pd.DataFrame) -> pd.DataFrame:
        """
        Expand AAER misstatement date ranges to one row per fiscal quarter.

        Args:
            aaer: cik, misstatement_begin, misstatement_end

        Returns:
            Unique (cik, fiscal_year, fiscal_quarter) rows
        """
        require_columns(aaer, AAER_RANGE_COLUMNS, "AAER")
        df = aaer[AAER_RANGE_COLUMNS].copy()
        df[COL_CIK] = normalize_cik(df[COL_CIK])
        df[COL_MISSTATEMENT_BEGIN] = pd.to_datetime(df[COL_MISSTATEMENT_BEGIN], errors='coerce')
        df[COL_MISSTATEMENT_END] = pd.to_datetime(df[COL_MISSTATEMENT_END], errors='coerce')

        invalid = (
            df[[COL_CIK, COL_MISSTATEMENT_BEGIN, COL_MISSTATEMENT_END]].isna().any(axis=1)
            | (df[COL_MISSTATEMENT_END] < df[COL_MISSTATEMENT_BEGIN])
        )
        if invalid.any():
            logger.warning(f"Skipping {int(invalid.sum()):,} AAER records with invalid date ranges")
        df = df[~invalid]

        rows = []
        for record in df.itertuples(index=False):
            cik = getattr(record, COL_CIK)
            for period in pd.period_range(
                getattr(record, COL_MISSTATEMENT_BEGIN),
                getattr(record, COL_MISSTATEMENT_END),
                freq='Q',
            ):
                rows.append((cik, period.year, period.quarter))

        expanded = pd.DataFrame(rows, columns=AAER_PERIOD_COLUMNS).drop_duplicates()
        expanded[COL_CIK] = expanded[COL_CIK].astype('Int64')
        logger.info(f"Expanded {len(df):,} AAER records to {len(expanded):,} misstatement quarters")
        return expanded.reset_index(drop=True)

    def label_misstatements(self, frame: pd.DataFrame, aaer: pd.DataFrame) -> pd.DataFrame:
        """
        Left-join AAER quarters onto the frame; quarters without a record get 0.

        An AAER table with a label column keeps its own values; otherwise
        every listed quarter is a misstatement.
        """
        require_columns(aaer, AAER_PERIOD_COLUMNS, "AAER")
        labels = aaer.copy()
        labels[COL_CIK] = normalize_cik(labels[COL_CIK])
        if self.label_column not in labels.columns:
            labels[self.label_column] = 1
        labels = (
            labels[PERIOD_KEYS + [self.label_column]]
            .dropna(subset=PERIOD_KEYS)
            .astype({COL_FISCAL_YEAR: int, COL_FISCAL_QUARTER: int})
            .groupby(PERIOD_KEYS, as_index=False)[self.label_column]
            .max()
        )

        df = frame.drop(columns=[self.label_column], errors='ignore').copy()
        df[COL_CIK] = normalize_cik(df[COL_CIK])
        df = df.merge(labels, on=PERIOD_KEYS, how='left')
        df[self.label_column] = df[self.label_column].fillna(0).astype(int)
        return df

    def attach_topics(self, frame: pd.DataFrame, doc_topics: pd.DataFrame) -> pd.DataFrame:
        """Inner-join topic probabilities on transcript_id."""
        topics = doc_topics
        if COL_TRANSCRIPT_ID not in topics.columns:
            topics = topics.reset_index()
        require_columns(topics, [COL_TRANSCRIPT_ID], "document topics")

        topic_cols = topic_feature_columns(topics)
        if not topic_cols:
            raise ValueError("document topics has no topic probability columns")

        df = frame.merge(topics[[COL_TRANSCRIPT_ID] + topic_cols], on=COL_TRANSCRIPT_ID, how='inner')
        missing = len(frame) - len(df)
        if missing:
            logger.info(f"Dropped {missing:,} transcripts without topic probabilities")
        return df

    def link(
        self,
        transcripts: pd.DataFrame,
        links: pd.DataFrame,
        ratios: pd.DataFrame,
        doc_topics: pd.DataFrame,
        aaer: pd.DataFrame,
    ) -> LinkedSample:
        """
        Build the analytic table.

        Args:
            transcripts: Normalized transcript metadata
            links: company_id to CIK link table
            ratios: Output of FinancialRatioCalculator.calculate
            doc_topics: Document-topic matrix indexed by transcript_id
            aaer: AAER quarters (cik, fiscal_year, fiscal_quarter) or ranges
                (cik, misstatement_begin, misstatement_end)

        Returns:
            LinkedSample with one row per company fiscal quarter

        Raises:
            ValueError: If required columns are missing or the result
                has more than one row per company quarter
        """
        require_columns(ratios, PERIOD_KEYS + RATIO_COLUMNS, "ratios")

        df = self.link_company_ids(transcripts, links)
        df = self._one_transcript_per_cik_quarter(df)

        ratio_frame = ratios.copy()
        ratio_frame[COL_CIK] = normalize_cik(ratio_frame[COL_CIK])
        df = df.merge(ratio_frame, on=PERIOD_KEYS, how='inner')
        logger.info(f"Matched {len(df):,} transcripts to financial ratios")

        df = self.attach_topics(df, doc_topics)

        if all(col in aaer.columns for col in AAER_PERIOD_COLUMNS):
            periods = aaer
        else:
            periods = self.expand_aaer_periods(aaer)
        df = self.label_misstatements(df, periods)

        topic_cols = topic_feature_columns(df)
        numeric_columns = list(RATIO_COLUMNS) + topic_cols
        before = len(df)
        df = df.replace([np.inf, -np.inf], np.nan).dropna(subset=numeric_columns)
        if len(df) < before:
            logger.info(f"Dropped {before - len(df):,} rows with missing ratios or topics")

        sic_source = df["sic"] if "sic" in df.columns else pd.Series(np.nan, index=df.index)
        df[COL_SIC_DIVISION] = sic_source.map(sic_division)
        df[COL_FISCAL_QUARTER] = df[COL_FISCAL_QUARTER].astype(int)

        duplicated = df.duplicated(subset=[COL_COMPANY_ID, COL_FISCAL_YEAR, COL_FISCAL_QUARTER])
        if duplicated.any():
            raise ValueError(
                f"Linked table has {int(duplicated.sum())} duplicate company quarters"
            )

        df = df.sort_values(PERIOD_KEYS).reset_index(drop=True)
        sample = LinkedSample(
            frame=df,
            numeric_columns=numeric_columns,
            categorical_columns=list(CATEGORICAL_COLUMNS),
            label_column=self.label_column,
        )
        logger.info(
            f"Linked sample: {len(sample):,} rows, "
            f"{int(df[self.label_column].sum()):,} misstatements "
            f"(positive rate {sample.positive_rate:.4f})"
        )
        return sample

    def _one_transcript_per_cik_quarter(self, df: pd.DataFrame) -> pd.DataFrame:
        # Several provider ids can map to one CIK; keep the latest call.
        before = len(df)
        df = (
            df.sort_values([COL_CALL_DATE, COL_TRANSCRIPT_ID], ascending=[False, False], na_position='last')
            .drop_duplicates(subset=PERIOD_KEYS, keep='first')
        )
        if len(df) < before:
            logger.info(f"Collapsed {before - len(df):,} transcripts sharing a CIK quarter")
        return df
