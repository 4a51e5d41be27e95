"""
Transcript metadata normalizer.

Turns the raw transcript header table (one row per transcript version)
into one retained transcript per company fiscal quarter.

Steps:
1. Parse fiscal year/quarter from the free-text headline
2. Keep one version per event among the parseable ones (presentation type, then recency)
3. Filter to the configured fiscal-year sample window
4. Keep one event per (company, fiscal year, fiscal quarter)

Usage:
    from src.preprocessing.transcript_metadata import TranscriptMetadataNormalizer

    normalizer = TranscriptMetadataNormalizer()
    metadata = normalizer.normalize(raw_metadata)
"""

import logging
from typing import Dict, Optional, Tuple

import pandas as pd

from src.config import settings
from src.utils.frames import require_columns
from .constants import (
    COL_CALL_DATE,
    COL_COMPANY_ID,
    COL_CREATED_AT,
    COL_EVENT_ID,
    COL_FISCAL_QUARTER,
    COL_FISCAL_YEAR,
    COL_HEADLINE,
    COL_PRESENTATION_TYPE,
    COL_TRANSCRIPT_ID,
    METADATA_REQUIRED_COLUMNS,
    MISSING_PRESENTATION_TYPE_RANK,
    NORMALIZED_METADATA_COLUMNS,
    NUMBER_FIRST_PATTERN,
    ORDINAL_PATTERN,
    ORDINAL_QUARTERS,
    QUARTER_FIRST_PATTERN,
    TWO_DIGIT_YEAR_PIVOT,
    UNRANKED_PRESENTATION_TYPE,
)

logger = logging.getLogger(__name__)


def _expand_year(year_text: str) -> int:
    year = int(year_text)
    if len(year_text) == 2:
        year += 1900 if year >= TWO_DIGIT_YEAR_PIVOT else 2000
    return year


def parse_fiscal_period(headline: Optional[str]) -> Optional[Tuple[int, int]]:
    """
    Parse (fiscal_year, fiscal_quarter) from a transcript headline.

    Recognises "Q3 2015", "Q3 FY2015", "Q3 Fiscal 2015", "FQ3 2015", "3Q15",
    "Q4 and Full Year 2015" and "Third Quarter 2015" styles. Returns None
    for headlines without a quarter token (annual meetings, guidance calls,
    half-year reports).

    Args:
        headline: Free-text transcript headline

    Returns:
        Tuple of (year, quarter) or None

    Example:
        >>> parse_fiscal_period("Apple Inc., Q3 2015 Earnings Call, Jul 21, 2015")
        (2015, 3)
        >>> parse_fiscal_period("Intel Corp - Fourth Quarter 2012 Results")
        (2012, 4)
    """
    if not isinstance(headline, str) or not headline.strip():
        return None

    for pattern in (QUARTER_FIRST_PATTERN, NUMBER_FIRST_PATTERN):
        match = pattern.search(headline)
        if match:
            return _expand_year(match.group(2)), int(match.group(1))

    match = ORDINAL_PATTERN.search(headline)
    if match:
        quarter = ORDINAL_QUARTERS[match.group(1).lower()]
        return _expand_year(match.group(2)), quarter

    return None


class TranscriptMetadataNormalizer:
    """
    Normalizes raw transcript metadata.

    Invariant of the output: at most one transcript per
    (company_id, fiscal_year, fiscal_quarter).
    """

    def __init__(
        self,
        sample_start_year: Optional[int] = None,
        sample_end_year: Optional[int] = None,
        presentation_type_rank: Optional[Dict[str, int]] = None,
    ):
        config = settings.transcripts
        self.sample_start_year = (
            sample_start_year if sample_start_year is not None else config.sample_start_year
        )
        self.sample_end_year = (
            sample_end_year if sample_end_year is not None else config.sample_end_year
        )
        if self.sample_start_year > self.sample_end_year:
            raise ValueError(
                f"Sample window is empty: {self.sample_start_year}-{self.sample_end_year}"
            )
        rank = presentation_type_rank or config.presentation_type_rank
        self.presentation_type_rank = {k.lower(): v for k, v in rank.items()}

    def normalize(self, raw: pd.DataFrame) -> pd.DataFrame:
        """
        Run the full normalization chain.

        Args:
            raw: Raw metadata with transcript_id, company_id, event_id,
                headline, call_date (optionally presentation_type, created_at)

        Returns:
            Frame with NORMALIZED_METADATA_COLUMNS, one row per company quarter

        Raises:
            ValueError: If required columns are missing
        """
        require_columns(raw, METADATA_REQUIRED_COLUMNS, "transcript metadata")
        logger.info(f"Normalizing {len(raw):,} transcript metadata rows")

        df = raw.drop_duplicates().copy()
        df = df.dropna(subset=[COL_TRANSCRIPT_ID, COL_COMPANY_ID, COL_EVENT_ID])
        df[COL_CALL_DATE] = pd.to_datetime(df[COL_CALL_DATE], errors='coerce')

        df = self.parse_periods(df)
        df = self.deduplicate_versions(df)
        df = self.filter_sample_window(df)
        df = self.enforce_one_per_quarter(df)

        df = df[NORMALIZED_METADATA_COLUMNS].sort_values(
            [COL_COMPANY_ID, COL_FISCAL_YEAR, COL_FISCAL_QUARTER]
        ).reset_index(drop=True)

        logger.info(f"Retained {len(df):,} transcripts")
        return df

    def deduplicate_versions(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Keep one transcript version per event.

        Preference order: presentation type rank, then latest creation
        timestamp, then highest transcript id. Unlisted presentation types
        rank above a missing one.
        """
        df = df.copy()
        if COL_PRESENTATION_TYPE in df.columns:
            types = df[COL_PRESENTATION_TYPE].astype("string").str.strip().str.lower()
            missing = (types.fillna("") == "").to_numpy(dtype=bool)
            rank = pd.to_numeric(
                types.astype(object).map(self.presentation_type_rank), errors='coerce'
            )
            df["_rank"] = rank.fillna(UNRANKED_PRESENTATION_TYPE).mask(
                missing, MISSING_PRESENTATION_TYPE_RANK
            )
        else:
            df["_rank"] = MISSING_PRESENTATION_TYPE_RANK

        if COL_CREATED_AT in df.columns:
            df["_created"] = pd.to_datetime(df[COL_CREATED_AT], errors='coerce')
        else:
            df["_created"] = pd.NaT

        before = len(df)
        df = (
            df.sort_values(
                ["_rank", "_created", COL_TRANSCRIPT_ID],
                ascending=[False, False, False],
                na_position='last',
            )
            .drop_duplicates(subset=[COL_EVENT_ID], keep='first')
            .drop(columns=["_rank", "_created"])
        )
        logger.info(f"Version dedup: {before:,} -> {len(df):,} (one per event)")
        return df

    def parse_periods(self, df: pd.DataFrame) -> pd.DataFrame:
        """Attach fiscal_year / fiscal_quarter; drop unparseable headlines."""
        df = df.copy()
        periods = df[COL_HEADLINE].map(parse_fiscal_period)
        parsed = periods.notna()

        dropped = int((~parsed).sum())
        if dropped:
            logger.info(f"Dropped {dropped:,} transcripts with no fiscal quarter in headline")

        df = df[parsed].copy()
        df[COL_FISCAL_YEAR] = [p[0] for p in periods[parsed]]
        df[COL_FISCAL_QUARTER] = [p[1] for p in periods[parsed]]
        df[COL_FISCAL_YEAR] = df[COL_FISCAL_YEAR].astype(int)
        df[COL_FISCAL_QUARTER] = df[COL_FISCAL_QUARTER].astype(int)
        return df

    def filter_sample_window(self, df: pd.DataFrame) -> pd.DataFrame:
        """Keep fiscal years inside [sample_start_year, sample_end_year]."""
        in_window = df[COL_FISCAL_YEAR].between(self.sample_start_year, self.sample_end_year)
        logger.info(
            f"Sample window {self.sample_start_year}-{self.sample_end_year}: "
            f"kept {int(in_window.sum()):,} of {len(df):,}"
        )
        return df[in_window]

    def enforce_one_per_quarter(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Keep one transcript per (company, fiscal year, fiscal quarter).

        The latest call wins; ties go to the highest transcript id.
        """
        before = len(df)
        df = (
            df.sort_values(
                [COL_CALL_DATE, COL_TRANSCRIPT_ID],
                ascending=[False, False],
                na_position='last',
            )
            .drop_duplicates(
                subset=[COL_COMPANY_ID, COL_FISCAL_YEAR, COL_FISCAL_QUARTER],
                keep='first',
            )
        )
        if len(df) < before:
            logger.info(f"Collapsed {before - len(df):,} extra events within a company quarter")
        return df
