"""
Financial Ratio Calculator

Builds ten lagged, peer-relative ratios per firm quarter from quarterly
fundamentals. The lag of a quarter is the same quarter of the previous
fiscal year.

Steps:
1. Deduplicate to one record per (cik, fiscal_year, fiscal_quarter)
2. Attach lagged fundamentals, flagging quarters without a contiguous lag
3. Compute raw ratios (null on zero denominators or an invalid lag)
4. Winsorize each ratio at configured quantiles
5. Subtract the industry peer median (2-digit SIC x fiscal year x quarter)

Usage:
    from src.features.financial_ratios import FinancialRatioCalculator

    calculator = FinancialRatioCalculator()
    ratios = calculator.calculate(fundamentals)
"""

import logging
from typing import Optional

import numpy as np
import pandas as pd

from src.config import settings
from src.utils.frames import require_columns
from .constants import (
    COL_CIK,
    COL_DATADATE,
    COL_FISCAL_QUARTER,
    COL_FISCAL_YEAR,
    COL_LAG_VALID,
    COL_PEER_GROUP,
    COL_SIC,
    KEY_COLUMNS,
    OUTPUT_COLUMNS,
    QUARTERS_PER_YEAR,
    RATIO_COLUMNS,
    RAW_FUNDAMENTAL_COLUMNS,
    REQUIRED_COLUMNS,
    lag_column,
)

logger = logging.getLogger(__name__)


def _safe_divide(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    """Element-wise division with zero denominators and infinities mapped to NaN."""
    with np.errstate(divide='ignore', invalid='ignore'):
        result = numerator / denominator
    return result.replace([np.inf, -np.inf], np.nan)


def _period_index(df: pd.DataFrame) -> pd.Series:
    return df[COL_FISCAL_YEAR] * QUARTERS_PER_YEAR + df[COL_FISCAL_QUARTER]


class FinancialRatioCalculator:
    """
    Lagged, winsorized and peer-adjusted financial ratios.

    Ratios are null whenever the record four fiscal quarters earlier is
    missing, so a gap in a firm's filing history never pairs a quarter with
    an older, non-comparable lag.
    """

    def __init__(
        self,
        winsorize_lower: Optional[float] = None,
        winsorize_upper: Optional[float] = None,
        min_peer_count: Optional[int] = None,
        sic_digits: Optional[int] = None,
    ):
        config = settings.financial_ratios
        self.winsorize_lower = winsorize_lower if winsorize_lower is not None else config.winsorize_lower
        self.winsorize_upper = winsorize_upper if winsorize_upper is not None else config.winsorize_upper
        self.min_peer_count = min_peer_count if min_peer_count is not None else config.min_peer_count
        self.sic_digits = sic_digits if sic_digits is not None else config.sic_digits

        if not 0.0 <= self.winsorize_lower < self.winsorize_upper <= 1.0:
            raise ValueError(
                f"Invalid winsorize bounds: ({self.winsorize_lower}, {self.winsorize_upper})"
            )

    def calculate(self, fundamentals: pd.DataFrame) -> pd.DataFrame:
        """
        Run the full ratio chain.

        Args:
            fundamentals: Quarterly fundamentals with keys, sic, datadate
                and the raw Compustat fields

        Returns:
            DataFrame with cik, fiscal_year, fiscal_quarter, sic and the ten ratios

        Raises:
            ValueError: If required columns are missing
        """
        require_columns(fundamentals, REQUIRED_COLUMNS, "fundamentals")
        logger.info(f"Calculating ratios for {len(fundamentals):,} fundamentals records")

        df = self.deduplicate(fundamentals)
        df = self.attach_lags(df)
        df = self.compute_raw_ratios(df)
        df = self.winsorize(df)
        df = self.peer_adjust(df)

        complete = df[RATIO_COLUMNS].notna().all(axis=1).sum()
        logger.info(f"Ratios complete for {complete:,} of {len(df):,} firm quarters")
        return df[OUTPUT_COLUMNS].reset_index(drop=True)

    def deduplicate(self, df: pd.DataFrame) -> pd.DataFrame:
        """One record per (cik, fiscal_year, fiscal_quarter); the latest datadate wins."""
        df = df.copy()
        df[COL_DATADATE] = pd.to_datetime(df[COL_DATADATE], errors='coerce')

        before = len(df)
        df = df.dropna(subset=KEY_COLUMNS)
        if len(df) < before:
            logger.warning(f"Dropped {before - len(df):,} records with missing keys")

        df[COL_FISCAL_YEAR] = df[COL_FISCAL_YEAR].astype(int)
        df[COL_FISCAL_QUARTER] = df[COL_FISCAL_QUARTER].astype(int)

        df = (
            df.sort_values(KEY_COLUMNS + [COL_DATADATE], na_position='first', kind='mergesort')
            .drop_duplicates(subset=KEY_COLUMNS, keep='last')
            .reset_index(drop=True)
        )
        logger.info(f"Deduplicated fundamentals: {before:,} -> {len(df):,} records")
        return df

    def attach_lags(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Add `<field>_lag` columns from the record four quarters back.

        The lag is taken by position within each firm, then validated: it
        only counts when its period index is exactly one year earlier.
        Invalid lags are blanked and flagged in `lag_valid`.
        """
        df = df.sort_values(KEY_COLUMNS).reset_index(drop=True)
        period = _period_index(df)

        grouped = df.groupby(COL_CIK, sort=False)
        lag_period = period.groupby(df[COL_CIK], sort=False).shift(QUARTERS_PER_YEAR)
        valid = (period - lag_period) == QUARTERS_PER_YEAR

        lagged = grouped[RAW_FUNDAMENTAL_COLUMNS].shift(QUARTERS_PER_YEAR).astype(float)
        lagged.loc[~valid, :] = np.nan
        lagged.columns = [lag_column(col) for col in RAW_FUNDAMENTAL_COLUMNS]

        df = pd.concat([df, lagged], axis=1)
        df[COL_LAG_VALID] = valid.to_numpy()

        logger.info(f"Valid year-over-year lags for {int(valid.sum()):,} of {len(df):,} records")
        return df

    def compute_raw_ratios(self, df: pd.DataFrame) -> pd.DataFrame:
        """Compute the ten ratios; every ratio is null when the lag is invalid."""
        df = df.copy()

        def cur(field: str) -> pd.Series:
            return df[field].astype(float)

        def lag(field: str) -> pd.Series:
            return df[lag_column(field)].astype(float)

        margin = _safe_divide(cur("saleq") - cur("cogsq"), cur("saleq"))
        margin_lag = _safe_divide(lag("saleq") - lag("cogsq"), lag("saleq"))
        dep_rate = _safe_divide(cur("dpq"), cur("dpq") + cur("ppentq"))
        dep_rate_lag = _safe_divide(lag("dpq"), lag("dpq") + lag("ppentq"))

        df["dsri"] = _safe_divide(
            _safe_divide(cur("rectq"), cur("saleq")),
            _safe_divide(lag("rectq"), lag("saleq")),
        )
        df["gmi"] = _safe_divide(margin_lag, margin)
        df["aqi"] = _safe_divide(
            1 - _safe_divide(cur("actq") + cur("ppentq"), cur("atq")),
            1 - _safe_divide(lag("actq") + lag("ppentq"), lag("atq")),
        )
        df["sgi"] = _safe_divide(cur("saleq"), lag("saleq"))
        df["depi"] = _safe_divide(dep_rate_lag, dep_rate)
        df["sgai"] = _safe_divide(
            _safe_divide(cur("xsgaq"), cur("saleq")),
            _safe_divide(lag("xsgaq"), lag("saleq")),
        )
        df["lvgi"] = _safe_divide(
            _safe_divide(cur("lctq") + cur("dlttq"), cur("atq")),
            _safe_divide(lag("lctq") + lag("dlttq"), lag("atq")),
        )
        df["tata"] = _safe_divide(cur("niq") - cur("oancfq"), cur("atq"))

        delta = {field: cur(field) - lag(field) for field in ("actq", "cheq", "lctq", "dlcq", "txpq")}
        df["wc_accruals"] = _safe_divide(
            (delta["actq"] - delta["cheq"])
            - (delta["lctq"] - delta["dlcq"] - delta["txpq"])
            - cur("dpq"),
            (cur("atq") + lag("atq")) / 2,
        )
        df["ch_roa"] = (
            _safe_divide(cur("niq"), cur("atq")) - _safe_divide(lag("niq"), lag("atq"))
        )

        df.loc[~df[COL_LAG_VALID], RATIO_COLUMNS] = np.nan
        return df

    def winsorize(self, df: pd.DataFrame) -> pd.DataFrame:
        """Clip each ratio at its configured lower/upper sample quantiles."""
        df = df.copy()
        for col in RATIO_COLUMNS:
            values = df[col]
            if values.notna().sum() == 0:
                continue
            lower = values.quantile(self.winsorize_lower)
            upper = values.quantile(self.winsorize_upper)
            df[col] = values.clip(lower=lower, upper=upper)
        return df

    def peer_adjust(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Subtract the peer-group median from each ratio.

        Peer group = SIC prefix x fiscal year x fiscal quarter. Groups with
        fewer than `min_peer_count` non-null values use the cross-industry
        fiscal-year-quarter median instead.
        """
        df = df.copy()
        sic = pd.to_numeric(df[COL_SIC], errors='coerce')
        df[COL_PEER_GROUP] = np.floor(sic / 10 ** (4 - self.sic_digits))

        peer_keys = [COL_PEER_GROUP, COL_FISCAL_YEAR, COL_FISCAL_QUARTER]
        period_keys = [COL_FISCAL_YEAR, COL_FISCAL_QUARTER]
        fallback_rows = 0

        for col in RATIO_COLUMNS:
            peer = df.groupby(peer_keys)[col]
            peer_median = peer.transform('median')
            peer_count = peer.transform('count')
            period_median = df.groupby(period_keys)[col].transform('median')

            use_peer = peer_count >= self.min_peer_count
            fallback_rows += int((~use_peer & df[col].notna()).sum())
            df[col] = df[col] - peer_median.where(use_peer, period_median)

        if fallback_rows:
            logger.info(
                f"Cross-industry median used for {fallback_rows:,} ratio values "
                f"(peer groups below {self.min_peer_count})"
            )
        return df
