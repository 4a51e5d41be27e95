"""
Financial ratio features.

Ten year-over-year ratios (dsri, gmi, aqi, sgi, depi, sgai, lvgi, tata,
wc_accruals, ch_roa), winsorized and adjusted by industry peer medians.
"""

from .calculator import FinancialRatioCalculator
from .constants import (
    KEY_COLUMNS,
    RATIO_COLUMNS,
    RAW_FUNDAMENTAL_COLUMNS,
    OUTPUT_COLUMNS,
)

__all__ = [
    "FinancialRatioCalculator",
    "KEY_COLUMNS",
    "RATIO_COLUMNS",
    "RAW_FUNDAMENTAL_COLUMNS",
    "OUTPUT_COLUMNS",
]
