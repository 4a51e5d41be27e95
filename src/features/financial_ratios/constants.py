"""
Financial Ratio Constants

Column names for the quarterly fundamentals table (Compustat mnemonics)
and the ten derived ratios.
"""

from typing import List

# ===========================
# Keys and descriptors
# ===========================
COL_CIK = "cik"
COL_FISCAL_YEAR = "fiscal_year"
COL_FISCAL_QUARTER = "fiscal_quarter"
COL_SIC = "sic"
COL_DATADATE = "datadate"

KEY_COLUMNS: List[str] = [COL_CIK, COL_FISCAL_YEAR, COL_FISCAL_QUARTER]

QUARTERS_PER_YEAR = 4
"""Same quarter of the previous fiscal year is this many periods back"""

# ===========================
# Raw quarterly fundamentals
# ===========================
RAW_FUNDAMENTAL_COLUMNS: List[str] = [
    "atq",     # total assets
    "actq",    # current assets
    "cheq",    # cash and short-term investments
    "lctq",    # current liabilities
    "dlcq",    # debt in current liabilities
    "txpq",    # income taxes payable
    "dlttq",   # long-term debt
    "ppentq",  # net property, plant and equipment
    "rectq",   # receivables
    "saleq",   # sales
    "cogsq",   # cost of goods sold
    "xsgaq",   # selling, general and administrative expense
    "dpq",     # depreciation and amortization
    "niq",     # net income
    "oancfq",  # operating cash flow
]

REQUIRED_COLUMNS: List[str] = KEY_COLUMNS + [COL_SIC, COL_DATADATE] + RAW_FUNDAMENTAL_COLUMNS

LAG_SUFFIX = "_lag"
COL_LAG_VALID = "lag_valid"
COL_PEER_GROUP = "sic_group"

# ===========================
# Derived ratios
# ===========================
RATIO_COLUMNS: List[str] = [
    "dsri",         # days sales in receivables index
    "gmi",          # gross margin index
    "aqi",          # asset quality index
    "sgi",          # sales growth index
    "depi",         # depreciation index
    "sgai",         # SG&A expense index
    "lvgi",         # leverage index
    "tata",         # total accruals to total assets
    "wc_accruals",  # working capital accruals
    "ch_roa",       # change in return on assets
]

OUTPUT_COLUMNS: List[str] = KEY_COLUMNS + [COL_SIC] + RATIO_COLUMNS


def lag_column(column: str) -> str:
    return f"{column}{LAG_SUFFIX}"
