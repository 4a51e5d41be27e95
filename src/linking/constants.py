"""
Record Linker Constants

Column names of the link and AAER tables and the SIC division map.
"""

from typing import List, Tuple

COL_CIK = "cik"
COL_LINK_START = "start_date"
COL_LINK_END = "end_date"
COL_MISSTATEMENT_BEGIN = "misstatement_begin"
COL_MISSTATEMENT_END = "misstatement_end"
COL_SIC_DIVISION = "sic_division"

LINK_REQUIRED_COLUMNS: List[str] = ["company_id", COL_CIK, COL_LINK_START, COL_LINK_END]
AAER_PERIOD_COLUMNS: List[str] = [COL_CIK, "fiscal_year", "fiscal_quarter"]
AAER_RANGE_COLUMNS: List[str] = [COL_CIK, COL_MISSTATEMENT_BEGIN, COL_MISSTATEMENT_END]

CATEGORICAL_COLUMNS: List[str] = ["fiscal_quarter", COL_SIC_DIVISION]

# (first 2-digit SIC, last 2-digit SIC, division)
SIC_DIVISIONS: List[Tuple[int, int, str]] = [
    (1, 9, "agriculture"),
    (10, 14, "mining"),
    (15, 17, "construction"),
    (20, 39, "manufacturing"),
    (40, 49, "transportation_utilities"),
    (50, 51, "wholesale"),
    (52, 59, "retail"),
    (60, 67, "finance"),
    (70, 89, "services"),
    (91, 97, "public_administration"),
    (99, 99, "nonclassifiable"),
]

UNKNOWN_SIC_DIVISION = "unknown"
