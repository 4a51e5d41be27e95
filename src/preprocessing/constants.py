"""
Transcript Preprocessing Constants

Column names, headline patterns and call-specific stopwords used by the
transcript metadata normalizer and the transcript text normalizer.
"""

import re
from typing import Dict, List, Pattern

# ===========================
# Column Names
# ===========================
COL_TRANSCRIPT_ID = "transcript_id"
COL_COMPANY_ID = "company_id"
COL_EVENT_ID = "event_id"
COL_HEADLINE = "headline"
COL_CALL_DATE = "call_date"
COL_CREATED_AT = "created_at"
COL_PRESENTATION_TYPE = "presentation_type"
COL_FISCAL_YEAR = "fiscal_year"
COL_FISCAL_QUARTER = "fiscal_quarter"

COL_COMPONENT_TYPE = "component_type"
COL_COMPONENT_TEXT = "component_text"

METADATA_REQUIRED_COLUMNS: List[str] = [
    COL_TRANSCRIPT_ID,
    COL_COMPANY_ID,
    COL_EVENT_ID,
    COL_HEADLINE,
    COL_CALL_DATE,
]

COMPONENT_REQUIRED_COLUMNS: List[str] = [
    COL_TRANSCRIPT_ID,
    COL_COMPONENT_TYPE,
    COL_COMPONENT_TEXT,
]

NORMALIZED_METADATA_COLUMNS: List[str] = [
    COL_TRANSCRIPT_ID,
    COL_COMPANY_ID,
    COL_EVENT_ID,
    COL_FISCAL_YEAR,
    COL_FISCAL_QUARTER,
    COL_CALL_DATE,
    COL_HEADLINE,
]

# ===========================
# Headline Parsing
# ===========================
ORDINAL_QUARTERS: Dict[str, int] = {
    "first": 1,
    "second": 2,
    "third": 3,
    "fourth": 4,
    "1st": 1,
    "2nd": 2,
    "3rd": 3,
    "4th": 4,
}

# "and Full Year", "and First Half", "and Half Year", "and Fiscal Year"
_COMBINED_PERIOD = (
    r"(?:and\s+(?:(?:full|first\s+half|half)\s*)?(?:fiscal\s+)?(?:year)?\s+)?"
)
# "Fiscal", "Fiscal Year", "FY"
_FISCAL_MARKER = r"(?:fiscal\s+(?:year\s+)?|f\s*y\s*)?"
_YEAR = r"'?(\d{4}|\d{2})\b"

# "Q3 2015", "Q3 FY2015", "FQ3 2015", "Q3 Fiscal 2015", "Q4 and Full Year 2015", "Q3-2015"
QUARTER_FIRST_PATTERN: Pattern = re.compile(
    r"\bF?Q([1-4])\s*[-,]?\s*" + _COMBINED_PERIOD + _FISCAL_MARKER + _YEAR,
    re.IGNORECASE,
)

# "3Q15", "3Q 2015", "4Q and Full Year 2015"
NUMBER_FIRST_PATTERN: Pattern = re.compile(
    r"\b([1-4])Q\s*" + _COMBINED_PERIOD + _FISCAL_MARKER + _YEAR,
    re.IGNORECASE,
)

# "Third Quarter 2015", "3rd Quarter Fiscal 2015", "Second Quarter and Half Year 2015"
ORDINAL_PATTERN: Pattern = re.compile(
    r"\b(first|second|third|fourth|1st|2nd|3rd|4th)\s+quarter\s*,?\s*"
    + _COMBINED_PERIOD + r"(?:of\s+)?" + _FISCAL_MARKER + _YEAR,
    re.IGNORECASE,
)

TWO_DIGIT_YEAR_PIVOT = 50
"""Two-digit years at or above the pivot map to 19xx, below it to 20xx"""

UNRANKED_PRESENTATION_TYPE = 0
"""Rank given to versions whose presentation type is not in the configured ranking"""

MISSING_PRESENTATION_TYPE_RANK = -1
"""Rank given to versions with no presentation type at all"""

# ===========================
# Call Boilerplate Stopwords
# ===========================
# Terms present in virtually every earnings call; they carry no topic signal.
CALL_STOPWORDS: List[str] = [
    # Call mechanics
    "operator", "call", "conference", "question", "questions", "answer",
    "line", "lines", "queue", "please", "thank", "thanks", "welcome",
    "morning", "afternoon", "evening", "today", "everyone", "ladies",
    "gentlemen", "go", "ahead", "next", "open", "floor", "remarks",
    # Safe harbor boilerplate
    "forward", "looking", "statements", "safe", "harbor", "risks",
    "uncertainties", "reconciliation", "webcast", "replay", "website",
    # Filler
    "yeah", "okay", "right", "um", "uh", "know", "think", "guess",
    "really", "lot", "kind", "sort", "just", "maybe", "actually", "bit",
    "quarter", "quarters", "year", "years",
]

URL_PATTERN: Pattern = re.compile(r"(?:https?://|www\.)\S+", re.IGNORECASE)
DIGIT_PATTERN: Pattern = re.compile(r"\d")

# ===========================
# Persistence
# ===========================
DTM_DICTIONARY_FILENAME = "dtm_dictionary.gensim"
DTM_CORPUS_FILENAME = "dtm_corpus.mm"
DTM_DOCUMENT_IDS_FILENAME = "dtm_document_ids.json"
