"""
Lightweight fixtures for unit tests - NO real data dependencies.
All fixtures use synthetic frames that build in well under a second.
"""

from collections import Counter

import numpy as np
import pandas as pd
import pytest

from src.features.financial_ratios.constants import RATIO_COLUMNS, RAW_FUNDAMENTAL_COLUMNS
from src.linking import LinkedSample


# =============================================================================
# Transcript Fixtures
# =============================================================================

@pytest.fixture
def raw_metadata() -> pd.DataFrame:
    """
    Transcript headers covering version dedup, unparseable headlines,
    two events in one quarter and a call outside the sample window.

    Expected survivors: 2 (audited beats preliminary), 3, 6 (later call).
    """
    return pd.DataFrame(
        [
            (1, 100, 1, "Acme Corp, Q1 2015 Earnings Call, Apr 20, 2015", "2015-04-20", "Preliminary", "2015-04-20 18:00"),
            (2, 100, 1, "Acme Corp, Q1 2015 Earnings Call, Apr 20, 2015", "2015-04-20", "Audited", "2015-04-25 09:00"),
            (3, 100, 2, "Acme Corp Second Quarter 2015 Results", "2015-07-20", "Edited", "2015-07-21 09:00"),
            (4, 200, 3, "Beta Inc Annual Shareholder Meeting", "2015-05-01", "Edited", "2015-05-02 09:00"),
            (5, 200, 4, "Beta Inc 3Q15 Earnings Call", "2015-10-20", "Edited", "2015-10-21 09:00"),
            (6, 200, 5, "Beta Inc Q3 2015 Earnings Call (corrected)", "2015-10-25", "Edited", "2015-10-26 09:00"),
            (7, 300, 6, "Gamma Ltd Q4 2005 Earnings Call", "2006-02-01", "Audited", "2006-02-02 09:00"),
        ],
        columns=[
            "transcript_id", "company_id", "event_id", "headline",
            "call_date", "presentation_type", "created_at",
        ],
    )


@pytest.fixture
def raw_components() -> pd.DataFrame:
    """Component text for three transcripts, including operator noise."""
    return pd.DataFrame(
        [
            (2, "operator", "Good morning and welcome to the Acme conference call."),
            (2, "presenter", "Revenue growth was driven by strong pricing and margins."),
            (2, "answer", "Our margins expanded as revenue growth accelerated in retail."),
            (3, "presenter", "Cloud software subscriptions and server capacity grew."),
            (3, "question", "How is cloud capacity tracking against software demand?"),
            (6, "presenter", "Inventory writedowns and restructuring charges weighed on margins."),
            (6, "operator", "Please press star one to ask a question."),
        ],
        columns=["transcript_id", "component_type", "component_text"],
    )


@pytest.fixture(scope="module")
def two_theme_term_counts() -> dict:
    """
    Stemmed term counts for twelve transcripts drawn from two themes.
    Every term appears in several documents so nothing is pruned at no_below=2.
    """
    finance = ["revenu", "margin", "growth", "price", "retail"]
    tech = ["cloud", "softwar", "server", "capac", "subscript"]
    counts = {}
    for doc_id in range(12):
        theme, other = (finance, tech) if doc_id % 2 == 0 else (tech, finance)
        terms = Counter({term: 5 + (doc_id % 3) for term in theme})
        terms[other[doc_id % len(other)]] += 1
        counts[1000 + doc_id] = terms
    return counts


# =============================================================================
# Fundamentals Fixtures
# =============================================================================

def _fundamentals_row(cik, year, quarter, sic, scale=1.0, datadate=None):
    base = {
        "atq": 100.0, "actq": 40.0, "cheq": 10.0, "lctq": 20.0, "dlcq": 5.0,
        "txpq": 2.0, "dlttq": 30.0, "ppentq": 30.0, "rectq": 20.0, "saleq": 50.0,
        "cogsq": 30.0, "xsgaq": 10.0, "dpq": 5.0, "niq": 8.0, "oancfq": 6.0,
    }
    row = {field: value * scale for field, value in base.items()}
    row.update({
        "cik": cik,
        "fiscal_year": year,
        "fiscal_quarter": quarter,
        "sic": sic,
        "datadate": datadate or f"{year}-{3 * quarter:02d}-28",
    })
    return row


@pytest.fixture
def make_fundamentals():
    """Factory: quarterly fundamentals for (cik, sic) firms over a span of years."""
    def _make(firms, years=(2014, 2015), skip=()):
        rng = np.random.default_rng(7)
        rows = []
        for cik, sic in firms:
            for year in years:
                for quarter in range(1, 5):
                    if (cik, year, quarter) in skip:
                        continue
                    scale = 1.0 + 0.1 * (year - years[0]) + rng.uniform(0.0, 0.2)
                    rows.append(_fundamentals_row(cik, year, quarter, sic, scale=scale))
        return pd.DataFrame(rows)
    return _make


@pytest.fixture
def ratio_pair() -> pd.DataFrame:
    """
    One firm quarter with hand-picked current and lag fundamentals, in the
    layout produced by attach_lags.
    """
    current = {
        "atq": 100.0, "actq": 40.0, "cheq": 10.0, "lctq": 20.0, "dlcq": 5.0,
        "txpq": 2.0, "dlttq": 30.0, "ppentq": 30.0, "rectq": 20.0, "saleq": 50.0,
        "cogsq": 30.0, "xsgaq": 10.0, "dpq": 5.0, "niq": 8.0, "oancfq": 6.0,
    }
    lag = {
        "atq": 80.0, "actq": 30.0, "cheq": 8.0, "lctq": 16.0, "dlcq": 4.0,
        "txpq": 1.0, "dlttq": 24.0, "ppentq": 25.0, "rectq": 10.0, "saleq": 40.0,
        "cogsq": 20.0, "xsgaq": 10.0, "dpq": 5.0, "niq": 4.0, "oancfq": 5.0,
    }
    row = {"cik": 1, "fiscal_year": 2015, "fiscal_quarter": 1, "sic": 2834, "lag_valid": True}
    row.update(current)
    row.update({f"{field}_lag": lag[field] for field in RAW_FUNDAMENTAL_COLUMNS})
    return pd.DataFrame([row])


# =============================================================================
# Linker Fixtures
# =============================================================================

@pytest.fixture
def normalized_transcripts() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "transcript_id": [11, 12, 13, 14],
            "company_id": [100, 100, 200, 300],
            "event_id": [1, 2, 3, 4],
            "fiscal_year": [2015, 2015, 2015, 2015],
            "fiscal_quarter": [1, 2, 1, 1],
            "call_date": pd.to_datetime(["2015-04-20", "2015-07-20", "2015-04-22", "2015-04-23"]),
            "headline": ["a", "b", "c", "d"],
        }
    )


@pytest.fixture
def company_links() -> pd.DataFrame:
    """
    Company 100 changes CIK mid-2015; company 200 has two overlapping
    open-ended links (the later start wins); company 300 has none.
    """
    return pd.DataFrame(
        {
            "company_id": [100, 100, 200, 200],
            "cik": [1, 9, 2, 22],
            "start_date": ["2010-01-01", "2015-07-01", "2000-01-01", "2012-01-01"],
            "end_date": ["2015-06-30", None, None, None],
        }
    )


@pytest.fixture
def linked_ratios() -> pd.DataFrame:
    rows = []
    for cik, year, quarter, sic in [(1, 2015, 1, 2834), (9, 2015, 2, 2834), (22, 2015, 1, 6021)]:
        row = {"cik": cik, "fiscal_year": year, "fiscal_quarter": quarter, "sic": sic}
        row.update({col: 0.1 for col in RATIO_COLUMNS})
        rows.append(row)
    return pd.DataFrame(rows)


@pytest.fixture
def document_topics() -> pd.DataFrame:
    return pd.DataFrame(
        {"topic_0": [0.7, 0.2, 0.5, 0.9], "topic_1": [0.3, 0.8, 0.5, 0.1]},
        index=pd.Index([11, 12, 13, 14], name="transcript_id"),
    )


@pytest.fixture
def aaer_quarters() -> pd.DataFrame:
    return pd.DataFrame({"cik": ["0000000022"], "fiscal_year": [2015], "fiscal_quarter": [1]})


# =============================================================================
# Modeling Fixtures
# =============================================================================

@pytest.fixture
def synthetic_sample() -> LinkedSample:
    """
    240 firm quarters, 20% misstatements. dsri and topic_0 carry signal,
    everything else is noise.
    """
    rng = np.random.default_rng(42)
    n = 240
    y = np.zeros(n, dtype=int)
    y[: n // 5] = 1
    rng.shuffle(y)

    frame = pd.DataFrame({col: rng.normal(size=n) for col in RATIO_COLUMNS})
    frame["dsri"] += 3.0 * y
    topic_0 = np.clip(0.3 + 0.4 * y + rng.normal(scale=0.05, size=n), 0.01, 0.99)
    frame["topic_0"] = topic_0
    frame["topic_1"] = 1.0 - topic_0
    frame["fiscal_quarter"] = rng.integers(1, 5, size=n)
    frame["sic_division"] = rng.choice(["manufacturing", "services", "finance"], size=n)
    frame["misstatement"] = y
    return LinkedSample.from_frame(frame, label_column="misstatement")


@pytest.fixture
def tiny_grids() -> dict:
    return {
        "elastic_net": {"C": [1.0], "l1_ratio": [0.5]},
        "random_forest": {"max_features": [3], "min_samples_leaf": [1]},
        "knn": {"n_neighbors": [5], "weights": ["uniform"]},
    }
