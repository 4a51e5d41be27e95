"""Unit tests for src/preprocessing/transcript_metadata.py."""

import pandas as pd
import pytest

from src.preprocessing.transcript_metadata import (
    TranscriptMetadataNormalizer,
    parse_fiscal_period,
)


@pytest.fixture
def normalizer() -> TranscriptMetadataNormalizer:
    return TranscriptMetadataNormalizer(sample_start_year=2008, sample_end_year=2019)


# ---------------------------------------------------------------------------
# parse_fiscal_period
# ---------------------------------------------------------------------------

class TestParseFiscalPeriod:
    @pytest.mark.parametrize("headline, expected", [
        ("Apple Inc., Q3 2015 Earnings Call, Jul 21, 2015", (2015, 3)),
        ("Microsoft Q2 FY2016 Earnings Call", (2016, 2)),
        ("Oracle FQ4 2014 Results", (2014, 4)),
        ("Nike 3Q15 Earnings Conference Call", (2015, 3)),
        ("Intel Corp - Fourth Quarter 2012 Results", (2012, 4)),
        ("Cisco 1st Quarter Fiscal 2011 Earnings", (2011, 1)),
        ("Deere Second Quarter and Full Year 2013 Call", (2013, 2)),
        ("Acme Q4 and Full Year 2015 Earnings Call", (2015, 4)),
        ("Acme Q1 Fiscal 2016 Earnings Call", (2016, 1)),
        ("Acme Q3 Fiscal Year 2015 Earnings Call", (2015, 3)),
        ("Acme Q2 and First Half 2015 Results", (2015, 2)),
        ("Acme Second Quarter and Half Year 2015 Results", (2015, 2)),
        ("Acme 4Q and Full Year 2014 Earnings Call", (2014, 4)),
    ])
    def test_recognised_formats(self, headline, expected):
        assert parse_fiscal_period(headline) == expected

    def test_two_digit_year_below_pivot_is_2000s(self):
        assert parse_fiscal_period("Q1 09 Earnings Call") == (2009, 1)

    def test_two_digit_year_at_pivot_is_1900s(self):
        assert parse_fiscal_period("Q4 98 Earnings Call") == (1998, 4)

    @pytest.mark.parametrize("headline", [
        "Annual General Meeting of Shareholders",
        "2015 Investor Day",
        "First Half 2015 Results",
        "H1 2015 Results",
        "Annual 2015 Guidance Call",
        "Full Year 2015 Guidance Update",
        "",
        None,
    ])
    def test_no_quarter_returns_none(self, headline):
        assert parse_fiscal_period(headline) is None


# ---------------------------------------------------------------------------
# TranscriptMetadataNormalizer
# ---------------------------------------------------------------------------

class TestNormalize:
    def test_expected_survivors(self, normalizer, raw_metadata):
        result = normalizer.normalize(raw_metadata)
        assert sorted(result["transcript_id"]) == [2, 3, 6]

    def test_one_row_per_company_quarter(self, normalizer, raw_metadata):
        result = normalizer.normalize(raw_metadata)
        assert not result.duplicated(["company_id", "fiscal_year", "fiscal_quarter"]).any()

    def test_periods_attached(self, normalizer, raw_metadata):
        result = normalizer.normalize(raw_metadata).set_index("transcript_id")
        assert (result.loc[3, "fiscal_year"], result.loc[3, "fiscal_quarter"]) == (2015, 2)
        assert (result.loc[6, "fiscal_year"], result.loc[6, "fiscal_quarter"]) == (2015, 3)

    def test_missing_column_raises(self, normalizer, raw_metadata):
        with pytest.raises(ValueError, match="headline"):
            normalizer.normalize(raw_metadata.drop(columns=["headline"]))

    def test_empty_window_rejected(self):
        with pytest.raises(ValueError):
            TranscriptMetadataNormalizer(sample_start_year=2020, sample_end_year=2010)


class TestDeduplicateVersions:
    def test_presentation_rank_beats_recency(self, normalizer):
        df = pd.DataFrame({
            "transcript_id": [1, 2],
            "event_id": [10, 10],
            "presentation_type": ["Audited", "Preliminary"],
            "created_at": ["2015-01-01", "2015-02-01"],
        })
        assert normalizer.deduplicate_versions(df)["transcript_id"].tolist() == [1]

    def test_recency_breaks_rank_ties(self, normalizer):
        df = pd.DataFrame({
            "transcript_id": [1, 2],
            "event_id": [10, 10],
            "presentation_type": ["Edited", "Edited"],
            "created_at": ["2015-03-01", "2015-02-01"],
        })
        assert normalizer.deduplicate_versions(df)["transcript_id"].tolist() == [1]

    def test_transcript_id_breaks_remaining_ties(self, normalizer):
        df = pd.DataFrame({"transcript_id": [1, 2], "event_id": [10, 10]})
        assert normalizer.deduplicate_versions(df)["transcript_id"].tolist() == [2]


class TestEnforceOnePerQuarter:
    def test_latest_call_wins(self, normalizer):
        df = pd.DataFrame({
            "transcript_id": [1, 2],
            "company_id": [5, 5],
            "fiscal_year": [2015, 2015],
            "fiscal_quarter": [1, 1],
            "call_date": pd.to_datetime(["2015-04-01", "2015-04-15"]),
        })
        assert normalizer.enforce_one_per_quarter(df)["transcript_id"].tolist() == [2]


class TestFilterSampleWindow:
    def test_bounds_inclusive(self, normalizer):
        df = pd.DataFrame({"fiscal_year": [2007, 2008, 2019, 2020]})
        assert normalizer.filter_sample_window(df)["fiscal_year"].tolist() == [2008, 2019]


class TestVersionPreference:
    def test_unlisted_type_beats_missing_type(self, normalizer):
        df = pd.DataFrame({
            "transcript_id": [1, 2],
            "event_id": [10, 10],
            "presentation_type": ["Other", None],
            "created_at": ["2015-01-01", "2015-02-01"],
        })
        assert normalizer.deduplicate_versions(df)["transcript_id"].tolist() == [1]

    def test_blank_type_counts_as_missing(self, normalizer):
        df = pd.DataFrame({
            "transcript_id": [1, 2],
            "event_id": [10, 10],
            "presentation_type": ["Other", "  "],
            "created_at": ["2015-01-01", "2015-02-01"],
        })
        assert normalizer.deduplicate_versions(df)["transcript_id"].tolist() == [1]

    def test_parseable_version_survives_unparseable_preferred_one(self, normalizer):
        raw = pd.DataFrame({
            "transcript_id": [1, 2],
            "company_id": [100, 100],
            "event_id": [10, 10],
            "headline": ["Acme Corp Earnings Call", "Acme Corp Q2 2015 Earnings Call"],
            "call_date": ["2015-07-20", "2015-07-20"],
            "presentation_type": ["Audited", "Preliminary"],
        })
        result = normalizer.normalize(raw)
        assert result["transcript_id"].tolist() == [2]
        assert (result.loc[0, "fiscal_year"], result.loc[0, "fiscal_quarter"]) == (2015, 2)
