"""Stage-runner tests on a synthetic project under tmp_path.

Covers src/pipeline/stages.py and the CLI in src/pipeline/__main__.py.
Topic counts, pruning thresholds and grids are shrunk through settings so
every stage finishes in seconds.
"""

import sys

import numpy as np
import pandas as pd
import pytest

from src.config import settings
from src.features.financial_ratios.constants import RATIO_COLUMNS
from src.pipeline import run_stage
from src.pipeline import __main__ as cli
from src.pipeline.stages import document_topics_path, ratios_path, transcripts_path
from src.utils.frames import read_table, write_table

FINANCE_TEXT = "Revenue growth and pricing lifted retail margins while revenue accelerated."
TECH_TEXT = "Cloud software subscriptions grew as server capacity expanded for software demand."


@pytest.fixture
def small_settings(monkeypatch):
    monkeypatch.setattr(settings.topic_modeling.model, "num_topics", 2)
    monkeypatch.setattr(settings.topic_modeling.model, "passes", 2)
    monkeypatch.setattr(settings.topic_modeling.model, "iterations", 20)
    monkeypatch.setattr(settings.topic_modeling.preprocessing, "no_below", 1)
    monkeypatch.setattr(settings.topic_modeling.preprocessing, "no_above", 1.0)
    monkeypatch.setattr(settings.topic_modeling.evaluation, "compute_coherence", False)
    monkeypatch.setattr(settings.modeling, "algorithms", ["knn"])
    monkeypatch.setattr(settings.modeling, "knn_grid", {"n_neighbors": [3], "weights": ["uniform"]})
    monkeypatch.setattr(settings.modeling, "cv_folds", 2)
    monkeypatch.setattr(settings.modeling, "n_jobs", 1)
    monkeypatch.setattr(settings.modeling, "permutation_repeats", 1)


@pytest.fixture
def raw_inputs(tmp_project, small_settings, make_fundamentals):
    """Eight companies with four 2015 calls each, plus fundamentals, links and one AAER."""
    raw_dir = settings.paths.raw_data_dir
    metadata, components = [], []
    for i in range(8):
        for quarter in range(1, 5):
            transcript_id = 1000 + 10 * i + quarter
            metadata.append({
                "transcript_id": transcript_id,
                "company_id": 100 + i,
                "event_id": transcript_id,
                "headline": f"Company {i} Q{quarter} 2015 Earnings Call",
                "call_date": f"2015-{3 * quarter:02d}-20",
            })
            components.append((transcript_id, "operator", "Welcome to the call."))
            components.append((transcript_id, "presenter", FINANCE_TEXT if i % 2 == 0 else TECH_TEXT))

    write_table(pd.DataFrame(metadata), raw_dir / settings.inputs.transcript_metadata)
    write_table(
        pd.DataFrame(components, columns=["transcript_id", "component_type", "component_text"]),
        raw_dir / settings.inputs.transcript_components,
    )

    firms = [(i + 1, 2834 if i < 6 else 7372) for i in range(8)]
    write_table(make_fundamentals(firms), raw_dir / settings.inputs.fundamentals)
    write_table(
        pd.DataFrame({
            "company_id": [100 + i for i in range(8)],
            "cik": [i + 1 for i in range(8)],
            "start_date": "2000-01-01",
            "end_date": None,
        }),
        raw_dir / settings.inputs.company_links,
    )
    write_table(
        pd.DataFrame({"cik": [1], "fiscal_year": [2015], "fiscal_quarter": [2]}),
        raw_dir / settings.inputs.aaer,
    )
    return raw_dir


class TestStages:
    def test_transcripts_stage(self, raw_inputs):
        run_stage("transcripts")
        assert len(read_table(transcripts_path())) == 32

    def test_text_and_topics_stages(self, raw_inputs):
        run_stage("transcripts")
        run_stage("text")
        run_stage("topics")

        doc_topics = read_table(document_topics_path())
        assert len(doc_topics) == 32
        np.testing.assert_allclose(doc_topics[["topic_0", "topic_1"]].sum(axis=1), 1.0)
        assert (settings.paths.lda_model_dir / "topic_top_terms.json").exists()

    def test_ratios_stage(self, raw_inputs):
        run_stage("ratios")
        ratios = read_table(ratios_path())
        assert len(ratios) == 64
        assert ratios.loc[ratios["fiscal_year"] == 2015, RATIO_COLUMNS].notna().all().all()

    def test_link_stage(self, raw_inputs):
        for stage in ("transcripts", "text", "topics", "ratios", "link"):
            run_stage(stage)

        table = read_table(settings.paths.analytic_table_path)
        assert len(table) == 32
        assert table["misstatement"].sum() == 1
        assert {"sic_division", "topic_0", "topic_1"} <= set(table.columns)

    def test_models_stage(self, tmp_project, small_settings, synthetic_sample):
        write_table(synthetic_sample.frame, settings.paths.analytic_table_path)
        evaluations = run_stage("models", workers=1)

        assert [e.algorithm for e in evaluations] == ["knn"]
        runs = list(settings.paths.experiments_dir.iterdir())
        assert len(runs) == 1
        assert (runs[0] / "knn_pipeline.joblib").exists()

    def test_unknown_stage(self):
        with pytest.raises(ValueError):
            run_stage("deploy")


class TestCli:
    def test_missing_inputs_exit_non_zero(self, tmp_project, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["src.pipeline", "--stage", "transcripts"])
        with pytest.raises(SystemExit) as exc:
            cli.main()
        assert exc.value.code == 1

    def test_invalid_stage_rejected_by_argparse(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["src.pipeline", "--stage", "deploy"])
        with pytest.raises(SystemExit) as exc:
            cli.main()
        assert exc.value.code == 2
