"""Unit tests for src/utils/frames.py."""

import pandas as pd
import pytest

from src.utils.frames import read_table, require_columns, write_table


@pytest.fixture
def frame() -> pd.DataFrame:
    return pd.DataFrame({"cik": [1, 2], "fiscal_year": [2015, 2016], "dsri": [1.1, 0.9]})


class TestRequireColumns:
    def test_present(self, frame):
        require_columns(frame, ["cik", "dsri"])

    def test_lists_every_missing_column(self, frame):
        with pytest.raises(ValueError, match="fundamentals is missing required columns: atq, saleq"):
            require_columns(frame, ["cik", "atq", "saleq"], "fundamentals")


class TestReadWriteTable:
    @pytest.mark.parametrize("filename", ["table.csv", "table.parquet"])
    def test_suffix_selects_format(self, frame, tmp_path, filename):
        path = write_table(frame, tmp_path / "nested" / filename)
        assert path.exists()
        pd.testing.assert_frame_equal(read_table(path), frame)

    def test_index_not_written(self, frame, tmp_path):
        path = write_table(frame.set_index("cik"), tmp_path / "table.csv")
        assert list(read_table(path).columns) == ["fiscal_year", "dsri"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_table(tmp_path / "absent.csv")
