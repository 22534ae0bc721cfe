import pandas as pd
import pytest

from nl_explorer.bedrock.translation import TranslationResult
from nl_explorer.db.result import ResultTable, cell_to_str


def test_row_width_must_match_columns():
    with pytest.raises(ValueError, match="Row 1"):
        ResultTable.from_rows(["a", "b"], [["1", "2"], ["3"]])


def test_zero_rows_is_valid():
    table = ResultTable.from_rows(["a"], [])
    assert table.columns == ("a",)
    assert table.rows == ()
    assert table.to_dict() == {"columns": ["a"], "rows": [], "translation": None}


def test_with_translation_returns_new_table():
    table = ResultTable.from_rows(["n"], [["1"]])
    tr = TranslationResult(explanation="counts", query="SELECT 1 AS n")
    out = table.with_translation(tr)
    assert out.translation is tr
    assert table.translation is None
    assert out.to_dict()["translation"] == {"query": "SELECT 1 AS n", "explanation": "counts"}


def test_to_frame_keeps_nulls_and_duplicate_labels():
    df = ResultTable.from_rows(["id", "id"], [["1", None]]).to_frame()
    assert list(df.columns) == ["id", "id"]
    assert df.iloc[0, 0] == "1"
    assert pd.isna(df.iloc[0, 1])


@pytest.mark.parametrize(
    "value,expected",
    [(None, None), (42, "42"), ("x", "x"), (True, "True"), (b"\x01\xff", "\\x01ff"), (memoryview(b"ab"), "\\x6162")],
)
def test_cell_to_str(value, expected):
    assert cell_to_str(value) == expected
