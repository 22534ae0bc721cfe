from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Sequence, Tuple

import pandas as pd

from nl_explorer.bedrock.translation import TranslationResult

Row = Tuple[Optional[str], ...]


@dataclass(frozen=True)
class ResultTable:
    """Normalized query result: ordered column labels and rows of string cells.

    Cells are ``str`` or ``None`` for SQL NULL. Every row has exactly one cell
    per column, including when there are no rows at all.
    """

    columns: Tuple[str, ...]
    rows: Tuple[Row, ...] = ()
    translation: Optional[TranslationResult] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "rows", tuple(tuple(r) for r in self.rows))
        width = len(self.columns)
        for i, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(f"Row {i} has {len(row)} values but there are {width} columns")

    @classmethod
    def from_rows(cls, columns: Sequence[str], rows: Sequence[Sequence[Optional[str]]]) -> "ResultTable":
        return cls(columns=tuple(columns), rows=tuple(tuple(r) for r in rows))

    def with_translation(self, translation: TranslationResult) -> "ResultTable":
        return replace(self, translation=translation)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": list(self.columns),
            "rows": [list(r) for r in self.rows],
            "translation": self.translation.to_dict() if self.translation else None,
        }

    def to_frame(self) -> pd.DataFrame:
        # Duplicate labels are allowed (e.g. SELECT a.id, b.id)
        return pd.DataFrame([list(r) for r in self.rows], columns=list(self.columns))


def cell_to_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "\\x" + bytes(value).hex()
    return str(value)
