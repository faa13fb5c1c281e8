# designz_loader/utils/parser.py
import io
import re
from typing import List

import pandas as pd

_WHITESPACE = re.compile(r"\s+")


def parse_xlsx(data: bytes) -> List[List[str]]:
    """First worksheet as a list of rows, every cell as a string ("" when empty)."""
    # Folder names like "NA" or "null" must survive as text
    df = pd.read_excel(
        io.BytesIO(data),
        sheet_name=0,
        header=None,
        dtype=str,
        engine="openpyxl",
        keep_default_na=False,
        na_filter=False,
    )
    df = df.fillna("")
    return [[str(cell) for cell in row] for row in df.values.tolist()]


def normalize_header(cell) -> str:
    # "Folder Name (must match the zip folder)" -> "folder_name"
    text = str(cell).split("(", 1)[0].strip().lower()
    return _WHITESPACE.sub("_", text)


def trim_trailing_empty(cells: List[str]) -> List[str]:
    end = len(cells)
    while end and not str(cells[end - 1]).strip():
        end -= 1
    return list(cells[:end])
