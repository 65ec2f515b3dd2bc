from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List

import pandas as pd

from painpoint_miner.sources import hn_comment_text
from painpoint_miner.tokenizer import PARAGRAPH_SEPARATOR

COMMENT_COLUMNS = ("comment_text", "comment", "text", "body", "Description")


def read_comments_csv(csv_path: str | Path) -> List[str]:
    """
    Reads one comment per row from a CSV.
    - Uses pandas 'python' engine to tolerate messy quoting
    - Skips malformed lines (pandas will warn)
    - Takes the first known comment column present
    """
    df = pd.read_csv(csv_path, engine="python", on_bad_lines="warn")

    column = next((c for c in COMMENT_COLUMNS if c in df.columns), None)
    if column is None:
        raise ValueError(
            "No comment column in CSV. Expected one of: "
            + ", ".join(COMMENT_COLUMNS)
            + f"\nFound columns: {list(df.columns)}"
        )

    texts = df[column].dropna().astype(str).str.strip()
    return [t for t in texts if t]


def _comment_from_item(item: Any) -> str:
    if isinstance(item, str):
        return item.strip()
    if isinstance(item, dict):
        if item.get("comment_text"):
            return hn_comment_text(str(item["comment_text"]))
        for key in ("comment", "text", "body"):
            if item.get(key):
                return str(item[key]).strip()
    return ""


def read_comments_json(json_path: str | Path) -> List[str]:
    """
    Accepts a list of strings, a list of objects with a comment field, or an
    HN/Algolia search response (`hits`).
    """
    with Path(json_path).open("r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("hits", data.get("comments", []))
    if not isinstance(data, list):
        raise ValueError(f"Unsupported JSON layout in {json_path}")

    return [c for c in (_comment_from_item(x) for x in data) if c]


def read_content(path: str | Path) -> str:
    """
    Loads content to analyze. CSV and JSON inputs become one paragraph per
    comment; any other file is read as text.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        return PARAGRAPH_SEPARATOR.join(read_comments_csv(path))
    if suffix == ".json":
        return PARAGRAPH_SEPARATOR.join(read_comments_json(path))
    return path.read_text(encoding="utf-8")
