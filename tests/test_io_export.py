"""Tests for reading input files and exporting saved analyses."""

import json

import pandas as pd
import pytest

from painpoint_miner.exporter import export_analyses
from painpoint_miner.io import read_content

from fakes import make_analysis, make_idea_analysis, make_pain_point


def test_read_text_file_as_is(tmp_path):
    p = tmp_path / "thread.txt"
    p.write_text("first\n\nsecond\n", encoding="utf-8")

    assert read_content(p) == "first\n\nsecond\n"


def test_read_csv_one_paragraph_per_row(tmp_path):
    p = tmp_path / "comments.csv"
    pd.DataFrame({"author": ["a", "b", "c"], "comment": ["I hate invoicing", None, " CI is slow "]}).to_csv(p, index=False)

    assert read_content(p) == "I hate invoicing\n\nCI is slow"


def test_read_csv_without_comment_column(tmp_path):
    p = tmp_path / "bad.csv"
    pd.DataFrame({"author": ["a"]}).to_csv(p, index=False)

    with pytest.raises(ValueError, match="No comment column"):
        read_content(p)


@pytest.mark.parametrize("payload", [
    ["I hate invoicing", "CI is slow"],
    [{"text": "I hate invoicing"}, {"body": "CI is slow"}],
    {"hits": [{"comment_text": "<p>I hate invoicing</p>"}, {"comment_text": "CI is &quot;slow&quot;"}]},
])
def test_read_json_layouts(tmp_path, payload):
    p = tmp_path / "comments.json"
    p.write_text(json.dumps(payload), encoding="utf-8")

    paragraphs = read_content(p).split("\n\n")
    assert paragraphs[0] == "I hate invoicing"
    assert paragraphs[1].startswith("CI is")


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_content(tmp_path / "nope.txt")


def test_export_writes_flat_csvs(store, tmp_path):
    analysis = make_analysis(
        [make_pain_point("Slow builds", 5, -0.6, ["a", "b"]), make_pain_point("Docs", 1, 0.2)],
        ["A CI cache tool", "A docs linter"],
        -0.4, 6,
    )
    saved = store.insert("Slow CI", analysis)
    store.set_market_analysis(saved.id, "A CI cache tool", make_idea_analysis("$10k MRR"))

    paths = export_analyses(store, tmp_path / "out")

    analyses = pd.read_csv(paths["analyses"])
    assert analyses.loc[0, "title"] == "Slow CI"
    assert analyses.loc[0, "total_comments"] == 6
    assert analyses.loc[0, "market_analyses"] == 1

    pains = pd.read_csv(paths["pain_points"])
    assert list(pains["topic"]) == ["Slow builds", "Docs"]
    assert list(pains["rank"]) == [1, 2]
    assert pains.loc[0, "examples"] == "a | b"

    ideas = pd.read_csv(paths["ideas"])
    assert list(ideas["has_market_analysis"]) == [True, False]
    assert ideas.loc[0, "market_size"] == "$10k MRR"
    assert ideas.loc[0, "similar_apps"] == "Acme"


def test_export_with_empty_store(store, tmp_path):
    paths = export_analyses(store, tmp_path / "out")

    assert pd.read_csv(paths["analyses"]).empty
    assert list(pd.read_csv(paths["pain_points"]).columns)[:3] == ["analysis_id", "title", "rank"]
