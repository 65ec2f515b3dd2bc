"""Tests for the chunk analyzer boundary (structured output -> Analysis)."""

import asyncio

import openai
import pytest
from openai.lib._pydantic import to_strict_json_schema
from pydantic import ValidationError

from painpoint_miner.analyzer import ChunkAnalyzer
from painpoint_miner.errors import ChunkAnalysisError
from painpoint_miner.schemas import Analysis, IdeaAnalysis

from fakes import FakeParseClient, make_analysis, make_pain_point


def _validation_error():
    try:
        Analysis.model_validate({"painPoints": [{"topic": "x", "count": 0, "sentiment": 3, "examples": []}]})
    except ValidationError as e:
        return e
    raise AssertionError("expected a validation error")


def test_returns_parsed_analysis():
    expected = make_analysis([make_pain_point("Slow builds", 2, -0.4, ["ci takes forever"])], ["A CI cache tool"], -0.4, 2)
    client = FakeParseClient(expected)
    analyzer = ChunkAnalyzer(client, model="fake-model", temperature=0.1)

    result = asyncio.run(analyzer.analyze_chunk("ci takes forever\n\nbuilds are slow"))

    assert result is expected
    call = client.calls[0]
    assert call["model"] == "fake-model"
    assert call["text_format"] is Analysis
    assert call["temperature"] == 0.1
    assert "builds are slow" in call["input"][-1]["content"]


def test_missing_parsed_output_is_chunk_error():
    analyzer = ChunkAnalyzer(FakeParseClient(None), model="fake-model")

    with pytest.raises(ChunkAnalysisError):
        asyncio.run(analyzer.analyze_chunk("text"))


def test_invalid_output_is_chunk_error():
    client = FakeParseClient(_validation_error())
    analyzer = ChunkAnalyzer(client, model="fake-model")

    with pytest.raises(ChunkAnalysisError, match="schema"):
        asyncio.run(analyzer.analyze_chunk("text"))
    assert len(client.calls) == 1  # not retried


def test_service_error_is_chunk_error():
    client = FakeParseClient(openai.OpenAIError("invalid api key"))
    analyzer = ChunkAnalyzer(client, model="fake-model")

    with pytest.raises(ChunkAnalysisError, match="invalid api key"):
        asyncio.run(analyzer.analyze_chunk("text"))
    assert len(client.calls) == 1


def test_schema_rejects_out_of_range_values():
    with pytest.raises(ValidationError):
        Analysis.model_validate({
            "painPoints": [{"topic": "x", "count": 1, "sentiment": 1.5, "examples": []}],
            "potentialIdeas": [],
            "sentimentScore": 0,
            "totalComments": 1,
        })
    with pytest.raises(ValidationError):
        Analysis.model_validate({"painPoints": [], "potentialIdeas": [], "sentimentScore": 0, "totalComments": -1})


def test_schema_accepts_camel_case_and_dedupes():
    a = Analysis.model_validate({
        "painPoints": [{"topic": "x", "count": 2, "sentiment": -0.5, "examples": ["e", "e", "f"]}],
        "potentialIdeas": ["A", "A", "B"],
        "sentimentScore": -0.5,
        "totalComments": 2,
    })

    assert a.pain_points[0].examples == ["e", "f"]
    assert a.potential_ideas == ["A", "B"]
    assert a.model_dump(by_alias=True)["totalComments"] == 2


# String/object keywords strict structured output does not accept.
UNSUPPORTED_KEYWORDS = {"minLength", "maxLength", "minProperties", "maxProperties", "patternProperties", "unevaluatedProperties"}


def _schema_keys(node):
    if isinstance(node, dict):
        for key, value in node.items():
            yield key
            if key != "properties":
                yield from _schema_keys(value)
            else:
                for prop in value.values():
                    yield from _schema_keys(prop)
    elif isinstance(node, list):
        for item in node:
            yield from _schema_keys(item)


@pytest.mark.parametrize("model", [Analysis, IdeaAnalysis])
def test_structured_output_schema_uses_supported_keywords(model):
    keys = set(_schema_keys(to_strict_json_schema(model)))

    assert not keys & UNSUPPORTED_KEYWORDS


def test_blank_topic_rejected():
    with pytest.raises(ValidationError, match="topic"):
        Analysis.model_validate({
            "painPoints": [{"topic": "  ", "count": 1, "sentiment": 0, "examples": []}],
            "potentialIdeas": [],
            "sentimentScore": 0,
            "totalComments": 1,
        })
