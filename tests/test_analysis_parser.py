"""Tests for parsing the chat provider's analysis output."""

import pytest

from talentmatch.analysis.parser import (
    degraded_analysis,
    extract_json_object,
    parse_analysis_response,
    parse_analysis_strict,
)
from talentmatch.errors import MalformedProviderResponseError

VALID_JSON = '{"strengths": ["Python"], "weakness": ["No Kubernetes"], "suggests": ["Add metrics"]}'


class TestExtractJsonObject:
    def test_bare_json(self):
        assert extract_json_object(VALID_JSON)["strengths"] == ["Python"]

    def test_fenced_json(self):
        text = f"```json\n{VALID_JSON}\n```"
        assert extract_json_object(text)["suggests"] == ["Add metrics"]

    def test_fence_without_language(self):
        text = f"```\n{VALID_JSON}\n```"
        assert extract_json_object(text)["weakness"] == ["No Kubernetes"]

    def test_surrounding_prose(self):
        text = f"Here is the analysis:\n{VALID_JSON}\nHope this helps!"
        assert extract_json_object(text)["strengths"] == ["Python"]

    def test_invalid_json_raises(self):
        with pytest.raises(MalformedProviderResponseError) as exc_info:
            extract_json_object("I cannot read this CV.")

        assert exc_info.value.raw_text == "I cannot read this CV."

    def test_array_is_rejected(self):
        with pytest.raises(MalformedProviderResponseError, match="not an object"):
            extract_json_object('["a", "b"]')


class TestParseAnalysisStrict:
    def test_maps_fields(self):
        analysis = parse_analysis_strict(VALID_JSON)

        assert analysis.strengths == ["Python"]
        assert analysis.weaknesses == ["No Kubernetes"]
        assert analysis.suggestions == ["Add metrics"]

    def test_wrong_shape_raises(self):
        with pytest.raises(MalformedProviderResponseError, match="wrong shape"):
            parse_analysis_strict('{"strengths": "Python"}')


class TestParseAnalysisResponse:
    def test_valid_response_not_degraded(self):
        analysis, degraded = parse_analysis_response(f"```json\n{VALID_JSON}\n```")

        assert degraded is False
        assert analysis.strengths == ["Python"]

    def test_missing_keys_default_to_empty(self):
        analysis, degraded = parse_analysis_response('{"strengths": ["Go"]}')

        assert degraded is False
        assert analysis.weaknesses == []
        assert analysis.suggestions == []

    def test_garbage_degrades(self):
        analysis, degraded = parse_analysis_response("Sorry, something went wrong.")

        assert degraded is True
        assert analysis.strengths == []
        assert analysis.weaknesses == []
        assert analysis.suggestions == ["Sorry, something went wrong."]

    def test_degraded_preview_is_bounded(self):
        analysis, degraded = parse_analysis_response("x" * 2000)

        assert degraded is True
        assert len(analysis.suggestions[0]) == 500


class TestDegradedAnalysis:
    def test_short_text_kept_whole(self):
        assert degraded_analysis("oops").suggestions == ["oops"]
