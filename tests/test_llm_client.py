import json
from unittest.mock import MagicMock, patch

import pytest

from repo_analyzer.llm_client import (
    AnalysisError, RESPONSE_SCHEMA, analyze_repository, parse_analysis,
)
from repo_analyzer.models import AnalysisResult, RepoMetadata


@pytest.fixture
def repo_data():
    return RepoMetadata(owner="octo", name="demo")


def test_schema_requires_every_result_field():
    assert set(RESPONSE_SCHEMA["required"]) == set(AnalysisResult().to_dict())
    assert RESPONSE_SCHEMA["properties"]["workingStatus"]["enum"] == [
        "Fully Functional", "Partially Working", "Not Working", "Unknown",
    ]
    roadmap_item = RESPONSE_SCHEMA["properties"]["roadmap"]["items"]
    assert roadmap_item["properties"]["priority"]["enum"] == ["High", "Medium", "Low"]


def test_parse_analysis_fills_defaults_for_missing_fields():
    result = parse_analysis(json.dumps({
        "score": 72,
        "level": "Intermediate",
        "codeQualityScore": 80,
        "codeQualityPoints": ["Consistent naming"],
        "architectureAnalysis": None,
        "roadmap": [{"title": "Add CI", "priority": "High"}],
        "somethingElse": 1,
    }))

    assert result.score == 72
    assert result.code_quality_score == 80
    assert result.code_quality_points == ["Consistent naming"]
    assert result.architecture_analysis == "Architecture analysis not available"
    assert result.working_status == "Unknown"
    assert result.roadmap[0].title == "Add CI"
    assert result.roadmap[0].category == "Features"


@pytest.mark.parametrize("text, message", [
    ("", "No response from AI"),
    (None, "No response from AI"),
    ("not json", "Failed to generate analysis. Please try again."),
    ("[1, 2]", "Failed to generate analysis. Please try again."),
])
def test_parse_analysis_errors(text, message):
    with pytest.raises(AnalysisError, match=message):
        parse_analysis(text)


def test_analyze_repository_requires_api_key(repo_data, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    with patch("repo_analyzer.llm_client.genai") as mock_genai:
        with pytest.raises(AnalysisError, match="Gemini API Key is missing"):
            analyze_repository(repo_data)
    mock_genai.configure.assert_not_called()


def test_analyze_repository_requests_structured_json(repo_data):
    with patch("repo_analyzer.llm_client.genai") as mock_genai:
        model = mock_genai.GenerativeModel.return_value
        model.generate_content.return_value = MagicMock(text='{"score": 55, "workingStatus": "Partially Working"}')

        result = analyze_repository(repo_data, api_key="key", model_name="gemini-test")

    mock_genai.configure.assert_called_once_with(api_key="key")
    args, kwargs = mock_genai.GenerativeModel.call_args
    assert args == ("gemini-test",)
    assert kwargs["generation_config"]["response_mime_type"] == "application/json"
    assert kwargs["generation_config"]["response_schema"] is RESPONSE_SCHEMA
    prompt = model.generate_content.call_args[0][0]
    assert "Repository: octo/demo" in prompt
    assert result.score == 55
    assert result.working_status == "Partially Working"


def test_analyze_repository_wraps_sdk_errors(repo_data):
    with patch("repo_analyzer.llm_client.genai") as mock_genai:
        mock_genai.GenerativeModel.return_value.generate_content.side_effect = RuntimeError("quota")
        with pytest.raises(AnalysisError, match="Failed to generate analysis") as excinfo:
            analyze_repository(repo_data, api_key="key")
    assert isinstance(excinfo.value.__cause__, RuntimeError)
