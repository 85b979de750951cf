# src/repo_analyzer/llm_client.py
import json
import logging

import google.generativeai as genai

from .config import get_gemini_api_key, get_gemini_model
from .models import (
    AnalysisResult, DIMENSIONS, LEVELS, ROADMAP_CATEGORIES, ROADMAP_PRIORITIES,
    WORKING_STATUSES, snake_to_camel,
)
from .prompt_builder import build_analysis_prompt

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    pass


def _string():
    return {"type": "string"}


def _string_list():
    return {"type": "array", "items": {"type": "string"}}


def _enum(values):
    return {"type": "string", "enum": list(values)}


def build_response_schema():
    properties = {
        "score": {"type": "integer"},
        "level": _enum(LEVELS),
        "summary": _string(),
        "techStackAnalysis": _string(),
        "strengths": _string_list(),
        "weaknesses": _string_list(),
    }
    for prefix, _ in DIMENSIONS:
        camel = snake_to_camel(prefix)
        properties[f"{camel}Score"] = {"type": "integer"}
        properties[f"{camel}Explanation"] = _string()
        properties[f"{camel}Points"] = _string_list()
    properties.update({
        "issuesFound": _string_list(),
        "mainIssues": _string_list(),
        "nextSteps": _string_list(),
        "aiUsageDetected": {"type": "boolean"},
        "aiUsageDetails": _string(),
        "architectureAnalysis": _string(),
        "optimizationAnalysis": _string(),
        "functionalityAnalysis": _string(),
        "connectivityAnalysis": _string(),
        "completenessAnalysis": _string(),
        "workingStatus": _enum(WORKING_STATUSES),
        "workingStatusDetails": _string(),
        "roadmap": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": _string(),
                    "description": _string(),
                    "priority": _enum(ROADMAP_PRIORITIES),
                    "category": _enum(ROADMAP_CATEGORIES),
                },
                "required": ["title", "description", "priority", "category"],
            },
        },
    })
    return {"type": "object", "properties": properties, "required": list(properties)}


RESPONSE_SCHEMA = build_response_schema()


def parse_analysis(text):
    """Parse the model's JSON text into an AnalysisResult."""
    if not text:
        raise AnalysisError("No response from AI")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise AnalysisError("Failed to generate analysis. Please try again.") from e
    if not isinstance(data, dict):
        raise AnalysisError("Failed to generate analysis. Please try again.")
    return AnalysisResult.from_dict(data)


def analyze_repository(repo_data, api_key=None, model_name=None):
    """Send the assembled prompt to Gemini and return the structured assessment."""
    api_key = api_key or get_gemini_api_key()
    if not api_key:
        raise AnalysisError("Gemini API Key is missing. Please set GEMINI_API_KEY environment variable.")
    model_name = model_name or get_gemini_model()

    prompt = build_analysis_prompt(repo_data)
    logger.info("Requesting analysis of %s from %s (%d prompt chars)", repo_data.full_name, model_name, len(prompt))

    genai.configure(api_key=api_key)
    model = genai.GenerativeModel(
        model_name,
        generation_config={
            "response_mime_type": "application/json",
            "response_schema": RESPONSE_SCHEMA,
        },
    )
    try:
        response = model.generate_content(prompt)
        text = response.text
    except Exception as e:
        logger.error("Gemini analysis error: %s", e)
        raise AnalysisError("Failed to generate analysis. Please try again.") from e
    return parse_analysis(text)
