"""
Tests for parsing generative-AI replies.
"""

from timber_market.models import AIFailure, AlternativeProduct, ProductComparison
from timber_market.utils.response_parser import (
    excerpt,
    extract_labeled_sections,
    parse_bullet_list,
    parse_json_payload,
    parse_lines,
    parse_model,
    parse_model_list,
    strip_code_fences,
)


class TestCodeFences:
    """Markdown fence removal."""

    def test_json_fence(self):
        assert strip_code_fences('```json\n[{"name": "Oak"}]\n```') == '[{"name": "Oak"}]'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_unfenced_text_is_trimmed(self):
        assert strip_code_fences('  {"a": 1}\n') == '{"a": 1}'
        assert strip_code_fences(None) == ""


class TestJsonParsing:
    """JSON replies validated against response models."""

    def test_fenced_list(self):
        text = '```json\n[{"name": "Spruce log", "specs": "16-20 cm, 4 m"}]\n```'
        result = parse_model_list(text, AlternativeProduct, "alternatives")

        assert isinstance(result, list)
        assert result[0].name == "Spruce log"
        assert result[0].id.startswith("alt-")

    def test_single_object_becomes_list(self):
        result = parse_model_list('{"name": "Oak"}', AlternativeProduct, "alternatives")
        assert [r.name for r in result] == ["Oak"]

    def test_invalid_json_fails_closed(self):
        result = parse_json_payload("Sorry, I cannot help with that.", "alternatives")

        assert isinstance(result, AIFailure)
        assert result.feature == "alternatives"
        assert result.raw_response == "Sorry, I cannot help with that."

    def test_wrong_shape_fails_closed(self):
        result = parse_model('{"original": {"name": "A"}}', ProductComparison, "comparison")
        assert isinstance(result, AIFailure)

    def test_scalar_is_not_a_list(self):
        assert isinstance(parse_model_list("42", AlternativeProduct, "alternatives"), AIFailure)

    def test_raw_response_truncated(self):
        raw = "x" * 400
        result = parse_json_payload(raw, "plan", max_length=150)

        assert result.raw_response == "x" * 150 + "..."

    def test_excerpt(self):
        assert excerpt("short", 10) == "short"
        assert excerpt("abcdefghijkl", 5) == "abcde..."
        assert excerpt(None) == ""


class TestTextParsing:
    """Bullet lists and labelled sections."""

    def test_bullet_list(self):
        text = "Here are some ideas:\n- Mediate directly\n  - Get an expert opinion  \n-\n* not a bullet\n- Offer a discount"
        assert parse_bullet_list(text) == ["Mediate directly", "Get an expert opinion", "Offer a discount"]

    def test_bullet_list_empty(self):
        assert parse_bullet_list("No list here.") == []
        assert parse_bullet_list(None) == []

    def test_labeled_sections(self):
        text = (
            "Completeness: Dimensions are given\nbut the species is missing.\n"
            "quality and appeal: Add photos.\n"
            "Target audience: Fencing contractors."
        )
        labels = ["Completeness:", "Quality and appeal:", "Target audience:"]
        sections = extract_labeled_sections(text, labels)

        assert [s.label for s in sections] == ["Completeness:", "quality and appeal:", "Target audience:"]
        assert sections[0].content == "Dimensions are given but the species is missing."
        assert str(sections[2]) == "Target audience: Fencing contractors."

    def test_labeled_sections_without_labels(self):
        assert extract_labeled_sections("Just prose.", ["Completeness:"]) == []

    def test_labeled_sections_with_markdown(self):
        text = (
            "## Summary:\nSeasoned spruce logs, ready to ship.\n"
            "**Market relevance:** Strong demand from sawmills.\n"
            "* **Pricing note:** In line with the regional average."
        )
        labels = ["Summary:", "Market relevance:", "Pricing note:"]
        sections = extract_labeled_sections(text, labels)

        assert [s.label for s in sections] == labels
        assert sections[0].content == "Seasoned spruce logs, ready to ship."
        assert sections[1].content == "Strong demand from sawmills."

    def test_lines(self):
        text = '\n1. **Most active:** Forest King\n- Quiet Kft. has not listed anything\n\n  "Check duplicate listings"  \n'
        assert parse_lines(text) == [
            "Most active: Forest King",
            "Quiet Kft. has not listed anything",
            "Check duplicate listings",
        ]
        assert parse_lines(None) == []
