"""
Parsing of generative-AI replies.

Models are asked for bare JSON or for simple text layouts, but replies often
arrive wrapped in markdown fences or with stray prose. These helpers extract
what was asked for and fail closed: a reply that cannot be used becomes an
AIFailure carrying an excerpt of the raw text.
"""

import json
import re
from typing import Any, List, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from ..models.ai_responses import AIFailure, LabeledSection
from .logger import get_logger

logger = get_logger("response_parser")

T = TypeVar("T", bound=BaseModel)

DEFAULT_EXCERPT_LENGTH = 150

_FENCE = re.compile(r"^```(\w*)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)
_LIST_MARKUP = re.compile(r"^(?:[-*•]\s+|\d+[.)]\s+)")
_LABEL_MARKUP = r"[#* \t]*"


def excerpt(text: Optional[str], max_length: int = DEFAULT_EXCERPT_LENGTH) -> str:
    """First max_length characters of text, with "..." if it was cut."""
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def strip_code_fences(text: Optional[str]) -> str:
    """
    Remove a surrounding markdown code fence such as ```json ... ```.

    Args:
        text: Raw model reply

    Returns:
        Inner text if the whole reply is fenced, otherwise the trimmed reply
    """
    stripped = (text or "").strip()
    match = _FENCE.match(stripped)
    if match and match.group(2):
        return match.group(2).strip()
    return stripped


def failure(
    feature: str,
    message: str,
    raw_response: Optional[str] = None,
    max_length: int = DEFAULT_EXCERPT_LENGTH,
) -> AIFailure:
    """Build an AIFailure with a truncated raw reply."""
    return AIFailure(
        feature=feature,
        message=message,
        raw_response=excerpt(raw_response, max_length) if raw_response else None,
    )


def parse_json_payload(
    text: Optional[str],
    feature: str,
    max_length: int = DEFAULT_EXCERPT_LENGTH,
) -> Union[Any, AIFailure]:
    """
    Parse a JSON reply, tolerating markdown fences.

    Args:
        text: Raw model reply
        feature: Feature name used in the failure message
        max_length: Length of the raw excerpt kept on failure

    Returns:
        Decoded JSON value or AIFailure
    """
    payload = strip_code_fences(text)
    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON response for {feature}: {e}")
        return failure(
            feature,
            f"Failed to parse the AI response for {feature}: the reply is not valid JSON.",
            text,
            max_length,
        )


def parse_model(
    text: Optional[str],
    model: Type[T],
    feature: str,
    max_length: int = DEFAULT_EXCERPT_LENGTH,
) -> Union[T, AIFailure]:
    """
    Parse a JSON object reply into a pydantic model.

    Args:
        text: Raw model reply
        model: Expected model class
        feature: Feature name used in the failure message
        max_length: Length of the raw excerpt kept on failure

    Returns:
        Model instance or AIFailure
    """
    data = parse_json_payload(text, feature, max_length)
    if isinstance(data, AIFailure):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(f"AI response for {feature} does not match {model.__name__}: {e}")
        return failure(
            feature,
            f"The AI response for {feature} does not have the expected structure.",
            text,
            max_length,
        )


def parse_model_list(
    text: Optional[str],
    model: Type[T],
    feature: str,
    max_length: int = DEFAULT_EXCERPT_LENGTH,
) -> Union[List[T], AIFailure]:
    """
    Parse a JSON array reply into a list of pydantic models.

    A single object is accepted as a one-element list.

    Args:
        text: Raw model reply
        model: Expected element model class
        feature: Feature name used in the failure message
        max_length: Length of the raw excerpt kept on failure

    Returns:
        List of model instances or AIFailure
    """
    data = parse_json_payload(text, feature, max_length)
    if isinstance(data, AIFailure):
        return data
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        return failure(feature, f"The AI response for {feature} is not a list.", text, max_length)
    try:
        return TypeAdapter(List[model]).validate_python(data)
    except ValidationError as e:
        logger.error(f"AI response for {feature} does not match List[{model.__name__}]: {e}")
        return failure(
            feature,
            f"The AI response for {feature} does not have the expected structure.",
            text,
            max_length,
        )


def parse_bullet_list(text: Optional[str], marker: str = "- ") -> List[str]:
    """
    Collect the items of a "- item" list, ignoring any other lines.

    Args:
        text: Raw model reply
        marker: Bullet prefix

    Returns:
        Item texts in order (empty if there are none)
    """
    items = []
    for line in (text or "").split("\n"):
        line = line.strip()
        if line.startswith(marker):
            item = line[len(marker):].strip()
            if item:
                items.append(item)
    return items


def parse_lines(text: Optional[str]) -> List[str]:
    """
    Non-empty lines of a free-text reply with list markup removed.

    Bullets ("-", "*", "•"), numbering ("1." or "1)"), markdown bold and
    surrounding quotes are stripped from each line.
    """
    lines = []
    for line in (text or "").split("\n"):
        line = _LIST_MARKUP.sub("", line.strip())
        line = line.replace("**", "").strip().strip("\"'").strip()
        if line:
            lines.append(line)
    return lines


def extract_labeled_sections(text: Optional[str], labels: Sequence[str]) -> List[LabeledSection]:
    """
    Split a reply into sections that start with known labels.

    Each section runs from a line starting with one of the labels up to the
    next such line. Markdown headings or bold around a label are ignored.
    Newlines inside a section are collapsed to spaces.

    Args:
        text: Raw model reply
        labels: Section labels, e.g. ["Completeness:", "Target audience:"]

    Returns:
        Sections in reply order
    """
    if not text or not labels:
        return []

    alternatives = "|".join(re.escape(label) for label in labels)
    pattern = re.compile(
        rf"^{_LABEL_MARKUP}({alternatives})\**\s*([\s\S]*?)(?=\n{_LABEL_MARKUP}(?:{alternatives})|\Z)",
        re.IGNORECASE | re.MULTILINE,
    )

    sections = []
    for match in pattern.finditer(text.strip()):
        label = match.group(1).strip()
        content = re.sub(r"\n+", " ", match.group(2).strip())
        sections.append(LabeledSection(label=label, content=content))
    return sections
