"""
Response parser for the AI operations.

Handles parsing of provider responses: JSON extraction from raw text or
markdown code blocks, suggestion recognition in research answers, and
validation of plan change options and packing items.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from holiday_planner.shared.contracts import (
    CostRange,
    PackingItem,
    PlanChangeOption,
    PlanChangeResult,
    Suggestion,
)


logger = logging.getLogger(__name__)


class ParseError(Exception):
    """Raised when a provider response holds no parseable JSON."""


def extract_json_from_response(raw_response: str) -> str:
    """
    Extract JSON content from a provider response.

    Handles multiple formats:
    - Raw JSON
    - JSON in markdown code blocks (```json ... ```)
    - JSON surrounded by prose

    Args:
        raw_response: Raw provider response string

    Returns:
        Candidate JSON string. It may still fail to parse.
    """
    content = raw_response.strip()

    # Try to extract from markdown code block
    code_block_pattern = r"```(?:json)?\s*([\s\S]*?)```"
    match = re.search(code_block_pattern, content)
    if match:
        content = match.group(1).strip()

    # Skip any prose before the first object or array
    starts = [i for i in (content.find("{"), content.find("[")) if i >= 0]
    if not starts:
        return content
    content = content[min(starts):]

    opener = content[0]
    closer = "}" if opener == "{" else "]"
    depth = 0
    in_string = False
    escaped = False
    for i, char in enumerate(content):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return content[: i + 1]

    # If we can't find clear boundaries, return as-is and let JSON parser handle it
    return content


def parse_json_value(raw_response: str) -> Any:
    """
    Parse the JSON value embedded in a provider response.

    Raises:
        ParseError: If no parseable JSON is present
    """
    json_str = extract_json_from_response(raw_response)
    try:
        return json.loads(json_str)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse provider JSON: %s", e)
        raise ParseError(f"Failed to parse AI response: {e}") from e


# =============================================================================
# Research suggestions
# =============================================================================

_SECTION_SPLIT = re.compile(r"(?=^\s*\d+\.\s|\*\*[^*\n]+\*\*)", re.MULTILINE)
_HEADING = re.compile(r"^\s*(?:\d+\.\s|\*\*[^*\n]+\*\*)")
_BOLD_NAME = re.compile(r"\*\*([^*\n]+)\*\*")
_NUMBERED_PREFIX = re.compile(r"^\s*\d+\.\s*")
_COST = re.compile(r"£(\d+(?:,\d{3})*(?:\.\d{2})?)")
_COST_RANGE = re.compile(r"£(\d+(?:,\d{3})*)\s*-\s*£?(\d+(?:,\d{3})*)")
_LOCATION = re.compile(r"(?:Location|Located|Area):\s*([^\n]+)", re.IGNORECASE)
_PROS = re.compile(r"[-•✓✅]\s*(?:Pro|Advantage|Good)s?:\s*([^\n]+)", re.IGNORECASE)
_CONS = re.compile(r"[-•✗❌]\s*(?:Con|Disadvantage|Bad)s?:\s*([^\n]+)", re.IGNORECASE)


def _to_number(raw: str) -> float:
    return float(raw.replace(",", ""))


def _parse_suggestion_section(section: str) -> Optional[Suggestion]:
    name_match = _BOLD_NAME.search(section)
    if name_match:
        name = name_match.group(1).strip()
    else:
        name = _NUMBERED_PREFIX.sub("", section.strip().split("\n")[0]).strip()
    name = name.rstrip(":").strip()
    if len(name) < 3:
        return None

    cost_match = _COST.search(section)
    range_match = _COST_RANGE.search(section)
    location_match = _LOCATION.search(section)
    pros = [m.strip() for m in _PROS.findall(section)]
    cons = [m.strip() for m in _CONS.findall(section)]

    return Suggestion(
        name=name,
        cost=_to_number(cost_match.group(1)) if cost_match else None,
        cost_range=(
            CostRange(min=_to_number(range_match.group(1)), max=_to_number(range_match.group(2)))
            if range_match
            else None
        ),
        location=location_match.group(1).strip() if location_match else None,
        pros=pros or None,
        cons=cons or None,
    )


def parse_structured_suggestions(text: str, limit: int = 8) -> List[Suggestion]:
    """
    Recognise suggestions in a free-text research answer.

    The text is split before every numbered item ("1. ") or bold run
    ("**Name**"). Each section whose heading yields a name of at least
    three characters becomes a suggestion; cost, price range, location,
    pros and cons are picked up when present. Text before the first
    heading is ignored.

    Args:
        text: Provider response text
        limit: Maximum number of suggestions returned

    Returns:
        Up to ``limit`` suggestions in order of appearance
    """
    suggestions: List[Suggestion] = []
    for section in _SECTION_SPLIT.split(text):
        if not section.strip() or not _HEADING.match(section):
            continue
        suggestion = _parse_suggestion_section(section)
        if suggestion is not None:
            suggestions.append(suggestion)
        if len(suggestions) >= limit:
            break
    return suggestions


# =============================================================================
# Plan change options
# =============================================================================


def parse_plan_change_response(raw_response: str) -> PlanChangeResult:
    """
    Parse a plan change answer into explanation text and options.

    When the answer holds no usable JSON object the raw text is returned
    with no options. Options that fail validation are dropped.
    """
    try:
        data = parse_json_value(raw_response)
    except ParseError:
        return PlanChangeResult(text=raw_response, options=[])

    if not isinstance(data, dict):
        return PlanChangeResult(text=raw_response, options=[])

    options: List[PlanChangeOption] = []
    for raw_option in data.get("options") or []:
        try:
            options.append(PlanChangeOption.model_validate(raw_option))
        except PydanticValidationError as e:
            logger.warning("Dropping invalid plan change option: %s", e)

    text = data.get("text")
    if not isinstance(text, str) or not text:
        text = raw_response
    return PlanChangeResult(text=text, options=options)


# =============================================================================
# Structured generation
# =============================================================================


def parse_json_object(raw_response: str) -> Dict[str, Any]:
    """Parse a JSON object from a provider response, or {} when there is none."""
    try:
        data = parse_json_value(raw_response)
    except ParseError:
        return {}
    return data if isinstance(data, dict) else {}


def parse_packing_items(raw_response: str) -> List[PackingItem]:
    """
    Parse a packing list from a provider response.

    Items that fail validation are dropped. A response without a JSON
    array yields an empty list.
    """
    try:
        data = parse_json_value(raw_response)
    except ParseError:
        return []
    if not isinstance(data, list):
        return []

    items: List[PackingItem] = []
    for raw_item in data:
        try:
            items.append(PackingItem.model_validate(raw_item))
        except PydanticValidationError as e:
            logger.warning("Dropping invalid packing item: %s", e)
    return items
