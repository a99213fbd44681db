"""Parsing helpers for structured JSON completions."""

import json
import re
from typing import TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL)
_BRACKETS = {"{": "}", "[": "]"}


def _extract_json_text(raw_output: str, opener: str = "{") -> str:
    """Reduce a completion to the JSON object (or array) it carries.

    Handles ```json fences (closed or dangling) and prose around the value.
    """
    text = raw_output.strip()

    fenced = _FENCED_BLOCK.search(text)
    if fenced:
        text = fenced.group(1).strip()
    else:
        text = text.removeprefix("```json").removeprefix("```").removesuffix("```").strip()

    if not text.startswith(opener):
        start, end = text.find(opener), text.rfind(_BRACKETS[opener])
        if start != -1 and end > start:
            text = text[start : end + 1]
    return text


def parse_llm_json_dict(raw_output: str) -> dict:
    """
    Parse a completion as a JSON object.

    Raises:
        json.JSONDecodeError: If no valid JSON remains after cleanup
        TypeError: If the JSON is valid but not an object
    """
    parsed = json.loads(_extract_json_text(raw_output))
    if not isinstance(parsed, dict):
        raise TypeError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def parse_llm_json_list(raw_output: str) -> list:
    """
    Parse a completion as a JSON array.

    Raises:
        json.JSONDecodeError: If no valid JSON remains after cleanup
        TypeError: If the JSON is valid but not an array
    """
    parsed = json.loads(_extract_json_text(raw_output, opener="["))
    if not isinstance(parsed, list):
        raise TypeError(f"Expected a JSON array, got {type(parsed).__name__}")
    return parsed


def parse_llm_json(raw_output: str, model: type[T]) -> T:
    """
    Parse a completion and validate it against a Pydantic model.

    Args:
        raw_output: Raw completion text
        model: Pydantic model class the object must satisfy

    Returns:
        Validated model instance

    Raises:
        json.JSONDecodeError: If JSON parsing fails after cleanup
        TypeError: If the JSON is not an object
        pydantic.ValidationError: If the object does not match the model
    """
    return model.model_validate(parse_llm_json_dict(raw_output))
