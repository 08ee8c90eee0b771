"""Tolerant parsing of JSON-mode model output.

Model output is parsed, then validated against the task's pydantic model.
Nothing here raises: invalid JSON becomes ``{}``, a missing or mistyped key
becomes the empty default, and list items that fail validation are dropped.
"""

import json
import logging
import re
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*\n(.*?)\n```\s*$", re.DOTALL | re.IGNORECASE)


def parse_json_object(raw: Optional[str]) -> dict[str, Any]:
    """Parse raw model output into a dict, or ``{}`` when that fails."""
    if not raw or not raw.strip():
        return {}

    text = raw.strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError, RecursionError) as e:
        logger.warning(f"[PARSER] Model returned invalid JSON ({e}): {raw[:200]}...")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"[PARSER] Expected a JSON object, got {type(data).__name__}")
        return {}
    return data


def validate_items(data: dict[str, Any], key: str, model: type[ModelT]) -> list[ModelT]:
    """Read ``data[key]`` as a list of ``model``, dropping items that don't fit."""
    raw_items = data.get(key)
    if raw_items is None:
        return []
    if not isinstance(raw_items, list):
        logger.warning(f"[PARSER] Expected '{key}' to be a list, got {type(raw_items).__name__}")
        return []

    items: list[ModelT] = []
    for index, raw_item in enumerate(raw_items):
        try:
            items.append(model.model_validate(raw_item))
        except ValidationError as e:
            logger.warning(
                f"[PARSER] Dropping {key}[{index}]: {e.error_count()} validation error(s)"
            )
    return items


def validate_object(data: dict[str, Any], model: type[ModelT]) -> ModelT:
    """Validate a whole object, falling back to ``model()`` on mismatch.

    List fields of the model are validated item by item first so that one
    malformed entry does not discard the rest of the object.
    """
    cleaned: dict[str, Any] = dict(data)
    for name, field in model.model_fields.items():
        value = data.get(name)
        item_model = _list_item_model(field.annotation)
        if item_model is not None and isinstance(value, list):
            cleaned[name] = validate_items(data, name, item_model)

    try:
        return model.model_validate(cleaned)
    except ValidationError as e:
        logger.warning(f"[PARSER] {model.__name__} did not validate ({e.error_count()} error(s)), using default")
        return model()


def _list_item_model(annotation: Any) -> Optional[type[BaseModel]]:
    """Return ``M`` for a ``list[M]`` annotation where M is a pydantic model."""
    args = getattr(annotation, "__args__", None)
    if getattr(annotation, "__origin__", None) is list and args:
        item = args[0]
        if isinstance(item, type) and issubclass(item, BaseModel):
            return item
    return None
