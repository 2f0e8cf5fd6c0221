"""Turn a model's free-text answer into validated structured data.

Surrounding noise (markdown code fences) is forgiven; the payload itself is
not. Anything that is not a single well-formed JSON document raises
``ParseError`` instead of falling back to a default.
"""
import json
import re
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..errors import ParseError

Model = TypeVar("Model", bound=BaseModel)

# Opening ```json (any case) and bare closing ``` markers, wherever they appear
_FENCE_RX = re.compile(r"```(?:json)?", re.IGNORECASE)
_EXCERPT_CHARS = 300


def _excerpt(raw: str) -> str:
    raw = raw or ""
    return raw if len(raw) <= _EXCERPT_CHARS else raw[:_EXCERPT_CHARS] + "..."


def strip_fences(raw: str) -> str:
    return _FENCE_RX.sub("", raw or "").strip()


def coerce_json(raw: str) -> Any:
    """Parse a model response as JSON after removing code fences.

    ``null``, ``[]`` and ``{}`` are valid results; only text that does not
    parse is an error.
    """
    if raw is None:
        raise ParseError("Model returned no response", raw_excerpt="")
    cleaned = strip_fences(raw)
    if not cleaned:
        raise ParseError("Model returned an empty response", raw_excerpt=_excerpt(raw))
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ParseError(
            f"Model response is not valid JSON: {e.msg} (line {e.lineno}, column {e.colno})",
            raw_excerpt=_excerpt(raw),
        ) from e


def coerce_model(raw: str, model_cls: Type[Model]) -> Model:
    """Parse a model response and validate it against ``model_cls``."""
    data = coerce_json(raw)
    if not isinstance(data, dict):
        raise ParseError(
            f"Expected a JSON object for {model_cls.__name__}, got {type(data).__name__}",
            raw_excerpt=_excerpt(raw),
        )
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in e.errors()
        )
        raise ParseError(
            f"Model response does not match {model_cls.__name__}: {problems}",
            raw_excerpt=_excerpt(raw),
        ) from e
