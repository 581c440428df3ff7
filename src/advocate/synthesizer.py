"""Placeholder values for degraded mode."""

from __future__ import annotations

from typing import Any

from loguru import logger

from advocate.errors import SynthesisError
from advocate.schema import (
    BooleanSchema,
    NumberSchema,
    ObjectSchema,
    OptionalSchema,
    Schema,
    StringSchema,
    UnknownSchema,
    validate,
)

DIAGNOSTIC_MESSAGE = "AI functionality is currently disabled. Please configure the API key in your .env file."


def fallback_payload() -> dict[str, Any]:
    """Generic payload used when nothing better can be synthesized."""
    return {"response": DIAGNOSTIC_MESSAGE, "error": True}


def synthesize(schema: Schema, *, qualify: bool = False) -> Any:
    """Build a value conforming to ``schema`` that carries the diagnostic message.

    Only object and string schemas are supported at the top level; anything
    else raises ``SynthesisError``. With ``qualify`` each string field gets a
    ``(field: name)`` suffix.
    """
    if isinstance(schema, StringSchema):
        return DIAGNOSTIC_MESSAGE
    if isinstance(schema, ObjectSchema):
        return _synthesize_object(schema, qualify=qualify, prefix="")
    raise SynthesisError(_shape_name(schema))


def synthesize_or_fallback(schema: Schema | None, *, qualify: bool = False) -> Any:
    """Never-raising variant of ``synthesize``."""
    if schema is None:
        return fallback_payload()
    try:
        value = synthesize(schema, qualify=qualify)
    except SynthesisError as exc:
        logger.warning("synthesizer.unsupported shape={}", exc.shape)
        return fallback_payload()
    except Exception:
        logger.exception("synthesizer.error")
        return fallback_payload()

    if not validate(schema, value):
        logger.error("synthesizer.nonconforming shape={}", _shape_name(schema))
        return fallback_payload()
    return value


def _synthesize_object(schema: ObjectSchema, *, qualify: bool, prefix: str) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for name, field_schema in getattr(schema, "fields", None) or ():
        qualified_name = f"{prefix}{name}"
        result[name] = _synthesize_field(field_schema, qualified_name, qualify=qualify)
    return result


def _synthesize_field(schema: Schema, name: str, *, qualify: bool) -> Any:
    if isinstance(schema, StringSchema):
        if qualify:
            return f"{DIAGNOSTIC_MESSAGE} (field: {name})"
        return DIAGNOSTIC_MESSAGE
    if isinstance(schema, BooleanSchema):
        return False
    if isinstance(schema, NumberSchema):
        return 0
    if isinstance(schema, ObjectSchema):
        return _synthesize_object(schema, qualify=qualify, prefix=f"{name}.")
    if isinstance(schema, OptionalSchema):
        return None
    type_name = getattr(schema, "type_name", None) or type(schema).__name__
    return f"<unsupported:{type_name}> {DIAGNOSTIC_MESSAGE}"


def _shape_name(schema: Any) -> str:
    if isinstance(schema, UnknownSchema):
        return f"unknown({schema.type_name})"
    tag = getattr(schema, "tag", None)
    if isinstance(tag, str):
        return tag
    return type(schema).__name__
