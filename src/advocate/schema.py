"""Declarative value shapes for flow inputs and outputs."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from advocate.errors import ValidationError


@dataclass(frozen=True)
class StringSchema:
    description: str = ""

    @property
    def tag(self) -> str:
        return "string"


@dataclass(frozen=True)
class NumberSchema:
    description: str = ""

    @property
    def tag(self) -> str:
        return "number"


@dataclass(frozen=True)
class BooleanSchema:
    description: str = ""

    @property
    def tag(self) -> str:
        return "boolean"


@dataclass(frozen=True)
class OptionalSchema:
    inner: Schema
    description: str = ""

    @property
    def tag(self) -> str:
        return "optional"


@dataclass(frozen=True)
class UnknownSchema:
    """Any shape not modelled here (arrays, enums, unions...)."""

    type_name: str = "unknown"
    description: str = ""

    @property
    def tag(self) -> str:
        return "unknown"


@dataclass(frozen=True)
class ObjectSchema:
    """Object with ordered named fields."""

    fields: tuple[tuple[str, Schema], ...] = field(default_factory=tuple)
    allow_extra: bool = False
    description: str = ""

    @property
    def tag(self) -> str:
        return "object"

    def field_map(self) -> dict[str, Schema]:
        return dict(self.fields)

    def required_names(self) -> list[str]:
        return [name for name, schema in self.fields if not isinstance(schema, OptionalSchema)]


Schema = Union[StringSchema, NumberSchema, BooleanSchema, OptionalSchema, UnknownSchema, ObjectSchema]


def string(description: str = "") -> StringSchema:
    return StringSchema(description=description)


def number(description: str = "") -> NumberSchema:
    return NumberSchema(description=description)


def boolean(description: str = "") -> BooleanSchema:
    return BooleanSchema(description=description)


def optional(inner: Schema, description: str = "") -> OptionalSchema:
    return OptionalSchema(inner=inner, description=description)


def unknown(type_name: str = "unknown", description: str = "") -> UnknownSchema:
    return UnknownSchema(type_name=type_name, description=description)


def obj(*, allow_extra: bool = False, description: str = "", **fields: Schema) -> ObjectSchema:
    """Build an object schema; keyword order is field order."""
    return ObjectSchema(fields=tuple(fields.items()), allow_extra=allow_extra, description=description)


def check(schema: Schema, value: Any, *, path: str = "$", flow: str | None = None) -> None:
    """Raise ``ValidationError`` at the first place ``value`` does not fit ``schema``."""
    if isinstance(schema, UnknownSchema):
        return
    if isinstance(schema, OptionalSchema):
        if value is None:
            return
        check(schema.inner, value, path=path, flow=flow)
        return
    if isinstance(schema, StringSchema):
        if not isinstance(value, str):
            raise ValidationError(f"expected string, got {_type_name(value)}", path=path, flow=flow)
        return
    if isinstance(schema, BooleanSchema):
        if not isinstance(value, bool):
            raise ValidationError(f"expected boolean, got {_type_name(value)}", path=path, flow=flow)
        return
    if isinstance(schema, NumberSchema):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"expected number, got {_type_name(value)}", path=path, flow=flow)
        return
    if isinstance(schema, ObjectSchema):
        _check_object(schema, value, path=path, flow=flow)
        return
    raise ValidationError(f"unsupported schema node {schema!r}", path=path, flow=flow)


def validate(schema: Schema, value: Any) -> bool:
    try:
        check(schema, value)
    except ValidationError:
        return False
    return True


def _check_object(schema: ObjectSchema, value: Any, *, path: str, flow: str | None) -> None:
    if not isinstance(value, Mapping):
        raise ValidationError(f"expected object, got {_type_name(value)}", path=path, flow=flow)
    known = schema.field_map()
    for name, field_schema in schema.fields:
        child_path = f"{path}.{name}"
        if name not in value:
            if isinstance(field_schema, (OptionalSchema, UnknownSchema)):
                continue
            raise ValidationError("missing required field", path=child_path, flow=flow)
        check(field_schema, value[name], path=child_path, flow=flow)
    if schema.allow_extra:
        return
    extra = sorted(str(key) for key in value if key not in known)
    if extra:
        raise ValidationError(f"unexpected fields {extra}", path=path, flow=flow)


def describe(schema: Schema) -> Any:
    """Render a JSON-like description of ``schema`` for prompt contracts."""
    if isinstance(schema, ObjectSchema):
        shape: dict[str, Any] = {name: describe(child) for name, child in schema.fields}
        if schema.allow_extra:
            shape["..."] = "any additional keys"
        return shape
    if isinstance(schema, OptionalSchema):
        inner = describe(schema.inner)
        if isinstance(inner, str):
            return f"{inner} | null (optional)"
        return {"optional": True, "shape": inner}
    if isinstance(schema, UnknownSchema):
        return schema.type_name
    text = schema.tag
    if schema.description:
        text = f"{text} ({schema.description})"
    return text


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    return type(value).__name__
