import pytest

from advocate import schema as s
from advocate.errors import SynthesisError
from advocate.synthesizer import DIAGNOSTIC_MESSAGE, fallback_payload, synthesize, synthesize_or_fallback

NESTED = s.obj(
    title=s.string(),
    enabled=s.boolean(),
    score=s.number(),
    note=s.optional(s.string()),
    tags=s.unknown("array"),
    meta=s.obj(author=s.string(), views=s.number()),
)


def test_string_schema_yields_diagnostic_message() -> None:
    assert synthesize(s.string()) == DIAGNOSTIC_MESSAGE


def test_object_fields_get_defaults_by_type() -> None:
    value = synthesize(NESTED)
    assert value["title"] == DIAGNOSTIC_MESSAGE
    assert value["enabled"] is False
    assert value["score"] == 0
    assert value["note"] is None
    assert value["meta"] == {"author": DIAGNOSTIC_MESSAGE, "views": 0}


def test_unsupported_field_gets_tagged_placeholder() -> None:
    value = synthesize(NESTED)
    assert value["tags"].startswith("<unsupported:array>")
    assert DIAGNOSTIC_MESSAGE in value["tags"]


def test_synthesized_values_validate() -> None:
    for schema in (s.string(), NESTED, s.obj(), s.obj(response=s.string())):
        assert s.validate(schema, synthesize(schema)) is True


def test_qualified_strings_name_their_field() -> None:
    value = synthesize(NESTED, qualify=True)
    assert value["title"] == f"{DIAGNOSTIC_MESSAGE} (field: title)"
    assert value["meta"]["author"] == f"{DIAGNOSTIC_MESSAGE} (field: meta.author)"
    assert s.validate(NESTED, value) is True


@pytest.mark.parametrize("schema", [s.number(), s.boolean(), s.optional(s.string()), s.unknown("union")])
def test_unsupported_top_level_shapes_raise(schema: s.Schema) -> None:
    with pytest.raises(SynthesisError):
        synthesize(schema)


def test_fallback_variant_never_raises() -> None:
    assert synthesize_or_fallback(s.unknown("enum")) == fallback_payload()
    assert synthesize_or_fallback(None) == {"response": DIAGNOSTIC_MESSAGE, "error": True}


def test_fallback_variant_tolerates_malformed_schema() -> None:
    class HalfSchema:
        tag = "object"

    assert synthesize_or_fallback(HalfSchema()) == fallback_payload()  # type: ignore[arg-type]


def test_fallback_variant_returns_synthesized_value_when_possible() -> None:
    assert synthesize_or_fallback(s.obj(summary=s.string())) == {"summary": DIAGNOSTIC_MESSAGE}
