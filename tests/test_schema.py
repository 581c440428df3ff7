import pytest

from advocate import schema as s
from advocate.errors import ValidationError

RESPONSE = s.obj(response=s.string())
INTERPRETATION = s.obj(
    action=s.string(),
    parameters=s.obj(matchedPhrase=s.optional(s.string()), allow_extra=True),
    confidence=s.number(),
)


def test_object_fields_keep_declaration_order() -> None:
    schema = s.obj(b=s.string(), a=s.number(), c=s.boolean())
    assert [name for name, _ in schema.fields] == ["b", "a", "c"]


def test_validate_accepts_conforming_object() -> None:
    assert s.validate(RESPONSE, {"response": "hi"}) is True
    assert s.validate(INTERPRETATION, {"action": "search", "parameters": {}, "confidence": 0.4}) is True


def test_validate_rejects_wrong_field_type() -> None:
    assert s.validate(RESPONSE, {"response": 3}) is False
    assert s.validate(RESPONSE, "plain text") is False


def test_booleans_are_not_numbers() -> None:
    assert s.validate(s.number(), True) is False
    assert s.validate(s.number(), 0) is True
    assert s.validate(s.boolean(), 0) is False


def test_optional_fields_may_be_missing_or_null() -> None:
    schema = s.obj(query=s.string(), language=s.optional(s.string()))
    assert s.validate(schema, {"query": "q"}) is True
    assert s.validate(schema, {"query": "q", "language": None}) is True
    assert s.validate(schema, {"query": "q", "language": 1}) is False


def test_extra_keys_only_allowed_when_declared() -> None:
    assert s.validate(RESPONSE, {"response": "x", "error": True}) is False
    assert s.validate(INTERPRETATION, {"action": "x", "parameters": {"searchTerm": "news"}, "confidence": 1}) is True


def test_check_reports_path_of_first_mismatch() -> None:
    with pytest.raises(ValidationError) as exc_info:
        s.check(INTERPRETATION, {"action": "x", "parameters": {"matchedPhrase": 5}, "confidence": 1}, flow="f")
    assert exc_info.value.path == "$.parameters.matchedPhrase"
    assert exc_info.value.flow == "f"


def test_missing_required_field_is_reported() -> None:
    with pytest.raises(ValidationError) as exc_info:
        s.check(INTERPRETATION, {"action": "x", "confidence": 1})
    assert exc_info.value.path == "$.parameters"


def test_unknown_accepts_anything() -> None:
    schema = s.obj(items=s.unknown("array"))
    assert s.validate(schema, {"items": [1, 2]}) is True
    assert s.validate(schema, {}) is True


def test_describe_renders_shape_for_prompts() -> None:
    shape = s.describe(INTERPRETATION)
    assert shape["action"] == "string"
    assert shape["parameters"]["..."] == "any additional keys"
    assert shape["parameters"]["matchedPhrase"] == "string | null (optional)"
