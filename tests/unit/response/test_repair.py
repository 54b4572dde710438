"""Truncation repair: every declared field comes back, recovered or defaulted."""

import pytest

from browser_wand.core.shapes import (
    PRODUCT_SEARCH_SHAPE,
    TEXT,
    TIMELINE_SHAPE,
    ArrayShape,
    FieldKind,
)
from browser_wand.response.repair import (
    infer_object_shape,
    recover_object_array,
    recover_object_field,
    recover_string_array,
    recover_string_field,
    repair,
    unescape_json_string,
)

pytestmark = pytest.mark.unit


def test_string_field_cut_before_closing_quote():
    assert recover_string_field('{"summary": "Prices rose', "summary") == "Prices rose"


def test_string_field_with_escapes():
    text = r'{"title": "Say \"hi\"\nnow"}'
    assert recover_string_field(text, "title") == 'Say "hi"\nnow'


def test_missing_field_is_none():
    assert recover_string_field('{"a": "b"}', "missing") is None


def test_dangling_escape_is_dropped():
    assert unescape_json_string("cut\\") == "cut"


def test_object_array_keeps_only_complete_objects():
    text = '{"products": [{"title": "A"}, {"title": "B"}, {"title": "C'
    assert recover_object_array(text, "products") == [{"title": "A"}, {"title": "B"}]


def test_string_array_keeps_only_closed_strings():
    text = '{"keyPoints": ["one", "two", "thr'
    assert recover_string_array(text, "keyPoints") == ["one", "two"]


def test_product_search_shape_defaults_missing_fields():
    text = '{"type": "products", "summary": "Found two", "products": [{"title": "A"}'
    outcome = repair(text, PRODUCT_SEARCH_SHAPE)
    assert outcome.payload == {
        "type": "products",
        "summary": "Found two",
        "products": [{"title": "A"}],
    }
    assert outcome.defaulted == ()


def test_timeline_shape_defaults_are_type_appropriate():
    outcome = repair('{"summary": "Short', TIMELINE_SHAPE)
    assert outcome.payload == {
        "summary": "Short",
        "background": "",
        "timeline": [],
        "keyPoints": [],
    }
    assert outcome.recovered == ("summary",)
    assert outcome.defaulted == ("background", "timeline", "keyPoints")
    assert not outcome.is_empty


def test_nothing_recovered_is_empty():
    outcome = repair("{", TIMELINE_SHAPE)
    assert outcome.is_empty
    assert outcome.payload["timeline"] == []


def test_array_shape_with_objects():
    outcome = repair('[{"a": 1}, {"b": 2}, {"c"', ArrayShape())
    assert outcome.payload == [{"a": 1}, {"b": 2}]
    assert outcome.recovered == ("items",)


def test_text_shape_is_returned_stripped():
    assert repair("  partial prose ", TEXT).payload == "partial prose"


def test_inferred_shape_from_visible_keys():
    shape = infer_object_shape('{"name": "x", "tags": ["a"], "items": [{"k": 1}]')
    kinds = {spec.name: spec.kind for spec in shape.fields}
    assert kinds == {
        "name": FieldKind.STRING,
        "tags": FieldKind.STRING_ARRAY,
        "items": FieldKind.OBJECT_ARRAY,
    }


def test_repair_without_shape_infers_it():
    outcome = repair('{"name": "Lamp", "tags": ["desk", "li')
    assert outcome.payload == {"name": "Lamp", "tags": ["desk"]}


def test_inferred_shape_skips_keys_of_nested_objects():
    shape = infer_object_shape('{"meta": {"title": "inner"}, "name": "x", "tags": ["a"')
    kinds = {spec.name: spec.kind for spec in shape.fields}
    assert kinds == {
        "meta": FieldKind.OBJECT,
        "name": FieldKind.STRING,
        "tags": FieldKind.STRING_ARRAY,
    }


def test_nested_object_field_is_kept_whole_and_its_keys_stay_inside():
    outcome = repair('{"meta": {"title": "inner"}, "name": "x", "tags": ["a"')
    assert outcome.payload == {"meta": {"title": "inner"}, "name": "x", "tags": ["a"]}
    assert outcome.defaulted == ()


def test_string_field_ignores_same_named_key_in_nested_object():
    text = '{"meta": {"name": "inner"}, "name": "outer"'
    assert recover_string_field(text, "name") == "outer"


def test_unclosed_object_field_is_none():
    assert recover_object_field('{"meta": {"title": "cut', "meta") is None
