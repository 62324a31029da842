"""
Tests for the payload codec, which applies the generated codec rules to
JSON documents.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from datatype_to_code.pipeline.analyzer import TypeResolver
from datatype_to_code.pipeline.codec import DefaultValue, PayloadCodec, RecordValue
from datatype_to_code.pipeline.errors import PayloadError
from datatype_to_code.pipeline.schema_ast import SchemaParser

TEST_DATA = Path(__file__).parent / "test_data"


def load_codec(name: str) -> PayloadCodec:
    with open(TEST_DATA / name) as f:
        schema = json.load(f)
    return PayloadCodec(TypeResolver().resolve(SchemaParser().parse(schema)))


PERSON_SCHEMA = {
    "types": [
        {
            "name": "Person",
            "namespace": "com.example",
            "target": "Scala",
            "type": "record",
            "fields": [{"name": "name", "type": "String"}, {"name": "age", "type": "Int"}],
        }
    ]
}


@pytest.fixture
def shapes():
    return load_codec("shapes.json")


class TestRecordValue:
    def test_equality_and_hash(self):
        a = RecordValue.of("p.Point", x=1, y=2)
        b = RecordValue("p.Point", (("x", 1), ("y", 2)))

        assert a == b
        assert len({a, b}) == 1
        assert a == RecordValue.of("p.Point", y=2, x=1)
        assert len({a, RecordValue.of("p.Point", y=2, x=1)}) == 1
        assert a != RecordValue.of("p.Point", x=1, y=3)
        assert a != RecordValue.of("p.Vector", x=1, y=2)

    def test_field_access(self):
        value = RecordValue.of("p.Point", x=1, y=2)

        assert value["y"] == 2
        assert value.as_dict() == {"x": 1, "y": 2}
        with pytest.raises(KeyError):
            value["z"]


class TestEncode:
    def test_person(self):
        codec = PayloadCodec(TypeResolver().resolve(SchemaParser().parse(PERSON_SCHEMA)))

        assert codec.encode_json(RecordValue.of("com.example.Person", name="Bob", age=20)) == '{"name":"Bob","age":20}'

    def test_union_value_carries_discriminator(self, shapes):
        circle = RecordValue.of("com.example.shapes.Circle", color="Red", radius=1.5)

        assert shapes.encode(circle, "com.example.shapes.Shape") == {"type": "Circle", "color": "Red", "radius": 1.5}
        assert shapes.encode(circle) == {"color": "Red", "radius": 1.5}

    def test_defaults_and_empty_optionals_are_omitted(self, shapes):
        square = RecordValue.of("com.example.shapes.Square", color="Blue", sides=4, side=2.0, label=DefaultValue("None"))
        drawing = RecordValue.of("com.example.shapes.Drawing", title="t", shapes=(square,), background=None)

        assert shapes.encode_json(drawing) == '{"title":"t","shapes":[{"type":"Square","color":"Blue","sides":4,"side":2.0}]}'

    def test_missing_required_field(self, shapes):
        with pytest.raises(PayloadError) as exc_info:
            shapes.encode(RecordValue.of("com.example.shapes.Circle", color="Red"))

        assert exc_info.value.field == "radius"

    def test_wrong_record_type(self, shapes):
        with pytest.raises(PayloadError):
            shapes.encode(RecordValue.of("com.example.shapes.Circle", color="Red", radius=1.0), "com.example.shapes.Drawing")

    def test_enum_needs_type_name(self, shapes):
        assert shapes.encode("Red", "com.example.shapes.Color") == "Red"
        with pytest.raises(PayloadError):
            shapes.encode("Red")


class TestDecode:
    def test_person(self):
        codec = PayloadCodec(TypeResolver().resolve(SchemaParser().parse(PERSON_SCHEMA)))

        assert codec.decode_json('{"name":"Bob","age":20}', "com.example.Person") == RecordValue.of(
            "com.example.Person", name="Bob", age=20
        )

    def test_absent_field_uses_default(self):
        codec = load_codec("greeting.json")

        value = codec.decode({"message": "hi"}, "com.example.Greeting")

        assert value == RecordValue.of("com.example.Greeting", message="hi", date=DefaultValue("new java.util.Date()"))

    def test_unknown_keys_are_ignored(self):
        codec = load_codec("greeting.json")

        value = codec.decode({"message": "hi", "date": "2020-01-01", "extra": True}, "com.example.Greeting")

        assert value["date"] == "2020-01-01"

    def test_missing_required_field(self):
        codec = load_codec("greeting.json")

        with pytest.raises(PayloadError) as exc_info:
            codec.decode({"date": "2020-01-01"}, "com.example.Greeting")

        assert exc_info.value.definition == "com.example.Greeting"
        assert exc_info.value.field == "message"

    def test_union(self, shapes):
        value = shapes.decode({"type": "Circle", "color": "Red", "radius": 1.5}, "com.example.shapes.Shape")

        assert value == RecordValue.of("com.example.shapes.Circle", color="Red", radius=1.5)

    def test_unknown_discriminator(self, shapes):
        with pytest.raises(PayloadError) as exc_info:
            shapes.decode({"type": "Triangle"}, "com.example.shapes.Shape")

        assert exc_info.value.field == "type"

    def test_interface_is_not_a_variant(self, shapes):
        with pytest.raises(PayloadError):
            shapes.decode({"type": "Polygon", "color": "Red", "sides": 3}, "com.example.shapes.Shape")

    def test_unknown_symbol_in_nested_field(self, shapes):
        with pytest.raises(PayloadError) as exc_info:
            shapes.decode({"color": "Purple", "radius": 1.0}, "com.example.shapes.Circle")

        assert exc_info.value.definition == "com.example.shapes.Circle"
        assert exc_info.value.field == "color"

    def test_optional_and_list_markers(self, shapes):
        value = shapes.decode({"title": "empty"}, "com.example.shapes.Drawing")

        assert value["shapes"] == ()
        assert value["background"] is None

    def test_list_must_be_an_array(self, shapes):
        with pytest.raises(PayloadError) as exc_info:
            shapes.decode({"title": "t", "shapes": {}}, "com.example.shapes.Drawing")

        assert exc_info.value.field == "shapes"

    def test_round_trip(self, shapes):
        data = {
            "title": "scene",
            "shapes": [
                {"type": "Circle", "color": "Green", "radius": 3},
                {"type": "Square", "color": "Red", "sides": 4, "side": 1.5, "label": "box"},
            ],
            "background": "Blue",
        }

        value = shapes.decode(data, "com.example.shapes.Drawing")

        assert shapes.decode(shapes.encode(value), "com.example.shapes.Drawing") == value
        assert shapes.encode(value) == data

    def test_round_trip_ignores_field_order(self):
        codec = PayloadCodec(TypeResolver().resolve(SchemaParser().parse(PERSON_SCHEMA)))
        value = RecordValue.of("com.example.Person", age=20, name="Bob")

        decoded = codec.decode(codec.encode(value), "com.example.Person")

        assert decoded == value
        assert [name for name, _ in decoded.fields] == ["name", "age"]

    def test_round_trip_keeps_empty_defaulted_optional(self, shapes):
        square = RecordValue.of("com.example.shapes.Square", color="Red", sides=4, side=1.0, label=None)

        data = shapes.encode(square)

        assert data == {"color": "Red", "sides": 4, "side": 1.0, "label": None}
        assert shapes.decode(data, "com.example.shapes.Square") == square
        assert shapes.decode({"color": "Red", "sides": 4, "side": 1.0}, "com.example.shapes.Square")["label"] == DefaultValue("None")

    def test_invalid_json(self, shapes):
        with pytest.raises(PayloadError):
            shapes.decode_json("{", "com.example.shapes.Circle")

    def test_unknown_type(self, shapes):
        with pytest.raises(PayloadError):
            shapes.decode({}, "com.example.shapes.Hexagon")
