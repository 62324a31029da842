"""
Tests for type resolution: inheritance linking, effective field lists and
model invariants.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from packaging.version import Version

from datatype_to_code.pipeline.analyzer import TypeRef, TypeResolver
from datatype_to_code.pipeline.errors import ValidationError, ValidationErrorKind
from datatype_to_code.pipeline.schema_ast import DefinitionKind, SchemaParser, TargetLanguage

TEST_DATA = Path(__file__).parent / "test_data"


def load_schema(name: str) -> dict:
    with open(TEST_DATA / name) as f:
        return json.load(f)


def resolve(schema: dict):
    return TypeResolver().resolve(SchemaParser().parse(schema))


def load_validation_error_cases():
    with open(TEST_DATA / "invalid_schemas.json") as f:
        return [case for case in json.load(f) if case["error"] == "ValidationError"]


class TestTypeRef:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("String", TypeRef("String")),
            ("Color?", TypeRef("Color", is_optional=True)),
            ("Shape*", TypeRef("Shape", is_list=True)),
            ("lazy Tree", TypeRef("Tree", is_lazy=True)),
            ("lazy Tree*", TypeRef("Tree", is_list=True, is_lazy=True)),
            ("java.util.Map[String, Int]", TypeRef("java.util.Map[String, Int]")),
        ],
    )
    def test_parse(self, text, expected):
        assert TypeRef.parse(text) == expected
        assert str(TypeRef.parse(text)) == text


class TestTypeResolver:
    def test_nested_definitions_inherit_namespace_and_target(self):
        model = resolve(load_schema("shapes.json"))

        square = model["com.example.shapes.Square"]
        assert square.namespace == "com.example.shapes"
        assert square.target == TargetLanguage.SCALA
        assert square.kind == DefinitionKind.RECORD

    def test_definition_order_is_pre_order(self):
        model = resolve(load_schema("shapes.json"))

        assert [t.name for t in model.types] == ["Shape", "Circle", "Polygon", "Square", "Color", "Drawing"]

    def test_inheritance_links(self):
        model = resolve(load_schema("shapes.json"))

        shape = model["com.example.shapes.Shape"]
        assert shape.parent is None
        assert shape.children == ("com.example.shapes.Circle", "com.example.shapes.Polygon")
        assert shape.descendants == (
            "com.example.shapes.Circle",
            "com.example.shapes.Polygon",
            "com.example.shapes.Square",
        )

        square = model["com.example.shapes.Square"]
        assert square.parent == "com.example.shapes.Polygon"
        assert square.ancestors == ("com.example.shapes.Shape", "com.example.shapes.Polygon")

    def test_effective_fields_are_ancestors_first(self):
        model = resolve(load_schema("shapes.json"))

        square = model["com.example.shapes.Square"]
        assert [f.name for f in square.own_fields] == ["side", "label"]
        assert [f.name for f in square.fields] == ["color", "sides", "side", "label"]
        assert [f.declared_in for f in square.fields] == [
            "com.example.shapes.Shape",
            "com.example.shapes.Polygon",
            "com.example.shapes.Square",
            "com.example.shapes.Square",
        ]

    def test_min_version(self):
        model = resolve(load_schema("shapes.json"))

        assert model["com.example.shapes.Square"].min_version == Version("1.1.0")
        assert model["com.example.shapes.Circle"].min_version is None

    def test_messages_are_resolved(self):
        model = resolve(load_schema("shapes.json"))

        (area,) = model["com.example.shapes.Shape"].messages
        assert area.response == TypeRef("Double")
        assert area.request[0].type_ref == TypeRef("Double")

    def test_declared_parent_across_schemas(self):
        schema = {
            "types": [
                {
                    "name": "Event",
                    "namespace": "com.example.base",
                    "target": "Scala",
                    "type": "interface",
                    "fields": [{"name": "at", "type": "Long"}],
                },
                {
                    "name": "Login",
                    "namespace": "com.example.auth",
                    "target": "Scala",
                    "type": "record",
                    "parent": "com.example.base.Event",
                    "fields": [{"name": "user", "type": "String"}],
                },
            ]
        }

        model = resolve(schema)

        login = model["com.example.auth.Login"]
        assert login.parent == "com.example.base.Event"
        assert [f.name for f in login.fields] == ["at", "user"]
        assert model["com.example.base.Event"].descendants == ("com.example.auth.Login",)

    def test_same_namespace_parent_by_simple_name(self):
        schema = {
            "types": [
                {"name": "Base", "namespace": "p", "target": "Java", "type": "interface"},
                {"name": "Impl", "namespace": "p", "target": "Java", "type": "record", "parent": "Base"},
            ]
        }

        model = resolve(schema)

        assert model["p.Impl"].parent == "p.Base"

    def test_lookup(self):
        model = resolve(load_schema("shapes.json"))

        assert model.lookup("Color", "com.example.shapes").name == "Color"
        assert model.lookup("com.example.shapes.Color").name == "Color"
        assert model.lookup("String", "com.example.shapes") is None

    def test_concrete_descendants(self):
        model = resolve(load_schema("shapes.json"))

        assert [t.name for t in model.concrete_descendants("com.example.shapes.Shape")] == ["Circle", "Square"]

    def test_same_name_in_different_namespaces(self):
        schema = {
            "types": [
                {"name": "A", "namespace": "p", "target": "Scala", "type": "record"},
                {"name": "A", "namespace": "q", "target": "Scala", "type": "record"},
            ]
        }

        model = resolve(schema)

        assert "p.A" in model and "q.A" in model

    def test_resolution_is_deterministic(self):
        ast = SchemaParser().parse(load_schema("shapes.json"))

        assert TypeResolver().resolve(ast) == TypeResolver().resolve(ast)

    def test_nested_enum_is_not_a_subtype(self):
        schema = {
            "types": [
                {
                    "name": "Shape",
                    "namespace": "p",
                    "type": "interface",
                    "target": "Scala",
                    "fields": [{"name": "color", "type": "String"}],
                    "types": [
                        {"name": "Kind", "type": "enum", "symbols": ["Round", "Square"]},
                        {"name": "Circle", "type": "record", "fields": [{"name": "radius", "type": "Double"}]},
                    ],
                }
            ]
        }

        model = resolve(schema)

        kind = model["p.Kind"]
        assert kind.namespace == "p"
        assert kind.target == TargetLanguage.SCALA
        assert kind.parent is None
        assert kind.ancestors == ()
        assert kind.fields == ()
        assert model["p.Shape"].children == ("p.Circle",)
        assert model["p.Shape"].descendants == ("p.Circle",)

    def test_duplicate_field_in_one_record(self):
        schema = {
            "types": [
                {
                    "name": "Person",
                    "namespace": "p",
                    "type": "record",
                    "target": "Java",
                    "fields": [{"name": "age", "type": "int"}, {"name": "age", "type": "int"}],
                }
            ]
        }

        with pytest.raises(ValidationError) as exc_info:
            resolve(schema)

        assert exc_info.value.kind == ValidationErrorKind.DUPLICATE_FIELD
        assert exc_info.value.definition == "p.Person"
        assert exc_info.value.field == "age"

    def test_duplicate_field_names_both_declarations(self):
        schema = {
            "types": [
                {
                    "name": "Base",
                    "namespace": "p",
                    "type": "interface",
                    "target": "Java",
                    "fields": [{"name": "age", "type": "int"}],
                    "types": [{"name": "Child", "type": "record", "fields": [{"name": "age", "type": "int"}]}],
                }
            ]
        }

        with pytest.raises(ValidationError) as exc_info:
            resolve(schema)

        error = exc_info.value
        assert error.kind == ValidationErrorKind.DUPLICATE_FIELD
        assert error.definition == "p.Child"
        assert error.field == "age"
        assert "p.Base" in error.message


@pytest.mark.parametrize("test_case", load_validation_error_cases(), ids=lambda tc: tc["name"])
def test_validation_errors(test_case):
    with pytest.raises(ValidationError) as exc_info:
        resolve(test_case["schema"])

    assert exc_info.value.kind == ValidationErrorKind(test_case["kind"])
