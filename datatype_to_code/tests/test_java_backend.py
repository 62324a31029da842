"""
Tests for Java source generation.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from datatype_to_code.pipeline import EmissionError, GeneratorConfig, PipelineGenerator
from datatype_to_code.pipeline.analyzer import TypeRef
from datatype_to_code.pipeline.backends import JavaBackend

TEST_DATA = Path(__file__).parent / "test_data"


def load_schema(name: str) -> dict:
    with open(TEST_DATA / name) as f:
        return json.load(f)


def generate(schema: dict, **config):
    config.setdefault("add_generation_comment", False)
    config.setdefault("generate_codecs", False)
    return PipelineGenerator(schema, GeneratorConfig(**config)).generate()


@pytest.fixture(scope="module")
def sources():
    return generate(load_schema("people.json")).sources


class TestJavaTypes:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("String", "String"),
            ("int", "int"),
            ("int?", "java.util.Optional<Integer>"),
            ("String?", "java.util.Optional<String>"),
            ("double*", "double[]"),
            ("java.util.Date*", "java.util.Date[]"),
        ],
    )
    def test_translate(self, text, expected):
        assert JavaBackend(GeneratorConfig()).translate_type(TypeRef.parse(text)) == expected

    def test_lazy_is_rejected(self):
        schema = {
            "types": [
                {
                    "name": "Tree",
                    "namespace": "p",
                    "target": "Java",
                    "type": "record",
                    "fields": [{"name": "next", "type": "lazy Tree"}],
                }
            ]
        }

        with pytest.raises(EmissionError) as exc_info:
            generate(schema)

        assert exc_info.value.definition == "p.Tree"
        assert exc_info.value.field == "next"


class TestJavaRecord:
    def test_header(self, sources):
        person = sources["com/example/people/Person.java"]

        assert person.startswith("package com.example.people;\n\n/** A person */\n")

    def test_class_declaration(self, sources):
        person = sources["com/example/people/Person.java"]

        assert "public final class Person extends com.example.people.Entity implements java.io.Serializable {" in person

    def test_factories_per_tier(self, sources):
        person = sources["com/example/people/Person.java"]

        assert "    public static Person create(long _id, String _name, int _age) {\n        return new Person(_id, _name, _age);\n    }" in person
        assert "    public static Person of(long _id, String _name, int _age) {" in person
        assert (
            "    public static Person of(long _id, String _name, int _age, String[] _nicknames, java.util.Optional<String> _email) {"
            in person
        )

    def test_older_tier_constructor_fills_defaults(self, sources):
        person = sources["com/example/people/Person.java"]

        assert (
            "    protected Person(long _id, String _name, int _age) {\n"
            "        super();\n"
            "        id = _id;\n"
            "        name = _name;\n"
            "        age = _age;\n"
            "        nicknames = new String[] {};\n"
            "        email = java.util.Optional.empty();\n"
            "    }"
        ) in person

    def test_fields_and_accessors(self, sources):
        person = sources["com/example/people/Person.java"]

        assert "    private final String[] nicknames;\n" in person
        assert "    public int age() {\n        return this.age;\n    }" in person

    def test_with_methods_use_full_constructor(self, sources):
        person = sources["com/example/people/Person.java"]

        assert "    public Person withAge(int age) {\n        return new Person(id, name, age, nicknames, email);\n    }" in person

    def test_equality(self, sources):
        person = sources["com/example/people/Person.java"]

        assert (
            "            return (this.id() == o.id()) && java.util.Objects.equals(this.name(), o.name()) && (this.age() == o.age()) && "
            "java.util.Arrays.deepEquals(this.nicknames(), o.nicknames()) && java.util.Objects.equals(this.email(), o.email());"
        ) in person

    def test_hash_code(self, sources):
        person = sources["com/example/people/Person.java"]

        assert (
            '        return 37 * (37 * (37 * (37 * (37 * (37 * (17 + "com.example.people.Person".hashCode()) + '
            "java.util.Objects.hashCode(id())) + java.util.Objects.hashCode(name())) + java.util.Objects.hashCode(age())) + "
            "java.util.Arrays.deepHashCode(nicknames())) + java.util.Objects.hashCode(email()));"
        ) in person

    def test_to_string_labels_fields(self, sources):
        person = sources["com/example/people/Person.java"]

        assert '"Person(" + "id: " + id() + ", " + "name: " + name() + ", "' in person
        assert '"nicknames: " + java.util.Arrays.deepToString(nicknames())' in person

    def test_balanced(self, sources):
        person = sources["com/example/people/Person.java"]

        assert person.count("{") == person.count("}")

    def test_no_fields(self):
        schema = {"types": [{"name": "Marker", "namespace": "p", "target": "Java", "type": "record"}]}

        source = generate(schema).sources["p/Marker.java"]

        assert "    public static Marker of() {\n        return new Marker();\n    }" in source
        assert "            return true;\n        }\n    }" in source
        assert "Marker o" not in source


class TestJavaInterface:
    def test_abstract_accessors(self, sources):
        entity = sources["com/example/people/Entity.java"]

        assert "public abstract class Entity implements java.io.Serializable {\n    public abstract long id();\n}" in entity

    def test_messages(self):
        schema = {
            "types": [
                {
                    "name": "Service",
                    "namespace": "p",
                    "target": "Java",
                    "type": "interface",
                    "messages": [
                        {
                            "name": "lookup",
                            "response": "String?",
                            "request": [{"name": "key", "type": "String"}, {"name": "limit", "type": "int"}],
                        }
                    ],
                }
            ]
        }

        source = generate(schema).sources["p/Service.java"]

        assert "    public abstract java.util.Optional<String> lookup(String key, int limit);\n" in source


class TestJavaEnum:
    def test_enum(self, sources):
        status = sources["com/example/people/Status.java"]

        assert "public enum Status {\n    Active,\n    Retired;\n}\n" in status

    def test_flat_naming(self):
        result = generate(load_schema("people.json"), file_naming_strategy="flat")

        assert sorted(result.sources) == ["Entity.java", "Person.java", "Status.java"]
