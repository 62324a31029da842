"""
Java code generation backend.

Records become final classes with one protected constructor and one pair
of static ``create``/``of`` factories per version tier. Older tiers fill
the fields they do not take with their declared defaults.
"""

from __future__ import annotations

from typing import Any

from ...utils import compose_doc, with_method_name
from ..analyzer.ir_nodes import ResolvedField, ResolvedType, TypeRef
from ..analyzer.versioning import Overload, TypeVersioning
from ..errors import EmissionError
from ..schema_ast.nodes import TargetLanguage
from .base import CodeBackend

# Primitive types and their boxed counterparts
JAVA_PRIMITIVES = {
    "boolean": "Boolean",
    "byte": "Byte",
    "char": "Character",
    "short": "Short",
    "int": "Integer",
    "long": "Long",
    "float": "Float",
    "double": "Double",
}


class JavaBackend(CodeBackend):
    """Java code generation backend."""

    TARGET = TargetLanguage.JAVA
    TEMPLATE_LANG = "java"
    FILE_EXTENSION = "java"

    def translate_type(self, type_ref: TypeRef, definition: str | None = None, field: str | None = None) -> str:
        """Translate a type reference to a Java type."""
        if type_ref.is_lazy:
            raise EmissionError(
                f"Lazy type '{type_ref}' is not supported by the Java target",
                definition=definition,
                field=field,
            )
        if type_ref.is_optional:
            return f"java.util.Optional<{JAVA_PRIMITIVES.get(type_ref.name, type_ref.name)}>"
        if type_ref.is_list:
            return f"{type_ref.name}[]"
        return type_ref.name

    def _field_type(self, rtype: ResolvedType, field: ResolvedField) -> str:
        return self.translate_type(field.type_ref, rtype.qualified_name, field.name)

    def _record_context(self, rtype: ResolvedType, versioning: TypeVersioning) -> dict[str, Any]:
        fields = [
            {
                "name": f.name,
                "type": self._field_type(rtype, f),
                "doc": f.doc,
                "with_method": with_method_name(f.name),
            }
            for f in versioning.fields
        ]

        if rtype.parent:
            heritage = f"extends {rtype.parent} implements java.io.Serializable"
        else:
            heritage = "implements java.io.Serializable"

        return {
            "doc": rtype.doc,
            "heritage": heritage,
            "fields": fields,
            "overloads": [self._overload_context(rtype, o, versioning) for o in versioning.overloads],
            "all_names": ", ".join(f.name for f in versioning.fields),
            "equality": " && ".join(self._field_equality(f) for f in versioning.fields) or "true",
            "hash_code": self._hash_code(rtype),
            "to_string": self._to_string(rtype),
        }

    def _overload_context(self, rtype: ResolvedType, overload: Overload, versioning: TypeVersioning) -> dict[str, Any]:
        defaults = {f.name: f.default for f in overload.omitted}
        assignments = []
        for f in versioning.fields:
            value = defaults.get(f.name, f"_{f.name}")
            assignments.append(f"{f.name} = {value};")
        return {
            "params": ", ".join(f"{self._field_type(rtype, f)} _{f.name}" for f in overload.params),
            "args": ", ".join(f"_{f.name}" for f in overload.params),
            "assignments": assignments,
        }

    def _interface_context(self, rtype: ResolvedType) -> dict[str, Any]:
        if rtype.parent:
            heritage = f"extends {rtype.parent}"
        else:
            heritage = "implements java.io.Serializable"

        messages = []
        for m in rtype.messages:
            params = ", ".join(f"{self.translate_type(r.type_ref, rtype.qualified_name)} {r.name}" for r in m.request)
            messages.append(
                {
                    "name": m.name,
                    "params": params,
                    "response": self.translate_type(m.response, rtype.qualified_name),
                    "doc": compose_doc(m.doc, [(r.name, r.doc) for r in m.request]),
                }
            )

        return {
            "doc": rtype.doc,
            "heritage": heritage,
            "accessors": [{"name": f.name, "type": self._field_type(rtype, f), "doc": f.doc} for f in rtype.fields],
            "messages": messages,
            "to_string": rtype.to_string,
        }

    def _enum_context(self, rtype: ResolvedType) -> dict[str, Any]:
        return {"doc": rtype.doc, "symbols": rtype.symbols}

    def _element_is_primitive(self, field: ResolvedField) -> bool:
        return field.type_ref.name in JAVA_PRIMITIVES

    def _field_equality(self, field: ResolvedField) -> str:
        accessor = f"{field.name}()"
        if field.type_ref.is_list:
            method = "equals" if self._element_is_primitive(field) else "deepEquals"
            return f"java.util.Arrays.{method}(this.{accessor}, o.{accessor})"
        if self._element_is_primitive(field) and not field.type_ref.is_optional:
            return f"(this.{accessor} == o.{accessor})"
        return f"java.util.Objects.equals(this.{accessor}, o.{accessor})"

    def _type_name_hash(self, qualified_name: str) -> str:
        return f'"{qualified_name}".hashCode()'

    def _field_hash(self, field: ResolvedField) -> str:
        accessor = f"{field.name}()"
        if field.type_ref.is_list:
            method = "hashCode" if self._element_is_primitive(field) else "deepHashCode"
            return f"java.util.Arrays.{method}({accessor})"
        return f"java.util.Objects.hashCode({accessor})"

    def _field_string(self, field: ResolvedField) -> str:
        accessor = f"{field.name}()"
        if field.type_ref.is_list:
            method = "toString" if self._element_is_primitive(field) else "deepToString"
            return f"java.util.Arrays.{method}({accessor})"
        return accessor
