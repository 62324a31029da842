"""
Scala code generation backend.

Records become final classes with a private primary constructor holding
the full field list, one auxiliary constructor per older version tier and
matching ``apply`` overloads on the companion object.
"""

from __future__ import annotations

from typing import Any

from ...utils import compose_doc, with_method_name
from ..analyzer.ir_nodes import ResolvedField, ResolvedModel, ResolvedType, TypeRef
from ..analyzer.versioning import Overload, TypeVersioning
from ..errors import EmissionError
from ..schema_ast.nodes import TargetLanguage
from .base import CodeBackend, OutputUnit


class ScalaBackend(CodeBackend):
    """Scala code generation backend."""

    TARGET = TargetLanguage.SCALA
    TEMPLATE_LANG = "scala"
    FILE_EXTENSION = "scala"
    INDENT = "  "

    def plan_units(self, model: ResolvedModel) -> list[OutputUnit]:
        """Group sealed hierarchies into their root interface's file."""
        if not self.config.seal_interfaces:
            return super().plan_units(model)

        roots = [t for t in model.types if t.target == self.TARGET and t.is_interface and t.parent is None]
        grouped: set[str] = set()
        for root in roots:
            for name in root.descendants:
                descendant = model[name]
                if descendant.namespace != root.namespace:
                    raise EmissionError(
                        f"Sealed interface {root.qualified_name} cannot hold a descendant from namespace '{descendant.namespace or ''}'",
                        definition=descendant.qualified_name,
                    )
            grouped.update(root.descendants)

        units = []
        for unit in super().plan_units(model):
            if unit.type_name in grouped:
                continue
            rtype = model[unit.type_name]
            if rtype.is_interface and rtype.parent is None:
                unit = OutputUnit(
                    type_name=unit.type_name,
                    simple_name=unit.simple_name,
                    namespace=unit.namespace,
                    members=(unit.type_name, *rtype.descendants),
                )
            units.append(unit)
        return units

    def translate_type(self, type_ref: TypeRef, definition: str | None = None, field: str | None = None) -> str:
        """Translate a type reference to a Scala type (by-name marker excluded)."""
        if type_ref.is_optional:
            return f"Option[{type_ref.name}]"
        if type_ref.is_list:
            return f"Vector[{type_ref.name}]"
        return type_ref.name

    def _param(self, field: ResolvedField) -> str:
        """A field as a method parameter."""
        scala_type = self.translate_type(field.type_ref)
        if field.type_ref.is_lazy:
            return f"{field.name}: => {scala_type}"
        return f"{field.name}: {scala_type}"

    def _record_context(self, rtype: ResolvedType, versioning: TypeVersioning) -> dict[str, Any]:
        fields = versioning.fields
        names = ", ".join(f.name for f in fields)

        ctor_params = []
        for f in fields:
            scala_type = self.translate_type(f.type_ref)
            ctor_params.append(f"_{f.name}: => {scala_type}" if f.type_ref.is_lazy else f"val {f.name}: {scala_type}")

        extends = f"{rtype.parent} with Serializable" if rtype.parent else "Serializable"
        equality = " && ".join(f"(this.{f.name} == x.{f.name})" for f in fields)

        return {
            "doc": compose_doc(rtype.doc, [(f.name, f.doc) for f in fields]),
            "ctor_params": "(\n  " + ",\n  ".join(ctor_params) + ")" if ctor_params else "()",
            "extends": extends,
            "lazy_fields": [
                {"name": f.name, "type": self.translate_type(f.type_ref)} for f in fields if f.type_ref.is_lazy
            ],
            "aux_constructors": [self._overload_context(o, fields) for o in versioning.overloads if not o.is_full],
            "applies": [
                {"params": ", ".join(self._param(f) for f in o.params), "args": ", ".join(f.name for f in o.params)}
                for o in versioning.overloads
            ],
            "binder": "x" if fields else "_",
            "equality": equality or "true",
            "hash_code": self._hash_code(rtype),
            "to_string": self._to_string(rtype),
            "copy_params": ", ".join(f"{self._param(f)} = {f.name}" for f in fields),
            "arg_names": names,
            "withs": [{"method": with_method_name(f.name), "param": self._param(f), "field": f.name} for f in fields],
        }

    def _overload_context(self, overload: Overload, fields: tuple[ResolvedField, ...]) -> dict[str, str]:
        """An auxiliary constructor filling omitted fields with their defaults."""
        defaults = {f.name: f.default for f in overload.omitted}
        return {
            "params": ", ".join(self._param(f) for f in overload.params),
            "args": ", ".join(defaults.get(f.name, f.name) for f in fields),
        }

    def _interface_context(self, rtype: ResolvedType) -> dict[str, Any]:
        return {
            "doc": rtype.doc,
            "sealed": self.config.seal_interfaces,
            "extends": rtype.parent or "Serializable",
            "accessors": [
                {"name": f.name, "type": self.translate_type(f.type_ref), "doc": f.doc} for f in rtype.fields
            ],
            "messages": [
                {
                    "name": m.name,
                    "params": ", ".join(f"{r.name}: {self.translate_type(r.type_ref)}" for r in m.request),
                    "response": self.translate_type(m.response),
                    "doc": compose_doc(m.doc, [(r.name, r.doc) for r in m.request]),
                }
                for m in rtype.messages
            ],
            "to_string": rtype.to_string,
        }

    def _enum_context(self, rtype: ResolvedType) -> dict[str, Any]:
        return {"doc": rtype.doc, "symbols": rtype.symbols}

    def _type_name_hash(self, qualified_name: str) -> str:
        return f'"{qualified_name}".##'

    def _field_hash(self, field: ResolvedField) -> str:
        return f"{field.name}.##"

    def _field_string(self, field: ResolvedField) -> str:
        return field.name

