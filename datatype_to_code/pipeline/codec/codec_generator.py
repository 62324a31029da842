"""
JSON codec generation.

Renders one sjson-new format trait per definition and an optional
aggregate codec mixing all of them in. Codecs are Scala sources for both
targets; Java types are constructed through their ``of`` factories and
read through their accessor methods.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import jinja2

from ..analyzer.ir_nodes import ResolvedModel, ResolvedType, TypeRef, qualify
from ..backends.base import TEMPLATE_DIR, EmittedUnit, generation_comment, output_path
from ..config import GeneratorConfig
from ..errors import EmissionError
from ..schema_ast.nodes import DefinitionKind, TargetLanguage

logger = logging.getLogger(__name__)

# Largest arity of sjson-new's flatUnionFormatN
MAX_UNION_VARIANTS = 22

BASE_PROTOCOL = "sjsonnew.BasicJsonProtocol"

# Java primitives spelled as Scala value types
SCALA_VALUE_TYPES = {
    "boolean": "Boolean",
    "byte": "Byte",
    "char": "Char",
    "short": "Short",
    "int": "Int",
    "long": "Long",
    "float": "Float",
    "double": "Double",
}


@dataclass(frozen=True)
class FormatLocation:
    """Where the format of one definition lives."""

    type_name: str
    trait_name: str
    namespace: str | None

    @property
    def qualified_trait(self) -> str:
        return qualify(self.namespace, self.trait_name)


class CodecGenerator:
    """Generates sjson-new JSON formats for a resolved model."""

    FILE_EXTENSION = "scala"

    def __init__(self, config: GeneratorConfig):
        self.config = config
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR / "codec")),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
            undefined=jinja2.StrictUndefined,
        )
        self.prefix_template = self.jinja_env.get_template("prefix.scala.jinja2")
        self.templates = {kind: self.jinja_env.get_template(f"{kind.value}.scala.jinja2") for kind in DefinitionKind}
        self.full_codec_template = self.jinja_env.get_template("full_codec.scala.jinja2")

    def generate(self, model: ResolvedModel) -> list[EmittedUnit]:
        """
        Render every format and the full codec.

        Args:
            model: The resolved model

        Returns:
            Rendered codec files, in definition order with the full codec last

        Raises:
            EmissionError: If a union has too many variants or two formats collide
        """
        formats = self.plan_formats(model)
        units = [self.render_format(model[name], model, formats) for name in formats]

        full_codec = self.render_full_codec(model, formats)
        if full_codec is not None:
            units.append(full_codec)

        seen: dict[str, str] = {}
        for unit in units:
            if unit.path in seen:
                raise EmissionError(
                    f"Codec {unit.path} is generated for both {seen[unit.path]} and {unit.type_name}",
                    definition=unit.type_name,
                )
            seen[unit.path] = unit.type_name
        return units

    def plan_formats(self, model: ResolvedModel) -> dict[str, FormatLocation]:
        """Definitions that get a format, keyed by qualified name."""
        formats: dict[str, FormatLocation] = {}
        for rtype in model.types:
            if not rtype.generate_codec:
                logger.debug("%s: codec generation disabled", rtype.qualified_name)
                continue
            formats[rtype.qualified_name] = FormatLocation(
                type_name=rtype.qualified_name,
                trait_name=f"{rtype.name}Formats",
                namespace=self.codec_namespace(model, rtype),
            )

        # Unions over nothing have no format
        for rtype in model.types:
            if rtype.is_interface and rtype.qualified_name in formats and not self._variants(model, rtype, formats):
                logger.warning("%s: no concrete descendants, skipping its codec", rtype.qualified_name)
                del formats[rtype.qualified_name]
        return formats

    def codec_namespace(self, model: ResolvedModel, rtype: ResolvedType | None = None) -> str | None:
        """Config namespace, else the schema's, else the type's own."""
        if self.config.codec_namespace:
            return self.config.codec_namespace
        if model.codec_namespace:
            return model.codec_namespace
        return rtype.namespace if rtype is not None else None

    def full_codec_name(self, model: ResolvedModel) -> str | None:
        return self.config.full_codec_name or model.full_codec or None

    def render_format(self, rtype: ResolvedType, model: ResolvedModel, formats: dict[str, FormatLocation]) -> EmittedUnit:
        """Render the format trait of one definition."""
        location = formats[rtype.qualified_name]
        if rtype.is_record:
            ctx, deps = self._record_context(rtype, model, formats)
        elif rtype.is_interface:
            ctx, deps = self._interface_context(rtype, model, formats)
        else:
            if not rtype.symbols:
                raise EmissionError("An enum without symbols has no JSON format", definition=rtype.qualified_name)
            ctx, deps = {"symbols": [s.name for s in rtype.symbols]}, []

        ctx.update(
            trait_name=location.trait_name,
            format_name=f"{rtype.name}Format",
            type_name=rtype.qualified_name,
            self_type=" with ".join([BASE_PROTOCOL, *deps]),
        )
        prefix = self.prefix_template.render(
            generation_comment=generation_comment(self.config),
            namespace=location.namespace,
            imports=True,
        )
        return EmittedUnit(
            type_name=rtype.qualified_name,
            path=output_path(location.namespace, location.trait_name, self.FILE_EXTENSION, self.config.file_naming_strategy),
            content=prefix + self.templates[rtype.kind].render(ctx),
        )

    def render_full_codec(self, model: ResolvedModel, formats: dict[str, FormatLocation]) -> EmittedUnit | None:
        """Render the aggregate codec, if one is named."""
        name = self.full_codec_name(model)
        if not name:
            return None
        namespace = self.codec_namespace(model)
        prefix = self.prefix_template.render(
            generation_comment=generation_comment(self.config),
            namespace=namespace,
            imports=False,
        )
        content = self.full_codec_template.render(
            name=name,
            traits=[location.qualified_trait for location in formats.values()],
        )
        return EmittedUnit(
            type_name=qualify(namespace, name),
            path=output_path(namespace, name, self.FILE_EXTENSION, self.config.file_naming_strategy),
            content=prefix + content,
        )

    def codec_type(self, type_ref: TypeRef, rtype: ResolvedType, model: ResolvedModel) -> str:
        """Scala spelling of a field type as seen from the codec package."""
        found = model.lookup(type_ref.name, rtype.namespace)
        if found is not None:
            base = found.qualified_name
        elif rtype.target == TargetLanguage.JAVA:
            base = SCALA_VALUE_TYPES.get(type_ref.name, type_ref.name)
        else:
            base = type_ref.name

        if rtype.target == TargetLanguage.JAVA:
            if type_ref.is_optional:
                return f"java.util.Optional[{base}]"
            if type_ref.is_list:
                return f"Array[{base}]"
            return base
        if type_ref.is_optional:
            return f"Option[{base}]"
        if type_ref.is_list:
            return f"Vector[{base}]"
        return base

    def _record_context(
        self, rtype: ResolvedType, model: ResolvedModel, formats: dict[str, FormatLocation]
    ) -> tuple[dict[str, Any], list[str]]:
        is_java = rtype.target == TargetLanguage.JAVA
        fields = [
            {
                "name": f.name,
                "type": self.codec_type(f.type_ref, model[f.declared_in], model),
                "default": f.default,
                "accessor": f"obj.{f.name}()" if is_java else f"obj.{f.name}",
            }
            for f in rtype.fields
        ]
        args = ", ".join(f.name for f in rtype.fields)
        construct = f"{rtype.qualified_name}.of({args})" if is_java else f"{rtype.qualified_name}({args})"

        deps: list[str] = []
        for f in rtype.fields:
            found = model.lookup(f.type_ref.name, model[f.declared_in].namespace)
            if found is None or found.qualified_name == rtype.qualified_name:
                continue
            location = formats.get(found.qualified_name)
            if location is None:
                logger.warning(
                    "%s.%s: %s has no codec, the format relies on an external implicit",
                    rtype.qualified_name,
                    f.name,
                    found.qualified_name,
                )
            elif location.qualified_trait not in deps:
                deps.append(location.qualified_trait)
        return {"fields": fields, "construct": construct}, deps

    def _interface_context(
        self, rtype: ResolvedType, model: ResolvedModel, formats: dict[str, FormatLocation]
    ) -> tuple[dict[str, Any], list[str]]:
        variants = self._variants(model, rtype, formats)
        if len(variants) > MAX_UNION_VARIANTS:
            raise EmissionError(
                f"Union codec supports at most {MAX_UNION_VARIANTS} concrete types, found {len(variants)}",
                definition=rtype.qualified_name,
            )
        return {"variants": [v.qualified_name for v in variants]}, [
            formats[v.qualified_name].qualified_trait for v in variants
        ]

    def _variants(self, model: ResolvedModel, rtype: ResolvedType, formats: dict[str, FormatLocation]) -> list[ResolvedType]:
        return [d for d in model.concrete_descendants(rtype.qualified_name) if d.qualified_name in formats]

