"""
Base class for code generation backends.

Defines the interface that all language-specific backends must implement
and the parts every target shares: template setup, output layout, and the
hash and string-representation folds over the full field list.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

import jinja2

from ... import __version__
from ...utils import doc_comment, indent_lines
from ..analyzer.ir_nodes import ResolvedField, ResolvedModel, ResolvedType, TypeRef
from ..analyzer.versioning import (
    TypeVersioning,
    VersioningPlan,
    hash_expression,
    to_string_expression,
)
from ..config import FileNamingStrategy, GeneratorConfig
from ..schema_ast.nodes import DefinitionKind, TargetLanguage

TEMPLATE_DIR = Path(__file__).parent.parent.parent / "templates"


@dataclass(frozen=True)
class OutputUnit:
    """Definitions rendered together into one file."""

    type_name: str  # Qualified name of the definition naming the file
    simple_name: str
    namespace: str | None
    members: tuple[str, ...]


@dataclass(frozen=True)
class EmittedUnit:
    """A rendered file."""

    type_name: str
    path: str
    content: str


def generation_comment(config: GeneratorConfig) -> str:
    """Header comment of every rendered file, empty when disabled."""
    if not config.add_generation_comment:
        return ""
    return f"// Generated by datatype_to_code v{__version__}. DO NOT EDIT MANUALLY."


def output_path(namespace: str | None, name: str, extension: str, strategy: FileNamingStrategy) -> str:
    """Relative destination path of a file."""
    filename = f"{name}.{extension}"
    if strategy == FileNamingStrategy.PACKAGE and namespace:
        return str(PurePosixPath(*namespace.split("."), filename))
    return filename


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Target rendered by this backend
    TARGET: TargetLanguage

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    # One indentation level
    INDENT: str = "    "

    def __init__(self, config: GeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR / self.TEMPLATE_LANG)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
            undefined=jinja2.StrictUndefined,
        )
        self.jinja_env.filters["doc_comment"] = doc_comment

        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")
        self.templates = {kind: self.jinja_env.get_template(f"{kind.value}.{self.FILE_EXTENSION}.jinja2") for kind in DefinitionKind}

    def plan_units(self, model: ResolvedModel) -> list[OutputUnit]:
        """Decide which definitions of this target go into which file."""
        return [
            OutputUnit(type_name=t.qualified_name, simple_name=t.name, namespace=t.namespace, members=(t.qualified_name,))
            for t in model.types
            if t.target == self.TARGET
        ]

    def render_unit(self, unit: OutputUnit, model: ResolvedModel, plan: VersioningPlan) -> EmittedUnit:
        """Render one file. Pure function of the unit, model and plan."""
        bodies = [self.render_definition(model[name], plan) for name in unit.members]
        prefix = self.prefix_template.render(
            generation_comment=self._generation_comment(),
            namespace=unit.namespace,
        )
        return EmittedUnit(
            type_name=unit.type_name,
            path=output_path(unit.namespace, unit.simple_name, self.FILE_EXTENSION, self.config.file_naming_strategy),
            content=prefix + "\n".join(bodies),
        )

    def render_definition(self, rtype: ResolvedType, plan: VersioningPlan) -> str:
        """Render the source text of one definition."""
        if rtype.is_record:
            ctx = self._record_context(rtype, plan[rtype.qualified_name])
        elif rtype.is_interface:
            ctx = self._interface_context(rtype)
        else:
            ctx = self._enum_context(rtype)
        ctx.setdefault("name", rtype.name)
        ctx.setdefault("extra", indent_lines(rtype.extra, self.INDENT))
        return self.templates[rtype.kind].render(ctx)

    @abstractmethod
    def translate_type(self, type_ref: TypeRef, definition: str | None = None, field: str | None = None) -> str:
        """
        Translate a type reference to a language-specific type string.

        Args:
            type_ref: The type reference
            definition: Qualified name of the definition, for error context
            field: Field name, for error context

        Returns:
            Language-specific type string

        Raises:
            EmissionError: If the target cannot express the type
        """

    @abstractmethod
    def _record_context(self, rtype: ResolvedType, versioning: TypeVersioning) -> dict[str, Any]:
        """Template variables of a record."""

    @abstractmethod
    def _interface_context(self, rtype: ResolvedType) -> dict[str, Any]:
        """Template variables of an interface."""

    @abstractmethod
    def _enum_context(self, rtype: ResolvedType) -> dict[str, Any]:
        """Template variables of an enum."""

    @abstractmethod
    def _type_name_hash(self, qualified_name: str) -> str:
        """Expression hashing the type's name, the first hash term."""

    @abstractmethod
    def _field_hash(self, field: ResolvedField) -> str:
        """Expression hashing one field value."""

    @abstractmethod
    def _field_string(self, field: ResolvedField) -> str:
        """Expression rendering one field value as a string."""

    def _hash_code(self, rtype: ResolvedType) -> str:
        terms = [self._type_name_hash(rtype.qualified_name)]
        terms.extend(self._field_hash(f) for f in rtype.fields)
        return hash_expression(terms)

    def _to_string(self, rtype: ResolvedType) -> str:
        if rtype.to_string:
            return rtype.to_string
        values = [(f.name, self._field_string(f)) for f in rtype.fields]
        return to_string_expression(rtype.name, values, self.TARGET.labels_fields)

    def _generation_comment(self) -> str:
        return generation_comment(self.config)
