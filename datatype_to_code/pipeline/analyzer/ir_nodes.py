"""
IR (Intermediate Representation) node definitions.

These nodes represent the resolved schema, ready for versioning and code
generation: parents are linked, namespaces and targets are inherited and
inheritance is flattened into effective field lists. Every node is
immutable once built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from packaging.version import Version

from ..schema_ast.nodes import DefinitionKind, SymbolNode, TargetLanguage


@dataclass(frozen=True)
class TypeRef:
    """A field or parameter type.

    The base name is opaque and rendered verbatim; only the ``lazy``
    prefix and the ``?`` / ``*`` suffixes are interpreted.
    """

    name: str = ""
    is_optional: bool = False  # T?
    is_list: bool = False  # T*
    is_lazy: bool = False  # lazy T

    @staticmethod
    def parse(text: str) -> TypeRef:
        """Parse a type-reference string such as ``lazy Foo*``."""
        name = text.strip()
        is_lazy = False
        if name.startswith("lazy "):
            is_lazy = True
            name = name[len("lazy ") :].strip()
        is_optional = name.endswith("?")
        is_list = name.endswith("*")
        if is_optional or is_list:
            name = name[:-1].strip()
        return TypeRef(name=name, is_optional=is_optional, is_list=is_list, is_lazy=is_lazy)

    def __str__(self) -> str:
        suffix = "?" if self.is_optional else "*" if self.is_list else ""
        prefix = "lazy " if self.is_lazy else ""
        return f"{prefix}{self.name}{suffix}"


@dataclass(frozen=True)
class ResolvedField:
    """A field of the effective field list."""

    name: str
    type_ref: TypeRef
    declared_in: str  # Qualified name of the declaring definition
    doc: str | None = None
    since: Version | None = None
    since_text: str | None = None
    default: str | None = None

    @property
    def has_default(self) -> bool:
        return self.default is not None


@dataclass(frozen=True)
class ResolvedRequest:
    name: str
    type_ref: TypeRef
    doc: str | None = None


@dataclass(frozen=True)
class ResolvedMessage:
    name: str
    response: TypeRef
    request: tuple[ResolvedRequest, ...] = ()
    doc: str | None = None


@dataclass(frozen=True)
class ResolvedType:
    """A definition with all cross-references resolved."""

    kind: DefinitionKind
    name: str
    target: TargetLanguage
    namespace: str | None = None
    doc: str | None = None
    extra: tuple[str, ...] = ()
    to_string: str | None = None
    generate_codec: bool = True

    # Inheritance, as qualified names
    parent: str | None = None
    ancestors: tuple[str, ...] = ()  # Root first
    children: tuple[str, ...] = ()
    descendants: tuple[str, ...] = ()  # Pre-order

    # Fields: own declarations, and ancestors-then-own
    own_fields: tuple[ResolvedField, ...] = ()
    fields: tuple[ResolvedField, ...] = ()

    messages: tuple[ResolvedMessage, ...] = ()
    symbols: tuple[SymbolNode, ...] = ()

    # Lowest since among dated fields; None when every field is undated
    min_version: Version | None = None

    @property
    def qualified_name(self) -> str:
        return qualify(self.namespace, self.name)

    @property
    def is_record(self) -> bool:
        return self.kind == DefinitionKind.RECORD

    @property
    def is_interface(self) -> bool:
        return self.kind == DefinitionKind.INTERFACE

    @property
    def is_enum(self) -> bool:
        return self.kind == DefinitionKind.ENUM


@dataclass(frozen=True)
class ResolvedModel:
    """The complete resolved schema, in definition (pre-)order."""

    types: tuple[ResolvedType, ...] = ()
    codec_namespace: str | None = None
    full_codec: str | None = None
    _index: Mapping[str, ResolvedType] = field(init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "_index", MappingProxyType({t.qualified_name: t for t in self.types}))

    def __getitem__(self, qualified_name: str) -> ResolvedType:
        return self._index[qualified_name]

    def __contains__(self, qualified_name: str) -> bool:
        return qualified_name in self._index

    def lookup(self, type_name: str, from_namespace: str | None = None) -> ResolvedType | None:
        """Find the schema type a type-reference base name points at.

        A qualified name wins; otherwise the name is looked up in
        ``from_namespace``. Names of types outside the schema return None.
        """
        if type_name in self._index:
            return self._index[type_name]
        if from_namespace:
            return self._index.get(qualify(from_namespace, type_name))
        return None

    def concrete_descendants(self, qualified_name: str) -> list[ResolvedType]:
        """Records below an interface, in definition order."""
        return [self[d] for d in self[qualified_name].descendants if self[d].is_record]


def qualify(namespace: str | None, name: str) -> str:
    return f"{namespace}.{name}" if namespace else name
