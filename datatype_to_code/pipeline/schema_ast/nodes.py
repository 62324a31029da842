"""
AST (Abstract Syntax Tree) node definitions for datatype schemas.

These nodes represent the parsed structure of a schema before any
cross-reference resolution. A definition is one of RecordNode,
InterfaceNode or EnumNode; nesting is expressed by an interface owning
its child definitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class TargetLanguage(str, Enum):
    """Language a definition is rendered in."""

    JAVA = "Java"
    SCALA = "Scala"

    @property
    def labels_fields(self) -> bool:
        """Whether string representations render ``name: value`` pairs."""
        return self is TargetLanguage.JAVA


class DefinitionKind(str, Enum):
    """Discriminator of a definition (the schema's ``type`` key)."""

    RECORD = "record"
    INTERFACE = "interface"
    ENUM = "enum"


@dataclass(frozen=True)
class FieldNode:
    """A field of a record or interface."""

    name: str
    type_ref: str
    doc: str | None = None
    since: str | None = None
    default: str | None = None  # Opaque expression, embedded verbatim
    source_path: str = ""


@dataclass(frozen=True)
class RequestNode:
    """One parameter of a message."""

    name: str
    type_ref: str
    doc: str | None = None


@dataclass(frozen=True)
class MessageNode:
    """An abstract operation signature declared on an interface."""

    name: str
    response: str
    request: tuple[RequestNode, ...] = ()
    doc: str | None = None


@dataclass(frozen=True)
class SymbolNode:
    """One value of an enumeration."""

    name: str
    doc: str | None = None


@dataclass(frozen=True)
class DefinitionNode:
    """Attributes shared by every definition."""

    name: str
    target: TargetLanguage | None = None  # None: inherited from the enclosing interface
    namespace: str | None = None  # None: inherited from the enclosing interface
    doc: str | None = None
    extra: tuple[str, ...] = ()
    generate_codec: bool = True
    source_path: str = ""

    kind: ClassVar[DefinitionKind]


@dataclass(frozen=True)
class RecordNode(DefinitionNode):
    """A concrete, final data type."""

    fields: tuple[FieldNode, ...] = ()
    parent: str | None = None
    to_string: str | None = None

    kind: ClassVar[DefinitionKind] = DefinitionKind.RECORD


@dataclass(frozen=True)
class InterfaceNode(DefinitionNode):
    """An abstract data type; may own nested child definitions."""

    fields: tuple[FieldNode, ...] = ()
    messages: tuple[MessageNode, ...] = ()
    types: tuple[DefinitionNode, ...] = ()
    parent: str | None = None
    to_string: str | None = None

    kind: ClassVar[DefinitionKind] = DefinitionKind.INTERFACE


@dataclass(frozen=True)
class EnumNode(DefinitionNode):
    """A closed set of named values."""

    symbols: tuple[SymbolNode, ...] = ()

    kind: ClassVar[DefinitionKind] = DefinitionKind.ENUM


@dataclass(frozen=True)
class SchemaAST:
    """Root of the parsed schema AST."""

    definitions: tuple[DefinitionNode, ...] = ()
    codec_namespace: str | None = None
    full_codec: str | None = None
