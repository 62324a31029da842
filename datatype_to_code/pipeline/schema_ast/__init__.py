"""
Schema AST (Abstract Syntax Tree) module.

Contains the AST node definitions and parser for datatype schemas.
"""

from __future__ import annotations

from .nodes import (
    DefinitionKind,
    DefinitionNode,
    EnumNode,
    FieldNode,
    InterfaceNode,
    MessageNode,
    RecordNode,
    RequestNode,
    SchemaAST,
    SymbolNode,
    TargetLanguage,
)
from .parser import SchemaParser

__all__ = [
    "DefinitionKind",
    "DefinitionNode",
    "RecordNode",
    "InterfaceNode",
    "EnumNode",
    "FieldNode",
    "MessageNode",
    "RequestNode",
    "SymbolNode",
    "TargetLanguage",
    "SchemaAST",
    "SchemaParser",
]
