"""
Analyzer module.

Contains type resolution, the resolved model and the field versioning
engine.
"""

from __future__ import annotations

from .ir_nodes import (
    ResolvedField,
    ResolvedMessage,
    ResolvedModel,
    ResolvedRequest,
    ResolvedType,
    TypeRef,
)
from .resolver import TypeResolver
from .versioning import (
    Overload,
    TypeVersioning,
    VersioningEngine,
    VersioningPlan,
    VersionTier,
)

__all__ = [
    "ResolvedField",
    "ResolvedMessage",
    "ResolvedModel",
    "ResolvedRequest",
    "ResolvedType",
    "TypeRef",
    "TypeResolver",
    "Overload",
    "TypeVersioning",
    "VersioningEngine",
    "VersioningPlan",
    "VersionTier",
]
