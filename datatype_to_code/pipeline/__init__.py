"""
Pipeline - schema-driven generator of growable datatypes.

This module provides a multi-phase architecture for generating Java and
Scala classes and their JSON codecs from datatype schemas:

1. Phase 1 (Parser): Parse the schema document into a Schema AST
2. Phase 2 (Resolver): Link inheritance and build the resolved model
3. Phase 3 (Versioning): Compute version tiers and construction overloads
4. Phase 4 (Backends): Render sources through Jinja2 templates
5. Phase 5 (Codecs): Render sjson-new formats and the full codec
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter
from .config import FileNamingStrategy, GeneratorConfig
from .errors import (
    EmissionError,
    GenerationError,
    ParseError,
    ParseErrorKind,
    PayloadError,
    ValidationError,
    ValidationErrorKind,
)
from .generator import GenerationResult, PipelineGenerator

__all__ = [
    "PipelineGenerator",
    "GenerationResult",
    "GeneratorConfig",
    "FileNamingStrategy",
    "AtomicWriter",
    "GenerationError",
    "ParseError",
    "ParseErrorKind",
    "ValidationError",
    "ValidationErrorKind",
    "EmissionError",
    "PayloadError",
]
