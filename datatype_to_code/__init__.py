"""Datatype to Code Generator

A Python package for generating growable, binary-compatible Java and Scala
datatypes and their JSON codecs from declarative schemas.
"""

__version__ = "0.1.0"

from .pipeline import (
    AtomicWriter,
    GenerationError,
    GenerationResult,
    GeneratorConfig,
    PipelineGenerator,
)

__all__ = [
    "PipelineGenerator",
    "GenerationResult",
    "GeneratorConfig",
    "GenerationError",
    "AtomicWriter",
]
