"""
Code generation backends.

Contains language-specific code generators.
"""

from __future__ import annotations

from ..config import GeneratorConfig
from ..schema_ast.nodes import TargetLanguage
from .base import CodeBackend, EmittedUnit, OutputUnit, output_path
from .java_backend import JavaBackend
from .scala_backend import ScalaBackend

BACKENDS: dict[TargetLanguage, type[CodeBackend]] = {
    TargetLanguage.JAVA: JavaBackend,
    TargetLanguage.SCALA: ScalaBackend,
}


def create_backend(target: TargetLanguage, config: GeneratorConfig) -> CodeBackend:
    """Instantiate the backend rendering ``target``."""
    return BACKENDS[TargetLanguage(target)](config)


__all__ = [
    "BACKENDS",
    "CodeBackend",
    "EmittedUnit",
    "JavaBackend",
    "OutputUnit",
    "ScalaBackend",
    "create_backend",
    "output_path",
]
