"""
Pipeline entry point.

Runs the phases in order:

1. Phase 1 (Parser): schema document to Schema AST
2. Phase 2 (Resolver): link inheritance and build the resolved model
3. Phase 3 (Versioning): version tiers and construction overloads
4. Phase 4 (Backends): render one source file per output unit
5. Phase 5 (Codecs): render JSON formats and the full codec

Every error is raised before anything is returned, so a failed run never
yields partial output.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from .analyzer.ir_nodes import ResolvedModel
from .analyzer.resolver import TypeResolver
from .analyzer.versioning import VersioningEngine, VersioningPlan
from .backends import EmittedUnit, create_backend
from .backends.base import CodeBackend, OutputUnit
from .codec import CodecGenerator
from .config import GeneratorConfig
from .errors import EmissionError
from .schema_ast.nodes import SchemaAST, TargetLanguage
from .schema_ast.parser import SchemaParser

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Rendered files keyed by relative path, in definition order."""

    sources: dict[str, str] = field(default_factory=dict)
    codecs: dict[str, str] = field(default_factory=dict)
    type_names: dict[str, str] = field(default_factory=dict)  # Qualified name -> source path

    @property
    def files(self) -> dict[str, str]:
        return {**self.sources, **self.codecs}


class PipelineGenerator:
    """
    Generator running the full schema-to-source pipeline.

    Usage:
        generator = PipelineGenerator(schema_document, config)
        result = generator.generate()
    """

    def __init__(self, schema: dict[str, Any], config: GeneratorConfig | None = None):
        """
        Initialize the generator.

        Args:
            schema: The schema document, already parsed from JSON
            config: Code generation configuration
        """
        self.schema = schema
        self.config = config or GeneratorConfig()

        self.ast: SchemaAST | None = None
        self.model: ResolvedModel | None = None
        self.plan: VersioningPlan | None = None

    def generate(self) -> GenerationResult:
        """
        Run every phase.

        Returns:
            GenerationResult with sources, codecs and the type-to-path map

        Raises:
            GenerationError: On the first parse, validation or emission error
        """
        self.ast = SchemaParser().parse(self.schema)
        self.model = TypeResolver().resolve(self.ast)
        self.plan = VersioningEngine().plan(self.model)

        order = {t.qualified_name: i for i, t in enumerate(self.model.types)}
        backends = {target: create_backend(target, self.config) for target in TargetLanguage}
        jobs = [(backends[t], unit) for t in TargetLanguage for unit in backends[t].plan_units(self.model)]
        jobs.sort(key=lambda job: order[job[1].type_name])
        emitted = self._emit(jobs)

        result = GenerationResult()
        owners: dict[str, str] = {}
        for (_, unit), rendered in zip(jobs, emitted):
            if rendered.path in owners:
                raise EmissionError(
                    f"Output path {rendered.path} is generated for both {owners[rendered.path]} and {rendered.type_name}",
                    definition=rendered.type_name,
                )
            owners[rendered.path] = rendered.type_name
            result.sources[rendered.path] = rendered.content
            # Sealed hierarchies share their root's file
            for member in unit.members:
                result.type_names[member] = rendered.path
        result.type_names = {name: result.type_names[name] for name in order}

        if self.config.generate_codecs:
            for codec in CodecGenerator(self.config).generate(self.model):
                if codec.path in result.sources:
                    raise EmissionError(f"Codec {codec.path} collides with a generated source", definition=codec.type_name)
                result.codecs[codec.path] = codec.content

        logger.info("Generated %d sources and %d codecs", len(result.sources), len(result.codecs))
        return result

    def _emit(self, jobs: list[tuple[CodeBackend, OutputUnit]]) -> list[EmittedUnit]:
        """Render every unit, returning results in job order."""
        assert self.model is not None and self.plan is not None
        if self.config.max_workers == 1 or len(jobs) <= 1:
            return [backend.render_unit(unit, self.model, self.plan) for backend, unit in jobs]

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = [executor.submit(backend.render_unit, unit, self.model, self.plan) for backend, unit in jobs]
            return [future.result() for future in futures]
