"""
Field versioning engine.

Phase 3 of the pipeline. A type grows by appending fields marked with
``since``; every construction signature emitted for an older schema
version must keep existing unchanged. For each record and interface this
module partitions the effective field list into version tiers and derives
one construction overload per tier:

    Greeting{message, date since 0.2.0}
    tiers:     [baseline: message] [0.2.0: date]
    overloads: (message)  (message, date)

Fields missing from an overload are filled with their declared default in
the generated body, never in the signature. The stored representation,
``withX`` mutators, equality, hash and string representation always range
over the full field list.

The hash and string-representation shapes are also defined here so that
every backend renders the same fold.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, TypeVar

from packaging.version import Version

from .ir_nodes import ResolvedField, ResolvedModel, ResolvedType

logger = logging.getLogger(__name__)

HASH_SEED = 17
HASH_MULTIPLIER = 37

A = TypeVar("A")
T = TypeVar("T")


@dataclass(frozen=True)
class VersionTier:
    """Fields added at one schema version (``version`` None is the baseline)."""

    version: Version | None
    since_text: str | None
    fields: tuple[ResolvedField, ...]


@dataclass(frozen=True)
class Overload:
    """One construction signature."""

    version: Version | None
    params: tuple[ResolvedField, ...]  # Signature, in effective order
    omitted: tuple[ResolvedField, ...]  # Filled with their defaults

    @property
    def is_full(self) -> bool:
        return not self.omitted


@dataclass(frozen=True)
class TypeVersioning:
    """Versioning plan of one record or interface."""

    qualified_name: str
    fields: tuple[ResolvedField, ...]
    tiers: tuple[VersionTier, ...]
    overloads: tuple[Overload, ...]
    min_version: Version | None = None

    @property
    def full_overload(self) -> Overload:
        return self.overloads[-1]


@dataclass(frozen=True)
class VersioningPlan:
    """Versioning plans of every record and interface of a model."""

    types: Mapping[str, TypeVersioning] = field(default_factory=lambda: MappingProxyType({}))

    def __getitem__(self, qualified_name: str) -> TypeVersioning:
        return self.types[qualified_name]

    def __contains__(self, qualified_name: str) -> bool:
        return qualified_name in self.types


class VersioningEngine:
    """Computes version tiers and construction overloads."""

    def plan(self, model: ResolvedModel) -> VersioningPlan:
        """
        Build the versioning plan of a resolved model.

        Args:
            model: The resolved model

        Returns:
            VersioningPlan keyed by qualified type name (enums excluded)
        """
        plans = {t.qualified_name: self.version_type(t) for t in model.types if not t.is_enum}
        return VersioningPlan(types=MappingProxyType(plans))

    def version_type(self, rtype: ResolvedType) -> TypeVersioning:
        tiers = self._tiers(rtype.fields)
        overloads = []
        known: set[str] = set()
        for tier in tiers:
            known.update(f.name for f in tier.fields)
            overloads.append(
                Overload(
                    version=tier.version,
                    params=tuple(f for f in rtype.fields if f.name in known),
                    omitted=tuple(f for f in rtype.fields if f.name not in known),
                )
            )
        if not overloads:
            overloads.append(Overload(version=None, params=(), omitted=()))

        if len(overloads) > 1:
            logger.debug("%s: %d construction overloads", rtype.qualified_name, len(overloads))
        return TypeVersioning(
            qualified_name=rtype.qualified_name,
            fields=rtype.fields,
            tiers=tuple(tiers),
            overloads=tuple(overloads),
            min_version=rtype.min_version,
        )

    def _tiers(self, fields: Sequence[ResolvedField]) -> list[VersionTier]:
        """Group fields by since; the undated baseline sorts first."""
        groups: dict[Version | None, list[ResolvedField]] = {}
        for f in fields:
            groups.setdefault(f.since, []).append(f)

        ordered = sorted(groups, key=lambda v: (v is not None, v or Version("0")))
        return [
            VersionTier(
                version=v,
                since_text=groups[v][0].since_text,
                fields=tuple(groups[v]),
            )
            for v in ordered
        ]


def hash_fold(terms: Iterable[T], combine: Callable[[A, T], A], seed: A) -> A:
    """Left fold of hash terms: ``acc = combine(acc, term)`` from ``seed``."""
    return functools.reduce(combine, terms, seed)


def hash_expression(terms: Iterable[str]) -> str:
    """Render the hash fold as a source expression over term expressions."""
    return hash_fold(terms, lambda acc, term: f"{HASH_MULTIPLIER} * ({acc} + {term})", str(HASH_SEED))


def int_hash(terms: Iterable[int]) -> int:
    """Evaluate the hash fold with 32-bit two's complement arithmetic."""

    def combine(acc: int, term: int) -> int:
        value = (HASH_MULTIPLIER * (acc + term)) & 0xFFFFFFFF
        return value - (1 << 32) if value & 0x80000000 else value

    return hash_fold(terms, combine, HASH_SEED)


def _string_parts(simple_name: str, values: Sequence[tuple[str, Any]], labels_fields: bool) -> list[tuple[bool, Any]]:
    """Pieces of a string representation as (is_literal, piece) pairs."""
    parts: list[tuple[bool, Any]] = [(True, f"{simple_name}(")]
    for i, (name, value) in enumerate(values):
        if i:
            parts.append((True, ", "))
        if labels_fields:
            parts.append((True, f"{name}: "))
        parts.append((False, value))
    parts.append((True, ")"))
    return parts


def to_string_expression(simple_name: str, values: Sequence[tuple[str, str]], labels_fields: bool) -> str:
    """Render a string-representation expression.

    ``values`` pairs each field name with the expression reading it.
    """
    if not values:
        return f'"{simple_name}()"'
    return " + ".join(f'"{piece}"' if literal else piece for literal, piece in _string_parts(simple_name, values, labels_fields))


def to_string_value(simple_name: str, values: Sequence[tuple[str, Any]], labels_fields: bool) -> str:
    """Evaluate a string representation over actual values."""
    return "".join(piece if literal else str(piece) for literal, piece in _string_parts(simple_name, values, labels_fields))
