"""
Type resolver.

Phase 2 of the pipeline: link interfaces to their children (nested or
declared through ``parent``), validate names and versioning pairs, and
flatten inheritance into effective field lists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from packaging.version import InvalidVersion, Version

from ..errors import ValidationError, ValidationErrorKind
from ..schema_ast.nodes import (
    DefinitionNode,
    EnumNode,
    FieldNode,
    InterfaceNode,
    SchemaAST,
    TargetLanguage,
)
from .ir_nodes import (
    ResolvedField,
    ResolvedMessage,
    ResolvedModel,
    ResolvedRequest,
    ResolvedType,
    TypeRef,
    qualify,
)

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    """A definition placed in its namespace, before linking."""

    node: DefinitionNode
    namespace: str | None
    target: TargetLanguage
    enclosing: str | None  # Qualified name of the enclosing interface

    @property
    def qualified_name(self) -> str:
        return qualify(self.namespace, self.node.name)


class TypeResolver:
    """Resolves a parsed schema into an immutable ResolvedModel."""

    def resolve(self, ast: SchemaAST) -> ResolvedModel:
        """
        Resolve a parsed schema.

        Args:
            ast: The parsed schema AST

        Returns:
            ResolvedModel with one ResolvedType per definition, in pre-order

        Raises:
            ValidationError: If a model invariant is violated
        """
        entries: list[_Entry] = []
        for node in ast.definitions:
            self._flatten(node, None, None, None, entries)

        index = self._build_index(entries)
        parents = self._link_parents(entries, index)
        ancestors = {e.qualified_name: self._ancestor_chain(e.qualified_name, parents) for e in entries}

        own_fields = {e.qualified_name: self._resolve_own_fields(e) for e in entries}

        children: dict[str, list[str]] = {e.qualified_name: [] for e in entries}
        for entry in entries:
            parent = parents.get(entry.qualified_name)
            if parent is not None:
                children[parent].append(entry.qualified_name)

        types = []
        for entry in entries:
            name = entry.qualified_name
            fields = self._effective_fields(name, ancestors[name], own_fields)
            dated = [f.since for f in fields if f.since is not None]
            node = entry.node
            types.append(
                ResolvedType(
                    kind=node.kind,
                    name=node.name,
                    target=entry.target,
                    namespace=entry.namespace,
                    doc=node.doc,
                    extra=node.extra,
                    to_string=getattr(node, "to_string", None),
                    generate_codec=node.generate_codec,
                    parent=parents.get(name),
                    ancestors=ancestors[name],
                    children=tuple(children[name]),
                    descendants=tuple(self._descendants(name, children)),
                    own_fields=own_fields[name],
                    fields=fields,
                    messages=self._resolve_messages(node),
                    symbols=node.symbols if isinstance(node, EnumNode) else (),
                    min_version=min(dated) if dated else None,
                )
            )

        logger.debug("Resolved %d definitions", len(types))
        return ResolvedModel(types=tuple(types), codec_namespace=ast.codec_namespace, full_codec=ast.full_codec)

    def _flatten(
        self,
        node: DefinitionNode,
        namespace: str | None,
        target: TargetLanguage | None,
        enclosing: str | None,
        entries: list[_Entry],
    ) -> None:
        """Collect definitions in pre-order, inheriting namespace and target."""
        if enclosing is not None:
            if node.target is not None and node.target != target:
                raise ValidationError(
                    ValidationErrorKind.TARGET_MISMATCH,
                    f"Target {node.target.value} differs from enclosing interface target {target.value}",
                    definition=node.name,
                    path=node.source_path,
                )
            if getattr(node, "parent", None) is not None:
                raise ValidationError(
                    ValidationErrorKind.CONFLICTING_PARENT,
                    "A nested definition cannot also declare a parent",
                    definition=node.name,
                    path=node.source_path,
                )

        entry = _Entry(
            node=node,
            namespace=node.namespace if node.namespace is not None else namespace,
            target=node.target if node.target is not None else target,
            enclosing=enclosing,
        )
        entries.append(entry)

        if isinstance(node, InterfaceNode):
            for child in node.types:
                self._flatten(child, entry.namespace, entry.target, entry.qualified_name, entries)

    def _build_index(self, entries: list[_Entry]) -> dict[str, _Entry]:
        """Index definitions by qualified name, rejecting duplicates."""
        index: dict[str, _Entry] = {}
        for entry in entries:
            name = entry.qualified_name
            if name in index:
                raise ValidationError(
                    ValidationErrorKind.DUPLICATE_NAME,
                    f"'{entry.node.name}' is already defined in namespace '{entry.namespace or ''}'",
                    definition=name,
                    path=entry.node.source_path,
                )
            index[name] = entry
        return index

    def _link_parents(self, entries: list[_Entry], index: dict[str, _Entry]) -> dict[str, str]:
        """Map each definition to its parent interface."""
        parents: dict[str, str] = {}
        for entry in entries:
            if entry.enclosing is not None:
                # Nested enums only take the enclosing namespace and target
                if not isinstance(entry.node, EnumNode):
                    parents[entry.qualified_name] = entry.enclosing
                continue

            declared = getattr(entry.node, "parent", None)
            if declared is None:
                continue
            parent = index.get(declared) or index.get(qualify(entry.namespace, declared))
            if parent is None or not isinstance(parent.node, InterfaceNode):
                raise ValidationError(
                    ValidationErrorKind.UNKNOWN_PARENT,
                    f"No interface named '{declared}'",
                    definition=entry.qualified_name,
                    path=entry.node.source_path,
                )
            if parent.target != entry.target:
                raise ValidationError(
                    ValidationErrorKind.TARGET_MISMATCH,
                    f"Target {entry.target.value} differs from parent {parent.qualified_name} target {parent.target.value}",
                    definition=entry.qualified_name,
                    path=entry.node.source_path,
                )
            parents[entry.qualified_name] = parent.qualified_name
        return parents

    def _ancestor_chain(self, name: str, parents: dict[str, str]) -> tuple[str, ...]:
        """Walk up the parent links, root first."""
        chain: list[str] = []
        visited = {name}
        current = parents.get(name)
        while current is not None:
            if current in visited:
                raise ValidationError(
                    ValidationErrorKind.CYCLIC_INHERITANCE,
                    f"Inheritance cycle through '{current}'",
                    definition=name,
                )
            visited.add(current)
            chain.append(current)
            current = parents.get(current)
        return tuple(reversed(chain))

    def _resolve_own_fields(self, entry: _Entry) -> tuple[ResolvedField, ...]:
        """Validate and resolve the fields a definition declares itself."""
        fields = []
        latest: Version | None = None
        for node in getattr(entry.node, "fields", ()):
            since = self._parse_since(node, entry)
            if since is None and latest is not None:
                raise ValidationError(
                    ValidationErrorKind.UNORDERED_VERSIONS,
                    f"Undated field declared after fields added in {latest}",
                    definition=entry.qualified_name,
                    field=node.name,
                    path=node.source_path,
                )
            if since is not None:
                if latest is not None and since < latest:
                    raise ValidationError(
                        ValidationErrorKind.UNORDERED_VERSIONS,
                        f"Field added in {since} declared after fields added in {latest}",
                        definition=entry.qualified_name,
                        field=node.name,
                        path=node.source_path,
                    )
                latest = since
            fields.append(
                ResolvedField(
                    name=node.name,
                    type_ref=TypeRef.parse(node.type_ref),
                    declared_in=entry.qualified_name,
                    doc=node.doc,
                    since=since,
                    since_text=node.since,
                    default=node.default,
                )
            )
        return tuple(fields)

    def _parse_since(self, node: FieldNode, entry: _Entry) -> Version | None:
        if (node.since is None) != (node.default is None):
            missing = "default" if node.default is None else "since"
            raise ValidationError(
                ValidationErrorKind.INCOMPLETE_VERSIONING,
                f"'since' and 'default' must be given together, '{missing}' is missing",
                definition=entry.qualified_name,
                field=node.name,
                path=node.source_path,
            )
        if node.since is None:
            return None
        try:
            return Version(node.since)
        except InvalidVersion:
            raise ValidationError(
                ValidationErrorKind.INVALID_VERSION,
                f"Cannot parse version '{node.since}'",
                definition=entry.qualified_name,
                field=node.name,
                path=node.source_path,
            ) from None

    def _effective_fields(
        self,
        name: str,
        ancestors: tuple[str, ...],
        own_fields: dict[str, tuple[ResolvedField, ...]],
    ) -> tuple[ResolvedField, ...]:
        """Concatenate ancestor fields (root first) with the definition's own."""
        fields: list[ResolvedField] = []
        seen: dict[str, str] = {}
        for owner in (*ancestors, name):
            for f in own_fields[owner]:
                if f.name in seen:
                    where = f"twice in {owner}" if seen[f.name] == owner else f"both in {seen[f.name]} and in {owner}"
                    raise ValidationError(
                        ValidationErrorKind.DUPLICATE_FIELD,
                        f"Field '{f.name}' is declared {where}",
                        definition=name,
                        field=f.name,
                    )
                seen[f.name] = owner
                fields.append(f)
        return tuple(fields)

    def _descendants(self, name: str, children: dict[str, list[str]]) -> list[str]:
        result = []
        for child in children[name]:
            result.append(child)
            result.extend(self._descendants(child, children))
        return result

    def _resolve_messages(self, node: DefinitionNode) -> tuple[ResolvedMessage, ...]:
        if not isinstance(node, InterfaceNode):
            return ()
        return tuple(
            ResolvedMessage(
                name=m.name,
                response=TypeRef.parse(m.response),
                request=tuple(ResolvedRequest(name=r.name, type_ref=TypeRef.parse(r.type_ref), doc=r.doc) for r in m.request),
                doc=m.doc,
            )
            for m in node.messages
        )
