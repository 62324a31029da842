"""
Schema parser that builds an AST.

Phase 1 of the pipeline: check the document against the schema grammar
and build definition nodes, without resolving any references.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import ParseError, ParseErrorKind
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

logger = logging.getLogger(__name__)

_KIND_NAMES = {
    dict: "an object",
    list: "an array",
    str: "a string",
    bool: "a boolean",
}


class SchemaParser:
    """Parses a schema document into an AST."""

    def parse(self, schema: Any) -> SchemaAST:
        """
        Parse a schema document into an AST.

        Args:
            schema: The decoded JSON document

        Returns:
            SchemaAST holding the top-level definitions

        Raises:
            ParseError: If the document does not match the grammar
        """
        self._expect(schema, dict, "#")
        types = self._get(schema, "types", list, "#", required=False) or []
        definitions = tuple(self._parse_definition(d, f"#/types/{i}", nested=False) for i, d in enumerate(types))

        ast = SchemaAST(
            definitions=definitions,
            codec_namespace=self._get(schema, "codecNamespace", str, "#", required=False),
            full_codec=self._get(schema, "fullCodec", str, "#", required=False),
        )
        logger.debug("Parsed %d top-level definitions", len(definitions))
        return ast

    def _parse_definition(self, schema: Any, path: str, nested: bool) -> DefinitionNode:
        """Parse one record, interface or enum."""
        self._expect(schema, dict, path)
        type_name = self._get(schema, "type", str, path)
        try:
            kind = DefinitionKind(type_name)
        except ValueError:
            raise ParseError(
                ParseErrorKind.UNKNOWN_TYPE,
                f"Unknown definition type '{type_name}', expected one of: {', '.join(k.value for k in DefinitionKind)}",
                f"{path}/type",
            ) from None

        common = {
            "name": self._get(schema, "name", str, path),
            "target": self._parse_target(schema, path, required=not nested),
            "namespace": self._get(schema, "namespace", str, path, required=False),
            "doc": self._parse_doc(schema, path),
            "extra": self._parse_extra(schema, path),
            "generate_codec": self._get(schema, "generateCodec", bool, path, required=False, default=True),
            "source_path": path,
        }

        if kind == DefinitionKind.ENUM:
            symbols = self._get(schema, "symbols", list, path, required=False) or []
            return EnumNode(
                symbols=tuple(self._parse_symbol(s, f"{path}/symbols/{i}") for i, s in enumerate(symbols)),
                **common,
            )

        fields = self._get(schema, "fields", list, path, required=False) or []
        parsed_fields = tuple(self._parse_field(f, f"{path}/fields/{i}") for i, f in enumerate(fields))
        parent = self._get(schema, "parent", str, path, required=False)
        to_string = self._get(schema, "toString", str, path, required=False)

        if kind == DefinitionKind.RECORD:
            return RecordNode(fields=parsed_fields, parent=parent, to_string=to_string, **common)

        messages = self._get(schema, "messages", list, path, required=False) or []
        children = self._get(schema, "types", list, path, required=False) or []
        return InterfaceNode(
            fields=parsed_fields,
            messages=tuple(self._parse_message(m, f"{path}/messages/{i}") for i, m in enumerate(messages)),
            types=tuple(self._parse_definition(c, f"{path}/types/{i}", nested=True) for i, c in enumerate(children)),
            parent=parent,
            to_string=to_string,
            **common,
        )

    def _parse_target(self, schema: dict[str, Any], path: str, required: bool) -> TargetLanguage | None:
        target = self._get(schema, "target", str, path, required=required)
        if target is None:
            return None
        try:
            return TargetLanguage(target)
        except ValueError:
            raise ParseError(
                ParseErrorKind.UNKNOWN_TARGET,
                f"Unknown target '{target}', expected one of: {', '.join(t.value for t in TargetLanguage)}",
                f"{path}/target",
            ) from None

    def _parse_field(self, schema: Any, path: str) -> FieldNode:
        self._expect(schema, dict, path)
        return FieldNode(
            name=self._get(schema, "name", str, path),
            type_ref=self._get(schema, "type", str, path),
            doc=self._parse_doc(schema, path),
            since=self._get(schema, "since", str, path, required=False),
            default=self._get(schema, "default", str, path, required=False),
            source_path=path,
        )

    def _parse_message(self, schema: Any, path: str) -> MessageNode:
        self._expect(schema, dict, path)
        request = self._get(schema, "request", list, path, required=False) or []
        return MessageNode(
            name=self._get(schema, "name", str, path),
            response=self._get(schema, "response", str, path),
            request=tuple(self._parse_request(r, f"{path}/request/{i}") for i, r in enumerate(request)),
            doc=self._parse_doc(schema, path),
        )

    def _parse_request(self, schema: Any, path: str) -> RequestNode:
        self._expect(schema, dict, path)
        return RequestNode(
            name=self._get(schema, "name", str, path),
            type_ref=self._get(schema, "type", str, path),
            doc=self._parse_doc(schema, path),
        )

    def _parse_symbol(self, schema: Any, path: str) -> SymbolNode:
        # A symbol is either a bare identifier or an object with a name
        if isinstance(schema, str):
            return SymbolNode(name=schema)
        self._expect(schema, dict, path)
        return SymbolNode(name=self._get(schema, "name", str, path), doc=self._parse_doc(schema, path))

    def _parse_doc(self, schema: dict[str, Any], path: str) -> str | None:
        """Docs may be given as one string or as a list of lines."""
        doc = schema.get("doc")
        if doc is None:
            return None
        if isinstance(doc, list) and all(isinstance(line, str) for line in doc):
            return "\n".join(doc)
        self._expect(doc, str, f"{path}/doc")
        return doc

    def _parse_extra(self, schema: dict[str, Any], path: str) -> tuple[str, ...]:
        extra = schema.get("extra")
        if extra is None:
            return ()
        if isinstance(extra, str):
            return (extra,)
        self._expect(extra, list, f"{path}/extra")
        for i, line in enumerate(extra):
            self._expect(line, str, f"{path}/extra/{i}")
        return tuple(extra)

    def _get(
        self,
        schema: dict[str, Any],
        key: str,
        kind: type,
        path: str,
        required: bool = True,
        default: Any = None,
    ) -> Any:
        """Fetch a key, checking presence and value kind."""
        if key not in schema:
            if required:
                raise ParseError(ParseErrorKind.MISSING_KEY, f"Missing required key '{key}'", path)
            return default
        value = schema[key]
        self._expect(value, kind, f"{path}/{key}")
        return value

    def _expect(self, value: Any, kind: type, path: str) -> None:
        if not isinstance(value, kind):
            raise ParseError(
                ParseErrorKind.WRONG_KIND,
                f"Expected {_KIND_NAMES.get(kind, kind.__name__)}, found {type(value).__name__}",
                path,
            )
