"""
Error types raised by the generation pipeline.

Every error carries enough location context (schema path, definition
name, field name) to be reported to the user as-is.
"""

from __future__ import annotations

from enum import Enum


class GenerationError(Exception):
    """Base class for all errors that abort a generation run."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        definition: str | None = None,
        field: str | None = None,
    ):
        self.message = message
        self.path = path
        self.definition = definition
        self.field = field
        super().__init__(self._format())

    def _format(self) -> str:
        context = []
        if self.path:
            context.append(f"at {self.path}")
        if self.definition:
            context.append(f"in {self.definition}")
        if self.field:
            context.append(f"field '{self.field}'")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class ParseErrorKind(str, Enum):
    """Shape violation found while parsing a schema document."""

    MISSING_KEY = "missing_key"
    WRONG_KIND = "wrong_kind"
    UNKNOWN_TYPE = "unknown_type"
    UNKNOWN_TARGET = "unknown_target"


class ParseError(GenerationError):
    """Raised when the schema document does not match the grammar."""

    def __init__(self, kind: ParseErrorKind, message: str, path: str):
        self.kind = kind
        super().__init__(message, path=path)


class ValidationErrorKind(str, Enum):
    """Cross-reference or invariant violation found during resolution."""

    DUPLICATE_NAME = "duplicate_name"
    DUPLICATE_FIELD = "duplicate_field"
    CYCLIC_INHERITANCE = "cyclic_inheritance"
    INCOMPLETE_VERSIONING = "incomplete_versioning"
    INVALID_VERSION = "invalid_version"
    UNORDERED_VERSIONS = "unordered_versions"
    UNKNOWN_PARENT = "unknown_parent"
    CONFLICTING_PARENT = "conflicting_parent"
    TARGET_MISMATCH = "target_mismatch"


class ValidationError(GenerationError):
    """Raised when a well-formed schema violates a model invariant."""

    def __init__(
        self,
        kind: ValidationErrorKind,
        message: str,
        definition: str | None = None,
        field: str | None = None,
        path: str | None = None,
    ):
        self.kind = kind
        super().__init__(message, path=path, definition=definition, field=field)


class EmissionError(GenerationError):
    """Raised when a resolved type cannot be rendered for its target.

    This covers unsupported target/field-type combinations (for example a
    by-name field on the Java target) and output layouts the target
    language cannot express.
    """

    pass


class PayloadError(GenerationError):
    """Raised when a JSON payload does not decode against the model."""

    pass
