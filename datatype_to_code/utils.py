"""
Utility functions for the datatype code generator.
"""

from __future__ import annotations


def capitalize_first(text: str) -> str:
    """Upper-case the first character only.

    Examples:
        "message" -> "Message"
        "httpURL" -> "HttpURL"
    """
    return text[:1].upper() + text[1:]


def with_method_name(field_name: str) -> str:
    """Name of the mutator returning a copy with one field replaced."""
    return f"with{capitalize_first(field_name)}"


def compose_doc(doc: str | None, params: list[tuple[str, str | None]]) -> str | None:
    """Combine a doc text with ``@param`` lines for documented parameters."""
    lines = doc.splitlines() if doc else []
    tagged = [f"@param {name} {text}" for name, text in params if text]
    if lines and tagged:
        lines.append("")
    lines.extend(tagged)
    return "\n".join(lines) or None


def doc_comment(text: str, indent: str = "") -> str:
    """Render text as a /** */ block comment, indented by ``indent``."""
    lines = text.replace("*/", "*&#47;").splitlines() or [""]
    if len(lines) == 1:
        return f"{indent}/** {lines[0]} */"
    body = [f"{indent} * {line}".rstrip() for line in lines]
    return "\n".join([f"{indent}/**", *body, f"{indent} */"])


def indent_lines(lines: tuple[str, ...] | list[str], indent: str) -> list[str]:
    """Split multi-line entries and indent every non-blank line."""
    result = []
    for entry in lines:
        for line in entry.splitlines() or [""]:
            result.append(f"{indent}{line}" if line.strip() else "")
    return result
