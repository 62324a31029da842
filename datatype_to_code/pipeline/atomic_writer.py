"""
Atomic batch writer for generated files.

Ensures that a generation run either replaces every target file or none
of them, so an interrupted or invalid run never leaves a half-updated
output tree.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable, Mapping
from pathlib import Path

from .errors import EmissionError

logger = logging.getLogger(__name__)


class AtomicWriter:
    """Writes a batch of files with validation.

    Uses a two-phase commit approach:
    1. Write every file to a temporary file in its target directory
    2. Validate every content
    3. Replace the targets, only once all files are staged, restoring
       the originals if any replace fails

    Staging in the target directory keeps each rename on one filesystem.
    """

    def __init__(self, validate: Callable[[str, str], None] | None = None):
        """Initialize the atomic writer.

        Args:
            validate: Optional validation function called with (path, content)
        """
        self._validate = validate or self._default_validate

    def write_all(self, root: Path, files: Mapping[str, str], validate: bool = True) -> list[Path]:
        """Write files below ``root`` atomically.

        Args:
            root: Output directory
            files: Content keyed by path relative to ``root``
            validate: Whether to validate before finalizing

        Returns:
            The written paths, in input order

        Raises:
            EmissionError: If validation fails; nothing is replaced
            OSError: If file operations fail; replaced targets are restored
        """
        staged: list[tuple[Path, Path]] = []
        try:
            for relative, content in files.items():
                if validate:
                    self._validate(relative, content)
                target = root / relative
                staged.append((self._stage(target, content), target))

            self._commit(staged)
        except BaseException:
            for temp_path, _ in staged:
                temp_path.unlink(missing_ok=True)
            raise

        logger.info("Wrote %d files to %s", len(staged), root)
        return [target for _, target in staged]

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write a single file atomically."""
        self.write_all(path.parent, {path.name: content}, validate)

    def _commit(self, staged: list[tuple[Path, Path]]) -> None:
        """Move staged files into place, undoing every move if one fails."""
        replaced: list[tuple[Path, Path | None]] = []
        try:
            for temp_path, target in staged:
                backup = None
                if target.exists():
                    backup = target.with_name(f".{target.name}.bak")
                    target.replace(backup)
                replaced.append((target, backup))
                temp_path.replace(target)
        except BaseException:
            for target, backup in reversed(replaced):
                if backup is not None:
                    backup.replace(target)
                else:
                    target.unlink(missing_ok=True)
            raise

        for _, backup in replaced:
            if backup is not None:
                backup.unlink(missing_ok=True)

    def _stage(self, target: Path, content: str) -> Path:
        target.parent.mkdir(parents=True, exist_ok=True)
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)
        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise
        return temp_path

    def _default_validate(self, path: str, content: str) -> None:
        """Default structural validation of Java and Scala sources.

        Raises:
            EmissionError: If validation fails
        """
        if "class " not in content and "enum " not in content and "trait " not in content:
            raise EmissionError(f"Generated file {path} has no type definitions")

        # Check for balanced braces (simple heuristic)
        open_braces = content.count("{")
        close_braces = content.count("}")
        if open_braces != close_braces:
            raise EmissionError(f"Generated file {path} has unbalanced braces: {open_braces} open, {close_braces} close")
