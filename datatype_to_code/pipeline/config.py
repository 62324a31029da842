"""
Configuration for the code generator pipeline.

One explicit value passed into the generation entry point, replacing
build-tool global settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FileNamingStrategy(str, Enum):
    """How rendered files are laid out below the output directory."""

    PACKAGE = "package"  # com/example/Greeting.scala
    FLAT = "flat"  # Greeting.scala


@dataclass
class GeneratorConfig:
    """Configuration options for code generation."""

    # Directory scanned for *.json schema files when no paths are given
    source_dir: str = ""

    # Directory the rendered files are written below
    output_dir: str = "."

    # Output file layout
    file_naming_strategy: FileNamingStrategy = FileNamingStrategy.PACKAGE

    # Render root interfaces as sealed (Scala only)
    seal_interfaces: bool = False

    # Namespace of generated codecs; overrides the schema's codecNamespace
    codec_namespace: str = ""

    # Name of the aggregate codec; overrides the schema's fullCodec
    full_codec_name: str = ""

    # Whether to generate JSON codecs at all
    generate_codecs: bool = True

    # Add generation comment at top of file
    add_generation_comment: bool = True

    # Emission worker threads (1 = emit on the calling thread)
    max_workers: int = 4

    def __post_init__(self):
        self.file_naming_strategy = FileNamingStrategy(self.file_naming_strategy)
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary.

        Keys may be given in snake_case or in the camelCase used by
        build-tool settings (``sealInterfaces``); unknown keys are ignored.
        """
        config = GeneratorConfig()
        for k, v in d.items():
            attr = _CAMEL_ALIASES.get(k, k)
            if hasattr(config, attr):
                setattr(config, attr, v)
        config.__post_init__()
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "source_dir": self.source_dir,
            "output_dir": self.output_dir,
            "file_naming_strategy": self.file_naming_strategy.value,
            "seal_interfaces": self.seal_interfaces,
            "codec_namespace": self.codec_namespace,
            "full_codec_name": self.full_codec_name,
            "generate_codecs": self.generate_codecs,
            "add_generation_comment": self.add_generation_comment,
            "max_workers": self.max_workers,
        }


_CAMEL_ALIASES = {
    "sourceDir": "source_dir",
    "outputDir": "output_dir",
    "fileNamingStrategy": "file_naming_strategy",
    "sealInterfaces": "seal_interfaces",
    "codecNamespace": "codec_namespace",
    "fullCodecName": "full_codec_name",
    "generateCodecs": "generate_codecs",
    "addGenerationComment": "add_generation_comment",
    "maxWorkers": "max_workers",
}
