"""
Codec module.

Contains the sjson-new format generator and the payload codec that applies
the same encoding rules to JSON documents.
"""

from __future__ import annotations

from .codec_generator import CodecGenerator, FormatLocation
from .payload import DefaultValue, PayloadCodec, RecordValue

__all__ = [
    "CodecGenerator",
    "FormatLocation",
    "DefaultValue",
    "PayloadCodec",
    "RecordValue",
]
