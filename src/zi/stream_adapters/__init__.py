"""
Stream adapters.

This package provides:
1. A tee reader that copies what it reads to observers
2. A multi-writer that fans writes out to several sinks
3. Hash and progress writers used as observers
"""

from .adapters import (
    ByteReader,
    ByteWriter,
    HashWriter,
    MultiWriter,
    ProgressCallback,
    ProgressWriter,
    TeeReader,
    discard,
)

__all__ = [
    "ByteReader",
    "ByteWriter",
    "HashWriter",
    "MultiWriter",
    "ProgressCallback",
    "ProgressWriter",
    "TeeReader",
    "discard",
]
