"""
Archive pipeline.

This package handles:
1. Detecting the archive format from its path
2. Selecting the decompressor for tar archives
3. Streaming tar extraction and spooled zip extraction
"""

from .extractor import extract_archive, extract_tar, extract_zip
from .formats import (
    ArchiveFormat,
    ArchiveType,
    CompressionType,
    DecompressReader,
    detect_archive_format,
)
from .spool import TempFile, create_temp

__all__ = [
    "ArchiveFormat",
    "ArchiveType",
    "CompressionType",
    "DecompressReader",
    "TempFile",
    "create_temp",
    "detect_archive_format",
    "extract_archive",
    "extract_tar",
    "extract_zip",
]
