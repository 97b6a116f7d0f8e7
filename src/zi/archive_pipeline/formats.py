"""
Archive format detection and decompression selection.
"""

import gzip
import lzma
import posixpath
from enum import Enum
from typing import NamedTuple

from zi.stream_adapters import ByteReader
from zi.zi_exceptions import (
    UnknownArchiveType,
    UnsupportedArchiveType,
    UnsupportedCompressionType,
)


class ArchiveType(str, Enum):
    ZIP = "zip"
    TAR = "tar"


class CompressionType(str, Enum):
    NONE = "none"
    GZ = "gz"
    XZ = "xz"


class ArchiveFormat(NamedTuple):
    archive_type: ArchiveType
    compression: CompressionType


def detect_archive_format(path: str) -> ArchiveFormat:
    """
    Determine the container and compression of an archive from its path.

    Only the final path component is looked at, so dots in directory names
    (``/download/0.13.0/...``) do not matter.

    Args:
        path: The archive path, typically the path part of its URL

    Returns:
        ArchiveFormat for zip, tar, tar.gz or tar.xz

    Raises:
        UnknownArchiveType: The name has no suffix at all
        UnsupportedArchiveType: The container is not zip or tar
        UnsupportedCompressionType: A tar is compressed with something other than gz or xz
    """
    name = posixpath.basename(path)
    stem, dot, last = name.rpartition(".")
    if not dot or not stem or not last:
        raise UnknownArchiveType(f"Unknown archive type: {name!r}")

    if last == "zip":
        return ArchiveFormat(ArchiveType.ZIP, CompressionType.NONE)
    if last == "tar":
        return ArchiveFormat(ArchiveType.TAR, CompressionType.NONE)

    _, dot, penultimate = stem.rpartition(".")
    if not dot or penultimate != "tar":
        raise UnsupportedArchiveType(f"Unsupported archive type: {name!r}")

    try:
        compression = CompressionType(last)
    except ValueError:
        raise UnsupportedCompressionType(f"Unsupported compression type: {last!r}") from None
    if compression == CompressionType.NONE:
        raise UnsupportedCompressionType(f"Unsupported compression type: {last!r}")
    return ArchiveFormat(ArchiveType.TAR, compression)


class DecompressReader:
    """
    Reads the decompressed form of a byte stream.

    Exactly one decoder is chosen at construction and used for the whole
    stream: the source itself for uncompressed data, ``gzip`` or ``lzma``
    otherwise.
    """

    def __init__(self, compression: CompressionType, source: ByteReader):
        self.compression = compression
        self.source = source
        if compression == CompressionType.NONE:
            self._reader = source
        elif compression == CompressionType.GZ:
            self._reader = gzip.GzipFile(fileobj=source, mode="rb")
        elif compression == CompressionType.XZ:
            self._reader = lzma.LZMAFile(source, mode="rb")
        else:
            raise UnsupportedCompressionType(f"Unsupported compression type: {compression!r}")

    def read(self, size: int = -1) -> bytes:
        return self._reader.read(size)

    def close(self) -> None:
        """Release the decoder. The underlying source stays open."""
        if self._reader is not self.source:
            self._reader.close()

    def __enter__(self) -> "DecompressReader":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
