"""
Archive extraction implementation.

Extracts zip and tar{,.gz,.xz} archives read from a stream into a directory.
"""

import logging
import os
import pathlib
import shutil
import tarfile
import zipfile
from typing import Optional, Union

from zi.archive_pipeline.formats import ArchiveType, DecompressReader, detect_archive_format
from zi.archive_pipeline.spool import create_temp
from zi.stream_adapters import ByteReader, discard
from zi.zi_logger import ZiLogger

PathLike = Union[str, pathlib.Path]

COPY_CHUNK_SIZE = 64 * 1024


def extract_archive(
    logger: ZiLogger,
    reader: ByteReader,
    archive_path: str,
    target_dir: PathLike,
    temp_dir: Optional[str] = None,
) -> None:
    """
    Extract the archive read from ``reader`` into ``target_dir``.

    The format is decided from ``archive_path`` before any byte is read.
    Once extraction is done the rest of ``reader`` is drained, so anything
    observing the stream (a TeeReader's observers) sees every byte even when
    the archive ends before the stream does.

    Args:
        logger: Logger for progress messages
        reader: Stream of archive bytes
        archive_path: Path (usually the URL path) naming the archive
        target_dir: Directory the archive contents are written to
        temp_dir: Directory for the temporary file zip archives are spooled to

    Raises:
        UnknownArchiveType, UnsupportedArchiveType, UnsupportedCompressionType:
            If the format cannot be handled
    """
    archive_format = detect_archive_format(archive_path)
    logger.log(
        f"Extracting {archive_format.archive_type.value} archive "
        f"(compression: {archive_format.compression.value}) to {target_dir}",
        logging.INFO,
    )

    if archive_format.archive_type == ArchiveType.ZIP:
        extract_zip(logger, reader, target_dir, temp_dir)
    else:
        with DecompressReader(archive_format.compression, reader) as decompressed:
            extract_tar(decompressed, target_dir)

    trailing = discard(reader)
    if trailing:
        logger.log(f"Discarded {trailing} trailing bytes after archive end", logging.DEBUG)


def extract_tar(reader: ByteReader, target_dir: PathLike) -> None:
    """
    Extract an uncompressed tar stream in a single forward pass.
    """
    with tarfile.open(fileobj=reader, mode="r|") as tar:
        if hasattr(tarfile, "data_filter"):
            tar.extractall(path=target_dir, filter="data")
        else:
            tar.extractall(path=target_dir)


def extract_zip(
    logger: ZiLogger,
    reader: ByteReader,
    target_dir: PathLike,
    temp_dir: Optional[str] = None,
) -> None:
    """
    Extract a zip archive read from a stream.

    Zip keeps its central directory at the end of the file, so the stream
    is first copied to a temporary file which is then read with random
    access. The temporary file is removed afterwards, also on failure.
    """
    with create_temp(directory=temp_dir) as temp:
        shutil.copyfileobj(reader, temp.file, COPY_CHUNK_SIZE)
        temp.sync()
        logger.log(f"Spooled zip archive to {temp.path}", logging.DEBUG)

        temp.file.seek(0)
        with zipfile.ZipFile(temp.file) as archive:
            for info in archive.infolist():
                extracted = archive.extract(info, path=target_dir)
                _restore_permissions(info, extracted)


def _restore_permissions(info: zipfile.ZipInfo, extracted: str) -> None:
    """
    Apply the unix permission bits stored in a zip entry, if any.
    """
    if info.create_system != 3:
        return
    mode = (info.external_attr >> 16) & 0o777
    if mode and not info.is_dir():
        os.chmod(extracted, mode)

