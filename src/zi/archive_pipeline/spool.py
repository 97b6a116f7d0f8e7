"""
Temporary files for archives that need random access.
"""

import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional

from zi.zi_settings import ZiSettings


@dataclass
class TempFile:
    path: str
    file: BinaryIO

    def sync(self) -> None:
        """Flush buffered data and force it to storage."""
        self.file.flush()
        os.fsync(self.file.fileno())


@contextmanager
def create_temp(directory: Optional[str] = None, prefix: str = "tempfile-") -> Iterator[TempFile]:
    """
    Create a temporary file opened for reading and writing.

    The file is closed and deleted when the context exits, whether or not
    the body raised.

    Args:
        directory: Where to create the file. Defaults to ZiSettings.get_temp_directory()
        prefix: File name prefix
    """
    directory = directory or ZiSettings.get_temp_directory()
    fd, path = tempfile.mkstemp(prefix=prefix, dir=directory)
    file = os.fdopen(fd, "w+b")
    try:
        yield TempFile(path=path, file=file)
    finally:
        file.close()
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
