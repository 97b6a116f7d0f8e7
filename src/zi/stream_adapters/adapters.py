"""
Stream adapter implementation.

Lets several consumers observe the exact byte stream another consumer is
pulling, without buffering it and without the puller knowing.
"""

import io
from typing import Callable, Optional, Protocol, Sequence


class ByteReader(Protocol):
    def read(self, size: int = -1) -> bytes: ...


class ByteWriter(Protocol):
    def write(self, data: bytes) -> int: ...


ProgressCallback = Callable[[int, Optional[int]], None]


class TeeReader(io.RawIOBase):
    """
    A reader that forwards everything it reads to zero or more observers.

    Observers receive exactly the bytes returned to the caller, in the same
    order and before the read returns. If an observer fails the read fails;
    observers earlier in the list will already have seen the chunk.
    """

    def __init__(self, inner: ByteReader, *observers: ByteWriter):
        """
        Initialize the tee reader.

        Args:
            inner: The source the bytes are read from
            observers: Writers that receive a copy of every chunk, in order
        """
        super().__init__()
        self.inner = inner
        self.observers = tuple(observers)

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        data = self.inner.read(len(buffer))
        if not data:
            return 0
        n = len(data)
        buffer[:n] = data
        for observer in self.observers:
            observer.write(data)
        return n


class MultiWriter:
    """
    A writer that forwards each write to a fixed list of writers.
    """

    def __init__(self, writers: Sequence[ByteWriter]):
        self.writers = tuple(writers)

    def write(self, data: bytes) -> int:
        for writer in self.writers:
            writer.write(data)
        return len(data)


class HashWriter:
    """
    Adapts a hashlib hash object to the writer interface.
    """

    def __init__(self, hash_object):
        self.hash = hash_object

    def write(self, data: bytes) -> int:
        self.hash.update(data)
        return len(data)

    def hexdigest(self) -> str:
        return self.hash.hexdigest()


class ProgressWriter:
    """
    Counts the bytes written to it and reports them to a callback.
    """

    def __init__(self, total: Optional[int] = None, callback: Optional[ProgressCallback] = None):
        self.total = total
        self.callback = callback
        self.completed = 0

    def write(self, data: bytes) -> int:
        self.completed += len(data)
        if self.callback is not None:
            self.callback(self.completed, self.total)
        return len(data)


def discard(reader: ByteReader, chunk_size: int = 64 * 1024) -> int:
    """
    Reads all data from the reader without keeping it.

    Returns:
        The number of bytes discarded
    """
    discarded = 0
    while True:
        chunk = reader.read(chunk_size)
        if not chunk:
            return discarded
        discarded += len(chunk)
