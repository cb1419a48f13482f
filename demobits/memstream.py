"""In-memory byte stream that can check written data against a reference."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

OUT_OF_BOUNDS_MESSAGE = "Write out of bounds for ground truth"
MISMATCH_MESSAGE = "Did not match with ground truth"


class MemoryStream:
    """A growable byte buffer with a read/write position.

    When ``ground_truth`` is given, every write is compared with the bytes of
    the reference stream at the same position. On the first difference
    ``agrees`` becomes False and ``on_error`` (if any) is called with a
    message; later writes are no longer checked.

    Each write adds its length to the logical size, even when it overwrites
    data after a backwards seek.
    """

    def __init__(
        self,
        data: bytes = b"",
        ground_truth: Optional[MemoryStream] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ):
        self._buffer = bytearray(data)
        self.offset = 0
        self.file_size = len(self._buffer)
        self.ground_truth = ground_truth
        self.on_error = on_error
        self.agrees = True

    def __repr__(self):
        return (
            f"MemoryStream(offset={self.offset}, file_size={self.file_size}, "
            f"agrees={self.agrees})"
        )

    @classmethod
    def from_file(cls, path):
        """Create a stream holding the whole content of the file at ``path``."""
        return cls(Path(path).read_bytes())

    def bytes_left(self):
        """Bytes between the current position and the end of the data."""
        if self.offset > self.file_size:
            return 0
        return self.file_size - self.offset

    def read(self, size):
        """Read up to ``size`` bytes from the current position."""
        if size < 0:
            raise ValueError("size must not be negative")
        if self.offset > self.file_size:
            return b""
        count = min(self.bytes_left(), size)
        chunk = bytes(self._buffer[self.offset:self.offset + count])
        if len(chunk) < count:
            chunk += bytes(count - len(chunk))
        self.offset += count
        return chunk

    def seek(self, offset):
        """Move the position by ``offset`` bytes and return the new position."""
        new_offset = self.offset + offset
        if new_offset < 0:
            raise ValueError("cannot seek before the start of the stream")
        self.offset = new_offset
        return self.offset

    def _fail(self, message):
        self.agrees = False
        if self.on_error is not None:
            self.on_error(message)

    def _check_ground_truth(self, data):
        truth = self.ground_truth
        if truth is None or not self.agrees:
            return
        end = self.offset + len(data)
        if end > truth.file_size:
            self._fail(OUT_OF_BOUNDS_MESSAGE)
            return
        expected = bytes(truth._buffer[self.offset:end])
        expected += bytes(len(data) - len(expected))
        if expected != data:
            self._fail(MISMATCH_MESSAGE)

    def write(self, data):
        """Write ``data`` at the current position and return its length."""
        data = bytes(data)
        end = self.offset + len(data)
        if end > len(self._buffer):
            self._buffer.extend(bytes(end - len(self._buffer)))
        self._buffer[self.offset:end] = data
        self._check_ground_truth(data)
        self.offset = end
        self.file_size += len(data)
        return len(data)

    def getvalue(self):
        """The content of the stream up to its logical size."""
        content = bytes(self._buffer[:self.file_size])
        if len(content) < self.file_size:
            content += bytes(self.file_size - len(content))
        return content