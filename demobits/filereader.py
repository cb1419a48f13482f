"""Buffered forward-only reader over a binary stream."""

import struct

_INT32 = struct.Struct("<i")
_FLOAT = struct.Struct("<f")


class FileReader:
    """Reads little-endian values from ``stream`` through an internal buffer.

    ``stream`` needs ``read(size)`` and ``seek(offset, whence)``; skips that
    go past the buffer are done with a relative seek. Going backwards is not
    supported.
    """

    def __init__(self, stream, buffer_size=1 << 16):
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive")
        self.stream = stream
        self.buffer_size = buffer_size
        self.eof = False
        self._buffer = b""
        self._offset = 0
        self._file_offset = 0

    def __repr__(self):
        return f"FileReader(position={self.position()}, eof={self.eof})"

    def _left_in_buffer(self):
        return max(0, len(self._buffer) - self._offset)

    def _read_chunk(self):
        chunk = self.stream.read(self.buffer_size)
        if not chunk:
            self.eof = True
            return
        self._buffer = chunk
        self._offset = 0
        self._file_offset += len(chunk)

    def position(self):
        """Offset in the stream of the next byte to be read."""
        return self._file_offset - self._left_in_buffer()

    def read_data(self, size):
        """Read up to ``size`` bytes; fewer are returned at end of stream."""
        parts = []
        left = size
        while True:
            available = min(left, self._left_in_buffer())
            if available > 0:
                parts.append(self._buffer[self._offset:self._offset + available])
                left -= available
                self.skip_bytes(available)
            if left > 0:
                self._read_chunk()
            if left <= 0 or self.eof:
                break
        return b"".join(parts)

    def skip_bytes(self, count):
        """Skip ``count`` bytes forward; negative counts are ignored."""
        if count < 0:
            return
        left = self._left_in_buffer()
        if count < left:
            self._offset += count
        else:
            self._offset = len(self._buffer)
            count -= left
            self.stream.seek(count, 1)
            self._file_offset += count

    def skip_to(self, offset):
        """Move forward to absolute ``offset``."""
        self.skip_bytes(offset - self.position())

    def _read_exact(self, size):
        if self._left_in_buffer() >= size:
            data = self._buffer[self._offset:self._offset + size]
            self._offset += size
            return data
        data = self.read_data(size)
        if len(data) < size:
            raise EOFError(f"expected {size} bytes, got {len(data)}")
        return data

    def read_byte(self):
        return self._read_exact(1)[0]

    def read_int32(self):
        return _INT32.unpack(self._read_exact(4))[0]

    def read_float(self):
        return _FLOAT.unpack(self._read_exact(4))[0]

    def read_vector(self):
        """Read three floats as an ``(x, y, z)`` tuple."""
        return (self.read_float(), self.read_float(), self.read_float())