"""Least-significant-bit-first writer producing data readable by ``BitStream``."""

import struct

from demobits.bitstream import BitStream
from demobits.floats import (
    COORD_FRACTIONAL_BITS,
    COORD_INT_BITS_MP,
    COORD_INTEGER_BITS,
    FRAC_BITS,
    FRAC_BITS_LP,
    NORM_FRAC_BITS,
)

_UINT64_MASK = (1 << 64) - 1
_UINT32_MASK = 0xFFFFFFFF


def _check_width(bits):
    if not 0 <= bits <= 64:
        raise ValueError(f"bit width must be between 0 and 64, got {bits}")


def _to_float32(value):
    return struct.unpack("<f", struct.pack("<f", value))[0]


class BitWriter:
    """Appends bit fields to a growable byte buffer.

    Bits are packed least significant first, so the output can be read back
    with ``BitStream``.
    """

    def __init__(self, initial_size_bits=0):
        self._buffer = bytearray((initial_size_bits + 7) // 8)
        self.bitoffset = 0

    def __repr__(self):
        return f"BitWriter(bitoffset={self.bitoffset}, bitsize={self.bitsize})"

    @property
    def bitsize(self):
        """Number of bits currently allocated."""
        return len(self._buffer) * 8

    def available_bits(self):
        """Bits that can be written before the buffer has to grow."""
        return max(0, self.bitsize - self.bitoffset)

    def _reserve(self, bits):
        if self.available_bits() < bits:
            wanted = (self.bitsize + bits) // 8
            if bits % 8:
                wanted += 1
            new_size = max(len(self._buffer) * 2, wanted)
            self._buffer.extend(bytes(new_size - len(self._buffer)))

    def _put(self, value, bits):
        self._reserve(bits)
        if bits == 0:
            return
        value &= (1 << bits) - 1
        start = self.bitoffset >> 3
        shift = self.bitoffset & 7
        nbytes = (shift + bits + 7) >> 3
        # Keep the bits already written in the first byte; anything above the
        # newly written bits in the last byte is cleared.
        combined = (self._buffer[start] & ((1 << shift) - 1)) | (value << shift)
        self._buffer[start:start + nbytes] = combined.to_bytes(nbytes, "little")
        self.bitoffset += bits

    def write_bit(self, value):
        self._put(1 if value else 0, 1)

    def write_bits(self, src, bits):
        """Write the first ``bits`` bits of the bytes-like ``src``."""
        needed = (bits + 7) // 8
        if bits < 0 or len(src) < needed:
            raise ValueError(f"source holds {len(src) * 8} bits, {bits} requested")
        value = int.from_bytes(bytes(src[:needed]), "little")
        self._put(value, bits)

    def write_uint(self, value, bits):
        _check_width(bits)
        self._put(value & _UINT64_MASK, bits)

    def write_uint32(self, value):
        self.write_uint(value, 32)

    def write_sint(self, value, bits):
        self.write_uint(value, bits)

    def write_sint32(self, value):
        self.write_sint(value, 32)

    def write_float(self, value):
        self.write_bits(struct.pack("<f", value), 32)

    def write_cstring(self, text):
        """Write a zero-terminated string; ``None`` writes just the terminator."""
        if text is None:
            self.write_uint(0, 8)
            return
        raw = text.encode("utf-8") if isinstance(text, str) else bytes(text)
        self.write_bits(raw + b"\0", (len(raw) + 1) * 8)

    def write_varuint32(self, value):
        value &= _UINT32_MASK
        for _ in range(5):
            byte = value & 0x7F
            value >>= 7
            if value == 0:
                self.write_uint(byte, 8)
                break
            self.write_uint(byte | 0x80, 8)

    def write_bitcoord(self, coord):
        self.write_bit(coord.has_int)
        self.write_bit(coord.has_frac)
        if coord.has_int or coord.has_frac:
            self.write_bit(coord.sign)
            if coord.has_int:
                self.write_uint(coord.int_value, COORD_INTEGER_BITS)
            if coord.has_frac:
                self.write_uint(coord.frac_value, COORD_FRACTIONAL_BITS)

    def write_bitstream(self, stream):
        """Copy the unread bits of ``stream`` without consuming them."""
        copy = BitStream(stream.data, stream.bitsize)
        copy.bitoffset = stream.bitoffset
        copy.overflow = stream.overflow
        while copy.bits_left() > 32:
            self.write_uint(copy.read_uint32(), 32)
        remainder = copy.bits_left()
        if remainder > 0:
            self.write_uint(copy.read_uint(remainder), remainder)

    def write_bitangle(self, value, bits):
        shift = float(1 << (bits - 1))
        mask = int(shift - 1)
        ratio = _to_float32(_to_float32(value) / 360.0)
        encoded = int(_to_float32(ratio * shift)) & mask
        self.write_uint(encoded, bits)

    def write_bitvector(self, value):
        self.write_uint(value.x, value.bits)
        self.write_uint(value.y, value.bits)
        self.write_uint(value.z, value.bits)

    def write_coordvector(self, vec):
        coords = (vec.x, vec.y, vec.z)
        for coord in coords:
            self.write_bit(coord.exists)
        for coord in coords:
            if coord.exists:
                self.write_bitcoord(coord)

    def write_bitcellcoord(self, value, is_int, lp, bits):
        self.write_uint(value.int_val, bits)
        if not is_int:
            self.write_uint(value.fract_val, FRAC_BITS_LP if lp else FRAC_BITS)

    def _write_mp_int(self, value):
        self.write_uint(value.int_val, COORD_INT_BITS_MP if value.inbounds else COORD_INTEGER_BITS)

    def write_bitcoordmp(self, value, is_int, lp):
        self.write_bit(value.inbounds)
        if is_int:
            self.write_bit(value.int_has_val)
            if value.int_has_val:
                self.write_bit(value.sign)
                self._write_mp_int(value)
        else:
            self.write_bit(value.int_has_val)
            self.write_bit(value.sign)
            if value.int_has_val:
                self._write_mp_int(value)
            self.write_uint(value.frac_val, FRAC_BITS_LP if lp else FRAC_BITS)

    def write_bitnormal(self, value):
        self.write_bit(value.sign)
        self.write_uint(value.frac, NORM_FRAC_BITS)

    def write_field_index(self, new_index, last_index, new_way):
        """Write ``new_index`` relative to ``last_index``; -1 writes the end marker."""
        diff = 0xFFF if new_index == -1 else new_index - last_index - 1

        if new_way:
            if diff == 0:
                self.write_bit(True)
                return
            self.write_bit(False)
            if diff < 8:
                self.write_bit(True)
                self.write_uint(diff, 3)
                return
            self.write_bit(False)

        self.write_uint(diff & 0x1F, 5)
        unsigned_diff = diff & _UINT64_MASK
        if unsigned_diff <= (1 << 5) - 1:
            sel, extra_bits = 0, 0
        elif unsigned_diff <= (1 << 7) - 1:
            sel, extra_bits = 1, 2
        elif unsigned_diff <= (1 << 9) - 1:
            sel, extra_bits = 2, 4
        else:
            sel, extra_bits = 3, 7
        self.write_uint(sel, 2)
        if extra_bits:
            self.write_uint(diff >> 5, extra_bits)

    def write_ubitint(self, value):
        value &= _UINT32_MASK
        self.write_uint(value & 0xF, 4)
        if value <= (1 << 4) - 1:
            sel, extra_bits = 0, 0
        elif value <= (1 << 8) - 1:
            sel, extra_bits = 1, 4
        elif value <= (1 << 12) - 1:
            sel, extra_bits = 2, 8
        else:
            sel, extra_bits = 3, 28
        self.write_uint(sel, 2)
        if extra_bits:
            self.write_uint(value >> 4, extra_bits)

    def write_ubitvar(self, value):
        value &= _UINT32_MASK
        if value <= (1 << 4) - 1:
            sel, bits = 0, 4
        elif value <= (1 << 8) - 1:
            sel, bits = 1, 8
        elif value <= (1 << 12) - 1:
            sel, bits = 2, 12
        else:
            sel, bits = 3, 32
        self.write_uint(sel, 2)
        self.write_uint(value, bits)

    def getvalue(self):
        """The written bytes, with the last partial byte zero-padded."""
        return bytes(self._buffer[: (self.bitoffset + 7) // 8])

    def to_bitstream(self):
        """A stream over exactly the bits written so far."""
        return BitStream(self.getvalue(), self.bitoffset)