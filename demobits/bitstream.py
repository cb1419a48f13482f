"""Least-significant-bit-first reader over a byte buffer."""

import struct

from demobits.floats import (
    COORD_FRACTIONAL_BITS,
    COORD_INT_BITS_MP,
    COORD_INTEGER_BITS,
    FRAC_BITS,
    FRAC_BITS_LP,
    NORM_FRAC_BITS,
    BitAngleVector,
    BitCellCoord,
    BitCoord,
    BitCoordMp,
    BitCoordVector,
    BitNormal,
)

_UBITVAR_MASKS = ((1 << 4) - 1, (1 << 8) - 1, (1 << 12) - 1, 0xFFFFFFFF)
_UBITVAR_BITS = (6, 10, 14, 34)
_FAST_READ_LIMIT = 56


def _check_width(bits):
    if not 0 <= bits <= 64:
        raise ValueError(f"bit width must be between 0 and 64, got {bits}")


class BitStream:
    """Reads bit fields from ``data``, limited to its first ``bitsize`` bits.

    Reading past the end never raises: the stream sets ``overflow`` and
    returns zero values from then on.
    """

    __slots__ = ("data", "bitsize", "bitoffset", "overflow")

    def __init__(self, data, bitsize=None):
        self.data = data if isinstance(data, bytes) else bytes(data)
        self.bitsize = len(self.data) * 8 if bitsize is None else bitsize
        self.bitoffset = 0
        self.overflow = False

    def __repr__(self):
        return (
            f"BitStream(bitoffset={self.bitoffset}, bitsize={self.bitsize}, "
            f"overflow={self.overflow})"
        )

    def bits_left(self):
        """Number of bits that can still be read."""
        if self.bitsize >= self.bitoffset and not self.overflow:
            return self.bitsize - self.bitoffset
        return 0

    def _peek(self, bits):
        # Bytes past the last byte touched by bitsize read as zero.
        if self.overflow or self.bitoffset >= self.bitsize:
            return 0
        start = self.bitoffset >> 3
        shift = self.bitoffset & 7
        end = min((self.bitsize + 7) >> 3, start + ((shift + bits + 7) >> 3))
        chunk = int.from_bytes(self.data[start:end], "little")
        return (chunk >> shift) & ((1 << bits) - 1)

    def advance(self, bits):
        """Skip ``bits`` bits, flagging overflow when passing the end."""
        self.bitoffset += bits
        if self.bitoffset > self.bitsize:
            self.bitoffset = self.bitsize
            self.overflow = True

    def fork_and_advance(self, bits):
        """Return a stream over the next ``bits`` bits and skip them here."""
        fork = BitStream(self.data, self.bitoffset + bits)
        fork.bitoffset = self.bitoffset
        fork.overflow = self.overflow
        self.advance(bits)
        return fork

    def read_bit(self):
        if self.overflow or self.bitoffset >= self.bitsize:
            self.overflow = True
            return False
        value = self._peek(1)
        self.advance(1)
        return bool(value)

    def read_uint(self, bits):
        _check_width(bits)
        if self.overflow:
            return 0
        value = self._peek(bits)
        self.bitoffset += bits
        if self.bitoffset > self.bitsize:
            self.bitoffset = self.bitsize
            self.overflow = True
            # Wide reads keep the bits that were present before the end.
            if bits <= _FAST_READ_LIMIT:
                return 0
        return value

    def read_sint(self, bits):
        value = self.read_uint(bits)
        if bits and (value >> (bits - 1)) & 1:
            value -= 1 << bits
        return value

    def read_float(self):
        raw = self.read_uint32()
        return struct.unpack("<f", raw.to_bytes(4, "little"))[0]

    def read_fixed_string(self, size):
        """Read exactly ``size`` bytes."""
        return bytes(self.read_uint(8) for _ in range(size))

    def read_cstring(self, max_bytes):
        """Read a zero-terminated string of at most ``max_bytes`` bytes.

        The terminator is consumed but not returned. If no terminator is
        found within ``max_bytes`` the stream is flagged as overflowed.
        """
        out = bytearray()
        for _ in range(max_bytes):
            value = self.read_uint(8)
            if value == 0:
                return bytes(out)
            out.append(value)
        self.overflow = True
        return bytes(out)

    def read_bitvector(self, bits):
        x = self.read_uint(bits)
        y = self.read_uint(bits)
        z = self.read_uint(bits)
        return BitAngleVector(x, y, z, bits)

    def read_coordvector(self):
        present = [bool(self.read_uint(1)) for _ in range(3)]
        coords = [self.read_bitcoord() if exists else BitCoord() for exists in present]
        return BitCoordVector(*coords)

    def read_bitcoord(self):
        val = self._peek(COORD_INTEGER_BITS + COORD_FRACTIONAL_BITS + 3)
        coord = BitCoord(exists=True, has_int=bool(val & 0x1), has_frac=bool(val & 0x2))
        bits_used = 2

        if coord.has_int or coord.has_frac:
            coord.sign = bool(val & 0x4)
            val >>= 3
            bits_used = 3
            if coord.has_int:
                coord.int_value = val & ((1 << COORD_INTEGER_BITS) - 1)
                val >>= COORD_INTEGER_BITS
                bits_used += COORD_INTEGER_BITS
            if coord.has_frac:
                coord.frac_value = val & ((1 << COORD_FRACTIONAL_BITS) - 1)
                bits_used += COORD_FRACTIONAL_BITS

        self.advance(bits_used)
        return coord

    def read_uint32(self):
        return self.read_uint(32)

    def read_varuint32(self):
        result = 0
        for i in range(5):
            byte = self.read_uint(8)
            result |= (byte & 0x7F) << (7 * i)
            if not byte & 0x80:
                break
        return result & 0xFFFFFFFF

    def read_sint32(self):
        return self.read_sint(32)

    def read_ubitint(self):
        ret = self.read_uint(4)
        extra_bits = {1: 4, 2: 8, 3: 28}.get(self.read_uint(2), 0)
        add = self.read_uint(extra_bits) if extra_bits else 0
        return (ret | (add << 4)) & 0xFFFFFFFF

    def read_ubitvar(self):
        if self.overflow:
            return 0
        val = self._peek(34)
        sel = val & 0x3
        output = (val >> 2) & _UBITVAR_MASKS[sel]
        self.advance(_UBITVAR_BITS[sel])
        return output

    def read_bitcellcoord(self, is_int, lp, bits):
        out = BitCellCoord(int_val=self.read_uint(bits))
        if not is_int:
            out.fract_val = self.read_uint(FRAC_BITS_LP if lp else FRAC_BITS)
        return out

    def _read_mp_int(self, inbounds):
        return self.read_uint(COORD_INT_BITS_MP if inbounds else COORD_INTEGER_BITS)

    def read_bitcoordmp(self, is_int, lp):
        out = BitCoordMp(inbounds=self.read_bit())
        if is_int:
            out.int_has_val = self.read_bit()
            if out.int_has_val:
                out.sign = self.read_bit()
                out.int_val = self._read_mp_int(out.inbounds)
        else:
            out.int_has_val = self.read_bit()
            out.sign = self.read_bit()
            if out.int_has_val:
                out.int_val = self._read_mp_int(out.inbounds)
            out.frac_val = self.read_uint(FRAC_BITS_LP if lp else FRAC_BITS)
        return out

    def read_bitnormal(self):
        sign = self.read_bit()
        frac = self.read_uint(NORM_FRAC_BITS)
        return BitNormal(frac=frac, sign=sign)

    def read_field_index(self, last_index, new_way):
        """Read the next prop index; returns -1 for the end marker."""
        if new_way and self.read_bit():
            return last_index + 1

        if new_way and self.read_bit():
            ret = self.read_uint(3)
        else:
            ret = self.read_uint(5)
            extra_bits = {1: 2, 2: 4, 3: 7}.get(self.read_uint(2), 0)
            if extra_bits:
                ret |= self.read_uint(extra_bits) << 5

        if ret == 0xFFF:
            return -1
        return last_index + 1 + ret