"""Encoded coordinate and angle values as stored on the wire, plus format constants.

Values are kept in their encoded form so that they can be written back
bit-for-bit identical to the original stream.
"""

from dataclasses import dataclass, field

COORD_INTEGER_BITS = 14
COORD_FRACTIONAL_BITS = 5
COORD_DENOMINATOR = 1 << COORD_FRACTIONAL_BITS
COORD_INT_BITS_MP = 11
FRAC_BITS_LP = 3
FRAC_BITS = 5
MAX_EDICTS = 2048
MAX_EDICT_BITS = 11
ENTITY_SENTINEL = 9999
NORM_FRAC_BITS = 11
NORM_DENOM = (1 << NORM_FRAC_BITS) - 1
HANDLE_BITS = 10

COORD_RESOLUTION = 1.0 / (1 << COORD_FRACTIONAL_BITS)
COORD_RESOLUTION_LP = 1.0 / (1 << FRAC_BITS_LP)
NORM_RES = 1.0 / NORM_DENOM


def alignment_loss(bytes_allocated, alignment):
    """Return the padding needed to bring ``bytes_allocated`` up to ``alignment``.

    ``alignment`` is expected to be a power of two.
    """
    offset = bytes_allocated & (alignment - 1)
    return 0 if offset == 0 else alignment - offset


@dataclass
class BitAngleVector:
    """Three angles encoded with the same number of bits each."""

    x: int = 0
    y: int = 0
    z: int = 0
    bits: int = 0


@dataclass
class BitCoord:
    """A coordinate with optional integer and fractional parts."""

    exists: bool = False
    has_int: bool = False
    has_frac: bool = False
    sign: bool = False
    int_value: int = 0
    frac_value: int = 0


@dataclass
class BitCoordVector:
    """Three optional coordinates."""

    x: BitCoord = field(default_factory=BitCoord)
    y: BitCoord = field(default_factory=BitCoord)
    z: BitCoord = field(default_factory=BitCoord)


@dataclass
class BitNormal:
    """A normalised component: a sign and an 11-bit fraction."""

    frac: int = 0
    sign: bool = False


@dataclass
class BitCellCoord:
    """A cell-relative coordinate."""

    int_val: int = 0
    fract_val: int = 0


@dataclass
class BitCoordMp:
    """A multiplayer-optimised coordinate."""

    int_val: int = 0
    frac_val: int = 0
    inbounds: bool = False
    int_has_val: bool = False
    sign: bool = False