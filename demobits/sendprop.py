"""Send prop descriptions and decoding of encoded prop values to floats."""

from __future__ import annotations

import enum
import math
import struct
from dataclasses import dataclass
from typing import Optional

from demobits.floats import COORD_RESOLUTION, COORD_RESOLUTION_LP, NORM_RES


class SendPropType(enum.IntEnum):
    """Kind of value a send prop carries."""

    INT = 0
    FLOAT = 1
    VECTOR3 = 2
    VECTOR2 = 3
    STRING = 4
    ARRAY = 5
    DATATABLE = 6
    INVALID = 7


@dataclass
class SendProp:
    """Metadata describing how one networked property is encoded."""

    name: str = ""
    proptype: SendPropType = SendPropType.INT
    low_value: float = 0.0
    high_value: float = 0.0
    exclude_name: Optional[str] = None
    dtname: Optional[str] = None
    array_prop: Optional[SendProp] = None
    priority: int = 0
    prop_numbits: int = 0
    array_num_elements: int = 0
    flag_unsigned: bool = False
    flag_coord: bool = False
    flag_noscale: bool = False
    flag_rounddown: bool = False
    flag_roundup: bool = False
    flag_normal: bool = False
    flag_exclude: bool = False
    flag_xyze: bool = False
    flag_insidearray: bool = False
    flag_proxyalwaysyes: bool = False
    flag_changesoften: bool = False
    flag_isvectorelem: bool = False
    flag_collapsible: bool = False
    flag_coordmp: bool = False
    flag_coordmplp: bool = False
    flag_coordmpint: bool = False
    flag_cellcoord: bool = False
    flag_cellcoordlp: bool = False
    flag_cellcoordint: bool = False


def _f32(value):
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _bitcoordmp_to_float(value, is_int, lp):
    whole = value.int_val * (-1 if value.sign else 1)
    if is_int:
        return float(whole)
    return whole + value.frac_val * (COORD_RESOLUTION_LP if lp else COORD_RESOLUTION)


def _bitnormal_to_float(value):
    out = value.frac / NORM_RES
    return -out if value.sign else out


def _bitcellcoord_to_float(value, is_int, lp):
    out = float(value.int_val)
    if not is_int:
        out += value.fract_val * (COORD_RESOLUTION_LP if lp else COORD_RESOLUTION)
    return out


def _bitcoord_to_float(value):
    out = 0.0
    if value.has_int:
        out += value.int_value + 1
    out += value.frac_value * COORD_RESOLUTION
    return -out if value.sign else out


def _scaled_to_float(prop, raw):
    denom = (1 << prop.prop_numbits) - 1
    if denom == 0:
        scale = math.nan if raw == 0 else math.inf
    else:
        scale = _f32(float(raw) / denom)
    return prop.low_value + (prop.high_value - prop.low_value) * scale


def prop_to_float(prop, value):
    """Decode an encoded float prop value according to the flags of ``prop``.

    ``value`` is the decoded wire form: a ``BitCoord``, ``BitCoordMp``,
    ``BitNormal`` or ``BitCellCoord`` for the matching flags, a float for
    unscaled props, and the raw unsigned integer otherwise.
    """
    if prop.flag_coord:
        result = _bitcoord_to_float(value)
    elif prop.flag_coordmp:
        result = _bitcoordmp_to_float(value, False, False)
    elif prop.flag_coordmplp:
        result = _bitcoordmp_to_float(value, False, True)
    elif prop.flag_coordmpint:
        result = _bitcoordmp_to_float(value, True, False)
    elif prop.flag_noscale:
        result = float(value)
    elif prop.flag_normal:
        result = _bitnormal_to_float(value)
    elif prop.flag_cellcoord:
        result = _bitcellcoord_to_float(value, False, False)
    elif prop.flag_cellcoordlp:
        result = _bitcellcoord_to_float(value, False, True)
    elif prop.flag_cellcoordint:
        result = _bitcellcoord_to_float(value, True, False)
    else:
        result = _scaled_to_float(prop, value)
    return _f32(result)