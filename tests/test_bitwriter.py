import struct

import pytest
from hypothesis import given
from hypothesis import strategies as st

from demobits.bitstream import BitStream
from demobits.bitwriter import BitWriter
from demobits.floats import (
    BitAngleVector,
    BitCellCoord,
    BitCoord,
    BitCoordMp,
    BitCoordVector,
    BitNormal,
)


def test_write_uint_byte_pins_wire_value():
    writer = BitWriter(8)
    writer.write_uint(0xAB, 8)
    assert writer.getvalue() == b"\xab"


def test_bits_are_packed_lsb_first():
    writer = BitWriter(8)
    for bit in (True, False, True):
        writer.write_bit(bit)
    assert writer.getvalue() == b"\x05"
    assert writer.bitoffset == 3


def test_varuint32_wire_format():
    writer = BitWriter()
    writer.write_varuint32(300)
    assert writer.getvalue() == b"\xac\x02"


def test_cstring_appends_terminator():
    writer = BitWriter()
    writer.write_cstring("hi")
    assert writer.getvalue() == b"hi\x00"


def test_cstring_none_writes_terminator_only():
    writer = BitWriter()
    writer.write_cstring(None)
    assert writer.getvalue() == b"\x00"


def test_float_matches_ieee_bytes():
    writer = BitWriter()
    writer.write_float(1.5)
    assert writer.getvalue() == struct.pack("<f", 1.5)


def test_available_bits_tracks_offset():
    writer = BitWriter(10)
    assert writer.available_bits() == writer.bitsize
    writer.write_uint(0, 3)
    assert writer.available_bits() == writer.bitsize - 3


def test_buffer_grows_when_needed():
    writer = BitWriter(0)
    for i in range(100):
        writer.write_uint(i, 7)
    assert writer.bitoffset == 700
    assert writer.bitsize >= writer.bitoffset
    stream = writer.to_bitstream()
    assert [stream.read_uint(7) for _ in range(100)] == list(range(100))


def test_write_bits_rejects_short_source():
    writer = BitWriter()
    with pytest.raises(ValueError):
        writer.write_bits(b"\x01", 9)


def test_write_uint_rejects_too_wide():
    writer = BitWriter()
    with pytest.raises(ValueError):
        writer.write_uint(0, 65)


def test_write_bits_partial_byte():
    writer = BitWriter()
    writer.write_bits(b"\xff\xff", 12)
    stream = writer.to_bitstream()
    assert stream.bitsize == 12
    assert stream.read_uint(12) == 0xFFF


@given(st.lists(st.tuples(st.integers(0, 64), st.integers(0, (1 << 64) - 1)), max_size=30))
def test_uint_round_trip(fields):
    writer = BitWriter(1)
    for bits, value in fields:
        writer.write_uint(value, bits)
    stream = writer.to_bitstream()
    for bits, value in fields:
        assert stream.read_uint(bits) == value & ((1 << bits) - 1)
    assert stream.bits_left() == 0
    assert not stream.overflow


@given(st.integers(-(1 << 31), (1 << 31) - 1))
def test_sint32_round_trip(value):
    writer = BitWriter()
    writer.write_sint32(value)
    assert writer.to_bitstream().read_sint32() == value


@given(st.integers(1, 63), st.data())
def test_sint_round_trip(bits, data):
    value = data.draw(st.integers(-(1 << (bits - 1)), (1 << (bits - 1)) - 1))
    writer = BitWriter()
    writer.write_sint(value, bits)
    assert writer.to_bitstream().read_sint(bits) == value


@given(st.floats(width=32, allow_nan=False))
def test_float_round_trip(value):
    writer = BitWriter()
    writer.write_float(value)
    assert writer.to_bitstream().read_float() == value


@given(st.integers(0, 0xFFFFFFFF))
def test_varuint32_round_trip(value):
    writer = BitWriter()
    writer.write_varuint32(value)
    assert writer.to_bitstream().read_varuint32() == value


@given(st.integers(0, 0xFFFFFFFF))
def test_ubitint_round_trip(value):
    writer = BitWriter()
    writer.write_ubitint(value)
    assert writer.to_bitstream().read_ubitint() == value


@given(st.integers(0, 0xFFFFFFFF))
def test_ubitvar_round_trip(value):
    writer = BitWriter()
    writer.write_ubitvar(value)
    stream = writer.to_bitstream()
    assert stream.read_ubitvar() == value
    assert stream.bits_left() == 0


@given(st.integers(-1, 2000), st.integers(0, 4094), st.booleans())
def test_field_index_round_trip(last_index, diff, new_way):
    new_index = last_index + 1 + diff
    writer = BitWriter()
    writer.write_field_index(new_index, last_index, new_way)
    stream = writer.to_bitstream()
    assert stream.read_field_index(last_index, new_way) == new_index
    assert stream.bits_left() == 0


@pytest.mark.parametrize("new_way", [True, False])
def test_field_index_end_marker(new_way):
    writer = BitWriter()
    writer.write_field_index(-1, 17, new_way)
    assert writer.to_bitstream().read_field_index(17, new_way) == -1


def test_field_index_new_way_next_is_single_bit():
    writer = BitWriter()
    writer.write_field_index(5, 4, True)
    assert writer.bitoffset == 1


_coord = st.builds(
    lambda has_int, has_frac, sign, int_value, frac_value: BitCoord(
        exists=True,
        has_int=has_int,
        has_frac=has_frac,
        sign=sign and (has_int or has_frac),
        int_value=int_value if has_int else 0,
        frac_value=frac_value if has_frac else 0,
    ),
    st.booleans(),
    st.booleans(),
    st.booleans(),
    st.integers(0, (1 << 14) - 1),
    st.integers(0, 31),
)


@given(_coord)
def test_bitcoord_round_trip(coord):
    writer = BitWriter()
    writer.write_bitcoord(coord)
    stream = writer.to_bitstream()
    assert stream.read_bitcoord() == coord
    assert stream.bits_left() == 0


@given(st.lists(st.one_of(st.just(None), _coord), min_size=3, max_size=3))
def test_coordvector_round_trip(coords):
    vec = BitCoordVector(*[c if c is not None else BitCoord() for c in coords])
    writer = BitWriter()
    writer.write_coordvector(vec)
    assert writer.to_bitstream().read_coordvector() == vec


@given(st.integers(1, 32), st.data())
def test_bitvector_round_trip(bits, data):
    comp = st.integers(0, (1 << bits) - 1)
    vec = BitAngleVector(data.draw(comp), data.draw(comp), data.draw(comp), bits)
    writer = BitWriter()
    writer.write_bitvector(vec)
    assert writer.to_bitstream().read_bitvector(bits) == vec


@given(st.booleans(), st.booleans(), st.integers(1, 20), st.data())
def test_bitcellcoord_round_trip(is_int, lp, bits, data):
    frac_bits = 3 if lp else 5
    value = BitCellCoord(
        int_val=data.draw(st.integers(0, (1 << bits) - 1)),
        fract_val=0 if is_int else data.draw(st.integers(0, (1 << frac_bits) - 1)),
    )
    writer = BitWriter()
    writer.write_bitcellcoord(value, is_int, lp, bits)
    assert writer.to_bitstream().read_bitcellcoord(is_int, lp, bits) == value


@given(st.booleans(), st.booleans(), st.booleans(), st.booleans(), st.booleans(), st.data())
def test_bitcoordmp_round_trip(is_int, lp, inbounds, has_val, sign, data):
    int_bits = 11 if inbounds else 14
    int_val = data.draw(st.integers(0, (1 << int_bits) - 1)) if has_val else 0
    if is_int:
        value = BitCoordMp(int_val=int_val, inbounds=inbounds, int_has_val=has_val,
                           sign=sign and has_val)
    else:
        frac_val = data.draw(st.integers(0, (1 << (3 if lp else 5)) - 1))
        value = BitCoordMp(int_val=int_val, frac_val=frac_val, inbounds=inbounds,
                           int_has_val=has_val, sign=sign)
    writer = BitWriter()
    writer.write_bitcoordmp(value, is_int, lp)
    assert writer.to_bitstream().read_bitcoordmp(is_int, lp) == value


@given(st.integers(0, (1 << 11) - 1), st.booleans())
def test_bitnormal_round_trip(frac, sign):
    value = BitNormal(frac=frac, sign=sign)
    writer = BitWriter()
    writer.write_bitnormal(value)
    assert writer.to_bitstream().read_bitnormal() == value


@given(st.binary(min_size=1, max_size=40), st.data())
def test_write_bitstream_copies_remaining_bits(payload, data):
    total = len(payload) * 8
    start = data.draw(st.integers(0, total))
    source = BitStream(payload, total)
    source.advance(start)
    writer = BitWriter()
    writer.write_bitstream(source)
    assert source.bitoffset == start
    assert writer.bitoffset == total - start
    expected = BitStream(payload, total)
    expected.advance(start)
    out = writer.to_bitstream()
    while expected.bits_left():
        assert out.read_bit() == expected.read_bit()


def test_bitangle_full_turn_wraps_to_zero():
    writer = BitWriter()
    writer.write_bitangle(360.0, 8)
    assert writer.to_bitstream().read_uint(8) == 0


@given(st.floats(-720.0, 720.0), st.integers(2, 16))
def test_bitangle_top_bit_never_set(angle, bits):
    writer = BitWriter()
    writer.write_bitangle(angle, bits)
    assert writer.bitoffset == bits
    assert writer.to_bitstream().read_uint(bits) < (1 << (bits - 1))


def test_overwriting_unaligned_keeps_earlier_bits():
    writer = BitWriter(16)
    writer.write_uint(0b101, 3)
    writer.write_uint(0x1F, 5)
    writer.write_uint(0x3, 2)
    stream = writer.to_bitstream()
    assert stream.read_uint(3) == 0b101
    assert stream.read_uint(5) == 0x1F
    assert stream.read_uint(2) == 0x3