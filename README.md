# demobits

Low-level building blocks for reading and writing Source engine demo data
bit for bit. Encoded floats keep their encoded form, so a value that is read
and then written again comes out unchanged.

## Contents

- `demobits.bitstream.BitStream` reads bits from a byte buffer, least
  significant bit first. It reads plain and signed integers, floats,
  varints, `ubitvar` and `ubitint` values, field indices, fixed-size and
  zero-terminated strings, and the packed float encodings. Reading past the
  end does not raise: the stream sets `overflow` and returns zeros.
  `fork_and_advance` gives a sub-stream over the next bits.
- `demobits.bitwriter.BitWriter` writes the same encodings and grows its
  buffer as needed. `getvalue()` returns the written bytes and
  `to_bitstream()` a `BitStream` over exactly the bits written.
- `demobits.floats` holds the encoded float types (`BitCoord`,
  `BitCoordVector`, `BitCoordMp`, `BitCellCoord`, `BitNormal`,
  `BitAngleVector`), the format constants, and `alignment_loss`.
- `demobits.sendprop` holds `SendProp`, `SendPropType` and `prop_to_float`,
  which decodes an encoded property value to a 32-bit float according to
  the property's flags.
- `demobits.arena.Arena` is a block allocator that hands out writable,
  aligned `memoryview` slices; `clear()` releases everything at once.
- `demobits.hashtable` holds `HashTable`, a fixed-capacity string-to-value
  table, and `PropExcludeSet`, a fixed-capacity set of excluded properties
  keyed by table name and property name. Inserts return `False` when the
  table is full or the key is already present.
- `demobits.filereader.FileReader` reads little-endian bytes, int32s,
  floats and vectors from a binary stream through a buffer, and can skip
  forward. Short reads of fixed-size values raise `EOFError`.
- `demobits.memstream.MemoryStream` is an in-memory stream. It can compare
  what is written to it against a ground-truth stream and report the first
  difference through a callback.

## What it does not do

The package provides the pieces only. It does not parse or write whole
demo files, decode network messages, datatables, string tables or entity
updates, and it has no command-line tool.

## Installation

```
pip install .
```

## Example

```python
from demobits.bitwriter import BitWriter

writer = BitWriter(64)
writer.write_uint(5, 3)
writer.write_varuint32(300)
writer.write_cstring("hello")

stream = writer.to_bitstream()
assert stream.read_uint(3) == 5
assert stream.read_varuint32() == 300
assert stream.read_cstring(32) == b"hello"
```

## Running the tests

```
pip install .[test]
pytest
```