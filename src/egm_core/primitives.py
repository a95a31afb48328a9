"""Little-endian integer and length-prefixed string codecs."""
from __future__ import annotations

import struct

from .errors import InvalidDataError
from .reader import ByteReader

U8 = struct.Struct("<B")
U16 = struct.Struct("<H")
U32 = struct.Struct("<I")
U64 = struct.Struct("<Q")
I8 = struct.Struct("<b")
I16 = struct.Struct("<h")
I32 = struct.Struct("<i")
I64 = struct.Struct("<q")


def read_u8(reader: ByteReader) -> int:
    return reader.read_struct(U8)[0]


def read_u16(reader: ByteReader) -> int:
    return reader.read_struct(U16)[0]


def read_u32(reader: ByteReader) -> int:
    return reader.read_struct(U32)[0]


def read_u64(reader: ByteReader) -> int:
    return reader.read_struct(U64)[0]


def read_i8(reader: ByteReader) -> int:
    return reader.read_struct(I8)[0]


def read_i16(reader: ByteReader) -> int:
    return reader.read_struct(I16)[0]


def read_i32(reader: ByteReader) -> int:
    return reader.read_struct(I32)[0]


def read_i64(reader: ByteReader) -> int:
    return reader.read_struct(I64)[0]


def read_string(reader: ByteReader) -> str:
    """Decode a length-prefixed string.

    Positive length: UTF-8 byte count including one trailing NUL.
    Negative length: UTF-16LE code unit count; malformed units are replaced.
    Zero: the empty string.
    """
    start = reader.position
    length = read_i32(reader)
    if length == 0:
        return ""

    if length > 0:
        raw = reader.read_bytes(length)
        if raw[-1:] != b"\x00" or b"\x00" in raw[:-1]:
            raise InvalidDataError(f"string at offset {start} is not NUL-terminated")
        try:
            return raw[:-1].decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidDataError(f"string at offset {start} is not valid UTF-8") from e

    raw = reader.read_bytes(-length * 2)
    text = raw.decode("utf-16-le", errors="replace")
    # Wide strings are serialized with their terminator.
    if text.endswith("\x00"):
        text = text[:-1]
    return text


def read_string_array(reader: ByteReader) -> list[str]:
    return reader.read_array(read_string)
