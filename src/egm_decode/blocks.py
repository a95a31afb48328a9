"""Helpers shared by the size-prefixed payload blocks."""
from __future__ import annotations

from typing import Callable, TypeVar
from warnings import warn

from egm_core.errors import ManifestError, ManifestWarning, SizeMismatchError
from egm_core.protocol import BLOCK_PREFIX_FMT
from egm_core.reader import ByteReader

T = TypeVar("T")


def read_block_prefix(reader: ByteReader) -> tuple[int, int, int]:
    """Return (start, declared size, version) for the block at the cursor."""
    start = reader.position
    size, version = reader.read_struct(BLOCK_PREFIX_FMT)
    return start, size, version


def check_block_size(reader: ByteReader, block: str, start: int, size: int, version: int) -> None:
    consumed = reader.position - start
    if consumed != size:
        raise SizeMismatchError(block, expected=size, actual=consumed, version=version)


def read_optional(reader: ByteReader, read: Callable[[ByteReader], T], what: str) -> T | None:
    """Read a field whose decode failure means 'absent' rather than corruption."""
    at = reader.position
    try:
        return read(reader)
    except ManifestError as e:
        warn(f"Dropping {what} at offset {at}: {e}", ManifestWarning)
        return None
