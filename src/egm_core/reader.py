"""Bounds-checked byte cursor used by every manifest parser."""
from __future__ import annotations

import struct
from typing import Callable, TypeVar

from .errors import InvalidDataError, ReadOverflowError

T = TypeVar("T")

_U32 = struct.Struct("<I")


class ByteReader:
    """Forward-only cursor over an immutable buffer.

    Reads never go out of bounds: a short buffer raises ReadOverflowError and
    leaves the position where it was.
    """

    def __init__(self, data: bytes | bytearray | memoryview):
        self._data = bytes(data)
        self._pos = 0

    def __len__(self) -> int:
        return len(self._data)

    @property
    def position(self) -> int:
        return self._pos

    def tell(self) -> int:
        return self._pos

    @property
    def length(self) -> int:
        return len(self._data)

    @property
    def remaining(self) -> int:
        return max(0, len(self._data) - self._pos)

    def seek(self, position: int) -> None:
        self._pos = max(0, position)

    def skip(self, delta: int) -> None:
        # Underflow clamps to the start; size checks downstream catch the drift.
        self._pos = max(0, self._pos + delta)

    def read_bytes(self, size: int) -> bytes:
        if size < 0:
            raise InvalidDataError(f"negative read of {size} bytes at offset {self._pos}")
        end = self._pos + size
        if end > len(self._data):
            raise ReadOverflowError(
                f"need {size} bytes at offset {self._pos}, {self.remaining} remain",
                offset=self._pos,
                requested=size,
            )
        out = self._data[self._pos:end]
        self._pos = end
        return out

    def read_struct(self, fmt: struct.Struct) -> tuple:
        raw = self.read_bytes(fmt.size)
        try:
            return fmt.unpack(raw)
        except struct.error as e:
            raise InvalidDataError(str(e)) from e

    def read_array(self, read_item: Callable[[ByteReader], T]) -> list[T]:
        """Read a u32 count, then that many items via ``read_item``."""
        (count,) = self.read_struct(_U32)
        if count == 0:
            return []
        return [read_item(self) for _ in range(count)]
