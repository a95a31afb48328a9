"""Shared value types: identifiers, digests and the version/storage enums."""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import IntEnum

from .errors import InvalidDataError, InvalidStorageFlagError
from .protocol import GUID_FMT, SHA1_DIGEST_SIZE
from .reader import ByteReader


@dataclass(frozen=True)
class Guid:
    a: int = 0
    b: int = 0
    c: int = 0
    d: int = 0

    def __str__(self) -> str:
        return f"{self.a:08X}{self.b:08X}{self.c:08X}{self.d:08X}"


@dataclass(frozen=True)
class Digest:
    """Digest bytes of any length (MD5 and SHA-256 columns)."""

    data: bytes

    def hex(self) -> str:
        return self.data.hex()

    def to_hash(self) -> int:
        """64-bit summary of the digest, usable as a lookup key."""
        return int.from_bytes(self.data[:8], "little")

    def __str__(self) -> str:
        return self.hex()


@dataclass(frozen=True)
class ShaHash(Digest):
    data: bytes = bytes(SHA1_DIGEST_SIZE)

    def __post_init__(self):
        if len(self.data) != SHA1_DIGEST_SIZE:
            raise InvalidDataError(f"SHA-1 digest must be {SHA1_DIGEST_SIZE} bytes, got {len(self.data)}")

    @classmethod
    def of(cls, data: bytes) -> ShaHash:
        return cls(hashlib.sha1(data).digest())

    @classmethod
    def zero(cls) -> ShaHash:
        return cls()


@dataclass(frozen=True)
class RollingHash:
    """64-bit rolling hash used as a file's primary hash by older schemas."""

    value: int

    def hex(self) -> str:
        return f"{self.value:016X}"

    def __str__(self) -> str:
        return self.hex()


class FeatureLevel(IntEnum):
    ORIGINAL = 0
    CUSTOM_FIELDS = 1
    START_STORING_VERSION = 2
    DATA_FILE_RENAMES = 3
    STORES_IF_CHUNK_OR_FILE_DATA = 4
    STORES_DATA_GROUP_NUMBERS = 5
    CHUNK_COMPRESSION_SUPPORT = 6
    STORES_PREREQUISITES_INFO = 7
    STORES_CHUNK_FILE_SIZES = 8
    STORED_AS_COMPRESSED_UCLASS = 9
    UNUSED_0 = 10
    UNUSED_1 = 11
    STORES_CHUNK_DATA_SHA_HASHES = 12
    STORES_PREREQUISITE_IDS = 13
    STORED_AS_BINARY_DATA = 14
    VARIABLE_SIZE_CHUNKS_WITHOUT_WINDOW_SIZE_CHUNK_INFO = 15
    VARIABLE_SIZE_CHUNKS = 16
    USES_RUNTIME_GENERATED_BUILD_ID = 17
    USES_BUILD_TIME_GENERATED_BUILD_ID = 18

    # Aliases
    LATEST = USES_BUILD_TIME_GENERATED_BUILD_ID
    LATEST_NO_CHUNKS = STORES_CHUNK_FILE_SIZES
    LATEST_JSON = STORES_PREREQUISITE_IDS
    FIRST_OPTIMISED_DELTA = USES_RUNTIME_GENERATED_BUILD_ID
    STORES_UNIQUE_BUILD_ID = USES_RUNTIME_GENERATED_BUILD_ID

    # Written by a broken JSON serializer; read as STORES_CHUNK_FILE_SIZES.
    BROKEN_JSON_VERSION = 255
    INVALID = -1

    @classmethod
    def decode(cls, value: int) -> FeatureLevel:
        try:
            return cls(value)
        except ValueError:
            raise InvalidDataError(f"unknown feature level {value}") from None

    def canonical(self) -> FeatureLevel:
        if self is FeatureLevel.BROKEN_JSON_VERSION:
            return FeatureLevel.STORES_CHUNK_FILE_SIZES
        return self


class StorageFlags(IntEnum):
    NONE = 0
    COMPRESSED = 1
    # Decrypt before decompressing; never supported by this decoder.
    ENCRYPTED = 2

    @classmethod
    def decode(cls, value: int) -> StorageFlags:
        try:
            return cls(value)
        except ValueError:
            raise InvalidStorageFlagError(f"unknown storage flag {value:#04x}", flag=value) from None


def read_guid(reader: ByteReader) -> Guid:
    return Guid(*reader.read_struct(GUID_FMT))


def read_sha_hash(reader: ByteReader) -> ShaHash:
    return ShaHash(reader.read_bytes(SHA1_DIGEST_SIZE))


def read_digest(reader: ByteReader, size: int) -> Digest:
    return Digest(reader.read_bytes(size))
