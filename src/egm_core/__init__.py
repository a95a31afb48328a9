"""EGM Core - Byte cursor, primitive codecs and shared manifest value types."""
from .errors import (
    DecompressionError,
    EncryptedPayloadError,
    HashMismatchError,
    InvalidDataError,
    InvalidMagicError,
    InvalidStorageFlagError,
    ManifestError,
    ManifestWarning,
    OffsetMismatchError,
    ReadOverflowError,
    SizeMismatchError,
)
from .reader import ByteReader
from .values import Digest, FeatureLevel, Guid, RollingHash, ShaHash, StorageFlags

__all__ = [
    "ByteReader",
    "Digest",
    "FeatureLevel",
    "Guid",
    "RollingHash",
    "ShaHash",
    "StorageFlags",
    "ManifestError",
    "ManifestWarning",
    "InvalidMagicError",
    "OffsetMismatchError",
    "InvalidStorageFlagError",
    "EncryptedPayloadError",
    "DecompressionError",
    "HashMismatchError",
    "InvalidDataError",
    "SizeMismatchError",
    "ReadOverflowError",
]
