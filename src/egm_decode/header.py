"""Manifest header: magic, declared sizes, payload integrity."""
from __future__ import annotations

import zlib
from dataclasses import dataclass
from warnings import warn

from egm_core.errors import (
    DecompressionError,
    EncryptedPayloadError,
    HashMismatchError,
    InvalidMagicError,
    ManifestWarning,
    OffsetMismatchError,
)
from egm_core.protocol import DEFAULT_MAX_PAYLOAD_SIZE, HEADER_BODY_FMT, MAGIC_FMT, MANIFEST_MAGIC
from egm_core.reader import ByteReader
from egm_core.values import FeatureLevel, ShaHash, StorageFlags


@dataclass(frozen=True)
class ManifestHeader:
    magic: int
    header_size: int
    data_size_uncompressed: int
    data_size_compressed: int
    sha_hash: ShaHash
    stored_as: StorageFlags
    feature_level: FeatureLevel

    @property
    def is_compressed(self) -> bool:
        return self.stored_as is StorageFlags.COMPRESSED


def _inflate(payload: bytes, declared: int, max_payload_size: int) -> bytes:
    # Zip bomb protection
    if declared > max_payload_size:
        raise DecompressionError(
            f"declared payload size {declared} exceeds limit {max_payload_size}",
            declared=declared,
            limit=max_payload_size,
        )

    d = zlib.decompressobj()
    try:
        # One byte of headroom so an oversized stream shows up as a length mismatch.
        out = d.decompress(payload, declared + 1)
    except zlib.error as e:
        raise DecompressionError(str(e)) from e

    if len(out) != declared:
        raise DecompressionError(
            f"inflated {len(out)} bytes, header declares {declared}",
            declared=declared,
            inflated=len(out),
        )
    if not d.eof:
        raise DecompressionError("compressed stream ends before its end marker")
    return out


def parse_header(
    reader: ByteReader,
    max_payload_size: int = DEFAULT_MAX_PAYLOAD_SIZE,
) -> tuple[ManifestHeader, ByteReader]:
    """Validate the header and return it with a cursor over the plain payload."""
    reader.seek(0)

    (magic,) = reader.read_struct(MAGIC_FMT)
    if magic != MANIFEST_MAGIC:
        raise InvalidMagicError(f"found {magic:#010x}, expected {MANIFEST_MAGIC:#010x}")

    header_size, size_uncompressed, size_compressed, sha, stored, level = reader.read_struct(HEADER_BODY_FMT)
    stored_as = StorageFlags.decode(stored)
    feature_level = FeatureLevel.decode(level)

    if reader.position != header_size:
        raise OffsetMismatchError(
            f"header declares {header_size} bytes, parsed {reader.position}",
            expected=header_size,
            actual=reader.position,
        )

    header = ManifestHeader(
        magic=magic,
        header_size=header_size,
        data_size_uncompressed=size_uncompressed,
        data_size_compressed=size_compressed,
        sha_hash=ShaHash(sha),
        stored_as=stored_as,
        feature_level=feature_level,
    )

    if feature_level is FeatureLevel.BROKEN_JSON_VERSION:
        warn("Header carries the broken JSON feature level; reading as StoresChunkFileSizes", ManifestWarning)

    payload = reader.read_bytes(reader.length - header_size)

    if stored_as is StorageFlags.ENCRYPTED:
        raise EncryptedPayloadError("encrypted manifests are not supported", flag=int(stored_as))

    if stored_as is StorageFlags.COMPRESSED:
        payload = _inflate(payload, size_uncompressed, max_payload_size)
        computed = ShaHash.of(payload)
        if computed != header.sha_hash:
            raise HashMismatchError(
                expected=header.sha_hash.hex(),
                computed=computed.hex(),
            )

    return header, ByteReader(payload)
