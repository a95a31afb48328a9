"""File manifest block: per-file records and their chunk part lists."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from egm_core.errors import SizeMismatchError
from egm_core.primitives import read_string, read_string_array, read_u8, read_u32, read_u64
from egm_core.protocol import MD5_DIGEST_SIZE, SHA256_DIGEST_SIZE
from egm_core.reader import ByteReader
from egm_core.values import (
    Digest,
    FeatureLevel,
    Guid,
    RollingHash,
    ShaHash,
    read_digest,
    read_guid,
    read_sha_hash,
)

from .blocks import check_block_size, read_block_prefix, read_optional

FileHash = Union[ShaHash, RollingHash]


@dataclass(frozen=True)
class ChunkPart:
    size: int
    guid: Guid
    # Offset inside the chunk's uncompressed data.
    offset: int
    # Offset inside the owning file; derived, not stored on disk.
    file_offset: int


def parse_chunk_part(reader: ByteReader, file_offset: int) -> ChunkPart:
    start = reader.position
    struct_size = read_u32(reader)
    guid = read_guid(reader)
    offset = read_u32(reader)
    size = read_u32(reader)

    consumed = reader.position - start
    if consumed != struct_size:
        raise SizeMismatchError("chunk part", expected=struct_size, actual=consumed, version=0)

    return ChunkPart(size=size, guid=guid, offset=offset, file_offset=file_offset)


def read_chunk_parts(reader: ByteReader) -> tuple[ChunkPart, ...]:
    count = read_u32(reader)
    parts = []
    file_offset = 0
    for _ in range(count):
        part = parse_chunk_part(reader, file_offset)
        file_offset += part.size
        parts.append(part)
    return tuple(parts)


@dataclass(frozen=True)
class FileEntry:
    filename: str
    symlink_target: str
    hash: FileHash
    flags: int
    install_tags: tuple[str, ...]
    chunk_parts: tuple[ChunkPart, ...]
    md5: Digest | None = None
    mime_type: str | None = None
    sha256: Digest | None = None
    file_size: int = 0

    @property
    def is_symlink(self) -> bool:
        return bool(self.symlink_target)


@dataclass(frozen=True)
class FileManifestTable:
    entries: tuple[FileEntry, ...]
    version: int
    size: int
    _index: dict = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_index", {e.filename: e for e in self.entries})

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def find(self, filename: str) -> FileEntry | None:
        return self._index.get(filename)


def uses_sha_file_hash(feature_level: FeatureLevel) -> bool:
    return feature_level.canonical() >= FeatureLevel.STORES_CHUNK_DATA_SHA_HASHES


def _read_rolling_hash(reader: ByteReader) -> RollingHash:
    return RollingHash(read_u64(reader))


def _read_md5(reader: ByteReader) -> Digest | None:
    has_md5 = read_u32(reader)
    if not has_md5:
        return None
    return read_digest(reader, MD5_DIGEST_SIZE)


def _read_sha256(reader: ByteReader) -> Digest:
    return read_digest(reader, SHA256_DIGEST_SIZE)


def parse_file_manifest(reader: ByteReader, feature_level: FeatureLevel) -> FileManifestTable:
    """Decode the file table.

    Base columns come first for every record (name, symlink, hash, flags,
    install tags, chunk parts); version 1 adds MD5 and MIME columns and
    version 2 a SHA-256 column.
    """
    start, size, version = read_block_prefix(reader)
    count = read_u32(reader)

    read_hash = read_sha_hash if uses_sha_file_hash(feature_level) else _read_rolling_hash

    filenames = [read_string(reader) for _ in range(count)]
    symlinks = [read_string(reader) for _ in range(count)]
    hashes = [read_hash(reader) for _ in range(count)]
    flags = [read_u8(reader) for _ in range(count)]
    install_tags = [tuple(read_string_array(reader)) for _ in range(count)]
    chunk_parts = [read_chunk_parts(reader) for _ in range(count)]

    md5s = [None] * count
    mime_types = [None] * count
    sha256s = [None] * count

    if version >= 1:
        md5s = [read_optional(reader, _read_md5, "MD5 digest") for _ in range(count)]
        mime_types = [read_optional(reader, read_string, "MIME type") for _ in range(count)]

    if version >= 2:
        sha256s = [read_optional(reader, _read_sha256, "SHA-256 digest") for _ in range(count)]

    entries = tuple(
        FileEntry(
            filename=filenames[i],
            symlink_target=symlinks[i],
            hash=hashes[i],
            flags=flags[i],
            install_tags=install_tags[i],
            chunk_parts=chunk_parts[i],
            md5=md5s[i],
            mime_type=mime_types[i],
            sha256=sha256s[i],
            file_size=sum(p.size for p in chunk_parts[i]),
        )
        for i in range(count)
    )

    check_block_size(reader, "file manifest", start, size, version)

    return FileManifestTable(entries=entries, version=version, size=size)
