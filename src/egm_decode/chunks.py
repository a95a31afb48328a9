"""Chunk directory block: one record per distinct chunk in the build."""
from __future__ import annotations

from dataclasses import dataclass, field

from egm_core.primitives import read_i64, read_u8, read_u32, read_u64
from egm_core.reader import ByteReader
from egm_core.values import FeatureLevel, Guid, ShaHash, read_guid, read_sha_hash

from .blocks import check_block_size, read_block_prefix


def chunk_subdir(feature_level: FeatureLevel) -> str:
    """Cloud directory that chunks of this feature level are published under."""
    level = feature_level.canonical()
    if level < FeatureLevel.DATA_FILE_RENAMES:
        return "Chunks"
    if level < FeatureLevel.CHUNK_COMPRESSION_SUPPORT:
        return "ChunksV2"
    if level < FeatureLevel.VARIABLE_SIZE_CHUNKS_WITHOUT_WINDOW_SIZE_CHUNK_INFO:
        return "ChunksV3"
    return "ChunksV4"


@dataclass(frozen=True)
class ChunkInfo:
    guid: Guid
    hash: int
    sha_hash: ShaHash
    group_num: int
    uncompressed_size: int
    # Signed: some encoders wrote negative sentinels.
    compressed_size: int

    def path(self, feature_level: FeatureLevel) -> str:
        subdir = chunk_subdir(feature_level)
        if subdir == "Chunks":
            return f"{subdir}/{self.guid}.chunk"
        return f"{subdir}/{self.group_num:02d}/{self.hash:016X}_{self.guid}.chunk"


@dataclass(frozen=True)
class ChunkDirectory:
    chunks: tuple[ChunkInfo, ...]
    version: int
    size: int
    feature_level: FeatureLevel
    _index: dict = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_index", {c.guid: c for c in self.chunks})

    def __len__(self) -> int:
        return len(self.chunks)

    def __iter__(self):
        return iter(self.chunks)

    def __contains__(self, guid: Guid) -> bool:
        return guid in self._index

    def find(self, guid: Guid) -> ChunkInfo | None:
        return self._index.get(guid)


def parse_chunk_directory(reader: ByteReader, feature_level: FeatureLevel) -> ChunkDirectory:
    """Decode the chunk table.

    Fields are stored column-major: every guid, then every hash, and so on.
    """
    start, size, version = read_block_prefix(reader)
    count = read_u32(reader)

    guids = [read_guid(reader) for _ in range(count)]
    hashes = [read_u64(reader) for _ in range(count)]
    shas = [read_sha_hash(reader) for _ in range(count)]
    groups = [read_u8(reader) for _ in range(count)]
    uncompressed = [read_u32(reader) for _ in range(count)]
    compressed = [read_i64(reader) for _ in range(count)]

    check_block_size(reader, "chunk directory", start, size, version)

    chunks = tuple(
        ChunkInfo(
            guid=guids[i],
            hash=hashes[i],
            sha_hash=shas[i],
            group_num=groups[i],
            uncompressed_size=uncompressed[i],
            compressed_size=compressed[i],
        )
        for i in range(count)
    )
    return ChunkDirectory(chunks=chunks, version=version, size=size, feature_level=feature_level)
