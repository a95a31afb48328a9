"""Manifest assembler: header, then the four payload blocks in wire order."""
from __future__ import annotations

from dataclasses import dataclass, field

from egm_core.protocol import DEFAULT_MAX_PAYLOAD_SIZE
from egm_core.reader import ByteReader
from egm_core.values import Guid

from .chunks import ChunkDirectory, ChunkInfo, parse_chunk_directory
from .custom_fields import CustomFields, parse_custom_fields
from .files import ChunkPart, FileManifestTable, parse_file_manifest
from .header import ManifestHeader, parse_header
from .meta import ManifestMeta, parse_meta


@dataclass(frozen=True)
class Manifest:
    header: ManifestHeader
    meta: ManifestMeta
    chunks: ChunkDirectory
    files: FileManifestTable
    custom_fields: CustomFields
    raw: bytes = field(repr=False)

    @classmethod
    def from_bytes(cls, data: bytes, max_payload_size: int = DEFAULT_MAX_PAYLOAD_SIZE) -> Manifest:
        return decode_manifest(data, max_payload_size=max_payload_size)

    @property
    def build_size(self) -> int:
        return sum(e.file_size for e in self.files)

    @property
    def download_size(self) -> int:
        return sum(c.compressed_size for c in self.chunks)

    def chunk_for(self, part: ChunkPart) -> ChunkInfo | None:
        return self.chunks.find(part.guid)

    def missing_chunks(self) -> list[Guid]:
        """Guids referenced by chunk parts but absent from the chunk directory."""
        missing: dict[Guid, None] = {}
        for entry in self.files:
            for part in entry.chunk_parts:
                if part.guid not in self.chunks:
                    missing[part.guid] = None
        return list(missing)


def decode_manifest(data: bytes, *, max_payload_size: int = DEFAULT_MAX_PAYLOAD_SIZE) -> Manifest:
    """Decode a whole manifest or raise the first ManifestError met."""
    raw = bytes(data)
    header, payload = parse_header(ByteReader(raw), max_payload_size=max_payload_size)

    meta = parse_meta(payload)
    chunks = parse_chunk_directory(payload, header.feature_level)
    files = parse_file_manifest(payload, header.feature_level)
    custom_fields = parse_custom_fields(payload)

    return Manifest(
        header=header,
        meta=meta,
        chunks=chunks,
        files=files,
        custom_fields=custom_fields,
        raw=raw,
    )
