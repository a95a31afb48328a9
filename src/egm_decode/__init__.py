"""EGM Decode - Binary build manifest decoder."""
from .chunks import ChunkDirectory, ChunkInfo
from .custom_fields import CustomFields
from .files import ChunkPart, FileEntry, FileManifestTable
from .header import ManifestHeader
from .manifest import Manifest, decode_manifest
from .meta import ManifestMeta

__all__ = [
    "decode_manifest",
    "Manifest",
    "ManifestHeader",
    "ManifestMeta",
    "ChunkDirectory",
    "ChunkInfo",
    "FileManifestTable",
    "FileEntry",
    "ChunkPart",
    "CustomFields",
]
