from __future__ import annotations

from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from egm_decode import Manifest

FILES_SCHEMA = pa.schema(
    [
        ("filename", pa.string()),
        ("symlink_target", pa.string()),
        ("hash", pa.string()),
        ("flags", pa.uint8()),
        ("install_tags", pa.list_(pa.string())),
        ("file_size", pa.int64()),
        ("part_count", pa.int32()),
        ("md5", pa.string()),
        ("mime_type", pa.string()),
        ("sha256", pa.string()),
    ]
)

CHUNK_PARTS_SCHEMA = pa.schema(
    [
        ("filename", pa.string()),
        ("part_index", pa.int32()),
        ("guid", pa.string()),
        ("chunk_offset", pa.int64()),
        ("file_offset", pa.int64()),
        ("size", pa.int64()),
    ]
)

CHUNKS_SCHEMA = pa.schema(
    [
        ("guid", pa.string()),
        ("hash", pa.uint64()),
        ("sha_hash", pa.string()),
        ("group_num", pa.uint8()),
        ("uncompressed_size", pa.int64()),
        ("compressed_size", pa.int64()),
        ("path", pa.string()),
    ]
)


def _write(rows: list[dict], schema: pa.Schema, path: Path) -> None:
    if rows:
        table = pa.Table.from_pandas(pd.DataFrame(rows), schema=schema, preserve_index=False)
    else:
        table = schema.empty_table()
    pq.write_table(table, path)


def export_tables(manifest: Manifest, out_path: Path) -> dict[str, Path]:
    """Write files, chunk_parts and chunks tables under out_path/tables."""
    tables_dir = Path(out_path) / "tables"
    tables_dir.mkdir(parents=True, exist_ok=True)
    level = manifest.header.feature_level

    files: list[dict] = []
    parts: list[dict] = []
    for e in manifest.files:
        files.append(
            {
                "filename": e.filename,
                "symlink_target": e.symlink_target,
                "hash": e.hash.hex(),
                "flags": e.flags,
                "install_tags": list(e.install_tags),
                "file_size": e.file_size,
                "part_count": len(e.chunk_parts),
                "md5": e.md5.hex() if e.md5 else None,
                "mime_type": e.mime_type,
                "sha256": e.sha256.hex() if e.sha256 else None,
            }
        )
        for i, p in enumerate(e.chunk_parts):
            parts.append(
                {
                    "filename": e.filename,
                    "part_index": i,
                    "guid": str(p.guid),
                    "chunk_offset": p.offset,
                    "file_offset": p.file_offset,
                    "size": p.size,
                }
            )

    chunks = [
        {
            "guid": str(c.guid),
            "hash": c.hash,
            "sha_hash": c.sha_hash.hex(),
            "group_num": c.group_num,
            "uncompressed_size": c.uncompressed_size,
            "compressed_size": c.compressed_size,
            "path": c.path(level),
        }
        for c in manifest.chunks
    ]

    written = {
        "files": tables_dir / "files.parquet",
        "chunk_parts": tables_dir / "chunk_parts.parquet",
        "chunks": tables_dir / "chunks.parquet",
    }
    _write(files, FILES_SCHEMA, written["files"])
    _write(parts, CHUNK_PARTS_SCHEMA, written["chunk_parts"])
    _write(chunks, CHUNKS_SCHEMA, written["chunks"])
    return written
