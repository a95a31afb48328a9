"""Query exported manifest tables - which files share the most chunks."""
from __future__ import annotations

import sys
from pathlib import Path

import duckdb


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python query.py <export_dir> [install_tag]")
        print("Example: python query.py out/ speech")
        sys.exit(1)

    out = Path(sys.argv[1])
    tag = sys.argv[2] if len(sys.argv) > 2 else None

    con = duckdb.connect(":memory:")

    # Load exported tables
    con.execute(f"CREATE VIEW files AS SELECT * FROM '{out}/tables/files.parquet'")
    con.execute(f"CREATE VIEW parts AS SELECT * FROM '{out}/tables/chunk_parts.parquet'")
    con.execute(f"CREATE VIEW chunks AS SELECT * FROM '{out}/tables/chunks.parquet'")

    # Chunk reuse: how many distinct files read from each chunk
    where = "WHERE list_contains(f.install_tags, ?)" if tag else ""
    sql = f"""
    SELECT
        c.path,
        c.compressed_size,
        COUNT(DISTINCT p.filename) AS file_count,
        SUM(p.size) AS bytes_referenced
    FROM parts p
    JOIN chunks c ON c.guid = p.guid
    JOIN files f ON f.filename = p.filename
    {where}
    GROUP BY c.path, c.compressed_size
    ORDER BY file_count DESC, bytes_referenced DESC
    LIMIT 20
    """

    print(f"--- Chunk reuse{' for tag ' + tag if tag else ''} ---\n")

    df = con.execute(sql, [tag] if tag else []).fetchdf()
    if df.empty:
        print("No chunk parts found.")
    else:
        for _, row in df.iterrows():
            print(f"CHUNK: {row['path']}")
            print(f"  Files: {row['file_count']}")
            print(f"  Bytes referenced: {row['bytes_referenced']} (download {row['compressed_size']})")
            print()


if __name__ == "__main__":
    main()
