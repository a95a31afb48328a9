import json
from pathlib import Path

from egm_core.const import ERRORS
from egm_core.errors import ManifestError
from egm_core.protocol import DEFAULT_MAX_PAYLOAD_SIZE
from egm_decode import Manifest, decode_manifest

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}


def canonical_json(obj) -> str:
    return json.dumps(obj, **CANONICAL_JSON_KW)


def _fail(errors: list[dict]) -> dict:
    return {"status": "FAIL", "error_count": len(errors), "errors": errors}


def verify_manifest(path: Path, max_payload_size: int = DEFAULT_MAX_PAYLOAD_SIZE) -> dict:
    try:
        manifest = decode_manifest(path.read_bytes(), max_payload_size=max_payload_size)
    except ManifestError as e:
        return _fail([dict(e.to_dict(), path=str(path))])

    errors = []
    missing = manifest.missing_chunks()
    if missing:
        errors.append({
            "code": "E_CHUNK_MISSING",
            "message": ERRORS["E_CHUNK_MISSING"],
            "guids": [str(g) for g in missing],
        })
        return _fail(errors)

    return {"status": "PASS", "error_count": 0, "errors": []}


def summarize_manifest(manifest: Manifest, with_files: bool = False) -> dict:
    header, meta = manifest.header, manifest.meta
    out = {
        "app_id": meta.app_id,
        "app_name": meta.app_name,
        "build_version": meta.build_version,
        "build_id": meta.build_id,
        "launch_exe": meta.launch_exe,
        "launch_command": meta.launch_command,
        "prereq_ids": list(meta.prereq_ids),
        "is_file_data": meta.is_file_data,
        "feature_level": header.feature_level.name,
        "stored_as": header.stored_as.name,
        "sha_hash": header.sha_hash.hex(),
        "chunk_count": len(manifest.chunks),
        "file_count": len(manifest.files),
        "build_size": manifest.build_size,
        "download_size": manifest.download_size,
        "custom_fields": dict(manifest.custom_fields.fields),
    }
    if with_files:
        out["files"] = [
            {
                "filename": e.filename,
                "size": e.file_size,
                "hash": e.hash.hex(),
                "parts": len(e.chunk_parts),
                "install_tags": list(e.install_tags),
                "symlink_target": e.symlink_target or None,
                "mime_type": e.mime_type,
            }
            for e in manifest.files
        ]
    return out
