import warnings

import pytest

from egm_core.errors import InvalidDataError, ManifestWarning, ReadOverflowError, SizeMismatchError
from egm_core.reader import ByteReader
from egm_core.values import Digest, FeatureLevel, Guid, RollingHash, ShaHash
from egm_decode.chunks import chunk_subdir, parse_chunk_directory
from egm_decode.custom_fields import parse_custom_fields
from egm_decode.files import parse_chunk_part, parse_file_manifest
from egm_decode.meta import parse_meta

from manifest_builder import (
    CHUNK_A,
    CHUNK_B,
    block,
    chunk_block,
    chunk_part,
    custom_block,
    file_block,
    fstring,
    i32,
    meta_block,
    sample_chunks,
    sample_files,
    u32,
    u8,
)


# --- metadata ---------------------------------------------------------------

def test_meta_all_fields():
    r = ByteReader(meta_block(version=2))
    meta = parse_meta(r)

    assert meta.feature_level is FeatureLevel.LATEST
    assert meta.is_file_data is False
    assert meta.app_id == 7
    assert meta.app_name == "Sample"
    assert meta.build_version == "1.0.0-CL-42"
    assert meta.launch_exe == "Game/Binaries/Game.exe"
    assert meta.launch_command == "-fast"
    assert meta.prereq_ids == ("prereq-a",)
    assert meta.prereq_name == "Runtime"
    assert meta.prereq_path == "Prereqs/setup.exe"
    assert meta.prereq_args == "/quiet"
    assert meta.build_id == "build-xyz"
    assert meta.uninstall_action_path == "Uninstall.exe"
    assert meta.uninstall_action_args == "/s"
    assert meta.version == 2
    assert r.remaining == 0


@pytest.mark.parametrize("version", [0, 1])
def test_meta_older_versions_leave_optional_fields_absent(version):
    meta = parse_meta(ByteReader(meta_block(version=version, is_file_data=True)))
    assert meta.is_file_data is True
    assert meta.uninstall_action_path is None
    assert meta.uninstall_action_args is None
    assert (meta.build_id is None) == (version == 0)


def test_meta_bad_build_id_is_tolerated_then_size_checked():
    base = meta_block(version=0)
    body = base[5:] + i32(4) + b"abcd"  # build id without NUL terminator
    data = block(1, body)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        meta = parse_meta(ByteReader(data))
    assert meta.build_id is None
    assert any("build id" in str(w.message) for w in caught)

    # Same field, but the block claims one more byte than it holds.
    wrong = bytearray(data)
    wrong[0] += 1
    with pytest.warns(ManifestWarning, match="build id"):
        with pytest.raises(SizeMismatchError) as exc:
            parse_meta(ByteReader(bytes(wrong) + b"\x00"))
    assert exc.value.block == "metadata"


def test_meta_bad_uninstall_path_is_tolerated():
    base = meta_block(version=1)
    body = base[5:] + i32(4) + b"abcd" + fstring("/s")
    with pytest.warns(ManifestWarning, match="uninstall action path"):
        meta = parse_meta(ByteReader(block(2, body)))
    assert meta.build_id == "build-xyz"
    assert meta.uninstall_action_path is None
    assert meta.uninstall_action_args == "/s"

    wrong = bytearray(block(2, body))
    wrong[0] -= 1
    with pytest.warns(ManifestWarning):
        with pytest.raises(SizeMismatchError):
            parse_meta(ByteReader(bytes(wrong)))


def test_meta_size_mismatch():
    data = bytearray(meta_block(version=2))
    data[0] += 1
    with pytest.raises(SizeMismatchError) as exc:
        parse_meta(ByteReader(bytes(data) + b"\x00"))
    assert exc.value.block == "metadata"
    assert exc.value.expected == exc.value.actual + 1
    assert exc.value.version == 2


def test_meta_unknown_feature_level():
    with pytest.raises(InvalidDataError):
        parse_meta(ByteReader(meta_block(feature_level=42)))


# --- chunk directory --------------------------------------------------------

def test_chunk_directory_columns():
    r = ByteReader(chunk_block(sample_chunks()))
    chunks = parse_chunk_directory(r, FeatureLevel.LATEST)

    assert len(chunks) == 2
    assert chunks.version == 3
    assert chunks.feature_level is FeatureLevel.LATEST
    a, b = chunks.chunks
    assert a.guid == Guid(*CHUNK_A)
    assert a.hash == 0x1122334455667788
    assert a.sha_hash == ShaHash(b"\xaa" * 20)
    assert a.group_num == 12
    assert a.uncompressed_size == 1024 * 1024
    assert a.compressed_size == 4096
    assert b.guid == Guid(*CHUNK_B)
    assert b.hash == 0xFFFFFFFFFFFFFFFF
    assert b.group_num == 99
    # negative sentinel survives
    assert b.compressed_size == -1
    assert r.remaining == 0


def test_chunk_directory_lookup():
    chunks = parse_chunk_directory(ByteReader(chunk_block(sample_chunks())), FeatureLevel.LATEST)
    assert chunks.find(Guid(*CHUNK_B)).group_num == 99
    assert Guid(*CHUNK_A) in chunks
    assert chunks.find(Guid(9, 9, 9, 9)) is None


def test_chunk_directory_empty():
    chunks = parse_chunk_directory(ByteReader(chunk_block([])), FeatureLevel.LATEST)
    assert chunks.chunks == ()


def test_chunk_directory_declared_size_too_small():
    data = bytearray(chunk_block(sample_chunks()))
    data[0] -= 1
    with pytest.raises(SizeMismatchError) as exc:
        parse_chunk_directory(ByteReader(bytes(data)), FeatureLevel.LATEST)
    assert exc.value.code == "E_SIZE_MISMATCH"
    assert isinstance(exc.value, InvalidDataError)


def test_chunk_directory_truncated():
    data = chunk_block(sample_chunks())
    with pytest.raises(ReadOverflowError):
        parse_chunk_directory(ByteReader(data[:-1]), FeatureLevel.LATEST)


def test_chunk_paths_by_feature_level():
    chunks = parse_chunk_directory(ByteReader(chunk_block(sample_chunks())), FeatureLevel.LATEST)
    a = chunks.chunks[0]
    assert a.path(FeatureLevel.LATEST) == f"ChunksV4/12/1122334455667788_{a.guid}.chunk"
    assert a.path(FeatureLevel.STORES_DATA_GROUP_NUMBERS).startswith("ChunksV2/12/")
    assert a.path(FeatureLevel.CHUNK_COMPRESSION_SUPPORT).startswith("ChunksV3/")
    assert a.path(FeatureLevel.ORIGINAL) == "Chunks/00000001000000020000000300000004.chunk"
    assert chunk_subdir(FeatureLevel.BROKEN_JSON_VERSION) == "ChunksV3"


# --- chunk parts ------------------------------------------------------------

def test_chunk_part_struct_size_checked():
    with pytest.raises(SizeMismatchError) as exc:
        parse_chunk_part(ByteReader(chunk_part(CHUNK_A, 0, 10, struct_size=32)), 0)
    assert exc.value.block == "chunk part"
    assert exc.value.expected == 32
    assert exc.value.actual == 28


def test_chunk_part_offsets_derived_per_file():
    files = [{"name": "f", "parts": [(CHUNK_A, 0, 100), (CHUNK_B, 7, 250), (CHUNK_A, 100, 40)]}]
    table = parse_file_manifest(ByteReader(file_block(files, version=0)), FeatureLevel.LATEST)
    entry = table.entries[0]
    assert [p.file_offset for p in entry.chunk_parts] == [0, 100, 350]
    assert [p.offset for p in entry.chunk_parts] == [0, 7, 100]
    assert entry.file_size == 390


# --- file manifest ----------------------------------------------------------

def test_file_manifest_version_2():
    r = ByteReader(file_block(sample_files(), version=2))
    table = parse_file_manifest(r, FeatureLevel.LATEST)

    assert table.version == 2
    assert len(table) == 2
    pak, exe = table.entries

    assert pak.filename == "Game/Content/Paks/data.pak"
    assert pak.symlink_target == ""
    assert not pak.is_symlink
    assert pak.hash == ShaHash(b"\x01" * 20)
    assert pak.install_tags == ("", "speech")
    assert [p.guid for p in pak.chunk_parts] == [Guid(*CHUNK_A), Guid(*CHUNK_B)]
    assert pak.file_size == 350
    assert pak.md5 == Digest(b"\x0f" * 16)
    assert pak.mime_type == "application/octet-stream"
    assert pak.sha256 == Digest(b"\x22" * 32)

    assert exe.flags == 4
    assert exe.install_tags == ()
    assert exe.md5 is None
    assert exe.mime_type == ""
    assert exe.file_size == 40
    assert exe.chunk_parts[0].file_offset == 0

    assert table.find("Game/Binaries/Game.exe") is exe
    assert r.remaining == 0


def test_file_manifest_version_0_has_no_optional_columns():
    table = parse_file_manifest(ByteReader(file_block(sample_files(), version=0)), FeatureLevel.LATEST)
    for entry in table:
        assert entry.md5 is None
        assert entry.mime_type is None
        assert entry.sha256 is None


def test_file_manifest_version_1_has_no_sha256():
    table = parse_file_manifest(ByteReader(file_block(sample_files(), version=1)), FeatureLevel.LATEST)
    pak = table.entries[0]
    assert pak.md5 == Digest(b"\x0f" * 16)
    assert pak.sha256 is None


def test_file_manifest_rolling_hash_for_older_feature_levels():
    files = [{"name": "a.bin", "hash": 0xCAFEBABE, "parts": []}]
    data = file_block(files, version=0, rolling_hash=True)
    table = parse_file_manifest(ByteReader(data), FeatureLevel.STORES_CHUNK_FILE_SIZES)
    assert table.entries[0].hash == RollingHash(0xCAFEBABE)
    assert table.entries[0].file_size == 0


def test_file_manifest_symlink():
    files = [{"name": "link", "symlink": "target/real", "parts": []}]
    entry = parse_file_manifest(ByteReader(file_block(files, version=0)), FeatureLevel.LATEST).entries[0]
    assert entry.is_symlink
    assert entry.symlink_target == "target/real"


def one_file_columns(name="a"):
    # count, name, symlink, sha1, flags, no tags, no parts
    return u32(1) + fstring(name) + fstring("") + bytes(20) + u8(0) + u32(0) + u32(0)


def sized_block(version, body, consumed):
    # Declared size covers only the first `consumed` body bytes.
    return u32(4 + 1 + consumed) + u8(version) + body


def test_file_manifest_short_md5_is_dropped():
    columns = one_file_columns()
    # MD5 flag set, but only two bytes follow.
    body = columns + u32(1) + b"\x0f\x0f"

    with pytest.warns(ManifestWarning, match="MD5"):
        table = parse_file_manifest(
            ByteReader(sized_block(1, body, len(columns) + 4)), FeatureLevel.LATEST
        )
    entry = table.entries[0]
    assert entry.md5 is None
    assert entry.mime_type is None
    assert entry.filename == "a"

    with pytest.warns(ManifestWarning, match="MD5"):
        with pytest.raises(SizeMismatchError) as exc:
            parse_file_manifest(ByteReader(block(1, body)), FeatureLevel.LATEST)
    assert exc.value.block == "file manifest"


def test_file_manifest_short_sha256_is_dropped():
    columns = one_file_columns() + u32(0) + fstring("text/plain")
    body = columns + b"\x22" * 10

    with pytest.warns(ManifestWarning, match="SHA-256"):
        table = parse_file_manifest(
            ByteReader(sized_block(2, body, len(columns))), FeatureLevel.LATEST
        )
    entry = table.entries[0]
    assert entry.sha256 is None
    assert entry.md5 is None
    assert entry.mime_type == "text/plain"

    with pytest.warns(ManifestWarning, match="SHA-256"):
        with pytest.raises(SizeMismatchError) as exc:
            parse_file_manifest(ByteReader(block(2, body)), FeatureLevel.LATEST)
    assert exc.value.version == 2


def test_file_manifest_bad_mime_is_dropped_but_block_still_checked():
    files = [{"name": "a", "parts": []}]
    body = (
        one_file_columns()
        + u32(0)              # no md5
        + i32(3) + b"bad"     # MIME without terminator
    )
    data = block(1, body)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        table = parse_file_manifest(ByteReader(data), FeatureLevel.LATEST)
    assert table.entries[0].mime_type is None
    assert table.entries[0].filename == files[0]["name"]
    assert any("MIME" in str(w.message) for w in caught)


def test_file_manifest_truncated_block_is_size_mismatch():
    data = bytearray(file_block(sample_files(), version=2))
    data[0] -= 1
    with pytest.raises(SizeMismatchError) as exc:
        parse_file_manifest(ByteReader(bytes(data)), FeatureLevel.LATEST)
    assert exc.value.block == "file manifest"
    assert exc.value.version == 2


# --- custom fields ----------------------------------------------------------

def test_custom_fields_last_write_wins():
    r = ByteReader(custom_block([("a", "1"), ("b", "2"), ("a", "3")]))
    fields = parse_custom_fields(r)
    assert dict(fields.fields) == {"a": "3", "b": "2"}
    assert "b" in fields
    assert fields.get("missing") is None
    assert len(fields) == 2


def test_custom_fields_are_read_only():
    fields = parse_custom_fields(ByteReader(custom_block([("k", "v")])))
    with pytest.raises(TypeError):
        fields.fields["k"] = "other"


def test_custom_fields_size_mismatch():
    data = bytearray(custom_block([("k", "v")]))
    data[0] += 2
    with pytest.raises(SizeMismatchError):
        parse_custom_fields(ByteReader(bytes(data) + b"\x00\x00"))
