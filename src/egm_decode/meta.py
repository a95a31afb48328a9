"""Build metadata block."""
from __future__ import annotations

from dataclasses import dataclass

from egm_core.primitives import read_i32, read_string, read_string_array, read_u8, read_u32
from egm_core.reader import ByteReader
from egm_core.values import FeatureLevel

from .blocks import check_block_size, read_block_prefix, read_optional


@dataclass(frozen=True)
class ManifestMeta:
    feature_level: FeatureLevel
    is_file_data: bool
    app_id: int
    app_name: str
    build_version: str
    launch_exe: str
    launch_command: str
    prereq_ids: tuple[str, ...]
    prereq_name: str
    prereq_path: str
    prereq_args: str
    build_id: str | None = None
    uninstall_action_path: str | None = None
    uninstall_action_args: str | None = None
    version: int = 0
    size: int = 0


def parse_meta(reader: ByteReader) -> ManifestMeta:
    start, size, version = read_block_prefix(reader)

    feature_level = FeatureLevel.decode(read_i32(reader))
    is_file_data = read_u8(reader) == 1
    app_id = read_u32(reader)
    app_name = read_string(reader)
    build_version = read_string(reader)
    launch_exe = read_string(reader)
    launch_command = read_string(reader)
    prereq_ids = tuple(read_string_array(reader))
    prereq_name = read_string(reader)
    prereq_path = read_string(reader)
    prereq_args = read_string(reader)

    build_id = None
    if version >= 1:
        build_id = read_optional(reader, read_string, "build id")

    uninstall_action_path = uninstall_action_args = None
    if version >= 2:
        uninstall_action_path = read_optional(reader, read_string, "uninstall action path")
        uninstall_action_args = read_optional(reader, read_string, "uninstall action args")

    check_block_size(reader, "metadata", start, size, version)

    return ManifestMeta(
        feature_level=feature_level,
        is_file_data=is_file_data,
        app_id=app_id,
        app_name=app_name,
        build_version=build_version,
        launch_exe=launch_exe,
        launch_command=launch_command,
        prereq_ids=prereq_ids,
        prereq_name=prereq_name,
        prereq_path=prereq_path,
        prereq_args=prereq_args,
        build_id=build_id,
        uninstall_action_path=uninstall_action_path,
        uninstall_action_args=uninstall_action_args,
        version=version,
        size=size,
    )
