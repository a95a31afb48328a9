"""Custom fields block: free-form string key/value pairs."""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from egm_core.primitives import read_string, read_u32
from egm_core.reader import ByteReader

from .blocks import check_block_size, read_block_prefix


@dataclass(frozen=True)
class CustomFields:
    fields: Mapping[str, str]
    version: int = 0
    size: int = 0

    def __post_init__(self):
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def __contains__(self, key: str) -> bool:
        return key in self.fields

    def __len__(self) -> int:
        return len(self.fields)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.fields.get(key, default)


def parse_custom_fields(reader: ByteReader) -> CustomFields:
    start, size, version = read_block_prefix(reader)
    count = read_u32(reader)

    fields: dict[str, str] = {}
    for _ in range(count):
        key = read_string(reader)
        fields[key] = read_string(reader)

    check_block_size(reader, "custom fields", start, size, version)
    return CustomFields(fields=fields, version=version, size=size)
