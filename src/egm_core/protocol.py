"""Manifest protocol constants.

Single source of truth for on-disk magic values and record layouts.
Keep this file stable. The header parser and every block parser read from it.
"""
import struct

# File magic
MANIFEST_MAGIC = 0x44BEC00C

# Header: [Magic(4) | HeaderSize(4) | DataSizeUncompressed(4) | DataSizeCompressed(4)
#          | SHA1(20) | StoredAs(1) | FeatureLevel(4)] = 41 bytes
MAGIC_FMT = struct.Struct("<I")
HEADER_BODY_FMT = struct.Struct("<III20sBi")

# Every payload block opens with [Size(4) | Version(1)]
BLOCK_PREFIX_FMT = struct.Struct("<IB")

GUID_FMT = struct.Struct("<4I")

# Digest sizes
SHA1_DIGEST_SIZE = 20
MD5_DIGEST_SIZE = 16
SHA256_DIGEST_SIZE = 32

# Default safety bounds
DEFAULT_MAX_PAYLOAD_SIZE = 512 * 1024 * 1024  # 512 MiB inflated payload
