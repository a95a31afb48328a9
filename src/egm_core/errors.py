"""Typed decode failures.

Every failure carries a stable ``code`` from :data:`egm_core.const.ERRORS`
plus free-form detail, so drivers can report it as a flat record.
"""
from __future__ import annotations

from .const import ERRORS


class ManifestError(Exception):
    code = "E_INVALID_DATA"

    def __init__(self, detail: str = "", **context):
        self.detail = detail
        self.context = context
        super().__init__(f"{self.message}: {detail}" if detail else self.message)

    @property
    def message(self) -> str:
        return ERRORS[self.code]

    def to_dict(self) -> dict:
        rec = {"code": self.code, "message": self.message}
        if self.detail:
            rec["detail"] = self.detail
        rec.update(self.context)
        return rec


class InvalidMagicError(ManifestError):
    code = "E_INVALID_MAGIC"


class OffsetMismatchError(ManifestError):
    code = "E_OFFSET_MISMATCH"


class InvalidStorageFlagError(ManifestError):
    code = "E_STORAGE_FLAG"


class EncryptedPayloadError(InvalidStorageFlagError):
    """Encrypted payloads are recognised but never decoded."""


class DecompressionError(ManifestError):
    code = "E_DECOMPRESSION"


class HashMismatchError(ManifestError):
    code = "E_HASH_MISMATCH"


class InvalidDataError(ManifestError):
    code = "E_INVALID_DATA"


class SizeMismatchError(InvalidDataError):
    """A block's declared size disagrees with the bytes its fields consumed."""

    code = "E_SIZE_MISMATCH"

    def __init__(self, block: str, expected: int, actual: int, version: int):
        self.block = block
        self.expected = expected
        self.actual = actual
        self.version = version
        super().__init__(
            f"{block} expected {expected} bytes but consumed {actual} (version {version})",
            block=block,
            expected=expected,
            actual=actual,
            version=version,
        )


class ReadOverflowError(ManifestError):
    code = "E_OVERFLOW"


class ManifestWarning(UserWarning):
    """Non-fatal anomaly found while decoding (e.g. an optional field dropped)."""
