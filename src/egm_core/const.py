ERRORS = {
  "E_INVALID_MAGIC": "Manifest magic does not match",
  "E_OFFSET_MISMATCH": "Header size does not match bytes consumed",
  "E_STORAGE_FLAG": "Storage flag invalid or unsupported",
  "E_DECOMPRESSION": "Payload failed to decompress to declared size",
  "E_HASH_MISMATCH": "Payload SHA-1 does not match header",
  "E_INVALID_DATA": "Malformed field value",
  "E_SIZE_MISMATCH": "Block size does not match bytes consumed",
  "E_OVERFLOW": "Read past end of buffer",
  "E_CHUNK_MISSING": "File references chunks absent from the chunk directory",
}
