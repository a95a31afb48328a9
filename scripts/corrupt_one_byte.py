import sys
from pathlib import Path

# Header layout: magic(4) header_size(4) uncompressed(4) compressed(4) sha1(20) ...
SHA1_OFFSET = 16


def main():
    if len(sys.argv) != 2:
        print("Usage: corrupt_one_byte.py <manifest>")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    b = bytearray(p.read_bytes())
    if len(b) < 64:
        print("File too small to corrupt safely.")
        raise SystemExit(2)

    # Flip a byte of the stored payload SHA-1. A compressed manifest then
    # inflates cleanly but fails the integrity check.
    idx = SHA1_OFFSET
    b[idx] ^= 0x01
    p.write_bytes(bytes(b))
    print(f"Corrupted 1 byte at offset {idx} in {p}")


if __name__ == "__main__":
    main()
