import sys
from pathlib import Path

def main():
    if len(sys.argv) != 2:
        print("Usage: corrupt_chunk_length.py <file.icns>")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    b = bytearray(p.read_bytes())
    if len(b) < 16:
        print("File too small to hold a chunk header.")
        raise SystemExit(2)

    # Container header is 8 bytes; the first chunk's length field follows its
    # 4-byte type tag. A zero length must abort the scan, not spin on it.
    idx = 8 + 4
    b[idx:idx + 4] = b"\x00\x00\x00\x00"
    p.write_bytes(bytes(b))
    print(f"Zeroed chunk length at offset {idx} in {p}")

if __name__ == "__main__":
    main()
