"""Pack PNG renditions of an image into an icns container.

Usage:
  python tools/make_icns.py SOURCE OUT.icns [--sizes 16,32,128]
"""
import io
import struct
import sys
from pathlib import Path

from PIL import Image

from iconwright_core.protocol import MAGIC_ICNS, CHUNK_HEADER_FMT, CHUNK_HEADER_LEN, CONTAINER_HEADER_FMT, CONTAINER_HEADER_LEN

# OSType per edge length for PNG-backed entries.
ICON_TYPES = {
    16: b"icp4",
    32: b"icp5",
    64: b"icp6",
    128: b"ic07",
    256: b"ic08",
    512: b"ic09",
    1024: b"ic10",
}


def encode_chunk(tag: bytes, payload: bytes) -> bytes:
    return struct.pack(CHUNK_HEADER_FMT, tag, len(payload) + CHUNK_HEADER_LEN) + payload


def build_container(chunks: list[bytes]) -> bytes:
    body = b"".join(chunks)
    return struct.pack(CONTAINER_HEADER_FMT, MAGIC_ICNS, len(body) + CONTAINER_HEADER_LEN) + body


def png_bytes(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def make_icns(source: Path, out: Path, sizes: list[int]) -> Path:
    base = Image.open(source).convert("RGBA")

    chunks = []
    for size in sizes:
        if size not in ICON_TYPES:
            raise SystemExit(f"Unsupported icon size {size} (expected one of {sorted(ICON_TYPES)})")
        resized = base.resize((size, size), Image.Resampling.LANCZOS)
        chunks.append(encode_chunk(ICON_TYPES[size], png_bytes(resized)))

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(build_container(chunks))
    print(f"GENERATED: {out} ({len(chunks)} chunks)")
    return out


if __name__ == "__main__":
    args = [a for a in sys.argv[1:] if a]

    sizes = [16, 32, 128]
    if "--sizes" in args:
        i = args.index("--sizes")
        if i + 1 >= len(args):
            raise SystemExit("--sizes requires a value")
        sizes = [int(s) for s in args[i + 1].split(",")]
        args = args[:i] + args[i + 2:]

    if len(args) != 2:
        print(__doc__.strip())
        raise SystemExit(2)

    make_icns(Path(args[0]), Path(args[1]), sizes)
