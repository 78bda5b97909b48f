from __future__ import annotations

from pathlib import PurePath

from PIL import Image

from iconwright_core.protocol import MAGIC_ICNS, EXPORT_SUFFIX, EXPORT_FORMAT, DEFAULT_EXPORT_STEM
from iconwright_decode.container import decode, open_bitmap


def is_container(data: bytes, name: str | None = None) -> bool:
    if data[:len(MAGIC_ICNS)] == MAGIC_ICNS:
        return True
    return name is not None and PurePath(name).suffix.lower() == ".icns"


def load_source(data: bytes, name: str | None = None) -> Image.Image:
    """Turn raw source bytes into a bitmap, routing containers through decode()."""
    if is_container(data, name):
        return decode(data)
    return open_bitmap(data)


def export_name(source_name: str | None) -> str:
    """Derive the output filename from the source's base name."""
    stem = PurePath(source_name).stem if source_name else ""
    # "archive.tar.png" -> "archive"
    stem = stem.split(".")[0] or DEFAULT_EXPORT_STEM
    return f"{stem}{EXPORT_SUFFIX}.{EXPORT_FORMAT.lower()}"
