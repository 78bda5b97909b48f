import hashlib
import io
import random
import struct

import pytest
from PIL import Image

from iconwright_decode.container import ContainerScan, decode, scan
from iconwright_decode.errors import (
    ContainerError,
    DecodeFailure,
    FormatError,
    NoRenderableImage,
    TruncatedChunk,
)


def png_bytes(size=(4, 4), color=(255, 0, 0, 255)):
    buf = io.BytesIO()
    Image.new("RGBA", size, color).save(buf, format="PNG")
    return buf.getvalue()


def noise_png(size):
    rng = random.Random(size)
    img = Image.frombytes("RGB", (size, size), rng.randbytes(size * size * 3))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def jpeg_bytes(size=(8, 8)):
    buf = io.BytesIO()
    Image.new("RGB", size, (0, 128, 255)).save(buf, format="JPEG")
    return buf.getvalue()


def chunk(payload, tag=b"ic07", length=None):
    if length is None:
        length = len(payload) + 8
    return struct.pack(">4sI", tag, length) + payload


def container(*chunks, total=None, magic=b"icns"):
    body = b"".join(chunks)
    if total is None:
        total = len(body) + 8
    return struct.pack(">4sI", magic, total) + body


LEGACY_RLE = b"\x00\x00\x00\x00" + bytes(range(64))


def test_single_png_chunk_decodes():
    payload = png_bytes((4, 4))
    assert payload[:4] == b"\x89PNG"

    img = decode(container(chunk(payload)))
    assert img.size == (4, 4)
    assert img.format == "PNG"
    assert img.getpixel((0, 0)) == (255, 0, 0, 255)


def test_jpeg_chunk_decodes():
    img = decode(container(chunk(jpeg_bytes((8, 8)), tag=b"ic08")))
    assert img.size == (8, 8)
    assert img.format == "JPEG"


def test_largest_candidate_wins():
    small, big, mid = noise_png(16), noise_png(64), noise_png(32)
    buf = container(chunk(small, b"icp4"), chunk(big, b"ic07"), chunk(mid, b"icp5"))

    assert decode(buf).size == (64, 64)
    assert scan(buf).select().tag == "ic07"


def test_equal_sizes_keep_first_encountered():
    red = png_bytes(color=(255, 0, 0, 255))
    blue = png_bytes(color=(0, 0, 255, 255))
    # Pad the shorter stream past IEND so both payloads have the same size.
    width = max(len(red), len(blue))
    red += b"\x00" * (width - len(red))
    blue += b"\x00" * (width - len(blue))

    img = decode(container(chunk(red), chunk(blue)))
    assert img.getpixel((0, 0)) == (255, 0, 0, 255)

    img = decode(container(chunk(blue), chunk(red)))
    assert img.getpixel((0, 0)) == (0, 0, 255, 255)


def test_legacy_chunks_are_skipped_not_errors():
    payload = png_bytes((4, 4))
    buf = container(chunk(LEGACY_RLE, b"is32"), chunk(payload), chunk(LEGACY_RLE, b"s8mk"))

    container_scan = scan(buf)
    assert container_scan.get_scan_stats() == {
        "chunks": 3,
        "candidates": 1,
        "corrupt_chunks": 0,
        "unsupported_chunks": 2,
    }
    assert decode(buf).size == (4, 4)


def test_only_unsupported_chunks_is_no_renderable_image():
    jpeg2000 = b"\x00\x00\x00\x0cjP  \r\n\x87\n"
    buf = container(chunk(LEGACY_RLE, b"il32"), chunk(jpeg2000, b"ic09"))
    with pytest.raises(NoRenderableImage):
        decode(buf)


def test_empty_container_is_no_renderable_image():
    with pytest.raises(NoRenderableImage):
        decode(container())


@pytest.mark.parametrize("buf", [b"", b"ic", b"ICNS\x00\x00\x00\x08", b"\x89PNG\r\n\x1a\n" + b"\x00" * 32])
def test_bad_magic_is_format_error(buf):
    with pytest.raises(FormatError):
        decode(buf)


def test_format_error_before_length_fields():
    # The declared length would also be invalid; magic must be reported first.
    buf = b"icnX" + struct.pack(">I", 0xFFFFFFFF)
    with pytest.raises(FormatError):
        decode(buf)


def test_short_header_is_truncated():
    with pytest.raises(TruncatedChunk):
        decode(b"icns\x00\x00")


def test_declared_total_beyond_buffer_is_truncated():
    buf = container(chunk(png_bytes()))
    buf = buf[:-10]
    with pytest.raises(TruncatedChunk):
        decode(buf)


def test_declared_total_below_header_is_truncated():
    with pytest.raises(TruncatedChunk):
        decode(container(total=4))


def test_zero_length_first_chunk_aborts():
    buf = container(chunk(png_bytes(), length=0))
    with pytest.raises(TruncatedChunk):
        decode(buf)


@pytest.mark.parametrize("length", [1, 4, 7])
def test_length_inside_own_header_aborts(length):
    buf = container(chunk(png_bytes(), length=length))
    with pytest.raises(TruncatedChunk):
        decode(buf)


def test_header_crossing_declared_end_is_truncated():
    buf = container(chunk(png_bytes()), b"ic0")
    with pytest.raises(TruncatedChunk):
        decode(buf)


def test_empty_payload_chunk_is_skipped_with_warning():
    buf = container(chunk(b"", b"TOC "), chunk(png_bytes((4, 4))))
    with pytest.warns(UserWarning, match="Corrupt chunk"):
        img = decode(buf)
    assert img.size == (4, 4)


def test_chunk_past_declared_end_is_skipped_with_warning():
    good = chunk(png_bytes((4, 4)))
    overrun = chunk(png_bytes((8, 8)), length=10_000)
    buf = container(good, overrun)

    with pytest.warns(UserWarning):
        container_scan = ContainerScan(buf)
    assert container_scan.get_scan_stats()["corrupt_chunks"] == 1
    assert [c.status for c in container_scan.chunks] == ["candidate", "corrupt"]
    with pytest.warns(UserWarning):
        assert decode(buf).size == (4, 4)


def test_one_byte_payload_is_unsupported():
    buf = container(chunk(b"\x89", b"ic07"))
    container_scan = scan(buf)
    assert container_scan.chunks[0].status == "unsupported"
    with pytest.raises(NoRenderableImage):
        container_scan.select()


def test_garbage_behind_signature_is_decode_failure():
    buf = container(chunk(b"\x89\x50" + b"\x00" * 30))
    with pytest.raises(DecodeFailure):
        decode(buf)


def test_jpeg_signature_with_png_body_is_decode_failure():
    # Payload is decoded only as the format its signature claims.
    buf = container(chunk(b"\xff\xd8" + png_bytes()[2:]))
    with pytest.raises(DecodeFailure):
        decode(buf)


def test_errors_share_base_and_codes():
    with pytest.raises(ContainerError) as excinfo:
        decode(b"nope")
    assert excinfo.value.code == "E_FORMAT"
    assert isinstance(excinfo.value, ValueError)


def test_scan_report():
    payload = png_bytes((4, 4))
    buf = container(chunk(LEGACY_RLE, b"is32"), chunk(payload, b"ic07"))

    report = scan(buf).report()
    assert report["total_length"] == len(buf)
    assert report["selected"] == 1
    assert report["chunks"][0] == {
        "index": 0,
        "tag": "is32",
        "offset": 8,
        "length": len(LEGACY_RLE) + 8,
        "status": "unsupported",
        "encoding": None,
        "content_hash": None,
    }
    assert report["chunks"][1]["encoding"] == "png"
    assert report["chunks"][1]["content_hash"] == hashlib.sha256(payload).hexdigest()


def test_report_without_candidates_has_no_selection():
    report = scan(container(chunk(LEGACY_RLE))).report()
    assert report["selected"] is None
    assert report["stats"]["candidates"] == 0
