from __future__ import annotations

import hashlib
import io
import struct
from dataclasses import dataclass
from warnings import warn

from PIL import Image

from iconwright_core.protocol import (
    MAGIC_ICNS,
    CONTAINER_HEADER_FMT,
    CONTAINER_HEADER_LEN,
    CHUNK_HEADER_FMT,
    CHUNK_HEADER_LEN,
    PAYLOAD_SIGNATURES,
    SIGNATURE_LEN,
    ENCODING_PNG,
    ENCODING_JPEG,
)

from .errors import DecodeFailure, FormatError, NoRenderableImage, TruncatedChunk

STATUS_CANDIDATE = "candidate"
STATUS_UNSUPPORTED = "unsupported"
STATUS_CORRUPT = "corrupt"

# Pillow plugin names per sniffed encoding, so a payload is only ever decoded
# as the format its signature claims.
_PIL_FORMATS = {
    ENCODING_PNG: ["PNG"],
    ENCODING_JPEG: ["JPEG"],
}


@dataclass(frozen=True)
class ChunkRecord:
    index: int
    tag: str
    offset: int
    length: int
    status: str
    encoding: str | None = None
    content_hash: str | None = None

    @property
    def payload_start(self) -> int:
        return self.offset + CHUNK_HEADER_LEN

    @property
    def payload_size(self) -> int:
        return self.length - CHUNK_HEADER_LEN

    def as_dict(self) -> dict:
        return {
            "index": self.index,
            "tag": self.tag,
            "offset": self.offset,
            "length": self.length,
            "status": self.status,
            "encoding": self.encoding,
            "content_hash": self.content_hash,
        }


class ContainerScan:
    """One pass over an icns buffer: the declared length is truth.

    - The header is validated before any chunk is touched.
    - Corrupt chunks are skipped by their declared length (best effort).
    - A chunk length that cannot move the cursor past its own header aborts
      the scan instead of looping.
    """

    def __init__(self, buf: bytes):
        self.buf = bytes(buf)
        self.total_length = 0
        self.chunks: list[ChunkRecord] = []
        self.scan_stats = {
            "chunks": 0,
            "candidates": 0,
            "corrupt_chunks": 0,
            "unsupported_chunks": 0,
        }

        self._read_header()
        self._walk_chunks()

    def _read_header(self) -> None:
        # Magic first: nothing else is read from a buffer that is not a container.
        if self.buf[:len(MAGIC_ICNS)] != MAGIC_ICNS:
            raise FormatError(f"leading bytes {self.buf[:len(MAGIC_ICNS)]!r}")

        if len(self.buf) < CONTAINER_HEADER_LEN:
            raise TruncatedChunk(f"container header is {len(self.buf)} of {CONTAINER_HEADER_LEN} bytes")

        _, total = struct.unpack_from(CONTAINER_HEADER_FMT, self.buf, 0)

        if total > len(self.buf):
            raise TruncatedChunk(f"declared length {total} exceeds buffer length {len(self.buf)}")
        if total < CONTAINER_HEADER_LEN:
            raise TruncatedChunk(f"declared length {total} is smaller than the container header")

        self.total_length = int(total)

    def _walk_chunks(self) -> None:
        total = self.total_length
        cur = CONTAINER_HEADER_LEN

        while cur < total:
            if cur + CHUNK_HEADER_LEN > total:
                raise TruncatedChunk(f"chunk header at offset {cur} crosses declared end {total}")

            raw_tag, length = struct.unpack_from(CHUNK_HEADER_FMT, self.buf, cur)
            tag = raw_tag.decode("latin-1")

            # Non-termination guard: the cursor must always move past the header.
            if length < CHUNK_HEADER_LEN:
                raise TruncatedChunk(f"chunk {tag!r} at offset {cur} declares length {length}")

            index = len(self.chunks)
            end = cur + length
            self.scan_stats["chunks"] += 1

            # 1. Bounds check and skip
            if length - CHUNK_HEADER_LEN <= 0 or end > total:
                self.scan_stats["corrupt_chunks"] += 1
                warn(f"Corrupt chunk {tag!r} at offset {cur} (length {length}, declared end {total}). Skipping.")
                self.chunks.append(ChunkRecord(index, tag, cur, int(length), STATUS_CORRUPT))
                cur = end
                continue

            # 2. Sniff the payload
            payload_start = cur + CHUNK_HEADER_LEN
            head = self.buf[payload_start:payload_start + SIGNATURE_LEN]
            encoding = PAYLOAD_SIGNATURES.get(head)

            if encoding is None:
                self.scan_stats["unsupported_chunks"] += 1
                self.chunks.append(ChunkRecord(index, tag, cur, int(length), STATUS_UNSUPPORTED))
            else:
                digest = hashlib.sha256(self.buf[payload_start:end]).hexdigest()
                self.scan_stats["candidates"] += 1
                self.chunks.append(
                    ChunkRecord(index, tag, cur, int(length), STATUS_CANDIDATE, encoding, digest)
                )

            cur = end

    @property
    def candidates(self) -> list[ChunkRecord]:
        return [c for c in self.chunks if c.status == STATUS_CANDIDATE]

    def get_scan_stats(self) -> dict:
        return dict(self.scan_stats)

    def select(self) -> ChunkRecord:
        """Pick the candidate with the largest payload.

        Byte size stands in for resolution; this is a heuristic, not something
        the container format guarantees. max() keeps the first of equal sizes.
        """
        candidates = self.candidates
        if not candidates:
            raise NoRenderableImage(f"{self.scan_stats['chunks']} chunk(s) scanned")
        return max(candidates, key=lambda c: c.payload_size)

    def payload(self, chunk: ChunkRecord) -> bytes:
        return self.buf[chunk.payload_start:chunk.offset + chunk.length]

    def report(self) -> dict:
        try:
            selected = self.select().index
        except NoRenderableImage:
            selected = None
        return {
            "total_length": self.total_length,
            "chunks": [c.as_dict() for c in self.chunks],
            "stats": self.get_scan_stats(),
            "selected": selected,
        }


def open_bitmap(data: bytes, formats: list[str] | None = None) -> Image.Image:
    """Materialize encoded image bytes into a fully loaded Pillow image."""
    try:
        img = Image.open(io.BytesIO(data), formats=formats)
        img.load()
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise DecodeFailure(str(e)) from e
    return img


def scan(buf: bytes) -> ContainerScan:
    return ContainerScan(buf)


def decode(buf: bytes) -> Image.Image:
    """Extract the best embedded image from an icns buffer."""
    container = ContainerScan(buf)
    chunk = container.select()
    try:
        return open_bitmap(container.payload(chunk), _PIL_FORMATS[chunk.encoding])
    except DecodeFailure as e:
        raise DecodeFailure(f"chunk {chunk.tag!r} at offset {chunk.offset}: {e.detail}") from e
