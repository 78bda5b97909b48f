"""Iconwright container and canvas constants.

Single source of truth for on-disk magic values, header layouts and the
output canvas. Decoder, tools and tests must stay synchronized with it.
"""

# Container magic
MAGIC_ICNS = b"icns"

# Container header: [Magic(4) | TotalLength(4, big-endian)] = 8 bytes
CONTAINER_HEADER_FMT = ">4sI"
CONTAINER_HEADER_LEN = 8

# Chunk header: [Type(4) | Length incl. header(4, big-endian)] = 8 bytes
CHUNK_HEADER_FMT = ">4sI"
CHUNK_HEADER_LEN = 8

# Payload signatures (first two bytes)
SIG_PNG = b"\x89\x50"
SIG_JPEG = b"\xff\xd8"
SIGNATURE_LEN = 2

ENCODING_PNG = "png"
ENCODING_JPEG = "jpeg"

PAYLOAD_SIGNATURES = {
    SIG_PNG: ENCODING_PNG,
    SIG_JPEG: ENCODING_JPEG,
}

# Output canvas
CANVAS_SIZE = 1024
CANVAS_MODE = "RGBA"

# Rounded masks are drawn at this multiple and reduced for anti-aliasing
MASK_SUPERSAMPLE = 4

# Neutral fills
SHADOW_FILL_FALLBACK = "#ffffff"
PLACEHOLDER_COLOR = "#9ca3af"

# Export naming
EXPORT_SUFFIX = "_macos_icon"
EXPORT_FORMAT = "PNG"
DEFAULT_EXPORT_STEM = "icon"
