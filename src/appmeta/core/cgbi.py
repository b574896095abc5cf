"""Reversal of Apple's CgBI PNG optimization.

Xcode's ``pngcrush -iphone`` rewrites PNGs so the GPU can upload them
directly: a private ``CgBI`` chunk is inserted before ``IHDR``, the IDAT
stream is raw deflate without the zlib wrapper, pixels are stored as BGRA and
color samples are premultiplied by alpha. Standard decoders reject such files
or render them with wrong colors, so they are rebuilt into plain PNGs first.
"""

import io
import logging
import struct
import zlib
from collections.abc import Iterator

from PIL import Image

from appmeta.exceptions import PngDecodeError

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# Chunks that only make sense for the original IDAT layout.
_DROPPED_CHUNKS = {b"CgBI", b"iDOT", b"IHDR", b"IDAT", b"IEND"}

_CHUNK_HEAD = struct.Struct(">I4s")
_IHDR = struct.Struct(">IIBBBBB")

COLOR_TYPE_RGB = 2
COLOR_TYPE_RGBA = 6

# color type -> (Pillow mode, raw mode of the stored samples)
_MODES = {
    COLOR_TYPE_RGB: ("RGB", "BGR"),
    COLOR_TYPE_RGBA: ("RGBA", "BGRa"),
}

# Pillow raises DecompressionBombError, which is not an OSError, for huge images.
IMAGE_ERRORS = (OSError, SyntaxError, ValueError, Image.DecompressionBombError)


def iter_png_chunks(data: bytes) -> Iterator[tuple[bytes, bytes]]:
    """Yield ``(type, payload)`` for every chunk up to and including IEND.

    Raises:
        PngDecodeError: If the signature is wrong or a chunk is truncated.
    """
    if not data.startswith(PNG_SIGNATURE):
        raise PngDecodeError("Not a PNG file (bad signature)")

    offset = len(PNG_SIGNATURE)
    while offset < len(data):
        if offset + _CHUNK_HEAD.size > len(data):
            raise PngDecodeError(f"Truncated PNG chunk header at offset {offset}")
        length, chunk_type = _CHUNK_HEAD.unpack_from(data, offset)
        start = offset + _CHUNK_HEAD.size
        end = start + length
        if end + 4 > len(data):
            raise PngDecodeError(
                f"Truncated PNG chunk {chunk_type!r} at offset {offset}"
            )
        yield chunk_type, data[start:end]
        offset = end + 4
        if chunk_type == b"IEND":
            break


def _chunk(chunk_type: bytes, payload: bytes) -> bytes:
    crc = zlib.crc32(chunk_type + payload) & 0xFFFFFFFF
    return (
        struct.pack(">I", len(payload))
        + chunk_type
        + payload
        + struct.pack(">I", crc)
    )


def _fix_pixels(header: bytes, raw: bytes) -> bytes:
    """Unfilter ``raw`` scanlines and return straight-alpha RGB(A) pixel bytes."""
    width, height, _, color_type, _, _, _ = _IHDR.unpack(header)
    mode, raw_mode = _MODES[color_type]
    # Rewrapped as a standard PNG, the filtered rows decode to BGR(a) samples.
    wrapped = (
        PNG_SIGNATURE
        + _chunk(b"IHDR", header)
        + _chunk(b"IDAT", zlib.compress(raw))
        + _chunk(b"IEND", b"")
    )
    try:
        with Image.open(io.BytesIO(wrapped)) as image:
            samples = image.tobytes()
        fixed = Image.frombytes(mode, (width, height), samples, "raw", raw_mode)
        return fixed.tobytes()
    except IMAGE_ERRORS as exc:
        raise PngDecodeError(f"Cannot decode CgBI image data: {exc}") from exc


def revert_cgbi(data: bytes) -> bytes:
    """Convert an Apple-optimized PNG into a standard PNG byte stream.

    Standard PNGs are returned unchanged.

    Raises:
        PngDecodeError: If the stream is corrupt or uses an unsupported variant
            (only non-interlaced 8-bit RGB/RGBA are handled).
    """
    chunks = list(iter_png_chunks(data))
    if not any(chunk_type == b"CgBI" for chunk_type, _ in chunks):
        return data

    header = next(
        (payload for chunk_type, payload in chunks if chunk_type == b"IHDR"), None
    )
    if header is None or len(header) != _IHDR.size:
        raise PngDecodeError("CgBI PNG has no valid IHDR chunk")
    width, height, bit_depth, color_type, _, _, interlace = _IHDR.unpack(header)
    if bit_depth != 8 or color_type not in _MODES:
        raise PngDecodeError(
            f"Unsupported CgBI PNG (bit depth {bit_depth}, color type {color_type})"
        )
    if interlace:
        raise PngDecodeError("Interlaced CgBI PNGs are not supported")

    compressed = b"".join(
        payload for chunk_type, payload in chunks if chunk_type == b"IDAT"
    )
    try:
        raw = zlib.decompress(compressed, -zlib.MAX_WBITS)
    except zlib.error as exc:
        raise PngDecodeError(f"Cannot inflate CgBI image data: {exc}") from exc

    pixels = _fix_pixels(header, raw)
    stride = width * len(_MODES[color_type][0])
    scanlines = b"".join(
        b"\0" + pixels[row * stride : (row + 1) * stride] for row in range(height)
    )

    first_idat = next(
        i for i, (chunk_type, _) in enumerate(chunks) if chunk_type == b"IDAT"
    )
    before = [c for c in chunks[:first_idat] if c[0] not in _DROPPED_CHUNKS]
    after = [c for c in chunks[first_idat:] if c[0] not in _DROPPED_CHUNKS]

    logger.debug("Reverted CgBI PNG (%dx%d, color type %d)", width, height, color_type)
    out = bytearray(PNG_SIGNATURE)
    out += _chunk(b"IHDR", header)
    for chunk_type, payload in before:
        out += _chunk(chunk_type, payload)
    out += _chunk(b"IDAT", zlib.compress(scanlines))
    for chunk_type, payload in after:
        out += _chunk(chunk_type, payload)
    out += _chunk(b"IEND", b"")
    return bytes(out)


def decode_png(data: bytes) -> Image.Image:
    """Decode a (possibly CgBI) PNG into a Pillow image.

    Raises:
        PngDecodeError: If the data cannot be reconstructed or decoded.
    """
    standard = revert_cgbi(data)
    try:
        image = Image.open(io.BytesIO(standard))
        image.load()
    except IMAGE_ERRORS as exc:
        raise PngDecodeError(f"Cannot decode PNG: {exc}") from exc
    return image
