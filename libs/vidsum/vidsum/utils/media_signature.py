"""Video container detection from leading file bytes (magic numbers)."""

from __future__ import annotations

from pathlib import Path

# Enough bytes to see the ISO-BMFF `ftyp` box and the EBML DocType element.
HEADER_BYTES = 4100

_QUICKTIME_BRANDS = {b"qt  "}
# MP4-family video major brands. Any other ftyp brand (HEIF/AVIF images, M4A audio, 3GPP) is rejected.
_MP4_VIDEO_BRANDS = {
    b"isom",
    b"iso2",
    b"iso3",
    b"iso4",
    b"iso5",
    b"iso6",
    b"mp41",
    b"mp42",
    b"avc1",
    b"dash",
    b"mmp4",
    b"M4V ",
    b"M4VH",
    b"M4VP",
    b"MSNV",
    b"F4V ",
}
_QUICKTIME_ATOMS = {b"moov", b"mdat", b"wide", b"free", b"skip", b"pnot"}

_EBML_MAGIC = b"\x1a\x45\xdf\xa3"
_EBML_DOCTYPE_ID = b"\x42\x82"


def _sniff_iso_bmff(header: bytes) -> str | None:
    if len(header) < 12:
        return None
    box_type = header[4:8]
    if box_type == b"ftyp":
        brand = header[8:12]
        if brand in _QUICKTIME_BRANDS:
            return "video/quicktime"
        if brand in _MP4_VIDEO_BRANDS:
            return "video/mp4"
        return None
    if box_type in _QUICKTIME_ATOMS:
        return "video/quicktime"
    return None


def _sniff_ebml(header: bytes) -> str | None:
    if not header.startswith(_EBML_MAGIC):
        return None
    idx = header.find(_EBML_DOCTYPE_ID)
    if idx < 0 or idx + 3 > len(header):
        return "video/x-matroska"
    size_byte = header[idx + 2]
    # DocType size is a 1-byte EBML vint in practice (0x80 | len).
    length = size_byte & 0x7F if size_byte & 0x80 else 0
    doctype = header[idx + 3 : idx + 3 + length]
    if doctype == b"webm":
        return "video/webm"
    return "video/x-matroska"


def sniff_video_type(header: bytes) -> str | None:
    """Return the video MIME type implied by the file signature, or None."""
    head = bytes(header[:HEADER_BYTES])
    if len(head) >= 12 and head[:4] == b"RIFF" and head[8:12] == b"AVI ":
        return "video/x-msvideo"
    if head[:3] == b"FLV":
        return "video/x-flv"
    ebml = _sniff_ebml(head)
    if ebml is not None:
        return ebml
    return _sniff_iso_bmff(head)


def sniff_video_file(path: str) -> str | None:
    with Path(path).open("rb") as f:
        return sniff_video_type(f.read(HEADER_BYTES))
