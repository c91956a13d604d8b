"""
Content Type Sniffer

Infers a MIME type from the leading bytes of a payload instead of
trusting the origin's Content-Type header.

The signature table follows the WHATWG MIME sniffing standard. SVG has no
binary signature: it sniffs as text/xml (with an XML declaration) or
text/plain, so it never passes the image check.
"""

from typing import List, Optional, Tuple

# Only this many leading bytes are ever inspected
SNIFF_LENGTH = 512

DEFAULT_CONTENT_TYPE = "application/octet-stream"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
HTML_CONTENT_TYPE = "text/html; charset=utf-8"

_WHITESPACE = b"\t\n\x0c\r "


# ============================================
# Signature table
# ============================================

# (pattern, mask, skip leading whitespace, content type)
# A mask byte of 0x00 means "any byte" at that position.
_Signature = Tuple[bytes, Optional[bytes], bool, str]

_HTML_TAGS: List[bytes] = [
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
]

_LEADING_SIGNATURES: List[_Signature] = [
    (b"<?xml", None, True, "text/xml; charset=utf-8"),
    (b"%PDF-", None, False, "application/pdf"),
    (b"%!PS-Adobe-", None, False, "application/postscript"),

    # Byte order marks
    (b"\xfe\xff\x00\x00", b"\xff\xff\x00\x00", False, "text/plain; charset=utf-16be"),
    (b"\xff\xfe\x00\x00", b"\xff\xff\x00\x00", False, "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf\x00", b"\xff\xff\xff\x00", False, "text/plain; charset=utf-8"),

    # Images
    (b"\x00\x00\x01\x00", None, False, "image/x-icon"),
    (b"\x00\x00\x02\x00", None, False, "image/x-icon"),
    (b"BM", None, False, "image/bmp"),
    (b"GIF87a", None, False, "image/gif"),
    (b"GIF89a", None, False, "image/gif"),
    (
        b"RIFF\x00\x00\x00\x00WEBPVP",
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff\xff\xff",
        False,
        "image/webp",
    ),
    (b"\x89PNG\r\n\x1a\n", None, False, "image/png"),
    (b"\xff\xd8\xff", None, False, "image/jpeg"),

    # Audio / video
    (
        b"FORM\x00\x00\x00\x00AIFF",
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff",
        False,
        "audio/aiff",
    ),
    (b"ID3", None, False, "audio/mpeg"),
    (b"OggS\x00", None, False, "application/ogg"),
    (b"MThd\x00\x00\x00\x06", None, False, "audio/midi"),
    (
        b"RIFF\x00\x00\x00\x00AVI ",
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff",
        False,
        "video/avi",
    ),
    (
        b"RIFF\x00\x00\x00\x00WAVE",
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff",
        False,
        "audio/wave",
    ),
]

_TRAILING_SIGNATURES: List[_Signature] = [
    (b"\x1a\x45\xdf\xa3", None, False, "video/webm"),

    # Fonts
    (b"\x00\x01\x00\x00", None, False, "font/ttf"),
    (b"OTTO", None, False, "font/otf"),
    (b"ttcf", None, False, "font/collection"),
    (b"wOFF", None, False, "font/woff"),
    (b"wOF2", None, False, "font/woff2"),

    # Archives
    (b"\x1f\x8b\x08", None, False, "application/x-gzip"),
    (b"PK\x03\x04", None, False, "application/zip"),
    (b"Rar!\x1a\x07\x00", None, False, "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", None, False, "application/x-rar-compressed"),
    (b"\x00asm", None, False, "application/wasm"),
]


# ============================================
# Matchers
# ============================================

def _skip_whitespace(data: bytes) -> bytes:
    return data.lstrip(_WHITESPACE)


def _matches(data: bytes, signature: _Signature) -> bool:
    pattern, mask, skip_ws, _ = signature
    if skip_ws:
        data = _skip_whitespace(data)
    if len(data) < len(pattern):
        return False
    if mask is None:
        return data.startswith(pattern)
    return all(
        data[i] & mask[i] == pattern[i]
        for i in range(len(pattern))
    )


def _matches_html(data: bytes) -> bool:
    """Case-insensitive tag match; the tag must end with a space or '>'."""
    data = _skip_whitespace(data)
    for tag in _HTML_TAGS:
        if len(data) < len(tag) + 1:
            continue
        head = data[:len(tag)]
        if head.upper() != tag:
            continue
        if data[len(tag)] in b" >":
            return True
    return False


def _matches_mp4(data: bytes) -> bool:
    """ISO base media file with an 'ftyp' box naming an mp4 brand."""
    if len(data) < 12:
        return False
    box_size = int.from_bytes(data[:4], "big")
    if len(data) < box_size or box_size % 4 != 0:
        return False
    if data[4:8] != b"ftyp":
        return False
    for start in range(8, box_size, 4):
        if start == 12:
            # minor version field
            continue
        if data[start:start + 3] == b"mp4":
            return True
    return False


def _is_binary_byte(b: int) -> bool:
    return (
        b <= 0x08
        or b == 0x0B
        or 0x0E <= b <= 0x1A
        or 0x1C <= b <= 0x1F
    )


# ============================================
# Public API
# ============================================

def sniff_content_type(data: bytes) -> str:
    """
    Detect the MIME type of a payload from its first 512 bytes.

    Always returns a valid MIME type; falls back to
    "application/octet-stream" when nothing matches.
    """
    data = data[:SNIFF_LENGTH]

    if _matches_html(data):
        return HTML_CONTENT_TYPE

    for signature in _LEADING_SIGNATURES:
        if _matches(data, signature):
            return signature[3]

    if _matches_mp4(data):
        return "video/mp4"

    for signature in _TRAILING_SIGNATURES:
        if _matches(data, signature):
            return signature[3]

    if not any(_is_binary_byte(b) for b in data):
        return TEXT_CONTENT_TYPE

    return DEFAULT_CONTENT_TYPE


def is_image_type(content_type: str) -> bool:
    """True when the primary type of a MIME string is 'image'."""
    primary, sep, _ = content_type.partition("/")
    return bool(sep) and primary.strip().lower() == "image"
