"""RIFF/RF64 chunk primitives for WAV files.

This module holds the FourCC identifiers, the exception hierarchy, and the
little-endian packing helpers used by every chunk codec, the stream reader and
the writer.
"""

import re
import struct
from dataclasses import dataclass
from typing import BinaryIO

# Container FourCC identifiers
RIFF_ID = b"RIFF"
RF64_ID = b"RF64"
WAVE_ID = b"WAVE"
DS64_ID = b"ds64"
JUNK_ID = b"JUNK"
FMT_ID = b"fmt "
DATA_ID = b"data"
LIST_ID = b"LIST"

# Metadata chunk identifiers
BEXT_ID = b"bext"
SMPL_ID = b"smpl"
INST_ID = b"inst"
INST_UPPER_ID = b"INST"
CUE_ID = b"cue "
ACID_ID = b"acid"
AXML_ID = b"axml"
IXML_ID = b"iXML"
TRKN_ID = b"Trkn"
ID3_ID = b"ID3 "
ID3_LOWER_ID = b"id3 "

# LIST sub-types and their entries
INFO_ID = b"INFO"
INFO_LOWER_ID = b"info"
ADTL_ID = b"adtl"
LABL_ID = b"labl"
NOTE_ID = b"note"
LTXT_ID = b"ltxt"

CHUNK_HEADER_SIZE = 8
UINT32_MAX = 0xFFFFFFFF

# Audio payloads of this many bytes or more no longer fit a 32-bit RIFF size
RF64_THRESHOLD = 1 << 32

_INT_PATTERN = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PATTERN = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class RiffError(Exception):
    """Error reading or writing RIFF/RF64 files."""


class NotThisFormatError(RiffError):
    """The stream does not start with a RIFF or RF64 WAVE header."""


class UnsupportedSubformatError(RiffError):
    """The fmt chunk names an encoding this codec does not decode."""

    def __init__(self, message: str, format_tag: int) -> None:
        self.format_tag = format_tag
        super().__init__(message)


class MalformedChunkError(RiffError):
    """A chunk header or body is truncated or inconsistent."""


class WavWriteError(RiffError):
    """Error while writing audio or header bytes."""


class SinkUnseekableError(WavWriteError):
    """The output stream cannot seek back to rewrite the header."""


class WindowError(RiffError, ValueError):
    """A mapped read falls outside the currently mapped window."""


@dataclass
class RawChunk:
    """A chunk carried as opaque bytes.

    Used for unknown chunks preserved across a metadata rewrite, and for
    encoded metadata chunks waiting to be written into a header.
    """

    tag: bytes
    data: bytes
    declared_length: int | None = None
    """Length written into the chunk header, when it differs from ``len(data)``."""

    @property
    def header_length(self) -> int:
        if self.declared_length is None:
            return len(self.data)
        return self.declared_length

    def to_bytes(self) -> bytes:
        return pack_chunk_header(self.tag, self.header_length) + pad_even(self.data)


def round_up_even(size: int) -> int:
    """Round a byte count up to the next even number."""
    return size + (size & 1)


def pad_even(data: bytes) -> bytes:
    """Append a single zero byte when ``data`` has odd length."""
    if len(data) & 1:
        return data + b"\x00"
    return data


def pack_le(fmt: str, *values: int | float | bytes) -> bytes:
    return struct.pack("<" + fmt, *values)


def unpack_le(fmt: str, buffer: bytes, offset: int = 0) -> tuple:
    """Unpack little-endian fields, treating bytes past the buffer end as zero."""
    size = struct.calcsize("<" + fmt)
    window = bytes(buffer[offset : offset + size])
    if len(window) < size:
        window = window.ljust(size, b"\x00")
    return struct.unpack("<" + fmt, window)


def tag_to_int(tag: bytes) -> int:
    """Interpret a FourCC as the little-endian integer stored on disk."""
    if len(tag) != 4:
        raise ValueError(f"FourCC must be 4 bytes, got {tag!r}")
    return struct.unpack("<I", tag)[0]


def pack_chunk_header(tag: bytes, size: int) -> bytes:
    if len(tag) != 4:
        raise ValueError(f"FourCC must be 4 bytes, got {tag!r}")
    return tag + struct.pack("<I", size & UINT32_MAX)


def read_chunk_header(stream: BinaryIO) -> tuple[bytes, int]:
    """Read a FourCC and its declared body length, leaving the stream at the body.

    Raises:
        MalformedChunkError: If fewer than eight bytes remain.
    """
    offset = stream.tell()
    header = stream.read(CHUNK_HEADER_SIZE)
    if len(header) < CHUNK_HEADER_SIZE:
        raise MalformedChunkError(
            f"Truncated chunk header at offset {offset} ({len(header)} bytes)"
        )
    (length,) = unpack_le("I", header, 4)
    return header[:4], length


def stream_length(f: BinaryIO) -> int:
    """Return the total length of a seekable stream without moving it."""
    position = f.tell()
    f.seek(0, 2)
    end = f.tell()
    f.seek(position)
    return end


def fixed_string(data: bytes) -> str:
    """Decode a NUL-terminated (or NUL-padded) UTF-8 field."""
    end = data.find(b"\x00")
    if end >= 0:
        data = data[:end]
    return data.decode("utf-8", errors="replace")


def utf8_truncate(text: str, limit: int) -> bytes:
    """Encode ``text`` as UTF-8, cut to at most ``limit`` bytes on a character boundary."""
    encoded = text.encode("utf-8")
    if len(encoded) <= limit:
        return encoded
    return encoded[:limit].decode("utf-8", errors="ignore").encode("utf-8")


def int_value(text: str | None, default: int = 0) -> int:
    """Parse the leading integer of a metadata value.

    Metadata values are free text; anything without a leading integer
    (after optional whitespace and sign) yields ``default``.
    """
    if text is None:
        return default
    match = _INT_PATTERN.match(text)
    if match is None:
        return default
    return int(match.group(1))


def float_value(text: str | None, default: float = 0.0) -> float:
    """Parse the leading decimal number of a metadata value."""
    if text is None:
        return default
    match = _FLOAT_PATTERN.match(text)
    if match is None:
        return default
    return float(match.group(1))


def to_uint32(value: int) -> int:
    return value & UINT32_MAX


def to_uint16(value: int) -> int:
    return value & 0xFFFF


def to_int8(value: int) -> int:
    """Wrap an integer into the signed 8-bit range the way a C cast does."""
    return ((value + 128) & 0xFF) - 128
