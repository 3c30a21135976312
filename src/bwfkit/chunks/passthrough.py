"""Codecs for chunks stored as a single text value: Trkn and iXML."""

from collections.abc import Mapping

from bwfkit.riff import fixed_string
from bwfkit.types import MetadataMap

TRACKTION_LOOP_INFO = "tracktion loop info"
IXML = "iXML"


def decode_trkn(body: bytes, values: MetadataMap, state: object = None) -> None:
    values[TRACKTION_LOOP_INFO] = fixed_string(body)


def encode_trkn(values: Mapping[str, str]) -> bytes:
    text = values.get(TRACKTION_LOOP_INFO, "")
    if not text:
        return b""
    return text.encode("utf-8") + b"\x00"


def decode_ixml(body: bytes, values: MetadataMap, state: object = None) -> None:
    values[IXML] = body.rstrip(b"\x00").decode("utf-8", errors="replace")


def encode_ixml(values: Mapping[str, str]) -> bytes:
    return values.get(IXML, "").encode("utf-8")
