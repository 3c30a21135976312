"""LIST/adtl (associated data list) codec: cue labels, notes and text regions."""

from collections.abc import Mapping
from dataclasses import dataclass

from bwfkit.riff import (
    ADTL_ID,
    LABL_ID,
    LTXT_ID,
    NOTE_ID,
    fixed_string,
    int_value,
    pack_chunk_header,
    pack_le,
    pad_even,
    to_uint16,
    to_uint32,
    unpack_le,
)
from bwfkit.types import MetadataMap

NUM_CUE_LABELS = "NumCueLabels"
NUM_CUE_NOTES = "NumCueNotes"
NUM_CUE_REGIONS = "NumCueRegions"

_LTXT_STRUCT = "IIIHHHH"
_LTXT_FIXED_SIZE = 20

_REGION_FIELDS = (
    "Identifier",
    "SampleLength",
    "Purpose",
    "Country",
    "Language",
    "Dialect",
    "CodePage",
)


@dataclass
class AdtlCounters:
    """Running record counts; shared by every adtl list in one file."""

    labels: int = 0
    notes: int = 0
    regions: int = 0

    def publish(self, values: MetadataMap) -> None:
        """Store the non-zero counts as ``NumCue*`` keys."""
        if self.labels > 0:
            values[NUM_CUE_LABELS] = str(self.labels)
        if self.notes > 0:
            values[NUM_CUE_NOTES] = str(self.notes)
        if self.regions > 0:
            values[NUM_CUE_REGIONS] = str(self.regions)


def decode(body: bytes, values: MetadataMap, state: AdtlCounters) -> None:
    """Decode a LIST body whose first four bytes are the ``adtl`` list type."""
    pos = 4
    end = len(body)
    while pos + 8 <= end:
        tag = body[pos : pos + 4]
        (length,) = unpack_le("I", body, pos + 4)
        payload = body[pos + 8 : min(pos + 8 + length, end)]
        pos += 8 + length + (length & 1)

        if tag in (LABL_ID, NOTE_ID):
            if tag == LABL_ID:
                prefix = f"CueLabel{state.labels}"
                state.labels += 1
            else:
                prefix = f"CueNote{state.notes}"
                state.notes += 1
            (identifier,) = unpack_le("I", payload)
            values[prefix + "Identifier"] = str(identifier)
            values[prefix + "Text"] = fixed_string(payload[4:])
        elif tag == LTXT_ID:
            prefix = f"CueRegion{state.regions}"
            state.regions += 1
            fields = unpack_le(_LTXT_STRUCT, payload)
            for name, value in zip(_REGION_FIELDS, fields, strict=True):
                values[prefix + name] = str(value)
            values[prefix + "Text"] = fixed_string(payload[_LTXT_FIXED_SIZE:])


def _label_or_note(tag: bytes, prefix: str, values: Mapping[str, str]) -> bytes:
    text = values.get(prefix + "Text", prefix).encode("utf-8") + b"\x00"
    identifier = to_uint32(int_value(values.get(prefix + "Identifier")))
    body = pad_even(pack_le("I", identifier) + text)
    return pack_chunk_header(tag, len(body)) + body


def _text_region(prefix: str, values: Mapping[str, str]) -> bytes:
    text = values.get(prefix + "Text", prefix).encode("utf-8") + b"\x00"

    def field(name: str) -> int:
        return int_value(values.get(prefix + name))

    fixed = pack_le(
        _LTXT_STRUCT,
        to_uint32(field("Identifier")),
        to_uint32(field("SampleLength")),
        to_uint32(field("Purpose")),
        to_uint16(field("Country")),
        to_uint16(field("Language")),
        to_uint16(field("Dialect")),
        to_uint16(field("CodePage")),
    )
    body = pad_even(fixed + text)
    return pack_chunk_header(LTXT_ID, len(body)) + body


def encode(values: Mapping[str, str]) -> bytes:
    num_labels = int_value(values.get(NUM_CUE_LABELS))
    num_notes = int_value(values.get(NUM_CUE_NOTES))
    num_regions = int_value(values.get(NUM_CUE_REGIONS))
    if num_labels + num_notes + num_regions <= 0:
        return b""

    parts = [ADTL_ID]
    parts.extend(_label_or_note(LABL_ID, f"CueLabel{i}", values) for i in range(num_labels))
    parts.extend(_label_or_note(NOTE_ID, f"CueNote{i}", values) for i in range(num_notes))
    parts.extend(_text_region(f"CueRegion{i}", values) for i in range(num_regions))
    return b"".join(parts)
