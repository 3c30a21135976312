"""Cue point (cue ) chunk codec."""

from collections.abc import Mapping

from bwfkit.riff import DATA_ID, int_value, pack_le, tag_to_int, to_uint32, unpack_le
from bwfkit.types import CueRecord, MetadataMap

NUM_CUE_POINTS = "NumCuePoints"

_CUE_FIELDS = (
    ("Identifier", "identifier"),
    ("Order", "order"),
    ("ChunkID", "chunk_id"),
    ("ChunkStart", "chunk_start"),
    ("BlockStart", "block_start"),
    ("Offset", "offset"),
)

# Cues point into the data chunk unless told otherwise
DEFAULT_CHUNK_ID = tag_to_int(DATA_ID)


def cue_key(index: int, field: str) -> str:
    return f"Cue{index}{field}"


def decode(body: bytes, values: MetadataMap, state: object = None) -> None:
    (num_cues,) = unpack_le("I", body)
    values[NUM_CUE_POINTS] = str(num_cues)

    for i in range(num_cues):
        offset = 4 + i * CueRecord.SIZE
        if offset + CueRecord.SIZE > len(body):
            break
        cue = CueRecord.from_bytes(body, offset)
        for key_field, attr in _CUE_FIELDS:
            values[cue_key(i, key_field)] = str(getattr(cue, attr))


def encode(values: Mapping[str, str]) -> bytes:
    """Build a cue body from ``NumCuePoints`` and the ``Cue{i}*`` keys.

    A missing ``Order`` is filled with one past the highest order seen so far.
    """
    num_cues = int_value(values.get(NUM_CUE_POINTS))
    if num_cues <= 0:
        return b""

    parts = [pack_le("I", num_cues)]
    next_order = 0
    for i in range(num_cues):
        order_text = values.get(cue_key(i, "Order"))
        order = int_value(order_text) if order_text is not None else next_order
        next_order = max(next_order, order) + 1

        cue = CueRecord(
            identifier=to_uint32(int_value(values.get(cue_key(i, "Identifier")))),
            order=to_uint32(order),
            chunk_id=to_uint32(int_value(values.get(cue_key(i, "ChunkID")), DEFAULT_CHUNK_ID)),
            chunk_start=to_uint32(int_value(values.get(cue_key(i, "ChunkStart")))),
            block_start=to_uint32(int_value(values.get(cue_key(i, "BlockStart")))),
            offset=to_uint32(int_value(values.get(cue_key(i, "Offset")))),
        )
        parts.append(cue.to_bytes())

    return b"".join(parts)
