"""ACID loop (acid) chunk codec."""

from collections.abc import Mapping

import numpy as np

from bwfkit.riff import float_value, int_value, to_uint16, to_uint32
from bwfkit.types import AcidFlag, AcidRecord, MetadataMap

ACID_ONE_SHOT = "acid one shot"
ACID_ROOT_SET = "acid root set"
ACID_STRETCH = "acid stretch"
ACID_DISK_BASED = "acid disk based"
ACIDIZER_FLAG = "acidizer flag"
ACID_ROOT_NOTE = "acid root note"
ACID_BEATS = "acid beats"
ACID_DENOMINATOR = "acid denominator"
ACID_NUMERATOR = "acid numerator"
ACID_TEMPO = "acid tempo"

_FLAG_KEYS = (
    (ACID_ONE_SHOT, AcidFlag.ONE_SHOT),
    (ACID_ROOT_SET, AcidFlag.ROOT_NOTE_SET),
    (ACID_STRETCH, AcidFlag.STRETCH),
    (ACID_DISK_BASED, AcidFlag.DISK_BASED),
    (ACIDIZER_FLAG, AcidFlag.ACIDIZER),
)


def format_tempo(tempo: float) -> str:
    """Shortest text that reads back as the same 32-bit float."""
    return str(np.float32(tempo))


def decode(body: bytes, values: MetadataMap, state: object = None) -> None:
    record = AcidRecord.from_bytes(body)
    for key, flag in _FLAG_KEYS:
        values[key] = "1" if record.flags & flag else "0"

    if record.flags & AcidFlag.ROOT_NOTE_SET:
        values[ACID_ROOT_NOTE] = str(record.root_note)

    values[ACID_BEATS] = str(record.num_beats)
    values[ACID_DENOMINATOR] = str(record.meter_denominator)
    values[ACID_NUMERATOR] = str(record.meter_numerator)
    values[ACID_TEMPO] = format_tempo(record.tempo)


def encode(values: Mapping[str, str]) -> bytes:
    flags = AcidFlag(0)
    for key, flag in _FLAG_KEYS:
        if int_value(values.get(key)) != 0:
            flags |= flag

    root_note = 0
    if flags & AcidFlag.ROOT_NOTE_SET:
        root_note = to_uint16(int_value(values.get(ACID_ROOT_NOTE)))

    record = AcidRecord(
        flags=flags,
        root_note=root_note,
        num_beats=to_uint32(int_value(values.get(ACID_BEATS))),
        meter_denominator=to_uint16(int_value(values.get(ACID_DENOMINATOR))),
        meter_numerator=to_uint16(int_value(values.get(ACID_NUMERATOR))),
        tempo=float(np.float32(float_value(values.get(ACID_TEMPO)))),
    )
    if record.is_empty:
        return b""
    return record.to_bytes()
