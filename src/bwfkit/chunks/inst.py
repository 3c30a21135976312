"""Instrument (inst) chunk codec."""

from collections.abc import Mapping

from bwfkit.riff import int_value
from bwfkit.types import InstrumentRecord, MetadataMap

MIDI_UNITY_NOTE = "MidiUnityNote"
DETUNE = "Detune"
GAIN = "Gain"
LOW_NOTE = "LowNote"
HIGH_NOTE = "HighNote"
LOW_VELOCITY = "LowVelocity"
HIGH_VELOCITY = "HighVelocity"

# Header length is the 7 meaningful bytes; the body carries one pad byte
DECLARED_LENGTH = InstrumentRecord.SIZE


def decode(body: bytes, values: MetadataMap, state: object = None) -> None:
    record = InstrumentRecord.from_bytes(body)
    values[MIDI_UNITY_NOTE] = str(record.base_note)
    values[DETUNE] = str(record.detune)
    values[GAIN] = str(record.gain)
    values[LOW_NOTE] = str(record.low_note)
    values[HIGH_NOTE] = str(record.high_note)
    values[LOW_VELOCITY] = str(record.low_velocity)
    values[HIGH_VELOCITY] = str(record.high_velocity)


def encode(values: Mapping[str, str]) -> bytes:
    if LOW_NOTE not in values or HIGH_NOTE not in values:
        return b""

    record = InstrumentRecord(
        base_note=int_value(values.get(MIDI_UNITY_NOTE), 60),
        detune=int_value(values.get(DETUNE)),
        gain=int_value(values.get(GAIN)),
        low_note=int_value(values.get(LOW_NOTE)),
        high_note=int_value(values.get(HIGH_NOTE), 127),
        low_velocity=int_value(values.get(LOW_VELOCITY), 1),
        high_velocity=int_value(values.get(HIGH_VELOCITY), 127),
    )
    return record.to_bytes() + b"\x00"
