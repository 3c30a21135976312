"""Sampler (smpl) chunk codec: MIDI/SMPTE header and loop table."""

from collections.abc import Mapping

from bwfkit.riff import int_value, to_uint32
from bwfkit.types import MetadataMap, SampleLoopRecord, SamplerRecord

MANUFACTURER = "Manufacturer"
PRODUCT = "Product"
SAMPLE_PERIOD = "SamplePeriod"
MIDI_UNITY_NOTE = "MidiUnityNote"
MIDI_PITCH_FRACTION = "MidiPitchFraction"
SMPTE_FORMAT = "SmpteFormat"
SMPTE_OFFSET = "SmpteOffset"
NUM_SAMPLE_LOOPS = "NumSampleLoops"
SAMPLER_DATA = "SamplerData"

# MidiUnityNote is shared with inst, so it alone does not request a smpl chunk
_PRESENCE_KEYS = (
    MANUFACTURER,
    PRODUCT,
    SAMPLE_PERIOD,
    MIDI_PITCH_FRACTION,
    SMPTE_FORMAT,
    SMPTE_OFFSET,
    NUM_SAMPLE_LOOPS,
    SAMPLER_DATA,
)

_LOOP_FIELDS = (
    ("Identifier", "identifier"),
    ("Type", "type"),
    ("Start", "start"),
    ("End", "end"),
    ("Fraction", "fraction"),
    ("PlayCount", "play_count"),
)


def loop_key(index: int, field: str) -> str:
    return f"Loop{index}{field}"


def decode(body: bytes, values: MetadataMap, state: object = None) -> None:
    record = SamplerRecord.from_bytes(body)
    values[MANUFACTURER] = str(record.manufacturer)
    values[PRODUCT] = str(record.product)
    values[SAMPLE_PERIOD] = str(record.sample_period)
    values[MIDI_UNITY_NOTE] = str(record.midi_unity_note)
    values[MIDI_PITCH_FRACTION] = str(record.midi_pitch_fraction)
    values[SMPTE_FORMAT] = str(record.smpte_format)
    values[SMPTE_OFFSET] = str(record.smpte_offset)
    values[NUM_SAMPLE_LOOPS] = str(record.num_sample_loops)
    values[SAMPLER_DATA] = str(record.sampler_data)

    for i, loop in enumerate(record.loops):
        for key_field, attr in _LOOP_FIELDS:
            values[loop_key(i, key_field)] = str(getattr(loop, attr))


def encode(values: Mapping[str, str]) -> bytes:
    if not any(key in values for key in _PRESENCE_KEYS):
        return b""

    num_loops = min(SamplerRecord.MAX_LOOPS, max(0, int_value(values.get(NUM_SAMPLE_LOOPS))))

    def u32(key: str, default: int = 0) -> int:
        return to_uint32(int_value(values.get(key), default))

    record = SamplerRecord(
        manufacturer=u32(MANUFACTURER),
        product=u32(PRODUCT),
        sample_period=u32(SAMPLE_PERIOD),
        midi_unity_note=u32(MIDI_UNITY_NOTE, 60),
        midi_pitch_fraction=u32(MIDI_PITCH_FRACTION),
        smpte_format=u32(SMPTE_FORMAT),
        smpte_offset=u32(SMPTE_OFFSET),
        num_sample_loops=num_loops,
        sampler_data=u32(SAMPLER_DATA),
    )
    for i in range(num_loops):
        loop = SampleLoopRecord(
            **{attr: u32(loop_key(i, key_field)) for key_field, attr in _LOOP_FIELDS}
        )
        record.loops.append(loop)

    return record.to_bytes()
