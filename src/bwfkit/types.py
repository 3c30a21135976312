"""Python types for WAV geometry and the fixed-layout metadata records.

Each record mirrors one on-disk struct and converts to and from its
little-endian byte layout. Turning records into metadata map entries is the
job of the codecs in :mod:`bwfkit.chunks`.
"""

from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import ClassVar, TypeAlias

from bwfkit.riff import (
    fixed_string,
    pack_le,
    pad_even,
    to_int8,
    unpack_le,
    utf8_truncate,
)
from bwfkit.samples import SUPPORTED_BIT_DEPTHS

MetadataMap: TypeAlias = dict[str, str]
"""String-keyed, string-valued metadata. Numbers are stored as decimal text."""


class SampleLoopType(IntEnum):
    """Loop playback mode stored in each smpl loop record."""

    FORWARD = 0
    """Loop forward."""

    ALTERNATING = 1
    """Ping-pong between start and end."""

    BACKWARD = 2
    """Loop in reverse."""


class AcidFlag(IntFlag):
    """Bits of the acid chunk flag word."""

    ONE_SHOT = 0x01
    ROOT_NOTE_SET = 0x02
    STRETCH = 0x04
    DISK_BASED = 0x08
    ACIDIZER = 0x10


@dataclass
class AudioGeometry:
    """Sample layout resolved from the fmt chunk."""

    sample_rate: int = 0
    num_channels: int = 0
    bits_per_sample: int = 0
    is_floating_point: bool = False
    bytes_per_frame: int = 0
    """Zero marks a format the codec cannot decode."""

    channel_mask: int | None = None
    """Speaker mask from an extensible fmt chunk, if one was present."""

    @property
    def is_valid(self) -> bool:
        return (
            self.sample_rate > 0
            and self.num_channels > 0
            and self.bytes_per_frame > 0
            and self.bits_per_sample in SUPPORTED_BIT_DEPTHS
        )


@dataclass
class DataExtent:
    """Where the audio payload lives in the stream."""

    start_offset: int = 0
    byte_length: int = 0
    sample_count: int = 0


@dataclass
class BroadcastWaveRecord:
    """The EBU bext chunk: fixed 602-byte header plus coding history."""

    HEADER_SIZE: ClassVar[int] = 602
    STRUCT: ClassVar[str] = "256s32s32s10s8sIIH64s190s"

    description: str = ""
    originator: str = ""
    originator_ref: str = ""
    origination_date: str = ""
    origination_time: str = ""
    time_reference: int = 0
    """Sample count since midnight, split into low/high 32-bit words on disk."""

    version: int = 0
    umid: bytes = b""
    coding_history: str = ""

    @classmethod
    def from_bytes(cls, data: bytes) -> "BroadcastWaveRecord":
        (
            description,
            originator,
            originator_ref,
            date,
            time,
            time_low,
            time_high,
            version,
            umid,
            _reserved,
        ) = unpack_le(cls.STRUCT, data)
        return cls(
            description=fixed_string(description),
            originator=fixed_string(originator),
            originator_ref=fixed_string(originator_ref),
            origination_date=fixed_string(date),
            origination_time=fixed_string(time),
            time_reference=(time_high << 32) | time_low,
            version=version,
            umid=umid,
            coding_history=fixed_string(data[cls.HEADER_SIZE :]),
        )

    def to_bytes(self) -> bytes:
        header = pack_le(
            self.STRUCT,
            utf8_truncate(self.description, 256),
            utf8_truncate(self.originator, 32),
            utf8_truncate(self.originator_ref, 32),
            utf8_truncate(self.origination_date, 10),
            utf8_truncate(self.origination_time, 8),
            self.time_reference & 0xFFFFFFFF,
            (self.time_reference >> 32) & 0xFFFFFFFF,
            self.version,
            self.umid[:64],
            b"",
        )
        return pad_even(header + self.coding_history.encode("utf-8"))

    @property
    def is_empty(self) -> bool:
        return not (
            self.description
            or self.originator
            or self.originator_ref
            or self.origination_date
            or self.origination_time
            or self.coding_history
            or self.time_reference
        )


@dataclass
class SampleLoopRecord:
    """One 24-byte loop entry of the smpl chunk."""

    SIZE: ClassVar[int] = 24
    STRUCT: ClassVar[str] = "6I"

    identifier: int = 0
    type: int = SampleLoopType.FORWARD
    start: int = 0
    end: int = 0
    fraction: int = 0
    play_count: int = 0

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> "SampleLoopRecord":
        return cls(*unpack_le(cls.STRUCT, data, offset))

    def to_bytes(self) -> bytes:
        return pack_le(
            self.STRUCT,
            self.identifier,
            self.type,
            self.start,
            self.end,
            self.fraction,
            self.play_count,
        )


@dataclass
class SamplerRecord:
    """The smpl chunk: nine 32-bit header words and the loop table."""

    HEADER_SIZE: ClassVar[int] = 36
    HEADER_STRUCT: ClassVar[str] = "9I"
    MAX_LOOPS: ClassVar[int] = 64

    manufacturer: int = 0
    product: int = 0
    sample_period: int = 0
    midi_unity_note: int = 60
    midi_pitch_fraction: int = 0
    smpte_format: int = 0
    smpte_offset: int = 0
    num_sample_loops: int = 0
    """Loop count as declared in the header; may exceed ``len(loops)`` in damaged files."""

    sampler_data: int = 0
    loops: list[SampleLoopRecord] = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data: bytes) -> "SamplerRecord":
        header = unpack_le(cls.HEADER_STRUCT, data)
        record = cls(*header)
        for i in range(record.num_sample_loops):
            offset = cls.HEADER_SIZE + i * SampleLoopRecord.SIZE
            if offset + SampleLoopRecord.SIZE > len(data):
                break
            record.loops.append(SampleLoopRecord.from_bytes(data, offset))
        return record

    def to_bytes(self) -> bytes:
        header = pack_le(
            self.HEADER_STRUCT,
            self.manufacturer,
            self.product,
            self.sample_period,
            self.midi_unity_note,
            self.midi_pitch_fraction,
            self.smpte_format,
            self.smpte_offset,
            len(self.loops),
            self.sampler_data,
        )
        return header + b"".join(loop.to_bytes() for loop in self.loops)


@dataclass
class InstrumentRecord:
    """The 7-byte inst chunk. All fields are signed bytes."""

    SIZE: ClassVar[int] = 7
    STRUCT: ClassVar[str] = "7b"

    base_note: int = 60
    detune: int = 0
    gain: int = 0
    low_note: int = 0
    high_note: int = 127
    low_velocity: int = 1
    high_velocity: int = 127

    @classmethod
    def from_bytes(cls, data: bytes) -> "InstrumentRecord":
        return cls(*unpack_le(cls.STRUCT, data))

    def to_bytes(self) -> bytes:
        values = (
            self.base_note,
            self.detune,
            self.gain,
            self.low_note,
            self.high_note,
            self.low_velocity,
            self.high_velocity,
        )
        return pack_le(self.STRUCT, *(to_int8(v) for v in values))


@dataclass
class CueRecord:
    """One 24-byte cue point."""

    SIZE: ClassVar[int] = 24
    STRUCT: ClassVar[str] = "6I"

    identifier: int = 0
    order: int = 0
    chunk_id: int = 0
    chunk_start: int = 0
    block_start: int = 0
    offset: int = 0

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> "CueRecord":
        return cls(*unpack_le(cls.STRUCT, data, offset))

    def to_bytes(self) -> bytes:
        return pack_le(
            self.STRUCT,
            self.identifier,
            self.order,
            self.chunk_id,
            self.chunk_start,
            self.block_start,
            self.offset,
        )


@dataclass
class AcidRecord:
    """The 24-byte ACID loop descriptor."""

    SIZE: ClassVar[int] = 24
    STRUCT: ClassVar[str] = "IHHfIHHf"

    flags: AcidFlag = AcidFlag(0)
    root_note: int = 0
    num_beats: int = 0
    meter_denominator: int = 0
    meter_numerator: int = 0
    tempo: float = 0.0

    @classmethod
    def from_bytes(cls, data: bytes) -> "AcidRecord":
        flags, root_note, _, _, num_beats, denominator, numerator, tempo = unpack_le(
            cls.STRUCT, data[: cls.SIZE]
        )
        return cls(
            flags=AcidFlag(flags),
            root_note=root_note,
            num_beats=num_beats,
            meter_denominator=denominator,
            meter_numerator=numerator,
            tempo=tempo,
        )

    def to_bytes(self) -> bytes:
        return pack_le(
            self.STRUCT,
            int(self.flags),
            self.root_note,
            0,
            0.0,
            self.num_beats,
            self.meter_denominator,
            self.meter_numerator,
            self.tempo,
        )

    @property
    def is_empty(self) -> bool:
        return not (
            self.flags
            or self.root_note
            or self.num_beats
            or self.meter_denominator
            or self.meter_numerator
            or self.tempo
        )


__all__ = [
    "AcidFlag",
    "AcidRecord",
    "AudioGeometry",
    "BroadcastWaveRecord",
    "CueRecord",
    "DataExtent",
    "InstrumentRecord",
    "MetadataMap",
    "SampleLoopRecord",
    "SampleLoopType",
    "SamplerRecord",
]
