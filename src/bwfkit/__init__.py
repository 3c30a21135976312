"""bwfkit - Broadcast WAV and RF64 reading, writing and metadata editing.

File Layout
-----------
Files written by bwfkit reserve space up front so the header can be patched
in place once the audio length is known:

    +----------------------------------------+
    | RIFF/RF64 header ("WAVE")              |
    +----------------------------------------+
    | JUNK (28/52 bytes) or ds64 (28 bytes)  |
    +----------------------------------------+
    | fmt  chunk (16 or 40 bytes)            |
    +----------------------------------------+
    | metadata chunks                        |
    |   bext, axml, iXML, smpl, inst, cue,   |
    |   LIST/adtl, LIST/INFO, acid, Trkn     |
    +----------------------------------------+
    | data chunk (interleaved PCM / float)   |
    +----------------------------------------+

Metadata is exchanged as a flat ``dict[str, str]``; see :mod:`bwfkit.chunks`
for the keys each chunk understands.

Example Usage
-------------
>>> import numpy as np
>>> from bwfkit import create_bwav_metadata, load_wav, save_wav
>>>
>>> tone = np.sin(np.linspace(0, 2 * np.pi * 440, 48000)).astype(np.float32)
>>> metadata = create_bwav_metadata(description="A440", originator="bwfkit")
>>> save_wav("a440.wav", np.stack([tone, tone]), 48000, 24, metadata)
>>>
>>> wav = load_wav("a440.wav", as_float=True)
>>> print(wav.metadata["bwav description"], wav.num_frames)
"""

from bwfkit.channels import (
    ChannelLayout,
    ChannelType,
    canonical_wav_layout,
    is_channel_layout_supported,
)
from bwfkit.config import CodecSettings, load_settings
from bwfkit.mapped import MappedWavReader
from bwfkit.reader import WavReader
from bwfkit.riff import (
    MalformedChunkError,
    NotThisFormatError,
    RawChunk,
    RiffError,
    SinkUnseekableError,
    UnsupportedSubformatError,
    WavWriteError,
    WindowError,
)
from bwfkit.types import AudioGeometry, DataExtent, MetadataMap
from bwfkit.validation import ValidationError, ValidationResult, validate_metadata
from bwfkit.wav import (
    WavFile,
    create_bwav_metadata,
    create_memory_mapped_reader,
    create_reader_for,
    create_writer_for,
    load_wav,
    possible_bit_depths,
    possible_sample_rates,
    replace_metadata_in_file,
    save_wav,
)
from bwfkit.writer import WavWriter

__version__ = "0.1.0"

__all__ = [
    # Types
    "AudioGeometry",
    "ChannelLayout",
    "ChannelType",
    "DataExtent",
    "MetadataMap",
    "RawChunk",
    "WavFile",
    # Reading
    "WavReader",
    "MappedWavReader",
    "create_reader_for",
    "create_memory_mapped_reader",
    "load_wav",
    # Writing
    "WavWriter",
    "create_writer_for",
    "save_wav",
    "replace_metadata_in_file",
    "create_bwav_metadata",
    # Capabilities
    "possible_sample_rates",
    "possible_bit_depths",
    "canonical_wav_layout",
    "is_channel_layout_supported",
    # Configuration
    "CodecSettings",
    "load_settings",
    # Validation
    "ValidationError",
    "ValidationResult",
    "validate_metadata",
    # Errors
    "RiffError",
    "NotThisFormatError",
    "UnsupportedSubformatError",
    "MalformedChunkError",
    "WavWriteError",
    "SinkUnseekableError",
    "WindowError",
]
