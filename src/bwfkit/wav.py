"""File-level WAV API: capabilities, reader/writer factories, metadata rewrite.

This is the entry point most callers need. It wraps :class:`WavReader`,
:class:`WavWriter` and :class:`MappedWavReader` with path handling, and
implements whole-file metadata replacement.
"""

import logging
import os
import shutil
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

import numpy as np
from numpy.typing import NDArray

from bwfkit.channels import ChannelLayout, canonical_wav_layout, is_channel_layout_supported
from bwfkit.chunks import bext
from bwfkit.config import CodecSettings, load_settings
from bwfkit.mapped import MappedWavReader
from bwfkit.reader import WavReader
from bwfkit.riff import NotThisFormatError, RawChunk, RiffError, UnsupportedSubformatError
from bwfkit.samples import SUPPORTED_BIT_DEPTHS
from bwfkit.types import MetadataMap
from bwfkit.validation import POSSIBLE_SAMPLE_RATES
from bwfkit.writer import WavWriter

logger = logging.getLogger(__name__)


@dataclass
class WavFile:
    """A WAV file loaded into memory."""

    samples: NDArray[np.int32] | NDArray[np.float32]
    """Planar samples, shape (num_channels, num_frames)."""

    sample_rate: int
    bits_per_sample: int
    is_floating_point: bool
    channel_layout: ChannelLayout
    metadata: MetadataMap = field(default_factory=dict)
    is_rf64: bool = False
    extra_chunks: list[RawChunk] = field(default_factory=list)

    @property
    def num_channels(self) -> int:
        return self.samples.shape[0]

    @property
    def num_frames(self) -> int:
        return self.samples.shape[1]

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return self.num_frames / self.sample_rate if self.sample_rate else 0.0


def possible_sample_rates() -> list[int]:
    return list(POSSIBLE_SAMPLE_RATES)


def possible_bit_depths() -> list[int]:
    return list(SUPPORTED_BIT_DEPTHS)


def create_reader_for(
    stream: BinaryIO, settings: CodecSettings | None = None
) -> WavReader | None:
    """Probe a stream and return a reader if it holds decodable WAV audio.

    Args:
        stream: Seekable binary input, positioned at the start of the file.
        settings: Codec settings; defaults to :func:`~bwfkit.config.load_settings`.

    Returns:
        A valid reader, or None if the stream is not WAV or uses an
        undecodable format.

    Raises:
        UnsupportedSubformatError: If the payload is Ogg Vorbis; the stream
            has been rewound so another decoder can take it.
    """
    reader = WavReader(stream, settings)
    if reader.is_subformat_ogg_vorbis:
        raise UnsupportedSubformatError(
            "WAV file carries Ogg Vorbis audio", format_tag=reader.format_tag
        )
    if reader.is_valid:
        return reader
    logger.debug("Stream is not a decodable WAV file")
    return None


def create_writer_for(
    stream: BinaryIO,
    sample_rate: int,
    channels: int | ChannelLayout,
    bits_per_sample: int,
    metadata: Mapping[str, str] | None = None,
    *,
    floating_point: bool | None = None,
    settings: CodecSettings | None = None,
) -> WavWriter | None:
    """Create a writer, or return None if the geometry cannot be written as WAV."""
    layout = channels if isinstance(channels, ChannelLayout) else canonical_wav_layout(channels)
    if bits_per_sample not in SUPPORTED_BIT_DEPTHS or not is_channel_layout_supported(layout):
        return None
    return WavWriter(
        stream,
        sample_rate,
        layout,
        bits_per_sample,
        metadata,
        floating_point=floating_point,
        settings=settings,
    )


def create_memory_mapped_reader(
    path: Path | str, settings: CodecSettings | None = None
) -> MappedWavReader | None:
    """Parse a file and return a mapped reader over its data chunk.

    No window is mapped yet; call :meth:`MappedWavReader.map_entire_file` or
    :meth:`MappedWavReader.map_section_of_file` first.

    Returns:
        A mapped reader, or None if the file is not valid WAV or holds no frames.
    """
    with open(path, "rb") as f:
        reader = create_reader_for(f, settings)
        if reader is None or reader.length_in_samples <= 0:
            return None
        return MappedWavReader(path, reader)


def load_wav(
    path: Path | str,
    *,
    as_float: bool = False,
    settings: CodecSettings | None = None,
) -> WavFile:
    """Load a WAV file's samples and metadata.

    Args:
        path: Path to the WAV file.
        as_float: Return normalized float32 samples for integer files too.
        settings: Codec settings.

    Returns:
        WavFile with planar samples and the decoded metadata map.

    Raises:
        RiffError: If the file cannot be opened.
        NotThisFormatError: If the file is not decodable WAV.
        UnsupportedSubformatError: If the file carries Ogg Vorbis.
    """
    path = Path(path)
    try:
        f = open(path, "rb")
    except FileNotFoundError as e:
        raise RiffError(f"File not found: {path}") from e
    except OSError as e:
        raise RiffError(f"Cannot open file: {path}") from e

    with f:
        reader = create_reader_for(f, settings)
        if reader is None:
            raise NotThisFormatError(f"Not a decodable WAV file: {path}")

        samples = reader.read(0, reader.length_in_samples, as_float=as_float)
        return WavFile(
            samples=samples,
            sample_rate=reader.sample_rate,
            bits_per_sample=reader.bits_per_sample,
            is_floating_point=reader.uses_floating_point_data,
            channel_layout=reader.channel_layout,
            metadata=dict(reader.metadata),
            is_rf64=reader.is_rf64,
            extra_chunks=list(reader.extra_chunks),
        )


def save_wav(
    path: Path | str,
    samples: NDArray | list,
    sample_rate: int,
    bits_per_sample: int = 16,
    metadata: Mapping[str, str] | None = None,
    *,
    floating_point: bool | None = None,
    channel_layout: ChannelLayout | None = None,
    settings: CodecSettings | None = None,
) -> None:
    """Write planar samples and metadata to a WAV file.

    Args:
        path: Output file path; parent directories are created.
        samples: Array shaped (num_channels, frames), or 1-D for mono.
        sample_rate: Frames per second.
        bits_per_sample: 8, 16, 24 or 32.
        metadata: Metadata map to encode.
        floating_point: Write IEEE float; defaults to True for 32-bit.
        channel_layout: Speaker layout; defaults to the canonical layout.
        settings: Codec settings.

    Raises:
        ValueError: If the geometry is not writable.
        ValidationError: If metadata validation fails.
    """
    path = Path(path)
    array = np.asarray(samples)
    if array.ndim == 1:
        array = array.reshape(1, -1)
    channels: int | ChannelLayout = (
        channel_layout if channel_layout is not None else array.shape[0]
    )

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        with WavWriter(
            f,
            sample_rate,
            channels,
            bits_per_sample,
            metadata,
            floating_point=floating_point,
            settings=settings,
        ) as writer:
            writer.write(array)


def replace_metadata_in_file(
    path: Path | str,
    metadata: Mapping[str, str],
    settings: CodecSettings | None = None,
) -> bool:
    """Rewrite a WAV file with a new metadata map, keeping its audio.

    The new file is written to a temporary file beside the original and then
    swapped in with :func:`os.replace`, so the original is untouched if
    anything fails.

    Args:
        path: WAV file to rewrite.
        metadata: Complete replacement metadata map.
        settings: Codec settings.

    Returns:
        True if the file was rewritten, False if it is not decodable WAV.
    """
    path = Path(path)
    settings = settings or load_settings()

    with open(path, "rb") as src:
        reader = create_reader_for(src, settings)
        if reader is None:
            return False

        layout = reader.channel_layout
        if not is_channel_layout_supported(layout):
            layout = canonical_wav_layout(reader.num_channels)

        fd, temp_name = tempfile.mkstemp(
            prefix=f".{path.stem}-", suffix=path.suffix or ".wav", dir=path.parent
        )
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "wb") as dst:
                with WavWriter(
                    dst,
                    reader.sample_rate,
                    layout,
                    reader.bits_per_sample,
                    metadata,
                    floating_point=reader.uses_floating_point_data,
                    extra_chunks=reader.extra_chunks if settings.preserve_unknown_chunks else (),
                    settings=settings,
                ) as writer:
                    copied = writer.write_from_reader(reader)
            shutil.copymode(path, temp_path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

    os.replace(temp_path, path)
    logger.info("Rewrote metadata of %s (%d frames copied)", path.name, copied)
    return True


def create_bwav_metadata(
    description: str = "",
    originator: str = "",
    originator_ref: str = "",
    date_and_time: datetime | None = None,
    time_reference_samples: int = 0,
    coding_history: str = "",
) -> MetadataMap:
    """Build the Broadcast Wave metadata keys.

    Args:
        description: Free-text description, up to 256 bytes.
        originator: Producer name, up to 32 bytes.
        originator_ref: Unique reference, up to 32 bytes.
        date_and_time: Origination timestamp; defaults to now.
        time_reference_samples: First sample's offset since midnight, in frames.
        coding_history: Coding history text.

    Returns:
        A metadata map holding the seven ``bwav *`` keys.
    """
    when = date_and_time or datetime.now()
    return {
        bext.BWAV_DESCRIPTION: description,
        bext.BWAV_ORIGINATOR: originator,
        bext.BWAV_ORIGINATOR_REF: originator_ref,
        bext.BWAV_ORIGINATION_DATE: when.strftime("%Y-%m-%d"),
        bext.BWAV_ORIGINATION_TIME: when.strftime("%H:%M:%S"),
        bext.BWAV_TIME_REFERENCE: str(time_reference_samples),
        bext.BWAV_CODING_HISTORY: coding_history,
    }
