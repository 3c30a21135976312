"""Two-phase WAV/RF64 writer.

The header is written once up front with placeholder sizes, audio is appended
after it, and the header is rewritten in place on :meth:`WavWriter.flush` and
:meth:`WavWriter.close`. A JUNK chunk reserves exactly the space a ds64 chunk
needs, so a file that grows past 4 GiB can switch to RF64 without moving audio.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import BinaryIO

from numpy.typing import NDArray

from bwfkit.channels import ChannelLayout, canonical_wav_layout, mask_from_layout
from bwfkit.chunks import encode_metadata_chunks
from bwfkit.config import CodecSettings, load_settings
from bwfkit.format_chunk import EXTENSIBLE_FMT_SIZE, build_fmt_chunk
from bwfkit.reader import WavReader
from bwfkit.riff import (
    DATA_ID,
    DS64_ID,
    FMT_ID,
    JUNK_ID,
    RF64_ID,
    RF64_THRESHOLD,
    RIFF_ID,
    UINT32_MAX,
    WAVE_ID,
    RawChunk,
    SinkUnseekableError,
    WavWriteError,
    pack_chunk_header,
    pack_le,
    round_up_even,
)
from bwfkit.samples import encode_frames, prepare_samples
from bwfkit.validation import ValidationError, validate_geometry, validate_metadata

logger = logging.getLogger(__name__)

DS64_SIZE = 28
# JUNK body that makes room for a ds64 chunk plus the fmt growth from 16 to 40 bytes
JUNK_SIZE_EXTENSIBLE = DS64_SIZE
JUNK_SIZE_PLAIN = DS64_SIZE + (EXTENSIBLE_FMT_SIZE - 16)


def compute_riff_size(audio_size: int, chunks: Sequence[RawChunk]) -> int:
    """Size of everything after the RIFF size field, assuming the largest header form."""
    riff_size = 4 + 8 + EXTENSIBLE_FMT_SIZE + 8 + audio_size + (audio_size & 1)
    riff_size += sum(8 + round_up_even(len(chunk.data)) for chunk in chunks)
    riff_size += 8 + DS64_SIZE
    return riff_size + (riff_size & 1)


def build_header(
    *,
    sample_rate: int,
    num_channels: int,
    bits_per_sample: int,
    is_floating_point: bool,
    channel_mask: int,
    chunks: Sequence[RawChunk],
    bytes_written: int,
    length_in_samples: int,
    pad_header: bool = True,
) -> bytes:
    """Build the complete header that precedes the audio bytes.

    The header has the same length before and after the RF64 switch: the ds64
    chunk replaces the JUNK reservation byte for byte.

    Args:
        sample_rate: Frames per second.
        num_channels: Channel count.
        bits_per_sample: Container bit depth.
        is_floating_point: Whether samples are IEEE float.
        channel_mask: Extensible speaker mask, 0 for mono, stereo and discrete.
        chunks: Encoded metadata and passthrough chunks, bodies already even.
        bytes_written: Audio bytes written so far; decides RIFF vs RF64.
        length_in_samples: Frames written so far.
        pad_header: Whether the JUNK reservation is present.

    Returns:
        Header bytes ending with the data chunk header.

    Raises:
        WavWriteError: If RF64 is required but no JUNK space was reserved.
    """
    bytes_per_frame = num_channels * bits_per_sample // 8
    audio_size = bytes_per_frame * length_in_samples
    is_rf64 = bytes_written >= RF64_THRESHOLD
    is_extensible = is_rf64 or channel_mask != 0
    riff_size = compute_riff_size(audio_size, chunks)

    header = bytearray()
    if is_rf64:
        if not pad_header:
            raise WavWriteError(
                "Audio exceeds 4 GiB but the header has no room for a ds64 chunk"
            )
        header += pack_chunk_header(RF64_ID, UINT32_MAX)
    else:
        header += pack_chunk_header(RIFF_ID, min(riff_size, UINT32_MAX))
    header += WAVE_ID

    if is_rf64:
        header += pack_chunk_header(DS64_ID, DS64_SIZE)
        header += pack_le("QQQI", riff_size, audio_size, length_in_samples, 0)
    elif pad_header:
        junk_size = JUNK_SIZE_EXTENSIBLE if is_extensible else JUNK_SIZE_PLAIN
        header += pack_chunk_header(JUNK_ID, junk_size) + bytes(junk_size)

    fmt = build_fmt_chunk(
        num_channels,
        sample_rate,
        bits_per_sample,
        is_floating_point,
        channel_mask,
        extensible=is_extensible,
    )
    header += pack_chunk_header(FMT_ID, len(fmt)) + fmt

    for chunk in chunks:
        header += chunk.to_bytes()

    header += pack_chunk_header(DATA_ID, UINT32_MAX if is_rf64 else audio_size)
    return bytes(header)


class WavWriter:
    """Writes a WAV file to a seekable binary stream.

    The stream stays owned by the caller; :meth:`close` finalizes the header
    but does not close it.

    Example:
        >>> with open("out.wav", "wb") as f, WavWriter(f, 48000, 2, 24) as writer:
        ...     writer.write(samples)
    """

    def __init__(
        self,
        stream: BinaryIO,
        sample_rate: int,
        channels: int | ChannelLayout,
        bits_per_sample: int,
        metadata: Mapping[str, str] | None = None,
        *,
        floating_point: bool | None = None,
        extra_chunks: Iterable[RawChunk] = (),
        settings: CodecSettings | None = None,
    ) -> None:
        """Validate parameters and write the provisional header.

        Args:
            stream: Seekable binary output, positioned where the file starts.
            sample_rate: Frames per second.
            channels: Channel count (canonical WAV layout) or explicit layout.
            bits_per_sample: 8, 16, 24 or 32.
            metadata: Metadata map encoded into header chunks.
            floating_point: Write IEEE float; defaults to True for 32-bit.
            extra_chunks: Opaque chunks written after the metadata chunks.
            settings: Codec settings; defaults to :func:`load_settings`.

        Raises:
            ValueError: If the geometry cannot be written as WAV.
            ValidationError: If metadata validation is enabled and fails.
        """
        if isinstance(channels, ChannelLayout):
            layout = channels
        else:
            layout = canonical_wav_layout(channels)
        if floating_point is None:
            floating_point = bits_per_sample == 32

        result = validate_geometry(sample_rate, layout, bits_per_sample, floating_point)
        if not result.valid:
            raise ValueError("; ".join(result.errors))
        for warning in result.warnings:
            logger.warning(warning)

        self.settings = settings or load_settings()
        metadata = dict(metadata or {})
        if self.settings.validate_metadata:
            result = validate_metadata(metadata)
            if not result.valid:
                raise ValidationError("; ".join(result.errors), field="metadata")
            for warning in result.warnings:
                logger.warning(warning)

        self.stream = stream
        self.sample_rate = sample_rate
        self.channel_layout = layout
        self.num_channels = layout.size
        self.bits_per_sample = bits_per_sample
        self.is_floating_point = floating_point
        self.channel_mask = mask_from_layout(layout)

        self.chunks = encode_metadata_chunks(metadata)
        self.chunks.extend(RawChunk(chunk.tag, chunk.data) for chunk in extra_chunks)

        self.length_in_samples = 0
        self.bytes_written = 0
        self.failed = False
        self.closed = False

        self._header_position = stream.tell()
        self._write_header()

    @property
    def bytes_per_frame(self) -> int:
        return self.num_channels * self.bits_per_sample // 8

    def _build_header(self) -> bytes:
        return build_header(
            sample_rate=self.sample_rate,
            num_channels=self.num_channels,
            bits_per_sample=self.bits_per_sample,
            is_floating_point=self.is_floating_point,
            channel_mask=self.channel_mask,
            chunks=self.chunks,
            bytes_written=self.bytes_written,
            length_in_samples=self.length_in_samples,
            pad_header=self.settings.pad_header,
        )

    def _write_header(self) -> None:
        stream = self.stream

        # Audio must end on an even boundary before the header is patched
        if self.bytes_written & 1:
            stream.write(b"\x00")

        header = self._build_header()
        try:
            if stream.tell() != self._header_position:
                if not stream.seekable():
                    raise SinkUnseekableError("Output stream cannot seek back to the header")
                stream.seek(self._header_position)
        except OSError as e:
            raise SinkUnseekableError(f"Cannot seek to header: {e}") from e

        logger.debug(
            "Writing %d-byte header at offset %d (%d frames)",
            len(header),
            self._header_position,
            self.length_in_samples,
        )
        stream.write(header)

    def write(self, samples: NDArray | list) -> None:
        """Append a planar block of samples.

        Args:
            samples: Array shaped ``(num_channels, frames)``; 1-D is accepted for
                mono. Integers are treated as left-justified int32, floats as
                normalized [-1.0, 1.0].

        Raises:
            ValueError: If the channel dimension does not match.
            WavWriteError: If the writer has failed or the stream write fails.
        """
        if self.closed:
            raise WavWriteError("Writer is closed")
        if self.failed:
            raise WavWriteError("Writer is in a failed state")

        block = prepare_samples(samples, self.num_channels, self.is_floating_point)
        data = encode_frames(block, self.bits_per_sample, self.is_floating_point)

        try:
            written = self.stream.write(data)
            if written is not None and written < len(data):
                raise OSError(f"short write: {written} of {len(data)} bytes")
        except OSError as e:
            self.failed = True
            logger.error("Audio write failed: %s", e)
            self._try_write_header()
            raise WavWriteError(f"Audio write failed: {e}") from e

        self.bytes_written += len(data)
        self.length_in_samples += block.shape[1]

    def write_from_reader(
        self, reader: WavReader, start_sample: int = 0, num_samples: int = -1
    ) -> int:
        """Copy frames from a reader in fixed-size blocks.

        Args:
            reader: Source of frames; its channel count must match.
            start_sample: First source frame.
            num_samples: Frames to copy, or -1 for everything after ``start_sample``.

        Returns:
            Number of frames copied.
        """
        if num_samples < 0:
            num_samples = max(0, reader.length_in_samples - start_sample)

        block_frames = self.settings.copy_block_frames
        as_float = self.is_floating_point
        copied = 0
        while copied < num_samples:
            count = min(block_frames, num_samples - copied)
            self.write(reader.read(start_sample + copied, count, as_float=as_float))
            copied += count
        return copied

    def flush(self) -> None:
        """Rewrite the header so the file is valid as written so far.

        Raises:
            SinkUnseekableError: If the stream cannot seek; the writer then fails.
        """
        if self.closed or self.failed:
            return

        last_position = self.stream.tell()
        try:
            self._write_header()
            self.stream.seek(last_position)
        except (OSError, WavWriteError):
            self.failed = True
            raise
        self.stream.flush()

    def close(self) -> None:
        """Finalize the header. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        if self.failed:
            self._try_write_header()
            return

        try:
            self._write_header()
        except (OSError, WavWriteError):
            self.failed = True
            raise
        self.stream.flush()

    def _try_write_header(self) -> None:
        try:
            self._write_header()
        except (OSError, WavWriteError) as e:
            logger.error("Could not rewrite header after failure: %s", e)

    def __enter__(self) -> "WavWriter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = [
    "WavWriter",
    "build_header",
    "compute_riff_size",
]
