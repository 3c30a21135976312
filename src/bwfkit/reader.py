"""Streaming WAV/RF64 reader.

Walks the RIFF chunk list once on construction, resolving the sample format,
locating the data chunk, and decoding every recognised metadata chunk into a
string map. Sample data is read on demand by seeking into the data chunk.
"""

import logging
from typing import BinaryIO

import numpy as np
from numpy.typing import NDArray

from bwfkit.channels import ChannelLayout, canonical_wav_layout
from bwfkit.chunks import AdtlCounters, codec_for
from bwfkit.config import CodecSettings, load_settings
from bwfkit.format_chunk import parse_fmt_chunk
from bwfkit.riff import (
    BEXT_ID,
    CHUNK_HEADER_SIZE,
    DATA_ID,
    DS64_ID,
    FMT_ID,
    ID3_ID,
    ID3_LOWER_ID,
    JUNK_ID,
    RF64_ID,
    RIFF_ID,
    WAVE_ID,
    MalformedChunkError,
    RawChunk,
    read_chunk_header,
    stream_length,
    unpack_le,
)
from bwfkit.samples import decode_frames, to_float
from bwfkit.types import AudioGeometry, DataExtent, MetadataMap

logger = logging.getLogger(__name__)

CHANNEL_MASK = "ChannelMask"
METADATA_SOURCE = "MetaDataSource"

DS64_MIN_SIZE = 28

# Chunks consumed by the framing itself, never preserved
_FRAMING_TAGS = frozenset({FMT_ID, DATA_ID, JUNK_ID, DS64_ID})


class WavReader:
    """Parsed view of a WAV or RF64 stream.

    Construction never raises for malformed input: a stream that is not WAV,
    or whose format cannot be decoded, leaves :attr:`is_valid` false. Ogg Vorbis
    payloads set :attr:`is_subformat_ogg_vorbis` and rewind the stream.

    Example:
        >>> with open("take1.wav", "rb") as f:
        ...     reader = WavReader(f)
        ...     block = reader.read(0, 1024)
    """

    def __init__(self, stream: BinaryIO, settings: CodecSettings | None = None) -> None:
        self.stream = stream
        self.settings = settings or load_settings()

        self.geometry = AudioGeometry()
        self.extent = DataExtent()
        self.metadata: MetadataMap = {}
        self.format_tag = 0
        self.is_rf64 = False
        self.is_subformat_ogg_vorbis = False
        self.bwav_chunk_start = 0
        self.bwav_size = 0
        self.id3_data = b""
        self.extra_chunks: list[RawChunk] = []

        self._mask_layout: ChannelLayout | None = None
        self._stream_start = stream.tell()
        self._stream_end = stream_length(stream)

        self._parse()

    # Geometry accessors

    @property
    def sample_rate(self) -> int:
        return self.geometry.sample_rate

    @property
    def num_channels(self) -> int:
        return self.geometry.num_channels

    @property
    def bits_per_sample(self) -> int:
        return self.geometry.bits_per_sample

    @property
    def uses_floating_point_data(self) -> bool:
        return self.geometry.is_floating_point

    @property
    def bytes_per_frame(self) -> int:
        return self.geometry.bytes_per_frame

    @property
    def length_in_samples(self) -> int:
        return self.extent.sample_count

    @property
    def data_chunk_start(self) -> int:
        return self.extent.start_offset

    @property
    def data_length(self) -> int:
        return self.extent.byte_length

    @property
    def is_valid(self) -> bool:
        return self.geometry.is_valid

    @property
    def channel_layout(self) -> ChannelLayout:
        """Layout from the channel mask when it matches the channel count, else the default."""
        if self._mask_layout is not None and self._mask_layout.size == self.num_channels:
            return self._mask_layout
        return canonical_wav_layout(self.num_channels)

    # Parsing

    def _parse(self) -> None:
        stream = self.stream
        top_level = stream.read(4)
        if top_level == RF64_ID:
            stream.read(4)
            self.is_rf64 = True
            end = 0
        elif top_level == RIFF_ID:
            (riff_size,) = unpack_le("I", stream.read(4))
            end = riff_size + stream.tell()
        else:
            logger.debug("Stream does not start with RIFF or RF64")
            return

        riff_start = stream.tell()
        if stream.read(4) != WAVE_ID:
            logger.debug("RIFF form type is not WAVE")
            return

        data_length = 0
        if self.is_rf64:
            header = stream.read(CHUNK_HEADER_SIZE)
            if len(header) < CHUNK_HEADER_SIZE or header[:4] != DS64_ID:
                logger.debug("RF64 stream without a leading ds64 chunk")
                return
            (ds64_size,) = unpack_le("I", header, 4)
            if ds64_size < DS64_MIN_SIZE:
                logger.debug("ds64 chunk too short (%d bytes)", ds64_size)
                return
            ds64_end = stream.tell() + ds64_size + (ds64_size & 1)
            riff_size, data_length = unpack_le("QQ", stream.read(16))
            end = riff_size + riff_start
            stream.seek(ds64_end)

        self._walk_chunks(end, data_length)

    def _walk_chunks(self, end: int, rf64_data_length: int) -> None:
        stream = self.stream
        counters = AdtlCounters()

        while stream.tell() < end:
            try:
                tag, length = read_chunk_header(stream)
            except MalformedChunkError as e:
                logger.debug("Stopping chunk walk: %s", e)
                break

            body_start = stream.tell()
            chunk_end = body_start + length + (length & 1)
            logger.debug("Chunk %r: %d bytes at offset %d", tag, length, body_start)

            if tag == FMT_ID:
                info = parse_fmt_chunk(self._read_body(length))
                self.format_tag = info.format_tag
                if info.is_ogg_vorbis:
                    logger.info("Ogg Vorbis payload (format 0x%04X)", info.format_tag)
                    self.geometry = info.geometry
                    self.is_subformat_ogg_vorbis = True
                    stream.seek(self._stream_start)
                    return

                self.geometry = info.geometry
                if info.geometry.channel_mask is not None:
                    self.metadata[CHANNEL_MASK] = str(info.geometry.channel_mask)
                    self._mask_layout = info.channel_layout
            elif tag == DATA_ID:
                byte_length = rf64_data_length if self.is_rf64 else length
                bytes_per_frame = self.geometry.bytes_per_frame
                self.extent = DataExtent(
                    start_offset=body_start,
                    byte_length=byte_length,
                    sample_count=byte_length // bytes_per_frame if bytes_per_frame > 0 else 0,
                )
                # Under RF64 the header length is a placeholder; the real size is in ds64
                chunk_end = body_start + byte_length + (byte_length & 1)
            elif tag in _FRAMING_TAGS:
                pass
            else:
                body = self._read_body(length)
                codec = codec_for(tag, body[:4])
                if codec is not None:
                    if tag == BEXT_ID:
                        self.bwav_chunk_start = body_start
                        self.bwav_size = length
                    codec.decode(body, self.metadata, counters)
                elif tag in (ID3_ID, ID3_LOWER_ID):
                    self.id3_data = body
                    self._preserve(tag, body)
                elif length == 0:
                    logger.debug("Zero-length %r chunk; stopping chunk walk", tag)
                    break
                else:
                    self._preserve(tag, body)

            stream.seek(chunk_end)

        counters.publish(self.metadata)
        if self.metadata:
            self.metadata[METADATA_SOURCE] = "WAV"

    def _read_body(self, length: int) -> bytes:
        available = max(0, min(length, self._stream_end - self.stream.tell()))
        if available < length:
            logger.debug("Chunk body truncated: %d of %d bytes present", available, length)
        return self.stream.read(available)

    def _preserve(self, tag: bytes, body: bytes) -> None:
        if self.settings.preserve_unknown_chunks:
            self.extra_chunks.append(RawChunk(tag, body))

    # Sample access

    def read(
        self, start_sample: int, num_samples: int, as_float: bool = False
    ) -> NDArray[np.int32] | NDArray[np.float32]:
        """Read a block of frames as a planar array.

        Frames outside the data chunk come back as zeros.

        Args:
            start_sample: First frame to read.
            num_samples: Number of frames.
            as_float: Return normalized float32 instead of the native type.

        Returns:
            Array of shape ``(num_channels, num_samples)``: left-justified int32
            for integer files, float32 for float files or when ``as_float`` is set.
        """
        float_out = as_float or self.uses_floating_point_data
        result = np.zeros(
            (self.num_channels, max(0, num_samples)),
            dtype=np.float32 if float_out else np.int32,
        )
        if not self.is_valid:
            return result

        first = max(0, start_sample)
        last = min(start_sample + num_samples, self.length_in_samples)
        if last <= first:
            return result

        self.stream.seek(self.data_chunk_start + first * self.bytes_per_frame)
        raw = self.stream.read((last - first) * self.bytes_per_frame)
        block = decode_frames(
            raw, self.num_channels, self.bits_per_sample, self.uses_floating_point_data
        )
        if float_out:
            block = to_float(block)

        offset = first - start_sample
        result[:, offset : offset + block.shape[1]] = block
        return result

    def close(self) -> None:
        self.stream.close()

    def __enter__(self) -> "WavReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
