"""Unit tests for the streaming WAV/RF64 reader."""

import io
import struct

import numpy as np
import pytest

from bwfkit.channels import ChannelLayout, canonical_wav_layout
from bwfkit.chunks import bext
from bwfkit.config import CodecSettings
from bwfkit.format_chunk import build_fmt_chunk
from bwfkit.reader import CHANNEL_MASK, METADATA_SOURCE, WavReader
from bwfkit.riff import pack_chunk_header, pad_even
from bwfkit.types import BroadcastWaveRecord


def chunk(tag: bytes, body: bytes) -> bytes:
    return pack_chunk_header(tag, len(body)) + pad_even(body)


def riff(*chunks: bytes) -> bytes:
    body = b"WAVE" + b"".join(chunks)
    return b"RIFF" + struct.pack("<I", len(body)) + body


def pcm16(frames: list[list[int]]) -> bytes:
    """Interleave planar 16-bit values."""
    return np.array(frames, dtype="<i2").T.tobytes()


def stereo_fmt(bits: int = 16) -> bytes:
    return chunk(b"fmt ", build_fmt_chunk(2, 44100, bits, False, 0, extensible=False))


def open_reader(data: bytes, settings: CodecSettings | None = None) -> WavReader:
    return WavReader(io.BytesIO(data), settings or CodecSettings())


class TestRiffParsing:
    """Tests for basic RIFF framing."""

    def test_stereo_16_bit(self) -> None:
        """Test geometry and data extent of a minimal file."""
        audio = pcm16([[100, 200, 300], [-100, -200, -300]])
        reader = open_reader(riff(stereo_fmt(), chunk(b"data", audio)))

        assert reader.is_valid
        assert not reader.is_rf64
        assert reader.sample_rate == 44100
        assert reader.num_channels == 2
        assert reader.bits_per_sample == 16
        assert reader.bytes_per_frame == 4
        assert reader.length_in_samples == 3
        assert reader.data_chunk_start == 12 + 24 + 8
        assert reader.data_length == 12
        assert reader.channel_layout == ChannelLayout.stereo()
        assert reader.metadata == {}

    def test_read(self) -> None:
        """Test reading a block as left-justified int32."""
        audio = pcm16([[1, 2, 3], [4, 5, 6]])
        reader = open_reader(riff(stereo_fmt(), chunk(b"data", audio)))

        block = reader.read(1, 2)
        assert block.dtype == np.int32
        np.testing.assert_array_equal(block, [[2 << 16, 3 << 16], [5 << 16, 6 << 16]])

    def test_read_outside_data_is_zero(self) -> None:
        """Test zero-fill before the start and after the end."""
        audio = pcm16([[1, 2], [3, 4]])
        reader = open_reader(riff(stereo_fmt(), chunk(b"data", audio)))

        block = reader.read(-1, 4)
        np.testing.assert_array_equal(block[0], [0, 1 << 16, 2 << 16, 0])
        np.testing.assert_array_equal(reader.read(10, 3), np.zeros((2, 3)))

    def test_read_as_float(self) -> None:
        """Test normalized float output."""
        audio = pcm16([[16384], [-32768]])
        reader = open_reader(riff(stereo_fmt(), chunk(b"data", audio)))
        block = reader.read(0, 1, as_float=True)
        assert block.dtype == np.float32
        np.testing.assert_array_equal(block[:, 0], [0.5, -1.0])

    def test_truncated_data_chunk(self) -> None:
        """Test that a data chunk longer than the file reads zeros past the end."""
        audio = pcm16([[7], [8]])
        data = riff(stereo_fmt(), pack_chunk_header(b"data", 400) + audio)
        reader = open_reader(data)

        assert reader.length_in_samples == 100
        block = reader.read(0, 3)
        np.testing.assert_array_equal(block[:, 0], [7 << 16, 8 << 16])
        np.testing.assert_array_equal(block[:, 1:], np.zeros((2, 2)))

    def test_not_a_wav(self) -> None:
        """Test that foreign data leaves the reader invalid."""
        reader = open_reader(b"FORM\x00\x00\x00\x04AIFF")
        assert not reader.is_valid
        assert reader.read(0, 4).shape == (0, 4)

    def test_riff_without_wave(self) -> None:
        """Test that a RIFF file of another form is rejected."""
        data = b"RIFF" + struct.pack("<I", 4) + b"AVI "
        assert not open_reader(data).is_valid

    def test_empty_stream(self) -> None:
        """Test that an empty stream is invalid without raising."""
        assert not open_reader(b"").is_valid

    def test_unsupported_format_is_invalid(self) -> None:
        """Test that a compressed format tag is not decodable."""
        fmt = chunk(b"fmt ", struct.pack("<HHIIHH", 2, 1, 22050, 11025, 512, 4))
        reader = open_reader(riff(fmt, chunk(b"data", bytes(16))))
        assert not reader.is_valid
        assert reader.format_tag == 2

    def test_twelve_bit_pcm_is_invalid(self) -> None:
        """Test that 12-bit PCM is undecodable and reads back as silence."""
        fmt = chunk(b"fmt ", struct.pack("<HHIIHH", 1, 1, 8000, 16000, 2, 12))
        reader = open_reader(riff(fmt, chunk(b"data", b"\x10\x20" * 4)))

        assert not reader.is_valid
        assert reader.bits_per_sample == 12
        np.testing.assert_array_equal(reader.read(0, 4), np.zeros((1, 4)))

    def test_stream_not_at_zero(self) -> None:
        """Test that data offsets are absolute stream positions."""
        audio = pcm16([[1], [2]])
        stream = io.BytesIO(b"\x00" * 6 + riff(stereo_fmt(), chunk(b"data", audio)))
        stream.seek(6)
        reader = WavReader(stream, CodecSettings())
        assert reader.data_chunk_start == 6 + 44
        np.testing.assert_array_equal(reader.read(0, 1)[:, 0], [1 << 16, 2 << 16])


class TestRf64:
    """Tests for RF64 framing."""

    def rf64(self, audio: bytes, ds64_size: int = 28) -> bytes:
        fmt = stereo_fmt()
        data_header = pack_chunk_header(b"data", 0xFFFFFFFF)
        total = 4 + 4 + 4 + 8 + ds64_size + len(fmt) + len(data_header) + len(audio)
        ds64_body = struct.pack("<QQQI", total - 8, len(audio), len(audio) // 4, 0)
        ds64_body = ds64_body.ljust(ds64_size, b"\x00")[:ds64_size]
        return (
            b"RF64"
            + struct.pack("<I", 0xFFFFFFFF)
            + b"WAVE"
            + chunk(b"ds64", ds64_body)
            + fmt
            + data_header
            + audio
        )

    def test_sizes_come_from_ds64(self) -> None:
        """Test that the data size is taken from ds64, not the data header."""
        audio = pcm16([[1, 2, 3, 4], [5, 6, 7, 8]])
        reader = open_reader(self.rf64(audio))

        assert reader.is_rf64
        assert reader.is_valid
        assert reader.data_length == 16
        assert reader.length_in_samples == 4
        np.testing.assert_array_equal(reader.read(3, 1)[:, 0], [4 << 16, 8 << 16])

    def test_same_frames_as_riff(self) -> None:
        """Test that RIFF and RF64 framings of the same audio agree on length."""
        audio = pcm16([[1, 2, 3, 4, 5], [6, 7, 8, 9, 10]])
        plain = open_reader(riff(stereo_fmt(), chunk(b"data", audio)))
        rf64 = open_reader(self.rf64(audio))

        assert not plain.is_rf64
        assert rf64.is_rf64
        assert plain.data_length == rf64.data_length == len(audio)
        assert plain.length_in_samples == rf64.length_in_samples == 5
        np.testing.assert_array_equal(plain.read(0, 5), rf64.read(0, 5))

    def test_short_ds64_is_invalid(self) -> None:
        """Test that a ds64 chunk under 28 bytes is rejected."""
        reader = open_reader(self.rf64(pcm16([[1], [2]]), ds64_size=20))
        assert not reader.is_valid

    def test_missing_ds64_is_invalid(self) -> None:
        """Test that RF64 must start with ds64."""
        data = b"RF64" + struct.pack("<I", 0xFFFFFFFF) + b"WAVE" + stereo_fmt()
        assert not open_reader(data).is_valid


class TestOggVorbis:
    """Tests for Ogg Vorbis detection."""

    def test_flagged_and_rewound(self) -> None:
        """Test that Ogg payloads are flagged and the stream is rewound."""
        fmt = chunk(b"fmt ", struct.pack("<HHIIHH", 0x674F, 2, 44100, 16000, 1, 16))
        stream = io.BytesIO(riff(fmt, chunk(b"data", bytes(10))))
        reader = WavReader(stream, CodecSettings())

        assert reader.is_subformat_ogg_vorbis
        assert reader.format_tag == 0x674F
        assert not reader.is_valid
        assert stream.tell() == 0


class TestChannelMask:
    """Tests for extensible channel masks."""

    def test_mask_layout_and_metadata(self) -> None:
        """Test that the mask is exposed as metadata and layout."""
        fmt = chunk(b"fmt ", build_fmt_chunk(6, 48000, 24, False, 0x3F, extensible=True))
        reader = open_reader(riff(fmt, chunk(b"data", bytes(18 * 2))))

        assert reader.metadata[CHANNEL_MASK] == "63"
        assert reader.metadata[METADATA_SOURCE] == "WAV"
        assert reader.channel_layout == canonical_wav_layout(6)
        assert reader.length_in_samples == 2

    def test_mismatched_mask_falls_back(self) -> None:
        """Test that a mask naming too many speakers is ignored for the layout."""
        fmt = chunk(b"fmt ", build_fmt_chunk(2, 48000, 16, False, 0x3F, extensible=True))
        reader = open_reader(riff(fmt, chunk(b"data", bytes(8))))
        assert reader.channel_layout == ChannelLayout.stereo()

    def test_mask_is_unsigned(self) -> None:
        """Test that a mask with the top bit set is reported as unsigned."""
        fmt = chunk(b"fmt ", build_fmt_chunk(1, 48000, 16, False, 0x80000000, extensible=True))
        reader = open_reader(riff(fmt, chunk(b"data", bytes(2))))
        assert reader.metadata[CHANNEL_MASK] == str(0x80000000)


class TestChunkWalk:
    """Tests for metadata chunk discovery."""

    def test_bext_position_and_metadata(self) -> None:
        """Test that bext is decoded and located."""
        body = BroadcastWaveRecord(description="Take 1").to_bytes()
        data = riff(stereo_fmt(), chunk(b"bext", body), chunk(b"data", bytes(4)))
        reader = open_reader(data)

        assert reader.metadata[bext.BWAV_DESCRIPTION] == "Take 1"
        assert reader.metadata[METADATA_SOURCE] == "WAV"
        assert reader.bwav_chunk_start == 12 + 24 + 8
        assert reader.bwav_size == len(body)

    def test_metadata_after_data(self) -> None:
        """Test that chunks following the data chunk are still read."""
        body = BroadcastWaveRecord(originator="Late").to_bytes()
        data = riff(stereo_fmt(), chunk(b"data", bytes(6)), chunk(b"bext", body))
        reader = open_reader(data)
        assert reader.length_in_samples == 1
        assert reader.metadata[bext.BWAV_ORIGINATOR] == "Late"

    def test_unknown_chunks_preserved(self) -> None:
        """Test that unknown chunks are kept, including odd-sized ones."""
        data = riff(
            stereo_fmt(),
            chunk(b"PEAK", b"abc"),
            chunk(b"LIST", b"exifdata"),
            chunk(b"data", bytes(4)),
        )
        reader = open_reader(data)

        assert [(c.tag, c.data) for c in reader.extra_chunks] == [
            (b"PEAK", b"abc"),
            (b"LIST", b"exifdata"),
        ]
        assert reader.length_in_samples == 1

    def test_unknown_chunks_dropped_when_disabled(self) -> None:
        """Test the preserve_unknown_chunks setting."""
        data = riff(stereo_fmt(), chunk(b"PEAK", b"abcd"), chunk(b"data", bytes(4)))
        reader = open_reader(data, CodecSettings(preserve_unknown_chunks=False))
        assert reader.extra_chunks == []

    def test_id3(self) -> None:
        """Test that ID3 bodies are exposed and preserved."""
        tag = b"ID3\x04\x00\x00\x00\x00\x00\x00"
        data = riff(stereo_fmt(), chunk(b"data", bytes(4)), chunk(b"id3 ", tag))
        reader = open_reader(data)
        assert reader.id3_data == tag
        assert reader.extra_chunks[0].tag == b"id3 "

    def test_zero_length_unknown_stops_walk(self) -> None:
        """Test that an empty unknown chunk ends chunk discovery."""
        body = BroadcastWaveRecord(description="hidden").to_bytes()
        data = riff(
            stereo_fmt(),
            chunk(b"data", bytes(4)),
            chunk(b"????", b""),
            chunk(b"bext", body),
        )
        reader = open_reader(data)
        assert reader.is_valid
        assert bext.BWAV_DESCRIPTION not in reader.metadata

    def test_zero_length_junk_does_not_stop_walk(self) -> None:
        """Test that empty framing chunks are simply skipped."""
        body = BroadcastWaveRecord(description="found").to_bytes()
        data = riff(
            stereo_fmt(), chunk(b"JUNK", b""), chunk(b"bext", body), chunk(b"data", bytes(4))
        )
        reader = open_reader(data)
        assert reader.metadata[bext.BWAV_DESCRIPTION] == "found"

    def test_truncated_chunk_header(self) -> None:
        """Test that a dangling partial header ends the walk cleanly."""
        data = riff(stereo_fmt(), chunk(b"data", bytes(4)), b"bex")
        reader = open_reader(data)
        assert reader.is_valid
        assert reader.length_in_samples == 1

    def test_truncated_metadata_body(self) -> None:
        """Test that a body cut short by end of file is decoded as far as it goes."""
        body = BroadcastWaveRecord(description="cut").to_bytes()[:100]
        data = riff(stereo_fmt(), chunk(b"data", bytes(4)), pack_chunk_header(b"bext", 602) + body)
        reader = open_reader(data)
        assert reader.metadata[bext.BWAV_DESCRIPTION] == "cut"

    def test_adtl_counts_published(self) -> None:
        """Test that label counts are published after the walk."""
        labl = chunk(b"labl", b"\x01\x00\x00\x00one\x00")
        data = riff(stereo_fmt(), chunk(b"LIST", b"adtl" + labl), chunk(b"data", bytes(4)))
        reader = open_reader(data)
        assert reader.metadata["NumCueLabels"] == "1"
        assert reader.metadata["CueLabel0Text"] == "one"


class TestContextManager:
    """Tests for reader lifetime."""

    def test_close_closes_stream(self) -> None:
        """Test that leaving the context closes the stream."""
        stream = io.BytesIO(riff(stereo_fmt(), chunk(b"data", bytes(4))))
        with WavReader(stream, CodecSettings()) as reader:
            assert reader.is_valid
        assert stream.closed


@pytest.mark.parametrize("bits", [8, 24, 32])
def test_other_integer_depths(bits: int) -> None:
    """Test that 8, 24 and 32-bit files report their geometry."""
    fmt = chunk(b"fmt ", build_fmt_chunk(1, 8000, bits, False, 0, extensible=False))
    reader = open_reader(riff(fmt, chunk(b"data", bytes(bits // 8 * 5))))
    assert reader.bits_per_sample == bits
    assert reader.length_in_samples == 5
    np.testing.assert_array_equal(
        reader.read(0, 5), np.full((1, 5), -(1 << 31) if bits == 8 else 0)
    )
