"""Unit tests for fmt chunk parsing and construction."""

import uuid

from bwfkit.channels import canonical_wav_layout
from bwfkit.format_chunk import (
    EXTENSIBLE_FMT_SIZE,
    KSDATAFORMAT_SUBTYPE_AMBISONIC_B_FORMAT_PCM,
    KSDATAFORMAT_SUBTYPE_IEEE_FLOAT,
    KSDATAFORMAT_SUBTYPE_PCM,
    PLAIN_FMT_SIZE,
    WAVE_FORMAT_EXTENSIBLE,
    WAVE_FORMAT_IEEE_FLOAT,
    WAVE_FORMAT_PCM,
    build_fmt_chunk,
    parse_fmt_chunk,
)
from bwfkit.riff import pack_le


def plain_fmt(tag: int, channels: int, rate: int, bits: int, byte_rate: int | None = None) -> bytes:
    block_align = channels * bits // 8
    if byte_rate is None:
        byte_rate = block_align * rate
    return pack_le("HHIIHH", tag, channels, rate, byte_rate, block_align, bits)


class TestBuildFmtChunk:
    """Tests for build_fmt_chunk."""

    def test_plain_pcm(self) -> None:
        """Test the 16-byte PCM form."""
        body = build_fmt_chunk(2, 44100, 16, False, 0, extensible=False)
        assert len(body) == PLAIN_FMT_SIZE
        assert body == plain_fmt(WAVE_FORMAT_PCM, 2, 44100, 16)

    def test_plain_float(self) -> None:
        """Test that float data uses format tag 3."""
        body = build_fmt_chunk(1, 48000, 32, True, 0, extensible=False)
        assert int.from_bytes(body[0:2], "little") == WAVE_FORMAT_IEEE_FLOAT

    def test_extensible_layout(self) -> None:
        """Test the 40-byte extensible form: cbSize, valid bits, mask, GUID."""
        body = build_fmt_chunk(6, 48000, 24, False, 0x3F, extensible=True)
        assert len(body) == EXTENSIBLE_FMT_SIZE
        assert int.from_bytes(body[0:2], "little") == WAVE_FORMAT_EXTENSIBLE
        assert int.from_bytes(body[16:18], "little") == 22
        assert int.from_bytes(body[18:20], "little") == 24
        assert int.from_bytes(body[20:24], "little") == 0x3F
        assert body[24:40] == KSDATAFORMAT_SUBTYPE_PCM.bytes_le

    def test_pcm_guid_bytes(self) -> None:
        """Test the on-disk bytes of the PCM sub-format GUID."""
        assert KSDATAFORMAT_SUBTYPE_PCM.bytes_le == bytes.fromhex(
            "0100000000001000800000aa00389b71"
        )


class TestParseFmtChunk:
    """Tests for parse_fmt_chunk."""

    def test_plain_pcm(self) -> None:
        """Test resolving a plain PCM chunk."""
        info = parse_fmt_chunk(plain_fmt(WAVE_FORMAT_PCM, 2, 44100, 16))
        geometry = info.geometry
        assert geometry.is_valid
        assert (geometry.sample_rate, geometry.num_channels) == (44100, 2)
        assert geometry.bits_per_sample == 16
        assert geometry.bytes_per_frame == 4
        assert not geometry.is_floating_point
        assert geometry.channel_mask is None
        assert info.channel_layout is None

    def test_ieee_float(self) -> None:
        """Test that format tag 3 marks float samples."""
        info = parse_fmt_chunk(plain_fmt(WAVE_FORMAT_IEEE_FLOAT, 1, 48000, 32))
        assert info.geometry.is_floating_point

    def test_extensible_float(self) -> None:
        """Test the float sub-format and the channel mask layout."""
        body = build_fmt_chunk(6, 48000, 32, True, 0x3F, extensible=True)
        info = parse_fmt_chunk(body)
        assert info.geometry.is_floating_point
        assert info.geometry.channel_mask == 0x3F
        assert info.sub_format == KSDATAFORMAT_SUBTYPE_IEEE_FLOAT
        assert info.channel_layout == canonical_wav_layout(6)

    def test_ambisonic_is_integer_pcm(self) -> None:
        """Test that the ambisonic B-format GUID decodes as integer PCM."""
        body = bytearray(build_fmt_chunk(4, 48000, 24, False, 0, extensible=True))
        body[24:40] = KSDATAFORMAT_SUBTYPE_AMBISONIC_B_FORMAT_PCM.bytes_le
        info = parse_fmt_chunk(bytes(body))
        assert info.geometry.is_valid
        assert not info.geometry.is_floating_point

    def test_unknown_guid_is_undecodable(self) -> None:
        """Test that an unrecognised sub-format leaves bytes_per_frame at zero."""
        body = bytearray(build_fmt_chunk(2, 48000, 16, False, 3, extensible=True))
        body[24:40] = uuid.uuid4().bytes_le
        assert parse_fmt_chunk(bytes(body)).geometry.bytes_per_frame == 0

    def test_short_extensible_is_undecodable(self) -> None:
        """Test that an extensible tag without the extension is rejected."""
        body = plain_fmt(WAVE_FORMAT_EXTENSIBLE, 2, 48000, 16)
        assert not parse_fmt_chunk(body).geometry.is_valid

    def test_other_format_tag(self) -> None:
        """Test that compressed formats such as ADPCM are undecodable."""
        info = parse_fmt_chunk(plain_fmt(0x0002, 1, 22050, 4))
        assert info.format_tag == 2
        assert info.geometry.bytes_per_frame == 0

    def test_ogg_vorbis(self) -> None:
        """Test that Ogg Vorbis tags are flagged with a zero sample rate."""
        info = parse_fmt_chunk(plain_fmt(0x6750, 2, 44100, 16))
        assert info.is_ogg_vorbis
        assert info.geometry.sample_rate == 0

    def test_bogus_bit_depth_recovered_from_byte_rate(self) -> None:
        """Test that a bit depth over 64 is derived from the byte rate."""
        body = pack_le("HHIIHH", WAVE_FORMAT_PCM, 2, 44100, 44100 * 4, 4, 200)
        geometry = parse_fmt_chunk(body).geometry
        assert geometry.bytes_per_frame == 4
        assert geometry.bits_per_sample == 16
