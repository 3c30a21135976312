"""Unit tests for the chunk codec registry."""

from bwfkit.chunks import (
    ADTL_LIST,
    BEXT,
    ENCODE_ORDER,
    INFO_LIST,
    INST,
    codec_for,
    encode_metadata_chunks,
)
from bwfkit.chunks import bext, cue, list_info, smpl


class TestCodecLookup:
    """Tests for codec_for."""

    def test_plain_chunks(self) -> None:
        """Test lookup by chunk tag."""
        assert codec_for(b"bext") is BEXT
        assert codec_for(b"inst") is INST
        assert codec_for(b"INST") is INST

    def test_list_chunks_dispatch_on_type(self) -> None:
        """Test that LIST chunks are resolved by their list type."""
        assert codec_for(b"LIST", b"adtl") is ADTL_LIST
        assert codec_for(b"LIST", b"INFO") is INFO_LIST
        assert codec_for(b"LIST", b"info") is INFO_LIST
        assert codec_for(b"LIST", b"exif") is None
        assert codec_for(b"LIST") is None

    def test_unknown_chunk(self) -> None:
        """Test that unknown tags have no codec."""
        assert codec_for(b"PAD ") is None


class TestEncodeMetadataChunks:
    """Tests for encode_metadata_chunks."""

    def test_empty_map(self) -> None:
        """Test that an empty map produces no chunks."""
        assert encode_metadata_chunks({}) == []

    def test_header_order(self) -> None:
        """Test that chunks come out in the fixed header order."""
        values = {
            list_info.RIFF_INFO_TITLE: "Song",
            cue.NUM_CUE_POINTS: "1",
            smpl.NUM_SAMPLE_LOOPS: "0",
            bext.BWAV_DESCRIPTION: "desc",
        }
        tags = [chunk.tag for chunk in encode_metadata_chunks(values)]
        assert tags == [b"bext", b"smpl", b"cue ", b"LIST"]

    def test_bodies_are_even(self) -> None:
        """Test that every encoded body has even length."""
        values = {bext.BWAV_CODING_HISTORY: "odd", list_info.RIFF_INFO_ARTIST: "a"}
        for chunk in encode_metadata_chunks(values):
            assert len(chunk.data) % 2 == 0

    def test_order_table(self) -> None:
        """Test the registry order."""
        assert [codec.tag for codec in ENCODE_ORDER] == [
            b"bext",
            b"axml",
            b"iXML",
            b"smpl",
            b"inst",
            b"cue ",
            b"LIST",
            b"LIST",
            b"acid",
            b"Trkn",
        ]
        assert ENCODE_ORDER.index(ADTL_LIST) < ENCODE_ORDER.index(INFO_LIST)
