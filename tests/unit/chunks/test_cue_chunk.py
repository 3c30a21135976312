"""Unit tests for the cue chunk codec."""

from bwfkit.chunks import cue
from bwfkit.types import CueRecord


class TestCueEncode:
    """Tests for encoding cue points."""

    def test_no_cues(self) -> None:
        """Test that zero or missing cue counts write nothing."""
        assert cue.encode({}) == b""
        assert cue.encode({cue.NUM_CUE_POINTS: "0"}) == b""

    def test_defaults(self) -> None:
        """Test that chunk id defaults to 'data' and order is auto-filled."""
        body = cue.encode({cue.NUM_CUE_POINTS: "2", cue.cue_key(1, "Offset"): "500"})
        assert len(body) == 4 + 2 * CueRecord.SIZE

        first = CueRecord.from_bytes(body, 4)
        second = CueRecord.from_bytes(body, 4 + CueRecord.SIZE)
        assert first.chunk_id == cue.DEFAULT_CHUNK_ID
        assert (first.order, second.order) == (0, 1)
        assert second.offset == 500

    def test_order_fills_after_explicit_values(self) -> None:
        """Test that missing orders follow the highest order seen."""
        body = cue.encode({cue.NUM_CUE_POINTS: "2", cue.cue_key(0, "Order"): "5"})
        second = CueRecord.from_bytes(body, 4 + CueRecord.SIZE)
        assert second.order == 6


class TestCueDecode:
    """Tests for decoding a cue body."""

    def test_round_trip(self) -> None:
        """Test every cue field survives encode then decode."""
        values = {cue.NUM_CUE_POINTS: "1"}
        for field, value in (
            ("Identifier", "7"),
            ("Order", "0"),
            ("ChunkID", str(cue.DEFAULT_CHUNK_ID)),
            ("ChunkStart", "0"),
            ("BlockStart", "0"),
            ("Offset", "44100"),
        ):
            values[cue.cue_key(0, field)] = value

        decoded: dict[str, str] = {}
        cue.decode(cue.encode(values), decoded)
        assert decoded == values

    def test_truncated_table(self) -> None:
        """Test that cues beyond the body end are skipped."""
        body = cue.encode({cue.NUM_CUE_POINTS: "3"})[: 4 + CueRecord.SIZE]
        decoded: dict[str, str] = {}
        cue.decode(body, decoded)
        assert decoded[cue.NUM_CUE_POINTS] == "3"
        assert cue.cue_key(0, "Offset") in decoded
        assert cue.cue_key(1, "Offset") not in decoded
