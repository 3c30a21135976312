"""Unit tests for channel layouts and the extensible channel mask."""

import pytest

from bwfkit.channels import (
    ChannelLayout,
    ChannelType,
    canonical_wav_layout,
    channel_name,
    is_channel_layout_supported,
    layout_from_mask,
    mask_from_layout,
)

T = ChannelType


class TestCanonicalLayouts:
    """Tests for the default layout per channel count."""

    def test_mono_and_stereo(self) -> None:
        """Test the one- and two-channel defaults."""
        assert canonical_wav_layout(1) == ChannelLayout.mono()
        assert canonical_wav_layout(2) == ChannelLayout.stereo()

    def test_five_one(self) -> None:
        """Test that six channels are 5.1 in WAV order."""
        assert canonical_wav_layout(6).roles == (
            T.LEFT,
            T.RIGHT,
            T.CENTRE,
            T.LFE,
            T.LEFT_SURROUND,
            T.RIGHT_SURROUND,
        )

    @pytest.mark.parametrize("count", range(1, 9))
    def test_sizes_match(self, count: int) -> None:
        """Test that every canonical layout has the requested size."""
        assert canonical_wav_layout(count).size == count

    def test_large_counts_are_discrete(self) -> None:
        """Test that counts beyond eight get discrete roles."""
        layout = canonical_wav_layout(12)
        assert layout.size == 12
        assert layout.is_discrete


class TestMaskConversion:
    """Tests for channel mask to layout and back."""

    def test_mask_bits_in_ascending_order(self) -> None:
        """Test that set bits map to roles bit + 1."""
        layout = layout_from_mask(0x3F, 6)
        assert layout == canonical_wav_layout(6)

    def test_mask_round_trip(self) -> None:
        """Test that a 5.1 layout produces the 0x3F mask."""
        assert mask_from_layout(canonical_wav_layout(6)) == 0x3F

    def test_short_mask_is_topped_up_with_discrete(self) -> None:
        """Test padding when the mask has fewer bits than channels."""
        layout = layout_from_mask(0x3, 4)
        assert layout.roles[:2] == (T.LEFT, T.RIGHT)
        assert layout.roles[2:] == (T.DISCRETE_CHANNEL_0, T.DISCRETE_CHANNEL_0 + 1)

    def test_zero_mask_on_stereo_uses_canonical(self) -> None:
        """Test that an empty mask on a stereo stream is plain stereo."""
        assert layout_from_mask(0, 2) == ChannelLayout.stereo()

    def test_zero_mask_on_multichannel_is_discrete(self) -> None:
        """Test that an empty mask on four channels gives discrete roles."""
        assert layout_from_mask(0, 4) == ChannelLayout.discrete(4)

    def test_mono_stereo_and_discrete_have_no_mask(self) -> None:
        """Test that the plain fmt chunk is used where no mask is needed."""
        assert mask_from_layout(ChannelLayout.mono()) == 0
        assert mask_from_layout(ChannelLayout.stereo()) == 0
        assert mask_from_layout(ChannelLayout.discrete(3)) == 0

    def test_role_without_mask_bit(self) -> None:
        """Test that roles outside the mask range are rejected."""
        with pytest.raises(ValueError):
            mask_from_layout(ChannelLayout.of(T.LEFT, T.UNKNOWN))


class TestSupport:
    """Tests for layout writability."""

    def test_named_roles_supported(self) -> None:
        """Test that any mix of the named WAV speakers is writable."""
        assert is_channel_layout_supported(ChannelLayout.of(T.TOP_MIDDLE, T.LFE))

    def test_discrete_supported(self) -> None:
        """Test that discrete layouts are writable."""
        assert is_channel_layout_supported(ChannelLayout.discrete(16))

    def test_unknown_role_not_supported(self) -> None:
        """Test that a layout with an unknown role is not writable."""
        assert not is_channel_layout_supported(ChannelLayout.of(T.LEFT, T.UNKNOWN))


def test_channel_names() -> None:
    """Test display names for named, discrete and unnamed roles."""
    assert channel_name(T.LEFT_SURROUND) == "Left Surround"
    assert channel_name(T.DISCRETE_CHANNEL_0 + 2) == "Discrete 2"
    assert channel_name(20) == "Mask Bit 19"
    assert ChannelLayout.stereo().names == ["Left", "Right"]
