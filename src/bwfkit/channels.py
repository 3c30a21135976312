"""Speaker roles, channel layouts, and the WAVE_FORMAT_EXTENSIBLE channel mask."""

from dataclasses import dataclass
from enum import IntEnum


class ChannelType(IntEnum):
    """Speaker role of a single channel.

    Values 1-18 line up with the bit positions of the extensible channel mask
    (bit ``n`` is role ``n + 1``). Roles from ``DISCRETE_CHANNEL_0`` up carry
    no speaker position.
    """

    UNKNOWN = 0
    LEFT = 1
    RIGHT = 2
    CENTRE = 3
    LFE = 4
    LEFT_SURROUND = 5
    RIGHT_SURROUND = 6
    LEFT_CENTRE = 7
    RIGHT_CENTRE = 8
    CENTRE_SURROUND = 9
    LEFT_SURROUND_SIDE = 10
    RIGHT_SURROUND_SIDE = 11
    TOP_MIDDLE = 12
    TOP_FRONT_LEFT = 13
    TOP_FRONT_CENTRE = 14
    TOP_FRONT_RIGHT = 15
    TOP_REAR_LEFT = 16
    TOP_REAR_CENTRE = 17
    TOP_REAR_RIGHT = 18
    DISCRETE_CHANNEL_0 = 64

    @property
    def display_name(self) -> str:
        """Human-readable name for this role."""
        return self.name.replace("_", " ").title()


def channel_name(role: int) -> str:
    """Name a role, including unnamed mask bits and discrete channels."""
    if role >= ChannelType.DISCRETE_CHANNEL_0:
        return f"Discrete {role - ChannelType.DISCRETE_CHANNEL_0}"
    try:
        return ChannelType(role).display_name
    except ValueError:
        return f"Mask Bit {role - 1}"


@dataclass(frozen=True)
class ChannelLayout:
    """Ordered speaker roles, one per channel."""

    roles: tuple[int, ...] = ()

    def __len__(self) -> int:
        return len(self.roles)

    @property
    def size(self) -> int:
        return len(self.roles)

    @property
    def is_discrete(self) -> bool:
        return all(role >= ChannelType.DISCRETE_CHANNEL_0 for role in self.roles)

    @property
    def names(self) -> list[str]:
        return [channel_name(role) for role in self.roles]

    @classmethod
    def of(cls, *roles: int) -> "ChannelLayout":
        return cls(tuple(int(role) for role in roles))

    @classmethod
    def discrete(cls, num_channels: int) -> "ChannelLayout":
        return cls(tuple(ChannelType.DISCRETE_CHANNEL_0 + i for i in range(num_channels)))

    @classmethod
    def mono(cls) -> "ChannelLayout":
        return cls.of(ChannelType.CENTRE)

    @classmethod
    def stereo(cls) -> "ChannelLayout":
        return cls.of(ChannelType.LEFT, ChannelType.RIGHT)


_T = ChannelType

# Default WAV speaker assignment per channel count
_CANONICAL_WAV_LAYOUTS: dict[int, ChannelLayout] = {
    1: ChannelLayout.of(_T.CENTRE),
    2: ChannelLayout.of(_T.LEFT, _T.RIGHT),
    3: ChannelLayout.of(_T.LEFT, _T.RIGHT, _T.CENTRE),
    4: ChannelLayout.of(_T.LEFT, _T.RIGHT, _T.LEFT_SURROUND, _T.RIGHT_SURROUND),
    5: ChannelLayout.of(_T.LEFT, _T.RIGHT, _T.CENTRE, _T.LEFT_SURROUND, _T.RIGHT_SURROUND),
    6: ChannelLayout.of(
        _T.LEFT, _T.RIGHT, _T.CENTRE, _T.LFE, _T.LEFT_SURROUND, _T.RIGHT_SURROUND
    ),
    7: ChannelLayout.of(
        _T.LEFT,
        _T.RIGHT,
        _T.CENTRE,
        _T.LEFT_SURROUND,
        _T.RIGHT_SURROUND,
        _T.LEFT_CENTRE,
        _T.RIGHT_CENTRE,
    ),
    8: ChannelLayout.of(
        _T.LEFT,
        _T.RIGHT,
        _T.CENTRE,
        _T.LFE,
        _T.LEFT_SURROUND,
        _T.RIGHT_SURROUND,
        _T.LEFT_CENTRE,
        _T.RIGHT_CENTRE,
    ),
}


def canonical_wav_layout(num_channels: int) -> ChannelLayout:
    """Default layout for a channel count: mono, stereo, LCR, quad, 5.0, 5.1, 7.0/7.1 SDDS.

    Other counts get a discrete layout.
    """
    layout = _CANONICAL_WAV_LAYOUTS.get(num_channels)
    if layout is None:
        return ChannelLayout.discrete(num_channels)
    return layout


def layout_from_mask(mask: int, num_channels: int) -> ChannelLayout:
    """Build a layout from an extensible channel mask.

    Each set bit ``b`` contributes role ``b + 1`` in ascending bit order. When
    the mask describes fewer channels than the stream carries, a zero mask on a
    mono or stereo stream falls back to the canonical layout, and anything else
    is topped up with discrete roles.
    """
    mask &= 0xFFFFFFFF
    roles = [bit + 1 for bit in range(32) if (mask >> bit) & 1]

    if len(roles) != num_channels:
        if num_channels <= 2 and mask == 0:
            return canonical_wav_layout(num_channels)

        discrete = 0
        while len(roles) < num_channels:
            roles.append(ChannelType.DISCRETE_CHANNEL_0 + discrete)
            discrete += 1

    return ChannelLayout(tuple(roles))


def mask_from_layout(layout: ChannelLayout) -> int:
    """Compute the extensible channel mask for a layout.

    Discrete, mono and stereo layouts return 0, which keeps the plain 16-byte
    fmt chunk.

    Raises:
        ValueError: If a role has no mask bit.
    """
    if layout.is_discrete or layout in (ChannelLayout.mono(), ChannelLayout.stereo()):
        return 0

    mask = 0
    for role in layout.roles:
        if not 1 <= role <= 32:
            raise ValueError(f"Channel role {role} has no WAV mask bit")
        mask |= 1 << (role - 1)
    return mask


def is_channel_layout_supported(layout: ChannelLayout) -> bool:
    """Check whether a layout can be written as WAV.

    Discrete layouts always can; otherwise every role must be one of the 18
    named WAV speaker positions.
    """
    if layout.is_discrete:
        return True
    return all(ChannelType.LEFT <= role <= ChannelType.TOP_REAR_RIGHT for role in layout.roles)
