"""fmt chunk parsing and construction.

Resolves the plain (16-byte) and WAVE_FORMAT_EXTENSIBLE (40-byte) format
descriptions into an :class:`~bwfkit.types.AudioGeometry`.
"""

import logging
import uuid
from dataclasses import dataclass

from bwfkit.channels import ChannelLayout, layout_from_mask
from bwfkit.riff import pack_le, unpack_le
from bwfkit.types import AudioGeometry

logger = logging.getLogger(__name__)

# Format tags
WAVE_FORMAT_PCM = 1
WAVE_FORMAT_IEEE_FLOAT = 3
WAVE_FORMAT_EXTENSIBLE = 0xFFFE

# Ogg Vorbis in WAV, modes 1/2/3 and their "plus" variants
OGG_VORBIS_FORMAT_TAGS = frozenset({0x674F, 0x6750, 0x6751, 0x676F, 0x6770, 0x6771})

# Sub-format GUIDs; the on-disk layout is exactly uuid's little-endian byte form
KSDATAFORMAT_SUBTYPE_PCM = uuid.UUID("00000001-0000-0010-8000-00aa00389b71")
KSDATAFORMAT_SUBTYPE_IEEE_FLOAT = uuid.UUID("00000003-0000-0010-8000-00aa00389b71")
KSDATAFORMAT_SUBTYPE_AMBISONIC_B_FORMAT_PCM = uuid.UUID("00000001-0721-11d3-8644-c8c1ca000000")

PLAIN_FMT_SIZE = 16
EXTENSIBLE_FMT_SIZE = 40
EXTENSIBLE_CB_SIZE = 22

_BASE_STRUCT = "HHIIHH"


@dataclass
class FormatInfo:
    """Everything learned from one fmt chunk."""

    geometry: AudioGeometry
    format_tag: int
    sub_format: uuid.UUID | None = None
    channel_layout: ChannelLayout | None = None
    """Layout derived from the channel mask; ``None`` without an extensible mask."""

    is_ogg_vorbis: bool = False


def parse_fmt_chunk(body: bytes) -> FormatInfo:
    """Resolve a fmt chunk body into sample geometry.

    Unsupported encodings are reported through ``bytes_per_frame == 0`` rather
    than an exception, so the caller can still inspect metadata.

    Args:
        body: The chunk payload, without the 8-byte header.

    Returns:
        A :class:`FormatInfo`. For Ogg Vorbis payloads ``is_ogg_vorbis`` is set
        and the sample rate is zero.
    """
    format_tag, num_channels, sample_rate, bytes_per_sec, _, bits = unpack_le(_BASE_STRUCT, body)
    geometry = AudioGeometry(sample_rate=sample_rate, num_channels=num_channels)

    if bits > 64:
        # Some writers store a nonsense bit depth; recover it from the byte rate
        geometry.bytes_per_frame = bytes_per_sec // sample_rate if sample_rate else 0
        bits = 8 * geometry.bytes_per_frame // num_channels if num_channels else 0
    else:
        geometry.bytes_per_frame = num_channels * bits // 8
    geometry.bits_per_sample = bits

    info = FormatInfo(geometry=geometry, format_tag=format_tag)

    if format_tag == WAVE_FORMAT_IEEE_FLOAT:
        geometry.is_floating_point = True
    elif format_tag == WAVE_FORMAT_EXTENSIBLE:
        if len(body) < EXTENSIBLE_FMT_SIZE:
            logger.debug("Extensible fmt chunk too short (%d bytes)", len(body))
            geometry.bytes_per_frame = 0
        else:
            (channel_mask,) = unpack_le("I", body, 20)
            geometry.channel_mask = channel_mask
            info.channel_layout = layout_from_mask(channel_mask, num_channels)

            sub_format = uuid.UUID(bytes_le=bytes(body[24:40]))
            info.sub_format = sub_format
            if sub_format == KSDATAFORMAT_SUBTYPE_IEEE_FLOAT:
                geometry.is_floating_point = True
            elif sub_format not in (
                KSDATAFORMAT_SUBTYPE_PCM,
                KSDATAFORMAT_SUBTYPE_AMBISONIC_B_FORMAT_PCM,
            ):
                logger.debug("Unsupported extensible sub-format %s", sub_format)
                geometry.bytes_per_frame = 0
    elif format_tag in OGG_VORBIS_FORMAT_TAGS:
        info.is_ogg_vorbis = True
        geometry.sample_rate = 0
    elif format_tag != WAVE_FORMAT_PCM:
        logger.debug("Unsupported format tag 0x%04X", format_tag)
        geometry.bytes_per_frame = 0

    return info


def build_fmt_chunk(
    num_channels: int,
    sample_rate: int,
    bits_per_sample: int,
    is_floating_point: bool,
    channel_mask: int,
    extensible: bool,
) -> bytes:
    """Build a fmt chunk body.

    Args:
        num_channels: Channel count.
        sample_rate: Frames per second.
        bits_per_sample: Container bit depth.
        is_floating_point: Whether samples are IEEE float.
        channel_mask: Speaker mask written into the extensible form.
        extensible: Emit the 40-byte WAVE_FORMAT_EXTENSIBLE form.

    Returns:
        16 or 40 bytes of fmt payload.
    """
    block_align = num_channels * bits_per_sample // 8
    if extensible:
        format_tag = WAVE_FORMAT_EXTENSIBLE
    elif is_floating_point:
        format_tag = WAVE_FORMAT_IEEE_FLOAT
    else:
        format_tag = WAVE_FORMAT_PCM

    body = pack_le(
        _BASE_STRUCT,
        format_tag,
        num_channels,
        sample_rate,
        block_align * sample_rate,
        block_align,
        bits_per_sample,
    )
    if not extensible:
        return body

    sub_format = KSDATAFORMAT_SUBTYPE_IEEE_FLOAT if is_floating_point else KSDATAFORMAT_SUBTYPE_PCM
    return (
        body
        + pack_le("HHI", EXTENSIBLE_CB_SIZE, bits_per_sample, channel_mask & 0xFFFFFFFF)
        + sub_format.bytes_le
    )
