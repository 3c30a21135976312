"""Conversion between packed little-endian WAV frames and planar numpy arrays.

Integer samples are handled left-justified in int32, so 8-, 16- and 24-bit
data keep their full-scale relationship: a 16-bit sample ``s`` becomes
``s << 16``. Float data stays float32 in [-1.0, 1.0].
"""

import numpy as np
from numpy.typing import NDArray

SUPPORTED_BIT_DEPTHS = (8, 16, 24, 32)

# Scale between left-justified int32 and normalized float
INT32_FULL_SCALE = 2147483648.0


def decode_frames(
    raw: bytes | memoryview | NDArray[np.uint8],
    num_channels: int,
    bits_per_sample: int,
    is_floating_point: bool,
) -> NDArray[np.int32] | NDArray[np.float32]:
    """Unpack interleaved frames into a planar array.

    Trailing bytes that do not form a whole frame are ignored.

    Args:
        raw: Packed frame bytes.
        num_channels: Channels per frame.
        bits_per_sample: 8, 16, 24 or 32.
        is_floating_point: Whether 32-bit samples are IEEE float.

    Returns:
        Array of shape ``(num_channels, frames)``; int32 for integer formats,
        float32 for float.

    Raises:
        ValueError: If the bit depth is not supported.
    """
    bytes_per_frame = num_channels * bits_per_sample // 8
    data = np.frombuffer(raw, dtype=np.uint8)
    frames = len(data) // bytes_per_frame if bytes_per_frame else 0
    data = data[: frames * bytes_per_frame]

    if bits_per_sample == 8:
        samples = (data.astype(np.int32) - 128) << 24
    elif bits_per_sample == 16:
        samples = data.view("<i2").astype(np.int32) << 16
    elif bits_per_sample == 24:
        triples = data.reshape(-1, 3).astype(np.uint32)
        packed = (triples[:, 0] << 8) | (triples[:, 1] << 16) | (triples[:, 2] << 24)
        samples = packed.view(np.int32)
    elif bits_per_sample == 32 and is_floating_point:
        samples = data.view("<f4").astype(np.float32)
    elif bits_per_sample == 32:
        samples = data.view("<i4").astype(np.int32)
    else:
        raise ValueError(f"Unsupported bit depth: {bits_per_sample}")

    return np.ascontiguousarray(samples.reshape(frames, num_channels).T)


def encode_frames(
    samples: NDArray[np.int32] | NDArray[np.float32],
    bits_per_sample: int,
    is_floating_point: bool,
) -> bytes:
    """Pack a planar array into interleaved little-endian frames.

    Args:
        samples: Planar array from :func:`prepare_samples`.
        bits_per_sample: 8, 16, 24 or 32.
        is_floating_point: Write 32-bit IEEE float instead of integers.

    Returns:
        The packed frame bytes.
    """
    interleaved = np.ascontiguousarray(samples.T)

    if is_floating_point:
        return interleaved.astype("<f4").tobytes()
    if bits_per_sample == 8:
        return ((interleaved >> 24) + 128).astype(np.uint8).tobytes()
    if bits_per_sample == 16:
        return (interleaved >> 16).astype("<i2").tobytes()
    if bits_per_sample == 24:
        shifted = (interleaved >> 8).astype("<i4")
        return shifted.view(np.uint8).reshape(-1, 4)[:, :3].tobytes()
    if bits_per_sample == 32:
        return interleaved.astype("<i4").tobytes()
    raise ValueError(f"Unsupported bit depth: {bits_per_sample}")


def to_float(samples: NDArray) -> NDArray[np.float32]:
    """Normalize decoded samples to float32."""
    if np.issubdtype(samples.dtype, np.floating):
        return samples.astype(np.float32, copy=False)
    return (samples.astype(np.float64) / INT32_FULL_SCALE).astype(np.float32)


def to_int32(samples: NDArray) -> NDArray[np.int32]:
    """Convert samples to left-justified int32, clipping floats to full scale."""
    if np.issubdtype(samples.dtype, np.floating):
        scaled = np.rint(np.clip(samples.astype(np.float64), -1.0, 1.0) * (INT32_FULL_SCALE - 1))
        return scaled.astype(np.int32)
    return samples.astype(np.int32, copy=False)


def prepare_samples(
    samples: NDArray | list,
    num_channels: int,
    is_floating_point: bool,
) -> NDArray[np.int32] | NDArray[np.float32]:
    """Validate a planar block and convert it to the writer's sample type.

    A 1-D array is accepted for mono.

    Raises:
        ValueError: If the channel dimension does not match.
    """
    array = np.asarray(samples)
    if array.ndim == 1 and num_channels == 1:
        array = array.reshape(1, -1)
    if array.ndim != 2 or array.shape[0] != num_channels:
        raise ValueError(
            f"Expected samples shaped ({num_channels}, frames), got {array.shape}"
        )

    if is_floating_point:
        return to_float(array)
    return to_int32(array)


def channel_min_max(
    samples: NDArray[np.int32] | NDArray[np.float32],
) -> list[tuple[float, float]]:
    """Per-channel (min, max) of a planar block, normalized to float.

    An empty block yields ``(0.0, 0.0)`` for every channel.
    """
    if samples.shape[1] == 0:
        return [(0.0, 0.0)] * samples.shape[0]

    normalized = to_float(samples)
    lows = normalized.min(axis=1)
    highs = normalized.max(axis=1)
    return [(float(lo), float(hi)) for lo, hi in zip(lows, highs, strict=True)]
