"""Validation of writer geometry and metadata maps before encoding."""

from collections.abc import Mapping
from dataclasses import dataclass

from bwfkit.channels import ChannelLayout, is_channel_layout_supported
from bwfkit.chunks import cue, inst, smpl
from bwfkit.riff import int_value
from bwfkit.samples import SUPPORTED_BIT_DEPTHS

METADATA_SOURCE = "MetaDataSource"

POSSIBLE_SAMPLE_RATES = (
    8000,
    11025,
    12000,
    16000,
    22050,
    32000,
    44100,
    48000,
    88200,
    96000,
    176400,
    192000,
    352800,
    384000,
)


class ValidationError(Exception):
    """Error during WAV geometry or metadata validation."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


@dataclass
class ValidationResult:
    """Result of validation with optional warnings."""

    valid: bool
    errors: list[str]
    warnings: list[str]

    @classmethod
    def success(cls, warnings: list[str] | None = None) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(valid=True, errors=[], warnings=warnings or [])

    @classmethod
    def failure(cls, errors: list[str], warnings: list[str] | None = None) -> "ValidationResult":
        """Create a failed validation result."""
        return cls(valid=False, errors=errors, warnings=warnings or [])


def validate_geometry(
    sample_rate: int,
    layout: ChannelLayout,
    bits_per_sample: int,
    is_floating_point: bool,
) -> ValidationResult:
    """Check writer parameters.

    Errors:
    - bit depth outside 8/16/24/32
    - floating point at anything but 32 bits
    - no channels, or a layout with roles WAV cannot express
    - non-positive sample rate

    An unusual but positive sample rate is only a warning.

    Args:
        sample_rate: Frames per second.
        layout: Channel layout to be written.
        bits_per_sample: Container bit depth.
        is_floating_point: Whether samples are IEEE float.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if bits_per_sample not in SUPPORTED_BIT_DEPTHS:
        errors.append(
            f"Unsupported bit depth {bits_per_sample}; expected one of {SUPPORTED_BIT_DEPTHS}"
        )
    elif is_floating_point and bits_per_sample != 32:
        errors.append(f"Floating-point samples must be 32-bit, got {bits_per_sample}")

    if layout.size == 0:
        errors.append("At least one channel is required")
    elif not is_channel_layout_supported(layout):
        errors.append(f"Channel layout {layout.names} cannot be written as WAV")

    if sample_rate <= 0:
        errors.append(f"Sample rate must be positive, got {sample_rate}")
    elif sample_rate not in POSSIBLE_SAMPLE_RATES:
        warnings.append(f"Sample rate {sample_rate} is not a standard WAV rate")

    if errors:
        return ValidationResult.failure(errors, warnings)
    return ValidationResult.success(warnings)


def validate_metadata(values: Mapping[str, str]) -> ValidationResult:
    """Check a metadata map for content the encoders would mangle.

    Duplicate cue identifiers are an error. Clamped loop counts, an inst chunk
    that will be dropped, and metadata read from AIFF are warnings.

    Args:
        values: The metadata map about to be written.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    num_cues = int_value(values.get(cue.NUM_CUE_POINTS))
    seen: dict[int, int] = {}
    for i in range(max(0, num_cues)):
        identifier = int_value(values.get(cue.cue_key(i, "Identifier")))
        if identifier in seen:
            errors.append(
                f"Cue {i} reuses identifier {identifier} from cue {seen[identifier]}"
            )
        else:
            seen[identifier] = i

    num_loops = int_value(values.get(smpl.NUM_SAMPLE_LOOPS))
    if num_loops > 64:
        warnings.append(f"{num_loops} sample loops requested; only 64 will be written")
    elif num_loops < 0:
        warnings.append(f"Negative sample loop count {num_loops} treated as 0")

    if (inst.LOW_NOTE in values) != (inst.HIGH_NOTE in values):
        warnings.append("inst chunk needs both LowNote and HighNote; it will be omitted")

    if values.get(METADATA_SOURCE) == "AIFF":
        warnings.append("Metadata was read from AIFF; loop and marker semantics may differ")

    if errors:
        return ValidationResult.failure(errors, warnings)
    return ValidationResult.success(warnings)
