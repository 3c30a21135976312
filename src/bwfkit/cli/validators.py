from bwfkit.samples import SUPPORTED_BIT_DEPTHS


def validate_key_value_pairs(type_: object, pairs: list[str] | None) -> None:
    """Validate that every entry looks like KEY=VALUE with a non-empty key."""
    if not pairs:
        return

    for pair in pairs:
        key, sep, _ = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected KEY=VALUE, got {pair!r}")
        if not key.strip():
            raise ValueError(f"Metadata key cannot be empty: {pair!r}")


def validate_bit_depth(type_: object, bits: int | None) -> None:
    if bits is None:
        return

    if bits not in SUPPORTED_BIT_DEPTHS:
        raise ValueError(f"Bit depth must be one of {', '.join(map(str, SUPPORTED_BIT_DEPTHS))}")


def validate_non_negative_integer(type_: object, value: int | None) -> None:
    if value is not None and value < 0:
        raise ValueError("Value must be zero or positive")
