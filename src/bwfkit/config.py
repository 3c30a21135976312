"""Codec settings, with defaults overridable from the environment."""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class CodecSettings:
    """Knobs shared by the writer and the file-level helpers."""

    pad_header: bool = True
    """Reserve a JUNK chunk so the header can grow into ds64 if the file passes 4 GiB."""

    validate_metadata: bool = True
    """Check metadata maps before encoding them."""

    preserve_unknown_chunks: bool = True
    """Carry unrecognised chunks across a metadata rewrite."""

    copy_block_frames: int = 4096
    """Frames per block when streaming one file into another."""

    log_level: str = "WARNING"


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning("Ignoring %s=%r: expected a boolean", name, value)
    return default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.warning("Ignoring %s=%r: expected an integer", name, value)
        return default
    if parsed <= 0:
        logger.warning("Ignoring %s=%r: must be positive", name, value)
        return default
    return parsed


def load_settings() -> CodecSettings:
    """Build settings from ``BWFKIT_*`` environment variables."""
    defaults = CodecSettings()
    return CodecSettings(
        pad_header=_env_flag("BWFKIT_PAD_HEADER", defaults.pad_header),
        validate_metadata=_env_flag("BWFKIT_VALIDATE", defaults.validate_metadata),
        preserve_unknown_chunks=_env_flag(
            "BWFKIT_PRESERVE_CHUNKS", defaults.preserve_unknown_chunks
        ),
        copy_block_frames=_env_int("BWFKIT_COPY_BLOCK_FRAMES", defaults.copy_block_frames),
        log_level=os.getenv("BWFKIT_LOG_LEVEL", defaults.log_level).upper(),
    )


def configure_logging(level: str | None = None) -> None:
    """Set up root logging for command-line use. Libraries should not call this."""
    logging.basicConfig(
        level=getattr(logging, (level or load_settings().log_level).upper(), logging.WARNING),
        format=LOG_FORMAT,
    )
