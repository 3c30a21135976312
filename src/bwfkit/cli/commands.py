import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console
from rich.table import Table
from rich.text import Text

from bwfkit.channels import ChannelLayout, canonical_wav_layout, is_channel_layout_supported
from bwfkit.cli.validators import (
    validate_bit_depth,
    validate_key_value_pairs,
    validate_non_negative_integer,
)
from bwfkit.config import configure_logging, load_settings
from bwfkit.reader import CHANNEL_MASK, METADATA_SOURCE
from bwfkit.riff import RiffError
from bwfkit.validation import ValidationError
from bwfkit.wav import create_memory_mapped_reader, create_reader_for, replace_metadata_in_file
from bwfkit.writer import WavWriter

app = App(name="bwfkit", help="Inspect, tag and convert Broadcast WAV and RF64 files")
console = Console()

# Keys the reader derives from the file layout rather than from a metadata chunk
DERIVED_KEYS = (METADATA_SOURCE, CHANNEL_MASK)


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(message, style="bold red", markup=False, soft_wrap=True)


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(message, style="bold green", markup=False, soft_wrap=True)


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(message, style="bold yellow", markup=False, soft_wrap=True)


def editable_metadata(values: dict[str, str]) -> dict[str, str]:
    """Drop keys that are recomputed on every read."""
    return {key: value for key, value in values.items() if key not in DERIVED_KEYS}


@app.command
def info(file: Path) -> int:
    """
    Display format, framing and chunk information for a WAV file.

    Parameters
    ----------
    file: Path
        The path to the .wav file
    """
    if not file.exists():
        print_error(f"Error: File {file} does not exist")
        return 1

    with open(file, "rb") as f:
        try:
            reader = create_reader_for(f)
        except RiffError as e:
            print_error(f"Error: {e}")
            return 1
        if reader is None:
            print_error(f"Error: {file} is not a decodable WAV file")
            return 1

        duration = reader.length_in_samples / reader.sample_rate
        sample_type = "float" if reader.uses_floating_point_data else "integer"

        console.print(f"WAV file: {file}", markup=False)
        console.print(f"  Container: {'RF64' if reader.is_rf64 else 'RIFF'}")
        console.print(f"  Format tag: 0x{reader.format_tag:04X}")
        console.print(f"  Sample rate: {reader.sample_rate} Hz")
        names = ", ".join(reader.channel_layout.names)
        console.print(f"  Channels: {reader.num_channels} ({names})")
        console.print(f"  Bit depth: {reader.bits_per_sample} ({sample_type})")
        console.print(f"  Frames: {reader.length_in_samples}")
        console.print(f"  Duration: {duration:.3f} s")
        console.print(f"  Data: {reader.data_length} bytes at offset {reader.data_chunk_start}")
        if reader.bwav_size:
            console.print(
                f"  bext: {reader.bwav_size} bytes at offset {reader.bwav_chunk_start}"
            )
        console.print(f"  Metadata keys: {len(editable_metadata(reader.metadata))}")
        if reader.extra_chunks:
            console.print("  Other chunks:")
            for chunk in reader.extra_chunks:
                tag = chunk.tag.decode("latin-1")
                console.print(f"    {tag!r}: {len(chunk.data)} bytes", markup=False)

    return 0


@app.command
def tags(
    file: Path,
    assign: Annotated[
        list[str] | None, Parameter(name=["--set"], validator=validate_key_value_pairs)
    ] = None,
    remove: list[str] | None = None,
    output_json: Annotated[bool, Parameter(name=["--json"])] = False,
) -> int:
    """
    Print a WAV file's metadata, optionally editing it in place.

    Parameters
    ----------
    file: Path
        The path to the .wav file
    assign: list[str] | None
        KEY=VALUE pairs to add or overwrite
    remove: list[str] | None
        Keys to delete
    output_json: bool
        Output metadata as JSON (default: False)
    """
    if not file.exists():
        print_error(f"Error: File {file} does not exist")
        return 1

    with open(file, "rb") as f:
        try:
            reader = create_reader_for(f)
        except RiffError as e:
            print_error(f"Error: {e}")
            return 1
        if reader is None:
            print_error(f"Error: {file} is not a decodable WAV file")
            return 1
        metadata = editable_metadata(reader.metadata)

    if assign or remove:
        for pair in assign or []:
            key, _, value = pair.partition("=")
            metadata[key.strip()] = value
        for key in remove or []:
            if metadata.pop(key, None) is None:
                print_warning(f"Key {key!r} not present; nothing to remove")

        try:
            replace_metadata_in_file(file, metadata)
        except (RiffError, ValidationError, OSError) as e:
            print_error(f"Error rewriting {file}: {e}")
            return 1
        print_success(f"Updated metadata in {file}")

    if output_json:
        console.print(
            json.dumps(metadata, indent=2), markup=False, highlight=False, soft_wrap=True
        )
        return 0

    table = Table(title=Text(str(file)))
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in metadata.items():
        table.add_row(key, Text(value))
    console.print(table)
    return 0


@app.command
def levels(
    file: Path,
    start: Annotated[int, Parameter(validator=validate_non_negative_integer)] = 0,
    count: Annotated[int | None, Parameter(validator=validate_non_negative_integer)] = None,
) -> int:
    """
    Show per-channel minimum and maximum sample levels.

    Parameters
    ----------
    file: Path
        The path to the .wav file
    start: int
        First frame to scan
    count: int | None
        Number of frames to scan (default: to the end of the file)
    """
    if not file.exists():
        print_error(f"Error: File {file} does not exist")
        return 1

    try:
        mapped = create_memory_mapped_reader(file)
    except RiffError as e:
        print_error(f"Error: {e}")
        return 1
    if mapped is None:
        print_error(f"Error: {file} has no decodable audio")
        return 1

    if count is None:
        count = max(0, mapped.length_in_samples - start)

    with mapped:
        mapped.map_section_of_file(start, start + count)
        channel_levels = mapped.read_max_levels(start, count)

    table = Table(title=Text(f"{file} frames {start}-{start + count}"))
    table.add_column("Channel")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    for name, (low, high) in zip(mapped.channel_layout.names, channel_levels, strict=True):
        table.add_row(name, f"{low:.6f}", f"{high:.6f}")
    console.print(table)
    return 0


@app.command
def convert(
    source: Path,
    output: Path,
    bits: Annotated[int | None, Parameter(validator=validate_bit_depth)] = None,
    floating_point: Annotated[bool | None, Parameter(name=["--float"])] = None,
    pad_header: bool = True,
) -> int:
    """
    Re-encode a WAV file at a different bit depth, keeping its metadata.

    Parameters
    ----------
    source: Path
        The .wav file to read
    output: Path
        The destination .wav file
    bits: int | None
        Output bit depth: 8, 16, 24 or 32 (default: same as source)
    floating_point: bool | None
        Write 32-bit IEEE float samples (default: float only if the source is)
    pad_header: bool
        Reserve header space for a later RF64 upgrade (default: True)
    """
    if not source.exists():
        print_error(f"Error: File {source} does not exist")
        return 1

    settings = replace(load_settings(), pad_header=pad_header)

    with open(source, "rb") as src:
        try:
            reader = create_reader_for(src, settings)
        except RiffError as e:
            print_error(f"Error: {e}")
            return 1
        if reader is None:
            print_error(f"Error: {source} is not a decodable WAV file")
            return 1

        out_bits = bits or reader.bits_per_sample
        if floating_point is None:
            floating_point = reader.uses_floating_point_data and out_bits == 32
        if floating_point and out_bits != 32:
            print_error("Error: floating-point output requires --bits 32")
            return 1

        layout: ChannelLayout = reader.channel_layout
        if not is_channel_layout_supported(layout):
            print_warning("Source channel layout cannot be written; using the default layout")
            layout = canonical_wav_layout(reader.num_channels)

        output.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(output, "wb") as dst:
                with WavWriter(
                    dst,
                    reader.sample_rate,
                    layout,
                    out_bits,
                    editable_metadata(reader.metadata),
                    floating_point=floating_point,
                    extra_chunks=reader.extra_chunks,
                    settings=settings,
                ) as writer:
                    frames = writer.write_from_reader(reader)
        except (RiffError, ValidationError, ValueError, OSError) as e:
            print_error(f"Error writing output: {e}")
            return 1

    print_success(f"Converted {source} -> {output}")
    console.print(f"  Frames: {frames}")
    console.print(f"  Bit depth: {out_bits} ({'float' if floating_point else 'integer'})")
    return 0


def main() -> None:
    configure_logging()
    sys.exit(app())


if __name__ == "__main__":
    main()
