"""Memory-mapped access to the data chunk of a WAV file.

A :class:`MappedWavReader` maps a window of frames from disk with
``numpy.memmap`` and serves reads, single frames and level scans from it
without going through a stream.
"""

import logging
from pathlib import Path

import numpy as np
from numpy.typing import NDArray

from bwfkit.reader import WavReader
from bwfkit.riff import WindowError
from bwfkit.samples import channel_min_max, decode_frames, to_float

logger = logging.getLogger(__name__)


class MappedWavReader:
    """Window-mapped reader over a WAV file's sample frames.

    Geometry and data extent are taken from a :class:`WavReader` that has
    already parsed the file. Reads must fall inside the mapped window;
    anything else raises :class:`~bwfkit.riff.WindowError`.
    """

    def __init__(self, path: Path | str, reader: WavReader) -> None:
        self.path = Path(path)
        self.num_channels = reader.num_channels
        self.channel_layout = reader.channel_layout
        self.sample_rate = reader.sample_rate
        self.bits_per_sample = reader.bits_per_sample
        self.uses_floating_point_data = reader.uses_floating_point_data
        self.bytes_per_frame = reader.bytes_per_frame
        self.length_in_samples = reader.length_in_samples
        self.data_chunk_start = reader.data_chunk_start
        self.metadata = dict(reader.metadata)

        self.mapped_section: tuple[int, int] = (0, 0)
        self._map: np.memmap | None = None

    def map_entire_file(self) -> bool:
        return self.map_section_of_file(0, self.length_in_samples)

    def map_section_of_file(self, start_sample: int, end_sample: int) -> bool:
        """Map frames ``[start_sample, end_sample)``, clamped to the data chunk.

        Frames the file does not physically contain are left out of the window.

        Returns:
            True if a non-empty window is now mapped.
        """
        self.unmap()

        start = max(0, start_sample)
        end = min(end_sample, self.length_in_samples)
        if self.bytes_per_frame > 0:
            file_size = self.path.stat().st_size
            present = max(0, (file_size - self.data_chunk_start) // self.bytes_per_frame)
            end = min(end, present)
        if end <= start:
            return False

        self._map = np.memmap(
            self.path,
            dtype=np.uint8,
            mode="r",
            offset=self.data_chunk_start + start * self.bytes_per_frame,
            shape=((end - start) * self.bytes_per_frame,),
        )
        self.mapped_section = (start, end)
        logger.debug("Mapped frames [%d, %d) of %s", start, end, self.path)
        return True

    def unmap(self) -> None:
        self._map = None
        self.mapped_section = (0, 0)

    def _window(self, start_sample: int, num_samples: int) -> NDArray[np.uint8]:
        first, last = self.mapped_section
        if self._map is None or start_sample < first or start_sample + num_samples > last:
            raise WindowError(
                f"Frames [{start_sample}, {start_sample + num_samples}) are outside "
                f"the mapped window [{first}, {last})"
            )
        offset = (start_sample - first) * self.bytes_per_frame
        return self._map[offset : offset + num_samples * self.bytes_per_frame]

    def _decode(self, raw: NDArray[np.uint8]) -> NDArray:
        return decode_frames(
            raw, self.num_channels, self.bits_per_sample, self.uses_floating_point_data
        )

    def read(
        self, start_sample: int, num_samples: int, as_float: bool = False
    ) -> NDArray[np.int32] | NDArray[np.float32]:
        """Read frames from the window as a planar array.

        Frames past the end of the data chunk are returned as zeros; the rest
        of the request must be mapped.

        Raises:
            WindowError: If the in-file part of the request is not mapped.
        """
        float_out = as_float or self.uses_floating_point_data
        result = np.zeros(
            (self.num_channels, max(0, num_samples)),
            dtype=np.float32 if float_out else np.int32,
        )
        available = min(num_samples, self.length_in_samples - start_sample)
        if available <= 0:
            return result

        block = self._decode(self._window(start_sample, available))
        result[:, :available] = to_float(block) if float_out else block
        return result

    def get_sample(self, sample_index: int) -> NDArray[np.float32]:
        """One frame as normalized floats, one per channel.

        Raises:
            WindowError: If the frame is not mapped.
        """
        return to_float(self._decode(self._window(sample_index, 1)))[:, 0]

    def read_max_levels(
        self, start_sample: int, num_samples: int
    ) -> list[tuple[float, float]]:
        """Per-channel (min, max) over a range of frames.

        A range that is empty after clamping to the data chunk yields zeros.

        Raises:
            WindowError: If the clamped range is not mapped.
        """
        num_samples = min(num_samples, self.length_in_samples - start_sample)
        if num_samples <= 0 or start_sample < 0:
            return [(0.0, 0.0)] * self.num_channels

        block = self._decode(self._window(start_sample, num_samples))
        return channel_min_max(block)

    def close(self) -> None:
        self.unmap()

    def __enter__(self) -> "MappedWavReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
