"""Broadcast Wave (bext) chunk codec."""

from collections.abc import Mapping

from bwfkit.riff import int_value
from bwfkit.types import BroadcastWaveRecord, MetadataMap

BWAV_DESCRIPTION = "bwav description"
BWAV_ORIGINATOR = "bwav originator"
BWAV_ORIGINATOR_REF = "bwav originator ref"
BWAV_ORIGINATION_DATE = "bwav origination date"
BWAV_ORIGINATION_TIME = "bwav origination time"
BWAV_TIME_REFERENCE = "bwav time reference"
BWAV_CODING_HISTORY = "bwav coding history"

KEYS = (
    BWAV_DESCRIPTION,
    BWAV_ORIGINATOR,
    BWAV_ORIGINATOR_REF,
    BWAV_ORIGINATION_DATE,
    BWAV_ORIGINATION_TIME,
    BWAV_TIME_REFERENCE,
    BWAV_CODING_HISTORY,
)


def decode(body: bytes, values: MetadataMap, state: object = None) -> None:
    record = BroadcastWaveRecord.from_bytes(body)
    values[BWAV_DESCRIPTION] = record.description
    values[BWAV_ORIGINATOR] = record.originator
    values[BWAV_ORIGINATOR_REF] = record.originator_ref
    values[BWAV_ORIGINATION_DATE] = record.origination_date
    values[BWAV_ORIGINATION_TIME] = record.origination_time
    values[BWAV_TIME_REFERENCE] = str(record.time_reference)
    values[BWAV_CODING_HISTORY] = record.coding_history


def encode(values: Mapping[str, str]) -> bytes:
    """Build a bext body, or return empty bytes when there is nothing to say."""
    record = BroadcastWaveRecord(
        description=values.get(BWAV_DESCRIPTION, ""),
        originator=values.get(BWAV_ORIGINATOR, ""),
        originator_ref=values.get(BWAV_ORIGINATOR_REF, ""),
        origination_date=values.get(BWAV_ORIGINATION_DATE, ""),
        origination_time=values.get(BWAV_ORIGINATION_TIME, ""),
        time_reference=int_value(values.get(BWAV_TIME_REFERENCE)) & 0xFFFFFFFFFFFFFFFF,
        coding_history=values.get(BWAV_CODING_HISTORY, ""),
    )
    if record.is_empty:
        return b""
    return record.to_bytes()
