"""LIST/INFO chunk codec.

Each INFO entry is a four-character code followed by a NUL-terminated string.
The codes double as metadata keys.
"""

from collections.abc import Mapping

from bwfkit.riff import INFO_ID, fixed_string, pack_chunk_header, pad_even, unpack_le
from bwfkit.types import MetadataMap

RIFF_INFO_ARCHIVAL_LOCATION = "IARL"
RIFF_INFO_ARTIST = "IART"
RIFF_INFO_BASE_URL = "IBSU"
RIFF_INFO_CINEMATOGRAPHER = "ICNM"
RIFF_INFO_COMMENT = "CMNT"
RIFF_INFO_COMMENT2 = "ICMT"
RIFF_INFO_COMMENTS = "COMM"
RIFF_INFO_COMMISSIONED = "ICMS"
RIFF_INFO_COPYRIGHT = "ICOP"
RIFF_INFO_COSTUME_DESIGNER = "ICDS"
RIFF_INFO_COUNTRY = "ICNT"
RIFF_INFO_CROPPED = "ICRP"
RIFF_INFO_DATE_CREATED = "ICRD"
RIFF_INFO_DATE_TIME_ORIGINAL = "IDIT"
RIFF_INFO_DEFAULT_AUDIO_STREAM = "ICAS"
RIFF_INFO_DIMENSION = "IDIM"
RIFF_INFO_DIRECTORY = "DIRC"
RIFF_INFO_DISTRIBUTED_BY = "IDST"
RIFF_INFO_DOTS_PER_INCH = "IDPI"
RIFF_INFO_EDITED_BY = "IEDT"
RIFF_INFO_EIGHTH_LANGUAGE = "IAS8"
RIFF_INFO_ENCODED_BY = "CODE"
RIFF_INFO_END_TIMECODE = "TCDO"
RIFF_INFO_ENGINEER = "IENG"
RIFF_INFO_FIFTH_LANGUAGE = "IAS5"
RIFF_INFO_FIRST_LANGUAGE = "IAS1"
RIFF_INFO_FOURTH_LANGUAGE = "IAS4"
RIFF_INFO_GENRE = "GENR"
RIFF_INFO_KEYWORDS = "IKEY"
RIFF_INFO_LANGUAGE = "LANG"
RIFF_INFO_LENGTH = "TLEN"
RIFF_INFO_LIGHTNESS = "ILGT"
RIFF_INFO_LOCATION = "LOCA"
RIFF_INFO_LOGO_ICON_URL = "ILIU"
RIFF_INFO_LOGO_URL = "ILGU"
RIFF_INFO_MEDIUM = "IMED"
RIFF_INFO_MORE_INFO_BANNER_IMAGE = "IMBI"
RIFF_INFO_MORE_INFO_BANNER_URL = "IMBU"
RIFF_INFO_MORE_INFO_TEXT = "IMIT"
RIFF_INFO_MORE_INFO_URL = "IMIU"
RIFF_INFO_MUSIC_BY = "IMUS"
RIFF_INFO_NINTH_LANGUAGE = "IAS9"
RIFF_INFO_NUMBER_OF_PARTS = "PRT2"
RIFF_INFO_ORGANISATION = "TORG"
RIFF_INFO_PART = "PRT1"
RIFF_INFO_PRODUCED_BY = "IPRO"
RIFF_INFO_PRODUCT_NAME = "IPRD"
RIFF_INFO_PRODUCTION_DESIGNER = "IPDS"
RIFF_INFO_PRODUCTION_STUDIO = "ISDT"
RIFF_INFO_RATE = "RATE"
RIFF_INFO_RATED = "AGES"
RIFF_INFO_RATING = "IRTD"
RIFF_INFO_RIPPED_BY = "IRIP"
RIFF_INFO_SECONDARY_GENRE = "ISGN"
RIFF_INFO_SECOND_LANGUAGE = "IAS2"
RIFF_INFO_SEVENTH_LANGUAGE = "IAS7"
RIFF_INFO_SHARPNESS = "ISHP"
RIFF_INFO_SIXTH_LANGUAGE = "IAS6"
RIFF_INFO_SOFTWARE = "ISFT"
RIFF_INFO_SOUND_SCHEME_TITLE = "DISP"
RIFF_INFO_SOURCE = "ISRC"
RIFF_INFO_SOURCE_FROM = "ISRF"
RIFF_INFO_STARRING_ISTR = "ISTR"
RIFF_INFO_STARRING_STAR = "STAR"
RIFF_INFO_START_TIMECODE = "TCOD"
RIFF_INFO_STATISTICS = "STAT"
RIFF_INFO_SUBJECT = "ISBJ"
RIFF_INFO_TAPE_NAME = "TAPE"
RIFF_INFO_TECHNICIAN = "ITCH"
RIFF_INFO_THIRD_LANGUAGE = "IAS3"
RIFF_INFO_TIME_CODE = "ISMP"
RIFF_INFO_TITLE = "INAM"
RIFF_INFO_TRACK_NO = "IPRT"
RIFF_INFO_TRACK_NUMBER = "TRCK"
RIFF_INFO_URL = "TURL"
RIFF_INFO_VEGAS_VERSION_MAJOR = "VMAJ"
RIFF_INFO_VEGAS_VERSION_MINOR = "VMIN"
RIFF_INFO_VERSION = "TVER"
RIFF_INFO_WATERMARK_URL = "IWMU"
RIFF_INFO_WRITTEN_BY = "IWRI"
RIFF_INFO_YEAR = "YEAR"

# Encode order
INFO_TYPES: tuple[str, ...] = (
    RIFF_INFO_ARCHIVAL_LOCATION,
    RIFF_INFO_ARTIST,
    RIFF_INFO_BASE_URL,
    RIFF_INFO_CINEMATOGRAPHER,
    RIFF_INFO_COMMENT,
    RIFF_INFO_COMMENTS,
    RIFF_INFO_COMMENT2,
    RIFF_INFO_COMMISSIONED,
    RIFF_INFO_COPYRIGHT,
    RIFF_INFO_COSTUME_DESIGNER,
    RIFF_INFO_COUNTRY,
    RIFF_INFO_CROPPED,
    RIFF_INFO_DATE_CREATED,
    RIFF_INFO_DATE_TIME_ORIGINAL,
    RIFF_INFO_DEFAULT_AUDIO_STREAM,
    RIFF_INFO_DIMENSION,
    RIFF_INFO_DIRECTORY,
    RIFF_INFO_DISTRIBUTED_BY,
    RIFF_INFO_DOTS_PER_INCH,
    RIFF_INFO_EDITED_BY,
    RIFF_INFO_EIGHTH_LANGUAGE,
    RIFF_INFO_ENCODED_BY,
    RIFF_INFO_END_TIMECODE,
    RIFF_INFO_ENGINEER,
    RIFF_INFO_FIFTH_LANGUAGE,
    RIFF_INFO_FIRST_LANGUAGE,
    RIFF_INFO_FOURTH_LANGUAGE,
    RIFF_INFO_GENRE,
    RIFF_INFO_KEYWORDS,
    RIFF_INFO_LANGUAGE,
    RIFF_INFO_LENGTH,
    RIFF_INFO_LIGHTNESS,
    RIFF_INFO_LOCATION,
    RIFF_INFO_LOGO_ICON_URL,
    RIFF_INFO_LOGO_URL,
    RIFF_INFO_MEDIUM,
    RIFF_INFO_MORE_INFO_BANNER_IMAGE,
    RIFF_INFO_MORE_INFO_BANNER_URL,
    RIFF_INFO_MORE_INFO_TEXT,
    RIFF_INFO_MORE_INFO_URL,
    RIFF_INFO_MUSIC_BY,
    RIFF_INFO_NINTH_LANGUAGE,
    RIFF_INFO_NUMBER_OF_PARTS,
    RIFF_INFO_ORGANISATION,
    RIFF_INFO_PART,
    RIFF_INFO_PRODUCED_BY,
    RIFF_INFO_PRODUCT_NAME,
    RIFF_INFO_PRODUCTION_DESIGNER,
    RIFF_INFO_PRODUCTION_STUDIO,
    RIFF_INFO_RATE,
    RIFF_INFO_RATED,
    RIFF_INFO_RATING,
    RIFF_INFO_RIPPED_BY,
    RIFF_INFO_SECONDARY_GENRE,
    RIFF_INFO_SECOND_LANGUAGE,
    RIFF_INFO_SEVENTH_LANGUAGE,
    RIFF_INFO_SHARPNESS,
    RIFF_INFO_SIXTH_LANGUAGE,
    RIFF_INFO_SOFTWARE,
    RIFF_INFO_SOUND_SCHEME_TITLE,
    RIFF_INFO_SOURCE,
    RIFF_INFO_SOURCE_FROM,
    RIFF_INFO_STARRING_ISTR,
    RIFF_INFO_STARRING_STAR,
    RIFF_INFO_START_TIMECODE,
    RIFF_INFO_STATISTICS,
    RIFF_INFO_SUBJECT,
    RIFF_INFO_TAPE_NAME,
    RIFF_INFO_TECHNICIAN,
    RIFF_INFO_THIRD_LANGUAGE,
    RIFF_INFO_TIME_CODE,
    RIFF_INFO_TITLE,
    RIFF_INFO_TRACK_NO,
    RIFF_INFO_TRACK_NUMBER,
    RIFF_INFO_URL,
    RIFF_INFO_VEGAS_VERSION_MAJOR,
    RIFF_INFO_VEGAS_VERSION_MINOR,
    RIFF_INFO_VERSION,
    RIFF_INFO_WATERMARK_URL,
    RIFF_INFO_WRITTEN_BY,
    RIFF_INFO_YEAR,
)

_KNOWN_TYPES = frozenset(INFO_TYPES)


def decode(body: bytes, values: MetadataMap, state: object = None) -> None:
    """Decode a LIST body whose first four bytes are the ``INFO`` list type."""
    pos = 4
    end = len(body)
    while pos + 8 <= end:
        info_type = body[pos : pos + 4].decode("latin-1").upper()
        (length,) = unpack_le("I", body, pos + 4)
        pos += 8
        available = min(length, end - pos)
        if available <= 0:
            break

        if info_type in _KNOWN_TYPES:
            values[info_type] = fixed_string(body[pos : pos + available])
        pos += length + (length & 1)


def encode(values: Mapping[str, str]) -> bytes:
    entries = []
    for info_type in INFO_TYPES:
        value = values.get(info_type, "")
        if not value:
            continue
        text = pad_even(value.encode("utf-8") + b"\x00")
        entries.append(pack_chunk_header(info_type.encode("ascii"), len(text)) + text)

    if not entries:
        return b""
    return INFO_ID + b"".join(entries)
