"""axml chunk codec.

Only the ISRC carried in an EBUCore document is mapped; the rest of the XML
is not interpreted.
"""

import logging
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from xml.sax.saxutils import escape

from bwfkit.types import MetadataMap

logger = logging.getLogger(__name__)

ISRC = "ISRC"

_ISRC_PATH = ("coreMetadata", "identifier", "identifier")

_EBUCORE_TEMPLATE = (
    '<ebucore:ebuCoreMain xmlns:dc="http://purl.org/dc/elements/1.1/" '
    'xmlns:ebucore="urn:ebu:metadata-schema:ebuCore_2012">'
    "<ebucore:coreMetadata>"
    '<ebucore:identifier typeLabel="GUID" '
    'typeDefinition="Globally Unique Identifier" '
    'formatLabel="ISRC" '
    'formatDefinition="International Standard Recording Code" '
    'formatLink="http://www.ebu.ch/metadata/cs/ebu_IdentifierTypeCodeCS.xml#3.7">'
    "<dc:identifier>ISRC:{isrc}</dc:identifier>"
    "</ebucore:identifier>"
    "</ebucore:coreMetadata>"
    "</ebucore:ebuCoreMain>"
)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _first_child(element: ET.Element, name: str) -> ET.Element | None:
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def extract_isrc(document: str) -> str:
    """Pull the ISRC out of an EBUCore document, or return an empty string."""
    try:
        root = ET.fromstring(document)
    except ET.ParseError as e:
        logger.debug("Ignoring unparseable axml document: %s", e)
        return ""

    if _local_name(root.tag) != "ebuCoreMain":
        return ""

    element: ET.Element | None = root
    for name in _ISRC_PATH:
        element = _first_child(element, name)
        if element is None:
            return ""

    text = "".join(element.itertext())
    marker = text.lower().find("isrc:")
    if marker < 0:
        return ""
    return text[marker + len("isrc:") :]


def decode(body: bytes, values: MetadataMap, state: object = None) -> None:
    document = body.rstrip(b"\x00").decode("utf-8", errors="replace")
    isrc = extract_isrc(document)
    if isrc:
        values[ISRC] = isrc


def encode(values: Mapping[str, str]) -> bytes:
    isrc = values.get(ISRC, "")
    if not isrc:
        return b""
    return _EBUCORE_TEMPLATE.format(isrc=escape(isrc)).encode("utf-8") + b"\x00"
