"""Metadata chunk codecs and the registry that dispatches them.

Each codec turns one chunk body into metadata map entries and back. The
registry fixes the order chunks are written in and maps chunk tags (and LIST
sub-types) to decoders.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from bwfkit.chunks import acid, adtl, axml, bext, cue, inst, list_info, passthrough, smpl
from bwfkit.chunks.adtl import AdtlCounters
from bwfkit.riff import (
    ACID_ID,
    ADTL_ID,
    AXML_ID,
    BEXT_ID,
    CUE_ID,
    INFO_ID,
    INFO_LOWER_ID,
    INST_ID,
    INST_UPPER_ID,
    IXML_ID,
    LIST_ID,
    SMPL_ID,
    TRKN_ID,
    RawChunk,
    pad_even,
)
from bwfkit.types import MetadataMap

DecodeFn = Callable[[bytes, MetadataMap, AdtlCounters], None]
EncodeFn = Callable[[Mapping[str, str]], bytes]


@dataclass(frozen=True)
class ChunkCodec:
    """Decoder/encoder pair for one metadata chunk type."""

    tag: bytes
    decode: DecodeFn
    encode: EncodeFn
    list_type: bytes | None = None
    """LIST sub-type this codec handles; the body starts with it in both directions."""

    declared_length: int | None = None
    """Fixed header length, when it differs from the padded body length."""

    def encode_chunk(self, values: Mapping[str, str]) -> RawChunk | None:
        body = self.encode(values)
        if not body:
            return None
        return RawChunk(self.tag, pad_even(body), self.declared_length)


BEXT = ChunkCodec(BEXT_ID, bext.decode, bext.encode)
AXML = ChunkCodec(AXML_ID, axml.decode, axml.encode)
IXML = ChunkCodec(IXML_ID, passthrough.decode_ixml, passthrough.encode_ixml)
SMPL = ChunkCodec(SMPL_ID, smpl.decode, smpl.encode)
INST = ChunkCodec(INST_ID, inst.decode, inst.encode, declared_length=inst.DECLARED_LENGTH)
CUE = ChunkCodec(CUE_ID, cue.decode, cue.encode)
ADTL_LIST = ChunkCodec(LIST_ID, adtl.decode, adtl.encode, list_type=ADTL_ID)
INFO_LIST = ChunkCodec(LIST_ID, list_info.decode, list_info.encode, list_type=INFO_ID)
ACID = ChunkCodec(ACID_ID, acid.decode, acid.encode)
TRKN = ChunkCodec(TRKN_ID, passthrough.decode_trkn, passthrough.encode_trkn)

# Order chunks appear in a written header
ENCODE_ORDER: tuple[ChunkCodec, ...] = (
    BEXT,
    AXML,
    IXML,
    SMPL,
    INST,
    CUE,
    ADTL_LIST,
    INFO_LIST,
    ACID,
    TRKN,
)

_CHUNK_CODECS: dict[bytes, ChunkCodec] = {
    codec.tag: codec for codec in ENCODE_ORDER if codec.list_type is None
}
_CHUNK_CODECS[INST_UPPER_ID] = INST

_LIST_CODECS: dict[bytes, ChunkCodec] = {
    ADTL_ID: ADTL_LIST,
    INFO_ID: INFO_LIST,
    INFO_LOWER_ID: INFO_LIST,
}


def codec_for(tag: bytes, list_type: bytes | None = None) -> ChunkCodec | None:
    """Find the codec for a top-level chunk.

    Args:
        tag: The chunk FourCC.
        list_type: First four body bytes, consulted only for LIST chunks.

    Returns:
        The matching codec, or None for chunks carried as opaque bytes.
    """
    if tag == LIST_ID:
        return _LIST_CODECS.get(list_type or b"")
    return _CHUNK_CODECS.get(tag)


def encode_metadata_chunks(values: Mapping[str, str]) -> list[RawChunk]:
    """Encode every chunk the metadata map asks for, in header order."""
    if not values:
        return []

    chunks = []
    for codec in ENCODE_ORDER:
        chunk = codec.encode_chunk(values)
        if chunk is not None:
            chunks.append(chunk)
    return chunks


__all__ = [
    "ACID",
    "ADTL_LIST",
    "AXML",
    "AdtlCounters",
    "BEXT",
    "CUE",
    "ChunkCodec",
    "ENCODE_ORDER",
    "INFO_LIST",
    "INST",
    "IXML",
    "SMPL",
    "TRKN",
    "codec_for",
    "encode_metadata_chunks",
]
