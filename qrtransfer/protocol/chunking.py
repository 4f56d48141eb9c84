"""
QR Chunking Module

Splits an exported snapshot into QR-sized chunks and reassembles it.

Constraints:
- Max 1200 base64 characters of payload per QR
- Wire format: {"v":1,"i":<index>,"t":<total>,"h":"<fingerprint>","d":"<slice>"}
- Every chunk carries the fingerprint of the WHOLE payload

Usage:
    # Export side
    chunks = compress_and_chunk(snapshot)
    texts = [encode_chunk_to_wire(c) for c in chunks]
    # Render each text as a QR code

    # Import side
    chunks = [decode_chunk_from_wire(t) for t in scanned_texts]
    snapshot = reassemble_chunks([c for c in chunks if c is not None])
    if snapshot is None:
        # Ask the user to rescan
        ...
"""

import math
from typing import Any, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..config import MAX_CHUNK_SIZE, PROTOCOL_VERSION, WARN_CHUNKS
from ..logging import CHUNKING, REASSEMBLY, get_logger
from .codec import decode_payload, encode_payload
from .errors import (
    CrossTransferMixing,
    DecodeFailure,
    FinalIntegrityFailure,
    IncompleteSet,
    IndexGapOrDuplicate,
    TransferError,
)
from .fingerprint import fingerprint as compute_fingerprint
from .fingerprint import verify_fingerprint

logger = get_logger(__name__)


class Chunk(BaseModel):
    """One QR code worth of a transfer."""

    model_config = ConfigDict(frozen=True, strict=True, populate_by_name=True)

    version: int = Field(..., alias="v")
    index: int = Field(..., alias="i", ge=1)
    total: int = Field(..., alias="t", ge=1)
    fingerprint: str = Field(..., alias="h")
    data: str = Field(..., alias="d")

    @model_validator(mode="after")
    def _index_within_total(self):
        if self.index > self.total:
            raise ValueError(f"index {self.index} exceeds total {self.total}")
        return self

    @property
    def transfer_key(self):
        """(fingerprint, total) identifies the transfer this chunk belongs to."""
        return (self.fingerprint, self.total)


# ============================================================================
# Export
# ============================================================================

def split_payload(transcoded: str, max_chunk_size: int = MAX_CHUNK_SIZE) -> List[Chunk]:
    """
    Split a transcoded payload into chunks.

    An empty payload still produces one (empty) chunk.

    Args:
        transcoded: Full base64 payload
        max_chunk_size: Max characters of payload per chunk

    Returns:
        List[Chunk]: Chunks in index order
    """
    if max_chunk_size < 1:
        raise ValueError("max_chunk_size must be positive")

    full_hash = compute_fingerprint(transcoded)
    total = max(1, math.ceil(len(transcoded) / max_chunk_size))

    chunks = []
    for i in range(total):
        start = i * max_chunk_size
        end = min(start + max_chunk_size, len(transcoded))
        chunks.append(Chunk(
            version=PROTOCOL_VERSION,
            index=i + 1,
            total=total,
            fingerprint=full_hash,
            data=transcoded[start:end]
        ))

    return chunks


def compress_and_chunk(data: Any, max_chunk_size: int = MAX_CHUNK_SIZE) -> List[Chunk]:
    """
    Compress a value and split it into QR chunks.

    Args:
        data: JSON-representable value to export

    Returns:
        List[Chunk]: Chunks in index order

    Raises:
        TypeError / ValueError: data is not JSON-representable
    """
    transcoded = encode_payload(data)
    chunks = split_payload(transcoded, max_chunk_size)

    logger.debug(
        "%s Encoded %d chars into %d chunk(s), fingerprint %s",
        CHUNKING, len(transcoded), len(chunks), chunks[0].fingerprint
    )
    if len(chunks) > WARN_CHUNKS:
        logger.warning(
            "%s Export needs %d QR codes; scanning more than %d is slow",
            CHUNKING, len(chunks), WARN_CHUNKS
        )

    return chunks


# ============================================================================
# Wire format
# ============================================================================

def encode_chunk_to_wire(chunk: Chunk) -> str:
    """Serialize a chunk to the compact JSON text one QR code carries."""
    return chunk.model_dump_json(by_alias=True)


def decode_chunk_from_wire(text: Union[str, bytes]) -> Optional[Chunk]:
    """
    Parse scanned QR text into a chunk.

    Anything that is not exactly a chunk (garbage scans, codes from other
    apps, unknown protocol versions) is rejected.

    Args:
        text: Raw scanned text

    Returns:
        Chunk or None if invalid
    """
    if isinstance(text, bytes):
        try:
            text = text.decode('utf-8')
        except UnicodeDecodeError:
            logger.debug("%s Rejected scan: not UTF-8", CHUNKING)
            return None

    if not isinstance(text, str):
        return None

    try:
        chunk = Chunk.model_validate_json(text)
    except ValidationError as e:
        logger.debug("%s Rejected scan: %d validation error(s)", CHUNKING, e.error_count())
        return None

    if chunk.version != PROTOCOL_VERSION:
        logger.debug("%s Rejected scan: unsupported version %d", CHUNKING, chunk.version)
        return None

    return chunk


# ============================================================================
# Import
# ============================================================================

def reassemble_chunks_or_raise(chunks: Iterable[Chunk]) -> Any:
    """
    Validate a complete chunk set and decode the original value.

    Args:
        chunks: All chunks of one transfer, in any order

    Returns:
        The original value

    Raises:
        IncompleteSet: count does not match the declared total
        CrossTransferMixing: fingerprints or versions differ
        IndexGapOrDuplicate: indices are not exactly 1..total
        FinalIntegrityFailure: joined payload does not match the fingerprint
        DecodeFailure: joined payload is not valid base64/gzip/JSON
    """
    chunks = list(chunks)
    if not chunks:
        raise IncompleteSet("no chunks")

    expected_hash = chunks[0].fingerprint
    expected_total = chunks[0].total
    expected_version = chunks[0].version

    if len(chunks) != expected_total:
        raise IncompleteSet(f"got {len(chunks)} chunk(s), expected {expected_total}")

    # Scan order is not trusted
    ordered = sorted(chunks, key=lambda c: c.index)

    for chunk in ordered:
        if chunk.fingerprint != expected_hash or chunk.version != expected_version:
            raise CrossTransferMixing(
                f"chunk {chunk.index} belongs to transfer {chunk.fingerprint}, "
                f"expected {expected_hash}"
            )

    for position, chunk in enumerate(ordered, start=1):
        if chunk.index != position:
            raise IndexGapOrDuplicate(f"missing chunk {position}")

    transcoded = "".join(c.data for c in ordered)

    if not verify_fingerprint(transcoded, expected_hash):
        raise FinalIntegrityFailure(
            f"payload hashes to {compute_fingerprint(transcoded)}, declared {expected_hash}"
        )

    return decode_payload(transcoded)


def reassemble_chunks(chunks: Iterable[Chunk]) -> Optional[Any]:
    """
    Reassemble chunks back into the original value.

    Args:
        chunks: All chunks of one transfer, in any order

    Returns:
        The original value, or None if validation or decoding fails
    """
    try:
        return reassemble_chunks_or_raise(chunks)
    except DecodeFailure as e:
        logger.warning("%s Failed to decode payload: %s", REASSEMBLY, e.message)
    except TransferError as e:
        logger.warning("%s Rejected chunk set (%s): %s", REASSEMBLY, e.code, e.message)
    return None


def reported_size(chunks: Iterable[Chunk]) -> str:
    """Human-readable size of the transcoded payload carried by the chunks."""
    total_bytes = sum(len(chunk.data) for chunk in chunks)
    if total_bytes < 1024:
        return f"{total_bytes} bytes"
    return f"{total_bytes / 1024:.1f} KB"


if __name__ == '__main__':
    print("=== QR Chunking Test ===")

    snapshot = {
        "notes": {
            f"2025-01-{day:02d}": [{"id": str(day), "title": f"Note {day}"}]
            for day in range(1, 29)
        }
    }

    chunks = compress_and_chunk(snapshot, max_chunk_size=100)
    print(f"Chunks: {len(chunks)} ({reported_size(chunks)})")
    for chunk in chunks:
        print(f"  {encode_chunk_to_wire(chunk)[:60]}...")

    recovered = reassemble_chunks(list(reversed(chunks)))
    print(f"Match original: {recovered == snapshot}")
