"""
qrtransfer - Protocol Module

Moves a structured snapshot through a series of QR codes:
- Payload codec (JSON -> gzip -> base64)
- Fingerprint for transfer membership and integrity
- Chunk splitting, wire format and reassembly
- Scan session for one-at-a-time camera scanning
"""

from .chunking import (
    Chunk,
    compress_and_chunk,
    decode_chunk_from_wire,
    encode_chunk_to_wire,
    reassemble_chunks,
    reassemble_chunks_or_raise,
    reported_size,
    split_payload,
)
from .errors import (
    CrossTransferMixing,
    DecodeFailure,
    FinalIntegrityFailure,
    IncompleteSet,
    IndexGapOrDuplicate,
    MalformedScan,
    TransferError,
    TransferTooLarge,
)
from .fingerprint import fingerprint
from .session import ScanSession, SessionState

__all__ = [
    'Chunk',
    'compress_and_chunk',
    'decode_chunk_from_wire',
    'encode_chunk_to_wire',
    'reassemble_chunks',
    'reassemble_chunks_or_raise',
    'reported_size',
    'split_payload',
    'fingerprint',
    'ScanSession',
    'SessionState',
    'TransferError',
    'MalformedScan',
    'IncompleteSet',
    'CrossTransferMixing',
    'IndexGapOrDuplicate',
    'FinalIntegrityFailure',
    'DecodeFailure',
    'TransferTooLarge',
]
