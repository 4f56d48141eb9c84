"""
qrtransfer - move structured snapshots through a series of QR codes.
"""

from .protocol import (
    Chunk,
    ScanSession,
    compress_and_chunk,
    decode_chunk_from_wire,
    encode_chunk_to_wire,
    reassemble_chunks,
    reported_size,
)

__all__ = [
    'Chunk',
    'ScanSession',
    'compress_and_chunk',
    'decode_chunk_from_wire',
    'encode_chunk_to_wire',
    'reassemble_chunks',
    'reported_size',
]

__version__ = '1.0.0'
