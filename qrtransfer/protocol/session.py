"""
Scan Session

Collects chunks one scan at a time until a transfer is complete.

States:
    EMPTY       nothing scanned yet (or after reset)
    COLLECTING  at least one chunk of the current transfer received
    COMPLETE    all chunks received and decoded; result is available

A chunk from a different transfer (new fingerprint or total) resets the
session and starts collecting that transfer instead of mixing the two.

Usage:
    session = ScanSession()
    for text in camera_scans():
        session.add_text(text)
        if session.is_complete:
            snapshot = session.result
            break
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from ..config import MAX_CHUNKS
from ..logging import SESSION, get_logger
from .chunking import Chunk, decode_chunk_from_wire, reassemble_chunks_or_raise
from .errors import MalformedScan, TransferError, TransferTooLarge

logger = get_logger(__name__)


class SessionState(str, Enum):
    EMPTY = "empty"
    COLLECTING = "collecting"
    COMPLETE = "complete"


class ScanSession:
    """
    Accumulates scanned chunks for one transfer.

    Not thread-safe: one writer per session.
    """

    def __init__(self, max_total: int = MAX_CHUNKS):
        """
        Args:
            max_total: Largest chunk count accepted for a transfer
        """
        self.max_total = max_total
        self.reset()

    def reset(self):
        """Discard everything and start fresh."""
        self._chunks: Dict[int, Chunk] = {}
        self._key: Optional[Tuple[str, int]] = None
        self._state = SessionState.EMPTY
        self._result: Any = None
        self.last_error: Optional[TransferError] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_complete(self) -> bool:
        return self._state is SessionState.COMPLETE

    @property
    def result(self) -> Any:
        """Decoded value once COMPLETE, else None."""
        return self._result

    @property
    def fingerprint(self) -> Optional[str]:
        return self._key[0] if self._key else None

    @property
    def progress(self) -> Tuple[int, int]:
        """(received, total); total is 0 before the first chunk."""
        if self._key is None:
            return (0, 0)
        return (len(self._chunks), self._key[1])

    @property
    def missing_indices(self) -> List[int]:
        if self._key is None:
            return []
        return sorted(set(range(1, self._key[1] + 1)) - set(self._chunks))

    def add_text(self, text: Union[str, bytes]) -> Optional[Any]:
        """
        Decode and add one scanned QR text.

        Returns:
            The decoded value if this scan completed the transfer, else None
        """
        chunk = decode_chunk_from_wire(text)
        if chunk is None:
            self.last_error = MalformedScan("scan is not a transfer chunk")
            return None
        return self.add(chunk)

    def add(self, chunk: Chunk) -> Optional[Any]:
        """
        Add one chunk.

        Returns:
            The decoded value if this chunk completed the transfer, else None
        """
        if chunk.total > self.max_total:
            self.last_error = TransferTooLarge(
                f"transfer declares {chunk.total} chunks, limit is {self.max_total}"
            )
            logger.warning("%s %s", SESSION, self.last_error.message)
            return None

        if self._key is not None and chunk.transfer_key != self._key:
            logger.info(
                "%s New transfer %s detected, discarding %d chunk(s) of %s",
                SESSION, chunk.fingerprint, len(self._chunks), self._key[0]
            )
            self.reset()
        elif self._state is SessionState.COMPLETE:
            # Re-scan of an already finished transfer
            return None

        self._key = chunk.transfer_key
        self._chunks[chunk.index] = chunk
        self._state = SessionState.COLLECTING
        self.last_error = None

        received, total = self.progress
        logger.debug("%s Chunk %d/%d received (%d/%d)", SESSION, chunk.index, total, received, total)

        if received < total:
            return None

        try:
            value = reassemble_chunks_or_raise(self._chunks.values())
        except TransferError as e:
            logger.warning("%s Reassembly failed (%s): %s", SESSION, e.code, e.message)
            self.reset()
            self.last_error = e
            return None

        self._state = SessionState.COMPLETE
        self._result = value
        return value
