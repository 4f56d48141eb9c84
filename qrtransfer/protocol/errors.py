"""
Transfer Error Taxonomy

Every way an import can fail has its own exception type. The public codec
functions catch these at their origin and return None; the scan session and
the HTTP layer use them to tell the user *why* a rescan is needed.
"""


class TransferError(Exception):
    """Base class for all chunk transfer failures."""

    code = "TRANSFER_ERROR"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class MalformedScan(TransferError):
    """Scanned text is not a chunk (bad JSON, missing or mistyped fields)."""

    code = "MALFORMED_SCAN"


class IncompleteSet(TransferError):
    """Chunk count does not match the declared total."""

    code = "INCOMPLETE_SET"


class CrossTransferMixing(TransferError):
    """Chunks carry different fingerprints or versions."""

    code = "CROSS_TRANSFER_MIXING"


class IndexGapOrDuplicate(TransferError):
    """Sorted indices do not form 1..total."""

    code = "INDEX_GAP_OR_DUPLICATE"


class FinalIntegrityFailure(TransferError):
    """Recomputed fingerprint of the joined payload does not match."""

    code = "FINAL_INTEGRITY_FAILURE"


class DecodeFailure(TransferError):
    """Base64, gzip or JSON decoding of the joined payload failed."""

    code = "DECODE_FAILURE"


class TransferTooLarge(TransferError):
    """Transfer declares more chunks than the configured ceiling."""

    code = "TRANSFER_TOO_LARGE"
