# tests/test_session.py
"""
Tests for qrtransfer.protocol.session.ScanSession.
"""

import pytest

from qrtransfer.protocol.chunking import compress_and_chunk, encode_chunk_to_wire, split_payload
from qrtransfer.protocol.errors import (
    FinalIntegrityFailure,
    MalformedScan,
    TransferTooLarge,
)
from qrtransfer.protocol.session import ScanSession, SessionState


SNAPSHOT = {"calendar": [{"day": i, "event": f"Event number {i}"} for i in range(40)]}


@pytest.fixture
def chunks():
    result = compress_and_chunk(SNAPSHOT, max_chunk_size=100)
    assert len(result) >= 3
    return result


class TestScanSession:
    """Tests for the scan accumulation state machine."""

    def test_starts_empty(self):
        session = ScanSession()

        assert session.state is SessionState.EMPTY
        assert session.progress == (0, 0)
        assert session.missing_indices == []
        assert session.result is None

    def test_collects_until_complete(self, chunks):
        session = ScanSession()

        for chunk in chunks[:-1]:
            assert session.add(chunk) is None
            assert session.state is SessionState.COLLECTING

        assert session.progress == (len(chunks) - 1, len(chunks))
        assert session.missing_indices == [len(chunks)]

        assert session.add(chunks[-1]) == SNAPSHOT
        assert session.state is SessionState.COMPLETE
        assert session.is_complete
        assert session.result == SNAPSHOT

    def test_out_of_order_scans(self, chunks):
        session = ScanSession()
        for chunk in reversed(chunks):
            session.add(chunk)

        assert session.result == SNAPSHOT

    def test_add_text(self, chunks):
        session = ScanSession()
        for chunk in chunks:
            session.add_text(encode_chunk_to_wire(chunk))

        assert session.result == SNAPSHOT

    def test_rescan_same_chunk_is_harmless(self, chunks):
        session = ScanSession()
        session.add(chunks[0])
        session.add(chunks[0])

        assert session.progress == (1, len(chunks))

    def test_garbage_scan_keeps_progress(self, chunks):
        session = ScanSession()
        session.add(chunks[0])

        assert session.add_text("https://example.com") is None
        assert isinstance(session.last_error, MalformedScan)
        assert session.progress == (1, len(chunks))

    def test_new_fingerprint_resets(self, chunks):
        other = compress_and_chunk({"notes": ["something else entirely"] * 30}, max_chunk_size=100)
        session = ScanSession()
        session.add(chunks[0])
        session.add(chunks[1])

        session.add(other[0])

        assert session.fingerprint == other[0].fingerprint
        assert session.progress == (1, len(other))

    def test_scans_after_complete_are_ignored(self, chunks):
        session = ScanSession()
        for chunk in chunks:
            session.add(chunk)

        assert session.add(chunks[0]) is None
        assert session.is_complete
        assert session.result == SNAPSHOT

    def test_new_transfer_after_complete(self, chunks):
        session = ScanSession()
        for chunk in chunks:
            session.add(chunk)

        single = compress_and_chunk({"a": 1})
        assert session.add(single[0]) == {"a": 1}

    def test_failed_reassembly_resets(self, chunks):
        corrupted = chunks[1].model_copy(update={"data": "A" * len(chunks[1].data)})
        session = ScanSession()
        session.add(chunks[0])
        session.add(corrupted)
        for chunk in chunks[2:]:
            session.add(chunk)

        assert session.state is SessionState.EMPTY
        assert isinstance(session.last_error, FinalIntegrityFailure)

    def test_rejects_transfer_over_ceiling(self):
        session = ScanSession(max_total=2)
        too_many = split_payload("abcdef", max_chunk_size=2)

        assert session.add(too_many[0]) is None
        assert isinstance(session.last_error, TransferTooLarge)
        assert session.state is SessionState.EMPTY

    def test_reset(self, chunks):
        session = ScanSession()
        session.add(chunks[0])
        session.reset()

        assert session.state is SessionState.EMPTY
        assert session.progress == (0, 0)
