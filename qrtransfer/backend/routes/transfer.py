"""
qrtransfer Transfer Routes
- Export a snapshot as QR chunks
- Render a chunk as a QR image
- Import a full set of scanned chunks
- Scan sessions for one-at-a-time scanning
"""
from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from typing import Any, List
from collections import OrderedDict
from time import monotonic
from io import BytesIO
import threading
import uuid

from qrcode.exceptions import DataOverflowError

from ... import config
from ...logging import API, get_logger
from ...protocol import (
    ScanSession,
    TransferError,
    compress_and_chunk,
    decode_chunk_from_wire,
    encode_chunk_to_wire,
    reassemble_chunks_or_raise,
    reported_size,
)
from ...render import render_chunk_png

logger = get_logger(__name__)

router = APIRouter()

# In-memory scan sessions (session_id -> (ScanSession, last_used)), oldest first
_sessions: "OrderedDict[str, tuple]" = OrderedDict()
_sessions_lock = threading.Lock()


class ExportRequest(BaseModel):
    data: Any


class QRRequest(BaseModel):
    chunk: str


class ImportRequest(BaseModel):
    chunks: List[str]


class ScanRequest(BaseModel):
    text: str


def session_status(session_id: str, session: ScanSession) -> dict:
    """Build the JSON status of a scan session"""
    received, total = session.progress
    status = {
        "session_id": session_id,
        "state": session.state.value,
        "fingerprint": session.fingerprint,
        "received": received,
        "total": total,
        "missing": session.missing_indices,
        "complete": session.is_complete,
        "error": session.last_error.code if session.last_error else None,
    }
    if session.is_complete:
        status["data"] = session.result
    return status


def _evict_sessions(now: float):
    """Drop idle sessions, then the least recently used ones over the cap. Caller holds the lock."""
    for session_id in [sid for sid, (_, last_used) in _sessions.items()
                       if now - last_used > config.SESSION_TTL]:
        del _sessions[session_id]
        logger.info("%s Scan session %s expired", API, session_id)

    while len(_sessions) > config.MAX_SESSIONS:
        session_id, _ = _sessions.popitem(last=False)
        logger.info("%s Scan session %s evicted (limit %d)", API, session_id, config.MAX_SESSIONS)


def get_session(session_id: str) -> ScanSession:
    """Look up a live session and mark it as recently used"""
    now = monotonic()
    with _sessions_lock:
        _evict_sessions(now)
        entry = _sessions.get(session_id)
        if entry is not None:
            _sessions[session_id] = (entry[0], now)
            _sessions.move_to_end(session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Scan session not found")
    return entry[0]


@router.post("/export")
async def export_snapshot(request: ExportRequest):
    """Compress and chunk a snapshot; returns one wire string per QR code"""
    try:
        chunks = compress_and_chunk(request.data)
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=422, detail=f"Data is not serializable: {e}")

    if len(chunks) > config.MAX_CHUNKS:
        raise HTTPException(
            status_code=413,
            detail=f"Export needs {len(chunks)} QR codes, limit is {config.MAX_CHUNKS}"
        )

    logger.info("%s Exported transfer %s in %d chunk(s)", API, chunks[0].fingerprint, len(chunks))

    return {
        "fingerprint": chunks[0].fingerprint,
        "total": len(chunks),
        "size": reported_size(chunks),
        "chunks": [encode_chunk_to_wire(c) for c in chunks]
    }


@router.post("/qr")
async def render_qr(request: QRRequest):
    """Render one chunk wire string as a PNG QR code"""
    chunk = decode_chunk_from_wire(request.chunk)
    if chunk is None:
        raise HTTPException(status_code=400, detail="Invalid chunk")

    try:
        png = render_chunk_png(chunk)
    except DataOverflowError:
        raise HTTPException(status_code=400, detail="Chunk too large for one QR code")

    return StreamingResponse(
        BytesIO(png),
        media_type="image/png",
        headers={
            "Content-Disposition": f"inline; filename=chunk-{chunk.fingerprint}-{chunk.index}.png",
            "X-Chunk-Index": str(chunk.index),
            "X-Chunk-Total": str(chunk.total)
        }
    )


@router.post("/import")
async def import_snapshot(request: ImportRequest):
    """Reassemble a full set of scanned chunks"""
    chunks = []
    for position, text in enumerate(request.chunks, start=1):
        chunk = decode_chunk_from_wire(text)
        if chunk is None:
            raise HTTPException(
                status_code=400,
                detail=f"MALFORMED_SCAN: scan {position} is not a transfer chunk"
            )
        chunks.append(chunk)

    try:
        data = reassemble_chunks_or_raise(chunks)
    except TransferError as e:
        logger.warning("%s Import rejected (%s): %s", API, e.code, e.message)
        raise HTTPException(status_code=400, detail=f"{e.code}: {e.message}")

    return {
        "success": True,
        "total": len(chunks),
        "size": reported_size(chunks),
        "data": data
    }


@router.post("/sessions")
async def create_session():
    """Start a new scan session"""
    session_id = uuid.uuid4().hex
    session = ScanSession(max_total=config.MAX_CHUNKS)
    now = monotonic()
    with _sessions_lock:
        _sessions[session_id] = (session, now)
        _evict_sessions(now)
    return session_status(session_id, session)


@router.get("/sessions/{session_id}")
async def get_session_status(session_id: str):
    """Get scan progress"""
    return session_status(session_id, get_session(session_id))


@router.post("/sessions/{session_id}/scan")
async def scan_chunk(session_id: str, request: ScanRequest):
    """Add one scanned QR text to a session"""
    session = get_session(session_id)
    with _sessions_lock:
        session.add_text(request.text)
        return session_status(session_id, session)


@router.delete("/sessions/{session_id}")
async def cancel_session(session_id: str):
    """Cancel a scan session and discard its chunks"""
    with _sessions_lock:
        entry = _sessions.pop(session_id, None)
    if entry is None:
        raise HTTPException(status_code=404, detail="Scan session not found")
    return {"success": True, "message": "Scan session cancelled"}
