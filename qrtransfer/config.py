"""
qrtransfer Configuration

Protocol constants are part of the wire contract and fixed.
Deployment settings come from environment variables.
"""
import os

# ============================================================================
# Protocol constants
# ============================================================================
PROTOCOL_VERSION = 1

# QR v40 at 'H' error correction holds ~1273 bytes; 1200 leaves room
# for the {"v":..,"i":..,"t":..,"h":..,"d":..} envelope
MAX_CHUNK_SIZE = 1200

FINGERPRINT_LENGTH = 8


# ============================================================================
# Environment settings
# ============================================================================
def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _env_choice(name: str, default: str, choices) -> str:
    value = os.getenv(name, default).strip().upper() or default
    if value not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)}, got {value!r}")
    return value


# Reject transfers declaring more chunks than this
MAX_CHUNKS = _env_int("QRTRANSFER_MAX_CHUNKS", 50)

# Warn on exports producing more chunks than this
WARN_CHUNKS = _env_int("QRTRANSFER_WARN_CHUNKS", 10)

QR_ERROR_CORRECTION = _env_choice("QRTRANSFER_QR_ERROR_CORRECTION", "H", ("L", "M", "Q", "H"))
QR_BOX_SIZE = _env_int("QRTRANSFER_QR_BOX_SIZE", 10)
QR_BORDER = _env_int("QRTRANSFER_QR_BORDER", 4)

# Scan sessions idle longer than this (seconds) are discarded
SESSION_TTL = _env_int("QRTRANSFER_SESSION_TTL", 600)

# Most scan sessions held at once; the least recently used is evicted
MAX_SESSIONS = _env_int("QRTRANSFER_MAX_SESSIONS", 100)

LOG_LEVEL = os.getenv("QRTRANSFER_LOG_LEVEL", "INFO")
