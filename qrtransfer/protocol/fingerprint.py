"""
Transfer Fingerprint

Short deterministic fingerprint of a whole transcoded payload. Every chunk of
a transfer carries it, so a single scanned chunk can be matched to its
transfer and the joined payload can be re-checked after reassembly.

This is a 32-bit rolling polynomial hash (h = h*31 + c). It catches accidental
corruption and mis-scans only; it is NOT a cryptographic digest and gives no
protection against crafted chunks. Replace it with a signed digest before
using this protocol where chunks could come from an adversary.
"""

from ..config import FINGERPRINT_LENGTH

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _code_units(text: str):
    """Yield UTF-16 code units, the units the hash is defined over."""
    raw = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(raw), 2):
        yield raw[i] | (raw[i + 1] << 8)


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def fingerprint(text: str) -> str:
    """
    Compute the fingerprint of a transcoded payload.

    Args:
        text: Full transcoded (base64) payload

    Returns:
        str: 8-character base-36 fingerprint
    """
    h = 0
    for unit in _code_units(text):
        h = (h * 31 + unit) & 0xFFFFFFFF

    # Interpret as signed 32-bit
    if h & 0x80000000:
        h -= 0x100000000

    digest = _to_base36(abs(h))[:FINGERPRINT_LENGTH]
    return digest.rjust(FINGERPRINT_LENGTH, "0")


def normalize_fingerprint(value: str) -> str:
    """Left-pad a declared fingerprint; older exporters sent it unpadded."""
    return value.rjust(FINGERPRINT_LENGTH, "0")


def verify_fingerprint(text: str, expected: str) -> bool:
    """
    Check a payload against a declared fingerprint.

    Args:
        text: Reconstructed transcoded payload
        expected: Fingerprint declared by the chunks

    Returns:
        bool: True if they match
    """
    return fingerprint(text) == normalize_fingerprint(expected)
