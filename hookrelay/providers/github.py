"""
GitHub signature scheme.

Header: X-Hub-Signature-256: sha256=<hex HMAC-SHA256 of the raw body>
"""
import hashlib

from hookrelay.providers.base import ACCEPT, VerificationResult, hmac_hex, reject, secure_equals

HEADER = "X-Hub-Signature-256"
PREFIX = "sha256="


def verify(secret: str, header: str, body: bytes, now: float = 0, tolerance: int = 0) -> VerificationResult:
    if not secret:
        return reject("missing_secret")
    if not header:
        return reject("missing_signature")
    if not header.startswith(PREFIX):
        return reject("invalid_scheme")

    supplied = header[len(PREFIX):]
    expected = hmac_hex(secret, body, hashlib.sha256)
    if not secure_equals(expected, supplied):
        return reject("signature_mismatch")
    return ACCEPT


def sign(secret: str, body: bytes) -> str:
    return PREFIX + hmac_hex(secret, body, hashlib.sha256)
