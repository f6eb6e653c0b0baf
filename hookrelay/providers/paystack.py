"""
Paystack signature scheme.

Header: x-paystack-signature: <hex HMAC-SHA512 of the raw body keyed with the secret key>
"""
import hashlib

from hookrelay.providers.base import ACCEPT, VerificationResult, hmac_hex, reject, secure_equals

HEADER = "x-paystack-signature"


def verify(secret: str, header: str, body: bytes, now: float = 0, tolerance: int = 0) -> VerificationResult:
    if not secret:
        return reject("missing_secret")
    if not header:
        return reject("missing_signature")
    expected = hmac_hex(secret, body, hashlib.sha512)
    if not secure_equals(expected, header.strip().lower()):
        return reject("signature_mismatch")
    return ACCEPT


def sign(secret: str, body: bytes) -> str:
    return hmac_hex(secret, body, hashlib.sha512)
