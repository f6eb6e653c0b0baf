"""
Flutterwave signature scheme.

Flutterwave echoes the dashboard "secret hash" verbatim in the verif-hash header.
There is no body signature, so this only proves the sender knows the secret;
anyone who has seen one delivery can forge others. Treat it as a weak check.
"""
from hookrelay.providers.base import ACCEPT, VerificationResult, reject, secure_equals

HEADER = "verif-hash"


def verify(secret: str, header: str, body: bytes = b"", now: float = 0, tolerance: int = 0) -> VerificationResult:
    if not secret:
        return reject("missing_secret")
    if not header:
        return reject("missing_signature")
    if not secure_equals(secret, header):
        return reject("signature_mismatch")
    return ACCEPT


def sign(secret: str, body: bytes = b"") -> str:
    return secret
