"""
Shared pieces for provider signature verifiers.

Every verifier has the same shape:

    verify(secret, signature_header, body, now, tolerance) -> VerificationResult

so a provider's scheme can change without touching dispatch or ingest.
"""
import hashlib
import hmac
from dataclasses import dataclass


@dataclass(frozen=True)
class VerificationResult:
    ok: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.ok


ACCEPT = VerificationResult(ok=True)


def reject(reason: str) -> VerificationResult:
    return VerificationResult(ok=False, reason=reason)


def hmac_hex(secret: str, payload: bytes, digestmod=hashlib.sha256) -> str:
    """Lowercase hex HMAC of payload keyed with the UTF-8 secret."""
    return hmac.new(secret.encode("utf-8"), payload, digestmod).hexdigest()


def secure_equals(expected: str, supplied: str) -> bool:
    """Constant-time string comparison (bytes, so non-ASCII input can't raise)."""
    return hmac.compare_digest(expected.encode("utf-8"), supplied.encode("utf-8"))
