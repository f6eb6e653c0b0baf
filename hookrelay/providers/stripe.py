"""
Stripe signature scheme.

Header: Stripe-Signature: t=<unix seconds>,v1=<hex>[,v1=<hex>...][,v0=...]
Signed payload: "<t>." + raw body, HMAC-SHA256 keyed with the endpoint secret.
Stripe sends more than one v1 while a secret is being rolled; any match accepts.
"""
import hashlib
from typing import Optional

from hookrelay.providers.base import ACCEPT, VerificationResult, hmac_hex, reject, secure_equals

HEADER = "Stripe-Signature"
DEFAULT_TOLERANCE_SECONDS = 300


def parse_header(header: str) -> Optional[tuple[str, list[str]]]:
    """Split the header into (timestamp, [v1 signatures]). None if malformed."""
    timestamp = None
    signatures: list[str] = []
    for item in header.split(","):
        key, sep, value = item.strip().partition("=")
        if not sep or not key:
            return None
        if key == "t":
            timestamp = value
        elif key == "v1":
            signatures.append(value)
    if not timestamp or not signatures:
        return None
    return timestamp, signatures


def _signed_payload(timestamp: str, body: bytes) -> bytes:
    return timestamp.encode("ascii") + b"." + body


def verify(
    secret: str,
    header: str,
    body: bytes,
    now: float,
    tolerance: int = DEFAULT_TOLERANCE_SECONDS,
) -> VerificationResult:
    if not secret:
        return reject("missing_secret")
    if not header:
        return reject("missing_signature")

    parsed = parse_header(header)
    if parsed is None:
        return reject("invalid_header")
    timestamp, signatures = parsed

    # Unparsable timestamps are rejected rather than skipping the freshness check
    if not (timestamp.isascii() and timestamp.isdigit()):
        return reject("invalid_timestamp")

    expected = hmac_hex(secret, _signed_payload(timestamp, body), hashlib.sha256)
    # Check every candidate so timing doesn't reveal which one matched
    matched = False
    for candidate in signatures:
        if secure_equals(expected, candidate.lower()):
            matched = True
    if not matched:
        return reject("signature_mismatch")

    if tolerance > 0 and now - int(timestamp) > tolerance:
        return reject("timestamp_expired")

    return ACCEPT


def sign(secret: str, body: bytes, timestamp: int) -> str:
    """Build a Stripe-Signature header value for body at timestamp."""
    ts = str(int(timestamp))
    return f"t={ts},v1={hmac_hex(secret, _signed_payload(ts, body), hashlib.sha256)}"
