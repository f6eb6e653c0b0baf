"""
Provider signature verification - the single dispatch point from ProviderKind to verifier.

Supported providers:
- Stripe: HMAC-SHA256 over "<t>.<body>" via Stripe-Signature, with timestamp tolerance
- GitHub: HMAC-SHA256 over the body via X-Hub-Signature-256 ("sha256=" prefix)
- Paystack: HMAC-SHA512 over the body via x-paystack-signature
- Flutterwave: shared secret echoed in verif-hash (weak, no body signature)

Adding a provider means adding a ProviderKind member, a verifier module, and a
branch in verify_signature/sign_payload. An endpoint whose provider has no branch
raises UnknownProviderError instead of falling through to a rejection.
"""
import time
from typing import Mapping, Optional, Union

from hookrelay.errors import UnknownProviderError
from hookrelay.models.endpoint import ProviderKind
from hookrelay.providers import flutterwave, github, paystack, stripe
from hookrelay.providers.base import VerificationResult

SIGNATURE_HEADERS: dict[ProviderKind, str] = {
    ProviderKind.STRIPE: stripe.HEADER,
    ProviderKind.FLUTTERWAVE: flutterwave.HEADER,
    ProviderKind.PAYSTACK: paystack.HEADER,
    ProviderKind.GITHUB: github.HEADER,
}


def resolve_provider(provider: Union[str, ProviderKind]) -> ProviderKind:
    """Map a stored provider string to its ProviderKind or raise UnknownProviderError."""
    try:
        return ProviderKind(provider)
    except ValueError:
        raise UnknownProviderError(str(provider)) from None


def get_header(headers: Mapping[str, str], name: str) -> str:
    """Case-insensitive single header lookup; empty string when absent."""
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, val in headers.items():
        if key.lower() == lowered:
            return val
    return ""


def verify_signature(
    provider: Union[str, ProviderKind],
    secret: str,
    headers: Mapping[str, str],
    body: bytes,
    now: Optional[float] = None,
    stripe_tolerance: int = stripe.DEFAULT_TOLERANCE_SECONDS,
) -> VerificationResult:
    """
    Verify a delivery for the given provider.
    Returns a VerificationResult; raises UnknownProviderError for unmapped kinds.
    """
    kind = resolve_provider(provider)
    header = get_header(headers, SIGNATURE_HEADERS[kind])
    now = time.time() if now is None else now

    if kind is ProviderKind.STRIPE:
        return stripe.verify(secret, header, body, now, stripe_tolerance)
    if kind is ProviderKind.GITHUB:
        return github.verify(secret, header, body, now)
    if kind is ProviderKind.PAYSTACK:
        return paystack.verify(secret, header, body, now)
    if kind is ProviderKind.FLUTTERWAVE:
        return flutterwave.verify(secret, header, body, now)

    raise UnknownProviderError(kind.value)


def sign_payload(
    provider: Union[str, ProviderKind],
    secret: str,
    body: bytes,
    timestamp: Optional[int] = None,
) -> dict[str, str]:
    """Build the signature header a provider would send for body. Used by tooling and tests."""
    kind = resolve_provider(provider)
    header = SIGNATURE_HEADERS[kind]

    if kind is ProviderKind.STRIPE:
        ts = int(time.time()) if timestamp is None else timestamp
        return {header: stripe.sign(secret, body, ts)}
    if kind is ProviderKind.GITHUB:
        return {header: github.sign(secret, body)}
    if kind is ProviderKind.PAYSTACK:
        return {header: paystack.sign(secret, body)}
    if kind is ProviderKind.FLUTTERWAVE:
        return {header: flutterwave.sign(secret, body)}

    raise UnknownProviderError(kind.value)
