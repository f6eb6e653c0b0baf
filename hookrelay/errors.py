"""
Error taxonomy for the ingest and replay paths.

Services raise these; the API layer maps ``http_status`` onto an HTTPException.
"""


class RelayError(Exception):
    """Base class for errors surfaced to API callers."""

    http_status = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidRequestError(RelayError):
    """Malformed input or unsupported provider at provisioning time."""

    http_status = 400


class AuthenticationError(RelayError):
    """Signature verification rejected the delivery.

    ``reason`` is for logs only; callers always see the generic detail.
    """

    http_status = 401

    def __init__(self, reason: str):
        super().__init__("invalid signature")
        self.reason = reason


class NotFoundError(RelayError):
    http_status = 404


class UnknownProviderError(RelayError):
    """A stored endpoint references a provider kind with no verifier.

    This is a data-integrity problem, not an authentication failure.
    """

    http_status = 400

    def __init__(self, provider: str):
        super().__init__("unsupported provider")
        self.provider = provider


class PersistenceError(RelayError):
    http_status = 500


class UpstreamError(RelayError):
    """Replay send failed before any response was received."""

    http_status = 502
