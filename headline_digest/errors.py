from __future__ import annotations


class DigestError(Exception):
    """Base class for fatal pipeline errors."""


class TransportError(DigestError):
    """Raised when an external service cannot be reached or rejects the request."""


class DecodeError(DigestError):
    """Raised when an external service answers with an unexpected shape."""
