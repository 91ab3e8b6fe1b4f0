# ivory/domain/errors.py
"""
Error taxonomy raised by services. Each maps to one HTTP status in ivory.main.
"""


class InvalidRequestError(ValueError):
    """Missing or invalid input, insufficient stock, empty cart (400)."""


class ConflictError(ValueError):
    """The same operation is already running for this subject (409)."""


class AuthenticationError(PermissionError):
    """Missing, invalid or expired credential (401)."""


class AccessDeniedError(PermissionError):
    """Authenticated, but not allowed to touch this resource (403)."""


class NotFoundError(LookupError):
    """Unknown product, collection, cart, order or account (404)."""


class UpstreamError(RuntimeError):
    """A third-party call failed (500). `details` carries the upstream answer."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class PaymentGatewayError(UpstreamError):
    pass


class MediaUploadError(UpstreamError):
    pass
