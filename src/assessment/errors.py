from __future__ import annotations


class ServiceError(Exception):
    """Base error carrying the HTTP status it maps to at the API boundary."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    status_code = 400


class PaymentRequiredError(ServiceError):
    status_code = 402


class NotFoundError(ServiceError):
    status_code = 404


class ParseError(ServiceError):
    """Model reply could not be turned into a valid record."""

    status_code = 500


class UpstreamError(ServiceError):
    """Network, auth or rate-limit failure from a model vendor or Stripe."""

    status_code = 500
