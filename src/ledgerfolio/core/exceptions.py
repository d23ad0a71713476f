"""Application-level exceptions."""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""

    status_code = 400

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_payload(self) -> dict:
        """Body returned to API clients."""
        return {"error": self.code, "message": self.message}


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    status_code = 404

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class RowError(AppError):
    """A single ingested row could not be normalized."""

    def __init__(self, message: str):
        super().__init__(message, code="ROW_ERROR")


class ImportRejectedError(AppError):
    """
    Raised when an ingestion batch is rejected before any write.

    Carries the leading row errors so the caller can show why nothing parsed.
    """

    def __init__(self, message: str, errors: Optional[list[dict]] = None):
        super().__init__(message, code="IMPORT_REJECTED")
        self.errors = errors or []

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["errors"] = self.errors
        return payload


class ProviderError(AppError):
    """Raised when the market-data provider cannot supply a quote."""

    status_code = 502

    def __init__(self, ticker: str, reason: str):
        super().__init__(f"Quote unavailable for {ticker}: {reason}", code="PROVIDER_ERROR")
        self.ticker = ticker


class ReconnectRequiredError(AppError):
    """Raised when the broker credential has expired or been revoked."""

    status_code = 401

    def __init__(self, message: str = "Broker connection expired. Please reconnect."):
        super().__init__(message, code="RECONNECT_REQUIRED")

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["action"] = "reconnect"
        return payload


class UpstreamUnavailableError(AppError):
    """Raised when the broker cannot be reached at all."""

    status_code = 503

    def __init__(self, message: str):
        super().__init__(message, code="UPSTREAM_UNAVAILABLE")

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["action"] = "retry"
        return payload
