"""Error taxonomy shared by the orchestrator, reconciler and HTTP layer."""

from typing import Any


class PixPayError(Exception):
    """Base class for every failure surfaced to callers."""

    message = "payment processing failed"

    def __init__(self, message: str | None = None, details: Any = None) -> None:
        super().__init__(message or self.message)
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        return {"error": str(self), "details": self.details}


class ConfigurationError(PixPayError):
    """Missing API key or store credentials. Fatal, never retried."""

    message = "payment gateway API key not configured"


class NotConfiguredError(ConfigurationError):
    """Raised by the reconciler when it has no credentials to poll with."""


class ValidationError(PixPayError):
    """Missing or malformed request fields; no remote call was made."""

    message = "invalid checkout request"

    def __init__(self, message: str | None = None, missing_fields: list[str] | None = None) -> None:
        self.missing_fields = list(missing_fields or [])
        if message is None and self.missing_fields:
            message = f"missing required fields: {', '.join(self.missing_fields)}"
        super().__init__(message, details={"missing_fields": self.missing_fields} if self.missing_fields else None)


class GatewayError(PixPayError):
    """Non-success or unusable response from the payment gateway."""

    message = "payment gateway request failed"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        details: Any = None,
        operation: str = "",
    ) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code
        self.operation = operation


class InvalidChargeError(PixPayError):
    """The gateway returned a PIX code that cannot be paid; nothing persisted."""

    message = "PIX charge returned an unusable QR code payload"


class PersistenceError(PixPayError):
    """Database failure. After a remote charge exists the charge stays live."""

    message = "failed to persist payment data"
