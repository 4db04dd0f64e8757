from __future__ import annotations

from typing import Any, Optional, TYPE_CHECKING

from billing_api.utils.error_codes import ErrorCode, ERROR_MESSAGES

if TYPE_CHECKING:
    from billing_api.schemas.tariff_link import TariffLinkConflict


def _normalize_error_code(value: ErrorCode | str | None) -> ErrorCode:
    if value is None:
        return ErrorCode.E010
    if isinstance(value, ErrorCode):
        return value
    try:
        return ErrorCode(str(value))
    except Exception:
        return ErrorCode.E010


class BillingException(Exception):
    """Base exception for the billing API.

    API response format is handled by the global exception handler.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        code: ErrorCode | str = ErrorCode.E010,
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
        headers: Optional[dict[str, str]] = None,
    ):
        normalized = _normalize_error_code(code)
        if message is None:
            message = ERROR_MESSAGES.get(normalized, ERROR_MESSAGES[ErrorCode.E010])

        self.message = message
        self.code = normalized.value
        self.details = details or {}
        self.status_code = status_code
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": {"code": self.code, "message": self.message, "details": self.details}}


class BadRequestException(BillingException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.E009, details=details, status_code=400)


class ValidationException(BadRequestException):
    """Field-level validation failure; `fields` maps field name to message."""

    def __init__(self, fields: dict[str, str], *, message: str | None = None):
        self.fields = dict(fields)
        super().__init__(message, details={"fields": self.fields})


class UnauthorizedException(BillingException):
    def __init__(
        self,
        message: str | None = None,
        *,
        code: ErrorCode | str = ErrorCode.E005,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message,
            code=code,
            details=details,
            status_code=401,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthenticationRequiredException(UnauthorizedException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.E003, details=details)


class InvalidCredentialsException(UnauthorizedException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.E002, details=details)


class NotFoundException(BillingException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.E001, details=details, status_code=404)


class ForbiddenException(BillingException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.E006, details=details, status_code=403)


class ConflictException(BillingException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.E008, details=details, status_code=409)


class VersionConflictException(ConflictException):
    """Stale-version rejection carrying both sides of the conflict.

    Rendered as the regular error envelope plus top-level `server` and `client`
    sections so the caller can reconcile and resubmit with the server version.
    """

    def __init__(self, conflict: "TariffLinkConflict", *, entity: str = "account_tariff_link"):
        self.conflict = conflict
        super().__init__(
            details={
                "entity": entity,
                "id": conflict.server.data.id,
                "reason": "version_conflict",
            }
        )

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload.update(self.conflict.model_dump(mode="json"))
        return payload


class TimeoutException(BillingException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.E007, details=details, status_code=504)


class ServiceUnavailableException(BillingException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.E004, details=details, status_code=503)
