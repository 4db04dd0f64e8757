from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Standard billing API error codes."""

    E001 = "E001"  # Lookup: Record not found
    E002 = "E002"  # Auth: Invalid credentials
    E003 = "E003"  # Auth: Authentication required
    E004 = "E004"  # Transient: Storage unavailable
    E005 = "E005"  # Auth: Invalid or expired token
    E006 = "E006"  # Auth: Insufficient permissions
    E007 = "E007"  # Transient: Operation timeout
    E008 = "E008"  # Conflict: Edit conflict (stale version)
    E009 = "E009"  # Validation: Invalid input
    E010 = "E010"  # Internal: Internal error


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.E001: "The requested resource could not be found",
    ErrorCode.E002: "Invalid authentication credentials",
    ErrorCode.E003: "You must be authenticated to access this resource",
    ErrorCode.E004: "Storage temporarily unavailable",
    ErrorCode.E005: "Invalid or missing authentication token",
    ErrorCode.E006: "Your account doesn't have the necessary permissions to access this resource",
    ErrorCode.E007: "Operation timeout",
    ErrorCode.E008: "Record was modified by another user. Please review changes and retry.",
    ErrorCode.E009: "Validation error",
    ErrorCode.E010: "The server encountered a problem and could not process your request",
}
