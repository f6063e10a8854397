"""Custom exception classes for the Dynamic DNS API."""

from typing import Any


class DDNSAPIError(Exception):
    """Base exception for the Dynamic DNS API."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code
            error_code: Machine-readable error code
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}


class UnauthorizedError(DDNSAPIError):
    """Raised when authentication fails (401)."""

    def __init__(
        self,
        message: str = "Unauthorized: Invalid or missing session",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code="UNAUTHORIZED",
            details=details,
        )


class RateLimitError(DDNSAPIError):
    """Raised when a rate limit or lockout is in effect (429)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: int = 60,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize RateLimitError.

        Args:
            message: Error message
            retry_after: Seconds until retry is allowed
            details: Additional error details
        """
        error_details = details or {}
        error_details["retry_after"] = retry_after
        super().__init__(
            message=message,
            status_code=429,
            error_code="RATE_LIMIT_EXCEEDED",
            details=error_details,
        )
        self.retry_after = retry_after


class RecordNotFoundError(DDNSAPIError):
    """Raised when a managed record does not exist (404)."""

    def __init__(
        self,
        message: str = "Record not found",
        hostname: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        error_details = details or {}
        if hostname:
            error_details["hostname"] = hostname
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details=error_details,
        )


class RecordExistsError(DDNSAPIError):
    """Raised when creating a record for a hostname that is already managed (409)."""

    def __init__(
        self,
        message: str = "Record already exists",
        hostname: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        error_details = details or {}
        if hostname:
            error_details["hostname"] = hostname
        super().__init__(
            message=message,
            status_code=409,
            error_code="ALREADY_EXISTS",
            details=error_details,
        )


class RecordConflictError(DDNSAPIError):
    """Raised when a conditional record write loses to a concurrent writer (409)."""

    def __init__(
        self,
        message: str = "Record was modified concurrently",
        hostname: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        error_details = details or {}
        if hostname:
            error_details["hostname"] = hostname
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONFLICT",
            details=error_details,
        )


class InvalidRecordError(DDNSAPIError):
    """Raised when record parameters fail validation (400)."""

    def __init__(
        self,
        message: str = "Invalid record parameters",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class ZoneNotFoundError(DDNSAPIError):
    """Raised when a hosted zone does not exist (404)."""

    def __init__(
        self,
        message: str = "Hosted zone not found",
        zone_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        error_details = details or {}
        if zone_id:
            error_details["zone_id"] = zone_id
        super().__init__(
            message=message,
            status_code=404,
            error_code="ZONE_NOT_FOUND",
            details=error_details,
        )


class DNSBackendError(DDNSAPIError):
    """Raised when the DNS provider call fails or times out (502)."""

    def __init__(
        self,
        message: str = "DNS provider request failed",
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize DNSBackendError.

        Args:
            message: Error message
            operation: Provider operation that failed (upsert, delete, ...)
            details: Additional error details
        """
        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        super().__init__(
            message=message,
            status_code=502,
            error_code="DNS_BACKEND_ERROR",
            details=error_details,
        )


class StoreError(DDNSAPIError):
    """Raised when the persistence layer is unavailable (503)."""

    def __init__(
        self,
        message: str = "Record store temporarily unavailable",
        retry_after: int = 60,
        details: dict[str, Any] | None = None,
    ) -> None:
        error_details = details or {}
        error_details["retry_after"] = retry_after
        super().__init__(
            message=message,
            status_code=503,
            error_code="SERVICE_UNAVAILABLE",
            details=error_details,
        )
