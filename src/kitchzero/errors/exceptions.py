"""Custom exception classes for the KitchZero approval service."""


class KitchZeroError(Exception):
    """Base exception for KitchZero."""

    def __init__(self, code: str, message: str, details=None, status_code: int = 500):
        self.code = code
        self.message = message
        self.details = details
        self.status_code = status_code
        super().__init__(message)


class ValidationError(KitchZeroError):
    """Malformed request payload or rejected input."""

    def __init__(self, message: str, details=None):
        super().__init__("VALIDATION_ERROR", message, details, status_code=400)


class NotFoundError(KitchZeroError):
    """Resource not found."""

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            "NOT_FOUND",
            f"{resource} '{resource_id}' not found",
            status_code=404,
        )


class AuthenticationError(KitchZeroError):
    """Authentication required or token invalid."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__("AUTHENTICATION_ERROR", message, status_code=401)


class AuthorizationError(KitchZeroError):
    """Acting user may not perform the operation."""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__("AUTHORIZATION_ERROR", message, status_code=403)


class InvalidStateError(KitchZeroError):
    """Decision attempted on a request that already left PENDING."""

    def __init__(self, approval_request_id: str, current_status: str):
        self.approval_request_id = approval_request_id
        self.current_status = current_status
        super().__init__(
            "ALREADY_RESOLVED",
            f"Approval request '{approval_request_id}' is already {current_status}",
            details={
                "approval_request_id": approval_request_id,
                "status": current_status,
            },
            status_code=409,
        )


class TransactionFailureError(KitchZeroError):
    """The underlying store aborted the transaction."""

    def __init__(self, message: str):
        super().__init__("TRANSACTION_FAILED", f"Transaction aborted: {message}", status_code=500)


class AuditLogError(KitchZeroError):
    """The business change committed but its audit record could not be written."""

    def __init__(self, event: str, resource_id: str, details=None):
        self.event = event
        self.resource_id = resource_id
        super().__init__(
            "AUDIT_LOG_FAILED",
            f"Audit event '{event}' for '{resource_id}' could not be recorded",
            details=details,
            status_code=500,
        )
