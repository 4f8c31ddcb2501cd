"""Custom exception classes for the content platform."""

from nodecms.core.status import (
    Status,
    STATUS_CODE_CONFLICT,
    STATUS_CODE_EXTENDER,
    STATUS_CODE_NOT_FOUND,
    STATUS_CODE_PERMISSION_DENIED,
    STATUS_CODE_STORE_ACCESS,
    STATUS_CODE_VALIDATION,
    status_code,
)


class NodeCMSError(Exception):
    """Base exception for NodeCMS.

    Every subclass has a stable status code; ``component`` names the part of
    the system that raised it and becomes the status ``type``.
    """

    code: int = 99

    def __init__(self, message: str = "An error occurred", component: str = "core"):
        self.message = message
        self.component = component
        super().__init__(self.message)

    @property
    def status(self) -> Status:
        return status_code(self.code, self.component, self.message)


class StoreAccessError(NodeCMSError):
    """Raised when the document store cannot be read or written."""
    code = STATUS_CODE_STORE_ACCESS


class NotFoundError(NodeCMSError):
    """Raised when a referenced entity is absent."""
    code = STATUS_CODE_NOT_FOUND


class PermissionDeniedError(NodeCMSError):
    """Raised when the resolved permissions lack the required capability."""
    code = STATUS_CODE_PERMISSION_DENIED


class ConflictError(NodeCMSError):
    """Raised on a unique-constraint violation."""
    code = STATUS_CODE_CONFLICT


class ValidationError(NodeCMSError):
    """Raised when input validation fails."""
    code = STATUS_CODE_VALIDATION


class ExtenderError(NodeCMSError):
    """Raised when a content-type hook fails."""
    code = STATUS_CODE_EXTENDER


HTTP_STATUS_BY_CODE = {
    STATUS_CODE_STORE_ACCESS: 500,
    STATUS_CODE_NOT_FOUND: 404,
    STATUS_CODE_PERMISSION_DENIED: 403,
    STATUS_CODE_CONFLICT: 409,
    STATUS_CODE_VALIDATION: 422,
    STATUS_CODE_EXTENDER: 500,
}


def http_status_for(exc: NodeCMSError) -> int:
    return HTTP_STATUS_BY_CODE.get(exc.code, 500)
