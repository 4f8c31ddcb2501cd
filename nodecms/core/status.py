"""Status objects returned by every core operation."""

from typing import Optional

from pydantic import BaseModel

STATUS_CODE_OK = 0

# Error codes, stable per error class across components.
STATUS_CODE_STORE_ACCESS = 1
STATUS_CODE_NOT_FOUND = 2
STATUS_CODE_PERMISSION_DENIED = 3
STATUS_CODE_CONFLICT = 4
STATUS_CODE_VALIDATION = 5
STATUS_CODE_EXTENDER = 6


class Status(BaseModel):
    """Outcome of an operation; ``code == 0`` means success."""

    type: str
    code: int
    text: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.code == STATUS_CODE_OK


def status_code(code: int, type: str, text: Optional[str] = None) -> Status:
    return Status(type=type, code=code, text=text)


def success(type: str, text: Optional[str] = None) -> Status:
    """General success status for a component."""
    return status_code(STATUS_CODE_OK, type, text)
