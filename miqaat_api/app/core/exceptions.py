"""Domain exceptions raised by the service layer.

Endpoints translate these into HTTP responses.  ``ValueError`` is still
used for plain "not found" cases, matching the rest of the services.
"""

from typing import Any, Dict, Optional


class ConflictError(Exception):
    """Raised when a write would violate a uniqueness rule."""


class FamilyAccessError(PermissionError):
    """Raised when the caller is not in the target attendee's household."""


class MalformedRosterError(ValueError):
    """Raised before a roster sync starts when the uploaded rows are unusable."""


class RosterStorageError(RuntimeError):
    """Raised when a roster sync fails inside its transaction and was rolled back."""


class PassPreferenceError(Exception):
    """Business rule violation for pass preferences.

    Carries a machine readable ``error_code`` and the HTTP status the
    endpoint should answer with.
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        status_code: int = 422,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        return {"error_code": self.error_code, "message": self.message, "details": self.details}
