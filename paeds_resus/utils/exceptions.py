"""
Custom Exception Hierarchy

The decision core is total over well-typed input: no-match results,
validation-error lists and default-deny permissions instead of raising.
These exceptions cover the remaining cases, which are configuration
mistakes (a malformed catalogue or case file) and lookups at the service
boundary.
"""
from typing import Optional, Dict, Any


class ResusEngineError(Exception):
    """Base exception for the resuscitation decision engine."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class CatalogError(ResusEngineError):
    """The engine catalogue failed its integrity checks at load time."""

    def __init__(
        self,
        message: str,
        engine_id: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="CATALOG_ERROR",
            details={"engine_id": engine_id, **(details or {})}
        )
        self.engine_id = engine_id


class CaseLoadError(ResusEngineError):
    """A simulation case file could not be read or validated."""

    def __init__(
        self,
        message: str,
        source: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="CASE_LOAD_ERROR",
            details={"source": source, **(details or {})}
        )
        self.source = source


class UnknownCaseError(ResusEngineError):
    """No simulation case with the requested id."""

    def __init__(self, case_id: str):
        super().__init__(
            message=f"Simulation case '{case_id}' not found",
            code="UNKNOWN_CASE",
            details={"case_id": case_id}
        )
        self.case_id = case_id


class SessionNotFoundError(ResusEngineError):
    """No clinical session with the requested id."""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session '{session_id}' not found",
            code="SESSION_NOT_FOUND",
            details={"session_id": session_id}
        )
        self.session_id = session_id


class OverrideRejectedError(ResusEngineError):
    """An override was refused by permission or justification checks."""

    def __init__(
        self,
        message: str,
        errors: Optional[list] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="OVERRIDE_REJECTED",
            details={"errors": list(errors or []), **(details or {})}
        )
        self.errors = list(errors or [])
