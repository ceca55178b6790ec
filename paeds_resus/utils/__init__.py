"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    ResusEngineError,
    CatalogError,
    CaseLoadError,
    UnknownCaseError,
    SessionNotFoundError,
    OverrideRejectedError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "ResusEngineError",
    "CatalogError",
    "CaseLoadError",
    "UnknownCaseError",
    "SessionNotFoundError",
    "OverrideRejectedError",
]
