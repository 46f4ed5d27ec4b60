"""
Custom exceptions for GradePilot.
"""

from typing import Optional, Any, Dict


class GradePilotException(Exception):
    """Base exception for all GradePilot errors."""
    
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(GradePilotException):
    """Raised when data validation fails."""
    pass


class ConfigurationError(GradePilotException):
    """Raised when configuration is invalid."""
    pass


class MissingDataError(GradePilotException):
    """A hypothetical change references data absent from the baseline tree."""
    pass


class ResourceNotFoundError(GradePilotException):
    """Raised when a requested resource is not found."""
    pass
