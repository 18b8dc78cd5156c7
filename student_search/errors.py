"""
Error classes for the student search table client.

Every failure that reaches a user-visible notification derives from
StudentSearchError, so interaction handlers can catch a single type.
"""

from typing import Optional, Dict, Any


class StudentSearchError(Exception):
    """
    Base error class.

    Attributes:
        message: Error message (default: "Student search error")
        details: Optional additional error details
    """
    message: str = "Student search error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """
        Initialize error.

        Args:
            message: Error message (overrides default)
            details: Optional additional error details
        """
        self.message = message or self.message
        self.details = details or {}
        super().__init__(self.message)


class ElementNotFoundError(StudentSearchError):
    """A contracted element id is missing from the document."""
    message = "Element not found"


class AjaxError(StudentSearchError):
    """Web-service transport or envelope failure."""
    message = "Web service call failed"


class PreferenceError(AjaxError):
    """Preference persistence was rejected."""
    message = "Failed to update preference"


class FragmentError(AjaxError):
    """Fragment render call was rejected."""
    message = "Failed to update table."
