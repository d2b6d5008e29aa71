"""
sam-smith exceptions

Every error raised while reading or mutating a project derives from
SamSmithError so callers can catch the whole family at once.
"""

from typing import List, Optional


class SamSmithError(Exception):
    """Base exception for all sam-smith errors."""

    pass


class ResourceNotFoundError(SamSmithError):
    """
    Raised when a resource, sub-block or binding that must exist is absent.

    Examples:
        - Lambda function not found in template
        - Endpoint GET /hello not bound on the gateway
        - Layer not attached to the function
    """

    pass


class ConflictError(SamSmithError):
    """
    Raised when an operation would break a project invariant.

    Examples:
        - Duplicate endpoint method and path
        - Deleting the only Lambda in a project
        - Deleting a layer still attached to functions
        - Adding Auth to a gateway that already has it
    """

    def __init__(self, message: str, referrers: Optional[List[str]] = None):
        super().__init__(message)
        self.referrers = referrers or []


class TemplateIOError(SamSmithError):
    """
    Raised when a project file cannot be read or written.

    Examples:
        - template.yaml missing
        - .env missing when required
    """

    pass


class TemplateStructureError(SamSmithError):
    """
    Raised when the template does not have the shape the engine expects.

    Examples:
        - No Resources section
        - A resource could not be located again after an edit
    """

    pass
