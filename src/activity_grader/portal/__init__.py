"""
Portal integration module.

Submission models and the client for the portal backend: listing
submissions, uploading videos, saving grades and teacher login.
"""

from .api import (
    PortalAPI,
    PortalAPIError,
    PortalAuthError,
    PortalValidationError,
    LoginResult,
    UploadRequest,
    create_api_client,
)
from .models import (
    ActivityType,
    Grade,
    Room,
    Submission,
    enum_value,
    parse_student_number,
)

__all__ = [
    # API client
    "PortalAPI",
    "create_api_client",
    "LoginResult",
    "UploadRequest",
    # Exceptions
    "PortalAPIError",
    "PortalAuthError",
    "PortalValidationError",
    # Models
    "ActivityType",
    "Grade",
    "Room",
    "Submission",
    "enum_value",
    "parse_student_number",
]
