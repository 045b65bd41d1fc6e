"""
Portal backend REST wrapper.

The portal backend is a single web-app endpoint (a spreadsheet script in
production) that accepts ``POST {"action": ..., "data": {...}}`` and answers
with a JSON object carrying a ``success`` flag. This module wraps the four
actions the grader uses and turns every failure shape into a
``PortalAPIError``.
"""

import base64
import os
from dataclasses import dataclass
from typing import Any

import httpx

from ..rubrics.models import RubricReview
from ..utils.logging import get_logger
from .models import Submission, enum_value

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------


class PortalAPIError(Exception):
    """Base exception for portal backend errors."""

    def __init__(self, message: str, action: str | None = None):
        super().__init__(message)
        self.action = action


class PortalAuthError(PortalAPIError):
    """Login refused by the backend."""

    pass


class PortalValidationError(PortalAPIError):
    """Backend rejected the request payload."""

    pass


# -----------------------------------------------------------------------------
# Request/response shapes
# -----------------------------------------------------------------------------


@dataclass
class LoginResult:
    """Outcome of a successful teacher login."""

    teacher_name: str
    message: str = ""


@dataclass
class UploadRequest:
    """A student upload ready to be sent to the backend."""

    name: str
    student_number: str
    grade: str
    room: str
    activity_type: str
    file_data: bytes
    file_name: str
    mime_type: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "studentNumber": self.student_number,
            "grade": self.grade,
            "room": self.room,
            "activityType": self.activity_type,
            "fileData": base64.b64encode(self.file_data).decode("ascii"),
            "fileName": self.file_name,
            "mimeType": self.mime_type,
        }


# -----------------------------------------------------------------------------
# API Client
# -----------------------------------------------------------------------------


class PortalAPI:
    """
    Client for the portal backend.

    Usage:
        with PortalAPI(base_url="https://script.example.com/exec") as api:
            submissions = api.list_submissions()
    """

    DEFAULT_TIMEOUT = 60.0

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the portal client.

        Args:
            base_url: Full URL of the backend endpoint
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self._transport = transport
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                verify=self.verify_ssl,
                # Apps Script endpoints answer through a redirect
                follow_redirects=True,
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "PortalAPI":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Core call
    # -------------------------------------------------------------------------

    def _call(self, action: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Send one action to the backend.

        Args:
            action: Backend action name
            data: Action payload

        Returns:
            Parsed JSON response object

        Raises:
            PortalAPIError: On transport errors, HTTP errors, non-JSON
                bodies, or a response without ``success: true``
        """
        logger.debug(f"Calling portal action: {action}")

        try:
            response = self.client.post(self.base_url, json={"action": action, "data": data or {}})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error calling {action}: {e}")
            raise PortalAPIError(f"HTTP {e.response.status_code}: {e.response.text}", action) from e
        except httpx.RequestError as e:
            logger.error(f"Request error calling {action}: {e}")
            raise PortalAPIError(f"Request failed: {e}", action) from e

        try:
            body = response.json()
        except ValueError as e:
            raise PortalAPIError(f"Non-JSON response from {action}", action) from e

        if not isinstance(body, dict):
            raise PortalAPIError(f"Unexpected response shape from {action}", action)

        if not body.get("success"):
            message = body.get("message") or f"Action '{action}' was not successful"
            logger.error(f"Portal action {action} failed: {message}")
            if action == "login":
                raise PortalAuthError(message, action)
            if body.get("error") == "validation":
                raise PortalValidationError(message, action)
            raise PortalAPIError(message, action)

        return body

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def list_submissions(self) -> list[Submission]:
        """
        Fetch every submission.

        Returns:
            List of Submission objects in backend order
        """
        body = self._call("list")
        rows = body.get("data") or []
        if not isinstance(rows, list):
            raise PortalAPIError("'data' must be a list", "list")

        submissions = []
        for row in rows:
            if not isinstance(row, dict):
                logger.warning(f"Skipping non-object row in list reply: {row!r}")
                continue
            try:
                submissions.append(Submission.from_api_response(row))
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed row {row.get('rowId')!r}: {e}")
        logger.info(f"Fetched {len(submissions)} submissions")
        return submissions

    def upload_submission(self, request: UploadRequest) -> bool:
        """
        Upload a student's video and its metadata.

        Returns:
            True once the backend accepted the upload
        """
        logger.info(f"Uploading {request.file_name} for {request.name}")
        self._call("upload", request.to_payload())
        return True

    def save_grade(
        self,
        row_id: int,
        review: RubricReview,
        activity_type: Any,
    ) -> bool:
        """
        Persist one review for one submission row.

        Args:
            row_id: Backend row of the submission
            review: Review to store (status is sent as given)
            activity_type: Activity of the submission

        Returns:
            True if the grade was saved
        """
        payload = {"rowId": row_id, **review.to_payload(), "activityType": enum_value(activity_type)}
        logger.info(f"Saving grade {payload['totalScore']}/20 for row {row_id}")
        self._call("grade", payload)
        return True

    def login(self, username: str, pin: str) -> LoginResult:
        """
        Check teacher credentials with the backend.

        Raises:
            PortalAuthError: If the backend refuses the PIN
        """
        body = self._call("login", {"username": username, "pin": pin})
        teacher_name = body.get("teacherName") or username
        logger.info(f"Teacher logged in: {teacher_name}")
        return LoginResult(teacher_name=teacher_name, message=body.get("message") or "")


# -----------------------------------------------------------------------------
# Convenience Functions
# -----------------------------------------------------------------------------


def create_api_client(
    base_url: str | None = None,
    url_env_var: str = "PORTAL_URL",
    timeout: float = PortalAPI.DEFAULT_TIMEOUT,
    verify_ssl: bool = True,
) -> PortalAPI:
    """
    Create a PortalAPI with the URL from the environment if not provided.

    Raises:
        ValueError: If no URL is available
    """
    if base_url is None:
        base_url = os.environ.get(url_env_var)

    if not base_url:
        raise ValueError(
            f"Portal URL required. Provide base_url or set {url_env_var} environment variable."
        )

    return PortalAPI(base_url=base_url, timeout=timeout, verify_ssl=verify_ssl)
