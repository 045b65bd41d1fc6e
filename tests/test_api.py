"""
Test: portal backend client over httpx.MockTransport.
"""
import base64
import json

import httpx
import pytest

from activity_grader.portal import (
    ActivityType,
    Grade,
    PortalAPI,
    PortalAPIError,
    PortalAuthError,
    PortalValidationError,
    Room,
    UploadRequest,
    create_api_client,
)
from activity_grader.rubrics import ReviewStatus, RubricReview

URL = "https://portal.example.com/exec"

ROW = {
    "rowId": 7,
    "name": "Anan",
    "studentNumber": "12",
    "grade": "Prathom 5",
    "room": "Room 2",
    "activityType": "Children Day",
    "fileUrl": "https://drive.example.com/7",
    "timestamp": "2026-01-10T08:00:00Z",
    "revision": 3,
    "review": {
        "contentAccuracy": 5, "participation": 4, "presentation": 4, "discipline": 5,
        "totalScore": 18, "percentage": 90, "comment": "ดี", "status": "Graded",
    },
}


def make_api(handler):
    requests = []

    def recording(request):
        requests.append(json.loads(request.content))
        return handler(request)

    return PortalAPI(URL, transport=httpx.MockTransport(recording)), requests


class TestPortalAPI:
    def test_list_submissions(self):
        api, requests = make_api(lambda r: httpx.Response(200, json={"success": True, "data": [ROW]}))
        with api:
            [sub] = api.list_submissions()

        assert requests == [{"action": "list", "data": {}}]
        assert sub.row_id == 7
        assert sub.grade is Grade.PRATHOM_5
        assert sub.room is Room.ROOM_2
        assert sub.activity_type is ActivityType.CHILDREN_DAY
        assert sub.revision == 3
        assert sub.review.total_score == 18
        assert sub.is_graded

    def test_invalid_review_is_ignored(self):
        row = {**ROW, "review": {"contentAccuracy": 9, "status": "Graded"}}
        api, _ = make_api(lambda r: httpx.Response(200, json={"success": True, "data": [row]}))
        [sub] = api.list_submissions()
        assert sub.review is None
        assert sub.is_pending

    def test_unknown_class_kept_as_text(self):
        row = {**ROW, "room": "Room 9"}
        api, _ = make_api(lambda r: httpx.Response(200, json={"success": True, "data": [row]}))
        [sub] = api.list_submissions()
        assert sub.room == "Room 9"

    def test_save_grade_payload(self):
        api, requests = make_api(lambda r: httpx.Response(200, json={"success": True}))
        review = RubricReview(5, 5, 4, 3, comment="ok", status=ReviewStatus.GRADED)

        assert api.save_grade(7, review, ActivityType.SPORTS_DAY) is True
        assert requests == [{
            "action": "grade",
            "data": {
                "rowId": 7, "contentAccuracy": 5, "participation": 5, "presentation": 4,
                "discipline": 3, "totalScore": 17, "percentage": 85, "comment": "ok",
                "status": "Graded", "activityType": "Sports Day",
            },
        }]

    def test_upload_encodes_file(self):
        api, requests = make_api(lambda r: httpx.Response(200, json={"success": True}))
        request = UploadRequest("Anan", "12", "Prathom 5", "Room 1", "Sports Day", b"\x00video", "a.mp4", "video/mp4")
        api.upload_submission(request)

        data = requests[0]["data"]
        assert requests[0]["action"] == "upload"
        assert base64.b64decode(data["fileData"]) == b"\x00video"
        assert data["mimeType"] == "video/mp4"
        assert data["studentNumber"] == "12"

    def test_login(self):
        api, requests = make_api(lambda r: httpx.Response(200, json={"success": True, "teacherName": "Kru Malee"}))
        assert api.login("malee", "1234").teacher_name == "Kru Malee"
        assert requests[0]["data"] == {"username": "malee", "pin": "1234"}

    def test_login_refused(self):
        api, _ = make_api(lambda r: httpx.Response(200, json={"success": False, "message": "PIN ไม่ถูกต้อง"}))
        with pytest.raises(PortalAuthError, match="PIN"):
            api.login("malee", "0000")

    def test_unsuccessful_response(self):
        api, _ = make_api(lambda r: httpx.Response(200, json={"success": False, "message": "sheet locked"}))
        with pytest.raises(PortalAPIError, match="sheet locked") as exc_info:
            api.save_grade(1, RubricReview(), ActivityType.SPORTS_DAY)
        assert exc_info.value.action == "grade"

    def test_validation_error(self):
        api, _ = make_api(lambda r: httpx.Response(200, json={"success": False, "error": "validation"}))
        with pytest.raises(PortalValidationError):
            api.list_submissions()

    def test_http_error(self):
        api, _ = make_api(lambda r: httpx.Response(500, text="boom"))
        with pytest.raises(PortalAPIError, match="HTTP 500"):
            api.list_submissions()

    def test_non_json_body(self):
        api, _ = make_api(lambda r: httpx.Response(200, text="<html>login</html>"))
        with pytest.raises(PortalAPIError, match="Non-JSON"):
            api.list_submissions()

    def test_transport_error(self):
        def fail(request):
            raise httpx.ConnectError("unreachable", request=request)

        api, _ = make_api(fail)
        with pytest.raises(PortalAPIError, match="Request failed"):
            api.list_submissions()


class TestCreateApiClient:
    def test_url_from_env(self, monkeypatch):
        monkeypatch.setenv("PORTAL_URL", URL)
        assert create_api_client().base_url == URL

    def test_missing_url(self, monkeypatch):
        monkeypatch.delenv("PORTAL_URL", raising=False)
        with pytest.raises(ValueError, match="PORTAL_URL"):
            create_api_client()


class TestMalformedRows:
    def test_malformed_row_is_skipped(self):
        rows = [ROW, {**ROW, "rowId": 8, "revision": "r2"}, {**ROW, "rowId": "eight"}, "junk"]
        api, _ = make_api(lambda r: httpx.Response(200, json={"success": True, "data": rows}))
        assert [s.row_id for s in api.list_submissions()] == [7]

    def test_numeric_comment_becomes_text(self):
        row = {**ROW, "review": {**ROW["review"], "comment": 10}}
        api, _ = make_api(lambda r: httpx.Response(200, json={"success": True, "data": [row]}))
        [sub] = api.list_submissions()
        assert sub.review.comment == "10"
