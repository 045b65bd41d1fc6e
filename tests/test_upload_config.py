"""
Test: upload preparation and configuration loading.
"""
from pathlib import Path

import pytest

from activity_grader.config import ConfigLoader, PortalConfig
from activity_grader.portal.models import ActivityType, Room
from activity_grader.upload import SubmissionValidationError, prepare_upload


class TestPrepareUpload:
    def test_builds_request(self, tmp_path):
        video = tmp_path / "run.mp4"
        video.write_bytes(b"frames")
        request = prepare_upload(" Anan ", "12", video, room=Room.ROOM_3, activity_type=ActivityType.CHILDREN_DAY)

        assert request.name == "Anan"
        assert request.room == "Room 3"
        assert request.activity_type == "Children Day"
        assert request.file_data == b"frames"
        assert request.file_name == "run.mp4"
        assert request.mime_type == "video/mp4"

    def test_unknown_extension(self, tmp_path):
        video = tmp_path / "clip.zzvideo"
        video.write_bytes(b"x")
        assert prepare_upload("Anan", "1", video).mime_type == "application/octet-stream"

    def test_missing_fields(self, tmp_path):
        with pytest.raises(SubmissionValidationError) as exc_info:
            prepare_upload("  ", "", tmp_path / "missing.mp4")
        assert exc_info.value.missing == ["name", "student_number", "video"]


class TestConfigLoader:
    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        monkeypatch.delenv("PORTAL_URL", raising=False)
        monkeypatch.delenv("PORTAL_TEACHER_NAME", raising=False)

    def test_defaults_without_file(self, tmp_path):
        config = ConfigLoader(tmp_path).load()
        assert config == PortalConfig()
        assert config.polling.interval_seconds == 20.0

    def test_yaml_and_env(self, tmp_path, monkeypatch):
        (tmp_path / "grader.yml").write_text(
            "backend:\n"
            "  url: https://from-file.example.com\n"
            "  timeout: 15\n"
            "scorer:\n"
            "  model: claude-test\n"
            "report:\n"
            "  teacher_name: Kru Malee\n"
            "  font_path: fonts/Sarabun.ttf\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("PORTAL_URL", "https://from-env.example.com")

        config = ConfigLoader(tmp_path).load()

        assert config.backend.url == "https://from-env.example.com"
        assert config.backend.timeout == 15
        assert config.scorer.model == "claude-test"
        assert config.report.teacher_name == "Kru Malee"
        assert config.report.font_path == Path("fonts/Sarabun.ttf")

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader(tmp_path).load("nope.yml")
