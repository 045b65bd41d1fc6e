"""Configuration data models."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class BackendSettings:
    """Portal backend connection settings."""

    url: str | None = None
    timeout: float = 60.0
    verify_ssl: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BackendSettings":
        return cls(
            url=data.get("url"),
            timeout=data.get("timeout", 60.0),
            verify_ssl=data.get("verify_ssl", True),
        )


@dataclass
class ScorerSettings:
    """AI scorer settings."""

    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 1024
    temperature: float = 0.3

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScorerSettings":
        return cls(
            model=data.get("model", "claude-sonnet-4-20250514"),
            max_tokens=data.get("max_tokens", 1024),
            temperature=data.get("temperature", 0.3),
        )


@dataclass
class PollingSettings:
    """Result polling settings."""

    interval_seconds: float = 20.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PollingSettings":
        return cls(interval_seconds=data.get("interval_seconds", 20.0))


@dataclass
class ReportSettings:
    """Export and printable report settings."""

    teacher_name: str = ""
    font_path: Path | None = None
    output_dir: Path = Path("outputs")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReportSettings":
        font_path = data.get("font_path")
        return cls(
            teacher_name=data.get("teacher_name", ""),
            font_path=Path(font_path).expanduser() if font_path else None,
            output_dir=Path(data.get("output_dir", "outputs")).expanduser(),
        )


@dataclass
class PortalConfig:
    """Complete grader configuration."""

    backend: BackendSettings = field(default_factory=BackendSettings)
    scorer: ScorerSettings = field(default_factory=ScorerSettings)
    polling: PollingSettings = field(default_factory=PollingSettings)
    report: ReportSettings = field(default_factory=ReportSettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "PortalConfig":
        data = data or {}
        return cls(
            backend=BackendSettings.from_dict(data.get("backend") or {}),
            scorer=ScorerSettings.from_dict(data.get("scorer") or {}),
            polling=PollingSettings.from_dict(data.get("polling") or {}),
            report=ReportSettings.from_dict(data.get("report") or {}),
        )
