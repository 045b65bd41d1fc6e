"""Output path helpers."""

import re
import unicodedata
from pathlib import Path

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def ensure_dir(path: Path) -> Path:
    """Create ``path`` (and parents) if needed and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_filename(name: str, max_length: int = 120) -> str:
    """ASCII file stem for report names.

    Runs of anything outside letters, digits, dot, dash and underscore
    become a single underscore, e.g. "report Prathom 5" -> "report_Prathom_5".
    """
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    stem = _UNSAFE.sub("_", ascii_name).strip("._")
    return stem[:max_length] or "unnamed"
