"""Client-side cache of the portal's submissions."""

from typing import Protocol, Sequence

from .portal.models import Submission
from .utils.logging import get_logger

logger = get_logger(__name__)


class SubmissionSource(Protocol):
    def list_submissions(self) -> list[Submission]: ...


class SubmissionStore:
    """Holds the full submission list fetched from the backend.

    The list is replaced wholesale on every refresh; rows are matched
    across refreshes by ``row_id``.
    """

    def __init__(self, source: SubmissionSource):
        self.source = source
        self._submissions: tuple[Submission, ...] = ()
        self._loaded = False

    @property
    def submissions(self) -> tuple[Submission, ...]:
        return self._submissions

    @property
    def loaded(self) -> bool:
        return self._loaded

    def refresh(self) -> tuple[Submission, ...]:
        """Re-fetch the list from the backend.

        On failure the previous list is kept and the error propagates.
        """
        fetched = self.source.list_submissions()
        self._submissions = tuple(fetched)
        self._loaded = True
        logger.debug(f"Store refreshed: {len(self._submissions)} submissions")
        return self._submissions

    def ensure_loaded(self) -> tuple[Submission, ...]:
        if not self._loaded:
            return self.refresh()
        return self._submissions

    def get(self, row_id: int | None) -> Submission | None:
        """Current copy of the submission with this row id, if any."""
        if row_id is None:
            return None
        for submission in self._submissions:
            if submission.row_id == row_id:
                return submission
        return None

    def replace_all(self, submissions: Sequence[Submission]) -> None:
        """Seed the store without a backend round trip."""
        self._submissions = tuple(submissions)
        self._loaded = True

    def __len__(self) -> int:
        return len(self._submissions)
