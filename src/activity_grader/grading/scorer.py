"""
AI scoring of activity videos.

Builds the scoring prompt from submission metadata, calls the Anthropic
API and validates the reply against an explicit schema: four integer
scores in 0-5 and a comment string. Anything else is rejected with
``MalformedScoreError`` rather than passed on as scores.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from typing import Any, Protocol

from ..config.models import ScorerSettings
from ..portal.models import Submission
from ..prompts.templates import SCORING_PROMPT, PromptTemplate
from ..rubrics.models import DIMENSIONS, InvalidScoreError, Totals, compute_totals, validate_points
from ..utils.logging import get_logger

logger = get_logger(__name__)


class ScorerError(Exception):
    """The AI scorer could not produce a usable suggestion."""


class MalformedScoreError(ScorerError):
    """The AI reply did not match the score schema."""


@dataclass(frozen=True)
class ScoreSuggestion:
    """Validated AI scores for one submission."""

    scores: dict[str, int]
    comment: str

    @property
    def totals(self) -> Totals:
        return compute_totals(self.scores)


class Scorer(Protocol):
    def score(self, submission: Submission) -> ScoreSuggestion: ...


def extract_json_from_response(raw_text: str) -> dict[str, Any]:
    """
    Extract a JSON object from the model reply.

    Tolerates replies wrapped in markdown code blocks or surrounded by
    extra prose.

    Raises:
        MalformedScoreError: If no JSON object can be parsed
    """
    text = raw_text.strip()

    candidates = [text]
    candidates.extend(m.strip() for m in re.findall(r"```(?:json)?\s*([\s\S]*?)```", text))
    candidates.extend(re.findall(r"\{[\s\S]*\}", text))

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    raise MalformedScoreError(f"No JSON object in scorer reply: {text[:200]!r}")


def validate_score_response(data: Any) -> ScoreSuggestion:
    """
    Check a parsed reply against the score schema.

    Args:
        data: Parsed JSON reply

    Returns:
        ScoreSuggestion with the four scores and the comment

    Raises:
        MalformedScoreError: If a key is missing, a score is not an
            integer in 0-5, or the comment is not a string
    """
    if not isinstance(data, dict):
        raise MalformedScoreError("Scorer reply must be a JSON object")

    missing = [d.wire_key for d in DIMENSIONS if d.wire_key not in data]
    if "comment" not in data:
        missing.append("comment")
    if missing:
        raise MalformedScoreError(f"Scorer reply is missing keys: {missing}")

    scores = {}
    for dim in DIMENSIONS:
        try:
            scores[dim.key] = validate_points(dim.wire_key, data[dim.wire_key])
        except InvalidScoreError as e:
            raise MalformedScoreError(str(e)) from e

    comment = data["comment"]
    if not isinstance(comment, str):
        raise MalformedScoreError("'comment' must be a string")

    return ScoreSuggestion(scores=scores, comment=comment.strip())


def build_prompt(submission: Submission, template: PromptTemplate = SCORING_PROMPT) -> str:
    return template.render(
        student_name=submission.name,
        grade=submission.grade_label,
        activity=submission.activity_label,
    )


class AnthropicScorer:
    """Scores submissions with Claude."""

    def __init__(
        self,
        settings: ScorerSettings | None = None,
        client: Any = None,
        template: PromptTemplate = SCORING_PROMPT,
    ):
        """
        Initialize the scorer.

        Args:
            settings: Model, token and temperature settings
            client: Anthropic client; created from ANTHROPIC_API_KEY when omitted
            template: Prompt template with student_name/grade/activity slots
        """
        self.settings = settings or ScorerSettings()
        self.template = template
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            from anthropic import Anthropic

            api_key = os.getenv("ANTHROPIC_API_KEY")
            if not api_key:
                raise ScorerError(
                    "ANTHROPIC_API_KEY is not set. Export it or add it to .env"
                )
            self._client = Anthropic(api_key=api_key)
        return self._client

    def _call_llm(self, prompt: str) -> str:
        response = self.client.messages.create(
            model=self.settings.model,
            max_tokens=self.settings.max_tokens,
            temperature=self.settings.temperature,
            messages=[{"role": "user", "content": prompt}],
        )

        text_parts = []
        for block in response.content:
            if block.type == "text":
                text_parts.append(block.text)

        return "".join(text_parts).strip()

    def score(self, submission: Submission) -> ScoreSuggestion:
        """
        Ask the model for rubric scores for one submission.

        Raises:
            MalformedScoreError: If the reply does not match the schema
            ScorerError: If the API call itself fails
        """
        prompt = build_prompt(submission, self.template)
        logger.debug(f"Scoring {submission.name} ({len(prompt)} chars prompt)")

        try:
            raw_text = self._call_llm(prompt)
        except ScorerError:
            raise
        except Exception as e:
            raise ScorerError(f"Scorer request failed for {submission.name}: {e}") from e

        suggestion = validate_score_response(extract_json_from_response(raw_text))
        logger.info(f"AI suggested {suggestion.totals.total_score}/20 for {submission.name}")
        return suggestion
