"""
Prompts module.

Prompt templates for the AI scorer.
"""

from .templates import PromptTemplate, SCORING_PROMPT

__all__ = ["PromptTemplate", "SCORING_PROMPT"]
