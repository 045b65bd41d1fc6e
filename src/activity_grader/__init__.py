"""
Activity Grader

Grading core for the classroom activity video portal: rubric scoring,
submission filtering, single and bulk AI-assisted grading, and grade
exports for printing and spreadsheets.
"""

__version__ = "0.1.0"
