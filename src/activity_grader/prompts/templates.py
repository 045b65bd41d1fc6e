"""Scoring prompt for the AI scorer."""

import re
from dataclasses import dataclass
from typing import Any

# Only bare word slots count; the JSON example's braces are left alone
_SLOT = re.compile(r"\{(\w+)\}")


@dataclass(frozen=True)
class PromptTemplate:
    """Prompt text with ``{slot}`` placeholders filled per submission."""

    name: str
    content: str

    @property
    def slots(self) -> frozenset[str]:
        return frozenset(_SLOT.findall(self.content))

    def render(self, **values: Any) -> str:
        """Fill every slot.

        Raises:
            ValueError: If a slot has no value
        """
        missing = self.slots - values.keys()
        if missing:
            raise ValueError(f"Prompt '{self.name}' is missing values for: {sorted(missing)}")
        return _SLOT.sub(lambda m: str(values[m.group(1)]), self.content)


SCORING_PROMPT = PromptTemplate(
    name="activity_scoring",
    content=(
        "คุณเป็นคุณครูผู้เชี่ยวชาญด้านสุขศึกษาและพลศึกษา "
        "ประเมินวิดีโอส่งงานของนักเรียนชื่อ \"{student_name}\" "
        "ชั้น {grade} กิจกรรม: {activity}\n"
        "ให้คะแนนเป็นจำนวนเต็ม 0-5 สำหรับ contentAccuracy, participation, "
        "presentation, discipline และเขียน comment ภาษาไทยสั้นๆ\n\n"
        "Return ONLY a JSON object with exactly these keys:\n"
        "{\"contentAccuracy\": int, \"participation\": int, "
        "\"presentation\": int, \"discipline\": int, \"comment\": string}\n"
        "No markdown code fences, no text before or after the JSON."
    ),
)
