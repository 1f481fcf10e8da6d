from dataclasses import dataclass
from typing import Optional

from .enums import SubscriptionTier


DEFAULT_STYLE_LABEL = "Standard"

CAIE_INSTRUCTION = (
    "Strictly follow Cambridge Assessment International Education (CAIE) style. "
    "Use command words like 'State', 'Define', 'Explain', 'Discuss'. "
    "Ensure marking schemes are precise."
)


@dataclass(frozen=True)
class ExamStyle:
    id: str
    label: str
    tier: SubscriptionTier
    description: str
    instruction: str = ""


EXAM_STYLES = [
    ExamStyle(
        id="standard",
        label="Standard / Generic",
        tier=SubscriptionTier.FREE,
        description="General knowledge quiz format suitable for quick practice.",
    ),
    ExamStyle(
        id="class_test",
        label="Class / Unit Test",
        tier=SubscriptionTier.BASIC,
        description="School-level assessment focus on specific chapter definitions and concepts.",
        instruction=(
            "Format as a standard school unit test. "
            "Focus on checking conceptual understanding of the specific chapter/topic."
        ),
    ),
    ExamStyle(
        id="sindh_board",
        label="Sindh Board (Matric/Inter)",
        tier=SubscriptionTier.BASIC,
        description="Follows Sindh Board curriculum style and textbook phrasing.",
        instruction=(
            "Strictly follow Sindh Board (Pakistan) curriculum style. "
            "Focus on bookish definitions and typical board exam phrasing."
        ),
    ),
    ExamStyle(
        id="caie_o",
        label="CAIE O Level / IGCSE",
        tier=SubscriptionTier.BASIC,
        description="Cambridge style questions using command words (State, Define, Explain).",
        instruction=CAIE_INSTRUCTION,
    ),
    ExamStyle(
        id="caie_a",
        label="CAIE A Level",
        tier=SubscriptionTier.PRO,
        description="Advanced Cambridge level analysis, evaluation, and structured essays.",
        instruction=CAIE_INSTRUCTION,
    ),
    ExamStyle(
        id="sat",
        label="SAT / Entrance Exam",
        tier=SubscriptionTier.PRO,
        description="Aptitude test style focusing on logic, reading comprehension, and math.",
        instruction=(
            "Format as an SAT aptitude test. "
            "Focus on logic, critical thinking, and standard SAT phrasing."
        ),
    ),
]

_STYLES_BY_ID = {style.id: style for style in EXAM_STYLES}


def get_exam_style(style_id: Optional[str]) -> Optional[ExamStyle]:
    if not style_id:
        return None
    return _STYLES_BY_ID.get(style_id)


def get_style_label(style_id: Optional[str]) -> str:
    style = get_exam_style(style_id)
    return style.label if style else DEFAULT_STYLE_LABEL


def get_style_instruction(style_id: Optional[str]) -> str:
    """Unknown ids yield an empty instruction rather than an error."""
    style = get_exam_style(style_id)
    return style.instruction if style else ""
