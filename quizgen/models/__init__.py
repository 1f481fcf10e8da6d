from .enums import SubscriptionTier, QuestionType, Difficulty, UserRole
from .exam_styles import ExamStyle, EXAM_STYLES, get_exam_style, get_style_label, get_style_instruction
from .user import UserContext

__all__ = [
    "SubscriptionTier",
    "QuestionType",
    "Difficulty",
    "UserRole",
    "ExamStyle",
    "EXAM_STYLES",
    "get_exam_style",
    "get_style_label",
    "get_style_instruction",
    "UserContext",
]
