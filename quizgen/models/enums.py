"""Enums shared by the generation pipeline and the API layer"""

from enum import Enum


class SubscriptionTier(str, Enum):
    """Subscription levels; each maps to its own model and API key"""
    FREE = "Free"
    BASIC = "Basic"
    PRO = "Pro"


class QuestionType(str, Enum):
    """Canonical question kinds every raw AI question is normalised into"""
    MCQ = "MCQ"
    TRUE_FALSE = "TrueFalse"
    SHORT_ANSWER = "ShortAnswer"
    ESSAY = "Essay"
    FILL_IN_THE_BLANK = "FillInTheBlank"


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
