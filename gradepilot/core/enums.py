"""
Enumerations and constants for the grade engine.
"""

from enum import Enum


class LetterGrade(Enum):
    """Letter grades on the default 4.0 scale."""
    A_PLUS = "A+"
    A = "A"
    A_MINUS = "A-"
    B_PLUS = "B+"
    B = "B"
    B_MINUS = "B-"
    C_PLUS = "C+"
    C = "C"
    C_MINUS = "C-"
    D_PLUS = "D+"
    D = "D"
    D_MINUS = "D-"
    F = "F"


class TermRule(Enum):
    """How classes are assigned to the current term for the semester GPA."""
    IN_PROGRESS = "in_progress"  # is_completed == False
    EXPLICIT_TERM = "explicit_term"  # SchoolClass.term == current_term
