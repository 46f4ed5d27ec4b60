"""
Core module containing the grade domain records, contracts and grading scale.
"""

from .entities import *
from .interfaces import *
from .exceptions import *
from .enums import *
from .grading_scale import *

__all__ = [
    # Entities
    "Grade",
    "Assignment",
    "Category",
    "SchoolClass",
    "ClassGradeTree",
    "CategoryResult",
    "ClassGrade",
    "GPACalculation",
    "GradeChange",
    "WhatIfScenario",
    
    # Interfaces
    "GradeTreeSource",
    "GradeRepository",
    
    # Grading scale
    "GradeScale",
    "DEFAULT_GRADE_THRESHOLDS",
    "DEFAULT_GRADE_POINTS",
    "map_percentage_to_letter",
    
    # Enums
    "LetterGrade",
    "TermRule",
    
    # Exceptions
    "GradePilotException",
    "ValidationError",
    "ConfigurationError",
    "MissingDataError",
    "ResourceNotFoundError",
]
