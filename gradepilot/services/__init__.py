"""
Services module containing the grade aggregation engine.
"""

from .category_aggregator import aggregate_category
from .class_grade_calculator import ClassGradeCalculator
from .gpa_aggregator import GPAAggregator
from .what_if_engine import WhatIfEngine, apply_changes
from .grade_service import GradeService

__all__ = [
    "aggregate_category",
    "ClassGradeCalculator",
    "GPAAggregator",
    "WhatIfEngine",
    "apply_changes",
    "GradeService",
]
