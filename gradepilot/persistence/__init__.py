"""
Persistence module for grade data storage.
"""

from .repositories import InMemoryGradeRepository, validate_class_tree, validate_grade

__all__ = [
    "InMemoryGradeRepository",
    "validate_class_tree",
    "validate_grade",
]
