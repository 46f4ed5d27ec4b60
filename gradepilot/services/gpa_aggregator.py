"""
Student roll-up: credit-hour weighted cumulative and semester GPA.
"""

import logging
import math
from typing import Collection, Iterable, List, Optional, Tuple

from ..config import EngineSettings
from ..core.entities import ClassGrade, ClassGradeTree, GPACalculation
from ..core.enums import TermRule
from ..core.interfaces import GradeTreeSource
from .class_grade_calculator import ClassGradeCalculator


logger = logging.getLogger(__name__)


def qualifies_for_gpa(class_grade: ClassGrade) -> bool:
    """A class counts once it has a grade and a positive credit-hour value."""
    if not class_grade.has_grade:
        return False
    hours = class_grade.credit_hours
    if not math.isfinite(hours) or hours <= 0:
        logger.warning("Excluding class %s from GPA: credit_hours=%r",
                       class_grade.class_id, hours)
        return False
    return True


def weighted_gpa(class_grades: Iterable[ClassGrade]) -> Tuple[float, float]:
    """Return ``(gpa, credit_hours)``; GPA is 0.0 when there are no credit hours."""
    quality_points = 0.0
    credit_hours = 0.0
    for class_grade in class_grades:
        quality_points += class_grade.quality_points
        credit_hours += class_grade.credit_hours
    if credit_hours <= 0:
        return 0.0, 0.0
    return quality_points / credit_hours, credit_hours


class GPAAggregator:
    """Builds ``GPACalculation`` snapshots from a student's class trees."""

    def __init__(self, source: GradeTreeSource, settings: Optional[EngineSettings] = None,
                 calculator: Optional[ClassGradeCalculator] = None):
        self._source = source
        self._settings = settings or EngineSettings()
        self._calculator = calculator or ClassGradeCalculator(
            self._settings.build_scale(), self._settings.grade_precision
        )

    @property
    def calculator(self) -> ClassGradeCalculator:
        return self._calculator

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def load_trees(self, student_id: str) -> List[ClassGradeTree]:
        return list(self._source.fetch_class_grade_tree(student_id))

    def grade_classes(self, trees: Iterable[ClassGradeTree]) -> List[ClassGrade]:
        """Grade every tree, ungraded classes included, preserving order."""
        return [self._calculator.calculate_tree(tree) for tree in trees]

    def calculate_full_gpa(self, student_id: str,
                           semester_class_ids: Optional[Collection[str]] = None) -> GPACalculation:
        """Compute the baseline GPA snapshot for a student.

        ``semester_class_ids`` is an optional pre-filtered term membership
        that overrides the configured term rule.
        """
        trees = self.load_trees(student_id)
        calculation = self.summarize(self.grade_classes(trees), semester_class_ids)
        logger.debug("Student %s: gpa=%s semester=%s classes=%d",
                     student_id, calculation.current_gpa, calculation.semester_gpa,
                     len(calculation.class_grades))
        return calculation

    def summarize(self, class_grades: Iterable[ClassGrade],
                  semester_class_ids: Optional[Collection[str]] = None) -> GPACalculation:
        """Apply the weighted-average formula to already computed class grades."""
        qualifying = tuple(grade for grade in class_grades if qualifies_for_gpa(grade))
        semester = [grade for grade in qualifying if self.in_semester(grade, semester_class_ids)]

        current_gpa, total_hours = weighted_gpa(qualifying)
        semester_gpa, semester_hours = weighted_gpa(semester)
        precision = self._settings.gpa_precision

        return GPACalculation(
            current_gpa=round(current_gpa, precision),
            semester_gpa=round(semester_gpa, precision),
            total_credit_hours=total_hours,
            class_grades=qualifying,
            semester_credit_hours=semester_hours,
        )

    def in_semester(self, class_grade: ClassGrade,
                    semester_class_ids: Optional[Collection[str]] = None) -> bool:
        if semester_class_ids is not None:
            return class_grade.class_id in semester_class_ids
        if self._settings.term_rule is TermRule.EXPLICIT_TERM:
            return class_grade.term is not None and class_grade.term == self._settings.current_term
        return not class_grade.is_completed
