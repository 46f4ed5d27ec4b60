"""
Class roll-up: weighted category percentages with renormalization over eligible categories.
"""

import logging
import math
from dataclasses import replace
from typing import Iterable, List, Optional

from ..core.entities import Assignment, Category, CategoryResult, ClassGrade, ClassGradeTree, SchoolClass
from ..core.grading_scale import GradeScale
from .category_aggregator import aggregate_category


logger = logging.getLogger(__name__)


def _raw_weight(category: CategoryResult) -> float:
    weight = category.weight
    if not math.isfinite(weight) or weight < 0:
        logger.warning("Category %s has invalid weight %r, treating as 0",
                       category.category_id, weight)
        return 0.0
    return weight


class ClassGradeCalculator:
    """Computes a ``ClassGrade`` from one class's categories and assignments."""

    def __init__(self, scale: Optional[GradeScale] = None, grade_precision: int = 1):
        self._scale = scale or GradeScale()
        self._grade_precision = grade_precision

    @property
    def scale(self) -> GradeScale:
        return self._scale

    def calculate_class_grade(self, school_class: SchoolClass, categories: Iterable[Category],
                              assignments: Iterable[Assignment]) -> ClassGrade:
        """Weighted class grade.

        Each eligible category's effective weight is its raw weight divided by
        the sum of raw weights of eligible categories, so an ungraded
        category (e.g. a final exam not yet taken) does not drag the grade
        toward zero. When every eligible category has weight 0 they share
        the weight equally. With no eligible category the grade is None and
        the class stays out of GPA math.
        """
        assignments = list(assignments)
        results: List[CategoryResult] = [aggregate_category(assignments, category)
                                         for category in categories]

        eligible = [result for result in results if result.is_eligible]
        weights = {result.category_id: _raw_weight(result) for result in eligible}
        total_weight = sum(weights.values())

        current_grade: Optional[float] = None
        if eligible:
            if total_weight <= 0:
                weights = {category_id: 1.0 for category_id in weights}
                total_weight = float(len(weights))
            weighted_sum = 0.0
            for result in eligible:
                weighted_sum += result.percentage * weights[result.category_id]
            raw_grade = weighted_sum / total_weight
            if math.isfinite(raw_grade):
                current_grade = min(max(raw_grade, 0.0), 100.0)
                results = [
                    replace(result, effective_weight=weights[result.category_id] / total_weight)
                    if result.is_eligible else result
                    for result in results
                ]
            else:
                logger.warning("Class %s grade is not finite (%r); treating as ungraded",
                               school_class.id, raw_grade)
                eligible = []

        letter = None
        points = None
        display = None
        if current_grade is not None:
            letter, points = self._scale.map_percentage_to_letter(current_grade)
            display = round(current_grade, self._grade_precision)

        logger.debug("Class %s: grade=%s letter=%s eligible=%d/%d",
                     school_class.id, current_grade, letter, len(eligible), len(results))

        return ClassGrade(
            class_id=school_class.id,
            class_name=school_class.name,
            credit_hours=school_class.credit_hours,
            is_completed=school_class.is_completed,
            current_grade=current_grade,
            display_grade=display,
            letter_grade=letter,
            grade_points=points,
            term=school_class.term,
            categories=tuple(results),
        )

    def calculate_tree(self, tree: ClassGradeTree) -> ClassGrade:
        return self.calculate_class_grade(tree.school_class, tree.categories, tree.assignments)
