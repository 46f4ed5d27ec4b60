"""
Category roll-up: points-weighted percentage of the graded assignments in one category.
"""

import logging
import math
from typing import Iterable, Optional

from ..core.entities import Assignment, Category, CategoryResult


logger = logging.getLogger(__name__)


def _usable(assignment: Assignment) -> bool:
    if assignment.grade is None:
        return False
    if not math.isfinite(assignment.points_possible) or assignment.points_possible <= 0:
        logger.warning("Ignoring assignment %s with points_possible=%r",
                       assignment.id, assignment.points_possible)
        return False
    if not math.isfinite(assignment.grade.points_earned):
        logger.warning("Ignoring assignment %s with points_earned=%r",
                       assignment.id, assignment.grade.points_earned)
        return False
    return True


def aggregate_category(assignments: Iterable[Assignment], category: Category) -> CategoryResult:
    """Roll up one category.

    The percentage is ``sum(points_earned) / sum(points_possible) * 100`` over
    graded assignments, so a 10-point and a 90-point assignment scored 10/10
    and 0/90 give 10%, not 50%. Extra credit may push it above 100.

    A category with no usable graded assignment is ineligible: its
    ``percentage`` is None and it carries no weight in the class grade.
    """
    earned = 0.0
    possible = 0.0
    graded = 0

    for assignment in assignments:
        if assignment.category_id != category.id or not _usable(assignment):
            continue
        earned += max(assignment.grade.points_earned, 0.0)
        possible += assignment.points_possible
        graded += 1

    percentage: Optional[float] = None
    if graded and possible > 0:
        percentage = earned / possible * 100
        if not math.isfinite(percentage):
            logger.warning("Category %s totals overflow (earned=%r possible=%r); treating as ungraded",
                           category.id, earned, possible)
            percentage = None

    return CategoryResult(
        category_id=category.id,
        name=category.name,
        weight=category.weight,
        earned_points=earned,
        possible_points=possible,
        graded_count=graded,
        percentage=percentage,
    )
