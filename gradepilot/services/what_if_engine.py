"""
What-if engine: previews GPA under hypothetical grades without writing anything.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Collection, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.entities import Assignment, ClassGradeTree, Grade, GradeChange, WhatIfScenario
from ..core.exceptions import MissingDataError
from .gpa_aggregator import GPAAggregator


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverlayResult:
    """Trees with hypothetical grades applied, plus bookkeeping."""
    trees: Tuple[ClassGradeTree, ...]
    touched_class_ids: frozenset
    applied: Tuple[GradeChange, ...]
    skipped: Tuple[GradeChange, ...]


def _normalize(change: GradeChange) -> Optional[GradeChange]:
    try:
        value = float(change.new_grade)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    clamped = min(max(value, 0.0), 100.0)
    if clamped != change.new_grade:
        logger.warning("Clamping new_grade %r to %s for assignment %s",
                       change.new_grade, clamped, change.assignment_id)
        return GradeChange(change.assignment_id, clamped, change.class_id, change.current_grade)
    return change


def _locate(trees: Sequence[ClassGradeTree], change: GradeChange) -> Tuple[int, Assignment]:
    for index, tree in enumerate(trees):
        if change.class_id is not None and tree.class_id != change.class_id:
            continue
        assignment = tree.find_assignment(change.assignment_id)
        if assignment is None:
            continue
        if tree.find_category(assignment.category_id) is None:
            raise MissingDataError(
                f"Assignment {assignment.id} references unknown category {assignment.category_id}",
                error_code="UNKNOWN_CATEGORY",
                details={"assignment_id": assignment.id, "category_id": assignment.category_id,
                         "class_id": tree.class_id},
            )
        return index, assignment
    raise MissingDataError(
        f"Assignment {change.assignment_id} not found in baseline",
        error_code="UNKNOWN_ASSIGNMENT",
        details={"assignment_id": change.assignment_id, "class_id": change.class_id},
    )


def apply_changes(trees: Sequence[ClassGradeTree], changes: Iterable[GradeChange]) -> OverlayResult:
    """Build new trees carrying hypothetical grades.

    The input trees are never modified; touched classes get fresh tree
    values and untouched ones are passed through as-is. A change whose
    assignment, class or category is not in the snapshot, or whose
    ``new_grade`` is not a finite number, is skipped without affecting the
    others. Applied changes carry the class they resolved to. When the same
    assignment is changed twice the later change wins.
    """
    overlays: Dict[int, Dict[str, Grade]] = {}
    applied: List[GradeChange] = []
    skipped: List[GradeChange] = []

    for change in changes:
        normalized = _normalize(change)
        if normalized is None:
            logger.warning("Skipping change for assignment %s: new_grade=%r is not a finite number",
                           change.assignment_id, change.new_grade)
            skipped.append(change)
            continue

        try:
            index, assignment = _locate(trees, normalized)
        except MissingDataError as e:
            logger.warning("Skipping change: %s", e.message)
            skipped.append(change)
            continue

        points = normalized.points_earned_for(assignment.points_possible)
        overlays.setdefault(index, {})[assignment.id] = Grade(points_earned=points, is_hypothetical=True)
        applied.append(replace(normalized, class_id=trees[index].class_id))

    result = list(trees)
    for index, grades in overlays.items():
        tree = trees[index]
        result[index] = tree.with_assignments(
            assignment.with_grade(grades[assignment.id]) if assignment.id in grades else assignment
            for assignment in tree.assignments
        )

    return OverlayResult(
        trees=tuple(result),
        touched_class_ids=frozenset(trees[index].class_id for index in overlays),
        applied=tuple(applied),
        skipped=tuple(skipped),
    )


class WhatIfEngine:
    """Computes ``WhatIfScenario`` values on top of the baseline GPA.

    Only reads through the aggregator's source; nothing is written.
    """

    def __init__(self, aggregator: GPAAggregator):
        self._aggregator = aggregator

    def calculate_what_if_scenario(self, student_id: str, changes: Iterable[GradeChange],
                                   semester_class_ids: Optional[Collection[str]] = None) -> WhatIfScenario:
        trees = self._aggregator.load_trees(student_id)
        baseline_grades = self._aggregator.grade_classes(trees)
        baseline = self._aggregator.summarize(baseline_grades, semester_class_ids)

        overlay = apply_changes(trees, changes)
        calculator = self._aggregator.calculator
        class_grades = [
            calculator.calculate_tree(tree) if tree.class_id in overlay.touched_class_ids else grade
            for tree, grade in zip(overlay.trees, baseline_grades)
        ]
        resulting = self._aggregator.summarize(class_grades, semester_class_ids)

        precision = self._aggregator.settings.gpa_precision
        gpa_change = round(resulting.current_gpa - baseline.current_gpa, precision)
        logger.debug("Student %s what-if: %s -> %s (%d applied, %d skipped)",
                     student_id, baseline.current_gpa, resulting.current_gpa,
                     len(overlay.applied), len(overlay.skipped))

        return WhatIfScenario(
            resulting_gpa=resulting.current_gpa,
            gpa_change=gpa_change,
            baseline_gpa=baseline.current_gpa,
            semester_gpa=resulting.semester_gpa,
            class_grades=resulting.class_grades,
            applied_changes=overlay.applied,
            skipped_changes=overlay.skipped,
        )
