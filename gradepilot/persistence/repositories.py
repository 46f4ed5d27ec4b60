"""
In-memory grade repository with change notification.
"""

import logging
import math
import threading
from collections import OrderedDict
from typing import Dict, List, Optional

from ..core.entities import Assignment, ClassGradeTree, Grade
from ..core.exceptions import ResourceNotFoundError, ValidationError
from ..core.interfaces import ChangeListener, GradeRepository, Unsubscribe


logger = logging.getLogger(__name__)


def validate_class_tree(tree: ClassGradeTree) -> None:
    """Reject trees the grade engine would have to guard against."""
    school_class = tree.school_class
    if not math.isfinite(school_class.credit_hours) or school_class.credit_hours <= 0:
        raise ValidationError("Credit hours must be positive",
                              details={"class_id": school_class.id, "credit_hours": school_class.credit_hours})

    category_ids = set()
    for category in tree.categories:
        if category.id in category_ids:
            raise ValidationError(f"Duplicate category id {category.id}", details={"category_id": category.id})
        if not math.isfinite(category.weight) or not 0 <= category.weight <= 100:
            raise ValidationError("Category weight must be between 0 and 100",
                                  details={"category_id": category.id, "weight": category.weight})
        category_ids.add(category.id)

    assignment_ids = set()
    possible_totals: Dict[str, float] = {}
    earned_totals: Dict[str, float] = {}
    for assignment in tree.assignments:
        if assignment.id in assignment_ids:
            raise ValidationError(f"Duplicate assignment id {assignment.id}",
                                  details={"assignment_id": assignment.id})
        if assignment.category_id not in category_ids:
            raise ValidationError(f"Assignment {assignment.id} references unknown category",
                                  details={"assignment_id": assignment.id, "category_id": assignment.category_id})
        if not math.isfinite(assignment.points_possible) or assignment.points_possible <= 0:
            raise ValidationError("Points possible must be positive",
                                  details={"assignment_id": assignment.id,
                                           "points_possible": assignment.points_possible})
        if assignment.grade is not None:
            validate_grade(assignment.grade)
            category_id = assignment.category_id
            possible_totals[category_id] = possible_totals.get(category_id, 0.0) + assignment.points_possible
            earned_totals[category_id] = earned_totals.get(category_id, 0.0) + assignment.grade.points_earned
            if not (math.isfinite(possible_totals[category_id]) and math.isfinite(earned_totals[category_id])):
                raise ValidationError("Category point totals overflow",
                                      details={"category_id": category_id})
        assignment_ids.add(assignment.id)


def validate_grade(grade: Grade) -> None:
    if not math.isfinite(grade.points_earned) or grade.points_earned < 0:
        raise ValidationError("Points earned must be a non-negative number",
                              details={"points_earned": grade.points_earned})
    if grade.is_hypothetical:
        raise ValidationError("Hypothetical grades cannot be stored")


class InMemoryGradeRepository(GradeRepository):
    """Thread-safe store of class trees keyed by student.

    Trees are immutable, so ``fetch_class_grade_tree`` hands out a
    consistent snapshot without copying. Listeners are called with the
    student id after every successful write, outside the lock.
    """

    def __init__(self):
        self._trees: Dict[str, "OrderedDict[str, ClassGradeTree]"] = {}
        self._listeners: List[ChangeListener] = []
        self._lock = threading.RLock()

    def fetch_class_grade_tree(self, student_id: str) -> List[ClassGradeTree]:
        with self._lock:
            return list(self._trees.get(student_id, {}).values())

    def find_class_tree(self, student_id: str, class_id: str) -> Optional[ClassGradeTree]:
        with self._lock:
            return self._trees.get(student_id, {}).get(class_id)

    def save_class_tree(self, student_id: str, tree: ClassGradeTree) -> ClassGradeTree:
        validate_class_tree(tree)
        with self._lock:
            classes = self._trees.get(student_id, {})
            # Assignment ids are unique per student; re-saving a class may keep its own ids.
            owned = {assignment.id: class_id
                     for class_id, other in classes.items() if class_id != tree.class_id
                     for assignment in other.assignments}
            for assignment in tree.assignments:
                if assignment.id in owned:
                    raise ValidationError(
                        f"Assignment id {assignment.id} already belongs to class {owned[assignment.id]}",
                        details={"assignment_id": assignment.id, "class_id": owned[assignment.id]},
                    )
            self._trees.setdefault(student_id, OrderedDict())[tree.class_id] = tree
        logger.info("Saved class %s for student %s", tree.class_id, student_id)
        self._notify(student_id)
        return tree

    def record_grade(self, student_id: str, assignment_id: str, grade: Grade) -> Assignment:
        validate_grade(grade)
        return self._update_assignment(student_id, assignment_id, grade)

    def clear_grade(self, student_id: str, assignment_id: str) -> Assignment:
        return self._update_assignment(student_id, assignment_id, None)

    def delete_class(self, student_id: str, class_id: str) -> bool:
        with self._lock:
            removed = self._trees.get(student_id, {}).pop(class_id, None)
        if removed is None:
            return False
        logger.info("Deleted class %s for student %s", class_id, student_id)
        self._notify(student_id)
        return True

    def subscribe(self, listener: ChangeListener) -> Unsubscribe:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _update_assignment(self, student_id: str, assignment_id: str,
                           grade: Optional[Grade]) -> Assignment:
        with self._lock:
            classes = self._trees.get(student_id)
            if classes is None:
                raise ResourceNotFoundError(f"Student {student_id} not found",
                                            details={"student_id": student_id})
            for class_id, tree in classes.items():
                assignment = tree.find_assignment(assignment_id)
                if assignment is None:
                    continue
                updated = assignment.with_grade(grade)
                classes[class_id] = tree.with_assignments(
                    updated if item.id == assignment_id else item for item in tree.assignments
                )
                break
            else:
                raise ResourceNotFoundError(f"Assignment {assignment_id} not found",
                                            details={"student_id": student_id, "assignment_id": assignment_id})

        self._notify(student_id)
        return updated

    def _notify(self, student_id: str) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(student_id)
            except Exception:
                logger.exception("Grade change listener failed for student %s", student_id)
