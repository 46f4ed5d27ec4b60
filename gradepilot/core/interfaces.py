"""
Core interfaces and abstract base classes for GradePilot.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from .entities import Assignment, ClassGradeTree, Grade


ChangeListener = Callable[[str], None]
Unsubscribe = Callable[[], None]


class GradeTreeSource(ABC):
    """Read-only data-access collaborator consumed by the grade engine."""

    @abstractmethod
    def fetch_class_grade_tree(self, student_id: str) -> List[ClassGradeTree]:
        """Return a consistent snapshot of every class tree for a student."""
        pass


class GradeRepository(GradeTreeSource):
    """Data-access layer with write paths and change notification.

    Listeners receive the student id whose data changed. The engine never
    subscribes; callers re-run the computation when notified.
    """

    @abstractmethod
    def save_class_tree(self, student_id: str, tree: ClassGradeTree) -> ClassGradeTree:
        """Insert or replace one class tree."""
        pass

    @abstractmethod
    def record_grade(self, student_id: str, assignment_id: str, grade: Grade) -> Assignment:
        """Record or overwrite the grade of an assignment."""
        pass

    @abstractmethod
    def clear_grade(self, student_id: str, assignment_id: str) -> Assignment:
        """Mark an assignment as ungraded."""
        pass

    @abstractmethod
    def delete_class(self, student_id: str, class_id: str) -> bool:
        """Delete a class and everything it owns."""
        pass

    @abstractmethod
    def find_class_tree(self, student_id: str, class_id: str) -> Optional[ClassGradeTree]:
        """Find one class tree by id."""
        pass

    @abstractmethod
    def subscribe(self, listener: ChangeListener) -> Unsubscribe:
        """Register a change listener and return a callable that removes it."""
        pass
