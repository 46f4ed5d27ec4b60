"""
Domain records for grade aggregation.

Input records (``Assignment``, ``Grade``, ``Category``, ``SchoolClass``,
``ClassGradeTree``) mirror what the data-access layer hands over. Result
records (``CategoryResult``, ``ClassGrade``, ``GPACalculation``,
``WhatIfScenario``) are produced fresh by every computation. All of them are
frozen so an overlay can only ever be built as a new value.
"""

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Iterable, Optional, Tuple


@dataclass(frozen=True)
class Grade:
    """A recorded score for one assignment."""
    points_earned: float
    is_hypothetical: bool = False


@dataclass(frozen=True)
class Assignment:
    """A gradable item belonging to exactly one category."""
    id: str
    name: str
    category_id: str
    points_possible: float
    grade: Optional[Grade] = None

    @property
    def is_graded(self) -> bool:
        return self.grade is not None

    @property
    def percentage(self) -> Optional[float]:
        """Score as a percentage of points possible, or None when ungraded."""
        if self.grade is None or self.points_possible <= 0:
            return None
        return self.grade.points_earned / self.points_possible * 100

    def with_grade(self, grade: Optional[Grade]) -> "Assignment":
        return replace(self, grade=grade)


@dataclass(frozen=True)
class Category:
    """A weighted bucket of assignments within a class."""
    id: str
    name: str
    weight: float
    color: Optional[str] = None


@dataclass(frozen=True)
class SchoolClass:
    """A class the student takes, weighted by credit hours in the GPA."""
    id: str
    name: str
    credit_hours: float
    is_completed: bool = False
    term: Optional[str] = None


@dataclass(frozen=True)
class ClassGradeTree:
    """Consistent snapshot of one class with its categories and assignments."""
    school_class: SchoolClass
    categories: Tuple[Category, ...] = ()
    assignments: Tuple[Assignment, ...] = ()

    def __post_init__(self):
        # Accept any iterable but always store tuples.
        object.__setattr__(self, "categories", tuple(self.categories))
        object.__setattr__(self, "assignments", tuple(self.assignments))

    @property
    def class_id(self) -> str:
        return self.school_class.id

    def find_assignment(self, assignment_id: str) -> Optional[Assignment]:
        for assignment in self.assignments:
            if assignment.id == assignment_id:
                return assignment
        return None

    def find_category(self, category_id: str) -> Optional[Category]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def with_assignments(self, assignments: Iterable[Assignment]) -> "ClassGradeTree":
        return replace(self, assignments=tuple(assignments))


@dataclass(frozen=True)
class CategoryResult:
    """Roll-up of one category inside a class grade."""
    category_id: str
    name: str
    weight: float
    earned_points: float
    possible_points: float
    graded_count: int
    percentage: Optional[float] = None
    effective_weight: float = 0.0

    @property
    def is_eligible(self) -> bool:
        return self.percentage is not None


@dataclass(frozen=True)
class ClassGrade:
    """Derived grade for one class. ``current_grade`` is None when nothing is graded."""
    class_id: str
    class_name: str
    credit_hours: float
    is_completed: bool
    current_grade: Optional[float] = None
    display_grade: Optional[float] = None
    letter_grade: Optional[str] = None
    grade_points: Optional[float] = None
    term: Optional[str] = None
    categories: Tuple[CategoryResult, ...] = ()

    @property
    def has_grade(self) -> bool:
        return self.current_grade is not None

    @property
    def quality_points(self) -> float:
        """GPA points multiplied by credit hours."""
        if self.grade_points is None:
            return 0.0
        return self.grade_points * self.credit_hours

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class GPACalculation:
    """Immutable GPA snapshot for one student."""
    current_gpa: float
    semester_gpa: float
    total_credit_hours: float
    class_grades: Tuple[ClassGrade, ...] = ()
    semester_credit_hours: float = 0.0

    def class_grade(self, class_id: str) -> Optional[ClassGrade]:
        for class_grade in self.class_grades:
            if class_grade.class_id == class_id:
                return class_grade
        return None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class GradeChange:
    """A hypothetical score for one assignment. Never written back."""
    assignment_id: str
    new_grade: float
    class_id: Optional[str] = None
    current_grade: Optional[float] = None

    def points_earned_for(self, points_possible: float) -> float:
        return self.new_grade / 100 * points_possible


@dataclass(frozen=True)
class WhatIfScenario:
    """Outcome of applying hypothetical changes on top of the baseline."""
    resulting_gpa: float
    gpa_change: float
    baseline_gpa: float = 0.0
    semester_gpa: float = 0.0
    class_grades: Tuple[ClassGrade, ...] = ()
    applied_changes: Tuple[GradeChange, ...] = ()
    skipped_changes: Tuple[GradeChange, ...] = ()

    @property
    def is_improvement(self) -> bool:
        return self.gpa_change > 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
