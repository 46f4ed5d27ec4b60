from unittest import TestCase
from unittest.mock import Mock

from gradepilot.config import EngineSettings
from gradepilot.core.entities import Assignment, Category, ClassGradeTree, Grade, SchoolClass
from gradepilot.core.enums import TermRule
from gradepilot.core.interfaces import GradeTreeSource
from gradepilot.services.gpa_aggregator import GPAAggregator


def single_category_class(class_id, percentage, credit_hours, is_completed=False, term=None):
    """One class with one assignment scored at ``percentage`` out of 100."""
    grade = Grade(percentage) if percentage is not None else None
    return ClassGradeTree(
        SchoolClass(class_id, class_id.title(), credit_hours, is_completed, term),
        [Category(f"{class_id}-cat", "All", 100)],
        [Assignment(f"{class_id}-a1", "Work", f"{class_id}-cat", 100, grade)],
    )


def source_for(*trees):
    source = Mock(spec=GradeTreeSource)
    source.fetch_class_grade_tree.return_value = list(trees)
    return source


class GPAAggregatorTests(TestCase):
    def test_credit_hour_weighted(self):
        source = source_for(
            single_category_class("physics", 100, 4),
            single_category_class("gym", 10, 1),
        )
        calculation = GPAAggregator(source).calculate_full_gpa("s1")
        self.assertAlmostEqual(calculation.current_gpa, 3.2)
        self.assertEqual(calculation.total_credit_hours, 5)
        self.assertEqual([g.class_id for g in calculation.class_grades], ["physics", "gym"])
        source.fetch_class_grade_tree.assert_called_once_with("s1")

    def test_empty_student(self):
        calculation = GPAAggregator(source_for()).calculate_full_gpa("nobody")
        self.assertEqual(calculation.current_gpa, 0)
        self.assertEqual(calculation.semester_gpa, 0)
        self.assertEqual(calculation.total_credit_hours, 0)
        self.assertEqual(calculation.class_grades, ())

    def test_ungraded_classes_excluded(self):
        source = source_for(
            single_category_class("bio", 95, 3),
            single_category_class("music", None, 3),
        )
        calculation = GPAAggregator(source).calculate_full_gpa("s1")
        self.assertEqual([g.class_id for g in calculation.class_grades], ["bio"])
        self.assertEqual(calculation.current_gpa, 4.0)
        self.assertEqual(calculation.total_credit_hours, 3)

    def test_zero_credit_class_excluded(self):
        source = source_for(
            single_category_class("seminar", 50, 0),
            single_category_class("bio", 85, 3),
        )
        calculation = GPAAggregator(source).calculate_full_gpa("s1")
        self.assertEqual(calculation.current_gpa, 3.0)
        self.assertEqual([g.class_id for g in calculation.class_grades], ["bio"])

    def test_semester_uses_in_progress_classes_by_default(self):
        source = source_for(
            single_category_class("done", 95, 3, is_completed=True),
            single_category_class("now", 75, 3),
        )
        calculation = GPAAggregator(source).calculate_full_gpa("s1")
        self.assertEqual(calculation.current_gpa, 3.0)
        self.assertEqual(calculation.semester_gpa, 2.0)
        self.assertEqual(calculation.semester_credit_hours, 3)

    def test_explicit_term_rule(self):
        source = source_for(
            single_category_class("old", 95, 3, term="2026-spring"),
            single_category_class("new", 75, 3, term="2026-fall"),
        )
        settings = EngineSettings(term_rule=TermRule.EXPLICIT_TERM, current_term="2026-fall")
        calculation = GPAAggregator(source, settings).calculate_full_gpa("s1")
        self.assertEqual(calculation.semester_gpa, 2.0)

    def test_prefiltered_semester_ids_override_rule(self):
        source = source_for(
            single_category_class("done", 95, 3, is_completed=True),
            single_category_class("now", 75, 3),
        )
        calculation = GPAAggregator(source).calculate_full_gpa("s1", semester_class_ids={"done"})
        self.assertEqual(calculation.semester_gpa, 4.0)

    def test_idempotent(self):
        source = source_for(
            single_category_class("bio", 88.5, 3),
            single_category_class("art", 71.25, 2, is_completed=True),
        )
        aggregator = GPAAggregator(source)
        self.assertEqual(aggregator.calculate_full_gpa("s1"), aggregator.calculate_full_gpa("s1"))

    def test_gpa_rounded_to_configured_precision(self):
        source = source_for(
            single_category_class("a", 95, 1),
            single_category_class("b", 85, 1),
            single_category_class("c", 85, 1),
        )
        calculation = GPAAggregator(source).calculate_full_gpa("s1")
        self.assertEqual(calculation.current_gpa, 3.33)
