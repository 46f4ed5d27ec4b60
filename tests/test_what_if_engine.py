import math
from unittest import TestCase
from unittest.mock import Mock

from gradepilot.core.entities import Assignment, Category, ClassGradeTree, Grade, GradeChange, SchoolClass
from gradepilot.core.interfaces import GradeRepository
from gradepilot.persistence import InMemoryGradeRepository
from gradepilot.services import GradeService
from gradepilot.services.what_if_engine import apply_changes


def build_trees():
    calculus = ClassGradeTree(
        SchoolClass("calc", "Calculus", 4),
        [Category("calc-hw", "Homework", 40), Category("calc-exam", "Exams", 60)],
        [
            Assignment("hw1", "HW 1", "calc-hw", 10, Grade(10)),
            Assignment("exam1", "Midterm", "calc-exam", 100),
        ],
    )
    history = ClassGradeTree(
        SchoolClass("hist", "History", 1),
        [Category("hist-quiz", "Quizzes", 100)],
        [Assignment("quiz1", "Quiz 1", "hist-quiz", 10, Grade(0))],
    )
    return [calculus, history]


class WhatIfEngineTests(TestCase):
    def setUp(self):
        self.trees = build_trees()
        self.repository = Mock(spec=GradeRepository)
        self.repository.fetch_class_grade_tree.return_value = self.trees
        self.service = GradeService(self.repository)

    def assert_no_writes(self):
        self.repository.save_class_tree.assert_not_called()
        self.repository.record_grade.assert_not_called()
        self.repository.clear_grade.assert_not_called()
        self.repository.delete_class.assert_not_called()
        called = {name for name, _args, _kwargs in self.repository.method_calls}
        self.assertEqual(called, {"fetch_class_grade_tree"})

    def test_baseline(self):
        self.assertAlmostEqual(self.service.calculate_full_gpa("s1").current_gpa, 3.2)

    def test_ungraded_assignment_change_lowers_gpa(self):
        scenario = self.service.calculate_what_if_scenario("s1", [GradeChange("exam1", 50)])
        # Calculus becomes (100*40 + 50*60) / 100 = 70 -> C- (1.7)
        self.assertAlmostEqual(scenario.resulting_gpa, 1.36)
        self.assertAlmostEqual(scenario.gpa_change, -1.84)
        self.assertAlmostEqual(scenario.baseline_gpa, 3.2)
        self.assertFalse(scenario.is_improvement)
        self.assert_no_writes()

    def test_existing_grade_change_raises_gpa(self):
        scenario = self.service.calculate_what_if_scenario("s1", [GradeChange("quiz1", 100)])
        self.assertAlmostEqual(scenario.resulting_gpa, 4.0)
        self.assertAlmostEqual(scenario.gpa_change, 0.8)
        self.assertTrue(scenario.is_improvement)

    def test_changes_in_different_classes_apply_together(self):
        scenario = self.service.calculate_what_if_scenario(
            "s1", [GradeChange("exam1", 50), GradeChange("quiz1", 100)]
        )
        self.assertAlmostEqual(scenario.resulting_gpa, 2.16)
        self.assertEqual(len(scenario.applied_changes), 2)

    def test_multiple_changes_in_one_class(self):
        tree = ClassGradeTree(
            SchoolClass("lab", "Lab", 3),
            [Category("lab-hw", "Homework", 100)],
            [
                Assignment("l1", "L1", "lab-hw", 20, Grade(20)),
                Assignment("l2", "L2", "lab-hw", 80),
                Assignment("l3", "L3", "lab-hw", 100),
            ],
        )
        self.repository.fetch_class_grade_tree.return_value = [tree]
        scenario = self.service.calculate_what_if_scenario(
            "s1", [GradeChange("l2", 50), GradeChange("l3", 100)]
        )
        # (20 + 40 + 100) / 200 = 80% -> B- (2.7)
        self.assertAlmostEqual(scenario.resulting_gpa, 2.7)
        self.assertAlmostEqual(scenario.gpa_change, -1.3)
        lab = scenario.class_grades[0]
        self.assertAlmostEqual(lab.current_grade, 80.0)

    def test_unknown_assignment_is_skipped_not_fatal(self):
        scenario = self.service.calculate_what_if_scenario(
            "s1", [GradeChange("missing", 100), GradeChange("quiz1", 100)]
        )
        self.assertAlmostEqual(scenario.resulting_gpa, 4.0)
        self.assertEqual([c.assignment_id for c in scenario.skipped_changes], ["missing"])
        self.assertEqual([c.assignment_id for c in scenario.applied_changes], ["quiz1"])

    def test_unresolved_category_is_skipped_not_applied(self):
        orphan = ClassGradeTree(
            SchoolClass("art", "Art", 2),
            [Category("art-proj", "Projects", 100)],
            [Assignment("p1", "Portfolio", "art-proj", 10, Grade(9)),
             Assignment("sketch", "Sketch", "art-missing", 10)],
        )
        self.repository.fetch_class_grade_tree.return_value = self.trees + [orphan]
        scenario = self.service.calculate_what_if_scenario("s1", [GradeChange("sketch", 0)])
        self.assertEqual(scenario.applied_changes, ())
        self.assertEqual([c.assignment_id for c in scenario.skipped_changes], ["sketch"])
        self.assertAlmostEqual(scenario.gpa_change, 0.0)
        self.assert_no_writes()

    def test_class_mismatch_is_skipped(self):
        scenario = self.service.calculate_what_if_scenario(
            "s1", [GradeChange("quiz1", 100, class_id="calc")]
        )
        self.assertAlmostEqual(scenario.gpa_change, 0.0)
        self.assertEqual(len(scenario.skipped_changes), 1)

    def test_out_of_range_grades_are_clamped(self):
        high = self.service.calculate_what_if_scenario("s1", [GradeChange("quiz1", 250)])
        self.assertAlmostEqual(high.resulting_gpa, 4.0)
        self.assertEqual(high.applied_changes[0].new_grade, 100.0)

        low = self.service.calculate_what_if_scenario("s1", [GradeChange("exam1", -30)])
        # Calculus becomes (100*40 + 0*60) / 100 = 40 -> F
        self.assertAlmostEqual(low.resulting_gpa, 0.0)

    def test_non_finite_grade_is_skipped(self):
        scenario = self.service.calculate_what_if_scenario(
            "s1", [GradeChange("quiz1", math.nan), GradeChange("exam1", math.inf)]
        )
        self.assertAlmostEqual(scenario.resulting_gpa, 3.2)
        self.assertAlmostEqual(scenario.gpa_change, 0.0)
        self.assertEqual(len(scenario.skipped_changes), 2)

    def test_no_changes_reproduces_baseline(self):
        scenario = self.service.calculate_what_if_scenario("s1", [])
        self.assertAlmostEqual(scenario.resulting_gpa, 3.2)
        self.assertEqual(scenario.gpa_change, 0.0)

    def test_ungraded_class_enters_gpa_with_hypothetical_grade(self):
        new_class = ClassGradeTree(
            SchoolClass("art", "Art", 5),
            [Category("art-p", "Projects", 100)],
            [Assignment("p1", "Portfolio", "art-p", 50)],
        )
        self.repository.fetch_class_grade_tree.return_value = self.trees + [new_class]
        self.assertEqual(len(self.service.calculate_full_gpa("s1").class_grades), 2)

        scenario = self.service.calculate_what_if_scenario("s1", [GradeChange("p1", 100)])
        # (16 + 0 + 20) / 10
        self.assertAlmostEqual(scenario.resulting_gpa, 3.6)
        self.assertEqual(len(scenario.class_grades), 3)

    def test_untouched_class_keeps_baseline_grade(self):
        baseline = self.service.calculate_full_gpa("s1")
        scenario = self.service.calculate_what_if_scenario("s1", [GradeChange("quiz1", 100)])
        self.assertEqual(scenario.class_grades[0], baseline.class_grades[0])
        self.assertNotEqual(scenario.class_grades[1], baseline.class_grades[1])


class OverlayTests(TestCase):
    def test_input_trees_untouched(self):
        trees = build_trees()
        snapshot = list(trees)
        overlay = apply_changes(trees, [GradeChange("hw1", 20), GradeChange("exam1", 90)])

        self.assertEqual(trees, snapshot)
        self.assertEqual(trees[0].find_assignment("hw1").grade, Grade(10))
        self.assertIsNone(trees[0].find_assignment("exam1").grade)

        changed = overlay.trees[0]
        self.assertAlmostEqual(changed.find_assignment("hw1").grade.points_earned, 2.0)
        self.assertTrue(changed.find_assignment("hw1").grade.is_hypothetical)
        self.assertAlmostEqual(changed.find_assignment("exam1").grade.points_earned, 90.0)
        self.assertIs(overlay.trees[1], trees[1])
        self.assertEqual(overlay.touched_class_ids, frozenset({"calc"}))

    def test_later_change_to_same_assignment_wins(self):
        overlay = apply_changes(build_trees(), [GradeChange("quiz1", 20), GradeChange("quiz1", 70)])
        self.assertAlmostEqual(overlay.trees[1].find_assignment("quiz1").grade.points_earned, 7.0)

    def test_unresolved_category_is_skipped(self):
        orphan = ClassGradeTree(
            SchoolClass("art", "Art", 2),
            [Category("art-proj", "Projects", 100)],
            [Assignment("sketch", "Sketch", "art-missing", 10)],
        )
        trees = build_trees() + [orphan]
        overlay = apply_changes(trees, [GradeChange("sketch", 90), GradeChange("quiz1", 50)])
        self.assertEqual([c.assignment_id for c in overlay.skipped], ["sketch"])
        self.assertEqual([c.assignment_id for c in overlay.applied], ["quiz1"])
        self.assertIs(overlay.trees[2], orphan)
        self.assertEqual(overlay.touched_class_ids, frozenset({"hist"}))

    def test_applied_change_records_class_and_echoes_current_grade(self):
        overlay = apply_changes(build_trees(), [GradeChange("exam1", 120, current_grade=None),
                                                GradeChange("quiz1", 80, current_grade=0.0)])
        exam, quiz = overlay.applied
        self.assertEqual((exam.class_id, exam.new_grade), ("calc", 100.0))
        self.assertEqual((quiz.class_id, quiz.current_grade), ("hist", 0.0))


class WhatIfPurityTests(TestCase):
    def test_repeated_what_if_never_changes_stored_gpa(self):
        repository = InMemoryGradeRepository()
        for tree in build_trees():
            repository.save_class_tree("s1", tree)
        service = GradeService(repository)
        notifications = []
        repository.subscribe(notifications.append)

        before = service.calculate_full_gpa("s1")
        for new_grade in (0, 35.5, 100, 72):
            service.calculate_what_if_scenario(
                "s1", [GradeChange("exam1", new_grade), GradeChange("quiz1", new_grade)]
            )
        after = service.calculate_full_gpa("s1")

        self.assertEqual(before, after)
        self.assertEqual(notifications, [])
        self.assertIsNone(repository.find_class_tree("s1", "calc").find_assignment("exam1").grade)
