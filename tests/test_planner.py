"""
Unit tests for the semester planner.

Auto-assignment rules:
- courses with a semester label land in the semester of that name
  (case-insensitive), a missing semester is created on the fly
- courses without a label stay unassigned
- a course is auto-placed at most once, manual removals stick
"""

import unittest

from courseguide.model import CourseRecommendation, Semester
from courseguide.planner import DEFAULT_ECTS_GOAL, PALETTE, SemesterPlanner
from courseguide.recommendations import RecommendationStore


class TestAutoAssign(unittest.TestCase):
    def setUp(self) -> None:
        self.store = RecommendationStore()
        self.planner = SemesterPlanner(self.store)

    def test_creates_semester_for_new_label(self) -> None:
        c = self.store.add(CourseRecommendation(name="Control Systems 2", ects=6, semester="WS 2025"))
        semesters = self.planner.semesters()
        self.assertEqual(len(semesters), 1)
        self.assertEqual(semesters[0].name, "WS 2025")
        self.assertEqual(semesters[0].color, PALETTE[0])
        self.assertEqual(semesters[0].ects_goal, DEFAULT_ECTS_GOAL)
        self.assertEqual(semesters[0].course_ids, [c.id])

    def test_label_matched_case_insensitively(self) -> None:
        self.store.add(CourseRecommendation(name="Control Systems 2", semester="WS 2025"))
        self.store.add(CourseRecommendation(name="Applied Ethics", semester="ws 2025"))
        self.assertEqual(len(self.planner.semesters()), 1)
        self.assertEqual(len(self.planner.semesters()[0].course_ids), 2)

    def test_unlabelled_course_stays_unassigned(self) -> None:
        c = self.store.add(CourseRecommendation(name="Applied Ethics"))
        self.assertEqual(self.planner.semesters(), [])
        self.assertNotIn(c.id, self.planner.assigned_ids())

    def test_new_semesters_cycle_colors(self) -> None:
        self.store.add(CourseRecommendation(name="Control Systems 2", semester="WS 2025"))
        self.store.add(CourseRecommendation(name="Applied Ethics", semester="SS 2026"))
        self.assertEqual([s.color for s in self.planner.semesters()], list(PALETTE[:2]))

    def test_manual_removal_is_not_undone(self) -> None:
        c = self.store.add(CourseRecommendation(name="Control Systems 2", semester="WS 2025"))
        semester = self.planner.semesters()[0]
        self.assertTrue(self.planner.remove_course(semester.id, c.id))

        self.store.add(CourseRecommendation(name="Applied Ethics"))
        self.assertEqual(self.planner.courses_in(semester.id), [])

    def test_label_edit_keeps_placement(self) -> None:
        c = self.store.add(CourseRecommendation(name="Control Systems 2", semester="WS 2025"))
        c.semester = "SS 2026"
        self.store.update(c)
        self.assertEqual([s.name for s in self.planner.semesters()], ["WS 2025"])

    def test_existing_semester_used(self) -> None:
        store = RecommendationStore()
        planner = SemesterPlanner(store, semesters=[Semester(id="s1", name="SS 2026", color="#000000")])
        c = store.add(CourseRecommendation(name="Applied Ethics", semester="SS 2026"))
        self.assertEqual(planner.get_semester("s1").course_ids, [c.id])

    def test_courses_present_before_planner(self) -> None:
        store = RecommendationStore()
        store.add(CourseRecommendation(name="Applied Ethics", semester="SS 2026"))
        planner = SemesterPlanner(store)
        self.assertEqual([s.name for s in planner.semesters()], ["SS 2026"])


class TestManualEdits(unittest.TestCase):
    def setUp(self) -> None:
        self.store = RecommendationStore()
        self.planner = SemesterPlanner(self.store)
        self.a = self.store.add(CourseRecommendation(name="Control Systems 2", ects=6))
        self.b = self.store.add(CourseRecommendation(name="Applied Ethics", ects=3.5))
        self.c = self.store.add(CourseRecommendation(name="Robotics - Perception"))

    def test_add_semester(self) -> None:
        s = self.planner.add_semester("Semester 3", ects_goal=20)
        self.assertEqual(s.ects_goal, 20)
        self.assertIs(self.planner.find_semester("semester 3"), s)
        with self.assertRaises(ValueError):
            self.planner.add_semester("  ")

    def test_add_course_and_ects_sum(self) -> None:
        s = self.planner.add_semester("WS 2025")
        for course in (self.a, self.b, self.c):
            self.assertTrue(self.planner.add_course(s.id, course.id))
        self.assertEqual(self.planner.semester_ects(s.id), 9.5)

    def test_no_duplicate_within_semester(self) -> None:
        s1 = self.planner.add_semester("WS 2025")
        s2 = self.planner.add_semester("SS 2026")
        self.assertTrue(self.planner.add_course(s1.id, self.a.id))
        self.assertFalse(self.planner.add_course(s1.id, self.a.id))
        self.assertTrue(self.planner.add_course(s2.id, self.a.id))

    def test_add_unknown_course(self) -> None:
        s = self.planner.add_semester("WS 2025")
        self.assertFalse(self.planner.add_course(s.id, "missing"))
        self.assertFalse(self.planner.add_course("missing", self.a.id))

    def test_removed_course_is_skipped(self) -> None:
        s = self.planner.add_semester("WS 2025")
        self.planner.add_course(s.id, self.a.id)
        self.planner.add_course(s.id, self.b.id)
        self.store.remove(self.a.id)
        self.assertEqual([c.name for c in self.planner.courses_in(s.id)], ["Applied Ethics"])

    def test_remove_course_keeps_store(self) -> None:
        s = self.planner.add_semester("WS 2025")
        self.planner.add_course(s.id, self.a.id)
        self.assertTrue(self.planner.remove_course(s.id, self.a.id))
        self.assertFalse(self.planner.remove_course(s.id, self.a.id))
        self.assertIsNotNone(self.store.get(self.a.id))

    def test_update_and_delete_semester(self) -> None:
        s = self.planner.add_semester("WS 2025")
        self.assertTrue(self.planner.update_semester(s.id, name="WS 2025/26", ects_goal=35))
        self.assertEqual(self.planner.get_semester(s.id).name, "WS 2025/26")
        self.assertEqual(self.planner.get_semester(s.id).ects_goal, 35)
        self.assertTrue(self.planner.delete_semester(s.id))
        self.assertFalse(self.planner.delete_semester(s.id))
        self.assertFalse(self.planner.update_semester(s.id, name="x"))


if __name__ == "__main__":
    unittest.main()
