"""
Unit tests for the catalog matcher.

Cascade: exact -> contains -> significant words -> token overlap.
The confidence is recomputed from token overlap with the resolved name;
no match means identity with confidence 0.
"""

import unittest

from courseguide.matching import resolve, token_overlap

NAMES = [
    "Machine Learning - Basic Methods",
    "Applied Ethics",
    "Robotics - Perception",
    "Control Systems 2",
]


class TestTokenOverlap(unittest.TestCase):
    def test_full_overlap(self) -> None:
        self.assertEqual(token_overlap("Control Systems 2", "control systems 2"), 1.0)

    def test_prefix_counts_as_hit(self) -> None:
        self.assertEqual(token_overlap("Robot Vision", "Robotics - Perception"), 0.5)

    def test_empty_name(self) -> None:
        self.assertEqual(token_overlap("", "Robotics"), 0.0)


class TestResolve(unittest.TestCase):
    def test_exact_match(self) -> None:
        r = resolve("machine learning -  basic methods", NAMES)
        self.assertEqual(r.matched_name, "Machine Learning - Basic Methods")
        self.assertEqual(r.tier, "exact")
        self.assertEqual(r.confidence, 1.0)

    def test_contains_match(self) -> None:
        r = resolve("Ethics", NAMES)
        self.assertEqual(r.matched_name, "Applied Ethics")
        self.assertEqual(r.tier, "contains")
        self.assertEqual(r.confidence, 1.0)

    def test_significant_words_match(self) -> None:
        r = resolve("Robotics Perception Lab", NAMES)
        self.assertEqual(r.matched_name, "Robotics - Perception")
        self.assertEqual(r.tier, "words")
        self.assertAlmostEqual(r.confidence, 2 / 3)

    def test_token_overlap_match(self) -> None:
        r = resolve("Perceptual Robot", NAMES)
        self.assertEqual(r.matched_name, "Robotics - Perception")
        self.assertEqual(r.tier, "tokens")
        self.assertAlmostEqual(r.confidence, 0.5)

    def test_no_match_is_identity_with_zero_confidence(self) -> None:
        r = resolve("Quantum Chemistry", NAMES)
        self.assertEqual(r.matched_name, "Quantum Chemistry")
        self.assertEqual(r.confidence, 0.0)
        self.assertFalse(r.matched)

    def test_empty_catalog(self) -> None:
        r = resolve("Control Systems 2", [])
        self.assertEqual(r.matched_name, "Control Systems 2")
        self.assertEqual(r.confidence, 0.0)

    def test_empty_name(self) -> None:
        self.assertEqual(resolve("   ", NAMES).confidence, 0.0)


if __name__ == "__main__":
    unittest.main()
