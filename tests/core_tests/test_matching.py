import unittest
import os
import sys
from dataclasses import FrozenInstanceError
from unittest.mock import patch
import numpy as np

# Add src directory to Python path
src_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src'))
sys.path.insert(0, src_dir)

from relink.errors import ConfigurationError, PermanentInputError
from relink.matching import Mapping, UrlMatcher, calculate_confidence_band, match_embeddings
from relink.vectors import cosine_similarity


class TestUrlMatcher(unittest.TestCase):
    """Tests for best-match selection and ranking."""

    def setUp(self):
        """Set up test fixtures."""
        self.target_urls = ['/new/a', '/new/b', '/new/c']
        self.target_embeddings = [
            [1.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [0.0, 0.0, 1.0],
        ]

    def test_best_match_picks_highest_similarity(self):
        """Test that the most similar target is chosen."""
        matcher = UrlMatcher(self.target_urls, self.target_embeddings)

        idx, sim = matcher.best_match([0.1, 0.9, 0.2])

        self.assertEqual(idx, 1)
        self.assertAlmostEqual(sim, cosine_similarity([0.1, 0.9, 0.2], [0.0, 1.0, 0.0]))

    def test_ties_resolve_to_lowest_index(self):
        """Test that an equal score never displaces an earlier target."""
        matcher = UrlMatcher(['/first', '/second', '/third'], [[0, 1], [1, 0], [2, 0]])

        idx, sim = matcher.best_match([1, 0])

        self.assertEqual(idx, 1)
        self.assertEqual(sim, 1.0)

    def test_identical_targets_choose_first(self):
        """Test duplicate target embeddings resolve to the first one."""
        matcher = UrlMatcher(['/dup-1', '/dup-2'], [[0.3, 0.4], [0.3, 0.4]])

        mappings = matcher.match_many(['/old'], [[0.3, 0.4]])

        self.assertEqual(mappings[0].matched, '/dup-1')

    def test_negative_similarities_pick_true_maximum(self):
        """Test that the argmax is used even when every score is negative."""
        matcher = UrlMatcher(['/far', '/less-far'], [[-1.0, 0.0], [-1.0, -1.0]])

        idx, sim = matcher.best_match([0.0, 1.0])

        self.assertEqual(idx, 0)
        self.assertEqual(sim, 0.0)

        idx, sim = matcher.best_match([1.0, 0.1])
        self.assertEqual(idx, 1)
        self.assertLess(sim, 0.0)
        self.assertAlmostEqual(sim, cosine_similarity([1.0, 0.1], [-1.0, -1.0]))

    def test_chosen_match_is_argmax_for_random_vectors(self):
        """Test that the chosen target scores at least as high as every other."""
        rng = np.random.RandomState(42)
        sources = rng.randn(15, 32)
        targets = rng.randn(9, 32)
        target_urls = [f'/new/{j}' for j in range(9)]
        source_urls = [f'/old/{i}' for i in range(15)]

        mappings = match_embeddings(source_urls, sources, target_urls, targets)
        by_source = {m.source: m for m in mappings}

        for i, url in enumerate(source_urls):
            sims = [cosine_similarity(sources[i], t) for t in targets]
            best = max(sims)
            expected_idx = sims.index(best)
            self.assertEqual(by_source[url].matched, target_urls[expected_idx])
            self.assertAlmostEqual(by_source[url].confidence, best)

    def test_mapping_count_equals_source_count(self):
        """Test one mapping per source, even when sources share a target."""
        matcher = UrlMatcher(['/only'], [[1.0, 1.0]])

        mappings = matcher.match_many(['/a', '/b', '/c', '/d'], [[1, 0], [0, 1], [1, 1], [2, 1]])

        self.assertEqual(len(mappings), 4)
        self.assertTrue(all(m.matched == '/only' for m in mappings))

    def test_sorted_by_confidence_descending(self):
        """Test that mappings come back highest confidence first."""
        rng = np.random.RandomState(3)
        sources = rng.randn(25, 16)
        targets = rng.randn(10, 16)

        mappings = match_embeddings(
            [f'/old/{i}' for i in range(25)], sources,
            [f'/new/{j}' for j in range(10)], targets
        )

        for k in range(len(mappings) - 1):
            self.assertGreaterEqual(mappings[k].confidence, mappings[k + 1].confidence)

    def test_equal_confidence_keeps_source_order(self):
        """Test that sorting is stable among equal confidences."""
        matcher = UrlMatcher(['/x', '/y'], [[1.0, 0.0], [0.0, 1.0]])

        mappings = matcher.match_many(
            ['/tie-a', '/tie-b', '/exact'],
            [[1.0, 1.0], [1.0, 1.0], [1.0, 0.0]]
        )

        self.assertEqual([m.source for m in mappings], ['/exact', '/tie-a', '/tie-b'])
        self.assertEqual(mappings[1].confidence, mappings[2].confidence)

    def test_empty_targets_raise(self):
        """Test that an empty target list is rejected before computation."""
        with self.assertRaises(PermanentInputError):
            UrlMatcher([], [])

    def test_empty_sources_raise(self):
        """Test that an empty source list is rejected before computation."""
        with self.assertRaises(PermanentInputError):
            match_embeddings([], [], self.target_urls, self.target_embeddings)

    def test_count_mismatch_raises(self):
        """Test that urls and embeddings must line up."""
        with self.assertRaises(PermanentInputError):
            UrlMatcher(['/a', '/b'], [[1.0, 0.0]])

        matcher = UrlMatcher(self.target_urls, self.target_embeddings)
        with self.assertRaises(PermanentInputError):
            matcher.match_many(['/a'], [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])

    def test_dimension_mismatch_raises(self):
        """Test that source and target dimensionality must agree."""
        matcher = UrlMatcher(self.target_urls, self.target_embeddings)

        with self.assertRaises(ConfigurationError):
            matcher.match_many(['/old'], [[1.0, 0.0]])

        with self.assertRaises(ConfigurationError):
            UrlMatcher(['/a', '/b'], [[1.0, 0.0], [1.0, 0.0, 0.0]])


class TestMapping(unittest.TestCase):
    """Tests for the Mapping value object."""

    def test_mapping_is_immutable(self):
        """Test that a mapping cannot be changed after creation."""
        mapping = Mapping(source='/old', matched='/new', confidence=0.9)

        with self.assertRaises(FrozenInstanceError):
            mapping.confidence = 0.1

    @patch('relink.matching.Config.HIGH_CONFIDENCE_THRESHOLD', 0.85)
    @patch('relink.matching.Config.MEDIUM_CONFIDENCE_THRESHOLD', 0.7)
    def test_confidence_band(self):
        """Test band thresholds."""
        self.assertEqual(calculate_confidence_band(0.95), 'high')
        self.assertEqual(calculate_confidence_band(0.85), 'high')
        self.assertEqual(calculate_confidence_band(0.75), 'medium')
        self.assertEqual(calculate_confidence_band(0.2), 'low')
        self.assertEqual(Mapping('/a', '/b', 0.72).confidence_band, 'medium')


if __name__ == '__main__':
    unittest.main()
