import unittest
import os
import sys
import numpy as np

# Add src directory to Python path
src_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src'))
sys.path.insert(0, src_dir)

from relink.errors import ConfigurationError, PermanentInputError
from relink.vectors import as_matrix, cosine_similarity, dot, norm


class TestVectorPrimitives(unittest.TestCase):
    """Tests for dot, norm and cosine similarity."""

    def test_dot_and_norm(self):
        """Test basic dot product and Euclidean norm."""
        self.assertEqual(dot([1, 2, 3], [4, 5, 6]), 32.0)
        self.assertEqual(norm([3, 4]), 5.0)

    def test_equal_vectors_have_similarity_one(self):
        """Test that a vector is perfectly similar to itself."""
        rng = np.random.RandomState(7)
        for _ in range(20):
            vec = rng.randn(64)
            self.assertAlmostEqual(cosine_similarity(vec, vec), 1.0, places=9)

    def test_negated_vectors_have_similarity_minus_one(self):
        """Test that exact negations score -1."""
        rng = np.random.RandomState(11)
        for _ in range(20):
            vec = rng.randn(64)
            self.assertAlmostEqual(cosine_similarity(vec, -vec), -1.0, places=9)

    def test_orthogonal_vectors(self):
        """Test that orthogonal vectors score 0."""
        self.assertEqual(cosine_similarity([1, 0], [0, 1]), 0.0)

    def test_magnitude_does_not_matter(self):
        """Test that scaling a vector does not change its direction."""
        self.assertAlmostEqual(cosine_similarity([1, 2, 3], [10, 20, 30]), 1.0, places=9)

    def test_zero_norm_scores_zero(self):
        """Test that a zero vector scores 0 instead of dividing by zero."""
        self.assertEqual(cosine_similarity([0, 0, 0], [1, 2, 3]), 0.0)
        self.assertEqual(cosine_similarity([1, 2, 3], [0, 0, 0]), 0.0)
        self.assertEqual(cosine_similarity([0, 0], [0, 0]), 0.0)

    def test_dimension_mismatch_raises(self):
        """Test that comparing vectors of different sizes is a configuration error."""
        with self.assertRaises(ConfigurationError):
            cosine_similarity([1, 2, 3], [1, 2])

        with self.assertRaises(ConfigurationError):
            dot([1, 2, 3], [1, 2])

    def test_float32_input(self):
        """Test that provider float32 vectors are accepted."""
        vec = np.array([0.1] * 1536, dtype=np.float32)
        self.assertAlmostEqual(cosine_similarity(vec, vec), 1.0, places=6)


class TestAsMatrix(unittest.TestCase):
    """Tests for stacking embeddings."""

    def test_stacks_rows(self):
        """Test that vectors become rows of an (N, D) matrix."""
        matrix = as_matrix([[1, 2], [3, 4], [5, 6]])
        self.assertEqual(matrix.shape, (3, 2))

    def test_empty_list_raises(self):
        """Test that an empty embedding list is rejected."""
        with self.assertRaises(PermanentInputError):
            as_matrix([])

    def test_mixed_dimensions_raise(self):
        """Test that mixed dimensionalities are a configuration error."""
        with self.assertRaises(ConfigurationError) as context:
            as_matrix([[1, 2], [1, 2, 3]])

        self.assertIn("mismatch", str(context.exception))


if __name__ == '__main__':
    unittest.main()
