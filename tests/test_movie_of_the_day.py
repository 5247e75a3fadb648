"""
Unit tests for the random Movie of the Day pick.
"""

import unittest
from unittest.mock import patch
import random
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from errors import NoEligibleEntries
from models import MovieEntry, MovieList
from movie_of_the_day import generate_movie_of_the_day

class TestMovieOfTheDay(unittest.TestCase):

    def setUp(self):
        """Set up a small list."""
        self.movie_list = MovieList(id="abc", name="Weekend", movies=[
            MovieEntry("Dune"), MovieEntry("Arrival"), MovieEntry("Heat"),
        ])

    def test_pick_is_member_of_list(self):
        """Test that every draw returns a title from the list."""
        rng = random.Random(7)
        for _ in range(100):
            self.assertIn(generate_movie_of_the_day(self.movie_list, rng), self.movie_list.titles)

    def test_pick_uses_uniform_index(self):
        """Test that the drawn index selects the title."""
        with patch('movie_of_the_day.random.randrange', return_value=2) as mock_randrange:
            title = generate_movie_of_the_day(self.movie_list)

        self.assertEqual(title, "Heat")
        mock_randrange.assert_called_once_with(3)

    def test_every_entry_reachable(self):
        """Test that draws cover the whole list."""
        rng = random.Random(11)
        picks = {generate_movie_of_the_day(self.movie_list, rng) for _ in range(200)}
        self.assertEqual(picks, set(self.movie_list.titles))

    def test_empty_list(self):
        """Test that an empty list has no eligible entries."""
        with self.assertRaises(NoEligibleEntries):
            generate_movie_of_the_day(MovieList(id="abc", name="Empty"))

    def test_no_list(self):
        """Test that a missing selection has no eligible entries."""
        with self.assertRaises(NoEligibleEntries):
            generate_movie_of_the_day(None)

if __name__ == '__main__':
    unittest.main()
