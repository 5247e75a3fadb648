"""
Unit tests for movie entry and list records.
"""

import unittest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from models import MovieEntry, MovieList, movies_frame, FRAME_COLUMNS

class TestMovieEntry(unittest.TestCase):

    def test_defaults(self):
        """Test that note and url default to empty strings."""
        entry = MovieEntry(title="Dune")
        self.assertEqual(entry.to_dict(), {"title": "Dune", "note": "", "url": ""})

    def test_equality_covers_all_fields(self):
        """Test that entries with the same title but different notes differ."""
        self.assertEqual(MovieEntry("X"), MovieEntry("X", "", ""))
        self.assertNotEqual(MovieEntry("X", note="hi"), MovieEntry("X"))

    def test_from_value_mapping(self):
        """Test reading a stored entry mapping."""
        entry = MovieEntry.from_value({"title": " Heat ", "note": "n", "url": None})
        self.assertEqual(entry, MovieEntry(title="Heat", note="n", url=""))

    def test_from_value_legacy_string(self):
        """Test reading a bare title stored by the single-list watchlist."""
        self.assertEqual(MovieEntry.from_value("Heat"), MovieEntry(title="Heat"))

    def test_from_value_without_title(self):
        """Test that values without a title are rejected."""
        self.assertIsNone(MovieEntry.from_value({"note": "orphan"}))
        self.assertIsNone(MovieEntry.from_value("   "))
        self.assertIsNone(MovieEntry.from_value(42))

    def test_stored_values(self):
        """Test that a legacy entry is removable by its bare string too."""
        legacy = MovieEntry.from_value(" Heat")
        self.assertEqual(legacy.stored_values(), [{"title": "Heat", "note": "", "url": ""}, " Heat"])
        self.assertEqual(MovieEntry("Heat").stored_values(), [{"title": "Heat", "note": "", "url": ""}])

class TestMovieList(unittest.TestCase):

    def test_from_document(self):
        """Test reading a stored list document."""
        movie_list = MovieList.from_document("abc", {
            "name": "Weekend",
            "movies": [{"title": "Dune", "note": "", "url": "u"}, "Heat", {"title": ""}],
            "createdAt": None,
        })

        self.assertEqual(movie_list.id, "abc")
        self.assertEqual(movie_list.name, "Weekend")
        self.assertEqual(movie_list.titles, ["Dune", "Heat"])

    def test_from_document_defaults(self):
        """Test a legacy document without name or movies."""
        movie_list = MovieList.from_document("myWatchlist", None)
        self.assertEqual(movie_list.name, "myWatchlist")
        self.assertEqual(movie_list.movies, [])

    def test_to_document(self):
        """Test the stored document shape."""
        movie_list = MovieList(id="abc", name="Weekend", movies=[MovieEntry("Dune")])
        self.assertEqual(movie_list.to_document(), {
            "name": "Weekend",
            "movies": [{"title": "Dune", "note": "", "url": ""}],
            "createdAt": None,
        })

    def test_movies_frame(self):
        """Test the DataFrame view of a list."""
        movie_list = MovieList(id="abc", name="Weekend", movies=[
            MovieEntry("Dune", url="u1"), MovieEntry("Heat", note="n"),
        ])
        frame = movies_frame(movie_list)

        self.assertEqual(list(frame.columns), FRAME_COLUMNS)
        self.assertEqual(list(frame["title"]), ["Dune", "Heat"])
        self.assertEqual(list(frame["note"]), ["", "n"])

    def test_movies_frame_empty(self):
        """Test that an empty or missing list gives an empty frame."""
        self.assertTrue(movies_frame(None).empty)
        self.assertEqual(list(movies_frame(None).columns), FRAME_COLUMNS)

if __name__ == '__main__':
    unittest.main()
