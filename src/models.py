"""
Movie entry and movie list records, and their document representation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

import pandas as pd


@dataclass(frozen=True)
class MovieEntry:
    """
    One title plus an optional note and URL. Equality covers all three fields.

    `stored` keeps the raw array element an entry was read from, so a bare
    title string from a legacy watchlist can still be removed exactly.
    """

    title: str
    note: str = ""
    url: str = ""
    stored: object = field(default=None, compare=False, repr=False)

    def to_dict(self):
        return {"title": self.title, "note": self.note, "url": self.url}

    def stored_values(self):
        """Array elements that represent this entry in its list document."""
        values = [self.to_dict()]
        if isinstance(self.stored, str):
            values.append(self.stored)
        return values

    @classmethod
    def from_value(cls, value):
        """
        Build an entry from a stored array element.

        Args:
            value: Either an entry mapping or a bare title string (legacy watchlists)

        Returns:
            MovieEntry, or None when the value carries no title
        """
        if isinstance(value, str):
            title = value.strip()
            return cls(title=title, stored=value) if title else None
        if isinstance(value, dict):
            title = str(value.get("title") or "").strip()
            if not title:
                return None
            return cls(
                title=title,
                note=str(value.get("note") or ""),
                url=str(value.get("url") or ""),
            )
        return None


@dataclass
class MovieList:
    id: str
    name: str
    movies: List[MovieEntry] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @property
    def titles(self):
        return [movie.title for movie in self.movies]

    def to_document(self):
        return {
            "name": self.name,
            "movies": [movie.to_dict() for movie in self.movies],
            "createdAt": self.created_at,
        }

    @classmethod
    def from_document(cls, list_id, data):
        """Read a stored list document. Entries without a title are skipped."""
        data = data or {}
        movies = []
        for value in data.get("movies") or []:
            entry = MovieEntry.from_value(value)
            if entry is not None:
                movies.append(entry)
        return cls(
            id=list_id,
            name=data.get("name") or list_id,
            movies=movies,
            created_at=data.get("createdAt"),
        )


FRAME_COLUMNS = ["title", "note", "url"]


def movies_frame(movie_list):
    """Entries of a list as a DataFrame, in list order."""
    movies = movie_list.movies if movie_list is not None else []
    return pd.DataFrame([movie.to_dict() for movie in movies], columns=FRAME_COLUMNS)
