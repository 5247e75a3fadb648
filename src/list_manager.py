"""
List manager: turns user intents into list store operations and keeps the
session-local selection, random pick and error message.
"""

import logging
import random
from dataclasses import dataclass, replace
from typing import Optional

from csv_import import entries_from_upload
from errors import (
    EmptyImportError,
    MovieListError,
    NoEligibleEntries,
    NotFoundError,
    StoreError,
    ValidationError,
)
from models import MovieEntry, MovieList
from movie_of_the_day import generate_movie_of_the_day
from utils import DEFAULT_WATCHLIST_ID, DEFAULT_WATCHLIST_NAME, MESSAGES

logger = logging.getLogger(__name__)


@dataclass
class SelectionState:
    """Ephemeral per-session state. Never persisted."""

    selected_list_id: Optional[str] = None
    random_pick: Optional[str] = None


class ErrorSlot:
    """Single transient user-facing message; the latest error wins."""

    def __init__(self):
        self.message = ""

    def set(self, message):
        self.message = message

    def clear(self):
        self.message = ""

    def __bool__(self):
        return bool(self.message)


def run_intent(slot, action, failure_message, on_not_found=None):
    """
    Run a user intent and report its failure in the error slot.

    Store failures are logged and shown as `failure_message`. When
    `on_not_found` is given, a vanished list triggers it instead of a message.

    Returns:
        The action's result, or None when it failed
    """
    try:
        result = action()
    except NotFoundError:
        if on_not_found is None:
            logger.exception("%s (list not found)", failure_message)
            slot.set(failure_message)
        else:
            logger.info("List vanished, falling back")
            on_not_found()
        return None
    except StoreError:
        logger.exception(failure_message)
        slot.set(failure_message)
        return None
    except MovieListError as exc:
        slot.set(exc.message)
        return None
    slot.clear()
    return result


class ListManager:
    """
    Orchestrates one owner's lists.

    `lists` is the local view of the owner's collection and is fully replaced
    by every snapshot the store delivers. `loaded` stays False from
    `subscribe()` until the first of those snapshots arrives.
    """

    def __init__(self, store, owner_id, rng=random):
        self.store = store
        self.owner_id = owner_id
        self.selection = SelectionState()
        self.lists = {}
        self.loaded = False
        self._rng = rng

    # -------------------------------------------------------------------------
    # Local view
    # -------------------------------------------------------------------------

    def apply_lists_snapshot(self, lists):
        self.lists = {movie_list.id: movie_list for movie_list in lists}
        self.loaded = True
        if self.selection.selected_list_id and self.selection.selected_list_id not in self.lists:
            self.clear_selection()

    def apply_list_snapshot(self, movie_list):
        self.lists[movie_list.id] = movie_list

    def refresh(self):
        self.apply_lists_snapshot(self.store.list_lists(self.owner_id))
        return list(self.lists.values())

    def subscribe(self):
        """Keep `lists` current. The caller owns the returned subscription."""
        self.loaded = False
        return self.store.subscribe_lists(self.owner_id, self.apply_lists_snapshot)

    def has_lists(self):
        return self.store.has_lists(self.owner_id)

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    @property
    def random_pick(self):
        return self.selection.random_pick

    @property
    def selected_list(self):
        list_id = self.selection.selected_list_id
        if list_id is None:
            return None
        if list_id in self.lists:
            return self.lists[list_id]
        try:
            movie_list = self.store.get_list(self.owner_id, list_id)
        except NotFoundError:
            self.clear_selection()
            return None
        self.apply_list_snapshot(movie_list)
        return movie_list

    def select_list(self, list_id):
        if list_id != self.selection.selected_list_id:
            self.selection = SelectionState(selected_list_id=list_id)

    def clear_selection(self):
        self.selection = SelectionState()

    def _clear_pick_for(self, list_id):
        if list_id == self.selection.selected_list_id:
            self.selection.random_pick = None

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def import_as_new_list(self, list_name, entries):
        """
        Create a new list from parsed CSV entries and select it.

        Args:
            list_name: Name for the new list
            entries: Non-empty sequence of MovieEntry

        Returns:
            The new list's id
        """
        name = (list_name or "").strip()
        if not name:
            raise ValidationError(MESSAGES["empty_list_name"])
        entries = list(entries)
        if not entries:
            raise EmptyImportError()

        list_id = self.store.create_list(self.owner_id, name, entries)
        logger.info("Imported list %s with %d entries", list_id, len(entries))
        self.select_list(list_id)
        return list_id

    def import_csv(self, list_name, data):
        """Validate the name, parse the upload, then create the list."""
        if not (list_name or "").strip():
            raise ValidationError(MESSAGES["empty_list_name"])
        return self.import_as_new_list(list_name, entries_from_upload(data))

    def ensure_watchlist(self):
        """Get or create the owner's default watchlist."""
        try:
            return self.store.get_list(self.owner_id, DEFAULT_WATCHLIST_ID)
        except NotFoundError:
            pass
        self.store.create_list(
            self.owner_id, DEFAULT_WATCHLIST_NAME, [], list_id=DEFAULT_WATCHLIST_ID
        )
        return MovieList(id=DEFAULT_WATCHLIST_ID, name=DEFAULT_WATCHLIST_NAME)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_movie(self, list_id, title):
        title = (title or "").strip()
        if not title:
            raise ValidationError(MESSAGES["empty_title"])
        entry = MovieEntry(title=title)
        self.store.append_movie(self.owner_id, list_id, entry)
        return entry

    def delete_movie(self, list_id, entry):
        """
        Remove entries equal to the whole record (title, note and url).

        A record that matches nothing leaves the list unchanged.
        """
        self.store.remove_movie(self.owner_id, list_id, entry)
        if list_id == self.selection.selected_list_id and entry.title == self.selection.random_pick:
            self.selection.random_pick = None

    def edit_note(self, list_id, title, new_note):
        """
        Rewrite the note of every entry titled `title`.

        Read-modify-write of the whole sequence: concurrent edits race and the
        last writer wins.

        Returns:
            Number of entries whose title matched
        """
        movie_list = self.store.get_list(self.owner_id, list_id)
        matched = 0
        movies = []
        for movie in movie_list.movies:
            if movie.title == title:
                matched += 1
                movie = replace(movie, note=new_note, stored=None)
            movies.append(movie)

        if movies != movie_list.movies:
            self.store.replace_movies(self.owner_id, list_id, movies)
        return matched

    def replace_movies(self, list_id, entries):
        """Overwrite a list's entries, e.g. from a fresh CSV upload."""
        entries = list(entries)
        if not entries:
            raise EmptyImportError()
        self.store.replace_movies(self.owner_id, list_id, entries)
        self._clear_pick_for(list_id)

    def replace_from_csv(self, list_id, data):
        self.replace_movies(list_id, entries_from_upload(data))

    def delete_list(self, list_id):
        self.store.delete_list(self.owner_id, list_id)
        self.lists.pop(list_id, None)
        if list_id == self.selection.selected_list_id:
            self.clear_selection()

    # -------------------------------------------------------------------------
    # Random pick
    # -------------------------------------------------------------------------

    def generate_movie_of_the_day(self):
        try:
            pick = generate_movie_of_the_day(self.selected_list, self._rng)
        except NoEligibleEntries:
            self.selection.random_pick = None
            raise
        self.selection.random_pick = pick
        return pick
