"""
Movie list persistence.

Lists live under `artifacts/{app_id}/users/{owner_id}/movieLists/{list_id}`.
Entries are changed with relative operations (append one entry, remove exact
matches) so concurrent sessions do not clobber each other; note edits and CSV
replaces overwrite the whole `movies` array.
"""

import itertools
import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore

from errors import MovieListError, NotFoundError, StoreError
from models import MovieList
from utils import DEFAULT_APP_ID, LISTS_COLLECTION

logger = logging.getLogger(__name__)


def lists_path(app_id, owner_id):
    """Path segments of an owner's list collection."""
    return ("artifacts", app_id, "users", owner_id, LISTS_COLLECTION)


def _sort_key(movie_list):
    return (movie_list.created_at is None, movie_list.created_at or datetime.min)


class Subscription:
    """
    Handle for a live listener. `unsubscribe()` is safe to call repeatedly.

    Usable as a context manager so the listener is released with its owner.
    """

    def __init__(self, unsubscribe, description=""):
        self._unsubscribe = unsubscribe
        self.description = description
        self.active = True

    def unsubscribe(self):
        if not self.active:
            return
        self.active = False
        try:
            self._unsubscribe()
        except Exception:
            logger.exception("Failed to unsubscribe %s", self.description)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.unsubscribe()
        return False


class ListStore:
    """
    Interface shared by the Firestore and in-memory backends.

    Every method raises StoreError (or NotFoundError) on failure.
    """

    def __init__(self, app_id=DEFAULT_APP_ID):
        self.app_id = app_id

    def create_list(self, owner_id, name, entries, list_id=None):
        raise NotImplementedError

    def get_list(self, owner_id, list_id):
        raise NotImplementedError

    def has_lists(self, owner_id):
        raise NotImplementedError

    def list_lists(self, owner_id):
        raise NotImplementedError

    def append_movie(self, owner_id, list_id, entry):
        raise NotImplementedError

    def remove_movie(self, owner_id, list_id, entry):
        raise NotImplementedError

    def replace_movies(self, owner_id, list_id, entries):
        raise NotImplementedError

    def delete_list(self, owner_id, list_id):
        raise NotImplementedError

    def subscribe_list(self, owner_id, list_id, on_change, on_missing=None):
        raise NotImplementedError

    def subscribe_lists(self, owner_id, on_change):
        raise NotImplementedError


# =============================================================================
# IN-MEMORY BACKEND
# =============================================================================

class InMemoryListStore(ListStore):
    """
    Process-local store with the same semantics as the Firestore backend.

    Listeners are called synchronously after each change.
    """

    def __init__(self, app_id=DEFAULT_APP_ID):
        super().__init__(app_id)
        self._lock = threading.RLock()
        self._documents = {}
        self._list_listeners = {}
        self._collection_listeners = {}
        self._listener_ids = itertools.count(1)

    def _collection(self, owner_id):
        return self._documents.setdefault(lists_path(self.app_id, owner_id), {})

    def _document(self, owner_id, list_id):
        document = self._collection(owner_id).get(list_id)
        if document is None:
            raise NotFoundError()
        return document

    def _snapshot(self, list_id, document):
        return MovieList.from_document(list_id, document)

    def _notify(self, owner_id, list_id):
        path = lists_path(self.app_id, owner_id)
        document = self._collection(owner_id).get(list_id)
        for on_change, on_missing in list(self._list_listeners.get((path, list_id), {}).values()):
            if document is not None:
                on_change(self._snapshot(list_id, document))
            elif on_missing is not None:
                on_missing()

        if self._collection_listeners.get(path):
            snapshot = self.list_lists(owner_id)
            for on_change in list(self._collection_listeners[path].values()):
                on_change(snapshot)

    def create_list(self, owner_id, name, entries, list_id=None):
        with self._lock:
            list_id = list_id or uuid.uuid4().hex[:20]
            self._collection(owner_id)[list_id] = {
                "name": name,
                "movies": [entry.to_dict() for entry in entries],
                "createdAt": datetime.now(timezone.utc),
            }
            self._notify(owner_id, list_id)
            return list_id

    def get_list(self, owner_id, list_id):
        with self._lock:
            return self._snapshot(list_id, self._document(owner_id, list_id))

    def has_lists(self, owner_id):
        with self._lock:
            return bool(self._collection(owner_id))

    def list_lists(self, owner_id):
        with self._lock:
            lists = [
                self._snapshot(list_id, document)
                for list_id, document in self._collection(owner_id).items()
            ]
        return sorted(lists, key=_sort_key)

    def append_movie(self, owner_id, list_id, entry):
        with self._lock:
            document = self._document(owner_id, list_id)
            document["movies"] = list(document["movies"]) + [entry.to_dict()]
            self._notify(owner_id, list_id)

    def remove_movie(self, owner_id, list_id, entry):
        with self._lock:
            document = self._document(owner_id, list_id)
            targets = entry.stored_values()
            document["movies"] = [movie for movie in document["movies"] if movie not in targets]
            self._notify(owner_id, list_id)

    def replace_movies(self, owner_id, list_id, entries):
        with self._lock:
            document = self._document(owner_id, list_id)
            document["movies"] = [entry.to_dict() for entry in entries]
            self._notify(owner_id, list_id)

    def delete_list(self, owner_id, list_id):
        with self._lock:
            self._collection(owner_id).pop(list_id, None)
            self._notify(owner_id, list_id)

    def subscribe_list(self, owner_id, list_id, on_change, on_missing=None):
        key = (lists_path(self.app_id, owner_id), list_id)
        with self._lock:
            listener_id = next(self._listener_ids)
            self._list_listeners.setdefault(key, {})[listener_id] = (on_change, on_missing)
            document = self._collection(owner_id).get(list_id)
            if document is not None:
                on_change(self._snapshot(list_id, document))
            elif on_missing is not None:
                on_missing()

        def _unsubscribe():
            with self._lock:
                self._list_listeners.get(key, {}).pop(listener_id, None)

        return Subscription(_unsubscribe, f"list {list_id}")

    def subscribe_lists(self, owner_id, on_change):
        path = lists_path(self.app_id, owner_id)
        with self._lock:
            listener_id = next(self._listener_ids)
            self._collection_listeners.setdefault(path, {})[listener_id] = on_change
            on_change(self.list_lists(owner_id))

        def _unsubscribe():
            with self._lock:
                self._collection_listeners.get(path, {}).pop(listener_id, None)

        return Subscription(_unsubscribe, f"lists of {owner_id}")

    def listener_count(self):
        with self._lock:
            return sum(len(listeners) for listeners in self._list_listeners.values()) + sum(
                len(listeners) for listeners in self._collection_listeners.values()
            )


# =============================================================================
# FIRESTORE BACKEND
# =============================================================================

@contextmanager
def _translate_errors(action):
    """Re-raise backend failures as StoreError / NotFoundError."""
    try:
        yield
    except MovieListError:
        raise
    except google_exceptions.NotFound as exc:
        raise NotFoundError() from exc
    except Exception as exc:
        raise StoreError(f"Failed to {action}: {exc}") from exc


def _append_in_transaction(transaction, document_ref, entry_data):
    """Append one entry inside a transaction; duplicates are kept."""
    snapshot = document_ref.get(transaction=transaction)
    if not snapshot.exists:
        raise NotFoundError()
    movies = list((snapshot.to_dict() or {}).get("movies") or [])
    movies.append(entry_data)
    transaction.update(document_ref, {"movies": movies})


class FirestoreListStore(ListStore):
    """List store backed by a google.cloud.firestore client."""

    def __init__(self, client, app_id=DEFAULT_APP_ID):
        super().__init__(app_id)
        self._client = client

    def _collection(self, owner_id):
        return self._client.collection(*lists_path(self.app_id, owner_id))

    def _document(self, owner_id, list_id):
        return self._collection(owner_id).document(list_id)

    def create_list(self, owner_id, name, entries, list_id=None):
        data = {
            "name": name,
            "movies": [entry.to_dict() for entry in entries],
            "createdAt": firestore.SERVER_TIMESTAMP,
        }
        with _translate_errors("create list"):
            if list_id:
                document_ref = self._document(owner_id, list_id)
                document_ref.set(data)
            else:
                _, document_ref = self._collection(owner_id).add(data)
            return document_ref.id

    def get_list(self, owner_id, list_id):
        with _translate_errors("load list"):
            snapshot = self._document(owner_id, list_id).get()
            if not snapshot.exists:
                raise NotFoundError()
            return MovieList.from_document(snapshot.id, snapshot.to_dict())

    def has_lists(self, owner_id):
        with _translate_errors("query lists"):
            return any(True for _ in self._collection(owner_id).limit(1).stream())

    def list_lists(self, owner_id):
        with _translate_errors("load lists"):
            lists = [
                MovieList.from_document(snapshot.id, snapshot.to_dict())
                for snapshot in self._collection(owner_id).stream()
            ]
        return sorted(lists, key=_sort_key)

    def append_movie(self, owner_id, list_id, entry):
        append = firestore.transactional(_append_in_transaction)
        with _translate_errors("add movie"):
            append(self._client.transaction(), self._document(owner_id, list_id), entry.to_dict())

    def remove_movie(self, owner_id, list_id, entry):
        with _translate_errors("delete movie"):
            self._document(owner_id, list_id).update(
                {"movies": firestore.ArrayRemove(entry.stored_values())}
            )

    def replace_movies(self, owner_id, list_id, entries):
        with _translate_errors("update movies"):
            self._document(owner_id, list_id).update(
                {"movies": [entry.to_dict() for entry in entries]}
            )

    def delete_list(self, owner_id, list_id):
        with _translate_errors("delete list"):
            self._document(owner_id, list_id).delete()

    def subscribe_list(self, owner_id, list_id, on_change, on_missing=None):
        def _on_snapshot(snapshots, changes, read_time):
            try:
                existing = [snapshot for snapshot in snapshots if snapshot.exists]
                if existing:
                    snapshot = existing[0]
                    on_change(MovieList.from_document(snapshot.id, snapshot.to_dict()))
                elif on_missing is not None:
                    on_missing()
            except Exception:
                logger.exception("Error handling snapshot for list %s", list_id)

        with _translate_errors("subscribe to list"):
            watch = self._document(owner_id, list_id).on_snapshot(_on_snapshot)
        return Subscription(watch.unsubscribe, f"list {list_id}")

    def subscribe_lists(self, owner_id, on_change):
        def _on_snapshot(snapshots, changes, read_time):
            try:
                lists = [
                    MovieList.from_document(snapshot.id, snapshot.to_dict())
                    for snapshot in snapshots
                ]
                on_change(sorted(lists, key=_sort_key))
            except Exception:
                logger.exception("Error handling snapshot for lists of %s", owner_id)

        with _translate_errors("subscribe to lists"):
            watch = self._collection(owner_id).on_snapshot(_on_snapshot)
        return Subscription(watch.unsubscribe, f"lists of {owner_id}")
