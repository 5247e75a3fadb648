"""
Screen state machine and view-scoped subscriptions.

    UNAUTHENTICATED -> AUTHENTICATING -> {NO_LISTS, HAS_LISTS} <-> LIST_DETAIL

Each screen owns a ViewScope; leaving the screen closes the scope and with it
every live subscription the screen opened.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Screen(Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    NO_LISTS = "no_lists"
    HAS_LISTS = "has_lists"
    LIST_DETAIL = "list_detail"


class ViewScope:
    """Named subscriptions released together when the view goes away."""

    def __init__(self, name=""):
        self.name = name
        self._subscriptions = {}
        self.closed = False

    def __contains__(self, key):
        return key in self._subscriptions

    def __len__(self):
        return len(self._subscriptions)

    def add(self, key, subscription):
        if self.closed:
            subscription.unsubscribe()
            raise RuntimeError(f"View scope {self.name!r} is closed")
        previous = self._subscriptions.pop(key, None)
        if previous is not None:
            previous.unsubscribe()
        self._subscriptions[key] = subscription
        return subscription

    def close(self):
        for subscription in self._subscriptions.values():
            subscription.unsubscribe()
        self._subscriptions.clear()
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class ListDetailView:
    """Latest pushed snapshot of the list open in the detail screen."""

    def __init__(self, list_id):
        self.list_id = list_id
        self.movie_list = None
        self.missing = False

    def apply(self, movie_list):
        self.movie_list = movie_list
        self.missing = False

    def mark_missing(self):
        self.missing = True


class Navigator:
    """
    Tracks the current screen. Transitions not allowed from the current
    screen are ignored and return False.
    """

    def __init__(self):
        self.screen = Screen.UNAUTHENTICATED
        self.owner_id = None
        self.detail = None
        self.scope = ViewScope(self.screen.value)

    def _move(self, screen):
        logger.debug("Navigating %s -> %s", self.screen.value, screen.value)
        self.scope.close()
        self.screen = screen
        self.scope = ViewScope(screen.value)
        if screen is not Screen.LIST_DETAIL:
            self.detail = None
        return True

    def _reject(self, transition):
        logger.debug("Ignoring %s while on %s", transition, self.screen.value)
        return False

    def begin_auth(self):
        self.owner_id = None
        return self._move(Screen.AUTHENTICATING)

    def auth_resolved(self, owner_id, has_lists=False):
        if self.screen is not Screen.AUTHENTICATING:
            return self._reject("auth_resolved")
        self.owner_id = owner_id
        if owner_id is None:
            return self._move(Screen.UNAUTHENTICATED)
        return self._move(Screen.HAS_LISTS if has_lists else Screen.NO_LISTS)

    def import_completed(self, list_id):
        if self.screen not in (Screen.NO_LISTS, Screen.HAS_LISTS):
            return self._reject("import_completed")
        logger.info("Import completed, list %s", list_id)
        if self.screen is Screen.HAS_LISTS:
            return True
        return self._move(Screen.HAS_LISTS)

    def open_list(self, list_id):
        if self.screen is not Screen.HAS_LISTS:
            return self._reject("open_list")
        self._move(Screen.LIST_DETAIL)
        self.detail = ListDetailView(list_id)
        return True

    def back(self):
        if self.screen is not Screen.LIST_DETAIL:
            return self._reject("back")
        return self._move(Screen.HAS_LISTS)

    def list_not_found(self):
        if self.screen is not Screen.LIST_DETAIL:
            return self._reject("list_not_found")
        logger.info("Open list %s no longer exists", self.detail.list_id if self.detail else None)
        return self._move(Screen.HAS_LISTS)

    def lists_changed(self, count):
        if self.screen is Screen.HAS_LISTS and count == 0:
            return self._move(Screen.NO_LISTS)
        if self.screen is Screen.NO_LISTS and count > 0:
            return self._move(Screen.HAS_LISTS)
        return False

    def sync_lists(self, manager):
        """Apply `lists_changed` once the manager holds a delivered snapshot."""
        if not manager.loaded:
            return False
        return self.lists_changed(len(manager.lists))

    # -------------------------------------------------------------------------
    # Subscriptions owned by the current screen
    # -------------------------------------------------------------------------

    def watch_lists(self, manager):
        """Subscribe the manager to the owner's collection for this screen."""
        if self.screen not in (Screen.NO_LISTS, Screen.HAS_LISTS) or "lists" in self.scope:
            return False
        self.scope.add("lists", manager.subscribe())
        return True

    def watch_open_list(self, manager):
        """Subscribe to the list open in the detail screen."""
        if self.screen is not Screen.LIST_DETAIL or "detail" in self.scope:
            return False
        detail = self.detail

        def _on_change(movie_list):
            detail.apply(movie_list)
            manager.apply_list_snapshot(movie_list)

        self.scope.add(
            "detail",
            manager.store.subscribe_list(
                manager.owner_id, detail.list_id, _on_change, detail.mark_missing
            ),
        )
        return True

    def check_open_list(self):
        """Fall back to the overview when the open list has vanished."""
        if self.screen is Screen.LIST_DETAIL and self.detail is not None and self.detail.missing:
            return self.list_not_found()
        return False
