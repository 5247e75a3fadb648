"""
Error types raised by the movie list manager.
"""


class MovieListError(Exception):
    """Base class for every error the list manager surfaces to the user."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(MovieListError):
    """Empty title or list name, caught before any remote call."""

    default_message = "Please enter a value."


class EmptyImportError(MovieListError):
    """The uploaded CSV produced no valid rows."""

    default_message = "No valid movie titles found in the CSV file."


class StoreError(MovieListError):
    """Any failure reported by the list store (network, permission, backend)."""

    default_message = "The movie list service is unavailable. Please try again."


class NotFoundError(StoreError):
    """The requested or subscribed list document no longer exists."""

    default_message = "That movie list no longer exists."


class NoEligibleEntries(MovieListError):
    """No list selected, or the selected list has no entries to pick from."""

    default_message = "Your movie list is empty. Please add some movies first!"
