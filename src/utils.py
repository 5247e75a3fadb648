"""
Configuration constants and settings lookup for the movie list manager.
"""

import os
import logging
import streamlit as st

logger = logging.getLogger(__name__)

# Global configuration constants
DEFAULT_APP_ID = "default-movie-app"
LISTS_COLLECTION = "movieLists"
DEFAULT_WATCHLIST_ID = "myWatchlist"
DEFAULT_WATCHLIST_NAME = "My Watchlist"

# Seconds between re-renders of views fed by live subscriptions
REFRESH_INTERVAL = 2

STORE_BACKENDS = ("firestore", "memory")

SERVICE_ACCOUNT_SECRET = "gcp_service_account"

SERVICE_ACCOUNT_FIELDS = [
    "type",
    "project_id",
    "private_key_id",
    "private_key",
    "client_email",
    "client_id",
    "auth_uri",
    "token_uri",
    "auth_provider_x509_cert_url",
    "client_x509_cert_url",
    "universe_domain",
]

# User-facing messages, one per intent
MESSAGES = {
    "auth_failed": "Failed to authenticate. Please try again.",
    "auth_not_ready": "Authentication not ready. Please wait or refresh.",
    "no_file": "No file selected.",
    "import_failed": "Failed to upload and process file. Please ensure it's a valid CSV.",
    "add_failed": "Failed to add movie. Please try again.",
    "delete_failed": "Failed to delete movie. Please try again.",
    "note_failed": "Failed to save note. Please try again.",
    "delete_list_failed": "Failed to delete the list. Please try again.",
    "load_failed": "Failed to load your movie lists. Please check your connection.",
    "empty_title": "Movie title cannot be empty.",
    "empty_list_name": "List name cannot be empty.",
}


def _read_secret(name):
    """Return a Streamlit secret, or None when secrets are missing or unset."""
    try:
        if name in st.secrets:
            return st.secrets[name]
    except (FileNotFoundError, KeyError):
        pass
    return None


def get_setting(name, default=None):
    """
    Look up a setting in Streamlit secrets, then the environment.

    Args:
        name: Setting name, e.g. "app_id". The environment variable is the
            upper-cased name ("APP_ID"), optionally prefixed with MOVIE_LIST_.
        default: Value returned when neither source defines the setting

    Returns:
        The configured value or the default
    """
    value = _read_secret(name)
    if value not in (None, ""):
        return value

    env_name = name.upper()
    for key in (f"MOVIE_LIST_{env_name}", env_name):
        value = os.environ.get(key)
        if value:
            return value
    return default


def get_app_id():
    return get_setting("app_id", DEFAULT_APP_ID)


def get_initial_auth_token():
    return get_setting("initial_auth_token")


def get_service_account_info():
    """Return the service account secret table, or None if not configured."""
    return _read_secret(SERVICE_ACCOUNT_SECRET)


def get_store_backend():
    """
    Decide which list store backend to use.

    Returns:
        "firestore" when configured or when credentials exist, else "memory"
    """
    default = "firestore" if get_service_account_info() is not None else "memory"
    backend = str(get_setting("store_backend", default)).lower()
    if backend not in STORE_BACKENDS:
        logger.warning("Unknown store backend %r, using %s", backend, default)
        return default
    return backend
