"""
Owner identity for the current browser session.

A configured sign-in token is verified with Firebase Admin and its uid becomes
the owner id. Without a token the session signs in anonymously with a random
owner id kept in Streamlit session state.
"""

import itertools
import logging
import uuid

from firebase_admin import auth as firebase_auth

from errors import StoreError
from firebase_client import get_firebase_app

logger = logging.getLogger(__name__)

ANONYMOUS_OWNER_KEY = "anonymous_owner_id"


def verify_firebase_token(token):
    """
    Verify a Firebase ID token.

    Returns:
        The token's uid
    """
    app = get_firebase_app()
    if app is None:
        raise StoreError("Firebase is not configured")
    decoded = firebase_auth.verify_id_token(token, app=app)
    return decoded["uid"]


def get_or_create_anonymous_owner_id(session_state):
    owner_id = session_state.get(ANONYMOUS_OWNER_KEY, str(uuid.uuid4()))
    session_state[ANONYMOUS_OWNER_KEY] = owner_id
    return owner_id


class SessionAuth:
    """
    Resolves the owner id and notifies listeners once per transition.

    Listeners receive the owner id, or None for "no session".
    """

    def __init__(self, session_state, verify_token=verify_firebase_token):
        self._session_state = session_state
        self._verify_token = verify_token
        self._listeners = {}
        self._listener_ids = itertools.count(1)
        self.owner_id = None
        self.resolved = False

    def on_auth_state_changed(self, listener):
        """
        Register a listener. It fires immediately when auth is already resolved.

        Returns:
            Callable that removes the listener
        """
        listener_id = next(self._listener_ids)
        self._listeners[listener_id] = listener
        if self.resolved:
            listener(self.owner_id)

        def _unsubscribe():
            self._listeners.pop(listener_id, None)

        return _unsubscribe

    def sign_in(self, token=None):
        """
        Sign in with a token, or anonymously when no token is given.

        Returns:
            The owner id, or None when the token could not be verified
        """
        if token:
            try:
                owner_id = self._verify_token(token)
            except Exception:
                logger.exception("Sign-in token verification failed")
                owner_id = None
        else:
            owner_id = get_or_create_anonymous_owner_id(self._session_state)

        self._set_owner(owner_id)
        return owner_id

    def sign_out(self):
        self._session_state.pop(ANONYMOUS_OWNER_KEY, None)
        self._set_owner(None)

    def _set_owner(self, owner_id):
        if self.resolved and owner_id == self.owner_id:
            return
        self.owner_id = owner_id
        self.resolved = True
        logger.info("Auth state changed: %s", "signed in" if owner_id else "no session")
        for listener in list(self._listeners.values()):
            listener(owner_id)
