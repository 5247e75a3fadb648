"""
Movie List Manager - Streamlit UI
Upload movie lists as CSV, manage them and get a random "Movie of the Day"
"""

import streamlit as st
import sys
import os
import logging

# =============================================================================
# IMPORTS AND SETUP
# =============================================================================

# Add src directory to path for imports
current_dir = os.path.dirname(os.path.abspath(__file__))
src_dir = os.path.join(current_dir, 'src')

if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

from auth_session import SessionAuth
from list_manager import ErrorSlot, ListManager, run_intent
from list_store import FirestoreListStore, InMemoryListStore
from firebase_client import get_firestore_client
from models import movies_frame
from navigation import Navigator, Screen
from utils import (
    DEFAULT_WATCHLIST_ID,
    MESSAGES,
    REFRESH_INTERVAL,
    get_app_id,
    get_initial_auth_token,
    get_store_backend,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# =============================================================================
# STORE SETUP
# =============================================================================

@st.cache_resource
def get_list_store(backend, app_id):
    """One store per backend and app id, shared by every session."""
    if backend == "firestore":
        client = get_firestore_client()
        if client is not None:
            return FirestoreListStore(client, app_id=app_id)
        logger.warning("Firestore unavailable, falling back to the in-memory store")
    return InMemoryListStore(app_id=app_id)

# =============================================================================
# SESSION STATE MANAGEMENT
# =============================================================================

def initialize_session_state():
    """Initialize all required session state variables."""

    if "navigator" not in st.session_state:
        st.session_state.navigator = Navigator()

    if "error_slot" not in st.session_state:
        st.session_state.error_slot = ErrorSlot()

    if "manager" not in st.session_state:
        st.session_state.manager = None

    if "auth" not in st.session_state:
        st.session_state.auth = SessionAuth(st.session_state)

def handle_auth_state_changed(owner_id):
    """Rebuild the manager for the new owner and pick the first screen."""
    navigator = st.session_state.navigator
    navigator.begin_auth()

    if owner_id is None:
        st.session_state.manager = None
        navigator.auth_resolved(None)
        return

    store = get_list_store(get_store_backend(), get_app_id())
    manager = ListManager(store, owner_id)
    st.session_state.manager = manager

    has_lists = run_intent(st.session_state.error_slot, manager.has_lists, MESSAGES["load_failed"])
    navigator.auth_resolved(owner_id, bool(has_lists))

def bootstrap_auth():
    """Sign in once per session: with the configured token, else anonymously."""
    auth = st.session_state.auth
    if "auth_listener" not in st.session_state:
        st.session_state.auth_listener = auth.on_auth_state_changed(handle_auth_state_changed)

    if not auth.resolved:
        token = get_initial_auth_token()
        if auth.sign_in(token) is None and token:
            st.session_state.error_slot.set(MESSAGES["auth_failed"])

# =============================================================================
# UI STYLING
# =============================================================================

def inject_custom_css():
    """Inject custom CSS for the list manager."""
    st.markdown("""
    <style>
    .app-title {
        text-align: center;
        font-size: 2.5rem;
        font-weight: 800;
        color: #2dd4bf;
        margin-bottom: 0.5rem;
    }

    .app-subtitle {
        text-align: center;
        color: #9ca3af;
        margin-bottom: 2rem;
    }

    .owner-id {
        text-align: center;
        font-size: 0.8rem;
        color: #9ca3af;
        word-break: break-all;
        margin-bottom: 1.5rem;
    }

    .random-pick {
        text-align: center;
        padding: 1.5rem;
        border-radius: 12px;
        background: #374151;
        margin: 1.5rem 0;
    }

    .random-pick .pick-title {
        font-size: 2.5rem;
        font-weight: 800;
        color: #c084fc;
    }
    </style>
    """, unsafe_allow_html=True)

# =============================================================================
# CORE FUNCTIONS
# =============================================================================

def rerun_app():
    st.rerun(scope="app")

def import_list(manager, navigator, list_name, uploaded_file):
    """Create a new list from an uploaded CSV and move to the overview."""
    slot = st.session_state.error_slot
    if uploaded_file is None:
        slot.set(MESSAGES["no_file"])
        return

    list_id = run_intent(
        slot,
        lambda: manager.import_csv(list_name, uploaded_file.getvalue()),
        MESSAGES["import_failed"],
    )
    if list_id:
        navigator.import_completed(list_id)
        rerun_app()

def start_watchlist(manager, navigator):
    watchlist = run_intent(st.session_state.error_slot, manager.ensure_watchlist, MESSAGES["load_failed"])
    if watchlist is not None:
        manager.select_list(DEFAULT_WATCHLIST_ID)
        navigator.import_completed(DEFAULT_WATCHLIST_ID)
        rerun_app()

def generate_pick(manager):
    run_intent(st.session_state.error_slot, manager.generate_movie_of_the_day, MESSAGES["load_failed"])

# =============================================================================
# UI COMPONENTS
# =============================================================================

def render_header(owner_id):
    st.markdown('<h1 class="app-title">🎬 Your Movie List Manager</h1>', unsafe_allow_html=True)
    st.markdown(
        '<p class="app-subtitle">Upload your movie list, manage it, and get a random "Movie of the Day"!</p>',
        unsafe_allow_html=True
    )
    if owner_id:
        st.markdown(f'<div class="owner-id">Your User ID: <code>{owner_id}</code></div>', unsafe_allow_html=True)

def render_error():
    slot = st.session_state.error_slot
    if slot:
        st.error(slot.message)

def render_import_form(manager, navigator, key):
    """CSV upload form: list name plus a `date,title,url` file."""
    with st.form(key=key, clear_on_submit=True):
        list_name = st.text_input("List name", placeholder="e.g. Letterboxd watchlist")
        uploaded_file = st.file_uploader("Upload Movie List (CSV)", type=["csv"])
        st.caption(
            "Each line should look like `date,title,url`. Lines with fewer than three "
            "comma-separated fields are skipped. Quoted fields are not supported."
        )
        if st.form_submit_button("📤 Import list", type="primary"):
            import_list(manager, navigator, list_name, uploaded_file)

def render_random_pick(manager):
    pick = manager.random_pick
    if pick:
        st.markdown(f'''
        <div class="random-pick">
            <h3>Your Random Pick Is:</h3>
            <div class="pick-title">"{pick}"</div>
            <p>Time to watch!</p>
        </div>
        ''', unsafe_allow_html=True)

def render_pick_section(manager):
    """Choose the source list and generate the Movie of the Day."""
    lists = list(manager.lists.values())
    if not lists:
        return

    st.markdown("### ✨ Movie of the Day")
    ids = [movie_list.id for movie_list in lists]
    selected = manager.selection.selected_list_id
    index = ids.index(selected) if selected in ids else 0

    chosen = st.selectbox(
        "Pick from",
        ids,
        index=index,
        format_func=lambda list_id: manager.lists[list_id].name if list_id in manager.lists else list_id,
        key="pick_source",
    )
    manager.select_list(chosen)

    if st.button("✨ Generate Movie of the Day ✨", type="primary", key="generate_overview"):
        generate_pick(manager)
    render_random_pick(manager)

@st.fragment(run_every=REFRESH_INTERVAL)
def render_overview():
    """Owner's lists, refreshed from the live collection subscription."""
    manager = st.session_state.manager
    navigator = st.session_state.navigator

    if navigator.sync_lists(manager):
        rerun_app()
    if not manager.loaded:
        st.info("Loading your lists...")
        return

    st.markdown(f"### 📚 Your Movie Lists ({len(manager.lists)})")
    for movie_list in list(manager.lists.values()):
        with st.container(border=True):
            col1, col2, col3 = st.columns([3, 1, 1])
            with col1:
                st.markdown(f"**{movie_list.name}** · {len(movie_list.movies)} movies")
            with col2:
                if st.button("View / manage", key=f"open_{movie_list.id}"):
                    manager.select_list(movie_list.id)
                    navigator.open_list(movie_list.id)
                    rerun_app()
            with col3:
                if st.button("🗑️ Delete", key=f"delete_list_{movie_list.id}"):
                    run_intent(
                        st.session_state.error_slot,
                        lambda list_id=movie_list.id: manager.delete_list(list_id),
                        MESSAGES["delete_list_failed"],
                    )
                    rerun_app()

    render_pick_section(manager)

def render_entry(manager, movie_list, index, entry):
    """One entry: title, link, note editor and delete button."""
    slot = st.session_state.error_slot
    with st.container(border=True):
        col1, col2 = st.columns([5, 1])
        with col1:
            st.markdown(f"**{entry.title}**")
            if entry.url:
                st.markdown(f"[{entry.url}]({entry.url})")
        with col2:
            if st.button("🗑️", key=f"delete_{movie_list.id}_{index}", help="Delete movie"):
                run_intent(slot, lambda: manager.delete_movie(movie_list.id, entry), MESSAGES["delete_failed"])
                rerun_app()

        note_col, save_col = st.columns([5, 1])
        with note_col:
            note = st.text_input(
                "Note",
                value=entry.note,
                key=f"note_{movie_list.id}_{index}_{entry.note}",
                label_visibility="collapsed",
                placeholder="Add a note",
            )
        with save_col:
            if st.button("💾", key=f"save_{movie_list.id}_{index}", help="Save note"):
                run_intent(
                    slot,
                    lambda: manager.edit_note(movie_list.id, entry.title, note),
                    MESSAGES["note_failed"],
                    on_not_found=st.session_state.navigator.list_not_found,
                )
                rerun_app()

@st.fragment(run_every=REFRESH_INTERVAL)
def render_list_entries():
    """Entries of the open list, refreshed from the live document subscription."""
    manager = st.session_state.manager
    navigator = st.session_state.navigator

    if navigator.check_open_list():
        rerun_app()

    movie_list = navigator.detail.movie_list if navigator.detail else None
    if movie_list is None:
        st.info("Loading list...")
        return

    st.markdown(f"### 🎞️ {movie_list.name} ({len(movie_list.movies)})")
    if not movie_list.movies:
        st.info("No movies in your list yet. Upload a CSV or add some!")
        return

    st.dataframe(
        movies_frame(movie_list),
        hide_index=True,
        use_container_width=True,
        column_config={"url": st.column_config.LinkColumn("url")},
    )
    for index, entry in enumerate(movie_list.movies):
        render_entry(manager, movie_list, index, entry)

def render_list_detail():
    """Manage one list: add, delete, annotate, replace and pick."""
    manager = st.session_state.manager
    navigator = st.session_state.navigator
    slot = st.session_state.error_slot
    list_id = navigator.detail.list_id

    run_intent(slot, lambda: navigator.watch_open_list(manager), MESSAGES["load_failed"],
               on_not_found=navigator.list_not_found)

    if st.button("← Back to lists", key="back"):
        navigator.back()
        rerun_app()

    with st.form(key="add_movie", clear_on_submit=True):
        title = st.text_input("Add New Movie", placeholder="Enter movie title")
        if st.form_submit_button("Add"):
            run_intent(slot, lambda: manager.add_movie(list_id, title), MESSAGES["add_failed"],
                       on_not_found=navigator.list_not_found)
            rerun_app()

    render_list_entries()

    if st.button("✨ Generate Movie of the Day ✨", type="primary", key="generate_detail"):
        manager.select_list(list_id)
        generate_pick(manager)
    if manager.selection.selected_list_id == list_id:
        render_random_pick(manager)

    with st.expander("Replace entries from CSV"):
        uploaded_file = st.file_uploader("CSV file", type=["csv"], key=f"replace_{list_id}")
        if st.button("Replace all entries", key="replace_entries") and uploaded_file is not None:
            run_intent(
                slot,
                lambda: manager.replace_from_csv(list_id, uploaded_file.getvalue()),
                MESSAGES["import_failed"],
                on_not_found=navigator.list_not_found,
            )
            rerun_app()

    if st.button("🗑️ Delete this list", key="delete_open_list"):
        run_intent(slot, lambda: manager.delete_list(list_id), MESSAGES["delete_list_failed"])
        if not slot:
            navigator.back()
        rerun_app()

@st.fragment(run_every=REFRESH_INTERVAL)
def watch_for_lists():
    """Leave the account view as soon as the live collection holds a list."""
    if st.session_state.navigator.sync_lists(st.session_state.manager):
        rerun_app()

def render_account_view(manager, navigator):
    """First-run screen: import a list or start an empty watchlist."""
    st.markdown("### 👋 Welcome! You don't have any movie lists yet.")
    render_import_form(manager, navigator, key="import_first")
    st.markdown("or")
    if st.button("Start an empty watchlist", key="start_watchlist"):
        start_watchlist(manager, navigator)

def render_unauthenticated():
    st.warning(MESSAGES["auth_not_ready"])
    if st.button("Continue anonymously", key="sign_in_anonymously"):
        st.session_state.auth.sign_in()
        rerun_app()

# =============================================================================
# MAIN APPLICATION
# =============================================================================

def main():
    """Main application function."""
    st.set_page_config(
        page_title="Movie List Manager",
        page_icon="🎬",
        layout="centered",
    )

    # Initialize
    initialize_session_state()
    inject_custom_css()
    bootstrap_auth()

    navigator = st.session_state.navigator
    manager = st.session_state.manager

    render_header(navigator.owner_id)
    render_error()

    screen = navigator.screen
    if screen is Screen.AUTHENTICATING:
        st.info("Loading application...")
    elif screen is Screen.UNAUTHENTICATED:
        render_unauthenticated()
    elif screen is Screen.NO_LISTS:
        run_intent(st.session_state.error_slot, lambda: navigator.watch_lists(manager), MESSAGES["load_failed"])
        watch_for_lists()
        render_account_view(manager, navigator)
    elif screen is Screen.HAS_LISTS:
        run_intent(st.session_state.error_slot, lambda: navigator.watch_lists(manager), MESSAGES["load_failed"])
        render_overview()
        with st.expander("📤 Import another list"):
            render_import_form(manager, navigator, key="import_more")
    elif screen is Screen.LIST_DETAIL:
        render_list_detail()

if __name__ == "__main__":
    main()
