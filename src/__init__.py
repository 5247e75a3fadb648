"""
Movie List Manager - Source Package

This package contains the core functionality for the movie list manager:
- csv_import: CSV upload decoding and parsing into movie entries
- models: Movie entry and movie list records
- list_store: Firestore and in-memory list persistence with live subscriptions
- list_manager: List operations, selection and random pick state
- movie_of_the_day: Random "Movie of the Day" pick
- navigation: Screen state machine and view-scoped subscriptions
- auth_session: Owner identity for the browser session
- firebase_client: Firebase / Firestore setup from Streamlit secrets
- errors: Error types surfaced to the user
- utils: Configuration constants and settings lookup
"""
