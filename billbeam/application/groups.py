"""Saved groups of people and the default group preference."""

from __future__ import annotations

from billbeam.domain.session import SplitSession
from billbeam.runtime.logging import get_logger
from billbeam.runtime.storage import DocumentNotFound, JsonDocumentStore, SavedGroup

logger = get_logger(__name__)


def create_group_from_session(session: SplitSession, store: JsonDocumentStore, name: str) -> str:
    """Save the session's current roster as a named group."""
    if not name or not name.strip():
        raise ValueError("Group name must not be empty")
    return store.create_group(name.strip(), session.people)


def load_group_into_session(session: SplitSession, store: JsonDocumentStore, group_id: str) -> SavedGroup:
    group = store.get_group(group_id)
    session.replace_roster(group.people)
    return group


def toggle_default_group(store: JsonDocumentStore, group_id: str) -> str | None:
    """Make a group the default, or clear it if it already is. Returns the new default."""
    current = store.get_preferences().default_group_id
    new_default = None if current == group_id else group_id
    store.set_default_group(new_default)
    return new_default


def start_session(store: JsonDocumentStore | None = None) -> SplitSession:
    """Create a session, pre-filling the roster from the user's default group."""
    session = SplitSession()
    if store is None:
        return session

    default_group_id = store.get_preferences().default_group_id
    if default_group_id is None:
        return session
    try:
        load_group_into_session(session, store, default_group_id)
    except DocumentNotFound:
        logger.warning("Default group %s no longer exists; clearing preference", default_group_id)
        store.set_default_group(None)
    return session
