"""
Key/value persistence for client state that must survive a page reload.

The order wizard saves its draft after every transition and the orders page
remembers which order detail was open. Both go through a ``StateStore`` so
the wizard can be exercised with the in-memory store and served with the
database-backed one.
"""

from copy import deepcopy
from typing import Optional

from orderdesk.extensions import db
from orderdesk.core.models import StoredState


class StateStore:
    """Interface for the state cache."""

    def get(self, key: str) -> Optional[dict]:
        raise NotImplementedError

    def set(self, key: str, value: dict) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStateStore(StateStore):
    """Process-local store. Values are copied in and out."""

    def __init__(self):
        self._values = {}

    def get(self, key):
        value = self._values.get(key)
        return deepcopy(value) if value is not None else None

    def set(self, key, value):
        self._values[key] = deepcopy(value)

    def delete(self, key):
        self._values.pop(key, None)

    def __contains__(self, key):
        return key in self._values


class DatabaseStateStore(StateStore):
    """Store backed by the ``stored_states`` table. Commits on every write."""

    def get(self, key):
        row = db.session.query(StoredState).filter(StoredState.key == key).first()
        return deepcopy(row.value) if row else None

    def set(self, key, value):
        row = db.session.query(StoredState).filter(StoredState.key == key).first()
        if row is None:
            row = StoredState(key=key, value=deepcopy(value))
            db.session.add(row)
        else:
            # Reassign so the JSON column is flagged dirty
            row.value = deepcopy(value)
        db.session.commit()

    def delete(self, key):
        db.session.query(StoredState).filter(StoredState.key == key).delete()
        db.session.commit()


def wizard_state_key(store_slug: str, user_id) -> str:
    return f"order_wizard:{store_slug}:{user_id}"


def open_order_key(store_slug: str, user_id) -> str:
    return f"order_detail:{store_slug}:{user_id}"
