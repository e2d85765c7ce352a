import json
import logging
from datetime import datetime

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .. import db
from ..errors import StorageError
from ..models.store_entry import StoreEntry

logger = logging.getLogger(__name__)


def conflict(key):
    return StorageError(
        'This information was changed by someone else. Please reload and try again.',
        kind='Conflict'
    )


class KeyValueStore:
    """String keys mapped to string values, each with a version counter.

    Version 0 means the key is absent. ``set_many`` applies a batch
    atomically; when ``expected_versions`` names a written key whose current
    version differs, nothing is written and a ``Conflict`` StorageError is
    raised.
    """

    def get_versioned(self, key):
        raise NotImplementedError

    def set_many(self, items, expected_versions=None):
        """Write ``items`` (key -> value); a value of None removes the key"""
        raise NotImplementedError

    def get(self, key):
        return self.get_versioned(key)[0]

    def set(self, key, value, expected_version=None):
        expected = None if expected_version is None else {key: expected_version}
        self.set_many({key: value}, expected)

    def remove(self, key):
        self.set_many({key: None})


class MemoryStore(KeyValueStore):
    """In-process store; batches are applied to a copy and swapped in"""

    def __init__(self, data=None):
        self._entries = {key: (value, 1) for key, value in (data or {}).items()}

    def get_versioned(self, key):
        return self._entries.get(key, (None, 0))

    def set_many(self, items, expected_versions=None):
        expected_versions = expected_versions or {}
        for key in items:
            expected = expected_versions.get(key)
            if expected is not None and self.get_versioned(key)[1] != expected:
                raise conflict(key)

        entries = dict(self._entries)
        for key, value in items.items():
            if value is None:
                entries.pop(key, None)
            else:
                version = entries.get(key, (None, 0))[1]
                entries[key] = (value, version + 1)
        self._entries = entries


class DatabaseStore(KeyValueStore):
    """Store backed by the ``store_entries`` table.

    A batch is one transaction. Versioned writes are compare-and-swap
    updates (``UPDATE ... WHERE version = :expected``) so concurrent writers
    on other connections cannot lose each other's changes.
    """

    def __init__(self, session=None):
        self.session = session or db.session

    def get_versioned(self, key):
        try:
            entry = self.session.get(StoreEntry, key)
        except SQLAlchemyError as e:
            logger.error(f"Error reading store key {key}: {str(e)}")
            raise StorageError('Saved data could not be read. Please try again.')
        if entry is None:
            return None, 0
        return entry.value, entry.version

    def set_many(self, items, expected_versions=None):
        expected_versions = expected_versions or {}
        try:
            for key, value in items.items():
                self._write(key, value, expected_versions.get(key))
            self.session.commit()
            logger.info(f"Committed store keys: {', '.join(items)}")
        except StorageError:
            self.session.rollback()
            raise
        except IntegrityError:
            self.session.rollback()
            raise conflict(', '.join(items))
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error writing store keys {list(items)}: {str(e)}")
            raise StorageError('Your changes could not be saved. Please try again.')

    def _write(self, key, value, expected):
        if value is None:
            stmt = delete(StoreEntry).where(StoreEntry.key == key)
            if expected is not None:
                stmt = stmt.where(StoreEntry.version == expected)
            result = self.session.execute(stmt.execution_options(synchronize_session=False))
            if expected and result.rowcount == 0:
                raise conflict(key)
            return

        stmt = update(StoreEntry).where(StoreEntry.key == key)
        if expected is not None:
            stmt = stmt.where(StoreEntry.version == expected)
        stmt = stmt.values(
            value=value,
            version=StoreEntry.version + 1,
            updated_at=datetime.utcnow()
        ).execution_options(synchronize_session=False)
        result = self.session.execute(stmt)
        if result.rowcount:
            return

        exists = self.session.query(StoreEntry.key).filter_by(key=key).first() is not None
        if exists or expected not in (None, 0):
            raise conflict(key)
        self.session.add(StoreEntry(key=key, value=value, version=1))


def read_list(store, key):
    """Read a JSON array from the store.

    Returns ``(items, version)``. A missing key or a corrupt value yields an
    empty list; an unreadable store yields ``([], None)`` so callers know the
    key must not be overwritten.
    """
    try:
        raw, version = store.get_versioned(key)
    except StorageError as e:
        logger.warning(f"Falling back to empty list for {key}: {e.message}")
        return [], None

    if raw is None:
        return [], version
    try:
        items = json.loads(raw)
    except ValueError as e:
        logger.warning(f"Corrupt JSON under {key}, ignoring it: {str(e)}")
        return [], version
    if not isinstance(items, list):
        logger.warning(f"Expected a list under {key}, got {type(items).__name__}")
        return [], version
    return [item for item in items if isinstance(item, dict)], version
