import json

import pytest

from lms import db
from lms.errors import StorageError
from lms.utils.store import DatabaseStore, KeyValueStore, MemoryStore, read_list


class BrokenStore(KeyValueStore):
    def get_versioned(self, key):
        raise StorageError('disk on fire')

    def set_many(self, items, expected_versions=None):
        raise StorageError('disk on fire')


@pytest.fixture(params=['memory', 'database'])
def store(request, app):
    if request.param == 'memory':
        yield MemoryStore()
    else:
        with app.app_context():
            yield DatabaseStore(db.session)


def test_missing_key_has_version_zero(store):
    assert store.get_versioned('nothing') == (None, 0)
    assert store.get('nothing') is None


def test_set_get_remove(store):
    store.set('greeting', 'hello')
    assert store.get_versioned('greeting') == ('hello', 1)

    store.set('greeting', 'hi')
    assert store.get_versioned('greeting') == ('hi', 2)

    store.remove('greeting')
    assert store.get('greeting') is None


def test_compare_and_swap_accepts_current_version(store):
    store.set('courses', '[]')
    store.set_many({'courses': '[1]'}, {'courses': 1})
    assert store.get_versioned('courses') == ('[1]', 2)


def test_compare_and_swap_rejects_stale_version(store):
    store.set('courses', '[]')
    store.set('courses', '[1]')

    with pytest.raises(StorageError) as excinfo:
        store.set_many({'courses': '[2]'}, {'courses': 1})

    assert excinfo.value.kind == 'Conflict'
    assert excinfo.value.retryable
    assert store.get('courses') == '[1]'


def test_expected_zero_means_key_must_be_absent(store):
    store.set_many({'fresh': 'a'}, {'fresh': 0})
    assert store.get('fresh') == 'a'

    with pytest.raises(StorageError):
        store.set_many({'fresh': 'b'}, {'fresh': 0})
    assert store.get('fresh') == 'a'


def test_batch_is_all_or_nothing(store):
    store.set('student-enrollments', '["old"]')
    store.set('courses', '["old"]')
    store.set('courses', '["newer"]')

    with pytest.raises(StorageError):
        store.set_many(
            {'student-enrollments': '["new"]', 'courses': '["new"]'},
            {'student-enrollments': 1, 'courses': 1}
        )

    assert store.get('student-enrollments') == '["old"]'
    assert store.get('courses') == '["newer"]'


def test_batch_writes_every_key(store):
    store.set_many({'a': '1', 'b': '2'})
    assert store.get('a') == '1'
    assert store.get('b') == '2'


def test_read_list_degrades_missing_and_corrupt_values():
    store = MemoryStore({'corrupt': '{not json', 'object': json.dumps({'a': 1}),
                         'mixed': json.dumps([{'id': '1'}, 'junk', 3])})

    assert read_list(store, 'missing') == ([], 0)
    assert read_list(store, 'corrupt') == ([], 1)
    assert read_list(store, 'object') == ([], 1)
    assert read_list(store, 'mixed') == ([{'id': '1'}], 1)


def test_read_list_reports_unreadable_store():
    assert read_list(BrokenStore(), 'courses') == ([], None)
