"""Combining the remote (default) tier with locally created records.

The working set is every remote record that has no local counterpart, in
remote order, followed by every local record in local order. A local record
with the same id as a remote one shadows it. Only local records are ever
written back to the key-value store.
"""
from ..errors import NotFoundError, StateError
from ..models.records import ORIGIN_LOCAL, ORIGIN_REMOTE


def merge(remote, local):
    for record in remote:
        record.origin = ORIGIN_REMOTE
    for record in local:
        record.origin = ORIGIN_LOCAL

    local_ids = {record.id for record in local}
    merged = [record for record in remote if record.id not in local_ids]
    merged.extend(local)
    return merged


def writeback(records):
    """Records to persist locally: never unmodified remote ones"""
    return [record for record in records if record.origin == ORIGIN_LOCAL]


def adopt(record):
    """Mark an edited remote record as locally owned so it is persisted"""
    record.origin = ORIGIN_LOCAL
    return record


def find(records, record_id):
    record_id = str(record_id)
    for record in records:
        if record.id == record_id:
            return record
    return None


def require(records, record_id, label='Record'):
    record = find(records, record_id)
    if record is None:
        raise NotFoundError(f'{label} not found.')
    return record


def discard(records, record):
    """Remove a locally owned record; remote records cannot be deleted here"""
    if record.origin == ORIGIN_REMOTE:
        raise StateError(f'{record.__class__.__name__} {record.id} comes from the central catalog '
                         'and cannot be deleted here.', kind='RemoteRecord')
    records.remove(record)
    return records
