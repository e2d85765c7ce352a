import copy
import uuid
from datetime import datetime

from ..errors import ValidationError

ORIGIN_REMOTE = 'remote'
ORIGIN_LOCAL = 'local'


def new_id():
    return uuid.uuid4().hex


def utc_now():
    return datetime.utcnow().isoformat()


def today():
    return datetime.utcnow().date().isoformat()


class Record:
    """Base for JSON-backed records kept in the key-value store.

    Subclasses declare ``FIELDS`` as a mapping of attribute name to default
    value. Every record carries an opaque string ``id`` and an ``origin`` tag
    telling whether it came from the remote tier or was created locally.
    """
    FIELDS = {}

    def __init__(self, id=None, origin=ORIGIN_LOCAL, **values):
        self.id = str(id) if id not in (None, '') else new_id()
        self.origin = origin
        for name, default in self.FIELDS.items():
            value = values.get(name, copy.deepcopy(default))
            setattr(self, name, value)

    @classmethod
    def from_dict(cls, data, origin=None):
        values = {key: value for key, value in data.items() if key in cls.FIELDS}
        return cls(
            id=data.get('id'),
            origin=origin or data.get('origin', ORIGIN_LOCAL),
            **values
        )

    def to_dict(self):
        data = {'id': self.id}
        for name in self.FIELDS:
            data[name] = getattr(self, name)
        data['origin'] = self.origin
        return data

    def update(self, changes):
        """Apply known fields from a partial dict; id and origin are ignored"""
        for key, value in changes.items():
            if key in self.FIELDS:
                setattr(self, key, value)
        return self

    def copy(self):
        return self.__class__.from_dict(copy.deepcopy(self.to_dict()))

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.id}>'


def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(data, names):
    """Raise ValidationError naming the first missing or blank field"""
    for name in names:
        if is_blank(data.get(name)):
            field = name.replace('_', ' ')
            raise ValidationError(f'{field.capitalize()} is required.')


def positive_int(value, name):
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be a whole number.')
    if number <= 0:
        raise ValidationError(f'{name} must be greater than zero.')
    return number
