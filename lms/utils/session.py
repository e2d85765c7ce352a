from functools import wraps

from flask_login import current_user

from ..errors import AuthorizationError


class SessionContext:
    """Who is making the request; passed to operations that decide by role"""

    def __init__(self, user_id, email, name, role):
        self.user_id = str(user_id)
        self.email = email
        self.name = name
        self.role = role

    @classmethod
    def from_user(cls, user):
        return cls(user.id, user.email, user.name or user.username, user.role)

    @property
    def is_staff(self):
        return self.role in ('admin', 'staff')

    def to_dict(self):
        return {'id': self.user_id, 'email': self.email, 'name': self.name, 'role': self.role}

    def __repr__(self):
        return f'<SessionContext {self.email} ({self.role})>'


def current_session():
    if not current_user.is_authenticated:
        raise AuthorizationError('Please log in to continue.', kind='AuthenticationRequired')
    return SessionContext.from_user(current_user)


def role_required(*roles):
    """Route decorator allowing only the given roles"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            session = current_session()
            if session.role not in roles:
                raise AuthorizationError('You do not have permission to do this.')
            return f(*args, **kwargs)
        return decorated_function
    return decorator
