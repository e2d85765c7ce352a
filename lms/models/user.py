from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from .. import db, login_manager
from datetime import datetime

ROLES = ('admin', 'staff', 'student')
ACTIVE = 'active'
INACTIVE = 'inactive'
STATUSES = (ACTIVE, INACTIVE)

@login_manager.user_loader
def load_user(user_id):
    user = db.session.get(User, int(user_id))
    # Deactivated accounts lose their existing sessions too
    return user if user is not None and user.is_active else None

class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    name = db.Column(db.String(120))
    role = db.Column(db.String(16), nullable=False, default='student')
    status = db.Column(db.String(16), nullable=False, default=ACTIVE)
    password_hash = db.Column(db.String(256))
    last_login = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return bool(self.password_hash) and check_password_hash(self.password_hash, password)

    def get_id(self):
        return str(self.id)

    @property
    def is_active(self):
        # Flask-Login refuses to log in inactive accounts
        return self.status != INACTIVE

    def to_dict(self):
        return {
            'id': str(self.id),
            'username': self.username,
            'email': self.email,
            'name': self.name or self.username,
            'role': self.role,
            'status': self.status or ACTIVE,
            'last_login': self.last_login.isoformat() if self.last_login else None,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def __repr__(self):
        return f'<User {self.username}>'
