from flask import Blueprint, request
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError
import logging
from .. import db
from ..errors import NotFoundError, StateError, StorageError, ValidationError
from ..models.records import is_blank, require_fields
from ..models.user import ACTIVE, ROLES, STATUSES, User
from ..utils.repository import ENROLLMENTS, get_repository
from ..utils.responses import json_body, success
from ..utils.session import current_session, role_required

logger = logging.getLogger(__name__)

users_bp = Blueprint('users', __name__)

MIN_PASSWORD_LENGTH = 8


def get_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError('User not found.')
    return user


def check_choice(value, choices, label):
    if value not in choices:
        raise ValidationError(f'{label} must be one of: {", ".join(choices)}.')


def check_email_free(email, user=None):
    existing = User.query.filter_by(email=email).first()
    if existing is not None and existing is not user:
        raise StateError('An account with this email address already exists.', kind='DuplicateAccount')


def check_password_strength(password):
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters long.')


def unique_username(email):
    base = email.split('@')[0]
    username, suffix = base, 1
    while User.query.filter_by(username=username).first() is not None:
        suffix += 1
        username = f'{base}{suffix}'
    return username


def save(action, user):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error during {action} of user {user.email}: {str(e)}")
        raise StorageError('The account could not be saved. Please try again.')


@users_bp.route('/')
@login_required
@role_required('admin', 'staff')
def index():
    """Accounts filtered by role and status; staff only see students"""
    session = current_session()
    query = User.query
    role = 'student' if session.role == 'staff' else request.args.get('role')
    if role:
        query = query.filter_by(role=role)
    status = request.args.get('status')
    if status:
        query = query.filter_by(status=status)
    users = query.order_by(User.name, User.username).all()
    return success(users=[user.to_dict() for user in users])


@users_bp.route('/', methods=['POST'])
@login_required
@role_required('admin')
def create():
    data = json_body()
    require_fields(data, ('email', 'name', 'role', 'password'))
    email = data['email'].strip().lower()
    role = data['role']
    status = data.get('status') or ACTIVE
    check_choice(role, ROLES, 'Role')
    check_choice(status, STATUSES, 'Status')
    check_password_strength(data['password'])
    check_email_free(email)

    username = (data.get('username') or '').strip()
    if username and User.query.filter_by(username=username).first() is not None:
        raise StateError('This username is already taken.', kind='DuplicateAccount')

    user = User(username=username or unique_username(email), email=email, name=data['name'].strip(),
                role=role, status=status)
    user.set_password(data['password'])
    db.session.add(user)
    save('creation', user)
    logger.info(f"Created {role} account {email}")
    return success(201, user=user.to_dict(), message='User created successfully')


@users_bp.route('/<int:user_id>', methods=['PUT'])
@login_required
@role_required('admin')
def update(user_id):
    """Edit name, email, role, status or password"""
    session = current_session()
    user = get_user(user_id)
    data = json_body()

    role = data.get('role', user.role)
    status = data.get('status', user.status)
    check_choice(role, ROLES, 'Role')
    check_choice(status, STATUSES, 'Status')
    if str(user.id) == session.user_id and (role != user.role or status != user.status):
        raise StateError('You cannot change the role or status of your own account.', kind='OwnAccount')

    email = user.email
    if not is_blank(data.get('email')):
        email = data['email'].strip().lower()
        check_email_free(email, user)
    if not is_blank(data.get('password')):
        check_password_strength(data['password'])
        user.set_password(data['password'])
    if not is_blank(data.get('name')):
        user.name = data['name'].strip()

    user.email, user.role, user.status = email, role, status
    save('update', user)
    logger.info(f"Updated account {user.email} ({user.role}, {user.status})")
    return success(user=user.to_dict(), message='User updated successfully')


@users_bp.route('/<int:user_id>', methods=['DELETE'])
@login_required
@role_required('admin')
def delete(user_id):
    """Remove an account that has no live enrollments"""
    session = current_session()
    user = get_user(user_id)
    if str(user.id) == session.user_id:
        raise StateError('You cannot delete your own account.', kind='OwnAccount')
    if any(e.student_id == str(user.id) and e.is_active for e in get_repository().load(ENROLLMENTS)):
        raise StateError('This student still has active enrollments. Drop them first.', kind='UserInUse')

    email = user.email
    db.session.delete(user)
    save('deletion', user)
    logger.info(f"Deleted account {email}")
    return success(message='User deleted successfully')
