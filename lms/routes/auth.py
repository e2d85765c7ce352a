from flask import Blueprint, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from .. import db
from ..models.user import User
from ..utils.responses import json_body, success
import logging
from datetime import datetime

logger = logging.getLogger(__name__)
auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    data = json_body()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password')

    if not email or not password:
        return jsonify({
            'success': False,
            'error': 'Please enter both email and password',
            'kind': 'ValidationError'
        }), 400

    user = User.query.filter_by(email=email).first()
    if not user:
        logger.info(f"Login attempt for unknown email {email}")
        return jsonify({
            'success': False,
            'error': 'No account found with this email address',
            'kind': 'InvalidCredentials'
        }), 401

    if not user.check_password(password):
        logger.info(f"Invalid password for {email}")
        return jsonify({'success': False, 'error': 'Invalid password', 'kind': 'InvalidCredentials'}), 401

    if not user.is_active:
        logger.info(f"Login attempt for deactivated account {email}")
        return jsonify({
            'success': False,
            'error': 'This account has been deactivated. Please contact the administrator.',
            'kind': 'AccountInactive'
        }), 403

    login_user(user, remember=bool(data.get('remember', True)))
    user.last_login = datetime.utcnow()
    db.session.commit()
    logger.info(f"User {user.email} logged in as {user.role}")
    return success(user=user.to_dict())


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logger.info(f"User {current_user.email} logged out")
    logout_user()
    return success()


@auth_bp.route('/me')
@login_required
def me():
    return success(user=current_user.to_dict())
