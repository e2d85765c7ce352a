from flask import Blueprint
from flask_login import login_required
import logging
from ..utils import reminders
from ..utils.merger import adopt, discard
from ..utils.repository import ENROLLMENTS, REMINDERS, dismissals_of, get_repository
from ..utils.responses import json_body, success
from ..utils.session import current_session, role_required

logger = logging.getLogger(__name__)

reminders_bp = Blueprint('reminders', __name__)


@reminders_bp.route('/')
@login_required
def index():
    """Reminders addressed to the current user that they have not dismissed"""
    session = current_session()
    repo = get_repository()
    enrolled = [e.course_id for e in repo.load(ENROLLMENTS)
                if e.student_id == session.user_id and e.is_active]
    visible = reminders.visible_for(repo.load(REMINDERS), session, enrolled,
                                    repo.load(dismissals_of(session.user_id)))
    return success(reminders=[r.to_dict() for r in visible], user=session.to_dict())


@reminders_bp.route('/manage')
@login_required
@role_required('admin', 'staff')
def manage():
    """Every reminder the caller may edit"""
    session = current_session()
    allowed = reminders.allowed_audiences(session)
    items = [r for r in get_repository().load(REMINDERS) if r.target_audience in allowed]
    return success(reminders=[r.to_dict() for r in items], audiences=list(allowed))


@reminders_bp.route('/', methods=['POST'])
@login_required
@role_required('admin', 'staff')
def create():
    session = current_session()
    repo = get_repository()
    items = repo.load(REMINDERS)
    reminder = reminders.create(items, session, json_body())
    repo.stage(REMINDERS, items)
    repo.commit()
    return success(201, reminder=reminder.to_dict())


@reminders_bp.route('/<reminder_id>', methods=['PUT'])
@login_required
@role_required('admin', 'staff')
def update(reminder_id):
    session = current_session()
    repo = get_repository()
    items = repo.load(REMINDERS)
    reminder = reminders.get_reminder(items, reminder_id)
    reminders.check_audience(session, reminder.target_audience)
    reminders.update(reminder, session, json_body())
    adopt(reminder)
    repo.stage(REMINDERS, items)
    repo.commit()
    return success(reminder=reminder.to_dict())


@reminders_bp.route('/<reminder_id>', methods=['DELETE'])
@login_required
@role_required('admin', 'staff')
def delete(reminder_id):
    session = current_session()
    repo = get_repository()
    items = repo.load(REMINDERS)
    reminder = reminders.get_reminder(items, reminder_id)
    reminders.check_audience(session, reminder.target_audience)
    discard(items, reminder)
    repo.stage(REMINDERS, items)
    repo.commit()
    logger.info(f"Reminder {reminder.id} deleted by {session.email}")
    return success()


@reminders_bp.route('/<reminder_id>/dismiss', methods=['POST'])
@login_required
def dismiss(reminder_id):
    session = current_session()
    repo = get_repository()
    reminder = reminders.get_reminder(repo.load(REMINDERS), reminder_id)
    dismissals = repo.load(dismissals_of(session.user_id))
    reminders.dismiss(reminder, dismissals)
    repo.stage(dismissals_of(session.user_id), dismissals)
    repo.commit()
    return success()
