"""Reminder authoring rules, audience targeting and per-user dismissal"""
import logging
from datetime import datetime

from ..errors import AuthorizationError, NotFoundError, StateError, ValidationError
from ..models.records import is_blank, require_fields, utc_now
from ..models.reminder import (ALL_STUDENTS, ALL_USERS, ADMIN_ONLY, AUDIENCES, COURSE_STUDENTS, PRIORITIES,
                               REMINDER_TYPES, SPECIFIC_EMAILS, SPECIFIC_STUDENTS, STAFF_ONLY, STUDENT_AUDIENCES,
                               Dismissal, Reminder)

logger = logging.getLogger(__name__)

AUTHOR_FIELDS = ('title', 'message', 'reminder_type', 'priority', 'target_audience', 'target_user_ids',
                 'target_course_ids', 'target_emails', 'is_active', 'is_dismissible', 'expires_at')


def allowed_audiences(session):
    if session.role == 'admin':
        return AUDIENCES
    if session.role == 'staff':
        return STUDENT_AUDIENCES
    return ()


def check_audience(session, audience):
    """Staff may only target students; admins may target anyone"""
    if audience not in AUDIENCES:
        raise ValidationError(f'Unknown target audience: {audience}.')
    if audience not in allowed_audiences(session):
        raise AuthorizationError('You are not allowed to send reminders to this audience.',
                                 kind='AudienceNotAllowed')


def _parse_time(value):
    if is_blank(value):
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError('Expiry must be a date and time (ISO 8601).')
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None) - parsed.utcoffset()
    return parsed


def _as_list(value):
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(',') if item.strip()]
    return [str(item) for item in value]


def validate(reminder):
    require_fields({'title': reminder.title, 'message': reminder.message}, ('title', 'message'))
    if reminder.reminder_type not in REMINDER_TYPES:
        raise ValidationError(f'Reminder type must be one of: {", ".join(REMINDER_TYPES)}.')
    if reminder.priority not in PRIORITIES:
        raise ValidationError(f'Priority must be one of: {", ".join(PRIORITIES)}.')
    if reminder.target_audience == SPECIFIC_STUDENTS and not reminder.target_user_ids:
        raise ValidationError('Select at least one student.')
    if reminder.target_audience == SPECIFIC_EMAILS and not reminder.target_emails:
        raise ValidationError('Enter at least one email address.')
    if reminder.target_audience == COURSE_STUDENTS and not reminder.target_course_ids:
        raise ValidationError('Select at least one course.')
    _parse_time(reminder.expires_at)


def _author_fields(data):
    fields = {key: data[key] for key in AUTHOR_FIELDS if key in data}
    for key in ('target_user_ids', 'target_course_ids', 'target_emails'):
        if key in fields:
            fields[key] = _as_list(fields[key])
    if 'target_emails' in fields:
        fields['target_emails'] = [email.lower() for email in fields['target_emails']]
    return fields


def create(reminders, session, data):
    reminder = Reminder(**_author_fields(data))
    check_audience(session, reminder.target_audience)
    validate(reminder)
    reminder.created_by = session.to_dict()
    reminder.created_at = reminder.updated_at = utc_now()
    reminders.append(reminder)
    logger.info(f"Reminder '{reminder.title}' created by {session.email} for {reminder.target_audience}")
    return reminder


def update(reminder, session, data):
    """Edit a reminder; validated on a copy so a rejected edit changes nothing"""
    candidate = reminder.copy()
    candidate.update(_author_fields(data))
    check_audience(session, candidate.target_audience)
    validate(candidate)
    reminder.update(_author_fields(data))
    reminder.updated_at = utc_now()
    return reminder


def is_expired(reminder, now=None):
    """Expiry check for stored reminders; an unreadable expiry hides the reminder"""
    try:
        expires = _parse_time(reminder.expires_at)
    except ValidationError:
        logger.warning(f"Reminder {reminder.id} has an unreadable expiry {reminder.expires_at!r}; hiding it")
        return True
    return expires is not None and expires < (now or datetime.utcnow())


def is_visible(reminder, session, enrolled_course_ids=(), now=None):
    if not reminder.is_active or is_expired(reminder, now):
        return False

    audience = reminder.target_audience
    if audience == ALL_USERS:
        return True
    if audience == ALL_STUDENTS:
        return session.role == 'student'
    if audience == STAFF_ONLY:
        return session.role == 'staff'
    if audience == ADMIN_ONLY:
        return session.role == 'admin'
    if audience == SPECIFIC_EMAILS:
        return (session.email or '').lower() in reminder.target_emails
    if audience == SPECIFIC_STUDENTS:
        return session.role == 'student' and str(session.user_id) in reminder.target_user_ids
    if audience == COURSE_STUDENTS:
        return session.role == 'student' and bool(set(reminder.target_course_ids) & set(enrolled_course_ids))
    return False


def visible_for(reminders, session, enrolled_course_ids=(), dismissals=(), now=None):
    """Active reminders addressed to the user that they have not dismissed"""
    dismissed = {d.id for d in dismissals}
    return [r for r in reminders
            if r.id not in dismissed and is_visible(r, session, enrolled_course_ids, now)]


def dismiss(reminder, dismissals):
    if not reminder.is_dismissible:
        raise StateError('This reminder cannot be dismissed.', kind='NotDismissible')
    if any(d.id == reminder.id for d in dismissals):
        return dismissals
    dismissals.append(Dismissal(id=reminder.id, dismissed_at=utc_now()))
    return dismissals


def get_reminder(reminders, reminder_id):
    for reminder in reminders:
        if reminder.id == str(reminder_id):
            return reminder
    raise NotFoundError('Reminder not found.')
