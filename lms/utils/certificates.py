"""Student certificate submissions (NC and COC) and their review workflow"""
import logging
from datetime import date

from ..errors import NotFoundError, StateError, ValidationError
from ..models.certificate import (APPROVED, CERTIFICATE_TYPES, COC, COMMON_FIELDS, EDITABLE_FIELDS, PENDING,
                                  REQUIRED_FIELDS, REVIEW_OUTCOMES, TYPE_FIELDS, CertificateSubmission)
from ..models.records import is_blank, require_fields, today, utc_now

logger = logging.getLogger(__name__)


def _parse_date(value, name):
    if is_blank(value):
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"{name.replace('_', ' ').capitalize()} must be a date (YYYY-MM-DD).")


def validate(data, require_file=True):
    """Check a submission payload against the rules of its certificate type"""
    certificate_type = data.get('certificate_type')
    if certificate_type not in CERTIFICATE_TYPES:
        raise ValidationError('Certificate type must be NC or COC.')
    require_fields(data, COMMON_FIELDS + REQUIRED_FIELDS[certificate_type])
    if require_file and is_blank(data.get('file_url')):
        raise ValidationError('Please attach a copy of your certificate.')

    if certificate_type == COC:
        try:
            hours = float(data['training_hours'])
        except (TypeError, ValueError):
            raise ValidationError('Training hours must be a number.')
        if hours <= 0:
            raise ValidationError('Training hours must be greater than zero.')
        start = _parse_date(data['conducted_from'], 'conducted_from')
        end = _parse_date(data['conducted_to'], 'conducted_to')
        _parse_date(data['given_date'], 'given_date')
        if end < start:
            raise ValidationError('Training end date cannot be before its start date.')
    else:
        accredited = _parse_date(data['date_accredited'], 'date_accredited')
        expires = _parse_date(data.get('expiration_date'), 'expiration_date')
        if expires is not None and expires < accredited:
            raise ValidationError('Expiration date cannot be before the accreditation date.')


def _editable(data):
    return {key: data[key] for key in EDITABLE_FIELDS if key in data}


def _foreign_fields(certificate_type):
    return [name for kind, names in TYPE_FIELDS.items() if kind != certificate_type for name in names]


def submit(submissions, session, data):
    """Create a pending submission for the current student"""
    fields = _editable(data)
    validate(fields)
    for name in _foreign_fields(fields['certificate_type']):
        fields.pop(name, None)
    submission = CertificateSubmission(
        student_id=str(session.user_id),
        student_name=session.name,
        student_email=session.email,
        status=PENDING,
        submitted_at=today(),
        **fields
    )
    submissions.append(submission)
    logger.info(f"Certificate {submission.certificate_number} submitted by {session.email}")
    return submission


def edit(submission, data):
    """Apply student edits; any earlier review is discarded and it goes back to pending"""
    if submission.status == APPROVED:
        raise StateError('An approved certificate can no longer be edited.')
    merged = submission.to_dict()
    merged.update(_editable(data))
    validate(merged)
    submission.update(_editable(data))
    for name in _foreign_fields(submission.certificate_type):
        setattr(submission, name, None)
    submission.clear_review()
    submission.submitted_at = today()
    return submission


def review(submission, status, remarks=None, reviewer=None):
    if status not in REVIEW_OUTCOMES:
        raise ValidationError('Status must be approved or rejected.')
    if submission.status != PENDING:
        raise StateError(f'This certificate was already {submission.status}.')
    submission.status = status
    submission.remarks = remarks
    submission.reviewed_at = utc_now()
    submission.reviewed_by = reviewer
    logger.info(f"Certificate submission {submission.id} {status} by {reviewer}")
    return submission


def owned_by(submissions, student_id):
    return [s for s in submissions if s.student_id == str(student_id)]


def get_submission(submissions, submission_id):
    for submission in submissions:
        if submission.id == str(submission_id):
            return submission
    raise NotFoundError('Certificate submission not found.')
