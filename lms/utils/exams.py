"""TESDA assessment exams, candidate registration and the certification catalog"""
import logging
import math
from datetime import date

from ..errors import CapacityError, StateError, ValidationError
from ..models.exam import ATTENDANCE_STATUSES, EXAM_STATUSES, Certification, Exam, ExamRegistration
from ..models.records import is_blank, positive_int, require_fields, today, utc_now

logger = logging.getLogger(__name__)

EXAM_FIELDS = ('title', 'certification_type', 'exam_date', 'exam_time', 'venue', 'max_candidates',
               'registration_deadline', 'proctor', 'requirements')
CERTIFICATION_FIELDS = ('name', 'code', 'description', 'type', 'duration_hours', 'prerequisites', 'is_active')

# Allowed status moves; completed and cancelled are terminal
TRANSITIONS = {
    'scheduled': ('ongoing', 'cancelled'),
    'ongoing': ('completed', 'cancelled'),
    'completed': (),
    'cancelled': (),
}
PASSING_SCORE = 75


def _date(value, label):
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f'{label} must be a date (YYYY-MM-DD).')


def validate_exam(exam):
    require_fields(exam.to_dict(), ('title', 'certification_type', 'exam_date', 'exam_time', 'venue',
                                    'registration_deadline'))
    exam.max_candidates = positive_int(exam.max_candidates, 'Maximum candidates')
    if exam.status not in EXAM_STATUSES:
        raise ValidationError(f'Status must be one of: {", ".join(EXAM_STATUSES)}.')
    if _date(exam.registration_deadline, 'Registration deadline') > _date(exam.exam_date, 'Exam date'):
        raise ValidationError('Registration must close on or before the exam date.')
    if exam.max_candidates < exam.registered_candidates:
        raise ValidationError(
            f'Maximum candidates cannot be lower than the {exam.registered_candidates} already registered.'
        )


def create_exam(exams, data):
    exam = Exam(status='scheduled', **{key: data[key] for key in EXAM_FIELDS if key in data})
    if is_blank(exam.proctor):
        exam.proctor = ''
    validate_exam(exam)
    exam.created_at = exam.updated_at = utc_now()
    exams.append(exam)
    logger.info(f"Exam '{exam.title}' scheduled on {exam.exam_date}")
    return exam


def update_exam(exam, data):
    candidate = exam.copy()
    candidate.update({key: data[key] for key in EXAM_FIELDS if key in data})
    validate_exam(candidate)
    exam.update(candidate.to_dict())
    exam.updated_at = utc_now()
    return exam


def transition(exam, status):
    if status not in EXAM_STATUSES:
        raise ValidationError(f'Status must be one of: {", ".join(EXAM_STATUSES)}.')
    if status not in TRANSITIONS[exam.status]:
        raise StateError(f'A {exam.status} exam cannot be marked {status}.')
    exam.status = status
    exam.updated_at = utc_now()
    logger.info(f"Exam {exam.id} is now {status}")
    return exam


def find_registration(registrations, exam_id, student_id):
    for registration in registrations:
        if registration.exam_id == exam_id and registration.student_id == str(student_id):
            return registration
    return None


def register(exam, registrations, session, on_date=None):
    """Register the current student as a candidate for the exam"""
    on_date = on_date or date.fromisoformat(today())
    if exam.status != 'scheduled':
        raise StateError('Registration is only open for scheduled exams.', kind='ExamNotOpen')
    if on_date > _date(exam.registration_deadline, 'Registration deadline'):
        raise StateError('The registration deadline for this exam has passed.', kind='RegistrationClosed')
    if find_registration(registrations, exam.id, session.user_id):
        raise StateError('You are already registered for this exam.', kind='AlreadyRegistered')
    if exam.registered_candidates >= exam.max_candidates:
        raise CapacityError('This exam has no more slots available.', kind='ExamFull')

    registration = ExamRegistration(
        exam_id=exam.id,
        student_id=str(session.user_id),
        student_name=session.name,
        student_email=session.email,
        registration_date=today(),
        attendance_status='registered',
        exam_result='pending',
    )
    registrations.append(registration)
    exam.registered_candidates += 1
    exam.updated_at = utc_now()
    logger.info(f"{session.email} registered for exam {exam.id} "
                f"({exam.registered_candidates}/{exam.max_candidates})")
    return registration


def unregister(exam, registration, registrations):
    if exam.status != 'scheduled':
        raise StateError('Registration can only be cancelled before the exam starts.')
    registrations.remove(registration)
    exam.registered_candidates = max(0, exam.registered_candidates - 1)
    exam.updated_at = utc_now()
    return registrations


def record_result(registration, attendance, score=None):
    """Attendance and, for candidates present, the score out of 100"""
    if attendance not in ATTENDANCE_STATUSES:
        raise ValidationError(f'Attendance must be one of: {", ".join(ATTENDANCE_STATUSES)}.')
    if attendance != 'present':
        registration.attendance_status = attendance
        registration.score = None
        registration.exam_result = 'failed' if attendance == 'absent' else 'pending'
        return registration

    if score is None or score == '':
        registration.attendance_status = attendance
        registration.exam_result = 'pending'
        return registration
    try:
        score = float(score)
    except (TypeError, ValueError):
        raise ValidationError('Score must be a number.', kind='InvalidGrade')
    if not math.isfinite(score) or score < 0 or score > 100:
        raise ValidationError('Score must be between 0 and 100.', kind='InvalidGrade')
    registration.attendance_status = attendance
    registration.score = int(score) if score.is_integer() else score
    registration.exam_result = 'passed' if score >= PASSING_SCORE else 'failed'
    return registration


def validate_certification(certification):
    require_fields(certification.to_dict(), ('name', 'code', 'description', 'type', 'duration_hours'))
    certification.duration_hours = positive_int(certification.duration_hours, 'Duration hours')
    if isinstance(certification.prerequisites, str):
        certification.prerequisites = [item.strip() for item in certification.prerequisites.split(',')
                                       if item.strip()]


def create_certification(certifications, data):
    certification = Certification(**{key: data[key] for key in CERTIFICATION_FIELDS if key in data})
    validate_certification(certification)
    if any(c.code == certification.code for c in certifications):
        raise ValidationError(f'A certification with code {certification.code} already exists.')
    certification.created_at = certification.updated_at = utc_now()
    certifications.append(certification)
    return certification


def update_certification(certification, data):
    candidate = certification.copy()
    candidate.update({key: data[key] for key in CERTIFICATION_FIELDS if key in data})
    validate_certification(candidate)
    certification.update(candidate.to_dict())
    certification.updated_at = utc_now()
    return certification
