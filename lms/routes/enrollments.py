from flask import Blueprint, request
from flask_login import login_required
import logging
from ..errors import AuthorizationError, ValidationError
from ..models.lesson import published_lessons
from ..models.user import User
from ..utils import ledger
from ..utils.merger import adopt, require
from ..utils.repository import COURSES, ENROLLMENTS, get_repository, lessons_of
from ..utils.responses import json_body, success
from ..utils.session import current_session, role_required
from .. import db

logger = logging.getLogger(__name__)

enrollments_bp = Blueprint('enrollments', __name__)


def own_enrollment(enrollments, enrollment_id, session):
    enrollment = ledger.get_enrollment(enrollments, enrollment_id)
    if not session.is_staff and enrollment.student_id != session.user_id:
        raise AuthorizationError('This enrollment belongs to another student.')
    return enrollment


@enrollments_bp.route('/')
@login_required
def index():
    """Enrollments with course titles; students only get their own"""
    session = current_session()
    repo = get_repository()
    titles = {c.id: c.title for c in repo.load(COURSES)}
    enrollments = repo.load(ENROLLMENTS)

    if session.is_staff:
        course_id = request.args.get('course_id')
        if course_id:
            enrollments = [e for e in enrollments if e.course_id == course_id]
    else:
        enrollments = [e for e in enrollments if e.student_id == session.user_id]

    status = request.args.get('status')
    if status:
        enrollments = [e for e in enrollments if e.status == status]
    return success(enrollments=[dict(e.to_dict(), course_title=titles.get(e.course_id))
                                for e in enrollments])


@enrollments_bp.route('/', methods=['POST'])
@login_required
@role_required('student')
def enroll():
    """Self-enrollment, with the course password when one is set"""
    session = current_session()
    data = json_body()
    if not data.get('course_id'):
        raise ValidationError('Course id is required.')

    repo = get_repository()
    courses = repo.load(COURSES)
    enrollments = repo.load(ENROLLMENTS)
    course = require(courses, data['course_id'], 'Course')

    enrollment = ledger.enroll(course, session.user_id, enrollments, password=data.get('password'),
                               lessons=repo.load(lessons_of(course.id)))
    adopt(course)
    repo.stage(ENROLLMENTS, enrollments)
    repo.stage(COURSES, courses)
    repo.commit()
    return success(201, enrollment=enrollment.to_dict(), course=course.public_dict(),
                   message=f'Successfully enrolled in {course.title}!')


@enrollments_bp.route('/staff', methods=['POST'])
@login_required
@role_required('admin', 'staff')
def enroll_student():
    """Staff-mediated enrollment of an existing student account"""
    session = current_session()
    data = json_body()
    if not data.get('course_id') or not data.get('student_id'):
        raise ValidationError('Course id and student id are required.')

    student_id = str(data['student_id'])
    student = db.session.get(User, int(student_id)) if student_id.isdigit() else None
    if student is None or student.role != 'student' or not student.is_active:
        raise ValidationError('No student account matches this id.', kind='UnknownStudent')

    repo = get_repository()
    courses = repo.load(COURSES)
    enrollments = repo.load(ENROLLMENTS)
    course = require(courses, data['course_id'], 'Course')

    enrollment = ledger.enroll_by_staff(course, student.id, enrollments, staff_id=session.user_id,
                                        lessons=repo.load(lessons_of(course.id)))
    adopt(course)
    repo.stage(ENROLLMENTS, enrollments)
    repo.stage(COURSES, courses)
    repo.commit()
    return success(201, enrollment=enrollment.to_dict())


@enrollments_bp.route('/<enrollment_id>/drop', methods=['POST'])
@login_required
def drop(enrollment_id):
    session = current_session()
    repo = get_repository()
    courses = repo.load(COURSES)
    enrollments = repo.load(ENROLLMENTS)
    enrollment = own_enrollment(enrollments, enrollment_id, session)

    course = next((c for c in courses if c.id == enrollment.course_id), None)
    ledger.drop(enrollment, course)
    repo.stage(ENROLLMENTS, enrollments)
    if course is not None:
        adopt(course)
        repo.stage(COURSES, courses)
    repo.commit()
    return success(enrollment=enrollment.to_dict())


@enrollments_bp.route('/<enrollment_id>/lessons/<lesson_id>/complete', methods=['POST'])
@login_required
@role_required('student')
def complete_lesson(enrollment_id, lesson_id):
    session = current_session()
    repo = get_repository()
    enrollments = repo.load(ENROLLMENTS)
    enrollment = own_enrollment(enrollments, enrollment_id, session)

    lessons = repo.load(lessons_of(enrollment.course_id))
    lesson = require(lessons, lesson_id, 'Lesson')
    ledger.complete_lesson(enrollment, lesson, published_lessons(lessons))
    repo.stage(ENROLLMENTS, enrollments)
    repo.commit()
    return success(enrollment=enrollment.to_dict())


@enrollments_bp.route('/<enrollment_id>/complete', methods=['POST'])
@login_required
@role_required('admin', 'staff')
def complete(enrollment_id):
    repo = get_repository()
    enrollments = repo.load(ENROLLMENTS)
    enrollment = ledger.get_enrollment(enrollments, enrollment_id)
    ledger.complete(enrollment, json_body().get('final_grade'))
    repo.stage(ENROLLMENTS, enrollments)
    repo.commit()
    logger.info(f"Enrollment {enrollment.id} marked completed")
    return success(enrollment=enrollment.to_dict())


@enrollments_bp.route('/reconcile', methods=['POST'])
@login_required
@role_required('admin')
def reconcile():
    """Repair course counters that drifted from the enrollment ledger"""
    corrected = ledger.reconcile(get_repository())
    return success(corrected=corrected)
