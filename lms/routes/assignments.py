from flask import Blueprint, request
from flask_login import login_required
import logging
from ..errors import AuthorizationError, NotFoundError, ValidationError
from ..models.enrollment import ENROLLED
from ..models.lesson import published_lessons
from ..utils import ledger, progress
from ..utils.merger import require
from ..utils.repository import ENROLLMENTS, SUBMISSIONS, get_repository, lessons_of
from ..utils.responses import json_body, success
from ..utils.session import current_session, role_required

logger = logging.getLogger(__name__)

assignments_bp = Blueprint('assignments', __name__)


def locate_assignment(repo, course_id, assignment_id):
    """The published lesson holding the assignment, and the assignment itself"""
    for lesson in published_lessons(repo.load(lessons_of(course_id))):
        assignment = lesson.find_assignment(assignment_id)
        if assignment is not None:
            return lesson, assignment
    raise NotFoundError('Assignment not found.')


@assignments_bp.route('/')
@login_required
@role_required('student')
def index():
    """Published assignments of the student's courses with their submission status"""
    session = current_session()
    repo = get_repository()
    submissions = [s for s in repo.load(SUBMISSIONS) if s.student_id == session.user_id]
    by_assignment = {s.assignment_id: s for s in submissions}

    course_ids = [e.course_id for e in repo.load(ENROLLMENTS)
                  if e.student_id == session.user_id and e.is_active]
    course_id = request.args.get('course_id')
    if course_id:
        course_ids = [c for c in course_ids if c == course_id]

    items = []
    pending = 0
    for cid in course_ids:
        for lesson in published_lessons(repo.load(lessons_of(cid))):
            assignments = lesson.published_assignments()
            pending += len(progress.pending_assignments(assignments, submissions, session.user_id))
            for assignment in assignments:
                submission = by_assignment.get(assignment.id)
                items.append(dict(
                    assignment.to_dict(),
                    course_id=cid,
                    lesson_title=lesson.title,
                    submission=submission.to_dict() if submission else None
                ))
    return success(assignments=items, pending=pending)


@assignments_bp.route('/<assignment_id>/submit', methods=['POST'])
@login_required
@role_required('student')
def submit(assignment_id):
    session = current_session()
    data = json_body()
    course_id = data.get('course_id')
    if not course_id:
        raise ValidationError('Course id is required.')

    repo = get_repository()
    enrollment = ledger.find_active(repo.load(ENROLLMENTS), session.user_id, course_id)
    if enrollment is None or enrollment.status != ENROLLED:
        raise AuthorizationError('You must be enrolled in this course to submit work.', kind='NotEnrolled')

    _, assignment = locate_assignment(repo, course_id, assignment_id)
    submission, submissions = ledger.submit_assignment(
        repo.load(SUBMISSIONS), assignment, course_id, session,
        content=data.get('content'),
        file_url=data.get('file_url'),
        file_name=data.get('file_name')
    )
    repo.stage(SUBMISSIONS, submissions)
    repo.commit()
    logger.info(f"Assignment {assignment.id} submitted by {session.email}")
    return success(201, submission=submission.to_dict())


@assignments_bp.route('/submissions')
@login_required
def submissions():
    """Submissions: every student's for staff, the caller's own otherwise"""
    session = current_session()
    items = get_repository().load(SUBMISSIONS)
    if not session.is_staff:
        items = [s for s in items if s.student_id == session.user_id]

    for key in ('course_id', 'assignment_id', 'status'):
        value = request.args.get(key)
        if value:
            items = [s for s in items if getattr(s, key) == value]
    return success(submissions=[s.to_dict() for s in items])


@assignments_bp.route('/submissions/<submission_id>/grade', methods=['POST'])
@login_required
@role_required('admin', 'staff')
def grade(submission_id):
    """Grade a submission and refresh the student's final grade in one commit"""
    session = current_session()
    data = json_body()
    repo = get_repository()
    submissions = repo.load(SUBMISSIONS)
    enrollments = repo.load(ENROLLMENTS)
    submission = require(submissions, submission_id, 'Submission')

    ledger.record_grade(submission, data.get('grade'), data.get('feedback'), grader=session.user_id)
    enrollment = ledger.find_active(enrollments, submission.student_id, submission.course_id)
    ledger.refresh_final_grade(enrollment, submissions)
    repo.stage(SUBMISSIONS, submissions)
    if enrollment is not None:
        repo.stage(ENROLLMENTS, enrollments)
    repo.commit()
    logger.info(f"Submission {submission.id} graded {submission.grade}/{submission.max_points}")
    return success(submission=submission.to_dict(),
                   enrollment=enrollment.to_dict() if enrollment else None)
