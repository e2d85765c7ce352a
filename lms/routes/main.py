from flask import Blueprint
from flask_login import login_required
import logging
from ..utils import progress
from ..utils.repository import (COURSES, ENROLLMENTS, REMINDERS, SUBMISSIONS, dismissals_of,
                                get_repository)
from ..utils.reminders import visible_for
from ..utils.responses import success
from ..utils.session import current_session

logger = logging.getLogger(__name__)

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """Health check"""
    return success(service='vocational-lms', status='ok')


@main_bp.route('/dashboard')
@login_required
def dashboard():
    """Role-specific dashboard numbers"""
    session = current_session()
    repo = get_repository()
    courses = repo.load(COURSES)
    enrollments = repo.load(ENROLLMENTS)
    submissions = repo.load(SUBMISSIONS)

    if session.role == 'student':
        mine = [e for e in enrollments if e.student_id == session.user_id]
        enrolled_ids = [e.course_id for e in mine if e.is_active]
        reminders = visible_for(repo.load(REMINDERS), session, enrolled_ids,
                                repo.load(dismissals_of(session.user_id)))
        titles = {c.id: c.title for c in courses}
        return success(
            role=session.role,
            summary=progress.student_summary(enrollments, submissions, student_id=session.user_id),
            enrollments=[dict(e.to_dict(), course_title=titles.get(e.course_id)) for e in mine
                         if e.is_active],
            reminders=len(reminders)
        )

    logger.info(f"Building {session.role} dashboard for {session.email}")
    return success(
        role=session.role,
        overview=progress.overview(courses, enrollments, submissions),
        full_courses=[c.id for c in courses if c.status == 'active' and c.available_seats == 0]
    )
