from flask import Blueprint, request
from flask_login import login_required
import logging
from ..errors import AuthorizationError, StateError
from ..models.course import Course
from ..models.lesson import Lesson, published_lessons
from ..utils import progress
from ..utils.ledger import find_active
from ..utils.merger import adopt, discard, require
from ..utils.repository import COURSES, ENROLLMENTS, SUBMISSIONS, get_repository, lessons_of
from ..utils.responses import json_body, success
from ..utils.session import current_session, role_required

logger = logging.getLogger(__name__)

courses_bp = Blueprint('courses', __name__)

STAFF_ROLES = ('admin', 'staff')


def sync_total_lessons(course, lessons):
    """Keep the stored lesson total equal to the published lesson count"""
    total = len(published_lessons(lessons))
    if course.total_lessons != total:
        course.total_lessons = total
        adopt(course)
    return course


def visible_course(courses, course_id, session):
    course = require(courses, course_id, 'Course')
    if not session.is_staff and course.status != 'active':
        raise AuthorizationError('This course is not available.', kind='CourseNotActive')
    return course


@courses_bp.route('/')
@login_required
def index():
    """Courses: the full list for staff, the active catalog for students"""
    session = current_session()
    repo = get_repository()
    courses = repo.load(COURSES)

    if session.is_staff:
        status = request.args.get('status')
        if status:
            courses = [c for c in courses if c.status == status]
        return success(courses=[c.to_dict() for c in courses])

    enrollments = repo.load(ENROLLMENTS)
    catalog = []
    for course in courses:
        if course.status != 'active':
            continue
        data = course.public_dict()
        data['is_enrolled'] = find_active(enrollments, session.user_id, course.id) is not None
        catalog.append(data)
    return success(courses=catalog)


@courses_bp.route('/', methods=['POST'])
@login_required
@role_required('admin')
def create():
    repo = get_repository()
    courses = repo.load(COURSES)
    course = Course.create(json_body())
    courses.append(course)
    repo.stage(COURSES, courses)
    repo.commit()
    logger.info(f"Course {course.code} created: {course.title}")
    return success(201, course=course.to_dict())


@courses_bp.route('/<course_id>')
@login_required
def detail(course_id):
    session = current_session()
    course = visible_course(get_repository().load(COURSES), course_id, session)
    return success(course=course.to_dict() if session.is_staff else course.public_dict())


@courses_bp.route('/<course_id>', methods=['PUT'])
@login_required
@role_required('admin')
def update(course_id):
    repo = get_repository()
    courses = repo.load(COURSES)
    course = require(courses, course_id, 'Course')
    edited = course.copy()
    edited.apply_changes(json_body())
    course.update(edited.to_dict())
    adopt(course)
    repo.stage(COURSES, courses)
    repo.commit()
    logger.info(f"Course {course.id} updated")
    return success(course=course.to_dict())


@courses_bp.route('/<course_id>', methods=['DELETE'])
@login_required
@role_required('admin')
def delete(course_id):
    repo = get_repository()
    courses = repo.load(COURSES)
    course = require(courses, course_id, 'Course')
    if any(e.course_id == course.id and e.is_active for e in repo.load(ENROLLMENTS)):
        raise StateError('This course still has enrolled students and cannot be deleted.',
                         kind='CourseInUse')
    discard(courses, course)
    repo.stage(COURSES, courses)
    repo.discard(lessons_of(course.id))
    repo.commit()
    logger.info(f"Course {course.id} deleted")
    return success()


@courses_bp.route('/<course_id>/lessons')
@login_required
def lessons(course_id):
    """Lessons in display order; students only see published content of courses they joined"""
    session = current_session()
    repo = get_repository()
    course = visible_course(repo.load(COURSES), course_id, session)
    items = repo.load(lessons_of(course.id))

    if session.is_staff:
        return success(lessons=[lesson.to_dict() for lesson in sorted(items, key=lambda l: l.order)])

    if find_active(repo.load(ENROLLMENTS), session.user_id, course.id) is None:
        raise AuthorizationError('Enroll in this course to view its lessons.', kind='NotEnrolled')
    return success(lessons=[lesson.student_dict() for lesson in published_lessons(items)])


@courses_bp.route('/<course_id>/lessons', methods=['POST'])
@login_required
@role_required(*STAFF_ROLES)
def create_lesson(course_id):
    repo = get_repository()
    courses = repo.load(COURSES)
    course = require(courses, course_id, 'Course')
    items = repo.load(lessons_of(course.id))

    lesson = Lesson.create(course.id, json_body(), order=len(items) + 1)
    items.append(lesson)
    sync_total_lessons(course, items)
    repo.stage(lessons_of(course.id), items)
    repo.stage(COURSES, courses)
    repo.commit()
    logger.info(f"Lesson '{lesson.title}' added to course {course.id}")
    return success(201, lesson=lesson.to_dict())


@courses_bp.route('/<course_id>/lessons/<lesson_id>', methods=['PUT'])
@login_required
@role_required(*STAFF_ROLES)
def update_lesson(course_id, lesson_id):
    repo = get_repository()
    courses = repo.load(COURSES)
    course = require(courses, course_id, 'Course')
    items = repo.load(lessons_of(course.id))
    lesson = require(items, lesson_id, 'Lesson')

    edited = lesson.copy()
    edited.apply_changes(json_body())
    items[items.index(lesson)] = edited
    sync_total_lessons(course, items)
    repo.stage(lessons_of(course.id), items)
    repo.stage(COURSES, courses)
    repo.commit()
    return success(lesson=edited.to_dict())


@courses_bp.route('/<course_id>/lessons/<lesson_id>', methods=['DELETE'])
@login_required
@role_required(*STAFF_ROLES)
def delete_lesson(course_id, lesson_id):
    repo = get_repository()
    courses = repo.load(COURSES)
    course = require(courses, course_id, 'Course')
    items = repo.load(lessons_of(course.id))
    discard(items, require(items, lesson_id, 'Lesson'))
    sync_total_lessons(course, items)
    repo.stage(lessons_of(course.id), items)
    repo.stage(COURSES, courses)
    repo.commit()
    return success()


@courses_bp.route('/<course_id>/students')
@login_required
@role_required(*STAFF_ROLES)
def students(course_id):
    repo = get_repository()
    course = require(repo.load(COURSES), course_id, 'Course')
    enrollments = [e for e in repo.load(ENROLLMENTS) if e.course_id == course.id]
    status = request.args.get('status')
    if status:
        enrollments = [e for e in enrollments if e.status == status]
    return success(course=course.to_dict(), enrollments=[e.to_dict() for e in enrollments])


@courses_bp.route('/<course_id>/stats')
@login_required
@role_required(*STAFF_ROLES)
def stats(course_id):
    repo = get_repository()
    course = require(repo.load(COURSES), course_id, 'Course')
    return success(stats=progress.course_stats(
        course, repo.load(ENROLLMENTS), repo.load(lessons_of(course.id)), repo.load(SUBMISSIONS)
    ))
