"""Enrollment ledger operations.

Every operation validates first and mutates only once all checks pass, so a
failed call leaves the records exactly as they were. Callers persist the
touched collections together through ``RecordRepository``.
"""
import logging
import math

from ..errors import NotFoundError, StateError, ValidationError
from ..models.enrollment import COMPLETED, DROPPED, ENROLLED, Enrollment
from ..models.lesson import published_lessons
from ..models.records import is_blank, today, utc_now
from ..models.submission import GRADED, SUBMITTED, Submission
from . import capacity
from .merger import adopt
from .repository import COURSES, ENROLLMENTS

logger = logging.getLogger(__name__)


def find_active(enrollments, student_id, course_id):
    """The student's non-dropped enrollment in the course, if any"""
    for enrollment in enrollments:
        if (enrollment.student_id == str(student_id) and enrollment.course_id == course_id
                and enrollment.is_active):
            return enrollment
    return None


def _admit(course, student_id, enrollments, self_enrollment, password=None, enrolled_by=None, lessons=None):
    if course.status != 'active':
        raise capacity.not_active(course)
    if find_active(enrollments, student_id, course.id):
        raise StateError('You are already enrolled in this course!', kind='AlreadyEnrolled')
    capacity.check(course, self_enrollment=self_enrollment)
    if self_enrollment:
        capacity.check_password(course, password)

    total = course.total_lessons if lessons is None else len(published_lessons(lessons))
    enrollment = Enrollment.start(course, student_id, enrolled_by=enrolled_by, total_lessons=total)
    enrollments.append(enrollment)
    course.enrolled_students += 1
    course.updated_at = utc_now()
    logger.info(f"Student {student_id} enrolled in course {course.id} "
                f"({course.enrolled_students}/{course.max_students})")
    return enrollment


def enroll(course, student_id, enrollments, password=None, lessons=None):
    """Self-enrollment by a student.

    Checks run in order: course active, not already enrolled, capacity,
    self-enrollment allowed, password. A previously dropped enrollment is
    left untouched and a new record is created. The new enrollment counts the
    published ``lessons`` when given, else the course counter.
    """
    return _admit(course, student_id, enrollments, True, password=password, lessons=lessons)


def enroll_by_staff(course, student_id, enrollments, staff_id=None, lessons=None):
    """Staff-mediated enrollment: no self-enrollment or password gate"""
    return _admit(course, student_id, enrollments, False, enrolled_by=staff_id, lessons=lessons)


def drop(enrollment, course):
    if enrollment.status != ENROLLED:
        raise StateError(f'A {enrollment.status} enrollment cannot be dropped.')
    enrollment.status = DROPPED
    enrollment.dropped_date = today()
    if course is not None:
        course.enrolled_students = max(0, course.enrolled_students - 1)
        course.updated_at = utc_now()
    logger.info(f"Student {enrollment.student_id} dropped course {enrollment.course_id}")
    return enrollment


def _mark_completed(enrollment, final_grade=None):
    enrollment.status = COMPLETED
    enrollment.completion_date = today()
    if final_grade is not None:
        enrollment.final_grade = final_grade


def complete_lesson(enrollment, lesson, published_lessons):
    """Record a finished lesson and recompute the counters.

    ``published_lessons`` is the course's published lesson list in display
    order; its length becomes the enrollment's lesson total.
    """
    if enrollment.status == DROPPED:
        raise StateError('You are no longer enrolled in this course.')
    if enrollment.status == COMPLETED:
        return enrollment
    if lesson.course_id != enrollment.course_id:
        raise ValidationError('This lesson does not belong to the course.')
    if not lesson.is_published:
        raise ValidationError('This lesson is not available yet.')

    published_ids = [item.id for item in published_lessons]
    if published_ids:
        enrollment.total_lessons = len(published_ids)
    if lesson.id not in enrollment.completed_lesson_ids:
        enrollment.completed_lesson_ids.append(lesson.id)

    done = [lesson_id for lesson_id in enrollment.completed_lesson_ids if lesson_id in published_ids]
    enrollment.lessons_completed = min(len(done), enrollment.total_lessons)
    remaining = [item for item in published_lessons if item.id not in done]
    enrollment.next_lesson = remaining[0].title if remaining else None

    if enrollment.total_lessons and enrollment.lessons_completed >= enrollment.total_lessons:
        _mark_completed(enrollment)
        logger.info(f"Student {enrollment.student_id} completed course {enrollment.course_id}")
    return enrollment


def complete(enrollment, final_grade=None):
    """Staff marks an enrollment completed"""
    if enrollment.status != ENROLLED:
        raise StateError(f'A {enrollment.status} enrollment cannot be completed.')
    if final_grade is not None:
        final_grade = check_score(final_grade, 100, 'Final grade')
    _mark_completed(enrollment, final_grade)
    return enrollment


def check_score(value, maximum, label='Grade'):
    if isinstance(value, bool):
        raise ValidationError(f'{label} must be a number.', kind='InvalidGrade')
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{label} must be a number.', kind='InvalidGrade')
    if not math.isfinite(number) or number < 0 or number > maximum:
        raise ValidationError(f'{label} must be between 0 and {maximum}.', kind='InvalidGrade')
    return int(number) if number.is_integer() else number


def submit_assignment(submissions, assignment, course_id, student, content=None, file_url=None, file_name=None):
    """Create the student's submission, replacing any earlier one.

    Returns ``(submission, submissions)`` where the list no longer holds the
    replaced record.
    """
    if not assignment.is_published:
        raise ValidationError('This assignment is not open for submissions.', kind='AssignmentNotPublished')
    if is_blank(content) and is_blank(file_url):
        raise ValidationError('Please enter your answer or attach a file.')

    student_id = str(student.user_id)
    remaining = [s for s in submissions
                 if not (s.student_id == student_id and s.assignment_id == assignment.id)]
    submission = Submission(
        assignment_id=assignment.id,
        lesson_id=assignment.lesson_id,
        course_id=course_id,
        student_id=student_id,
        student_name=student.name,
        content=content or '',
        file_url=file_url,
        file_name=file_name,
        submitted_at=utc_now(),
        status=SUBMITTED,
        max_points=assignment.max_points,
    )
    remaining.append(submission)
    return submission, remaining


def record_grade(submission, grade, feedback='', grader=None):
    grade = check_score(grade, submission.max_points)
    submission.status = GRADED
    submission.grade = grade
    submission.feedback = feedback or ''
    submission.graded_at = utc_now()
    submission.graded_by = grader
    return submission


def refresh_final_grade(enrollment, submissions):
    """Final grade is the mean percentage of the student's graded work"""
    if enrollment is None or enrollment.status == DROPPED:
        return enrollment
    graded = [s.percentage for s in submissions
              if s.student_id == enrollment.student_id and s.course_id == enrollment.course_id
              and s.status == GRADED and s.percentage is not None]
    if graded:
        enrollment.final_grade = round(sum(graded) / len(graded))
    return enrollment


def reconcile_enrollment_counts(courses, enrollments):
    """Recompute every course counter from the ledger; returns corrected ids"""
    active = {}
    for enrollment in enrollments:
        if enrollment.is_active:
            active[enrollment.course_id] = active.get(enrollment.course_id, 0) + 1

    corrected = []
    for course in courses:
        expected = (course.external_enrolled or 0) + active.get(course.id, 0)
        if course.enrolled_students != expected:
            logger.warning(f"Course {course.id} counter drifted: "
                           f"stored {course.enrolled_students}, ledger {expected}")
            course.enrolled_students = expected
            course.updated_at = utc_now()
            corrected.append(course.id)
        if course.enrolled_students > course.max_students:
            logger.warning(f"Course {course.id} is over capacity: "
                           f"{course.enrolled_students}/{course.max_students}")
    return corrected


def get_enrollment(enrollments, enrollment_id):
    for enrollment in enrollments:
        if enrollment.id == str(enrollment_id):
            return enrollment
    raise NotFoundError('Enrollment not found.')


def reconcile(repo):
    """Run the counter repair over stored data and commit any corrections"""
    courses = repo.load(COURSES)
    corrected = reconcile_enrollment_counts(courses, repo.load(ENROLLMENTS))
    if corrected:
        for course in courses:
            if course.id in corrected:
                adopt(course)
        repo.stage(COURSES, courses)
        repo.commit()
    return corrected
