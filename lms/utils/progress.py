"""Read-only aggregations over enrollment, lesson and submission snapshots.

Nothing computed here is ever stored back onto a record.
"""
from ..models.enrollment import COMPLETED
from ..models.lesson import published_lessons
from ..models.submission import GRADED, SUBMITTED


def average_progress(enrollments):
    enrollments = list(enrollments)
    if not enrollments:
        return 0
    return round(sum(e.progress for e in enrollments) / len(enrollments))


def completion_rate(enrollments):
    enrollments = list(enrollments)
    if not enrollments:
        return 0
    completed = sum(1 for e in enrollments if e.status == COMPLETED)
    return round(100 * completed / len(enrollments))


def pending_assignments(assignments, submissions, student_id):
    """Published assignments the student has not submitted yet"""
    submitted = {s.assignment_id for s in submissions if s.student_id == str(student_id)}
    return [a for a in assignments if a.status == 'published' and a.id not in submitted]


def pending_submissions(submissions):
    """Submissions still waiting for a grade"""
    return [s for s in submissions if s.status == SUBMITTED]


def average_grade(submissions):
    grades = [s.percentage for s in submissions if s.status == GRADED and s.percentage is not None]
    if not grades:
        return None
    return round(sum(grades) / len(grades))


def course_stats(course, enrollments, lessons, submissions):
    enrollments = [e for e in enrollments if e.course_id == course.id]
    active = [e for e in enrollments if e.is_active]
    published = published_lessons(lessons)
    course_submissions = [s for s in submissions if s.course_id == course.id]
    return {
        'course_id': course.id,
        'enrolled_students': course.enrolled_students,
        'max_students': course.max_students,
        'active_enrollments': len(active),
        'total_lessons': len(lessons),
        'published_lessons': len(published),
        'total_assignments': sum(len(lesson.assignments) for lesson in lessons),
        'average_progress': average_progress(active),
        'completion_rate': completion_rate(active),
        'pending_submissions': len(pending_submissions(course_submissions)),
        'average_grade': average_grade(course_submissions),
    }


def student_summary(enrollments, submissions, student_id=None):
    """Dashboard numbers for one student; pass pre-filtered lists or a student id"""
    if student_id is not None:
        enrollments = [e for e in enrollments if e.student_id == str(student_id)]
        submissions = [s for s in submissions if s.student_id == str(student_id)]
    mine = [e for e in enrollments if e.is_active]
    my_submissions = list(submissions)
    return {
        'enrolled_courses': sum(1 for e in mine if e.status != COMPLETED),
        'completed_courses': sum(1 for e in mine if e.status == COMPLETED),
        'average_progress': average_progress(mine),
        'submitted_assignments': len(my_submissions),
        'graded_assignments': sum(1 for s in my_submissions if s.status == GRADED),
        'average_grade': average_grade(my_submissions),
    }


def overview(courses, enrollments, submissions):
    active = [e for e in enrollments if e.is_active]
    return {
        'total_courses': len(courses),
        'active_courses': sum(1 for c in courses if c.status == 'active'),
        'total_enrollments': len(active),
        'average_progress': average_progress(active),
        'completion_rate': completion_rate(active),
        'pending_submissions': len(pending_submissions(submissions)),
    }
