import hmac

from ..errors import AuthorizationError, CapacityError, StateError


def not_active(course):
    return StateError('This course is not currently available for enrollment.', kind='CourseNotActive')


def course_full(course):
    return CapacityError('This course is full. Please try again later.', kind='CourseFull')


def approval_required(course):
    return AuthorizationError(
        'This course requires staff approval for enrollment. '
        'Please contact your instructor or administrator.',
        kind='ApprovalRequired'
    )


def is_full(course):
    return course.enrolled_students >= course.max_students


def enrollment_block(course, self_enrollment=True):
    """First reason the course cannot take a new student, or None.

    Staff-mediated enrollment passes ``self_enrollment=False`` and skips the
    self-enrollment gate.
    """
    if course.status != 'active':
        return not_active(course)
    if is_full(course):
        return course_full(course)
    if self_enrollment and not course.allow_self_enrollment:
        return approval_required(course)
    return None


def can_enroll(course):
    return enrollment_block(course) is None


def check(course, self_enrollment=True):
    error = enrollment_block(course, self_enrollment)
    if error is not None:
        raise error


def check_password(course, supplied):
    """Exact, case-sensitive match against the course's shared secret"""
    if not course.requires_password:
        return
    if supplied is None or supplied == '':
        raise AuthorizationError('This course requires an enrollment password.', kind='PasswordRequired')
    if not hmac.compare_digest(str(supplied).encode('utf-8'), course.course_password.encode('utf-8')):
        raise AuthorizationError('Incorrect password. Please try again.', kind='IncorrectPassword')
