import random

from ..errors import ValidationError
from .records import Record, ORIGIN_REMOTE, positive_int, require_fields, utc_now

CATEGORIES = ('Food & Beverages', 'Front Office', 'Housekeeping', 'Tourism', 'Cookery')
LEVELS = ('NC I', 'NC II', 'NC III')
STATUSES = ('active', 'inactive', 'draft')


class Course(Record):
    """Course record.

    ``enrolled_students`` is a materialised counter. ``external_enrolled``
    holds the seats reported by the remote tier for students that are not in
    the local enrollment ledger, so the counter can always be recomputed as
    ``external_enrolled`` plus the non-dropped ledger entries.
    """
    FIELDS = {
        'title': '',
        'code': '',
        'description': '',
        'category': CATEGORIES[0],
        'level': LEVELS[0],
        'duration': 0,
        'instructor': '',
        'enrolled_students': 0,
        'external_enrolled': 0,
        'max_students': 0,
        'total_lessons': 0,
        'status': 'draft',
        'course_password': '',
        'allow_self_enrollment': True,
        'created_at': None,
        'updated_at': None,
    }

    @classmethod
    def from_dict(cls, data, origin=None):
        course = super().from_dict(data, origin=origin)
        if course.origin == ORIGIN_REMOTE and 'external_enrolled' not in data:
            course.external_enrolled = course.enrolled_students
        return course

    @classmethod
    def create(cls, data):
        """Build a new local course from admin form data"""
        require_fields(data, ['title'])
        course = cls(
            title=data['title'].strip(),
            description=data.get('description', ''),
            instructor=data.get('instructor', ''),
            category=data.get('category', CATEGORIES[0]),
            level=data.get('level', LEVELS[0]),
            duration=data.get('duration'),
            max_students=data.get('max_students'),
            status=data.get('status', 'draft'),
            course_password=data.get('course_password') or '',
            allow_self_enrollment=data.get('allow_self_enrollment', True),
        )
        course.code = data.get('code') or generate_code(course.category)
        course.created_at = course.updated_at = utc_now()
        course.validate()
        return course

    def apply_changes(self, changes):
        """Apply an admin edit; counters are never taken from the form"""
        changes = {key: value for key, value in changes.items()
                   if key not in ('enrolled_students', 'external_enrolled', 'total_lessons')}
        self.update(changes)
        if self.course_password is None:
            self.course_password = ''
        self.validate()
        self.updated_at = utc_now()
        return self

    def validate(self):
        if not self.title or not str(self.title).strip():
            raise ValidationError('Title is required.')
        if self.category not in CATEGORIES:
            raise ValidationError(f'Category must be one of: {", ".join(CATEGORIES)}.')
        if self.level not in LEVELS:
            raise ValidationError(f'Level must be one of: {", ".join(LEVELS)}.')
        if self.status not in STATUSES:
            raise ValidationError(f'Status must be one of: {", ".join(STATUSES)}.')
        self.duration = positive_int(self.duration, 'Duration')
        self.max_students = positive_int(self.max_students, 'Maximum students')
        if self.max_students < self.enrolled_students:
            raise ValidationError(
                f'Maximum students cannot be lower than the {self.enrolled_students} already enrolled.')
        self.allow_self_enrollment = bool(self.allow_self_enrollment)

    @property
    def requires_password(self):
        return bool(self.allow_self_enrollment and self.course_password and self.course_password.strip())

    @property
    def available_seats(self):
        return max(0, self.max_students - self.enrolled_students)

    def public_dict(self):
        """Course as shown to students: the shared secret never leaves the server"""
        data = self.to_dict()
        data.pop('course_password', None)
        data['requires_password'] = self.requires_password
        data['available_seats'] = self.available_seats
        return data


def generate_code(category):
    return f'{category[:3].upper()}{random.randint(100, 999)}'
