from .records import Record, today

ENROLLED = 'enrolled'
COMPLETED = 'completed'
DROPPED = 'dropped'
STATUSES = (ENROLLED, COMPLETED, DROPPED)


class Enrollment(Record):
    """A student's relationship to one course.

    ``progress`` is always derived from the lesson counters; a stored value
    is never read back.
    """
    FIELDS = {
        'course_id': None,
        'student_id': None,
        'enrollment_date': None,
        'status': ENROLLED,
        'final_grade': None,
        'completion_date': None,
        'dropped_date': None,
        'lessons_completed': 0,
        'total_lessons': 0,
        'completed_lesson_ids': [],
        'next_lesson': None,
        'enrolled_by': None,
    }

    @classmethod
    def start(cls, course, student_id, enrolled_by=None, total_lessons=None):
        return cls(
            course_id=course.id,
            student_id=str(student_id),
            enrollment_date=today(),
            status=ENROLLED,
            total_lessons=course.total_lessons if total_lessons is None else total_lessons,
            enrolled_by=enrolled_by,
        )

    @property
    def progress(self):
        if not self.total_lessons:
            return 0
        return round(self.lessons_completed / self.total_lessons * 100)

    @property
    def is_active(self):
        return self.status != DROPPED

    def to_dict(self):
        data = super().to_dict()
        data['progress'] = self.progress
        return data

    def __repr__(self):
        return f'<Enrollment {self.student_id} - {self.course_id}>'
