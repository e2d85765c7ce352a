from .records import Record

SUBMITTED = 'submitted'
GRADED = 'graded'


class Submission(Record):
    """A student's answer to one assignment; one live record per pair"""
    FIELDS = {
        'assignment_id': None,
        'lesson_id': None,
        'course_id': None,
        'student_id': None,
        'student_name': '',
        'content': '',
        'file_url': None,
        'file_name': None,
        'submitted_at': None,
        'status': SUBMITTED,
        'grade': None,
        'max_points': 100,
        'feedback': '',
        'graded_at': None,
        'graded_by': None,
    }

    @property
    def percentage(self):
        if self.grade is None or not self.max_points:
            return None
        return self.grade / self.max_points * 100
