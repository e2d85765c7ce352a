from .records import Record

EXAM_STATUSES = ('scheduled', 'ongoing', 'completed', 'cancelled')
ATTENDANCE_STATUSES = ('registered', 'present', 'absent')
DEFAULT_REQUIREMENTS = ['Valid ID', 'Certificate of Training Completion']


class Exam(Record):
    """A scheduled TESDA assessment"""
    FIELDS = {
        'title': '',
        'certification_type': '',
        'exam_date': None,
        'exam_time': None,
        'venue': '',
        'max_candidates': 0,
        'registered_candidates': 0,
        'status': 'scheduled',
        'registration_deadline': None,
        'proctor': '',
        'requirements': DEFAULT_REQUIREMENTS,
        'created_at': None,
        'updated_at': None,
    }


class ExamRegistration(Record):
    FIELDS = {
        'exam_id': None,
        'student_id': None,
        'student_name': '',
        'student_email': '',
        'registration_date': None,
        'attendance_status': 'registered',
        'exam_result': None,
        'score': None,
    }


class Certification(Record):
    """A certification program offered by the institution"""
    FIELDS = {
        'name': '',
        'code': '',
        'description': '',
        'type': '',
        'duration_hours': 0,
        'prerequisites': [],
        'is_active': True,
        'created_at': None,
        'updated_at': None,
    }
