from .records import Record

REMINDER_TYPES = ('general', 'announcement', 'deadline', 'maintenance', 'exam')
PRIORITIES = ('low', 'medium', 'high', 'urgent')

ALL_STUDENTS = 'all_students'
SPECIFIC_STUDENTS = 'specific_students'
SPECIFIC_EMAILS = 'specific_emails'
COURSE_STUDENTS = 'course_students'
ALL_USERS = 'all_users'
STAFF_ONLY = 'staff_only'
ADMIN_ONLY = 'admin_only'

AUDIENCES = (ALL_STUDENTS, SPECIFIC_STUDENTS, SPECIFIC_EMAILS, COURSE_STUDENTS,
             ALL_USERS, STAFF_ONLY, ADMIN_ONLY)
STUDENT_AUDIENCES = (ALL_STUDENTS, SPECIFIC_STUDENTS, SPECIFIC_EMAILS, COURSE_STUDENTS)


class Reminder(Record):
    FIELDS = {
        'title': '',
        'message': '',
        'reminder_type': 'general',
        'priority': 'medium',
        'target_audience': ALL_STUDENTS,
        'target_user_ids': [],
        'target_course_ids': [],
        'target_emails': [],
        'is_active': True,
        'is_dismissible': True,
        'expires_at': None,
        'created_by': None,
        'created_at': None,
        'updated_at': None,
    }


class Dismissal(Record):
    """A user's dismissal of one reminder; the id is the reminder id"""
    FIELDS = {
        'dismissed_at': None,
    }
