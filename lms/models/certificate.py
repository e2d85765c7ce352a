from .records import Record

NC = 'NC'
COC = 'COC'
CERTIFICATE_TYPES = (NC, COC)

PENDING = 'pending'
APPROVED = 'approved'
REJECTED = 'rejected'
REVIEW_OUTCOMES = (APPROVED, REJECTED)

# Mandatory metadata per certificate class
REQUIRED_FIELDS = {
    NC: ('course_name', 'date_accredited'),
    COC: ('training_course_name', 'training_hours', 'conducted_from', 'conducted_to', 'given_date'),
}
COMMON_FIELDS = ('certificate_name', 'certificate_number')

# Everything that belongs to one certificate type only
TYPE_FIELDS = {
    NC: REQUIRED_FIELDS[NC] + ('expiration_date',),
    COC: REQUIRED_FIELDS[COC],
}

# Fields a student may set; everything else is owned by the server
EDITABLE_FIELDS = (
    'certificate_type', 'certificate_name', 'certificate_number',
    'course_name', 'date_accredited', 'expiration_date',
    'training_course_name', 'training_hours', 'conducted_from', 'conducted_to', 'given_date',
    'file_url', 'file_name',
)


class CertificateSubmission(Record):
    FIELDS = {
        'student_id': None,
        'student_name': '',
        'student_email': '',
        'certificate_type': NC,
        'certificate_name': '',
        'certificate_number': '',
        'course_name': None,
        'date_accredited': None,
        'expiration_date': None,
        'training_course_name': None,
        'training_hours': None,
        'conducted_from': None,
        'conducted_to': None,
        'given_date': None,
        'file_url': None,
        'file_name': None,
        'status': PENDING,
        'remarks': None,
        'submitted_at': None,
        'reviewed_at': None,
        'reviewed_by': None,
    }

    def clear_review(self):
        self.status = PENDING
        self.remarks = None
        self.reviewed_at = None
        self.reviewed_by = None
