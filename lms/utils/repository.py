import json
import logging

from ..errors import StorageError
from ..models.certificate import CertificateSubmission
from ..models.course import Course
from ..models.enrollment import Enrollment
from ..models.exam import Certification, Exam, ExamRegistration
from ..models.lesson import Lesson
from ..models.records import ORIGIN_LOCAL, ORIGIN_REMOTE
from ..models.reminder import Dismissal, Reminder
from ..models.submission import Submission
from .merger import merge, writeback
from .remote_api import RemoteAPI
from .store import DatabaseStore, read_list

logger = logging.getLogger(__name__)


class Collection:
    """A namespaced store key, its record type and optional remote source"""

    def __init__(self, key, record_class, resource=None, field=None):
        self.key = key
        self.record_class = record_class
        self.resource = resource
        self.field = field

    def __repr__(self):
        return f'<Collection {self.key}>'


COURSES = Collection('courses', Course, resource='courses')
ENROLLMENTS = Collection('student-enrollments', Enrollment)
SUBMISSIONS = Collection('assignment-submissions', Submission)
CERTIFICATE_SUBMISSIONS = Collection('student-certificate-submissions', CertificateSubmission,
                                     resource='certificate-submissions')
REMINDERS = Collection('reminders', Reminder, resource='reminders')
EXAMS = Collection('exams', Exam, resource='exams')
EXAM_REGISTRATIONS = Collection('exam-registrations', ExamRegistration,
                                resource='exams', field='registrations')
CERTIFICATIONS = Collection('certifications', Certification, resource='certifications')


def lessons_of(course_id):
    return Collection(f'course-{course_id}-lessons', Lesson)


def dismissals_of(user_id):
    return Collection(f'dismissed-reminders-{user_id}', Dismissal)


class RecordRepository:
    """Loads merged collections and commits staged write-backs atomically.

    The version of every key read is remembered; ``commit`` writes all staged
    keys in one ``set_many`` call that expects those versions, so a
    concurrent change to any of them aborts the whole batch.
    """

    def __init__(self, store, remote=None):
        self.store = store
        self.remote = remote
        self._versions = {}
        self._loaded = {}
        self._pending = {}

    def load(self, collection):
        if collection.key in self._loaded:
            return self._loaded[collection.key]

        items, version = read_list(self.store, collection.key)
        self._versions[collection.key] = version
        local = [collection.record_class.from_dict(item, origin=ORIGIN_LOCAL) for item in items]

        remote = []
        if collection.resource and self.remote is not None:
            remote = [collection.record_class.from_dict(item, origin=ORIGIN_REMOTE)
                      for item in self.remote.get_collection(collection.resource, collection.field)]

        records = merge(remote, local)
        self._loaded[collection.key] = records
        return records

    def stage(self, collection, records):
        self._loaded[collection.key] = records
        self._pending[collection.key] = json.dumps([r.to_dict() for r in writeback(records)])

    def discard(self, collection):
        """Stage removal of the whole key"""
        self._loaded.pop(collection.key, None)
        self._pending[collection.key] = None

    def commit(self):
        if not self._pending:
            return
        pending, self._pending = self._pending, {}
        try:
            unreadable = [key for key in pending if key in self._versions and self._versions[key] is None]
            if unreadable:
                raise StorageError('Saved data could not be read, so it was not overwritten. Please try again.')
            expected = {key: self._versions[key] for key in pending if key in self._versions}
            self.store.set_many(pending, expected)
        finally:
            for key in pending:
                self._versions.pop(key, None)
                self._loaded.pop(key, None)


def get_repository():
    """Repository over the application database and remote catalog"""
    return RecordRepository(DatabaseStore(), RemoteAPI())
