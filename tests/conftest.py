import pytest

from lms import create_app, db
from lms.config import TestConfig
from lms.models.course import Course
from lms.models.lesson import Lesson
from lms.models.records import ORIGIN_LOCAL
from lms.models.user import User
from lms.utils.repository import RecordRepository
from lms.utils.session import SessionContext
from lms.utils.store import MemoryStore

PASSWORD = 'Secret123'

USERS = [
    ('admin', 'admin@example.edu', 'Admin User', 'admin'),
    ('staff', 'staff@example.edu', 'Staff User', 'staff'),
    ('student', 'student@example.edu', 'Student One', 'student'),
    ('student2', 'student2@example.edu', 'Student Two', 'student'),
]


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        for username, email, name, role in USERS:
            user = User(username=username, email=email, name=name, role=role)
            user.set_password(PASSWORD)
            db.session.add(user)
        db.session.commit()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def do_login(username):
        email = next(u[1] for u in USERS if u[0] == username)
        response = client.post('/auth/login', json={'email': email, 'password': PASSWORD})
        assert response.status_code == 200, response.get_json()
        return response.get_json()['user']
    return do_login


@pytest.fixture
def user_id(app):
    def lookup(username):
        with app.app_context():
            return str(User.query.filter_by(username=username).first().id)
    return lookup


@pytest.fixture
def student_session():
    return SessionContext('7', 'student@example.edu', 'Student One', 'student')


@pytest.fixture
def staff_session():
    return SessionContext('2', 'staff@example.edu', 'Staff User', 'staff')


@pytest.fixture
def admin_session():
    return SessionContext('1', 'admin@example.edu', 'Admin User', 'admin')


@pytest.fixture
def memory_repo():
    """Repository over an empty in-memory store and no remote tier"""
    return RecordRepository(MemoryStore())


@pytest.fixture
def make_course():
    def build(**overrides):
        values = {
            'id': 'c1',
            'title': 'Bread and Pastry Production',
            'code': 'COO100',
            'category': 'Cookery',
            'level': 'NC II',
            'duration': 120,
            'max_students': 3,
            'enrolled_students': 0,
            'status': 'active',
            'course_password': '',
            'allow_self_enrollment': True,
            'total_lessons': 0,
        }
        values.update(overrides)
        return Course.from_dict(values, origin=ORIGIN_LOCAL)
    return build


@pytest.fixture
def make_lessons():
    def build(course_id='c1', count=3, published=None, assignments=None):
        lessons = []
        for index in range(count):
            lessons.append(Lesson.from_dict({
                'id': f'l{index + 1}',
                'course_id': course_id,
                'title': f'Lesson {index + 1}',
                'order': index + 1,
                'is_published': True if published is None else published[index],
                'assignments': (assignments or {}).get(index, []),
            }))
        return lessons
    return build
