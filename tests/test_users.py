import pytest

PASSWORD = 'Secret123'
EMAILS = {
    'admin': 'admin@example.edu',
    'student': 'student@example.edu',
}
ACCOUNTS = 4


def sign_in(client, username):
    response = client.post('/auth/login', json={'email': EMAILS[username], 'password': PASSWORD})
    assert response.status_code == 200, response.get_json()


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    sign_in(client, 'admin')
    return client


def test_admin_lists_accounts_by_role(admin_client):
    users = admin_client.get('/users/').get_json()['users']
    assert len(users) == ACCOUNTS

    students = admin_client.get('/users/?role=student').get_json()['users']
    assert sorted(u['email'] for u in students) == ['student2@example.edu', 'student@example.edu']
    assert all(u['status'] == 'active' for u in students)


def test_staff_only_see_students(client, login):
    login('staff')
    users = client.get('/users/?role=admin').get_json()['users']
    assert {u['role'] for u in users} == {'student'}


def test_students_cannot_manage_accounts(client, login):
    login('student')
    assert client.get('/users/').status_code == 403
    assert client.post('/users/', json={'email': 'x@example.edu'}).status_code == 403


def test_created_account_can_log_in(app, admin_client):
    response = admin_client.post('/users/', json={
        'email': 'Ana.Reyes@Example.edu',
        'name': 'Ana Reyes',
        'role': 'student',
        'password': 'Welcome123',
    })
    assert response.status_code == 201
    user = response.get_json()['user']
    assert user['email'] == 'ana.reyes@example.edu'
    assert user['username'] == 'ana.reyes'
    assert user['status'] == 'active'

    client = app.test_client()
    response = client.post('/auth/login', json={'email': 'ana.reyes@example.edu', 'password': 'Welcome123'})
    assert response.status_code == 200
    assert response.get_json()['user']['last_login'] is not None


@pytest.mark.parametrize('payload, status, kind', [
    ({'email': 'student@example.edu', 'name': 'Copy', 'role': 'student', 'password': 'Welcome123'},
     409, 'DuplicateAccount'),
    ({'email': 'new@example.edu', 'name': 'New', 'role': 'trainer', 'password': 'Welcome123'},
     400, 'ValidationError'),
    ({'email': 'new@example.edu', 'name': 'New', 'role': 'student', 'password': 'short'},
     400, 'ValidationError'),
    ({'email': 'new@example.edu', 'role': 'student', 'password': 'Welcome123'},
     400, 'ValidationError'),
])
def test_create_validation(admin_client, payload, status, kind):
    response = admin_client.post('/users/', json=payload)
    assert response.status_code == status
    assert response.get_json()['kind'] == kind
    assert len(admin_client.get('/users/').get_json()['users']) == ACCOUNTS


def test_deactivated_account_is_locked_out(app, admin_client, user_id):
    student = app.test_client()
    sign_in(student, 'student')

    response = admin_client.put(f"/users/{user_id('student')}", json={'status': 'inactive'})
    assert response.status_code == 200
    assert response.get_json()['user']['status'] == 'inactive'

    assert student.get('/auth/me').status_code == 401
    response = student.post('/auth/login', json={'email': 'student@example.edu', 'password': PASSWORD})
    assert response.status_code == 403
    assert response.get_json()['kind'] == 'AccountInactive'

    inactive = admin_client.get('/users/?status=inactive').get_json()['users']
    assert [u['email'] for u in inactive] == ['student@example.edu']


def test_update_role_and_email(admin_client, user_id):
    response = admin_client.put(f"/users/{user_id('student2')}",
                                json={'role': 'staff', 'email': 'Trainer@Example.edu'})
    assert response.status_code == 200
    assert response.get_json()['user']['role'] == 'staff'
    assert response.get_json()['user']['email'] == 'trainer@example.edu'

    response = admin_client.put(f"/users/{user_id('student2')}", json={'email': 'staff@example.edu'})
    assert response.status_code == 409


def test_admin_cannot_lock_out_own_account(admin_client, user_id):
    response = admin_client.put(f"/users/{user_id('admin')}", json={'role': 'student'})
    assert response.status_code == 409
    assert response.get_json()['kind'] == 'OwnAccount'
    assert admin_client.delete(f"/users/{user_id('admin')}").status_code == 409


def test_delete_requires_no_live_enrollments(app, admin_client, user_id):
    student = app.test_client()
    sign_in(student, 'student')
    response = student.post('/enrollments/', json={'course_id': '1', 'password': 'rso2024'})
    enrollment = response.get_json()['enrollment']

    response = admin_client.delete(f"/users/{user_id('student')}")
    assert response.status_code == 409
    assert response.get_json()['kind'] == 'UserInUse'

    assert student.post(f"/enrollments/{enrollment['id']}/drop").status_code == 200
    assert admin_client.delete(f"/users/{user_id('student')}").status_code == 200
    assert admin_client.delete(f"/users/{user_id('student2')}").status_code == 200
    emails = [u['email'] for u in admin_client.get('/users/').get_json()['users']]
    assert emails == ['admin@example.edu', 'staff@example.edu']


def test_unknown_user(admin_client):
    assert admin_client.put('/users/999', json={'name': 'Ghost'}).status_code == 404
