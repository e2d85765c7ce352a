from lms import create_app, db
from lms.models.user import User

DEMO_USERS = [
    ('admin', 'admin@lpu.edu.ph', 'Admin User', 'admin', 'Admin123'),
    ('mariasantos', 'maria.santos@lpu.edu.ph', 'Maria Santos', 'staff', 'Staff123'),
    ('juandelacruz', 'juan.student@lpunetwork.edu.ph', 'Juan Dela Cruz', 'student', 'Student123'),
]

app = create_app()

with app.app_context():
    # Drop all tables
    db.drop_all()

    # Create all tables
    db.create_all()

    for username, email, name, role, password in DEMO_USERS:
        user = User(username=username, email=email, name=name, role=role)
        user.set_password(password)
        db.session.add(user)
    db.session.commit()

    print("Database initialized successfully!")
    for username, email, name, role, password in DEMO_USERS:
        print(f"  {role:8} {email} / {password}")
