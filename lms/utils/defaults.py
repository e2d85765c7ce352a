"""Default catalog served as the remote tier when no remote API is configured"""

DEFAULT_COURSES = [
    {
        'id': '1',
        'title': 'Restaurant Service Operations NC II',
        'code': 'RSO101',
        'description': 'Learn the fundamentals of restaurant service including table setting, '
                       'order taking, food and beverage service, and customer service excellence.',
        'category': 'Food & Beverages',
        'level': 'NC II',
        'duration': 160,
        'instructor': 'Prof. Maria Santos',
        'enrolled_students': 15,
        'max_students': 25,
        'total_lessons': 12,
        'status': 'active',
        'course_password': 'rso2024',
        'allow_self_enrollment': True,
        'created_at': '2024-01-01',
        'updated_at': '2024-01-15'
    },
    {
        'id': '2',
        'title': 'Front Desk Operations NC II',
        'code': 'FDO102',
        'description': 'Comprehensive training in hotel front desk operations, reservations, '
                       'guest relations, and customer service.',
        'category': 'Front Office',
        'level': 'NC II',
        'duration': 140,
        'instructor': 'Ms. Ana Rodriguez',
        'enrolled_students': 18,
        'max_students': 30,
        'total_lessons': 10,
        'status': 'active',
        'course_password': '',
        'allow_self_enrollment': True,
        'created_at': '2024-01-05',
        'updated_at': '2024-01-20'
    },
    {
        'id': '3',
        'title': 'Housekeeping Operations NC II',
        'code': 'HKO103',
        'description': 'Complete training in housekeeping operations including room cleaning, '
                       'laundry management, and maintenance coordination.',
        'category': 'Housekeeping',
        'level': 'NC II',
        'duration': 120,
        'instructor': 'Mrs. Carmen Lopez',
        'enrolled_students': 12,
        'max_students': 20,
        'total_lessons': 8,
        'status': 'active',
        'course_password': 'house123',
        'allow_self_enrollment': True,
        'created_at': '2024-01-10',
        'updated_at': '2024-01-25'
    },
    {
        'id': '4',
        'title': 'Tourism Services NC II',
        'code': 'TSV104',
        'description': 'Learn tourism services including tour guiding, destination knowledge, '
                       'and customer service in tourism industry.',
        'category': 'Tourism',
        'level': 'NC II',
        'duration': 180,
        'instructor': 'Mr. Jose Reyes',
        'enrolled_students': 8,
        'max_students': 15,
        'total_lessons': 15,
        'status': 'active',
        'course_password': '',
        'allow_self_enrollment': True,
        'created_at': '2024-01-12',
        'updated_at': '2024-01-28'
    },
    {
        'id': '5',
        'title': 'Commercial Cooking NC II',
        'code': 'CCK105',
        'description': 'Professional cooking techniques, food preparation, kitchen management, '
                       'and culinary arts fundamentals.',
        'category': 'Cookery',
        'level': 'NC II',
        'duration': 200,
        'instructor': 'Chef Roberto Cruz',
        'enrolled_students': 20,
        'max_students': 25,
        'total_lessons': 18,
        'status': 'active',
        'course_password': 'cook2024',
        'allow_self_enrollment': True,
        'created_at': '2024-01-15',
        'updated_at': '2024-02-01'
    }
]

DEFAULT_EXAMS = [
    {
        'id': 'default-exam-1',
        'title': 'Food & Beverages Services NC II Assessment',
        'certification_type': 'Food & Beverages Services NC II',
        'exam_date': '2024-02-15',
        'exam_time': '09:00',
        'venue': 'Assessment Center Room 101',
        'max_candidates': 30,
        'registered_candidates': 12,
        'status': 'scheduled',
        'registration_deadline': '2024-02-10',
        'proctor': 'Prof. Maria Santos',
        'requirements': ['Valid ID', 'Certificate of Training Completion'],
        'created_at': '2024-01-15T08:00:00'
    },
    {
        'id': 'default-exam-2',
        'title': 'Front Office Services NC II Assessment',
        'certification_type': 'Front Office Services NC II',
        'exam_date': '2024-02-20',
        'exam_time': '14:00',
        'venue': 'Assessment Center Room 102',
        'max_candidates': 25,
        'registered_candidates': 8,
        'status': 'scheduled',
        'registration_deadline': '2024-02-15',
        'proctor': 'Prof. John Dela Cruz',
        'requirements': ['Valid ID', 'Certificate of Training Completion'],
        'created_at': '2024-01-20T08:00:00'
    }
]

DEFAULT_CERTIFICATIONS = [
    {
        'id': '1',
        'name': 'Food & Beverages Services NC II',
        'code': 'FBS-NCII',
        'description': 'National Certificate II in Food & Beverages Services.',
        'type': 'food_beverages',
        'duration_hours': 320,
        'prerequisites': ['Basic Food Safety'],
        'is_active': True,
        'created_at': '2023-01-15'
    },
    {
        'id': '2',
        'name': 'Tourism Services NC II',
        'code': 'TS-NCII',
        'description': 'National Certificate II in Tourism Services.',
        'type': 'tourism',
        'duration_hours': 280,
        'prerequisites': ['Communication Skills'],
        'is_active': True,
        'created_at': '2023-01-15'
    }
]

DEFAULT_REMINDERS = [
    {
        'id': '1',
        'title': 'Welcome to the Learning Platform',
        'message': 'Welcome to our Technical Education platform! Explore your courses '
                   'and start your learning journey.',
        'reminder_type': 'announcement',
        'priority': 'medium',
        'target_audience': 'all_students',
        'is_active': True,
        'is_dismissible': True,
        'expires_at': None,
        'created_by': {'id': 'admin', 'email': 'admin@example.edu', 'name': 'Admin User', 'role': 'admin'},
        'created_at': '2024-01-01T00:00:00'
    }
]

DEFAULT_COLLECTIONS = {
    'courses': DEFAULT_COURSES,
    'exams': DEFAULT_EXAMS,
    'registrations': [],
    'certifications': DEFAULT_CERTIFICATIONS,
    'reminders': DEFAULT_REMINDERS,
    'certificate-submissions': [],
}
