import random

import pytest

from lms.errors import AuthorizationError, CapacityError, NotFoundError, StateError, ValidationError
from lms.models.enrollment import COMPLETED, DROPPED, ENROLLED, Enrollment
from lms.models.lesson import Assignment, published_lessons
from lms.models.submission import GRADED, Submission
from lms.utils import capacity, ledger
from lms.utils.session import SessionContext


def snapshot(course, enrollments):
    return course.to_dict(), [e.to_dict() for e in enrollments]


class TestCapacityGuard:
    def test_open_course_can_enroll(self, make_course):
        assert capacity.can_enroll(make_course())
        assert capacity.enrollment_block(make_course()) is None

    @pytest.mark.parametrize('overrides, kind', [
        ({'status': 'inactive'}, 'CourseNotActive'),
        ({'status': 'draft'}, 'CourseNotActive'),
        ({'enrolled_students': 3}, 'CourseFull'),
        ({'allow_self_enrollment': False}, 'ApprovalRequired'),
    ])
    def test_each_block_has_its_own_kind(self, make_course, overrides, kind):
        error = capacity.enrollment_block(make_course(**overrides))
        assert error.kind == kind
        assert not capacity.can_enroll(make_course(**overrides))

    def test_staff_enrollment_skips_approval_gate(self, make_course):
        course = make_course(allow_self_enrollment=False)
        assert capacity.enrollment_block(course, self_enrollment=False) is None

    def test_password_is_exact_and_case_sensitive(self, make_course):
        course = make_course(course_password='rso2024')
        capacity.check_password(course, 'rso2024')
        with pytest.raises(AuthorizationError) as excinfo:
            capacity.check_password(course, 'RSO2024')
        assert excinfo.value.kind == 'IncorrectPassword'
        with pytest.raises(AuthorizationError) as excinfo:
            capacity.check_password(course, '')
        assert excinfo.value.kind == 'PasswordRequired'


class TestEnroll:
    def test_enroll_creates_enrollment_and_bumps_counter(self, make_course):
        course = make_course(total_lessons=4)
        enrollments = []

        enrollment = ledger.enroll(course, '7', enrollments)

        assert enrollments == [enrollment]
        assert enrollment.status == ENROLLED
        assert enrollment.progress == 0
        assert enrollment.lessons_completed == 0
        assert enrollment.total_lessons == 4
        assert course.enrolled_students == 1

    def test_full_course_fails_without_mutation(self, make_course):
        course = make_course(enrolled_students=3, max_students=3)
        enrollments = []
        before = snapshot(course, enrollments)

        with pytest.raises(CapacityError) as excinfo:
            ledger.enroll(course, '7', enrollments)

        assert excinfo.value.kind == 'CourseFull'
        assert snapshot(course, enrollments) == before

    def test_second_enroll_fails_already_enrolled(self, make_course):
        course = make_course()
        enrollments = []
        ledger.enroll(course, '7', enrollments)

        with pytest.raises(StateError) as excinfo:
            ledger.enroll(course, '7', enrollments)

        assert excinfo.value.kind == 'AlreadyEnrolled'
        assert course.enrolled_students == 1
        assert len(enrollments) == 1

    def test_wrong_password_fails_without_mutation(self, make_course):
        course = make_course(course_password='rso2024')
        enrollments = []
        before = snapshot(course, enrollments)

        for supplied, kind in ((None, 'PasswordRequired'), ('rso2025', 'IncorrectPassword')):
            with pytest.raises(AuthorizationError) as excinfo:
                ledger.enroll(course, '7', enrollments, password=supplied)
            assert excinfo.value.kind == kind
        assert snapshot(course, enrollments) == before

        ledger.enroll(course, '7', enrollments, password='rso2024')
        assert course.enrolled_students == 1

    def test_inactive_course_is_checked_first(self, make_course):
        course = make_course(status='inactive', enrolled_students=3)
        with pytest.raises(StateError) as excinfo:
            ledger.enroll(course, '7', [])
        assert excinfo.value.kind == 'CourseNotActive'

    def test_lesson_total_comes_from_published_lessons(self, make_course, make_lessons):
        course = make_course(total_lessons=12)
        lessons = make_lessons(count=3, published=[True, False, True])

        enrollment = ledger.enroll(course, '7', [], lessons=lessons)
        assert enrollment.total_lessons == 2

        unstarted = ledger.enroll_by_staff(course, '8', [], lessons=[])
        assert unstarted.total_lessons == 0
        assert unstarted.progress == 0

    def test_approval_required(self, make_course):
        with pytest.raises(AuthorizationError) as excinfo:
            ledger.enroll(make_course(allow_self_enrollment=False), '7', [])
        assert excinfo.value.kind == 'ApprovalRequired'

    def test_staff_enrollment_ignores_password_and_approval(self, make_course):
        course = make_course(allow_self_enrollment=False, course_password='secret')
        enrollment = ledger.enroll_by_staff(course, '7', [], staff_id='2')
        assert enrollment.enrolled_by == '2'
        assert course.enrolled_students == 1

    def test_staff_enrollment_still_respects_capacity(self, make_course):
        with pytest.raises(CapacityError):
            ledger.enroll_by_staff(make_course(enrolled_students=3), '7', [])

    def test_drop_then_enroll_creates_new_record(self, make_course):
        course = make_course()
        enrollments = []
        first = ledger.enroll(course, '7', enrollments)
        ledger.drop(first, course)

        second = ledger.enroll(course, '7', enrollments)

        assert second.id != first.id
        assert first.status == DROPPED
        assert second.status == ENROLLED
        assert course.enrolled_students == 1


class TestDrop:
    def test_drop_decrements_counter(self, make_course):
        course = make_course()
        enrollment = ledger.enroll(course, '7', [])

        ledger.drop(enrollment, course)

        assert enrollment.status == DROPPED
        assert enrollment.dropped_date is not None
        assert course.enrolled_students == 0

    def test_counter_never_goes_negative(self, make_course):
        course = make_course()
        enrollment = Enrollment(course_id=course.id, student_id='7')
        ledger.drop(enrollment, course)
        assert course.enrolled_students == 0

    @pytest.mark.parametrize('status', [DROPPED, COMPLETED])
    def test_terminal_states_cannot_be_dropped(self, make_course, status):
        course = make_course(enrolled_students=1)
        enrollment = Enrollment(course_id=course.id, student_id='7', status=status)
        with pytest.raises(StateError) as excinfo:
            ledger.drop(enrollment, course)
        assert excinfo.value.kind == 'InvalidTransition'
        assert course.enrolled_students == 1


def test_counter_stays_within_bounds_for_random_sequences(make_course):
    rng = random.Random(42)
    for _ in range(50):
        course = make_course(max_students=rng.randint(1, 4))
        enrollments = []
        for _ in range(30):
            student = str(rng.randint(1, 6))
            try:
                if rng.random() < 0.6:
                    ledger.enroll(course, student, enrollments)
                else:
                    active = ledger.find_active(enrollments, student, course.id)
                    if active is None:
                        continue
                    ledger.drop(active, course)
            except (CapacityError, StateError):
                pass
            assert 0 <= course.enrolled_students <= course.max_students
            assert course.enrolled_students == sum(1 for e in enrollments if e.status != DROPPED)


class TestCompleteLesson:
    def test_progress_tracks_published_lessons(self, make_course, make_lessons):
        course = make_course()
        lessons = make_lessons(count=4)
        enrollment = ledger.enroll(course, '7', [])

        ledger.complete_lesson(enrollment, lessons[0], published_lessons(lessons))

        assert enrollment.total_lessons == 4
        assert enrollment.lessons_completed == 1
        assert enrollment.progress == 25
        assert enrollment.next_lesson == 'Lesson 2'

    def test_completing_same_lesson_twice_is_idempotent(self, make_course, make_lessons):
        lessons = make_lessons(count=2)
        enrollment = ledger.enroll(make_course(), '7', [])
        ledger.complete_lesson(enrollment, lessons[0], lessons)
        ledger.complete_lesson(enrollment, lessons[0], lessons)
        assert enrollment.lessons_completed == 1
        assert enrollment.completed_lesson_ids == ['l1']

    def test_last_lesson_completes_enrollment(self, make_course, make_lessons):
        course = make_course(enrolled_students=0)
        lessons = make_lessons(count=2)
        enrollment = ledger.enroll(course, '7', [])

        for lesson in lessons:
            ledger.complete_lesson(enrollment, lesson, lessons)

        assert enrollment.status == COMPLETED
        assert enrollment.completion_date is not None
        assert enrollment.progress == 100
        assert enrollment.next_lesson is None
        assert course.enrolled_students == 1

        ledger.complete_lesson(enrollment, lessons[0], lessons)
        assert enrollment.lessons_completed == enrollment.total_lessons == 2

    def test_lessons_completed_never_exceeds_total(self, make_course, make_lessons):
        lessons = make_lessons(count=3)
        enrollment = Enrollment(course_id='c1', student_id='7', total_lessons=3,
                                completed_lesson_ids=['l1', 'l2', 'gone'])
        ledger.complete_lesson(enrollment, lessons[2], lessons[:2] + [lessons[2]])
        assert enrollment.lessons_completed <= enrollment.total_lessons
        assert 0 <= enrollment.progress <= 100

    def test_unpublished_lesson_rejected(self, make_course, make_lessons):
        lessons = make_lessons(count=2, published=[True, False])
        enrollment = ledger.enroll(make_course(), '7', [])
        with pytest.raises(ValidationError):
            ledger.complete_lesson(enrollment, lessons[1], published_lessons(lessons))
        assert enrollment.lessons_completed == 0

    def test_foreign_lesson_rejected(self, make_course, make_lessons):
        enrollment = ledger.enroll(make_course(), '7', [])
        other = make_lessons(course_id='other', count=1)
        with pytest.raises(ValidationError):
            ledger.complete_lesson(enrollment, other[0], other)

    def test_dropped_enrollment_rejected(self, make_course, make_lessons):
        course = make_course()
        lessons = make_lessons(count=2)
        enrollment = ledger.enroll(course, '7', [])
        ledger.drop(enrollment, course)
        with pytest.raises(StateError):
            ledger.complete_lesson(enrollment, lessons[0], lessons)


class TestComplete:
    def test_staff_completion_with_grade(self):
        enrollment = Enrollment(course_id='c1', student_id='7')
        ledger.complete(enrollment, final_grade='88')
        assert enrollment.status == COMPLETED
        assert enrollment.final_grade == 88

    def test_completed_is_terminal(self):
        enrollment = Enrollment(course_id='c1', student_id='7', status=COMPLETED)
        with pytest.raises(StateError):
            ledger.complete(enrollment)

    def test_grade_out_of_range(self):
        enrollment = Enrollment(course_id='c1', student_id='7')
        with pytest.raises(ValidationError):
            ledger.complete(enrollment, final_grade=101)
        assert enrollment.status == ENROLLED


def published_assignment(**overrides):
    values = {'id': 'a1', 'lesson_id': 'l1', 'title': 'Table setting', 'status': 'published', 'max_points': 50}
    values.update(overrides)
    return Assignment.from_dict(values)


class TestSubmissions:
    student = SessionContext('7', 'student@example.edu', 'Student One', 'student')

    def test_submit_creates_submission(self):
        submission, submissions = ledger.submit_assignment([], published_assignment(), 'c1', self.student,
                                                           content='My answer')
        assert submissions == [submission]
        assert submission.status == 'submitted'
        assert submission.max_points == 50
        assert submission.student_name == 'Student One'

    def test_resubmission_replaces_previous(self):
        first, submissions = ledger.submit_assignment([], published_assignment(), 'c1', self.student,
                                                      content='draft')
        second, submissions = ledger.submit_assignment(submissions, published_assignment(), 'c1',
                                                       self.student, file_url='/files/final.pdf')
        assert submissions == [second]
        assert second.id != first.id

    def test_draft_assignment_not_submittable(self):
        with pytest.raises(ValidationError) as excinfo:
            ledger.submit_assignment([], published_assignment(status='draft'), 'c1', self.student,
                                     content='x')
        assert excinfo.value.kind == 'AssignmentNotPublished'

    def test_empty_submission_rejected(self):
        with pytest.raises(ValidationError):
            ledger.submit_assignment([], published_assignment(), 'c1', self.student, content='  ')

    @pytest.mark.parametrize('grade', [-1, 51, 'abc', None, True, 'nan', 'inf'])
    def test_invalid_grade_leaves_submission_unchanged(self, grade):
        submission = Submission(assignment_id='a1', student_id='7', max_points=50)
        before = submission.to_dict()

        with pytest.raises(ValidationError) as excinfo:
            ledger.record_grade(submission, grade, 'feedback')

        assert excinfo.value.kind == 'InvalidGrade'
        assert submission.to_dict() == before

    def test_record_grade(self):
        submission = Submission(assignment_id='a1', student_id='7', max_points=50)
        ledger.record_grade(submission, '45', 'Well done', grader='2')
        assert submission.status == GRADED
        assert submission.grade == 45
        assert submission.percentage == 90
        assert submission.graded_by == '2'
        assert submission.graded_at is not None

    def test_final_grade_is_mean_percentage(self):
        enrollment = Enrollment(course_id='c1', student_id='7')
        submissions = [
            Submission(course_id='c1', student_id='7', status=GRADED, grade=40, max_points=50),
            Submission(course_id='c1', student_id='7', status=GRADED, grade=70, max_points=100),
            Submission(course_id='c1', student_id='7', status='submitted'),
            Submission(course_id='c2', student_id='7', status=GRADED, grade=0, max_points=100),
        ]
        ledger.refresh_final_grade(enrollment, submissions)
        assert enrollment.final_grade == 75


class TestReconcile:
    def test_reconcile_repairs_drift(self, make_course):
        course = make_course(id='c1', enrolled_students=3, external_enrolled=1)
        untouched = make_course(id='c2', enrolled_students=0)
        enrollments = [
            Enrollment(course_id='c1', student_id='1'),
            Enrollment(course_id='c1', student_id='2', status=DROPPED),
        ]

        corrected = ledger.reconcile_enrollment_counts([course, untouched], enrollments)

        assert corrected == ['c1']
        assert course.enrolled_students == 2
        assert untouched.enrolled_students == 0

    def test_reconcile_persists_corrections(self, make_course, memory_repo):
        from lms.utils.repository import COURSES, ENROLLMENTS

        course = make_course(enrolled_students=2)
        memory_repo.stage(COURSES, [course])
        memory_repo.stage(ENROLLMENTS, [Enrollment(course_id='c1', student_id='1')])
        memory_repo.commit()

        assert ledger.reconcile(memory_repo) == ['c1']
        assert memory_repo.load(COURSES)[0].enrolled_students == 1
        assert ledger.reconcile(memory_repo) == []


def test_get_enrollment_not_found():
    with pytest.raises(NotFoundError):
        ledger.get_enrollment([], 'nope')
