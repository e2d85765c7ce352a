from flask import Blueprint, request
from flask_login import login_required
import logging
from ..errors import NotFoundError, StateError
from ..utils import exams
from ..utils.merger import adopt, discard, require
from ..utils.repository import CERTIFICATIONS, EXAM_REGISTRATIONS, EXAMS, get_repository
from ..utils.responses import json_body, success
from ..utils.session import current_session, role_required

logger = logging.getLogger(__name__)

exams_bp = Blueprint('exams', __name__)
certifications_bp = Blueprint('certifications', __name__)


@exams_bp.route('/')
@login_required
def index():
    """Exams; students see scheduled ones and whether they are registered"""
    session = current_session()
    repo = get_repository()
    items = repo.load(EXAMS)
    status = request.args.get('status')
    if status:
        items = [e for e in items if e.status == status]

    if session.is_staff:
        return success(exams=[e.to_dict() for e in items])

    registrations = repo.load(EXAM_REGISTRATIONS)
    data = []
    for exam in items:
        if exam.status != 'scheduled':
            continue
        registration = exams.find_registration(registrations, exam.id, session.user_id)
        data.append(dict(exam.to_dict(),
                         is_registered=registration is not None,
                         available_slots=max(0, exam.max_candidates - exam.registered_candidates)))
    return success(exams=data)


@exams_bp.route('/', methods=['POST'])
@login_required
@role_required('admin')
def create():
    repo = get_repository()
    items = repo.load(EXAMS)
    exam = exams.create_exam(items, json_body())
    repo.stage(EXAMS, items)
    repo.commit()
    return success(201, exam=exam.to_dict(), message='Exam scheduled successfully!')


@exams_bp.route('/<exam_id>', methods=['PUT'])
@login_required
@role_required('admin')
def update(exam_id):
    repo = get_repository()
    items = repo.load(EXAMS)
    exam = exams.update_exam(require(items, exam_id, 'Exam'), json_body())
    adopt(exam)
    repo.stage(EXAMS, items)
    repo.commit()
    return success(exam=exam.to_dict())


@exams_bp.route('/<exam_id>/status', methods=['POST'])
@login_required
@role_required('admin')
def change_status(exam_id):
    repo = get_repository()
    items = repo.load(EXAMS)
    exam = exams.transition(require(items, exam_id, 'Exam'), json_body().get('status'))
    adopt(exam)
    repo.stage(EXAMS, items)
    repo.commit()
    return success(exam=exam.to_dict())


@exams_bp.route('/<exam_id>', methods=['DELETE'])
@login_required
@role_required('admin')
def delete(exam_id):
    repo = get_repository()
    items = repo.load(EXAMS)
    exam = require(items, exam_id, 'Exam')
    if any(r.exam_id == exam.id for r in repo.load(EXAM_REGISTRATIONS)):
        raise StateError('Candidates are registered for this exam. Cancel it instead.', kind='ExamInUse')
    discard(items, exam)
    repo.stage(EXAMS, items)
    repo.commit()
    return success()


@exams_bp.route('/<exam_id>/register', methods=['POST'])
@login_required
@role_required('student')
def register(exam_id):
    session = current_session()
    repo = get_repository()
    items = repo.load(EXAMS)
    registrations = repo.load(EXAM_REGISTRATIONS)
    exam = require(items, exam_id, 'Exam')

    registration = exams.register(exam, registrations, session)
    adopt(exam)
    repo.stage(EXAM_REGISTRATIONS, registrations)
    repo.stage(EXAMS, items)
    repo.commit()
    return success(201, registration=registration.to_dict())


@exams_bp.route('/<exam_id>/register', methods=['DELETE'])
@login_required
@role_required('student')
def unregister(exam_id):
    session = current_session()
    repo = get_repository()
    items = repo.load(EXAMS)
    registrations = repo.load(EXAM_REGISTRATIONS)
    exam = require(items, exam_id, 'Exam')
    registration = exams.find_registration(registrations, exam.id, session.user_id)
    if registration is None:
        raise NotFoundError('You are not registered for this exam.')

    exams.unregister(exam, registration, registrations)
    adopt(exam)
    repo.stage(EXAM_REGISTRATIONS, registrations)
    repo.stage(EXAMS, items)
    repo.commit()
    return success()


@exams_bp.route('/<exam_id>/registrations')
@login_required
@role_required('admin', 'staff')
def registrations(exam_id):
    repo = get_repository()
    exam = require(repo.load(EXAMS), exam_id, 'Exam')
    items = [r for r in repo.load(EXAM_REGISTRATIONS) if r.exam_id == exam.id]
    return success(exam=exam.to_dict(), registrations=[r.to_dict() for r in items])


@exams_bp.route('/registrations/<registration_id>/result', methods=['POST'])
@login_required
@role_required('admin', 'staff')
def record_result(registration_id):
    data = json_body()
    repo = get_repository()
    items = repo.load(EXAM_REGISTRATIONS)
    registration = require(items, registration_id, 'Registration')
    exams.record_result(registration, data.get('attendance_status'), data.get('score'))
    adopt(registration)
    repo.stage(EXAM_REGISTRATIONS, items)
    repo.commit()
    return success(registration=registration.to_dict())


@certifications_bp.route('/')
@login_required
def certifications():
    session = current_session()
    items = get_repository().load(CERTIFICATIONS)
    if not session.is_staff:
        items = [c for c in items if c.is_active]
    return success(certifications=[c.to_dict() for c in items])


@certifications_bp.route('/', methods=['POST'])
@login_required
@role_required('admin')
def create_certification():
    repo = get_repository()
    items = repo.load(CERTIFICATIONS)
    certification = exams.create_certification(items, json_body())
    repo.stage(CERTIFICATIONS, items)
    repo.commit()
    return success(201, certification=certification.to_dict())


@certifications_bp.route('/<certification_id>', methods=['PUT'])
@login_required
@role_required('admin')
def update_certification(certification_id):
    repo = get_repository()
    items = repo.load(CERTIFICATIONS)
    certification = exams.update_certification(require(items, certification_id, 'Certification'), json_body())
    adopt(certification)
    repo.stage(CERTIFICATIONS, items)
    repo.commit()
    return success(certification=certification.to_dict())


@certifications_bp.route('/<certification_id>', methods=['DELETE'])
@login_required
@role_required('admin')
def delete_certification(certification_id):
    repo = get_repository()
    items = repo.load(CERTIFICATIONS)
    discard(items, require(items, certification_id, 'Certification'))
    repo.stage(CERTIFICATIONS, items)
    repo.commit()
    return success()
