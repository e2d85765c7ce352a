from flask import Blueprint, request
from flask_login import login_required
import logging
from ..errors import AuthorizationError, StateError
from ..models.certificate import APPROVED
from ..utils import certificates
from ..utils.merger import adopt, discard
from ..utils.repository import CERTIFICATE_SUBMISSIONS, get_repository
from ..utils.responses import json_body, success
from ..utils.session import current_session, role_required

logger = logging.getLogger(__name__)

certificates_bp = Blueprint('certificates', __name__)


def owned_submission(submissions, submission_id, session):
    submission = certificates.get_submission(submissions, submission_id)
    if submission.student_id != session.user_id:
        raise AuthorizationError('This certificate belongs to another student.')
    return submission


@certificates_bp.route('/')
@login_required
def index():
    session = current_session()
    submissions = get_repository().load(CERTIFICATE_SUBMISSIONS)
    if not session.is_staff:
        submissions = certificates.owned_by(submissions, session.user_id)

    for key in ('status', 'certificate_type'):
        value = request.args.get(key)
        if value:
            submissions = [s for s in submissions if getattr(s, key) == value]
    submissions = sorted(submissions, key=lambda s: s.submitted_at or '', reverse=True)
    return success(submissions=[s.to_dict() for s in submissions])


@certificates_bp.route('/', methods=['POST'])
@login_required
@role_required('student')
def create():
    session = current_session()
    repo = get_repository()
    submissions = repo.load(CERTIFICATE_SUBMISSIONS)
    submission = certificates.submit(submissions, session, json_body())
    repo.stage(CERTIFICATE_SUBMISSIONS, submissions)
    repo.commit()
    return success(201, submission=submission.to_dict())


@certificates_bp.route('/<submission_id>', methods=['PUT'])
@login_required
@role_required('student')
def update(submission_id):
    session = current_session()
    repo = get_repository()
    submissions = repo.load(CERTIFICATE_SUBMISSIONS)
    submission = owned_submission(submissions, submission_id, session)
    certificates.edit(submission, json_body())
    adopt(submission)
    repo.stage(CERTIFICATE_SUBMISSIONS, submissions)
    repo.commit()
    return success(submission=submission.to_dict())


@certificates_bp.route('/<submission_id>', methods=['DELETE'])
@login_required
@role_required('student')
def delete(submission_id):
    session = current_session()
    repo = get_repository()
    submissions = repo.load(CERTIFICATE_SUBMISSIONS)
    submission = owned_submission(submissions, submission_id, session)
    if submission.status == APPROVED:
        raise StateError('An approved certificate cannot be withdrawn.')
    discard(submissions, submission)
    repo.stage(CERTIFICATE_SUBMISSIONS, submissions)
    repo.commit()
    return success()


@certificates_bp.route('/<submission_id>/review', methods=['POST'])
@login_required
@role_required('admin', 'staff')
def review(submission_id):
    """Approve or reject a pending submission"""
    session = current_session()
    data = json_body()
    repo = get_repository()
    submissions = repo.load(CERTIFICATE_SUBMISSIONS)
    submission = certificates.get_submission(submissions, submission_id)
    certificates.review(submission, data.get('status'), data.get('remarks'), reviewer=session.email)
    adopt(submission)
    repo.stage(CERTIFICATE_SUBMISSIONS, submissions)
    repo.commit()
    return success(submission=submission.to_dict())
