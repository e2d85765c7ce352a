class LMSError(Exception):
    """Base error carrying a machine readable kind and a user-facing message"""
    status_code = 400
    retryable = False
    default_kind = 'Error'

    def __init__(self, message, kind=None):
        super().__init__(message)
        self.message = message
        self.kind = kind or self.default_kind

    def to_dict(self):
        data = {
            'success': False,
            'error': self.message,
            'kind': self.kind
        }
        if self.retryable:
            data['retry'] = True
        return data


class ValidationError(LMSError):
    default_kind = 'ValidationError'


class NotFoundError(LMSError):
    status_code = 404
    default_kind = 'NotFound'


class CapacityError(LMSError):
    status_code = 409
    default_kind = 'CourseFull'


class StateError(LMSError):
    status_code = 409
    default_kind = 'InvalidTransition'


class AuthorizationError(LMSError):
    status_code = 403
    default_kind = 'Forbidden'


class StorageError(LMSError):
    status_code = 503
    retryable = True
    default_kind = 'StorageUnavailable'
