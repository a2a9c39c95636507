# Domain errors raised by the room API
#
# Route code raises these; the handler registered in create_app turns them into
# {'error': message, 'code': kind} JSON responses. The client API maps the code
# back onto the same classes.

from flask import jsonify


class RoomError(Exception):
    code = 'RoomError'
    status_code = 400
    default_message = 'Request failed'

    def __init__(self, message=None, payload=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.payload = payload or {}

    def to_dict(self):
        data = {'error': self.message, 'code': self.code}
        data.update(self.payload)
        return data


class NotAuthenticated(RoomError):
    code = 'NotAuthenticated'
    status_code = 401
    default_message = 'Not authenticated'


class ValidationError(RoomError):
    code = 'ValidationError'
    status_code = 400
    default_message = 'Invalid request'


class NotAuthorized(RoomError):
    code = 'NotAuthorized'
    status_code = 403
    default_message = 'Not authorized'


class InvalidJoinCode(RoomError):
    code = 'InvalidJoinCode'
    status_code = 403
    default_message = 'Invalid join code'


class NotFound(RoomError):
    code = 'NotFound'
    status_code = 404
    default_message = 'Not found'


class RoomFull(RoomError):
    code = 'RoomFull'
    status_code = 409
    default_message = 'Room is full'


class StaleTimerWrite(RoomError):
    # A timer write carried an older version than the stored one
    code = 'StaleTimerWrite'
    status_code = 409
    default_message = 'Timer was changed elsewhere'


ERRORS_BY_CODE = {
    cls.code: cls for cls in (
        NotAuthenticated, ValidationError, NotAuthorized,
        InvalidJoinCode, NotFound, RoomFull, StaleTimerWrite
    )
}


def error_from_payload(data, status_code=None):
    # Rebuild a domain error from a JSON error body
    data = dict(data or {})
    message = data.pop('error', None)
    cls = ERRORS_BY_CODE.get(data.pop('code', None), RoomError)
    err = cls(message, payload=data)
    if cls is RoomError and status_code:
        err.status_code = status_code
    return err


def register_error_handlers(flask_app):
    @flask_app.errorhandler(RoomError)
    def _room_error(err):
        return jsonify(err.to_dict()), err.status_code
