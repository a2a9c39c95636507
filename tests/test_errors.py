import pytest

from focusroom.errors import (
    RoomError, RoomFull, StaleTimerWrite, ValidationError, error_from_payload
)
from focusroom.functions.validation import (
    require_string, optional_string, require_number, require_int, optional_int, require_choice
)


def test_error_body_shape():
    err = StaleTimerWrite(payload={'timer': {'timer_version': 3}})
    assert err.to_dict() == {
        'error': 'Timer was changed elsewhere',
        'code': 'StaleTimerWrite',
        'timer': {'timer_version': 3},
    }


def test_error_from_payload_restores_class_and_payload():
    err = error_from_payload({'error': 'Room is full', 'code': 'RoomFull'}, 409)
    assert isinstance(err, RoomFull)
    assert err.message == 'Room is full'

    err = error_from_payload({'error': 'old', 'code': 'StaleTimerWrite', 'timer': {'time_left': 5}})
    assert err.payload == {'timer': {'time_left': 5}}


def test_unknown_error_keeps_status():
    err = error_from_payload(None, 502)
    assert type(err) is RoomError
    assert err.status_code == 502


def test_require_string():
    assert require_string({'name': 'Deep'}, 'name') == 'Deep'
    assert require_string({'task': ''}, 'task', allow_empty=True) == ''
    for data in ({}, {'name': '  '}, {'name': 3}):
        with pytest.raises(ValidationError):
            require_string(data, 'name')
    with pytest.raises(ValidationError):
        require_string({'name': 'abcdef'}, 'name', max_length=5)
    assert optional_string({'code': None}, 'code') is None


def test_require_number_rejects_bools_and_nan():
    assert require_number({'x': 12.5}, 'x') == 12.5
    for value in (True, 'left', float('nan'), float('inf'), None):
        with pytest.raises(ValidationError):
            require_number({'x': value}, 'x')


def test_require_int():
    assert require_int({'n': 3.0}, 'n') == 3
    assert optional_int({}, 'n') is None
    for value in (2.5, False, '3'):
        with pytest.raises(ValidationError):
            require_int({'n': value}, 'n')
    with pytest.raises(ValidationError):
        require_int({'n': -1}, 'n', minimum=0)


def test_require_choice():
    assert require_choice({'v': 'public'}, 'v', ('public', 'private')) == 'public'
    with pytest.raises(ValidationError):
        require_choice({'v': 'hidden'}, 'v', ('public', 'private'))
