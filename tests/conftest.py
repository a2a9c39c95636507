import pytest

from focusroom import create_app
from focusroom.extensions import db
from focusroom.functions import clock

IDENTITY_SECRET = 'test-identity-secret'
START_MS = 1_760_000_000_000


class FocusroomTestConfig:
    TESTING = True
    SECRET_KEY = 'test'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    IDENTITY_SHARED_SECRET = IDENTITY_SECRET
    SOCKETIO_ASYNC_MODE = 'threading'
    LOG_LEVEL = 'WARNING'


class FakeClock:
    def __init__(self, ms):
        self.ms = ms

    def __call__(self):
        return self.ms

    def advance(self, ms):
        self.ms += ms


@pytest.fixture
def app():
    flask_app = create_app(FocusroomTestConfig)
    yield flask_app
    with flask_app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def fake_clock(monkeypatch):
    fake = FakeClock(START_MS)
    monkeypatch.setattr(clock, 'now_ms', fake)
    return fake


def sign_in(client, subject, name=None, avatar_url=None):
    resp = client.post('/auth/session', json={
        'subject': subject,
        'name': name or subject.capitalize(),
        'avatar_url': avatar_url,
    }, headers={'X-Identity-Secret': IDENTITY_SECRET})
    assert resp.status_code == 200, resp.get_json()
    return client


@pytest.fixture
def make_client(app):
    # One cookie jar per user
    def _make(subject=None, **kwargs):
        client = app.test_client()
        if subject:
            sign_in(client, subject, **kwargs)
        return client
    return _make


@pytest.fixture
def alice(make_client):
    return make_client('alice')


@pytest.fixture
def bob(make_client):
    return make_client('bob')


def create_room(client, name='Deep Work', visibility='public', theme='lotus', **extra):
    payload = {'name': name, 'visibility': visibility, 'theme': theme}
    payload.update(extra)
    resp = client.post('/rooms/create', json=payload)
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()['room_id']


def join_room(client, room_id, name='User', initial='U', join_code=None, avatar_url=None):
    return client.post(f'/room/{room_id}/join', json={
        'user_name': name,
        'user_initial': initial,
        'join_code': join_code,
        'user_avatar_url': avatar_url,
    })
