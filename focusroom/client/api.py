# Thin requests-based wrapper around the room HTTP API
#
# Every method is one round trip. Error bodies are turned back into the
# domain exceptions from focusroom.errors so callers can catch RoomFull,
# StaleTimerWrite and friends directly.

import requests

from focusroom.errors import error_from_payload

DEFAULT_TIMEOUT = 10


class RoomApi:

    def __init__(self, base_url, session=None, timeout=DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        self.user = None

    @property
    def user_id(self):
        return self.user['id'] if self.user else None

    def _request(self, method, path, json=None, params=None, headers=None):
        resp = self.session.request(
            method, f"{self.base_url}{path}",
            json=json, params=params, headers=headers, timeout=self.timeout
        )
        try:
            data = resp.json() if resp.content else {}
        except ValueError:
            # Proxy error pages and the like; the status still maps to an error
            if resp.status_code < 400:
                raise
            data = {}
        if resp.status_code >= 400:
            raise error_from_payload(data, resp.status_code)
        return data

    def _get(self, path, params=None):
        return self._request('GET', path, params=params)

    def _post(self, path, json=None):
        return self._request('POST', path, json=json or {})

    def cookie_header(self):
        # Lets the Socket.IO connection reuse the signed-in Flask session
        return '; '.join(f"{name}={value}" for name, value in self.session.cookies.items())

    # --- identity ---

    def sign_in(self, subject, name, secret, initial=None, avatar_url=None):
        data = self._request(
            'POST', '/auth/session',
            json={'subject': subject, 'name': name, 'initial': initial, 'avatar_url': avatar_url},
            headers={'X-Identity-Secret': secret}
        )
        self.user = data['user']
        return self.user

    # --- rooms ---

    def list_rooms(self):
        return self._get('/rooms')['rooms']

    def get_room(self, room_id):
        return self._get(f"/room/{room_id}")['room']

    def create_room(self, name, visibility, theme, music_url=None, max_users=None):
        return self._post('/rooms/create', {
            'name': name, 'visibility': visibility, 'theme': theme,
            'music_url': music_url, 'max_users': max_users
        })['room_id']

    def update_room(self, room_id, **fields):
        return self._post(f"/room/{room_id}/update", fields)['room']

    def delete_room(self, room_id):
        return self._post(f"/room/{room_id}/delete")

    # --- presence ---

    def join(self, room_id, user_name, user_initial, user_avatar_url=None, join_code=None):
        return self._post(f"/room/{room_id}/join", {
            'join_code': join_code, 'user_name': user_name,
            'user_initial': user_initial, 'user_avatar_url': user_avatar_url
        })

    def leave_room(self, room_id):
        return self._post(f"/room/{room_id}/leave")

    def get_participants(self, room_id):
        return self._get(f"/room/{room_id}/participants")['participants']

    def update_position(self, room_id, x, y):
        return self._post(f"/room/{room_id}/position", {'x': x, 'y': y})

    def update_timer(self, room_id, timer_state, time_left, timer_type=None,
                     pomodoro_count=None, timer_version=None):
        return self._post(f"/room/{room_id}/timer", {
            'timer_state': timer_state, 'time_left': time_left, 'timer_type': timer_type,
            'pomodoro_count': pomodoro_count, 'timer_version': timer_version
        })

    def update_task(self, room_id, task):
        return self._post(f"/room/{room_id}/task", {'task': task})

    # --- sessions and leaderboards ---

    def save_pomodoro_session(self, room_id, timer_type, duration, task):
        return self._post(f"/room/{room_id}/sessions", {
            'timer_type': timer_type, 'duration': duration, 'task': task
        })

    def get_user_sessions(self, room_id):
        return self._get(f"/room/{room_id}/sessions/mine")['sessions']

    def get_leaderboard(self, room_id):
        return self._get(f"/room/{room_id}/leaderboard")['leaderboard']

    def get_global_leaderboard(self, period='lifetime'):
        return self._get('/leaderboard', params={'period': period})['leaderboard']

    # --- cursors and chat ---

    def update_cursor_position(self, room_id, cursor_x, cursor_y, typing_text=None):
        return self._post(f"/room/{room_id}/cursor", {
            'cursor_x': cursor_x, 'cursor_y': cursor_y, 'typing_text': typing_text
        })

    def get_cursor_positions(self, room_id):
        return self._get(f"/room/{room_id}/cursors")['cursors']

    def remove_cursor_position(self, room_id):
        return self._post(f"/room/{room_id}/cursor/remove")

    def send_chat_message(self, room_id, message, cursor_x, cursor_y):
        return self._post(f"/room/{room_id}/chat", {
            'message': message, 'cursor_x': cursor_x, 'cursor_y': cursor_y
        })['message']

    def get_chat_messages(self, room_id):
        return self._get(f"/room/{room_id}/chat")['messages']
