# Identity mirror: users as supplied by the external identity provider

from flask_login import UserMixin
from focusroom.extensions import db
from focusroom.functions.clock import now_ms


class User(UserMixin, db.Model):
    # Keyed by the identity provider's stable subject
    id = db.Column(db.String(255), primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    initial = db.Column(db.String(4), nullable=False)
    avatar_url = db.Column(db.String(500), nullable=True)
    last_login_at = db.Column(db.BigInteger, default=now_ms)
