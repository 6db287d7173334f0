# portal/models/user.py
from datetime import datetime, timezone

from flask_login import UserMixin

from portal import bcrypt, db
from portal.services.datastore import datastore


class User(UserMixin, db.Model):
    """A resident account (forum, bulletin board, preferences)."""

    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    username = db.Column(db.String(80), unique=True)
    password_hash = db.Column(db.String(200), nullable=False)
    preferred_language = db.Column(db.String(8), nullable=False, default='de')
    is_active_account = db.Column('is_active', db.Boolean, nullable=False, default=True)
    last_login = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    @property
    def is_active(self):
        return self.is_active_account

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'username': self.username,
            'preferred_language': self.preferred_language,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


def load_user(user_id):
    """Flask-Login loader; residents cannot be logged in while offline."""
    result = datastore.read(lambda session: session.get(User, int(user_id)))
    return result.value if result.available else None
