import enum
from datetime import datetime, timezone

from arcade import db
from flask_login import UserMixin


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Role(enum.Enum):
    """Authorization level, ordered by ``rank``: banned < muted < player < admin < owner."""

    BANNED = 'banned'
    MUTED = 'muted'
    PLAYER = 'player'
    ADMIN = 'admin'
    OWNER = 'owner'

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    @classmethod
    def parse(cls, value) -> 'Role':
        """Strict lookup; raises ``ValueError`` for anything outside the enum."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f'Invalid role: {value!r}')
        return cls(value.strip().lower())


_ROLE_RANK = {
    Role.BANNED: 0,
    Role.MUTED: 1,
    Role.PLAYER: 2,
    Role.ADMIN: 3,
    Role.OWNER: 4,
}


class Account(UserMixin, db.Model):
    __tablename__ = 'account'
    __table_args__ = (
        db.CheckConstraint('tokens >= 0', name='ck_account_tokens_nonnegative'),
        db.CheckConstraint('points >= 0', name='ck_account_points_nonnegative'),
    )
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    display_name = db.Column(db.String(64), nullable=True)
    tokens = db.Column(db.Integer, nullable=False, default=0)
    points = db.Column(db.Integer, nullable=False, default=0)
    role = db.Column(
        db.Enum(Role, name='account_role', values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.PLAYER,
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    results = db.relationship(
        'GameResult', back_populates='account', lazy='dynamic',
        cascade='all, delete-orphan', passive_deletes=True,
    )

    @property
    def can_chat(self) -> bool:
        return self.role not in (Role.MUTED, Role.BANNED)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'display_name': self.display_name,
            'tokens': self.tokens,
            'points': self.points,
            'role': self.role.value,
            'can_chat': self.can_chat,
        }

    def to_summary(self):
        """Row shape for the admin panel."""
        return {
            'id': self.id,
            'username': self.username,
            'display_name': self.display_name,
            'tokens': self.tokens,
            'points': self.points,
            'role': self.role.value,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class GameResult(db.Model):
    __tablename__ = 'game_result'
    __table_args__ = (
        db.CheckConstraint('points_earned >= 0', name='ck_game_result_points_nonnegative'),
    )
    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(
        db.Integer, db.ForeignKey('account.id', ondelete='CASCADE'), nullable=False, index=True
    )
    game_name = db.Column(db.String(64), nullable=False)
    won = db.Column(db.Boolean, nullable=False)
    points_earned = db.Column(db.Integer, nullable=False, default=0)
    time_taken = db.Column(db.Float, nullable=True)  # seconds, timed games only
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    account = db.relationship('Account', back_populates='results')

    def to_dict(self):
        return {
            'id': self.id,
            'game_name': self.game_name,
            'won': self.won,
            'points_earned': self.points_earned,
            'time_taken': self.time_taken,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
