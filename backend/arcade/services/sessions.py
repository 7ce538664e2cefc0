"""Credentials and session tokens.

Passwords are salted bcrypt digests. Session tokens are itsdangerous
timed signatures over ``{"id", "username"}``; only this module knows how to
read them.
"""

from typing import Optional

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from arcade import bcrypt
from arcade.errors import Unauthorized

_SALT = 'arcade-session-v1'


def hash_password(password: str) -> str:
    return bcrypt.generate_password_hash(password).decode('utf-8')


def verify_password(password: str, digest: str) -> bool:
    if not password or not digest:
        return False
    try:
        return bcrypt.check_password_hash(digest, password)
    except ValueError:
        # Malformed stored digest
        return False


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=_SALT)


def issue_token(account_id: int, username: str) -> str:
    return _serializer().dumps({'id': account_id, 'username': username})


def verify_token(token: Optional[str], max_age: Optional[int] = None) -> int:
    """Return the account id bound to ``token`` or raise ``Unauthorized``."""
    if not token:
        raise Unauthorized('No token provided')
    if max_age is None:
        max_age = int(current_app.config.get('SESSION_MAX_AGE_SEC', 7 * 24 * 3600))
    try:
        data = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        raise Unauthorized('Session expired')
    except BadSignature:
        raise Unauthorized('Invalid token')
    account_id = data.get('id') if isinstance(data, dict) else None
    if not isinstance(account_id, int):
        raise Unauthorized('Invalid token')
    return account_id


def bearer_token(header: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not header:
        return None
    scheme, _, value = header.partition(' ')
    if scheme.lower() != 'bearer' or not value.strip():
        return None
    return value.strip()
