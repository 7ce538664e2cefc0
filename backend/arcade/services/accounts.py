from typing import Optional, Tuple

from flask import current_app
from sqlalchemy.exc import IntegrityError

from arcade import db, store
from arcade.errors import Conflict, Forbidden, NotFound, Unauthorized, ValidationError
from arcade.models import Account, Role
from arcade.services.sessions import hash_password, issue_token, verify_password

DISPLAY_NAME_MAX = 64


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ''


def register(username, email, password, display_name=None) -> Tuple[Account, str]:
    """Create a player account with the starting balances and sign a session for it."""
    username, email = _clean(username), _clean(email)
    if not username or not email or not isinstance(password, str) or not password:
        raise ValidationError('Missing required fields')
    if len(username) > 64 or len(email) > 120:
        raise ValidationError('Username or email too long')
    if store.get_account_by_username(username) or store.get_account_by_email(email):
        raise Conflict('Username or email already exists')

    display_name = _clean(display_name)[:DISPLAY_NAME_MAX] or username
    starting_tokens = int(current_app.config.get('STARTING_TOKENS', 1000))
    try:
        account_id = store.insert_account(
            username=username,
            email=email,
            password_hash=hash_password(password),
            display_name=display_name,
            tokens=starting_tokens,
        )
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration
        db.session.rollback()
        raise Conflict('Username or email already exists')

    account = store.get_account_by_id(account_id)
    current_app.logger.info(f"[register] account={account.id} username={account.username}")
    return account, issue_token(account.id, account.username)


def authenticate(username, password) -> Tuple[Account, str]:
    username = _clean(username)
    if not username or not isinstance(password, str) or not password:
        raise ValidationError('Missing username or password')
    account = store.get_account_by_username(username)
    if account is None or not verify_password(password, account.password_hash):
        current_app.logger.warning(f"[login-failed] username={username}")
        raise Unauthorized('Invalid credentials')
    if account.role is Role.BANNED:
        current_app.logger.warning(f"[login-banned] account={account.id}")
        raise Forbidden('Your account has been banned')
    return account, issue_token(account.id, account.username)


def get_account(account_id: int) -> Account:
    account = store.get_account_by_id(account_id)
    if account is None:
        raise NotFound('User not found')
    return account


def update_display_name(account: Account, display_name) -> Account:
    display_name = _clean(display_name)
    if not display_name:
        raise ValidationError('Display name is required')
    if not store.update_display_name(account.id, display_name[:DISPLAY_NAME_MAX]):
        db.session.rollback()
        raise NotFound('User not found')
    db.session.commit()
    return get_account(account.id)


def ensure_owner(username: str) -> Optional[Account]:
    """Promote ``username`` to owner if that account exists."""
    account = store.get_account_by_username(username)
    if account is None:
        return None
    if account.role is not Role.OWNER:
        store.update_account_role(account.id, Role.OWNER)
        db.session.commit()
        current_app.logger.info(f"[owner] account={account.id} username={username} promoted to owner")
    return get_account(account.id)
