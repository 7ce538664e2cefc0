"""Admin authority: who may change another account's role or balances."""

from typing import List, Optional

from flask import current_app

from arcade import db, store
from arcade.errors import Forbidden, InsufficientFunds, InvalidAmount, NotFound, ValidationError
from arcade.models import Account, Role

_MANAGER_ROLES = frozenset({Role.ADMIN, Role.OWNER})


def can_manage(actor_role) -> bool:
    return Role.parse(actor_role) in _MANAGER_ROLES


def can_modify_target(actor_role, target_role) -> bool:
    actor, target = Role.parse(actor_role), Role.parse(target_role)
    if actor is Role.OWNER:
        return True
    if actor is Role.ADMIN:
        return target is not Role.OWNER
    if actor in (Role.PLAYER, Role.MUTED, Role.BANNED):
        return False
    raise ValueError(f'Unhandled role: {actor!r}')


def _require_manager(actor: Account) -> None:
    if not can_manage(actor.role):
        current_app.logger.warning(f"[admin-denied] account={actor.id} role={actor.role.value}")
        raise Forbidden('Insufficient permissions')


def _authorize_target(actor: Account, target_id) -> Account:
    if isinstance(target_id, bool) or not isinstance(target_id, int):
        raise ValidationError('Invalid target user ID')
    target = store.get_account_by_id(target_id)
    if target is None:
        raise NotFound('User not found')
    if not can_modify_target(actor.role, target.role):
        current_app.logger.warning(
            f"[admin-denied] actor={actor.id} role={actor.role.value} target={target.id} target_role={target.role.value}"
        )
        raise Forbidden('Cannot modify owner accounts')
    return target


def change_role(actor: Account, target_id, new_role) -> Account:
    _require_manager(actor)
    try:
        new_role = Role.parse(new_role)
    except ValueError:
        raise ValidationError('Invalid role')
    target = _authorize_target(actor, target_id)
    if actor.role is Role.ADMIN and new_role is Role.OWNER:
        current_app.logger.warning(f"[admin-denied] actor={actor.id} tried to grant owner to {target.id}")
        raise Forbidden('Only owners can promote to owner')

    old_role = target.role
    store.update_account_role(target.id, new_role)
    db.session.commit()
    current_app.logger.info(
        f"[role-change] actor={actor.id} target={target_id} {old_role.value} -> {new_role.value}"
    )
    return store.get_account_by_id(target_id)


def _check_delta(value) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount('Changes must be whole numbers')
    return value


def modify_resources(actor: Account, target_id, tokens_delta: Optional[int] = None,
                     points_delta: Optional[int] = None) -> Account:
    _require_manager(actor)
    target = _authorize_target(actor, target_id)
    if tokens_delta is None and points_delta is None:
        raise InvalidAmount('No resource changes given')
    tokens_change, points_change = _check_delta(tokens_delta), _check_delta(points_delta)

    if not store.update_account_balances(target.id, tokens_delta=tokens_change, points_delta=points_change):
        db.session.rollback()
        current = store.get_account_by_id(target.id)
        if current is None:
            raise NotFound('User not found')
        if current.tokens + tokens_change < 0 or current.points + points_change < 0:
            raise InsufficientFunds('Resources cannot go below 0')
        raise InvalidAmount(f'Resources cannot exceed {store.BALANCE_MAX}')
    db.session.commit()
    current_app.logger.info(
        f"[resources] actor={actor.id} target={target_id} tokens={tokens_change:+d} points={points_change:+d}"
    )
    return store.get_account_by_id(target_id)


def search_accounts(actor: Account, username_substring) -> List[Account]:
    _require_manager(actor)
    text = username_substring.strip() if isinstance(username_substring, str) else ''
    if not text:
        raise ValidationError('Search text is required')
    limit = int(current_app.config.get('ADMIN_SEARCH_LIMIT', 20))
    return store.search_accounts(text, limit)


def list_accounts(actor: Account) -> List[Account]:
    _require_manager(actor)
    return store.list_accounts()
