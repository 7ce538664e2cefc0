"""Ledger store: row-level reads and writes for accounts and game results.

Nothing here commits. Callers in ``arcade.services`` group the calls that
belong to one mutation and commit (or roll back) them together.
"""

from typing import List, Optional

import sqlalchemy as sa

from arcade import db
from arcade.models import Account, GameResult, Role, utcnow


def get_account_by_id(account_id: int) -> Optional[Account]:
    return db.session.get(Account, account_id)


def get_account_by_username(username: str) -> Optional[Account]:
    return Account.query.filter_by(username=username).first()


def get_account_by_email(email: str) -> Optional[Account]:
    return Account.query.filter(sa.func.lower(Account.email) == email.lower()).first()


def insert_account(username: str, email: str, password_hash: str, display_name: str, tokens: int) -> int:
    account = Account(
        username=username,
        email=email,
        password_hash=password_hash,
        display_name=display_name,
        tokens=tokens,
        points=0,
        role=Role.PLAYER,
    )
    db.session.add(account)
    db.session.flush()
    return account.id


BALANCE_MAX = 2 ** 31 - 1


def _fits(column, delta: int):
    # Compare against constants only so the database never evaluates an
    # out-of-range sum.
    if delta >= 0:
        return column <= BALANCE_MAX - delta
    return column >= -delta


def update_account_balances(account_id: int, tokens_delta: int = 0, points_delta: int = 0) -> bool:
    """Apply both deltas in one UPDATE evaluated by the database.

    The WHERE clause refuses any change that would leave a balance negative
    or above ``BALANCE_MAX``, so a False return means the account is gone or
    the change does not fit.
    """
    if abs(tokens_delta) > BALANCE_MAX or abs(points_delta) > BALANCE_MAX:
        return False
    stmt = (
        sa.update(Account)
        .where(
            Account.id == account_id,
            _fits(Account.tokens, tokens_delta),
            _fits(Account.points, points_delta),
        )
        .values(
            tokens=Account.tokens + tokens_delta,
            points=Account.points + points_delta,
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    return result.rowcount == 1


def update_account_role(account_id: int, role: Role) -> bool:
    stmt = (
        sa.update(Account)
        .where(Account.id == account_id)
        .values(role=role, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return db.session.execute(stmt).rowcount == 1


def update_display_name(account_id: int, display_name: str) -> bool:
    stmt = (
        sa.update(Account)
        .where(Account.id == account_id)
        .values(display_name=display_name, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return db.session.execute(stmt).rowcount == 1


def insert_game_result(account_id: int, game_name: str, won: bool, points_earned: int,
                       time_taken: Optional[float] = None) -> GameResult:
    result = GameResult(
        account_id=account_id,
        game_name=game_name,
        won=won,
        points_earned=points_earned,
        time_taken=time_taken,
    )
    db.session.add(result)
    db.session.flush()
    return result


def list_game_results_by_account(account_id: int, limit: int) -> List[GameResult]:
    return (
        GameResult.query.filter_by(account_id=account_id)
        .order_by(GameResult.created_at.desc(), GameResult.id.desc())
        .limit(limit)
        .all()
    )


def search_accounts(substring: str, limit: int) -> List[Account]:
    pattern = f"%{_escape_like(substring.lower())}%"
    return (
        Account.query.filter(sa.func.lower(Account.username).like(pattern, escape='\\'))
        .order_by(Account.username)
        .limit(limit)
        .all()
    )


def list_accounts() -> List[Account]:
    return Account.query.order_by(Account.username).all()


# Leaderboard ordering: points desc, then earlier registration, then lower id
_LEADERBOARD_ORDER = (Account.points.desc(), Account.created_at.asc(), Account.id.asc())


def _stats_columns():
    wins = sa.func.count(sa.case((GameResult.won.is_(True), 1))).label('wins')
    total = sa.func.count(GameResult.id).label('total_games')
    return wins, total


def aggregate_leaderboard(limit: int) -> List[dict]:
    wins, total = _stats_columns()
    rows = (
        db.session.query(
            Account.id, Account.username, Account.display_name, Account.points, wins, total,
        )
        .outerjoin(GameResult, GameResult.account_id == Account.id)
        .group_by(Account.id, Account.username, Account.display_name, Account.points, Account.created_at)
        .order_by(*_LEADERBOARD_ORDER)
        .limit(limit)
        .all()
    )
    return [
        {
            'id': r.id,
            'username': r.username,
            'display_name': r.display_name,
            'points': r.points,
            'wins': r.wins,
            'total_games': r.total_games,
        }
        for r in rows
    ]


def account_game_stats(account_id: int) -> dict:
    wins, total = _stats_columns()
    row = db.session.query(wins, total).filter(GameResult.account_id == account_id).one()
    return {'wins': row.wins, 'total_games': row.total_games}


def count_accounts_ahead(account: Account) -> int:
    """Accounts that sort strictly before ``account`` in leaderboard order."""
    same_points = Account.points == account.points
    earlier = sa.or_(
        Account.created_at < account.created_at,
        sa.and_(Account.created_at == account.created_at, Account.id < account.id),
    )
    return Account.query.filter(
        sa.or_(Account.points > account.points, sa.and_(same_points, earlier))
    ).count()


def _escape_like(value: str) -> str:
    return value.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
