"""Leaderboard projection.

Accounts rank by points, highest first. Equal points go to the account that
registered earlier, then to the lower id, so the order never depends on
how the database happens to return rows.
"""

from typing import List, Optional

from flask import current_app

from arcade import store
from arcade.errors import NotFound


def top_n(limit: Optional[int] = None) -> List[dict]:
    if limit is None:
        limit = int(current_app.config.get('LEADERBOARD_LIMIT', 100))
    return store.aggregate_leaderboard(max(0, limit))


def rank_of(account_id: int) -> dict:
    account = store.get_account_by_id(account_id)
    if account is None:
        raise NotFound('User not found')
    stats = store.account_game_stats(account.id)
    return {
        'rank': store.count_accounts_ahead(account) + 1,
        'points': account.points,
        'wins': stats['wins'],
        'total_games': stats['total_games'],
    }
