"""Wager and reward rules.

Starting a game debits its fixed wager in tokens; reporting an outcome
appends a result row and credits the earned points; the shop turns points
back into tokens. Every balance change goes through
``store.update_account_balances`` so the database evaluates the arithmetic
and refuses anything that would leave a balance negative or past
``store.BALANCE_MAX``.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from flask import current_app

from arcade import db, store
from arcade.errors import InsufficientFunds, InvalidAmount, NotFound, ValidationError
from arcade.models import Account, GameResult


@dataclass(frozen=True)
class GameKind:
    key: str
    name: str
    wager: int
    min_wager: int
    max_wager: int
    win_multiplier: float
    points_reward: int
    time_scaled: bool = False

    def to_dict(self):
        return {
            'key': self.key,
            'name': self.name,
            'wager': self.wager,
            'min_wager': self.min_wager,
            'max_wager': self.max_wager,
            'win_multiplier': self.win_multiplier,
            'points_reward': self.points_reward,
            'time_scaled': self.time_scaled,
        }


GAMES: Dict[str, GameKind] = {
    'coinFlip': GameKind('coinFlip', 'Coin Flip', 10, 5, 500, 2, 50),
    'numberGuess': GameKind('numberGuess', 'Number Guess', 10, 5, 500, 3, 100),
    'reaction': GameKind('reaction', 'Reaction Time', 15, 10, 500, 2.5, 75),
    'matchCards': GameKind('matchCards', 'Match Cards', 20, 15, 500, 2.5, 150, time_scaled=True),
}

REACTION_TARGET_MS = 400
MATCH_CARDS_PAIRS = 6
MATCH_CARDS_FLOOR = 50
MATCH_CARDS_PENALTY_PER_SEC = 2


@dataclass
class WagerReceipt:
    game: GameKind
    wager_applied: int
    account: Account

    def to_dict(self):
        return {
            'game': self.game.key,
            'wager_applied': self.wager_applied,
            'user': self.account.to_dict(),
        }


def get_game(game_kind) -> GameKind:
    game = GAMES.get(game_kind) if isinstance(game_kind, str) else None
    if game is None:
        raise ValidationError(f'Unknown game: {game_kind}')
    return game


def catalog() -> List[dict]:
    return [g.to_dict() for g in GAMES.values()]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def match_cards_reward(elapsed_seconds: float) -> int:
    """150 points for an instant clear, minus 2 per second, never below 50."""
    base = GAMES['matchCards'].points_reward
    return max(MATCH_CARDS_FLOOR, _round_half_up(base - MATCH_CARDS_PENALTY_PER_SEC * elapsed_seconds))


def reaction_accuracy(reaction_ms: float, target_ms: float = REACTION_TARGET_MS) -> float:
    return max(0, 100 - abs(reaction_ms - target_ms) / 2)


def reaction_won(reaction_ms: float, target_ms: float = REACTION_TARGET_MS) -> bool:
    return reaction_accuracy(reaction_ms, target_ms) > 50


def reward_for(game_kind: str, won: bool, elapsed_seconds: Optional[float] = None) -> int:
    """Points a finished game is worth. Losses are always worth nothing."""
    game = get_game(game_kind)
    if not won:
        return 0
    if game.time_scaled:
        return match_cards_reward(elapsed_seconds or 0)
    return game.points_reward


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _refreshed(account_id: int) -> Account:
    account = store.get_account_by_id(account_id)
    if account is None:
        raise NotFound('User not found')
    return account


def start_game(account: Account, game_kind: str) -> WagerReceipt:
    game = get_game(game_kind)
    if not store.update_account_balances(account.id, tokens_delta=-game.wager):
        db.session.rollback()
        current = _refreshed(account.id)
        raise InsufficientFunds(
            f'You need {game.wager} tokens to play {game.name}. You only have {current.tokens}.',
            {'required': game.wager, 'tokens': current.tokens},
        )
    db.session.commit()
    current_app.logger.info(f"[wager] account={account.id} game={game.key} debited={game.wager}")
    return WagerReceipt(game=game, wager_applied=game.wager, account=_refreshed(account.id))


def record_outcome(account: Account, game_kind: str, won, points_earned=None,
                   elapsed: Optional[float] = None) -> Account:
    game = get_game(game_kind)
    if not isinstance(won, bool):
        raise ValidationError('won must be true or false')
    if elapsed is not None:
        if isinstance(elapsed, bool) or not isinstance(elapsed, (int, float)) or elapsed < 0:
            raise ValidationError('time_taken must be a non-negative number of seconds')
        elapsed = float(elapsed)
    if points_earned is None:
        points_earned = reward_for(game.key, won, elapsed)
    elif not _is_int(points_earned) or points_earned < 0:
        raise ValidationError('points_earned must be a non-negative integer')
    elif points_earned > store.BALANCE_MAX:
        raise InvalidAmount(f'points_earned cannot exceed {store.BALANCE_MAX}')
    if not won:
        points_earned = 0

    store.insert_game_result(account.id, game.key, won, points_earned, elapsed)
    if not store.update_account_balances(account.id, points_delta=points_earned):
        db.session.rollback()
        current = _refreshed(account.id)
        raise InvalidAmount(f'Point balance cannot exceed {store.BALANCE_MAX}', {'points': current.points})
    db.session.commit()
    current_app.logger.info(
        f"[outcome] account={account.id} game={game.key} won={won} points={points_earned} elapsed={elapsed}"
    )
    return _refreshed(account.id)


def exchange_tokens_for_points(account: Account, token_amount) -> Account:
    """Buy ``token_amount`` tokens at ``EXCHANGE_RATE`` points each."""
    if not _is_int(token_amount) or token_amount < 1:
        raise InvalidAmount('Invalid amount')
    rate = int(current_app.config.get('EXCHANGE_RATE', 10))
    cost = token_amount * rate
    if not store.update_account_balances(account.id, tokens_delta=token_amount, points_delta=-cost):
        db.session.rollback()
        current = _refreshed(account.id)
        if current.points < cost:
            raise InsufficientFunds('Not enough points', {'cost': cost, 'points': current.points})
        raise InvalidAmount(f'Token balance cannot exceed {store.BALANCE_MAX}', {'tokens': current.tokens})
    db.session.commit()
    current_app.logger.info(f"[exchange] account={account.id} tokens=+{token_amount} points=-{cost}")
    return _refreshed(account.id)


def list_history(account: Account, limit: Optional[int] = None) -> List[GameResult]:
    if limit is None:
        limit = int(current_app.config.get('HISTORY_LIMIT', 50))
    return store.list_game_results_by_account(account.id, limit)
