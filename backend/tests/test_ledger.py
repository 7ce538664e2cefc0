import random
from concurrent.futures import ThreadPoolExecutor

import pytest

from arcade.errors import InsufficientFunds, InvalidAmount, NotFound, ValidationError
from arcade.models import GameResult
from arcade.services import ledger


@pytest.mark.parametrize('elapsed, points', [
    (0, 150),
    (10, 130),
    (24.75, 101),  # 150 - 49.5 rounds half up
    (50, 50),
    (60, 50),
    (200, 50),
])
def test_match_cards_reward(elapsed, points):
    assert ledger.match_cards_reward(elapsed) == points


def test_reaction_accuracy_and_win():
    assert ledger.reaction_accuracy(400) == 100
    assert ledger.reaction_won(400)
    assert ledger.reaction_accuracy(700) == 0
    assert not ledger.reaction_won(700)
    # exactly 50 is not enough
    assert ledger.reaction_accuracy(500) == 50
    assert not ledger.reaction_won(500)
    assert ledger.reaction_won(301)


def test_reward_for():
    assert ledger.reward_for('coinFlip', True) == 50
    assert ledger.reward_for('numberGuess', True) == 100
    assert ledger.reward_for('reaction', True) == 75
    assert ledger.reward_for('matchCards', True, 0) == 150
    for key in ledger.GAMES:
        assert ledger.reward_for(key, False, 1.0) == 0
    with pytest.raises(ValidationError):
        ledger.reward_for('poker', True)


def test_start_game_debits_wager(make_account):
    alice, _ = make_account('alice')
    receipt = ledger.start_game(alice, 'reaction')
    assert receipt.wager_applied == 15
    assert receipt.account.tokens == 985
    assert alice.tokens == 985


def test_start_game_insufficient_funds_leaves_balance(make_account):
    from arcade import db, store
    alice, _ = make_account('alice')
    store.update_account_balances(alice.id, tokens_delta=-991)
    db.session.commit()
    with pytest.raises(InsufficientFunds):
        ledger.start_game(alice, 'coinFlip')
    assert alice.tokens == 9


def test_record_outcome_counts_are_monotonic(make_account):
    from arcade.services.leaderboard import rank_of
    alice, _ = make_account('alice')
    rng = random.Random(7)
    outcomes = [rng.random() < 0.5 for _ in range(25)]
    expected_points = 0
    for won in outcomes:
        account = ledger.record_outcome(alice, 'coinFlip', won, 50)
        expected_points += 50 if won else 0
        assert account.points == expected_points

    stats = rank_of(alice.id)
    assert stats['total_games'] == len(outcomes)
    assert stats['wins'] == sum(outcomes)


def test_record_outcome_rejects_bad_input(make_account):
    alice, _ = make_account('alice')
    with pytest.raises(ValidationError):
        ledger.record_outcome(alice, 'coinFlip', True, -5)
    with pytest.raises(ValidationError):
        ledger.record_outcome(alice, 'coinFlip', 1, 5)
    with pytest.raises(ValidationError):
        ledger.record_outcome(alice, 'matchCards', True, 100, elapsed=-1)
    assert alice.points == 0
    assert ledger.list_history(alice) == []


def test_record_outcome_stores_elapsed(make_account):
    alice, _ = make_account('alice')
    ledger.record_outcome(alice, 'matchCards', True, elapsed=12.5)
    [row] = ledger.list_history(alice)
    assert row.time_taken == 12.5
    assert row.points_earned == 125
    assert row.game_name == 'matchCards'


def test_exchange_is_exact(make_account):
    alice, _ = make_account('alice')
    ledger.record_outcome(alice, 'numberGuess', True, 100)
    account = ledger.exchange_tokens_for_points(alice, 7)
    assert account.points == 30
    assert account.tokens == 1007


def test_exchange_fails_atomically(make_account):
    alice, _ = make_account('alice')
    ledger.record_outcome(alice, 'coinFlip', True, 50)
    with pytest.raises(InsufficientFunds):
        ledger.exchange_tokens_for_points(alice, 6)
    assert (alice.tokens, alice.points) == (1000, 50)


@pytest.mark.parametrize('amount', [0, -3, None, 1.5, '2', True])
def test_exchange_invalid_amount(make_account, amount):
    alice, _ = make_account('alice')
    with pytest.raises(InvalidAmount):
        ledger.exchange_tokens_for_points(alice, amount)


def test_balances_never_negative_under_random_play(make_account):
    alice, _ = make_account('alice')
    rng = random.Random(2024)
    for _ in range(200):
        move = rng.choice(['start', 'result', 'exchange'])
        try:
            if move == 'start':
                ledger.start_game(alice, rng.choice(list(ledger.GAMES)))
            elif move == 'result':
                ledger.record_outcome(alice, 'coinFlip', rng.random() < 0.3, rng.randint(0, 60))
            else:
                ledger.exchange_tokens_for_points(alice, rng.randint(1, 20))
        except InsufficientFunds:
            pass
        assert alice.tokens >= 0
        assert alice.points >= 0


def test_out_of_range_amounts(make_account):
    from arcade import db, store
    alice, _ = make_account('alice')
    with pytest.raises(InsufficientFunds):
        ledger.exchange_tokens_for_points(alice, 2 ** 64)
    with pytest.raises(InvalidAmount):
        ledger.record_outcome(alice, 'coinFlip', True, 2 ** 64)

    store.update_account_balances(alice.id, tokens_delta=store.BALANCE_MAX - 1000, points_delta=store.BALANCE_MAX)
    db.session.commit()
    # points cover the cost, but the token balance would pass the column limit
    with pytest.raises(InvalidAmount):
        ledger.exchange_tokens_for_points(alice, 1)
    assert (alice.tokens, alice.points) == (store.BALANCE_MAX, store.BALANCE_MAX)


def test_failed_credit_rolls_back_result_row(make_account):
    from arcade import db, store
    alice, _ = make_account('alice')
    store.update_account_balances(alice.id, points_delta=store.BALANCE_MAX - 10)
    db.session.commit()

    # the result row is flushed before the credit is refused
    with pytest.raises(InvalidAmount):
        ledger.record_outcome(alice, 'coinFlip', True, 50)
    assert alice.points == store.BALANCE_MAX - 10
    assert ledger.list_history(alice) == []
    assert GameResult.query.count() == 0


def test_result_for_vanished_account_is_rolled_back(make_account, monkeypatch):
    from arcade import store
    alice, _ = make_account('alice')
    monkeypatch.setattr(store, 'update_account_balances', lambda *args, **kwargs: False)
    monkeypatch.setattr(store, 'get_account_by_id', lambda account_id: None)

    with pytest.raises(NotFound):
        ledger.record_outcome(alice, 'coinFlip', True, 50)
    monkeypatch.undo()
    assert GameResult.query.count() == 0
    assert store.get_account_by_id(alice.id).points == 0


def test_concurrent_play_loses_no_updates(tmp_path):
    from conftest import TestConfig
    from arcade import create_app, db, store
    from arcade.services import accounts
    from arcade.services.leaderboard import rank_of

    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'arcade.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {'connect_args': {'timeout': 30}}

    application = create_app(FileConfig)
    with application.app_context():
        db.create_all()
        alice, _ = accounts.register('alice', 'alice@x.com', 'pw123')
        alice_id = alice.id

    workers, rounds = 4, 10

    def play(_):
        with application.app_context():
            account = store.get_account_by_id(alice_id)
            for _ in range(rounds):
                ledger.start_game(account, 'coinFlip')
                ledger.record_outcome(account, 'coinFlip', True, 50)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        list(pool.map(play, range(workers)))

    with application.app_context():
        account = store.get_account_by_id(alice_id)
        games = workers * rounds
        assert account.tokens == 1000 - 10 * games
        assert account.points == 50 * games
        assert rank_of(alice_id)['total_games'] == games
        db.drop_all()
        db.engine.dispose()
