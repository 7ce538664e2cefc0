from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from arcade.errors import ValidationError
from arcade.services import ledger
from arcade.socketio_events import emit_balance_update, emit_leaderboard_update

games = Blueprint('games', __name__)
shop = Blueprint('shop', __name__)


@games.route('/catalog', methods=['GET'])
def get_catalog():
    return jsonify(ledger.catalog())


@games.route('/start', methods=['POST'])
@login_required
def start_game():
    data = request.get_json(silent=True) or {}
    receipt = ledger.start_game(current_user, data.get('game_name'))
    emit_balance_update(receipt.account)
    return jsonify(receipt.to_dict())


@games.route('/result', methods=['POST'])
@login_required
def record_result():
    data = request.get_json(silent=True) or {}
    if not data.get('game_name') or not isinstance(data.get('won'), bool):
        raise ValidationError('Missing required fields')
    account = ledger.record_outcome(
        current_user,
        data['game_name'],
        data['won'],
        data.get('points_earned'),
        data.get('time_taken'),
    )
    emit_balance_update(account)
    emit_leaderboard_update()
    return jsonify({'success': True, 'user': account.to_dict()})


@games.route('/history', methods=['GET'])
@login_required
def get_history():
    return jsonify([r.to_dict() for r in ledger.list_history(current_user)])


@shop.route('/buy-tokens', methods=['POST'])
@login_required
def buy_tokens():
    data = request.get_json(silent=True) or {}
    account = ledger.exchange_tokens_for_points(current_user, data.get('amount'))
    emit_balance_update(account)
    return jsonify({'success': True, 'tokens': account.tokens, 'points': account.points})
