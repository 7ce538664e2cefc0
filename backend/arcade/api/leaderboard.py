from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from arcade.services import leaderboard as board

leaderboard = Blueprint('leaderboard', __name__)


@leaderboard.route('', methods=['GET'])
def get_leaderboard():
    default_limit = int(current_app.config.get('LEADERBOARD_LIMIT', 100))
    limit = request.args.get('limit', default_limit, type=int)
    # Never serve more than the configured page
    limit = min(max(limit, 1), default_limit)
    return jsonify(board.top_n(limit))


@leaderboard.route('/rank', methods=['GET'])
@login_required
def get_rank():
    return jsonify(board.rank_of(current_user.id))
