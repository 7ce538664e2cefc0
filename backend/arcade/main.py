from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from arcade.services import accounts
from arcade.socketio_events import emit_balance_update

main = Blueprint('main', __name__)


@main.route('/api/health')
def health():
    return jsonify({'status': 'Server is running'})


@main.route('/api/auth/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    account, token = accounts.register(
        data.get('username'),
        data.get('email'),
        data.get('password'),
        data.get('display_name'),
    )
    return jsonify({'user': account.to_dict(), 'token': token}), 201


@main.route('/api/auth/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    account, token = accounts.authenticate(data.get('username'), data.get('password'))
    return jsonify({'user': account.to_dict(), 'token': token})


@main.route('/api/user', methods=['GET'])
@login_required
def get_self():
    return jsonify(current_user.to_dict())


@main.route('/api/user/display-name', methods=['PUT'])
@login_required
def update_display_name():
    data = request.get_json(silent=True) or {}
    account = accounts.update_display_name(current_user, data.get('display_name'))
    emit_balance_update(account)
    return jsonify(account.to_dict())
