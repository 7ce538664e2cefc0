from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from arcade.services import admin as authority
from arcade.socketio_events import emit_balance_update

admin = Blueprint('admin', __name__)


@admin.route('/users', methods=['GET'])
@login_required
def list_users():
    return jsonify([a.to_summary() for a in authority.list_accounts(current_user)])


@admin.route('/users/search/<string:username>', methods=['GET'])
@login_required
def search_users(username):
    return jsonify([a.to_summary() for a in authority.search_accounts(current_user, username)])


@admin.route('/user/change-role', methods=['POST'])
@login_required
def change_role():
    data = request.get_json(silent=True) or {}
    account = authority.change_role(current_user, data.get('targetUserId'), data.get('newRole'))
    emit_balance_update(account)
    return jsonify({'success': True, 'user': account.to_dict()})


@admin.route('/user/modify-resources', methods=['POST'])
@login_required
def modify_resources():
    data = request.get_json(silent=True) or {}
    account = authority.modify_resources(
        current_user,
        data.get('targetUserId'),
        data.get('tokensChange'),
        data.get('pointsChange'),
    )
    emit_balance_update(account)
    return jsonify({'success': True, 'user': account.to_dict()})
