from flask_socketio import join_room, leave_room, emit
from arcade import socketio, store
from arcade.errors import Unauthorized
from arcade.models import Account, Role
from arcade.services.sessions import verify_token


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_account(data):
    """Subscribe this socket to balance updates for the token's account."""
    token = (data or {}).get('token')
    try:
        account_id = verify_token(token)
    except Unauthorized as exc:
        emit('error', {'message': exc.message})
        return
    account = store.get_account_by_id(account_id)
    if account is None or account.role is Role.BANNED:
        emit('error', {'message': 'Invalid token'})
        return
    room = _account_room(account.id)
    join_room(room)
    emit('joined', {'room': room})
    emit('balance_update', account.to_dict())


def handle_leave_account(data):
    token = (data or {}).get('token')
    try:
        account_id = verify_token(token)
    except Unauthorized as exc:
        emit('error', {'message': exc.message})
        return
    room = _account_room(account_id)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def _account_room(account_id: int) -> str:
    return f"account:{account_id}"


def emit_balance_update(account: Account) -> None:
    socketio.emit('balance_update', account.to_dict(), to=_account_room(account.id), namespace='/ws')


def emit_leaderboard_update() -> None:
    socketio.emit('leaderboard_update', {}, namespace='/ws')


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('join_account', handle_join_account, namespace='/ws')
    socketio.on_event('leave_account', handle_leave_account, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')

    if testing:
        socketio.on_event('connect', handle_connect, namespace='/')
        socketio.on_event('join_account', handle_join_account, namespace='/')
        socketio.on_event('leave_account', handle_leave_account, namespace='/')
        socketio.on_event('ping', handle_ping, namespace='/')
