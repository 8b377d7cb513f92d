import logging

from flask_socketio import emit, join_room, leave_room

from gamefeed import get_simulation, socketio

logger = logging.getLogger(__name__)

NAMESPACE = '/ws'


def broadcast_status(phase) -> None:
    """Push the match phase to every connected client.

    Called from request handlers and from the clock task, so it uses
    ``socketio.emit`` rather than the request-bound ``emit``.
    """
    try:
        socketio.emit('game_status', phase.to_dict(), namespace=NAMESPACE)
    except Exception as exc:
        logger.warning(f"[emit-failed] event=game_status reason={exc}")


def _player_id(data):
    raw = (data or {}).get('player_id')
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def handle_connect():
    emit('connected', {'message': 'Connected to /ws', 'status': get_simulation().status().to_dict()})


def handle_watch_player(data):
    pid = _player_id(data)
    if pid is None or pid not in get_simulation().store:
        emit('error', {'message': 'Player not found', 'code': 'PLAYER_NOT_FOUND'})
        return
    room = f"player:{pid}"
    join_room(room)
    emit('watching', {'room': room, 'player_id': pid})


def handle_unwatch_player(data):
    pid = _player_id(data)
    if pid is None:
        emit('error', {'message': 'player_id is required', 'code': 'BAD_REQUEST'})
        return
    room = f"player:{pid}"
    leave_room(room)
    emit('unwatched', {'room': room, 'player_id': pid})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('watch_player', handle_watch_player, namespace=NAMESPACE)
    socketio.on_event('unwatch_player', handle_unwatch_player, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
