from flask import Blueprint, current_app, jsonify

from gamefeed import get_simulation, socketio
from gamefeed.errors import PlayerNotFound

players = Blueprint('players', __name__)


@players.route('/players', methods=['GET'])
def list_players():
    return jsonify([p.to_dict() for p in get_simulation().players()])


@players.route('/player/<player_id>/stats', methods=['GET'])
def player_stats(player_id):
    """
    Runs one simulation step for the player and returns their live stats.
    """
    try:
        pid = int(player_id)
    except (TypeError, ValueError):
        raise PlayerNotFound(player_id)

    result = get_simulation().query_stats(pid)

    if result.event is not None:
        try:
            socketio.emit('player_event', {
                'playerId': pid,
                'kind': result.event.definition.kind,
                'delta': result.event.delta,
                'score': result.state.current_score,
            }, to=f'player:{pid}', namespace='/ws')
        except Exception as exc:
            current_app.logger.warning(f"[emit-failed] event=player_event player={pid} reason={exc}")

    return jsonify(result.to_dict())
