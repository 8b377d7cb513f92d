from flask import Blueprint, current_app, jsonify

from gamefeed import get_simulation
from gamefeed.socketio_events import broadcast_status

simulation_api = Blueprint('simulation', __name__)


@simulation_api.route('/game-status', methods=['GET'])
def game_status():
    phase = get_simulation().status()
    return jsonify(phase.to_dict())


@simulation_api.route('/simulation/toggle', methods=['POST'])
def toggle_simulation():
    sim = get_simulation()
    enabled = sim.toggle()
    current_app.logger.info(f"[toggle] simulation_enabled={enabled}")
    broadcast_status(sim.status())
    return jsonify({
        'simulationEnabled': enabled,
        'message': 'Simulation enabled' if enabled else 'Simulation disabled - ready for live data',
    })


@simulation_api.route('/simulation/restart-game', methods=['POST'])
def restart_game():
    sim = get_simulation()
    phase = sim.restart_game()
    current_app.logger.info(f"[restart] quarter={phase.quarter} time={phase.time_remaining_label}")
    broadcast_status(phase)
    return jsonify({
        'message': 'New game started',
        'quarter': phase.quarter,
        'timeRemainingLabel': phase.time_remaining_label,
    })
