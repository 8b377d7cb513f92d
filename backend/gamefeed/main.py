from flask import Blueprint, jsonify

from gamefeed import get_simulation

main = Blueprint('main', __name__)


@main.route('/')
def index():
    phase = get_simulation().status()
    return jsonify({
        'message': 'Fantasy feed API is running!',
        'simulation': 'enabled' if phase.simulation_enabled else 'disabled',
        'gameStatus': f'Q{phase.quarter} {phase.time_remaining_label}' if phase.in_progress else 'Game over',
    })
