import atexit
import json

import click
from flask import Flask, current_app, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.exceptions import NotFound as HTTPNotFound

from config import Config

socketio = SocketIO(async_mode=None)


def get_simulation(flask_app=None):
    return (flask_app or current_app).extensions['simulation']


def create_app(config_class=Config, narrator=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One simulation per app; handlers reach it via get_simulation()
    from gamefeed.services.simulation import SimulationService
    simulation = SimulationService.from_config(flask_app.config, narrator=narrator)
    flask_app.extensions['simulation'] = simulation

    from gamefeed.main import main
    flask_app.register_blueprint(main)

    from gamefeed.api.players import players
    from gamefeed.api.simulation import simulation_api
    flask_app.register_blueprint(players, url_prefix='/api')
    flask_app.register_blueprint(simulation_api, url_prefix='/api')

    from gamefeed.errors import GameFeedError

    @flask_app.errorhandler(GameFeedError)
    def handle_feed_error(exc):
        return jsonify(exc.to_dict()), exc.status_code or 500

    @flask_app.errorhandler(HTTPNotFound)
    def handle_http_not_found(exc):
        return jsonify({'error': 'Not found', 'code': 'NOT_FOUND'}), 404

    from gamefeed.socketio_events import register_socketio_handlers, broadcast_status
    register_socketio_handlers()

    if not flask_app.config.get('TESTING') or flask_app.config.get('ENABLE_CLOCK_IN_TESTS'):
        simulation.start_clock(socketio.start_background_task, on_change=broadcast_status)
        atexit.register(simulation.stop_clock)
        flask_app.logger.info(
            f"[clock-scheduled] interval={simulation.clock.tick_interval}s phase={simulation.status().to_dict()}"
        )

    @click.command('catalog')
    def catalog_command():
        """Prints the event catalog and fire probabilities as JSON."""
        click.echo(json.dumps(get_simulation(flask_app).catalog.to_dict(), indent=2))

    @click.command('simulate')
    @click.option('--requests', 'n_requests', default=20, show_default=True, help='Stats requests per player.')
    @click.option('--seed', default=None, type=int, help='RNG seed.')
    def simulate_command(n_requests, seed):
        """Runs stats decisions offline against a fresh simulation and prints scores."""
        import random
        from gamefeed.services.simulation import SimulationService as _Service

        offline = _Service(
            catalog=get_simulation(flask_app).catalog,
            rng=random.Random(seed),
            cooldown_ms=0,
        )
        now = offline.now()
        events = 0
        for step in range(n_requests):
            for p in offline.roster:
                decision = offline.simulator.decide(p, offline.store.get(p.id), offline.status(), now + step)
                if decision is not None:
                    offline.store.mutate(p.id, lambda s, d=decision, t=now + step: offline.simulator.apply_event(s, d, t))
                    events += 1
        for p in offline.roster:
            state = offline.store.get(p.id)
            kinds = ', '.join(e.kind for e in state.recent_events) or '-'
            click.echo(f'{p.id:>3} {p.name:<22} {p.role:<4} {state.current_score:7.2f}  recent: {kinds}')
        click.echo(f'{events} events over {n_requests} requests per player')

    flask_app.cli.add_command(catalog_command)
    flask_app.cli.add_command(simulate_command)

    return flask_app
