import asyncio
import json

import click
from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One bridge per app; views reach it through app.extensions
    from proof_bridge.services.proofs.bridge import build_bridge
    flask_app.extensions['proof_bridge'] = build_bridge(flask_app.config)

    # Import and register blueprints here
    from proof_bridge.main import main
    flask_app.register_blueprint(main)

    from proof_bridge.api.proofs import proofs
    flask_app.register_blueprint(proofs, url_prefix='/api')

    # Register Socket.IO event handlers
    # Importing here ensures the handlers bind to the initialized socketio instance
    from proof_bridge.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('prove')
    @click.argument('moves', type=click.IntRange(min=0))
    @click.argument('elapsed', type=click.IntRange(min=0))
    @click.argument('matched_pairs', type=click.IntRange(min=0))
    @click.option('--simulate-only', is_flag=True, help='Skip the external prover.')
    def prove_command(moves, elapsed, matched_pairs, simulate_only):
        """Generates a proof record for one finished game and prints it."""
        from proof_bridge.models import Telemetry, ValidationError
        from proof_bridge.services.proofs.bridge import ProofBridge
        from proof_bridge.services.proofs.encoder import to_response
        from proof_bridge.services.proofs.narrative import RecordingNarrative

        try:
            telemetry = Telemetry.from_json({'moves': moves, 'time': elapsed, 'matchedPairs': matched_pairs})
        except ValidationError as exc:
            raise click.BadParameter(str(exc))

        bridge = flask_app.extensions['proof_bridge']
        if simulate_only:
            bridge = ProofBridge(None, bridge.simulator, bridge.encoder)
        narrative = RecordingNarrative()
        record = asyncio.run(bridge.generate(telemetry, narrative))
        for line in narrative.lines:
            click.echo(line)
        click.echo(json.dumps(to_response(record), indent=2))

    flask_app.cli.add_command(prove_command)

    return flask_app
