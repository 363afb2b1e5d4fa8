from flask import Blueprint, jsonify, request, current_app
from proof_bridge.models import Telemetry, ValidationError
from proof_bridge.services.proofs.encoder import to_response
from proof_bridge.services.proofs.narrative import LoggingNarrative
from proof_bridge.socketio_events import SocketIONarrative


proofs = Blueprint('proofs', __name__)


@proofs.errorhandler(ValidationError)
def handle_validation_error(exc):
    return jsonify({'success': False, 'error': str(exc)}), 400


@proofs.route('/generate-proof', methods=['POST'])
async def generate_proof():
    data = request.get_json(silent=True)
    telemetry = Telemetry.from_json(data)
    current_app.logger.info(f"[generate-proof] received {telemetry.to_dict()}")

    channel = data.get('channel')
    narrative = SocketIONarrative(str(channel)) if channel else LoggingNarrative()
    bridge = current_app.extensions['proof_bridge']
    try:
        record = await bridge.generate(telemetry, narrative)
        body = to_response(record)
    except Exception as exc:
        current_app.logger.exception("[generate-proof] failed to build proof record")
        return jsonify({'success': False, 'error': str(exc) or 'Internal error'}), 500

    if record.is_real:
        current_app.logger.info(f"[generate-proof] real proof score={record.score} hash={record.hash}")
    else:
        current_app.logger.info(f"[generate-proof] simulated proof score={record.score} hash={record.hash}")
    return jsonify(body)
