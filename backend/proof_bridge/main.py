from datetime import datetime, timezone

from flask import Blueprint, jsonify

from proof_bridge.services.proofs.encoder import isoformat

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Memory game proof bridge. POST game data to /api/generate-proof.'})

@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'timestamp': isoformat(datetime.now(timezone.utc))})
