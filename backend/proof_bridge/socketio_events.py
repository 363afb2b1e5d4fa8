from flask_socketio import join_room, leave_room, emit
from proof_bridge import socketio
from proof_bridge.models import ProofRecord
from proof_bridge.services.proofs.encoder import to_response
from proof_bridge.services.proofs.narrative import ProofNarrative


def proof_room(channel: str) -> str:
    return f"proof:{channel}"


class SocketIONarrative(ProofNarrative):
    """Streams the proof narrative to every socket that joined ``channel``."""

    def __init__(self, channel: str, namespace: str = '/ws'):
        self.channel = channel
        self.namespace = namespace

    def log(self, line: str) -> None:
        # socketio.emit (not emit) since this runs outside a socket handler
        socketio.emit('proof_log', {'channel': self.channel, 'message': line},
                      to=proof_room(self.channel), namespace=self.namespace)

    def show_result(self, record: ProofRecord) -> None:
        payload = to_response(record)
        payload['channel'] = self.channel
        socketio.emit('proof_result', payload, to=proof_room(self.channel), namespace=self.namespace)


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_proof(data):
    channel = (data or {}).get('channel')
    if not channel:
        emit('error', {'message': 'channel is required'})
        return
    room = proof_room(channel)
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_proof(data):
    channel = (data or {}).get('channel')
    if not channel:
        emit('error', {'message': 'channel is required'})
        return
    room = proof_room(channel)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_proof', handle_join_proof, namespace=namespace)
        socketio.on_event('leave_proof', handle_leave_proof, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
