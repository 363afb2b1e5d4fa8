import os
import sys
import pytest

# Ensure the backend root (containing the `proof_bridge` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from proof_bridge import create_app, socketio
from proof_bridge.models import Telemetry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    # Point at a binary that does not exist so no real prover ever runs
    PROVER_ENABLED = True
    PROVER_COMMAND = 'memory-prove-binary-that-does-not-exist'
    PROVER_WORKDIR = None
    PROVER_TIMEOUT_SEC = 5
    PROVER_MAX_CONCURRENT = 2
    SIMULATION_STEP_SCALE = 0


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def telemetry():
    return Telemetry(moves=10, elapsed_seconds=80, matched_pairs=8)


@pytest.fixture()
def fake_prover(tmp_path):
    """Write a stand-in prover script and return the command that runs it."""
    def _make(body: str):
        script = tmp_path / 'fake_prover.py'
        script.write_text('import sys\n' + body)
        return [sys.executable, str(script)]
    return _make
