import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of frontend origins allowed by CORS and Socket.IO
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:5173,http://127.0.0.1:5173,http://localhost:8080,http://127.0.0.1:8080',
    ).split(',') if o.strip()]
    # External prover. Disable to always run the client-style simulation.
    PROVER_ENABLED = os.environ.get('PROVER_ENABLED', '1').strip().lower() not in ('0', 'false', 'no', 'off', '')
    PROVER_COMMAND = os.environ.get('PROVER_COMMAND', 'cargo run --bin memory_prove --release --')
    # Prover project root, next to backend/ unless overridden
    PROVER_WORKDIR = os.environ.get('PROVER_WORKDIR') or os.path.abspath(
        os.path.join(BASE_DIR, '..', 'memory_proof', 'script'))
    PROVER_VERIFIED_MARKER = os.environ.get('PROVER_VERIFIED_MARKER', 'Proof verified successfully')
    # Upper bound for one prover request, waiting for a slot included (seconds)
    PROVER_TIMEOUT_SEC = float(os.environ.get('PROVER_TIMEOUT_SEC', '600'))
    # Prover processes allowed to run at once; extra requests wait for a slot
    PROVER_MAX_CONCURRENT = int(os.environ.get('PROVER_MAX_CONCURRENT', '2'))
    # Multiplier for the simulated narrative delays. 0 disables pacing.
    SIMULATION_STEP_SCALE = float(os.environ.get('SIMULATION_STEP_SCALE', '1.0'))
