"""Proof record encoding.

Three hash layouts exist, all built from the same 4-digit hex segments of
score, moves and elapsed time:

- real:             0xSP1_<score>_<moves>_<time>_REAL
- simulated server: 0xSIM_<score>_<moves>_<time>_<8 random hex>
- simulated client: 0x<score><moves><time><14 random hex>

Both simulated layouts mean "not proven" and consumers must treat them alike.
The client layout is what a caller gets when no prover is reachable at all.
"""

import re
import secrets
from datetime import datetime, timezone
from typing import Optional, Tuple

from proof_bridge.models import (
    MAX_FIELD_VALUE,
    ProofOutcome,
    ProofRecord,
    ScoreResult,
    Telemetry,
    Verified,
)

SIMULATED_SERVER = 'server'
SIMULATED_CLIENT = 'client'

ALGORITHM = 'SP1 ZK-STARK'
SCORE_FORMULA = 'Remaining Time - Moves'

_REAL_RE = re.compile(r'^0xSP1_([0-9a-f]{4})_([0-9a-f]{4})_([0-9a-f]{4})_REAL$')
_SERVER_RE = re.compile(r'^0xSIM_([0-9a-f]{4})_([0-9a-f]{4})_([0-9a-f]{4})_[0-9a-f]{8}$')
_CLIENT_RE = re.compile(r'^0x([0-9a-f]{4})([0-9a-f]{4})([0-9a-f]{4})[0-9a-f]{14}$')


class EncodingError(RuntimeError):
    """A value could not be represented in a proof hash."""


def hex4(value: int) -> str:
    if value < 0 or value > MAX_FIELD_VALUE:
        raise EncodingError(f'value {value} does not fit a 4-digit hex segment')
    return f'{value:04x}'


def format_hash(score: int, moves: int, elapsed_seconds: int, is_real: bool,
                simulated_format: str = SIMULATED_SERVER) -> str:
    segments = (hex4(score), hex4(moves), hex4(elapsed_seconds))
    if is_real:
        return '0xSP1_{}_{}_{}_REAL'.format(*segments)
    if simulated_format == SIMULATED_SERVER:
        return '0xSIM_{}_{}_{}_{}'.format(*segments, secrets.token_hex(4))
    if simulated_format == SIMULATED_CLIENT:
        # 14 hex digits from 52 random bits
        return '0x{}{}{}{:014x}'.format(*segments, secrets.randbits(52))
    raise EncodingError(f'unknown simulated hash format: {simulated_format!r}')


def hex_fields(proof_hash: str) -> Optional[Tuple[int, int, int]]:
    """Return ``(score, moves, elapsed_seconds)`` decoded from any hash layout."""
    for pattern in (_REAL_RE, _SERVER_RE, _CLIENT_RE):
        match = pattern.match(proof_hash or '')
        if match:
            return tuple(int(g, 16) for g in match.groups())
    return None


def is_real_hash(proof_hash: str) -> bool:
    return bool(_REAL_RE.match(proof_hash or ''))


def encode(score_result: ScoreResult, outcome: ProofOutcome, telemetry: Telemetry,
           simulated_format: str = SIMULATED_SERVER) -> ProofRecord:
    """Build the proof record for one request.

    Only a ``Verified`` outcome yields a real record, and its score (which may
    come from the prover's FINAL_SCORE line) replaces the local one. Every other
    outcome keeps the locally computed score and gets a simulated hash.
    """
    is_real = isinstance(outcome, Verified)
    score = outcome.score if is_real else score_result.score
    return ProofRecord(
        hash=format_hash(score, telemetry.moves, telemetry.elapsed_seconds, is_real, simulated_format),
        score=score,
        moves=telemetry.moves,
        elapsed_seconds=telemetry.elapsed_seconds,
        matched_pairs=telemetry.matched_pairs,
        is_real=is_real,
        remaining_time=score_result.remaining_time,
        created_at=datetime.now(timezone.utc),
    )


def isoformat(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def to_response(record: ProofRecord) -> dict:
    """Shape a record as the JSON body returned by the generate-proof endpoint."""
    return {
        'success': True,
        'proofHash': record.hash,
        'calculatedScore': record.score,
        'isRealProof': record.is_real,
        'gameData': {
            'moves': record.moves,
            'time': record.elapsed_seconds,
            'matchedPairs': record.matched_pairs,
        },
        'remainingTime': record.remaining_time,
        'proofDetails': {
            'algorithm': ALGORITHM,
            'verificationMethod': record.verification_method,
            'scoreFormula': SCORE_FORMULA,
            'createdAt': isoformat(record.created_at),
        },
    }
