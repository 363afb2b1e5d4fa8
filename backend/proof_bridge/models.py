from dataclasses import dataclass
from datetime import datetime
from typing import Any, Union

# Largest value a telemetry field may take: hash segments are 4 hex digits
MAX_FIELD_VALUE = 0xFFFF


class ValidationError(ValueError):
    """Raised when submitted telemetry is missing, non-integer or out of range."""


@dataclass(frozen=True)
class Telemetry:
    moves: int
    elapsed_seconds: int
    matched_pairs: int

    @classmethod
    def from_json(cls, data: Any) -> 'Telemetry':
        """Validate a request body (wire names ``moves``/``time``/``matchedPairs``)."""
        if not isinstance(data, dict):
            raise ValidationError('Request body must be a JSON object')
        return cls(
            moves=_require_count(data, 'moves'),
            elapsed_seconds=_require_count(data, 'time'),
            matched_pairs=_require_count(data, 'matchedPairs'),
        )

    def to_dict(self):
        return {
            'moves': self.moves,
            'time': self.elapsed_seconds,
            'matchedPairs': self.matched_pairs,
        }


def _require_count(data: dict, key: str) -> int:
    if key not in data or data[key] is None:
        raise ValidationError(f'{key} is required')
    value = data[key]
    # bool is an int subclass; JSON true/false is not a count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f'{key} must be an integer')
    if value < 0:
        raise ValidationError(f'{key} must not be negative')
    if value > MAX_FIELD_VALUE:
        raise ValidationError(f'{key} must not exceed {MAX_FIELD_VALUE}')
    return value


@dataclass(frozen=True)
class ScoreResult:
    remaining_time: int
    score: int


@dataclass(frozen=True)
class Verified:
    """The prover exited cleanly and printed the verification marker."""
    score: int


@dataclass(frozen=True)
class Unverified:
    """The prover ran to completion but never confirmed the proof."""
    output: str = ''


@dataclass(frozen=True)
class Failed:
    """The prover could not be spawned, errored, or timed out."""
    reason: str


ProofOutcome = Union[Verified, Unverified, Failed]


@dataclass(frozen=True)
class ProofRecord:
    hash: str
    score: int
    moves: int
    elapsed_seconds: int
    matched_pairs: int
    is_real: bool
    remaining_time: int
    created_at: datetime

    @property
    def verification_method(self) -> str:
        return 'Real SP1 RISC-V zkVM' if self.is_real else 'Simulation'
