from proof_bridge.models import ScoreResult

# Seconds a game may last; shared by every path that reports a score
TIME_LIMIT = 120


def compute_score(moves: int, elapsed_seconds: int) -> ScoreResult:
    """Derive the canonical score: remaining time minus moves, floored at zero."""
    remaining_time = max(0, TIME_LIMIT - elapsed_seconds)
    return ScoreResult(remaining_time=remaining_time, score=max(0, remaining_time - moves))
