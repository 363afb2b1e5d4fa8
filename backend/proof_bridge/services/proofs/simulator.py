import asyncio
import logging
from typing import Callable, List, Optional, Tuple

from proof_bridge.models import Failed, ProofOutcome, ProofRecord, ScoreResult, Telemetry, Verified
from .encoder import SIMULATED_SERVER, encode
from .narrative import LoggingNarrative, ProofNarrative
from .scoring import compute_score

logger = logging.getLogger(__name__)


def simulation_steps(telemetry: Telemetry, result: ScoreResult) -> List[Tuple[str, float]]:
    """The staged pseudo-verification script as ``(message, delay_sec)`` pairs."""
    return [
        ("Loading SP1 RISC-V program...", 0.5),
        ("Preparing game data for verification...", 0.5),
        (f"Input values: Moves={telemetry.moves}, Time={telemetry.elapsed_seconds}s, "
         f"Matched={telemetry.matched_pairs}", 1.0),
        ("Validating game rules...", 0.8),
        (f"Checking score calculation: Remaining Time ({result.remaining_time}) - "
         f"Moves ({telemetry.moves}) = {result.score}", 1.2),
        ("Building SP1 ZK circuit...", 1.0),
        ("Generating cryptographic proof (1/3)...", 1.2),
        ("Generating cryptographic proof (2/3)...", 1.2),
        ("Generating cryptographic proof (3/3)...", 1.2),
        ("Verifying proof...", 1.0),
        ("Proof successfully generated and verified! (SIMULATION)", 0.8),
    ]


class ProofSimulator:
    """Plays the proof narrative without running a prover.

    ``step_scale`` multiplies every delay; 0 emits the whole script at once.
    The script is a single coroutine, so cancelling the calling task stops it
    between steps.
    """

    def __init__(self, step_scale: float = 1.0, encoder: Callable[..., ProofRecord] = encode):
        self.step_scale = step_scale
        self.encoder = encoder

    async def simulate(self, telemetry: Telemetry, outcome: Optional[ProofOutcome] = None,
                       narrative: Optional[ProofNarrative] = None,
                       simulated_format: str = SIMULATED_SERVER) -> ProofRecord:
        narrative = narrative or LoggingNarrative()
        outcome = outcome or Failed('simulation requested')
        if isinstance(outcome, Verified):
            raise ValueError('a verified outcome is never simulated')
        result = compute_score(telemetry.moves, telemetry.elapsed_seconds)
        logger.info(f"[simulate-start] local_score={result.score} format={simulated_format}")

        for message, delay in simulation_steps(telemetry, result):
            narrative.log(message)
            if self.step_scale > 0:
                await asyncio.sleep(delay * self.step_scale)

        record = self.encoder(result, outcome, telemetry, simulated_format=simulated_format)
        narrative.log("=== PROOF RESULT ===")
        narrative.log(f"Hash: {record.hash}")
        narrative.log("===================")
        narrative.show_result(record)
        return record
