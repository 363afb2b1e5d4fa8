import asyncio
import logging
from typing import Callable, Optional

from proof_bridge.models import Failed, ProofRecord, Telemetry, Verified
from .encoder import SIMULATED_CLIENT, SIMULATED_SERVER, encode
from .narrative import LoggingNarrative, ProofNarrative
from .prover import VERIFIED_MARKER, ProverInvoker
from .scoring import compute_score
from .simulator import ProofSimulator

logger = logging.getLogger(__name__)


class ProofBridge:
    """Coordinates one proof request: try the prover, otherwise simulate.

    Start -> TryReal -> Verified | Unverified | Failed -> [Simulate] -> Respond.
    With no invoker there is no real path at all and the client-style
    simulated hash is produced. The real path is never retried.
    """

    def __init__(self, invoker: Optional[ProverInvoker], simulator: ProofSimulator,
                 encoder: Callable[..., ProofRecord] = encode):
        self.invoker = invoker
        self.simulator = simulator
        self.encoder = encoder

    async def generate(self, telemetry: Telemetry, narrative: Optional[ProofNarrative] = None) -> ProofRecord:
        narrative = narrative or LoggingNarrative()
        result = compute_score(telemetry.moves, telemetry.elapsed_seconds)
        logger.info(
            f"[bridge-start] moves={telemetry.moves} time={telemetry.elapsed_seconds} "
            f"pairs={telemetry.matched_pairs} local_score={result.score}"
        )
        narrative.log("SP1 Proof system initializing...")
        narrative.log(f"Score: {result.score}, Moves: {telemetry.moves}, Time: {telemetry.elapsed_seconds}s")
        narrative.log("Running SP1 ZK program...")

        if self.invoker is None:
            logger.info("[bridge-simulate] no prover configured")
            return await self.simulator.simulate(
                telemetry, Failed('prover unavailable'), narrative, simulated_format=SIMULATED_CLIENT
            )

        narrative.log("Connecting to SP1 backend...")
        try:
            outcome = await self.invoker.invoke(telemetry)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("[bridge-error] prover invocation raised")
            narrative.log(f"Error: {exc}")
            outcome = Failed(str(exc) or exc.__class__.__name__)

        if isinstance(outcome, Verified):
            record = self.encoder(result, outcome, telemetry)
            narrative.log("SP1 Proof successfully generated!")
            narrative.log(f"Proof Hash: {record.hash}")
            narrative.show_result(record)
            logger.info(f"[bridge-real] hash={record.hash} score={record.score}")
            return record

        if isinstance(outcome, Failed):
            logger.info(f"[bridge-fallback] prover failed: {outcome.reason}")
        else:
            logger.info("[bridge-fallback] prover did not verify")
        narrative.log("Switching to simulation mode...")
        return await self.simulator.simulate(telemetry, outcome, narrative, simulated_format=SIMULATED_SERVER)


def build_bridge(config) -> ProofBridge:
    """Construct the bridge from a Flask config mapping."""
    invoker = None
    if config.get('PROVER_ENABLED', True):
        invoker = ProverInvoker(
            command=config.get('PROVER_COMMAND', 'cargo run --bin memory_prove --release --'),
            workdir=config.get('PROVER_WORKDIR') or None,
            timeout=float(config.get('PROVER_TIMEOUT_SEC', 600)),
            max_concurrent=int(config.get('PROVER_MAX_CONCURRENT', 2)),
            marker=config.get('PROVER_VERIFIED_MARKER') or VERIFIED_MARKER,
        )
    simulator = ProofSimulator(step_scale=float(config.get('SIMULATION_STEP_SCALE', 1.0)))
    return ProofBridge(invoker, simulator)
