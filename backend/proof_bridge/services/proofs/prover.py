import asyncio
import logging
import os
import re
import shlex
import signal
import threading
from collections import deque
from typing import Optional, Sequence, Union

from proof_bridge.models import Failed, ProofOutcome, ScoreResult, Telemetry, Unverified, Verified
from .scoring import compute_score

logger = logging.getLogger(__name__)

VERIFIED_MARKER = 'Proof verified successfully'
FINAL_SCORE_RE = re.compile(r'FINAL_SCORE=(\d+)')


class ProverInvoker:
    """Runs the external prover for one game and classifies what it printed.

    The prover is called as ``<command> <moves> <time> <matchedPairs>`` from
    ``workdir``. Output is read to the end before any decision is made.
    At most ``max_concurrent`` prover processes run at a time across the
    whole app; further callers queue for a free slot in arrival order.
    """

    def __init__(self, command: Union[str, Sequence[str]], workdir: Optional[str] = None,
                 timeout: float = 600.0, max_concurrent: int = 2,
                 marker: str = VERIFIED_MARKER, poll_interval: float = 0.05):
        self.command = shlex.split(command) if isinstance(command, str) else list(command)
        self.workdir = workdir
        self.timeout = timeout
        self.marker = marker
        self.poll_interval = poll_interval
        self.max_concurrent = max(1, int(max_concurrent))
        # Shared by the per-request event loops Flask runs async views on
        self._slots = threading.BoundedSemaphore(self.max_concurrent)
        self._queue = deque()
        self._queue_lock = threading.Lock()

    def argv(self, telemetry: Telemetry):
        return [*self.command, str(telemetry.moves), str(telemetry.elapsed_seconds), str(telemetry.matched_pairs)]

    async def invoke(self, telemetry: Telemetry) -> ProofOutcome:
        """Run the prover; every failure comes back as an outcome, never raised.

        ``timeout`` bounds the whole call, waiting for a slot included.
        Only cancellation propagates, after the prover's process group has
        been killed.
        """
        local = compute_score(telemetry.moves, telemetry.elapsed_seconds)
        logger.info(
            f"[prover-start] moves={telemetry.moves} time={telemetry.elapsed_seconds} "
            f"pairs={telemetry.matched_pairs} local_score={local.score}"
        )
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        if not await self._acquire_slot(deadline):
            logger.warning(f"[prover-timeout] no free slot within {self.timeout}s, local_score={local.score}")
            return Failed('timeout')
        try:
            return await self._run(telemetry, local, max(0.0, deadline - loop.time()))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("[prover-error] unexpected failure while running prover")
            return Failed(str(exc) or exc.__class__.__name__)
        finally:
            self._slots.release()

    async def _acquire_slot(self, deadline: float) -> bool:
        """Wait in arrival order for a slot; False once ``deadline`` passes."""
        loop = asyncio.get_running_loop()
        ticket = object()
        with self._queue_lock:
            self._queue.append(ticket)
        try:
            while True:
                with self._queue_lock:
                    if self._queue[0] is ticket and self._slots.acquire(blocking=False):
                        self._queue.popleft()
                        return True
                if loop.time() >= deadline:
                    return False
                await asyncio.sleep(self.poll_interval)
        finally:
            with self._queue_lock:
                if ticket in self._queue:
                    self._queue.remove(ticket)

    async def _run(self, telemetry: Telemetry, local: ScoreResult, timeout: float) -> ProofOutcome:
        try:
            # Own session, so the prover and anything it spawns share one process group
            proc = await asyncio.create_subprocess_exec(
                *self.argv(telemetry),
                cwd=self.workdir,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as exc:
            logger.warning(f"[prover-spawn-failed] {exc}")
            return Failed(str(exc))

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[prover-timeout] pid={proc.pid} after {self.timeout}s, killing")
            await _kill(proc)
            return Failed('timeout')
        except asyncio.CancelledError:
            logger.info(f"[prover-cancelled] pid={proc.pid}, killing")
            await _kill(proc)
            raise

        return self.classify(
            proc.returncode,
            stdout.decode('utf-8', errors='replace'),
            stderr.decode('utf-8', errors='replace'),
            local,
        )

    def classify(self, returncode: int, stdout: str, stderr: str, local: ScoreResult) -> ProofOutcome:
        if stderr:
            logger.info(f"[prover-stderr] {stderr.strip()}")
        if returncode != 0:
            reason = stderr.strip() or f'prover exited with code {returncode}'
            logger.warning(f"[prover-failed] exit={returncode} local_score={local.score}")
            return Failed(reason)
        if self.marker not in stdout:
            logger.warning(f"[prover-unverified] no verification marker, local_score={local.score}")
            return Unverified(stdout)

        score = local.score
        match = FINAL_SCORE_RE.search(stdout)
        if match:
            score = int(match.group(1))
            if score != local.score:
                logger.info(f"[prover-override] prover score={score} replaces local_score={local.score}")
        logger.info(f"[prover-verified] score={score} local_score={local.score}")
        return Verified(score)


async def _kill(proc) -> None:
    """SIGKILL the prover's whole process group, then reap the prover."""
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    await proc.wait()
