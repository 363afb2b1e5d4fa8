"""Hooks through which the proof bridge talks to the presentation side.

A narrative receives the human-readable progress lines of a proof run and
the finished record. The Socket.IO implementation lives with the socket
handlers; these two cover logging and collection.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from proof_bridge.models import ProofRecord

logger = logging.getLogger(__name__)


class ProofNarrative(ABC):
    """Hook interface the bridge reports a proof run through."""

    @abstractmethod
    def log(self, line: str) -> None:
        """Append one line to the visible proof narrative."""

    @abstractmethod
    def show_result(self, record: ProofRecord) -> None:
        """Render the finished record."""


class LoggingNarrative(ProofNarrative):
    def log(self, line: str) -> None:
        logger.info(f"[narrative] {line}")

    def show_result(self, record: ProofRecord) -> None:
        logger.info(f"[narrative-result] hash={record.hash} score={record.score} real={record.is_real}")


class RecordingNarrative(ProofNarrative):
    def __init__(self):
        self.lines: List[str] = []
        self.results: List[ProofRecord] = []

    def log(self, line: str) -> None:
        self.lines.append(line)

    def show_result(self, record: ProofRecord) -> None:
        self.results.append(record)
