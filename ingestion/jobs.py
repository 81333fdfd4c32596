"""
Import job state machine and the registry of per-zone import status.
"""

from typing import Dict, FrozenSet, List
from datetime import datetime
import threading
import logging

from models.base import ImportState
from schemas.imports import ImportJobStatus
from core.exceptions import (
    ImportConflictError,
    ImportNotFoundError,
    InvalidStateTransition,
)

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[ImportState, FrozenSet[ImportState]] = {
    ImportState.PENDING: frozenset({ImportState.FETCHING, ImportState.ERROR}),
    ImportState.FETCHING: frozenset({ImportState.ENRICHING, ImportState.COMPLETED, ImportState.ERROR}),
    ImportState.ENRICHING: frozenset({ImportState.SAVING, ImportState.ERROR}),
    ImportState.SAVING: frozenset({ImportState.COMPLETED, ImportState.ERROR}),
    ImportState.COMPLETED: frozenset(),
    ImportState.ERROR: frozenset(),
}


class ImportJob:
    """
    Drives one ImportJobStatus through its lifecycle.

    pending -> fetching -> enriching -> saving -> completed
    fetching -> completed (nothing found)
    any non-terminal state -> error

    Progress never decreases and only reaches 100 on completion.
    """

    def __init__(self, status: ImportJobStatus):
        self.status = status

    @property
    def zone_id(self) -> str:
        return self.status.zone_id

    @property
    def state(self) -> ImportState:
        return self.status.status

    def transition(self, new_state: ImportState) -> None:
        current = self.status.status
        if new_state not in ALLOWED_TRANSITIONS[current]:
            raise InvalidStateTransition(
                f"Cannot move import from {current.value} to {new_state.value}",
                context={"zone_id": self.zone_id}
            )
        logger.info(f"[import {self.zone_id}] {current.value} -> {new_state.value}")
        self.status.status = new_state

    def report_progress(self, progress: float) -> None:
        if self.state.is_terminal:
            return
        # 100 is reserved for completion
        value = max(0, min(99, int(progress)))
        if value > self.status.progress:
            self.status.progress = value

    def set_total(self, total: int) -> None:
        self.status.total = total

    def complete(self, created: int = 0, updated: int = 0) -> None:
        self.transition(ImportState.COMPLETED)
        self.status.created = created
        self.status.updated = updated
        self.status.progress = 100
        self.status.completed_at = datetime.utcnow()

    def fail(self, message: str) -> None:
        if self.state.is_terminal:
            logger.warning(f"[import {self.zone_id}] ignoring failure after terminal state: {message}")
            return
        self.transition(ImportState.ERROR)
        self.status.error = message
        self.status.completed_at = datetime.utcnow()


class JobRegistry:
    """
    Latest import status per zone.

    Shared between request handlers and background imports, so every access
    goes through a mutex. Entries are only replaced by a new import of the
    same zone, never evicted.
    """

    def __init__(self):
        self._jobs: Dict[str, ImportJob] = {}
        self._lock = threading.Lock()

    def start(self, zone_id: str) -> ImportJob:
        """
        Register a fresh pending import for a zone.

        Raises:
            ImportConflictError: When the zone's current import is still running
        """
        with self._lock:
            current = self._jobs.get(zone_id)
            if current is not None and not current.state.is_terminal:
                raise ImportConflictError(
                    "Import already in progress",
                    status=current.status,
                    context={"zone_id": zone_id}
                )
            job = ImportJob(ImportJobStatus(zone_id=zone_id))
            self._jobs[zone_id] = job
            return job

    def get(self, zone_id: str) -> ImportJobStatus:
        """
        Raises:
            ImportNotFoundError: When no import was ever started for the zone
        """
        with self._lock:
            job = self._jobs.get(zone_id)
        if job is None:
            raise ImportNotFoundError(
                "No import found for this zone",
                context={"zone_id": zone_id}
            )
        return job.status

    def active(self) -> List[ImportJobStatus]:
        with self._lock:
            return [job.status for job in self._jobs.values() if not job.state.is_terminal]

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
