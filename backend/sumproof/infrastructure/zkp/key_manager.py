"""
Key Material Manager — process-wide, exactly-once Groth16 setup.

The first caller of :meth:`KeyMaterialManager.ensure_ready` compiles the
relation and runs the backend setup while holding the manager's lock.
Concurrent callers block on the same lock, then read the recorded outcome.
Once published, the outcome never changes:

    NOT_STARTED ──setup ok──▶ SUCCEEDED(KeyMaterial)
         │
         └──────setup error─▶ FAILED(SetupError)     (sticky, no retry)

A failed setup is not re-attempted; restarting the process is the only way
to retry. Keys live in memory for the lifetime of the process.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sumproof.core.crypto.backend import KeyMaterial, ProofBackend
from sumproof.core.crypto.relation import RelationDefinition

logger = logging.getLogger(__name__)


class SetupError(Exception):
    """Key generation failed; every later caller gets one chained to the same cause."""
    pass


class SetupState(str, Enum):
    NOT_STARTED = "not_started"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SetupOutcome:
    state: SetupState
    keys: Optional[KeyMaterial] = None
    message: str = ""
    cause: Optional[BaseException] = None


_NOT_STARTED = SetupOutcome(SetupState.NOT_STARTED)


class KeyMaterialManager:
    """
    Owns the proving/verifying keys for one relation and one backend.

    Usage:
        manager = KeyMaterialManager(backend, ADDITION_RELATION)
        keys = manager.ensure_ready()   # raises SetupError on failure
    """

    def __init__(self, backend: ProofBackend, relation: RelationDefinition) -> None:
        self._backend = backend
        self._relation = relation
        self._lock = threading.Lock()
        self._outcome: SetupOutcome = _NOT_STARTED

    @property
    def state(self) -> SetupState:
        return self._outcome.state

    @property
    def relation(self) -> RelationDefinition:
        return self._relation

    def ensure_ready(self) -> KeyMaterial:
        """Run setup on first use; return the shared keys or raise SetupError."""
        outcome = self._outcome
        if outcome.state is SetupState.NOT_STARTED:
            with self._lock:
                if self._outcome.state is SetupState.NOT_STARTED:
                    self._outcome = self._run_setup()
                outcome = self._outcome

        if outcome.state is SetupState.FAILED:
            # Fresh exception per caller; the recorded cause is shared, never re-raised.
            raise SetupError(outcome.message) from outcome.cause
        return outcome.keys

    def _run_setup(self) -> SetupOutcome:
        started = time.perf_counter()
        logger.info(
            f"[KEYS] Performing trusted setup for relation '{self._relation.name}' "
            f"using '{self._backend.name}' backend..."
        )
        try:
            constraint_system = self._backend.compile(self._relation)
            proving_key, verifying_key = self._backend.setup(constraint_system)
        except Exception as exc:
            logger.error(f"[KEYS] Setup failed: {exc}")
            return SetupOutcome(
                SetupState.FAILED,
                message=f"Setup failed for relation '{self._relation.name}'",
                cause=exc,
            )

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"[KEYS] Setup complete in {elapsed_ms:.1f}ms. Ready to prove and verify.")
        return SetupOutcome(
            SetupState.SUCCEEDED,
            keys=KeyMaterial(
                constraint_system=constraint_system,
                proving_key=proving_key,
                verifying_key=verifying_key,
            ),
        )
