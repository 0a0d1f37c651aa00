"""
Proof backend contract.

The service never touches curve arithmetic or the Groth16 algorithms. It
talks to an injected ``ProofBackend`` that can compile a relation, run the
setup, prove, verify, and move proofs to and from their canonical bytes.

Backends are loaded by name through :func:`load_backend`, which imports the
implementing module on first use so that an unused backend library is never
imported.
"""

from __future__ import annotations

import importlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from sumproof.core.crypto.relation import PublicWitness, RelationDefinition, Witness

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Any failure raised by a proof backend."""
    pass


class MalformedProofError(BackendError):
    """Bytes handed to the backend do not decode to a proof."""
    pass


@dataclass(frozen=True)
class KeyMaterial:
    """Proving/verifying key pair bound to one compiled constraint system."""
    constraint_system: Any
    proving_key: Any
    verifying_key: Any


class ProofBackend(ABC):
    """Capability interface every proof backend implements."""

    name: str = "abstract"

    @abstractmethod
    def compile(self, relation: RelationDefinition) -> Any:
        """Turn a relation into the backend's constraint system."""

    @abstractmethod
    def setup(self, constraint_system: Any) -> Tuple[Any, Any]:
        """Return ``(proving_key, verifying_key)`` for a constraint system."""

    @abstractmethod
    def prove(self, constraint_system: Any, proving_key: Any, witness: Witness) -> Any:
        """Produce a proof; raise BackendError if the witness does not satisfy."""

    @abstractmethod
    def verify(self, proof: Any, verifying_key: Any, public_witness: PublicWitness) -> bool:
        """Return True when the proof is valid for the public witness."""

    @abstractmethod
    def serialize_proof(self, proof: Any) -> bytes:
        """Canonical byte form of a proof."""

    @abstractmethod
    def deserialize_proof(self, data: bytes) -> Any:
        """Inverse of serialize_proof; raise MalformedProofError on bad input."""


# ═══════════════════════════════════════════════════════════════════════════════
# BACKEND DISCOVERY
# ═══════════════════════════════════════════════════════════════════════════════

# name -> "module:attribute"
BACKENDS: Dict[str, str] = {
    "zksnake": "sumproof.core.crypto.zksnake_backend:ZksnakeGroth16Backend",
}


def load_backend(name: str, **options: Any) -> ProofBackend:
    """Instantiate a registered backend by name."""
    try:
        target = BACKENDS[name]
    except KeyError:
        raise BackendError(
            f"Unknown proof backend '{name}' (available: {sorted(BACKENDS)})"
        ) from None

    module_name, attribute = target.split(":", 1)
    module = importlib.import_module(module_name)
    backend = getattr(module, attribute)(**options)
    logger.info(f"[ZKP-BACKEND] Loaded '{name}' backend ({type(backend).__name__})")
    return backend
