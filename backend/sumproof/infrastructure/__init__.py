"""
Sum-Proof Infrastructure Module.

Exports the proof service and its key setup guard:
    - ZKPService: Generate and verify proofs for the addition relation
    - KeyMaterialManager: Exactly-once Groth16 key setup
    - ProofError: Base of the client-facing error taxonomy
"""

from sumproof.infrastructure.zkp.key_manager import (
    KeyMaterialManager,
    SetupError,
    SetupOutcome,
    SetupState,
)
from sumproof.infrastructure.zkp.zkp_service import (
    GeneratedProof,
    MalformedProof,
    ProofError,
    ProveFailed,
    SetupUnavailable,
    VerificationResult,
    ZKPService,
    get_zkp_service,
)

__all__ = [
    "KeyMaterialManager",
    "SetupError",
    "SetupOutcome",
    "SetupState",
    "GeneratedProof",
    "MalformedProof",
    "ProofError",
    "ProveFailed",
    "SetupUnavailable",
    "VerificationResult",
    "ZKPService",
    "get_zkp_service",
]
