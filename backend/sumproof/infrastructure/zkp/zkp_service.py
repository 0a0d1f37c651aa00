import logging
import threading
from dataclasses import dataclass
from typing import Optional

from sumproof.core.config import settings
from sumproof.core.crypto.backend import BackendError, MalformedProofError, ProofBackend, load_backend
from sumproof.core.crypto.relation import ADDITION_RELATION, RelationDefinition
from sumproof.infrastructure.zkp.key_manager import KeyMaterialManager, SetupError, SetupState

logger = logging.getLogger(__name__)

GENERATED_MESSAGE = (
    "Proof generated successfully. This proves you know two numbers that add up "
    "to the sum, without revealing the numbers themselves!"
)
VALID_MESSAGE = (
    "Proof is valid! The prover knows two numbers that add up to the sum "
    "(without revealing them)."
)
INVALID_MESSAGE = (
    "Proof is invalid. The prover does not know valid numbers that add up to the given sum."
)


class ProofError(Exception):
    """Base for failures surfaced to API clients. ``message`` is safe to return."""

    code = "PROOF_ERROR"
    http_status = 500
    message = "Proof service error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class SetupUnavailable(ProofError):
    code = "SETUP_UNAVAILABLE"
    http_status = 500
    message = "Setup failed: proving keys are unavailable"


class ProveFailed(ProofError):
    code = "PROVE_FAILED"
    http_status = 500
    message = "Failed to generate proof"


class MalformedProof(ProofError):
    code = "MALFORMED_PROOF"
    http_status = 400
    message = "Invalid proof format"


@dataclass(frozen=True)
class GeneratedProof:
    proof: bytes
    sum: int


@dataclass(frozen=True)
class VerificationResult:
    valid: bool
    message: str


class ZKPService:
    def __init__(self, backend: ProofBackend, relation: RelationDefinition = ADDITION_RELATION):
        self.backend = backend
        self.relation = relation
        self.keys = KeyMaterialManager(backend, relation)

    def _ready_keys(self):
        try:
            return self.keys.ensure_ready()
        except SetupError as e:
            raise SetupUnavailable() from e

    def generate_proof(self, a: int, b: int, sum: int) -> GeneratedProof:
        """
        Prove knowledge of ``a`` and ``b`` adding up to ``sum``.

        The relation is enforced by the backend prover; an assignment that
        does not satisfy it surfaces as ProveFailed.
        """
        keys = self._ready_keys()
        witness = self.relation.full_witness({"A": a, "B": b, "Sum": sum})

        logger.info(f"[ZKP] Generating proof for public sum {sum}")
        try:
            proof = self.backend.prove(keys.constraint_system, keys.proving_key, witness)
        except Exception as e:
            logger.error(f"[ZKP] Proof generation failed: {e}")
            raise ProveFailed() from e

        try:
            proof_bytes = self.backend.serialize_proof(proof)
        except Exception as e:
            logger.error(f"[ZKP] Proof serialization failed: {e}")
            raise ProveFailed("Failed to serialize proof") from e

        logger.info(f"[ZKP] Proof generated ({len(proof_bytes)} bytes)")
        return GeneratedProof(proof=proof_bytes, sum=sum)

    def verify_proof(self, proof_bytes: bytes, sum: int) -> VerificationResult:
        """
        Check a serialized proof against the public sum only.

        Malformed bytes raise MalformedProof; a well-formed proof that does
        not verify is a normal ``valid=False`` result.
        """
        keys = self._ready_keys()

        try:
            proof = self.backend.deserialize_proof(proof_bytes)
        except MalformedProofError as e:
            logger.warning(f"[ZKP] Rejected malformed proof: {e}")
            raise MalformedProof() from e

        public_witness = self.relation.public_witness({"Sum": sum})

        logger.info(f"[ZKP] Verifying proof for public sum {sum}")
        try:
            valid = self.backend.verify(proof, keys.verifying_key, public_witness)
        except BackendError as e:
            logger.warning(f"[ZKP] Verifier rejected proof: {e}")
            valid = False

        if not valid:
            logger.info("[ZKP] Proof verification failed")
            return VerificationResult(valid=False, message=INVALID_MESSAGE)

        logger.info("[ZKP] Proof verified successfully")
        return VerificationResult(valid=True, message=VALID_MESSAGE)


# Lazy singleton: one service, one key manager per process.
_zkp_service = None
_zkp_service_lock = threading.Lock()


def get_zkp_service() -> ZKPService:
    """
    Process-wide service built from settings.

    The backend library is imported on the first call and the keys are
    generated on the first proof or verification, not at import time.
    """
    global _zkp_service
    if _zkp_service is None:
        with _zkp_service_lock:
            if _zkp_service is None:
                try:
                    backend = load_backend(settings.ZKP_BACKEND)
                except (BackendError, ImportError) as e:
                    logger.error(f"[ZKP] Proof backend '{settings.ZKP_BACKEND}' unavailable: {e}")
                    raise SetupUnavailable() from e
                _zkp_service = ZKPService(backend)
    return _zkp_service


def current_setup_state() -> SetupState:
    """Key setup state of the process-wide service, without creating it."""
    if _zkp_service is None:
        return SetupState.NOT_STARTED
    return _zkp_service.keys.state
