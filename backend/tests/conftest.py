import hashlib
import hmac
import secrets
import threading

import pytest
from fastapi.testclient import TestClient

from sumproof.core.crypto.backend import BackendError, MalformedProofError, ProofBackend
from sumproof.core.crypto.relation import ADDITION_RELATION, BN254_SCALAR_FIELD
from sumproof.infrastructure.zkp.zkp_service import ZKPService, get_zkp_service
from sumproof.main import app

# ═══════════════════════════════════════════════════════════════════════════════
# FAKE BACKEND
# ═══════════════════════════════════════════════════════════════════════════════
# Same contract as a Groth16 backend, no curve arithmetic:
#   proof = MAGIC ‖ nonce(16) ‖ HMAC(key, nonce ‖ public values)(32)
# Only a holder of the proving key can mint a tag, the tag binds the public
# values, and the random nonce makes every proof unique.

MAGIC = b"FKP1"
NONCE_BYTES = 16
TAG_BYTES = 32
PROOF_LENGTH = len(MAGIC) + NONCE_BYTES + TAG_BYTES


class FakeProof:
    def __init__(self, nonce: bytes, tag: bytes):
        self.nonce = nonce
        self.tag = tag


class FakeBackend(ProofBackend):

    name = "fake"

    def __init__(self, setup_delay: float = 0.0, fail_setup: bool = False):
        self.setup_delay = setup_delay
        self.fail_setup = fail_setup
        self.setup_calls = 0
        self.compile_calls = 0
        self._count_lock = threading.Lock()

    def compile(self, relation):
        with self._count_lock:
            self.compile_calls += 1
        return relation

    def setup(self, constraint_system):
        with self._count_lock:
            self.setup_calls += 1
        if self.setup_delay:
            threading.Event().wait(self.setup_delay)
        if self.fail_setup:
            raise BackendError("entropy source unavailable")
        key = secrets.token_bytes(32)
        return ("pk", key), ("vk", key)

    @staticmethod
    def _tag(key: bytes, nonce: bytes, public_values) -> bytes:
        message = nonce + b"".join(
            (value % BN254_SCALAR_FIELD).to_bytes(32, "big") for value in public_values
        )
        return hmac.new(key, message, hashlib.sha256).digest()

    def prove(self, constraint_system, proving_key, witness):
        if not constraint_system.is_satisfied(witness.values):
            raise BackendError("constraint #0 is not satisfied")
        nonce = secrets.token_bytes(NONCE_BYTES)
        public_values = witness.public().ordered(constraint_system)
        return FakeProof(nonce, self._tag(proving_key[1], nonce, public_values))

    def verify(self, proof, verifying_key, public_witness):
        public_values = public_witness.ordered(ADDITION_RELATION)
        expected = self._tag(verifying_key[1], proof.nonce, public_values)
        return hmac.compare_digest(expected, proof.tag)

    def serialize_proof(self, proof):
        return MAGIC + proof.nonce + proof.tag

    def deserialize_proof(self, data):
        if len(data) != PROOF_LENGTH or not data.startswith(MAGIC):
            raise MalformedProofError(f"expected {PROOF_LENGTH} bytes starting with {MAGIC!r}")
        body = data[len(MAGIC):]
        return FakeProof(body[:NONCE_BYTES], body[NONCE_BYTES:])


# ═══════════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def service(backend):
    return ZKPService(backend)


@pytest.fixture
def failing_service():
    return ZKPService(FakeBackend(fail_setup=True))


@pytest.fixture
def client(service):
    app.dependency_overrides[get_zkp_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_zkp_service, None)


@pytest.fixture
def failing_client(failing_service):
    app.dependency_overrides[get_zkp_service] = lambda: failing_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_zkp_service, None)
