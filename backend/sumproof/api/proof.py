"""
Proof API — HTTP surface of the Sum-Proof service.

    POST /api/proof/generate   {a, b, sum}   → {proof, sum, message}
    POST /api/proof/verify     {proof, sum}  → {valid, message}

Handlers are plain ``def`` functions, so FastAPI runs them in its worker
thread pool and proofs for different requests are computed in parallel.
Domain errors (ProofError) are turned into JSON by the handler registered
in ``sumproof.main``.

Usage:
    from sumproof.api.proof import proof_router
    app.include_router(proof_router)
"""

import logging

from fastapi import APIRouter, Depends

from sumproof.core.config import settings
from sumproof.infrastructure.zkp.zkp_service import GENERATED_MESSAGE, ZKPService, get_zkp_service
from sumproof.schemas.zkp import (
    ErrorResponse,
    ProofRequest,
    ProofResponse,
    VerifyRequest,
    VerifyResponse,
)

logger = logging.getLogger(__name__)

proof_router = APIRouter(prefix=settings.API_PREFIX, tags=["Proof"])

_ERRORS = {
    400: {"model": ErrorResponse, "description": "Malformed request body or proof"},
    500: {"model": ErrorResponse, "description": "Setup or prover failure"},
}


@proof_router.post("/generate", response_model=ProofResponse, responses=_ERRORS)
def generate_proof(
    req: ProofRequest,
    service: ZKPService = Depends(get_zkp_service),
) -> ProofResponse:
    """Prove knowledge of two secret numbers adding up to ``sum``."""
    result = service.generate_proof(req.a, req.b, req.sum)
    return ProofResponse.from_proof_bytes(result.proof, result.sum, GENERATED_MESSAGE)


@proof_router.post("/verify", response_model=VerifyResponse, responses=_ERRORS)
def verify_proof(
    req: VerifyRequest,
    service: ZKPService = Depends(get_zkp_service),
) -> VerifyResponse:
    """Check a proof against the public sum. An invalid proof is still a 200."""
    result = service.verify_proof(req.proof, req.sum)
    return VerifyResponse(valid=result.valid, message=result.message)
