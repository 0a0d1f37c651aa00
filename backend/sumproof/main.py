"""
Sum-Proof ZKP API — Application Entry Point.

Proves knowledge of two secret numbers adding up to a public sum, without
revealing the numbers, using Groth16 proofs over BN254.

Request flow:
    1. Pydantic validation (schema boundary) → 400 on a malformed body
    2. ZKPService ensures the one-time key setup has run
    3. Proof backend proves / verifies
    4. ProofError subclasses → {"error": ...} with their HTTP status

Run:
    python -m sumproof.main
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sumproof.api.proof import proof_router
from sumproof.core.config import settings
from sumproof.infrastructure.zkp.zkp_service import ProofError, current_setup_state

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# --- Application boot timestamp for uptime tracking ---
_BOOT_TIME: float = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    _announce_endpoints()
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Zero-knowledge proofs that two secret numbers add up to a public sum",
    version="0.1.0",
    lifespan=lifespan,
)

# --- CORS Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=settings.CORS_METHODS,
    allow_headers=settings.CORS_HEADERS,
)

app.include_router(proof_router)


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR HANDLERS
# ═══════════════════════════════════════════════════════════════════════════════

@app.exception_handler(RequestValidationError)
async def invalid_body_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"[API] Invalid request body on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body"},
    )


@app.exception_handler(ProofError)
async def proof_error_handler(request: Request, exc: ProofError):
    # Backend detail stays in the server log via the chained cause.
    log = logger.warning if exc.http_status < 500 else logger.error
    log(f"[API] {exc.code} on {request.url.path}: {exc.__cause__ or exc}")
    return JSONResponse(status_code=exc.http_status, content={"error": exc.message})


# ═══════════════════════════════════════════════════════════════════════════════
# SYSTEM ENDPOINTS
# ═══════════════════════════════════════════════════════════════════════════════

@app.get("/health", tags=["System"])
def health_check() -> dict:
    """
    Liveness probe. Static apart from uptime; never triggers key setup.
    """
    return {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "uptime_seconds": round(time.time() - _BOOT_TIME, 2),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "key_setup": current_setup_state().value,
    }


def _announce_endpoints() -> None:
    logger.info(f"[MAIN] {settings.PROJECT_NAME} starting on port {settings.PORT}")
    logger.info("[MAIN] API Endpoints:")
    logger.info(f"[MAIN]    POST {settings.API_PREFIX}/generate - Generate a zero-knowledge proof")
    logger.info(f"[MAIN]    POST {settings.API_PREFIX}/verify   - Verify a proof")
    logger.info("[MAIN]    GET  /health             - Health check")


def run() -> None:
    import uvicorn
    uvicorn.run("sumproof.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
