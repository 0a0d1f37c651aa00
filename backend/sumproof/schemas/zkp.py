import base64
import binascii

from pydantic import BaseModel, StrictInt, field_validator


def _decode_proof(value):
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise ValueError("proof must be a base64 string")
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as e:
        raise ValueError(f"proof is not valid base64: {e}") from e


class ProofRequest(BaseModel):
    a: StrictInt    # secret
    b: StrictInt    # secret
    sum: StrictInt  # public, a + b


class ProofResponse(BaseModel):
    proof: str  # base64 of the serialized proof
    sum: int
    message: str

    @classmethod
    def from_proof_bytes(cls, proof: bytes, sum: int, message: str) -> "ProofResponse":
        return cls(proof=base64.b64encode(proof).decode("ascii"), sum=sum, message=message)


class VerifyRequest(BaseModel):
    proof: bytes
    sum: StrictInt

    @field_validator("proof", mode="before")
    @classmethod
    def _proof_from_base64(cls, value):
        return _decode_proof(value)


class VerifyResponse(BaseModel):
    valid: bool
    message: str


class ErrorResponse(BaseModel):
    error: str
