"""
Sum-Proof cryptographic core.

Public API:
    - RelationDefinition:  Declarative relation (variables + constraints).
    - ADDITION_RELATION:   The fixed ``A + B == Sum`` relation.
    - ProofBackend:        Contract every proof backend implements.
    - load_backend:        Instantiate a backend by name.

The zksnake Groth16 backend is not imported here; ``load_backend("zksnake")``
imports it on demand.
"""

from sumproof.core.crypto.relation import (
    ADDITION_RELATION,
    BN254_SCALAR_FIELD,
    PublicWitness,
    RelationDefinition,
    RelationError,
    Witness,
)
from sumproof.core.crypto.backend import (
    BackendError,
    KeyMaterial,
    MalformedProofError,
    ProofBackend,
    load_backend,
)

__all__ = [
    "ADDITION_RELATION",
    "BN254_SCALAR_FIELD",
    "PublicWitness",
    "RelationDefinition",
    "RelationError",
    "Witness",
    "BackendError",
    "KeyMaterial",
    "MalformedProofError",
    "ProofBackend",
    "load_backend",
]
