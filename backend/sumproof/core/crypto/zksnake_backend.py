"""
Groth16 backend built on zksnake, fixed to BN254.

The relation, the R1CS, the Groth16 keys and every witness reduction all
use the BN254 scalar field; there is no curve option.

Compiles a RelationDefinition into a zksnake R1CS, runs the Groth16 setup,
and proves/verifies with the resulting keys. zksnake keeps the proving and
verifying key inside its ``Groth16`` object, so both key handles returned by
``setup`` point at that object; callers treat them as opaque.

Witness satisfaction is checked here, before the prover runs, so that an
assignment violating the relation fails in ``prove`` rather than yielding
an unverifiable proof.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from zksnake.arithmetization import ConstraintSystem, R1CS, Var
from zksnake.groth16 import Groth16, Proof

from sumproof.core.crypto.backend import BackendError, MalformedProofError, ProofBackend
from sumproof.core.crypto.relation import (
    BN254_SCALAR_FIELD,
    Add,
    Constant,
    Expression,
    PublicWitness,
    RelationDefinition,
    VarRef,
    Witness,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledRelation:
    relation: RelationDefinition
    constraint_system: Any
    r1cs: Any


@dataclass(frozen=True)
class Groth16Key:
    """Opaque handle on a set-up zksnake Groth16 instance."""
    role: str
    engine: Any
    compiled: CompiledRelation


def _to_symbolic(expression: Expression, symbols: Dict[str, Any]) -> Any:
    if isinstance(expression, VarRef):
        return symbols[expression.name]
    if isinstance(expression, Constant):
        return expression.value % BN254_SCALAR_FIELD
    if isinstance(expression, Add):
        terms = [_to_symbolic(term, symbols) for term in expression.terms]
        total = terms[0]
        for term in terms[1:]:
            total = total + term
        return total
    raise BackendError(f"Unsupported expression node {type(expression).__name__}")


class ZksnakeGroth16Backend(ProofBackend):

    name = "zksnake"
    field_modulus = BN254_SCALAR_FIELD

    def compile(self, relation: RelationDefinition) -> CompiledRelation:
        symbols = {v.name: Var(v.name) for v in relation.variables}
        cs = ConstraintSystem(
            [v.name for v in relation.secret_variables()],
            [v.name for v in relation.public_variables()],
            self.field_modulus,
        )
        for constraint in relation.constraints:
            # zksnake solves for the left-hand side, so the public output goes there.
            cs.add_constraint(
                _to_symbolic(constraint.right, symbols) == _to_symbolic(constraint.left, symbols)
            )
        for v in relation.public_variables():
            cs.set_public(symbols[v.name])

        r1cs = R1CS(cs)
        r1cs.compile()
        logger.info(
            f"[ZKSNAKE] Compiled relation '{relation.name}' "
            f"({len(relation.constraints)} constraint(s), {len(relation.variables)} variable(s))"
        )
        return CompiledRelation(relation=relation, constraint_system=cs, r1cs=r1cs)

    def setup(self, constraint_system: CompiledRelation) -> Tuple[Groth16Key, Groth16Key]:
        engine = Groth16(constraint_system.r1cs)
        try:
            engine.setup()
        except Exception as exc:
            raise BackendError(f"Groth16 setup failed: {exc}") from exc
        return (
            Groth16Key("proving", engine, constraint_system),
            Groth16Key("verifying", engine, constraint_system),
        )

    def prove(self, constraint_system: CompiledRelation, proving_key: Groth16Key, witness: Witness) -> Any:
        relation = constraint_system.relation
        if not relation.is_satisfied(witness.values, self.field_modulus):
            raise BackendError(f"Witness does not satisfy relation '{relation.name}'")

        inputs = {
            name: value % self.field_modulus for name, value in witness.secret_values().items()
        }
        try:
            solution = constraint_system.constraint_system.solve(inputs)
            public_values, private_values = constraint_system.r1cs.generate_witness(solution)
            return proving_key.engine.prove(public_values, private_values)
        except Exception as exc:
            raise BackendError(f"Groth16 prover failed: {exc}") from exc

    def verify(self, proof: Any, verifying_key: Groth16Key, public_witness: PublicWitness) -> bool:
        compiled = verifying_key.compiled
        relation = compiled.relation
        # Zero secrets only shape the solution dict; the public vector is
        # overwritten with the claimed values below.
        try:
            solution = compiled.constraint_system.solve(
                {v.name: 0 for v in relation.secret_variables()}
            )
            for name, value in public_witness.values.items():
                solution[name] = value % self.field_modulus
            public_values, _ = compiled.r1cs.generate_witness(solution)
            return bool(verifying_key.engine.verify(proof, public_values))
        except Exception as exc:
            raise BackendError(f"Groth16 verifier failed: {exc}") from exc

    def serialize_proof(self, proof: Any) -> bytes:
        return bytes(proof.to_bytes())

    def deserialize_proof(self, data: bytes) -> Any:
        if not data:
            raise MalformedProofError("Empty proof")
        try:
            return Proof.from_bytes(data)
        except Exception as exc:
            raise MalformedProofError(f"Cannot decode Groth16 proof: {exc}") from exc
