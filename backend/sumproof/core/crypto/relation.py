"""
Relation Definition — the arithmetic statement a Sum-Proof attests to.

A relation is plain data: a set of named variables tagged ``secret`` or
``public`` and a list of equality constraints over linear expressions.
Backends compile a relation into their own constraint system; the service
layer only uses it to shape witnesses.

    Statement:  "I know A, B such that A + B == Sum"
    Secret:     A, B
    Public:     Sum

Expressions are built with the ``+`` operator on variable references and
integer constants, and a constraint is declared with :func:`assert_equal`::

    a, b, total = var("A"), var("B"), var("Sum")
    relation = RelationDefinition(
        name="addition",
        variables=(secret("A"), secret("B"), public("Sum")),
        constraints=(assert_equal(a + b, total),),
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Mapping, Tuple, Union


# BN254 scalar field — the field every witness value is reduced into.
BN254_SCALAR_FIELD: int = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)


class RelationError(ValueError):
    """Raised when a relation or a witness does not fit its declaration."""
    pass


class Visibility(str, Enum):
    """Who gets to see a variable's value."""
    SECRET = "secret"
    PUBLIC = "public"


# ═══════════════════════════════════════════════════════════════════════════════
# EXPRESSIONS
# ═══════════════════════════════════════════════════════════════════════════════

class Expression:
    """Base class for linear expressions over relation variables."""

    def references(self) -> FrozenSet[str]:
        raise NotImplementedError

    def evaluate(self, values: Mapping[str, int], modulus: int) -> int:
        raise NotImplementedError

    def __add__(self, other: Union["Expression", int]) -> "Add":
        return Add((self, _coerce(other)))

    def __radd__(self, other: Union["Expression", int]) -> "Add":
        return Add((_coerce(other), self))


@dataclass(frozen=True)
class VarRef(Expression):
    name: str

    def references(self) -> FrozenSet[str]:
        return frozenset((self.name,))

    def evaluate(self, values: Mapping[str, int], modulus: int) -> int:
        return values[self.name] % modulus


@dataclass(frozen=True)
class Constant(Expression):
    value: int

    def references(self) -> FrozenSet[str]:
        return frozenset()

    def evaluate(self, values: Mapping[str, int], modulus: int) -> int:
        return self.value % modulus


@dataclass(frozen=True)
class Add(Expression):
    terms: Tuple[Expression, ...]

    def references(self) -> FrozenSet[str]:
        names: FrozenSet[str] = frozenset()
        for term in self.terms:
            names = names | term.references()
        return names

    def evaluate(self, values: Mapping[str, int], modulus: int) -> int:
        return sum(term.evaluate(values, modulus) for term in self.terms) % modulus

    def __add__(self, other: Union[Expression, int]) -> "Add":
        # Flatten chains like a + b + c into one node.
        return Add(self.terms + (_coerce(other),))


def _coerce(value: Union[Expression, int]) -> Expression:
    if isinstance(value, Expression):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return Constant(value)
    raise TypeError(f"Cannot use {type(value).__name__} in a relation expression")


def var(name: str) -> VarRef:
    """Reference a declared variable by name."""
    return VarRef(name)


# ═══════════════════════════════════════════════════════════════════════════════
# DECLARATIONS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Variable:
    name: str
    visibility: Visibility

    @property
    def is_public(self) -> bool:
        return self.visibility is Visibility.PUBLIC


def secret(name: str) -> Variable:
    return Variable(name, Visibility.SECRET)


def public(name: str) -> Variable:
    return Variable(name, Visibility.PUBLIC)


@dataclass(frozen=True)
class Constraint:
    """Equality ``left == right`` that every satisfying witness must meet."""
    left: Expression
    right: Expression

    def references(self) -> FrozenSet[str]:
        return self.left.references() | self.right.references()

    def holds(self, values: Mapping[str, int], modulus: int) -> bool:
        return self.left.evaluate(values, modulus) == self.right.evaluate(values, modulus)


def assert_equal(left: Union[Expression, int], right: Union[Expression, int]) -> Constraint:
    return Constraint(_coerce(left), _coerce(right))


# ═══════════════════════════════════════════════════════════════════════════════
# WITNESSES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PublicWitness:
    """Values of the public variables only. Never holds a secret."""
    relation_name: str
    values: Mapping[str, int]

    def ordered(self, relation: "RelationDefinition") -> Tuple[int, ...]:
        """Public values in declaration order."""
        return tuple(self.values[v.name] for v in relation.public_variables())


@dataclass(frozen=True)
class Witness:
    """A complete assignment of every variable in a relation."""
    relation: "RelationDefinition"
    values: Mapping[str, int]

    def public(self) -> PublicWitness:
        """Project onto the public variables."""
        return PublicWitness(
            relation_name=self.relation.name,
            values={v.name: self.values[v.name] for v in self.relation.public_variables()},
        )

    def secret_values(self) -> Dict[str, int]:
        return {v.name: self.values[v.name] for v in self.relation.secret_variables()}


# ═══════════════════════════════════════════════════════════════════════════════
# RELATION
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RelationDefinition:
    """
    Immutable declaration of variables and constraints.

    Construction fails with RelationError if a name is declared twice or a
    constraint references an undeclared variable.
    """
    name: str
    variables: Tuple[Variable, ...]
    constraints: Tuple[Constraint, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples.
        object.__setattr__(self, "variables", tuple(self.variables))
        object.__setattr__(self, "constraints", tuple(self.constraints))

        names = [v.name for v in self.variables]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise RelationError(f"Relation '{self.name}' declares {duplicates} more than once")

        declared = set(names)
        for index, constraint in enumerate(self.constraints):
            unknown = sorted(constraint.references() - declared)
            if unknown:
                raise RelationError(
                    f"Constraint #{index} of relation '{self.name}' references "
                    f"undeclared variables {unknown}"
                )

    def variable(self, name: str) -> Variable:
        for v in self.variables:
            if v.name == name:
                return v
        raise RelationError(f"Relation '{self.name}' has no variable '{name}'")

    def secret_variables(self) -> Tuple[Variable, ...]:
        return tuple(v for v in self.variables if not v.is_public)

    def public_variables(self) -> Tuple[Variable, ...]:
        return tuple(v for v in self.variables if v.is_public)

    def full_witness(self, values: Mapping[str, int]) -> Witness:
        """Assign every declared variable. Satisfaction is NOT checked here."""
        self._check_assignment(values, self.variables)
        return Witness(relation=self, values=dict(values))

    def public_witness(self, values: Mapping[str, int]) -> PublicWitness:
        """Assign the public variables only; secret names are refused."""
        self._check_assignment(values, self.public_variables())
        return PublicWitness(relation_name=self.name, values=dict(values))

    def is_satisfied(self, values: Mapping[str, int], modulus: int = BN254_SCALAR_FIELD) -> bool:
        """Evaluate every constraint over the field of size ``modulus``."""
        return all(c.holds(values, modulus) for c in self.constraints)

    def _check_assignment(self, values: Mapping[str, int], expected: Iterable[Variable]) -> None:
        expected_names = {v.name for v in expected}
        missing = sorted(expected_names - set(values))
        unexpected = sorted(set(values) - expected_names)
        if missing or unexpected:
            raise RelationError(
                f"Assignment for relation '{self.name}' is invalid "
                f"(missing={missing}, unexpected={unexpected})"
            )
        for name, value in values.items():
            if not isinstance(value, int) or isinstance(value, bool):
                raise RelationError(f"Value for '{name}' must be an integer")


def _addition_relation() -> RelationDefinition:
    a, b, total = var("A"), var("B"), var("Sum")
    return RelationDefinition(
        name="addition",
        variables=(secret("A"), secret("B"), public("Sum")),
        constraints=(assert_equal(a + b, total),),
    )


# Built once at import; setup and every witness use this same instance.
ADDITION_RELATION: RelationDefinition = _addition_relation()
