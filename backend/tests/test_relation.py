import pytest

from sumproof.core.crypto.relation import (
    ADDITION_RELATION,
    BN254_SCALAR_FIELD,
    Add,
    Constant,
    RelationDefinition,
    RelationError,
    Visibility,
    assert_equal,
    public,
    secret,
    var,
)

# ═══════════════════════════════════════════════════════════════════════════════
# ADDITION RELATION SHAPE
# ═══════════════════════════════════════════════════════════════════════════════

def test_addition_relation_declares_two_secrets_and_one_public():
    assert [v.name for v in ADDITION_RELATION.secret_variables()] == ["A", "B"]
    assert [v.name for v in ADDITION_RELATION.public_variables()] == ["Sum"]
    assert ADDITION_RELATION.variable("Sum").visibility is Visibility.PUBLIC


def test_addition_relation_has_single_equality():
    (constraint,) = ADDITION_RELATION.constraints
    assert constraint.left == Add((var("A"), var("B")))
    assert constraint.right == var("Sum")


def test_relation_is_immutable():
    with pytest.raises(AttributeError):
        ADDITION_RELATION.name = "other"
    assert isinstance(ADDITION_RELATION.constraints, tuple)


def test_rebuilt_relation_equals_module_instance():
    # Setup and proving must see the same shape.
    rebuilt = RelationDefinition(
        name="addition",
        variables=[secret("A"), secret("B"), public("Sum")],
        constraints=[assert_equal(var("A") + var("B"), var("Sum"))],
    )
    assert rebuilt == ADDITION_RELATION


# ═══════════════════════════════════════════════════════════════════════════════
# VALIDATION
# ═══════════════════════════════════════════════════════════════════════════════

def test_undeclared_variable_in_constraint_rejected():
    with pytest.raises(RelationError, match="undeclared"):
        RelationDefinition(
            name="broken",
            variables=(secret("A"), public("Sum")),
            constraints=(assert_equal(var("A") + var("B"), var("Sum")),),
        )


def test_duplicate_variable_rejected():
    with pytest.raises(RelationError, match="more than once"):
        RelationDefinition(name="dup", variables=(secret("A"), public("A")))


def test_unknown_variable_lookup():
    with pytest.raises(RelationError):
        ADDITION_RELATION.variable("C")


# ═══════════════════════════════════════════════════════════════════════════════
# WITNESSES
# ═══════════════════════════════════════════════════════════════════════════════

def test_full_witness_projects_to_public_only():
    witness = ADDITION_RELATION.full_witness({"A": 5, "B": 3, "Sum": 8})
    projected = witness.public()
    assert dict(projected.values) == {"Sum": 8}
    assert projected == ADDITION_RELATION.public_witness({"Sum": 8})
    assert witness.secret_values() == {"A": 5, "B": 3}


def test_full_witness_does_not_check_satisfaction():
    witness = ADDITION_RELATION.full_witness({"A": 5, "B": 3, "Sum": 9})
    assert not ADDITION_RELATION.is_satisfied(witness.values)


def test_full_witness_requires_every_variable():
    with pytest.raises(RelationError, match="missing=\\['B'\\]"):
        ADDITION_RELATION.full_witness({"A": 5, "Sum": 8})


def test_public_witness_refuses_secret_values():
    with pytest.raises(RelationError, match="unexpected=\\['A'\\]"):
        ADDITION_RELATION.public_witness({"A": 5, "Sum": 8})


def test_witness_values_must_be_integers():
    with pytest.raises(RelationError):
        ADDITION_RELATION.full_witness({"A": 5, "B": "3", "Sum": 8})
    with pytest.raises(RelationError):
        ADDITION_RELATION.public_witness({"Sum": True})


# ═══════════════════════════════════════════════════════════════════════════════
# FIELD ARITHMETIC
# ═══════════════════════════════════════════════════════════════════════════════

def test_satisfaction_over_bn254_field():
    assert ADDITION_RELATION.is_satisfied({"A": 5, "B": 3, "Sum": 8})
    assert not ADDITION_RELATION.is_satisfied({"A": 5, "B": 3, "Sum": 9})
    # Negative values wrap into the field.
    assert ADDITION_RELATION.is_satisfied({"A": -2, "B": 10, "Sum": 8})
    assert ADDITION_RELATION.is_satisfied({"A": 1, "B": 0, "Sum": BN254_SCALAR_FIELD + 1})


def test_constants_and_chained_addition():
    relation = RelationDefinition(
        name="offset",
        variables=(secret("x"), secret("y"), public("z")),
        constraints=(assert_equal(var("x") + var("y") + 10, var("z")),),
    )
    (constraint,) = relation.constraints
    assert constraint.left == Add((var("x"), var("y"), Constant(10)))
    assert relation.is_satisfied({"x": 1, "y": 2, "z": 13})
    assert not relation.is_satisfied({"x": 1, "y": 2, "z": 3})


def test_non_integer_operand_rejected():
    with pytest.raises(TypeError):
        var("A") + 1.5
