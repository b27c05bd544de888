"""
Model invariant validation.
These checks confirm structural properties a loaded model must keep.

Rule CRUD reports failures through return values and never raises, so
these checks are run by the owner of a model, e.g. after bulk-loading
rules from storage and before building role links.
"""

from .config import (
    POLICY_SECTIONS,
    REQUIRED_SECTIONS,
    SECTION_NAME_MAP,
    SECTION_POLICY,
    SECTION_ROLE,
)
from .errors import InvariantViolationError
from .model import Model


def validate_required_sections(model: Model):
    """
    Validate that every required section is present.

    Args:
        model: Model to check

    Raises:
        InvariantViolationError: If a required section is missing
    """
    missing = [SECTION_NAME_MAP[sec] for sec in REQUIRED_SECTIONS if not model.has_section(sec)]
    if missing:
        raise InvariantViolationError(f"Model missing sections: {', '.join(missing)}")


def validate_rule_arity(model: Model):
    """
    Validate rule lengths against their definitions.

    Policy rules need exactly one value per token. Grouping rules need at
    least one value per `_` placeholder; extra values are ignored when
    role links are built.

    Args:
        model: Model to check

    Raises:
        InvariantViolationError: If a rule's length does not fit its definition
    """
    if model.has_section(SECTION_POLICY):
        for key, ast in model[SECTION_POLICY].items():
            expected = len(ast.tokens)
            for rule in ast.policy:
                if len(rule) != expected:
                    raise InvariantViolationError(
                        f"Rule {list(rule)} of {key} has {len(rule)} fields, expected {expected}"
                    )

    if model.has_section(SECTION_ROLE):
        for key, ast in model[SECTION_ROLE].items():
            required = ast.role_arity()
            for rule in ast.policy:
                if len(rule) < required:
                    raise InvariantViolationError(
                        f"Grouping rule {list(rule)} of {key} has {len(rule)} fields, "
                        f"needs at least {required}"
                    )


def validate_no_duplicates(model: Model):
    """
    Validate that no rule set holds two equal rules.

    Args:
        model: Model to check

    Raises:
        InvariantViolationError: If a duplicate is found
    """
    for sec in POLICY_SECTIONS:
        if not model.has_section(sec):
            continue
        for key, ast in model[sec].items():
            rules = list(ast.policy)
            if len(set(rules)) != len(rules):
                raise InvariantViolationError(f"Duplicate rules in {key}")


def validate_storage_frozen(model: Model, expected_hashed: dict):
    """
    Validate that storage choices match a previous snapshot.

    Args:
        model: Model to check
        expected_hashed: {(sec, key): hashed} captured earlier

    Raises:
        InvariantViolationError: If an assertion changed storage
    """
    for (sec, key), hashed in expected_hashed.items():
        ast = model.get_assertion(sec, key)
        if ast is None or ast.uses_hashed_storage != hashed:
            raise InvariantViolationError(f"Storage of {sec}.{key} changed")


def storage_snapshot(model: Model) -> dict:
    """Capture the storage variant of every p/g assertion."""
    return {
        (sec, key): ast.uses_hashed_storage
        for sec in POLICY_SECTIONS
        if model.has_section(sec)
        for key, ast in model[sec].items()
    }


def check_all_invariants(model: Model):
    """
    Run all structural invariant checks.

    Args:
        model: Model to check

    Raises:
        InvariantViolationError: If any invariant is violated
    """
    validate_required_sections(model)
    validate_rule_arity(model)
    validate_no_duplicates(model)
