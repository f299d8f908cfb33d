"""Validation engine for candidate variable values.

Two layers are applied to a value before it is accepted:

1. Local validation (``validate``): the variable's own required flag and
   inline rules.
2. Type validation (``validate_with_config``): the built-in check of the
   variable's type (``regex`` values must compile) or, for configured types,
   a second independent pass using only the type's rules.

The layers are never merged, so enum short-circuiting in one layer cannot
hide a failure in the other.
"""

import re

from .exceptions import (
    EnumMismatchError,
    InvalidValidationPatternError,
    NotANumberError,
    PatternMismatchError,
    RangeInvalidError,
    RequiredMissingError,
    ValidationFailedError,
)
from .schema import SnippetConfig, Validation, Variable
from .variable_types import strategy_for

INTEGER_PATTERN = re.compile(r"[+-]?\d+", re.ASCII)


def check_rules(
    variable_name: str, value: str, rules: Validation | None, required: bool = False
) -> None:
    """
    Check a value against one set of rules.

    Order: required, enum (short-circuits everything after it), range, pattern.
    Empty values skip range and pattern; only ``required`` rejects them.

    Raises:
        RequiredMissingError: required and empty
        EnumMismatchError: not one of the allowed literals
        NotANumberError: range declared and value is not an integer
        RangeInvalidError: integer outside the inclusive bounds
        InvalidValidationPatternError: declared pattern does not compile
        PatternMismatchError: value does not match the pattern
    """
    if required and value == "":
        raise RequiredMissingError(variable_name)

    if rules is None:
        return

    if rules.enum:
        if value in rules.enum:
            return
        raise EnumMismatchError(variable_name, rules.enum)

    if rules.has_range and value != "":
        if not INTEGER_PATTERN.fullmatch(value):
            raise NotANumberError(variable_name, value)
        number = int(value)
        minimum, maximum = rules.range
        if number < minimum or number > maximum:
            raise RangeInvalidError(variable_name, minimum, maximum)

    if rules.pattern and value != "":
        try:
            compiled = re.compile(rules.pattern)
        except re.error as e:
            raise InvalidValidationPatternError(variable_name, rules.pattern, str(e)) from e
        if not compiled.search(value):
            raise PatternMismatchError(variable_name, rules.pattern)


def validate(variable: Variable, value: str) -> None:
    """Local validation using only the variable's own rules."""
    check_rules(variable.name, value, variable.validation, required=variable.required)


def validate_with_config(variable: Variable, value: str, config: SnippetConfig | None) -> None:
    """
    Local validation followed by type validation.

    Args:
        variable: Variable declaration
        value: Candidate value
        config: Shared config providing variable types (may be None)

    Raises:
        ValidationFailedError: First failing rule of either layer
    """
    validate(variable, value)

    # Empty values were settled by the local pass (required)
    if value == "":
        return

    strategy = strategy_for(variable.type)
    strategy.check_value(variable, value)

    type_rules = strategy.type_rules(variable, config)
    if type_rules is not None:
        check_rules(variable.name, value, type_rules)


def is_valid(variable: Variable, value: str, config: SnippetConfig | None = None) -> bool:
    """Convenience predicate for interactive callers."""
    try:
        validate_with_config(variable, value, config)
    except ValidationFailedError:
        return False
    return True


__all__ = ["check_rules", "validate", "validate_with_config", "is_valid", "INTEGER_PATTERN"]
