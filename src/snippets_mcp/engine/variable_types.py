"""
Variable type strategies.

A variable's ``type`` name is dispatched through a closed lookup table:

    boolean  -> BooleanType  (raw value mapped to true_value / false_value)
    regex    -> RegexType    (value must itself compile as a regex)
    anything else -> NamedType (resolved through config.variable_types)

Call sites ask ``strategy_for(variable.type)`` instead of branching on type
names themselves.
"""

import re

from .exceptions import InvalidRegexValueError
from .schema import SnippetConfig, Transform, Validation, Variable

BOOLEAN_TYPE = "boolean"
REGEX_TYPE = "regex"

# Case-sensitive: "True" and "YES" are falsy
TRUTHY_VALUES = frozenset({"true", "yes", "1"})


def is_truthy(raw: str) -> bool:
    """Classify a raw boolean value."""
    return raw in TRUTHY_VALUES


class NamedType:
    """
    Type resolved through the config's ``variable_types`` map.

    Supplies the inherited default and the type-level validation rules.
    Unknown or empty type names contribute nothing.
    """

    name = ""
    consults_config = True

    def type_default(self, variable: Variable, config: SnippetConfig | None) -> str:
        """Default value inherited from the configured variable type."""
        if config is None:
            return ""
        var_type = config.get_variable_type(variable.type)
        return var_type.default if var_type else ""

    def type_rules(self, variable: Variable, config: SnippetConfig | None) -> Validation | None:
        """Type-level validation rules (checked separately from the variable's own)."""
        if config is None or not self.consults_config:
            return None
        var_type = config.get_variable_type(variable.type)
        return var_type.validation if var_type else None

    def check_value(self, variable: Variable, value: str) -> None:
        """Built-in value check for this type (none for named types)."""
        return None

    def resolve(self, variable: Variable, raw: str, transform: Transform | None) -> str | None:
        """Type-specific resolution; None means use the regular transform path."""
        return None


class BooleanType(NamedType):
    """
    Boolean flags.

    The resolved value depends only on whether the raw value is truthy:
    ``true_value`` or ``false_value`` of the transform, or the empty string
    when the variable has no transform.
    """

    name = BOOLEAN_TYPE

    def resolve(self, variable: Variable, raw: str, transform: Transform | None) -> str | None:
        if transform is None:
            return ""
        return transform.true_value if is_truthy(raw) else transform.false_value


class RegexType(NamedType):
    """Values that are themselves regular expressions."""

    name = REGEX_TYPE
    consults_config = False

    def check_value(self, variable: Variable, value: str) -> None:
        try:
            re.compile(value)
        except re.error as e:
            raise InvalidRegexValueError(variable.name, str(e)) from e


TYPE_STRATEGIES: dict[str, NamedType] = {
    BOOLEAN_TYPE: BooleanType(),
    REGEX_TYPE: RegexType(),
}

_NAMED_TYPE = NamedType()


def strategy_for(type_name: str) -> NamedType:
    """Look up the strategy for a type name (built-ins first, then config types)."""
    return TYPE_STRATEGIES.get(type_name, _NAMED_TYPE)


__all__ = [
    "BOOLEAN_TYPE",
    "REGEX_TYPE",
    "TRUTHY_VALUES",
    "is_truthy",
    "NamedType",
    "BooleanType",
    "RegexType",
    "TYPE_STRATEGIES",
    "strategy_for",
]
