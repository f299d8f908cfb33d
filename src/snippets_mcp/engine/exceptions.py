"""Structured errors raised by the snippet resolution engine.

Every error is terminal for the current resolution attempt and carries the
name of the offending variable plus the rule that failed, so callers can
re-prompt for just that variable and retry.

Hierarchy:
    SnippetError
    ├── TransformTemplateNotFoundError
    ├── ExpressionError
    │   ├── ComposeTemplateError
    │   └── ValuePatternError
    └── ValidationFailedError
        ├── RequiredMissingError
        ├── EnumMismatchError
        ├── RangeInvalidError
        ├── NotANumberError
        ├── PatternMismatchError
        ├── InvalidRegexValueError
        └── InvalidValidationPatternError
"""

from __future__ import annotations


class SnippetError(Exception):
    """
    Base class for resolution and validation errors.

    Attributes:
        variable_name: Name of the variable being processed when the error occurred
        rule: Taxonomy name of the failed rule (e.g. ``"EnumMismatch"``)
    """

    rule = "SnippetError"

    def __init__(self, message: str, variable_name: str = ""):
        self.variable_name = variable_name
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Serializable form for tool responses."""
        return {"error": self.message, "variable": self.variable_name, "rule": self.rule}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(variable={self.variable_name!r}, message={self.message!r})"


class TransformTemplateNotFoundError(SnippetError):
    """Named transform reference does not exist in the config."""

    rule = "TransformTemplateNotFound"

    def __init__(self, template_name: str, variable_name: str = ""):
        self.template_name = template_name
        super().__init__(
            f"processing variable {variable_name}: transform template '{template_name}' not found",
            variable_name,
        )


class ExpressionError(SnippetError):
    """
    An expression template failed to parse or render.

    Attributes:
        template: The template text that failed
    """

    rule = "ExpressionError"
    kind = "expression"

    def __init__(self, template: str, reason: str, variable_name: str = ""):
        self.template = template
        self.reason = reason
        super().__init__(
            f"processing variable {variable_name}: invalid {self.kind} template "
            f"{template!r}: {reason}",
            variable_name,
        )


class ComposeTemplateError(ExpressionError):
    rule = "ComposeTemplateError"
    kind = "compose"


class ValuePatternError(ExpressionError):
    rule = "ValuePatternError"
    kind = "value_pattern"


class ValidationFailedError(SnippetError):
    """A candidate value was rejected by a validation rule."""

    rule = "ValidationFailed"


class RequiredMissingError(ValidationFailedError):
    rule = "RequiredMissing"

    def __init__(self, variable_name: str):
        super().__init__(f"variable {variable_name} is required", variable_name)


class EnumMismatchError(ValidationFailedError):
    rule = "EnumMismatch"

    def __init__(self, variable_name: str, allowed: list[str]):
        self.allowed = list(allowed)
        super().__init__(
            f"variable {variable_name} must be one of: {', '.join(allowed)}", variable_name
        )


class NotANumberError(ValidationFailedError):
    rule = "NotANumber"

    def __init__(self, variable_name: str, value: str):
        self.value = value
        super().__init__(f"variable {variable_name} must be a valid number", variable_name)


class RangeInvalidError(ValidationFailedError):
    rule = "RangeInvalid"

    def __init__(self, variable_name: str, minimum: int, maximum: int):
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"variable {variable_name} must be between {minimum} and {maximum}", variable_name
        )


class PatternMismatchError(ValidationFailedError):
    rule = "PatternMismatch"

    def __init__(self, variable_name: str, pattern: str):
        self.pattern = pattern
        super().__init__(
            f"variable {variable_name} does not match required format", variable_name
        )


class InvalidRegexValueError(ValidationFailedError):
    rule = "InvalidRegexValue"

    def __init__(self, variable_name: str, reason: str):
        super().__init__(
            f"variable {variable_name} must be a valid regular expression: {reason}",
            variable_name,
        )


class InvalidValidationPatternError(ValidationFailedError):
    """The declared validation pattern itself does not compile."""

    rule = "InvalidValidationPattern"

    def __init__(self, variable_name: str, pattern: str, reason: str):
        self.pattern = pattern
        super().__init__(
            f"variable {variable_name} has invalid pattern: {reason}", variable_name
        )


__all__ = [
    "SnippetError",
    "TransformTemplateNotFoundError",
    "ExpressionError",
    "ComposeTemplateError",
    "ValuePatternError",
    "ValidationFailedError",
    "RequiredMissingError",
    "EnumMismatchError",
    "NotANumberError",
    "RangeInvalidError",
    "PatternMismatchError",
    "InvalidRegexValueError",
    "InvalidValidationPatternError",
]
