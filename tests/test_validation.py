"""Tests for variable validation (local rules and variable types)."""

import pytest

from snippets_mcp.engine import (
    EnumMismatchError,
    InvalidRegexValueError,
    InvalidValidationPatternError,
    NotANumberError,
    PatternMismatchError,
    RangeInvalidError,
    RequiredMissingError,
    SnippetConfig,
    ValidationFailedError,
    Variable,
    is_valid,
    validate,
    validate_with_config,
)
from snippets_mcp.engine.schema import Validation
from snippets_mcp.engine.validation import check_rules

EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"


class TestLocalValidation:
    """Variable.validation rules checked in order: required, enum, range, pattern."""

    @pytest.mark.parametrize(
        "value,error",
        [
            ("1", None),
            ("8080", None),
            ("65535", None),
            ("", None),
            ("0", RangeInvalidError),
            ("65536", RangeInvalidError),
            ("-1", RangeInvalidError),
            ("abc", NotANumberError),
            ("80a", NotANumberError),
            ("8.5", NotANumberError),
        ],
    )
    def test_range(self, value: str, error: type | None) -> None:
        """Inclusive integer bounds; empty values are accepted."""
        variable = Variable(name="port", validation={"range": [1, 65535]})
        if error is None:
            validate(variable, value)
        else:
            with pytest.raises(error):
                validate(variable, value)

    @pytest.mark.parametrize(
        "value,valid",
        [
            ("user@example.com", True),
            ("first.last+tag@sub.example.org", True),
            ("", True),
            ("invalid-email", False),
            ("@example.com", False),
            ("user@", False),
        ],
    )
    def test_pattern(self, value: str, valid: bool) -> None:
        variable = Variable(name="email", validation={"pattern": EMAIL_PATTERN})
        if valid:
            validate(variable, value)
        else:
            with pytest.raises(PatternMismatchError, match="does not match required format"):
                validate(variable, value)

    def test_pattern_is_partial_match(self) -> None:
        """An unanchored pattern matches anywhere in the value."""
        variable = Variable(name="name", validation={"pattern": "[0-9]"})
        validate(variable, "abc1def")
        with pytest.raises(PatternMismatchError):
            validate(variable, "abcdef")

    @pytest.mark.parametrize(
        "value,valid",
        [("dev", True), ("staging", True), ("prod", True), ("production", False), ("", False)],
    )
    def test_enum(self, value: str, valid: bool) -> None:
        """Empty is not an enum member."""
        variable = Variable(name="env", validation={"enum": ["dev", "staging", "prod"]})
        if valid:
            validate(variable, value)
        else:
            with pytest.raises(EnumMismatchError, match="must be one of: dev, staging, prod"):
                validate(variable, value)

    def test_enum_short_circuits_range_and_pattern(self) -> None:
        """An enum match skips the remaining local rules."""
        variable = Variable(
            name="port",
            validation={"enum": ["any"], "range": [1, 10], "pattern": "^[0-9]+$"},
        )
        validate(variable, "any")

    def test_enum_numbers_from_yaml(self) -> None:
        """Numeric enum entries compare as strings."""
        variable = Variable(name="replicas", validation={"enum": [1, 3, 5]})
        validate(variable, "3")

    def test_required(self) -> None:
        variable = Variable(name="name", required=True)
        with pytest.raises(RequiredMissingError, match="variable name is required"):
            validate(variable, "")
        validate(variable, "x")

    def test_required_checked_before_enum(self) -> None:
        variable = Variable(name="env", required=True, validation={"enum": ["dev"]})
        with pytest.raises(RequiredMissingError):
            validate(variable, "")

    def test_range_then_pattern(self) -> None:
        """Range and pattern both apply when no enum is declared."""
        variable = Variable(name="port", validation={"range": [1, 9999], "pattern": "^80"})
        validate(variable, "8080")
        with pytest.raises(PatternMismatchError):
            validate(variable, "443")

    def test_incomplete_range_ignored(self) -> None:
        """A range needs exactly two bounds."""
        variable = Variable(name="n", validation={"range": [5]})
        validate(variable, "abc")

    def test_invalid_validation_pattern(self) -> None:
        variable = Variable(name="v", validation={"pattern": "(unclosed"})
        with pytest.raises(InvalidValidationPatternError) as exc_info:
            validate(variable, "x")
        assert exc_info.value.rule == "InvalidValidationPattern"

    def test_no_rules(self) -> None:
        validate(Variable(name="free"), "anything at all")

    def test_check_rules_without_rules(self) -> None:
        check_rules("v", "", None)
        check_rules("v", "", Validation())


class TestValidateWithConfig:
    """Local validation followed by the variable type's own pass."""

    @pytest.mark.parametrize(
        "value,error",
        [("8080", None), ("", None), ("0", RangeInvalidError), ("abc", NotANumberError)],
    )
    def test_port_type(self, config: SnippetConfig, value: str, error: type | None) -> None:
        variable = Variable(name="port", type="test_port")
        if error is None:
            validate_with_config(variable, value, config)
        else:
            with pytest.raises(error):
                validate_with_config(variable, value, config)

    @pytest.mark.parametrize("value,valid", [("debug", True), ("error", True), ("trace", False)])
    def test_log_level_type(self, config: SnippetConfig, value: str, valid: bool) -> None:
        variable = Variable(name="level", type="test_log_level")
        assert is_valid(variable, value, config) is valid

    @pytest.mark.parametrize("value,valid", [("dev", True), ("prod", True), ("qa", False)])
    def test_environment_type(self, config: SnippetConfig, value: str, valid: bool) -> None:
        variable = Variable(name="env", type="test_environment")
        assert is_valid(variable, value, config) is valid

    def test_empty_value_skips_type_rules(self, config: SnippetConfig) -> None:
        """Type enums do not reject an empty, optional value."""
        variable = Variable(name="env", type="test_environment")
        validate_with_config(variable, "", config)

    def test_layers_are_independent(self, config: SnippetConfig) -> None:
        """A local enum match does not bypass the type's rules."""
        variable = Variable(name="port", type="test_port", validation={"enum": ["0", "80"]})
        validate_with_config(variable, "80", config)
        with pytest.raises(RangeInvalidError):
            validate_with_config(variable, "0", config)

    def test_local_failure_reported_first(self, config: SnippetConfig) -> None:
        variable = Variable(name="port", type="test_port", validation={"pattern": "^9"})
        with pytest.raises(PatternMismatchError):
            validate_with_config(variable, "0", config)

    def test_unknown_type_has_no_rules(self, config: SnippetConfig) -> None:
        validate_with_config(Variable(name="v", type="unknown"), "anything", config)

    def test_without_config(self) -> None:
        """Only local rules apply when no config is given."""
        validate_with_config(Variable(name="port", type="test_port"), "99999", None)

    @pytest.mark.parametrize("value", ["^test.*$", r"\d{3}-\d{4}", "[a-z]+", "plain"])
    def test_regex_type_accepts_valid(self, value: str) -> None:
        validate_with_config(Variable(name="pattern", type="regex"), value, SnippetConfig())

    @pytest.mark.parametrize("value", ["[unclosed", "(group", "*start"])
    def test_regex_type_rejects_invalid(self, value: str) -> None:
        with pytest.raises(InvalidRegexValueError):
            validate_with_config(Variable(name="pattern", type="regex"), value, SnippetConfig())

    def test_regex_type_ignores_configured_rules(self) -> None:
        """A configured type named regex does not add rules to the built-in check."""
        config = SnippetConfig(variable_types={"regex": {"validation": {"enum": ["only"]}}})
        validate_with_config(Variable(name="pattern", type="regex"), "a+", config)

    def test_errors_share_base_class(self, config: SnippetConfig) -> None:
        with pytest.raises(ValidationFailedError):
            validate_with_config(Variable(name="port", type="test_port"), "70000", config)
