"""
Variable resolution engine: fills a snippet's command template.

Resolution is a pure function of (snippet, raw values, config):

1. Validate every non-computed variable's candidate value (optional, on by default)
2. For each variable in declaration order:
   a. Look up its raw value (missing -> "")
   b. Compute its resolved value (computed compose, boolean, transform, default)
   c. Replace every ``<name>`` placeholder with the resolved value
3. Return the substituted command

Any error aborts the call; no partially substituted command is returned.

Example:
    command = resolve(snippet, {"namespace": "all"}, config)
    # "kubectl get pods -A"
"""

import logging
import re
from collections.abc import Mapping

from .computed import evaluate_computed
from .exceptions import ValuePatternError
from .resolver import ExpressionEvaluator, TemplateRenderError, get_default_evaluator
from .schema import Snippet, SnippetConfig, Variable
from .transforms import resolve_transform
from .validation import validate_with_config
from .variable_types import strategy_for

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"<([A-Za-z_][\w-]*)>")

# Field name the raw value is bound to inside value_pattern templates
VALUE_FIELD = "Value"


def effective_default(variable: Variable, config: SnippetConfig | None) -> str:
    """The variable's own default, else the default of its variable type."""
    if variable.default_value:
        return variable.default_value
    return strategy_for(variable.type).type_default(variable, config)


def candidate_value(variable: Variable, raw: str, config: SnippetConfig | None) -> str:
    """Value a prompt would accept: the raw value, or the default when left empty."""
    return raw if raw else effective_default(variable, config)


def resolve_value(
    variable: Variable,
    raw: str,
    raw_values: Mapping[str, str],
    config: SnippetConfig | None,
    evaluator: ExpressionEvaluator | None = None,
    declared: tuple[str, ...] = (),
) -> str:
    """
    Compute one variable's final textual value.

    Precedence:
        1. computed with compose -> compose rendered against all raw values
        2. type strategy (boolean -> true_value / false_value, "" without transform)
        3. transform present -> empty_value for "", value_pattern for non-empty,
           raw value when no pattern; never the default
        4. no transform -> raw value, or the default when raw is empty

    Raises:
        TransformTemplateNotFoundError, ComposeTemplateError, ValuePatternError
    """
    evaluator = evaluator or get_default_evaluator()
    transform = resolve_transform(variable, config)

    if variable.computed:
        if transform is not None and transform.compose:
            return evaluate_computed(variable, transform, raw_values, declared, evaluator)
        logger.warning(
            f"Computed variable '{variable.name}' has no compose template, using its raw value"
        )

    special = strategy_for(variable.type).resolve(variable, raw, transform)
    if special is not None:
        return special

    if transform is not None:
        if raw == "":
            return transform.empty_value
        if transform.value_pattern:
            try:
                return evaluator.render(transform.value_pattern, {VALUE_FIELD: raw})
            except TemplateRenderError as e:
                raise ValuePatternError(transform.value_pattern, e.reason, variable.name) from e
        return raw

    if raw == "":
        return effective_default(variable, config)
    return raw


def validate_values(
    snippet: Snippet, raw_values: Mapping[str, str] | None, config: SnippetConfig | None
) -> None:
    """
    Validate every non-computed variable's candidate value.

    Raises:
        ValidationFailedError: First variable (in declaration order) that fails
    """
    raw_values = raw_values or {}
    for variable in snippet.variables:
        if variable.computed:
            continue
        raw = raw_values.get(variable.name) or ""
        validate_with_config(variable, candidate_value(variable, raw, config), config)


def resolve(
    snippet: Snippet,
    raw_values: Mapping[str, str] | None,
    config: SnippetConfig | None,
    validate: bool = True,
    evaluator: ExpressionEvaluator | None = None,
) -> str:
    """
    Resolve all variables and substitute them into the snippet's command.

    Args:
        snippet: Snippet to process
        raw_values: Raw values keyed by variable name (missing keys -> "")
        config: Shared, read-only config (transform templates, variable types)
        validate: Validate candidate values before resolving (default: True)
        evaluator: Expression evaluator (shared default when omitted)

    Returns:
        Fully substituted command string

    Raises:
        SnippetError: Any validation or resolution error, tagged with the variable name
    """
    raw_values = raw_values or {}
    declared = tuple(snippet.variable_names)

    if validate:
        validate_values(snippet, raw_values, config)

    command = snippet.command
    for variable in snippet.variables:
        raw = raw_values.get(variable.name) or ""
        value = resolve_value(variable, raw, raw_values, config, evaluator, declared)
        logger.debug(f"Resolved {variable.placeholder} -> {value!r}")
        command = command.replace(variable.placeholder, value)

    return command


# Alias kept for callers of the command-line interface
process_template = resolve


def placeholders(command: str) -> list[str]:
    """Placeholder names in a command template, in order of first appearance."""
    seen: list[str] = []
    for name in PLACEHOLDER_PATTERN.findall(command):
        if name not in seen:
            seen.append(name)
    return seen


def missing_variables(snippet: Snippet) -> list[str]:
    """Placeholders in the command that no declared variable will replace."""
    declared = set(snippet.variable_names)
    return [name for name in placeholders(snippet.command) if name not in declared]


class SnippetProcessor:
    """
    Resolves snippets against one config.

    Holds only the config and the evaluator, both read-only, so a single
    processor can serve concurrent calls.

    Example:
        processor = SnippetProcessor(config)
        snippet = config.snippets["kubectl-get-pods"]
        command = processor.process_snippet(snippet, {"namespace": "all"})
    """

    def __init__(self, config: SnippetConfig, evaluator: ExpressionEvaluator | None = None):
        self.config = config
        self.evaluator = evaluator or get_default_evaluator()

    def process_snippet(
        self, snippet: Snippet, values: Mapping[str, str] | None, validate: bool = True
    ) -> str:
        """Resolve a snippet with the given raw values."""
        return resolve(snippet, values, self.config, validate=validate, evaluator=self.evaluator)

    def process_named(
        self, name: str, values: Mapping[str, str] | None, validate: bool = True
    ) -> str:
        """
        Resolve a snippet by its config name.

        Raises:
            KeyError: Snippet not found
        """
        if name not in self.config.snippets:
            raise KeyError(f"template '{name}' not found")
        return self.process_snippet(self.config.snippets[name], values, validate=validate)

    def validate_value(self, snippet: Snippet, variable_name: str, value: str) -> None:
        """
        Check one candidate value (re-prompt loop for a single variable).

        Raises:
            KeyError: Variable not declared by the snippet
            ValidationFailedError: Value rejected
        """
        variable = snippet.get_variable(variable_name)
        if variable is None:
            raise KeyError(f"variable '{variable_name}' not found in snippet '{snippet.name}'")
        validate_with_config(variable, value, self.config)

    def prompt_variables(self, snippet: Snippet) -> list[Variable]:
        """Variables a caller must solicit values for (computed ones are derived)."""
        return [variable for variable in snippet.variables if not variable.computed]


__all__ = [
    "resolve",
    "resolve_value",
    "process_template",
    "validate_values",
    "effective_default",
    "candidate_value",
    "placeholders",
    "missing_variables",
    "SnippetProcessor",
]
