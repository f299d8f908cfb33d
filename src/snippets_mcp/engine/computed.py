"""Computed variable evaluation.

A computed variable's value is its transform's ``compose`` template rendered
against the raw values of every variable in the snippet. Compose sees raw
caller-supplied values only: one computed variable cannot reference another
computed variable's result.
"""

from collections.abc import Iterable, Mapping

from .exceptions import ComposeTemplateError
from .resolver import ExpressionEvaluator, TemplateRenderError, get_default_evaluator
from .schema import Transform, Variable


def compose_context(raw_values: Mapping[str, str], declared: Iterable[str] = ()) -> dict[str, str]:
    """
    Build the field map for a compose template.

    Declared variables missing from ``raw_values`` are bound to the empty
    string; names neither declared nor supplied stay undefined (an error).
    """
    context = {name: "" for name in declared}
    for name, value in raw_values.items():
        context[name] = "" if value is None else value
    return context


def evaluate_computed(
    variable: Variable,
    transform: Transform,
    raw_values: Mapping[str, str],
    declared: Iterable[str] = (),
    evaluator: ExpressionEvaluator | None = None,
) -> str:
    """
    Render a computed variable's compose template.

    Args:
        variable: The computed variable
        transform: Its resolved transform (must carry ``compose``)
        raw_values: Every variable's raw value, keyed by name
        declared: Variable names declared by the snippet
        evaluator: Expression evaluator (shared default when omitted)

    Returns:
        Composed value

    Raises:
        ComposeTemplateError: Template fails to parse or render
    """
    evaluator = evaluator or get_default_evaluator()
    try:
        return evaluator.render(transform.compose, compose_context(raw_values, declared))
    except TemplateRenderError as e:
        raise ComposeTemplateError(transform.compose, e.reason, variable.name) from e


__all__ = ["evaluate_computed", "compose_context"]
