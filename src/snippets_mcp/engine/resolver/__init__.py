"""
Expression evaluator package.

Renders the ``{{ }}`` mini-language used by ``value_pattern`` and ``compose``
transforms. Templates may be written in Jinja2 syntax or in the Go
text/template syntax used by existing snippet files; a priority-ordered rule
pipeline rewrites the latter before a sandboxed Jinja2 environment renders it.

Public API:
    - ExpressionEvaluator: Render templates against a string-keyed map
    - TemplateRenderError: Raised on any parse/render failure
    - TransformRule: Base class for custom rewriting rules
    - convert_go_expression: Convert a single Go pipeline to Jinja2
"""

from .evaluator import ExpressionEvaluator, TemplateRenderError, get_default_evaluator
from .rules import RuleContext, RuleType, TransformRule
from .security_rules import SecurityError
from .syntax_rules import ExpressionSyntaxError, convert_go_expression

__all__ = [
    "ExpressionEvaluator",
    "TemplateRenderError",
    "get_default_evaluator",
    "TransformRule",
    "RuleType",
    "RuleContext",
    "SecurityError",
    "ExpressionSyntaxError",
    "convert_go_expression",
]
