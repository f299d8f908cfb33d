"""
Sandboxed expression evaluator with rule-based rewriting pipeline.

This module renders the small templating language used by ``value_pattern``
and ``compose`` transforms:

    Template text
          ↓
    Security rules (reject loops, imports, dunder access)
          ↓
    Syntax rules (Go text/template -> Jinja2)
          ↓
    Jinja2 SandboxedEnvironment (StrictUndefined)
          ↓
    Rendered string

Example:
    evaluator = ExpressionEvaluator()
    evaluator.render('{{if eq .Value "all"}}-A{{else}}-n {{.Value}}{{end}}', {"Value": "all"})
    # Returns: "-A"
"""

import shlex
from functools import lru_cache
from typing import Any

from jinja2 import StrictUndefined, Template
from jinja2.sandbox import SandboxedEnvironment

from .rules import RuleContext, TransformRule
from .security_rules import ForbiddenNameRule, SecurityError, StatementWhitelistRule
from .syntax_rules import DotFieldRule, ExpressionSyntaxError, GoActionRule


class TemplateRenderError(ValueError):
    """
    An expression template failed to rewrite, compile or render.

    Attributes:
        template: Template text as written by the user
        reason: Underlying error message
    """

    def __init__(self, template: str, reason: str):
        self.template = template
        self.reason = reason
        super().__init__(f"Failed to evaluate template: {template}\nError: {reason}")


class ExpressionEvaluator:
    """
    Render expression templates against a map of named string values.

    The evaluator holds no per-call state: one instance can be shared by any
    number of concurrent resolutions.

    Example:
        evaluator = ExpressionEvaluator()
        evaluator.render("{{.resource_type}}/{{.resource_name}}",
                         {"resource_type": "pod", "resource_name": "my-pod"})
        # Returns: "pod/my-pod"
    """

    def __init__(self, rules: list[TransformRule] | None = None):
        """
        Initialize the evaluator.

        Args:
            rules: Optional extra rewriting rules, merged with the defaults
        """
        self.rules = self._initialize_rules(rules)
        self.env = SandboxedEnvironment(
            undefined=StrictUndefined,
            autoescape=False,
            trim_blocks=False,
            lstrip_blocks=False,
            keep_trailing_newline=True,
        )
        self._register_extensions()

    def _initialize_rules(self, custom_rules: list[TransformRule] | None) -> list[TransformRule]:
        default_rules = [
            ForbiddenNameRule(),  # Security first
            StatementWhitelistRule(),
            GoActionRule(),  # Syntax rewriting
            DotFieldRule(),
        ]
        all_rules = default_rules + (custom_rules or [])
        return sorted(all_rules, key=lambda r: r.priority)

    def _register_extensions(self) -> None:
        """Register the filters available to templates."""
        self.env.filters.update(
            {
                "quote": shlex.quote,
            }
        )

    def rewrite(self, template_str: str) -> str:
        """
        Apply rewriting rules in priority order.

        Args:
            template_str: Template as written in the snippet config

        Returns:
            Jinja2 template text

        Raises:
            TemplateRenderError: If a security or syntax rule rejects the template
        """
        context = RuleContext(expression=template_str)
        try:
            for rule in self.rules:
                if rule.applies_to(context):
                    context = rule.transform(context)
        except (SecurityError, ExpressionSyntaxError) as e:
            raise TemplateRenderError(template_str, str(e)) from e
        return context.expression

    def compile(self, template_str: str) -> Template:
        """Rewrite and compile a template (raises TemplateRenderError on syntax errors)."""
        transformed = self.rewrite(template_str)
        try:
            return self.env.from_string(transformed)
        except Exception as e:
            raise TemplateRenderError(template_str, str(e)) from e

    def render(self, template_str: str, values: dict[str, Any]) -> str:
        """
        Render a template against named values.

        Args:
            template_str: Template text (Jinja2 or Go text/template syntax)
            values: Field name -> value mapping

        Returns:
            Rendered string

        Raises:
            TemplateRenderError: If the template fails to parse or render
        """
        # No template markers - return as-is
        if "{{" not in template_str and "{%" not in template_str:
            return template_str

        template = self.compile(template_str)
        try:
            return template.render(values)
        except Exception as e:
            raise TemplateRenderError(
                template_str, f"{e} (available fields: {sorted(values)})"
            ) from e

    def check(self, template_str: str) -> None:
        """Validate template syntax without rendering (used when loading configs)."""
        if "{{" in template_str or "{%" in template_str:
            self.compile(template_str)


@lru_cache(maxsize=1)
def get_default_evaluator() -> ExpressionEvaluator:
    """Shared evaluator with the default rule set (safe to share, it holds no call state)."""
    return ExpressionEvaluator()
