"""
Security rules for expression templates.

Expression templates are a narrow, sandboxed language: field lookup on a
string map, comparisons and if/elif/else branching. These rules reject
anything outside that subset before Jinja2 ever compiles the template.

Rules:
    - ForbiddenNameRule: Block dunder attribute/name access
    - StatementWhitelistRule: Allow only if/elif/else/endif statements
"""

import re

from .rules import RuleContext, RuleType, TransformRule


class SecurityError(Exception):
    """Raised when a security rule is violated."""

    pass


# Bodies of {{ ... }} and {% ... %} tags
TAG_BODY_PATTERN = re.compile(r"\{([{%])(.*?)[}%]\}", re.DOTALL)


class ForbiddenNameRule(TransformRule):
    """Block access to dunder names such as ``__class__`` inside tags."""

    rule_type = RuleType.SECURITY
    priority = 1

    def applies_to(self, context: RuleContext) -> bool:
        return "__" in context.expression

    def transform(self, context: RuleContext) -> RuleContext:
        for match in TAG_BODY_PATTERN.finditer(context.expression):
            if "__" in match.group(2):
                raise SecurityError("Access to '__' names is forbidden in expressions")
        return context

    @property
    def description(self) -> str:
        return "Prevent access to dunder names in expressions"


class StatementWhitelistRule(TransformRule):
    """
    Allow only conditional statements.

    Loops, macros, imports and assignments are rejected so that every
    template terminates and can only read the values it is given.
    """

    rule_type = RuleType.SECURITY
    priority = 2

    ALLOWED_STATEMENTS = frozenset({"if", "elif", "else", "endif"})
    STATEMENT_PATTERN = re.compile(r"\{%[-+]?\s*(\w+)")

    def applies_to(self, context: RuleContext) -> bool:
        return "{%" in context.expression

    def transform(self, context: RuleContext) -> RuleContext:
        for keyword in self.STATEMENT_PATTERN.findall(context.expression):
            if keyword not in self.ALLOWED_STATEMENTS:
                raise SecurityError(f"Statement '{keyword}' is not allowed in expressions")
        return context

    @property
    def description(self) -> str:
        return "Restrict statements to if/elif/else/endif"
