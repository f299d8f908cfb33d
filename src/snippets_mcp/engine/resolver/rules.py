"""
Rule system foundation for expression rewriting.

Rules are applied in priority order to rewrite an expression template before
it is compiled by Jinja2. Security rules run first (priority 1-9), followed by
syntax rules (10-49).

Rule Types:
    - SECURITY: Reject constructs outside the supported expression subset
    - SYNTAX: Rewrite Go text/template syntax into Jinja2 syntax

Example:
    class MyRule(TransformRule):
        rule_type = RuleType.SYNTAX
        priority = 30

        def applies_to(self, context: RuleContext) -> bool:
            return "{{" in context.expression

        def transform(self, context: RuleContext) -> RuleContext:
            context.expression = context.expression.replace("old", "new")
            return context

        @property
        def description(self) -> str:
            return "Rewrites old into new"
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RuleType(Enum):
    """Types of rewriting rules."""

    SYNTAX = "syntax"
    SECURITY = "security"


@dataclass
class RuleContext:
    """
    Context passed to rules for processing.

    Attributes:
        expression: Template text being rewritten
        metadata: Rule-specific metadata (e.g. go_syntax flag)
    """

    expression: str
    metadata: dict[str, Any] = field(default_factory=dict)


class TransformRule(ABC):
    """Base class for rewriting rules (lower priority value runs first)."""

    rule_type: RuleType
    priority: int = 0

    @abstractmethod
    def applies_to(self, context: RuleContext) -> bool:
        """Check if rule applies to this context."""

    @abstractmethod
    def transform(self, context: RuleContext) -> RuleContext:
        """Apply the rewrite, returning the (possibly modified) context."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this rule does."""
