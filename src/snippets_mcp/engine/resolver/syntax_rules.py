"""
Syntax rewriting rules for expression templates.

Existing snippet files use Go text/template syntax
(``{{.Value}}``, ``{{if eq .Value "all"}}-A{{else}}-n {{.Value}}{{end}}``).
These rules rewrite that syntax into the equivalent Jinja2 so both styles
render through the same sandboxed environment.

Rules:
    - GoActionRule: Rewrite if/else if/else/end actions and prefix function calls
    - DotFieldRule: Strip the leading dot from field references (.name -> name)
"""

import re

from .rules import RuleContext, RuleType, TransformRule


class ExpressionSyntaxError(ValueError):
    """Raised when Go-style template syntax cannot be rewritten."""

    pass


ACTION_PATTERN = re.compile(r"\{\{(-?)\s*(.*?)\s*(-?)\}\}", re.DOTALL)
CONTROL_PATTERN = re.compile(
    r"(else\s+if|if|else|end|range|with|define|template|block)\b(.*)", re.DOTALL
)

TOKEN_PATTERN = re.compile(
    r"""\s*(?:
        (?P<str>"(?:\\.|[^"\\])*")
      | (?P<raw>`[^`]*`)
      | (?P<lparen>\()
      | (?P<rparen>\))
      | (?P<field>\.[A-Za-z_][\w.]*)
      | (?P<num>-?\d+(?:\.\d+)?)
      | (?P<ident>[A-Za-z_]\w*)
      | (?P<pipe>\|)
    )""",
    re.VERBOSE,
)

COMPARISONS = {"eq": "==", "ne": "!=", "lt": "<", "le": "<=", "gt": ">", "ge": ">="}
GO_FUNCTIONS = frozenset({*COMPARISONS, "and", "or", "not", "len"})
GO_CONSTANTS = {"true": "true", "false": "false", "nil": "none"}
GO_FIELD_PATTERN = re.compile(r"(?:^|[\s(])\.[A-Za-z_]")


def _tokenize(text: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = TOKEN_PATTERN.match(text, pos)
        if not match or match.end() == pos:
            raise ExpressionSyntaxError(f"unexpected character {text[pos:].strip()[:1]!r}")
        kind = match.lastgroup or ""
        tokens.append((kind, match.group(kind)))
        pos = match.end()
    return tokens


class _GoExpressionConverter:
    """Convert one Go pipeline (prefix function calls) into a Jinja2 expression."""

    def __init__(self, text: str):
        self.tokens = _tokenize(text)
        self.pos = 0

    def convert(self) -> str:
        if not self.tokens:
            raise ExpressionSyntaxError("missing value for command")
        expr = self._command()
        if self.pos != len(self.tokens):
            raise ExpressionSyntaxError(f"unexpected {self.tokens[self.pos][1]!r}")
        return expr

    def _command(self) -> str:
        kind, value = self.tokens[self.pos]
        if kind == "ident" and value in GO_FUNCTIONS:
            self.pos += 1
            args = self._operands()
            return self._call(value, args)
        args = self._operands()
        if len(args) != 1:
            raise ExpressionSyntaxError("can't give argument to non-function")
        return args[0]

    def _operands(self) -> list[str]:
        args: list[str] = []
        while self.pos < len(self.tokens):
            kind, value = self.tokens[self.pos]
            if kind == "rparen":
                break
            self.pos += 1
            if kind == "lparen":
                if self.pos >= len(self.tokens):
                    raise ExpressionSyntaxError("unclosed left paren")
                inner = self._command()
                if self.pos >= len(self.tokens) or self.tokens[self.pos][0] != "rparen":
                    raise ExpressionSyntaxError("unclosed left paren")
                self.pos += 1
                args.append(f"({inner})")
            elif kind == "field":
                args.append(value[1:])
            elif kind == "str" or kind == "num":
                args.append(value)
            elif kind == "raw":
                args.append(repr(value[1:-1]))
            elif kind == "ident" and value in GO_CONSTANTS:
                args.append(GO_CONSTANTS[value])
            elif kind == "pipe":
                raise ExpressionSyntaxError("pipelines are not supported")
            else:
                raise ExpressionSyntaxError(f'function "{value}" not defined')
        return args

    @staticmethod
    def _call(name: str, args: list[str]) -> str:
        if name == "eq":
            if len(args) < 2:
                raise ExpressionSyntaxError("eq requires at least two arguments")
            first, *others = args
            return "(" + " or ".join(f"{first} == {other}" for other in others) + ")"
        if name in COMPARISONS:
            if len(args) != 2:
                raise ExpressionSyntaxError(f"{name} requires exactly two arguments")
            return f"({args[0]} {COMPARISONS[name]} {args[1]})"
        if name in ("and", "or"):
            if not args:
                raise ExpressionSyntaxError(f"{name} requires at least one argument")
            return "(" + f" {name} ".join(args) + ")"
        if len(args) != 1:
            raise ExpressionSyntaxError(f"{name} requires exactly one argument")
        if name == "not":
            return f"(not {args[0]})"
        return f"({args[0]} | length)"


GO_ARGUMENT_START = (".", '"', "`", "$", "(")


def _is_go_action(keyword: str, rest: str) -> bool:
    """
    Tell a Go action apart from a Jinja reference to a variable of the same name.

    ``{{end}}`` and ``{{else}}`` are always actions. ``if`` needs a condition,
    and range/with/define/template/block need an argument that starts the way
    Go arguments do, so ``{{ block }}`` or ``{{ range | upper }}`` stay Jinja.
    """
    if keyword in ("else", "end"):
        return True
    if keyword in ("if", "else if"):
        return bool(rest)
    return rest.startswith(GO_ARGUMENT_START)


def _looks_like_go_call(body: str) -> bool:
    """A Go call starts with a Go function and references a .field or a string literal."""
    first_word = re.match(r"([A-Za-z_]\w*)\s+(.*)", body, re.DOTALL)
    if not first_word or first_word.group(1) not in GO_FUNCTIONS:
        return False
    args = first_word.group(2)
    return bool(GO_FIELD_PATTERN.search(args)) or args[:1] in ("\"", "`")


def convert_go_expression(text: str) -> str:
    """Convert a Go template pipeline such as ``eq .Value "all"`` to Jinja2."""
    return _GoExpressionConverter(text).convert()


class GoActionRule(TransformRule):
    """
    Rewrite Go control actions and function calls into Jinja2.

    Transforms:
        {{if eq .Value "all"}}  ->  {% if (Value == "all") %}
        {{else if .flag}}       ->  {% elif flag %}
        {{else}}                ->  {% else %}
        {{end}}                 ->  {% endif %}
        {{len .items}}          ->  {{ (items | length) }}

    Only ``if`` blocks are supported; range/with/define/template/block raise
    ExpressionSyntaxError when followed by a Go argument. Bare ``{{end}}`` and
    ``{{else}}`` are always actions, so variables with those two names cannot
    be referenced as ``{{ end }}`` or ``{{ else }}``.
    """

    rule_type = RuleType.SYNTAX
    priority = 10

    def applies_to(self, context: RuleContext) -> bool:
        return "{{" in context.expression

    def transform(self, context: RuleContext) -> RuleContext:
        converted = False

        def rewrite(match: re.Match[str]) -> str:
            nonlocal converted
            left, body, right = match.group(1), match.group(2), match.group(3)
            control = CONTROL_PATTERN.fullmatch(body)
            keyword = re.sub(r"\s+", " ", control.group(1)) if control else ""
            rest = control.group(2).strip() if control else ""
            if control and _is_go_action(keyword, rest):
                converted = True
                if keyword == "if":
                    return "{%" + left + " if " + convert_go_expression(rest) + " " + right + "%}"
                if keyword == "else if":
                    return "{%" + left + " elif " + convert_go_expression(rest) + " " + right + "%}"
                if keyword not in ("else", "end"):
                    raise ExpressionSyntaxError(f"unsupported action '{keyword}'")
                if rest:
                    raise ExpressionSyntaxError(f"unexpected {rest!r} in {keyword}")
                statement = "else" if keyword == "else" else "endif"
                return "{%" + left + " " + statement + " " + right + "%}"

            if _looks_like_go_call(body):
                converted = True
                return "{{" + left + " " + convert_go_expression(body) + " " + right + "}}"
            return match.group(0)

        context.expression = ACTION_PATTERN.sub(rewrite, context.expression)
        if converted:
            context.metadata["go_syntax"] = True
        return context

    @property
    def description(self) -> str:
        return "Convert Go text/template actions to Jinja2 statements"


class DotFieldRule(TransformRule):
    """
    Strip the leading dot from Go field references inside ``{{ }}``.

    Transforms: {{.resource_type}}/{{.resource_name}} -> {{resource_type}}/{{resource_name}}
    String literals inside the tag are left untouched.
    """

    rule_type = RuleType.SYNTAX
    priority = 20

    FIELD_PATTERN = re.compile(
        r"""("(?:\\.|[^"\\])*"|'(?:\\.|[^'\\])*')|(?<![\w)\]])\.(?=[A-Za-z_])"""
    )

    def applies_to(self, context: RuleContext) -> bool:
        return "{{" in context.expression and "." in context.expression

    def transform(self, context: RuleContext) -> RuleContext:
        def strip_fields(body: str) -> str:
            return self.FIELD_PATTERN.sub(lambda m: m.group(1) or "", body)

        def rewrite(match: re.Match[str]) -> str:
            left, body, right = match.group(1), match.group(2), match.group(3)
            return "{{" + left + " " + strip_fields(body) + " " + right + "}}"

        context.expression = ACTION_PATTERN.sub(rewrite, context.expression)
        return context

    @property
    def description(self) -> str:
        return "Convert Go field references (.name) to plain names"
