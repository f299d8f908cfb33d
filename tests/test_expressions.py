"""Tests for the expression evaluator and its rewriting rules."""

import pytest

from snippets_mcp.engine.resolver import (
    ExpressionEvaluator,
    ExpressionSyntaxError,
    RuleContext,
    RuleType,
    TemplateRenderError,
    TransformRule,
    convert_go_expression,
    get_default_evaluator,
)
from snippets_mcp.engine.resolver.syntax_rules import DotFieldRule, GoActionRule

NAMESPACE_PATTERN = '{{if eq .Value "all"}}-A{{else}}-n {{.Value}}{{end}}'


@pytest.fixture
def evaluator() -> ExpressionEvaluator:
    return ExpressionEvaluator()


class TestGoSyntax:
    """Go text/template syntax rendered through Jinja2."""

    @pytest.mark.parametrize("value,expected", [("all", "-A"), ("default", "-n default")])
    def test_if_else(self, evaluator: ExpressionEvaluator, value: str, expected: str) -> None:
        assert evaluator.render(NAMESPACE_PATTERN, {"Value": value}) == expected

    def test_field_reference(self, evaluator: ExpressionEvaluator) -> None:
        result = evaluator.render(
            "{{.resource_type}}/{{.resource_name}}",
            {"resource_type": "pod", "resource_name": "my-pod"},
        )
        assert result == "pod/my-pod"

    def test_truthiness_of_empty_string(self, evaluator: ExpressionEvaluator) -> None:
        template = "{{if .port}}-p {{.port}}{{end}}"
        assert evaluator.render(template, {"port": ""}) == ""
        assert evaluator.render(template, {"port": "80"}) == "-p 80"

    def test_else_if(self, evaluator: ExpressionEvaluator) -> None:
        template = '{{if eq .Value "a"}}A{{else if eq .Value "b"}}B{{else}}other{{end}}'
        assert evaluator.render(template, {"Value": "a"}) == "A"
        assert evaluator.render(template, {"Value": "b"}) == "B"
        assert evaluator.render(template, {"Value": "c"}) == "other"

    def test_eq_with_several_operands(self, evaluator: ExpressionEvaluator) -> None:
        template = '{{if eq .Value "json" "yaml"}}structured{{else}}text{{end}}'
        assert evaluator.render(template, {"Value": "yaml"}) == "structured"
        assert evaluator.render(template, {"Value": "wide"}) == "text"

    def test_and_or_not(self, evaluator: ExpressionEvaluator) -> None:
        template = "{{if and .a (not .b)}}yes{{else}}no{{end}}"
        assert evaluator.render(template, {"a": "1", "b": ""}) == "yes"
        assert evaluator.render(template, {"a": "1", "b": "1"}) == "no"
        assert evaluator.render("{{if or .a .b}}x{{end}}", {"a": "", "b": "1"}) == "x"

    def test_ne(self, evaluator: ExpressionEvaluator) -> None:
        assert evaluator.render('{{if ne .Value "x"}}diff{{end}}', {"Value": "y"}) == "diff"

    def test_len(self, evaluator: ExpressionEvaluator) -> None:
        assert evaluator.render("{{len .Value}}", {"Value": "abcd"}) == "4"

    def test_trim_markers(self, evaluator: ExpressionEvaluator) -> None:
        template = "a {{- if .x -}} b {{- end -}} c"
        assert evaluator.render(template, {"x": "1"}) == "abc"

    def test_string_literal_dots_preserved(self, evaluator: ExpressionEvaluator) -> None:
        template = '{{if eq .host "example.com"}}local{{else}}remote{{end}}'
        assert evaluator.render(template, {"host": "example.com"}) == "local"

    def test_multiline_compose(self, evaluator: ExpressionEvaluator) -> None:
        template = "{{if .a}}--a {{.a}}{{end}}\n{{if .b}}--b {{.b}}{{end}}"
        assert evaluator.render(template, {"a": "1", "b": ""}) == "--a 1\n"


class TestJinjaSyntax:
    """Native Jinja2 templates pass through unchanged."""

    def test_plain_jinja(self, evaluator: ExpressionEvaluator) -> None:
        assert evaluator.render("{{ Value }}", {"Value": "x"}) == "x"

    def test_jinja_statement(self, evaluator: ExpressionEvaluator) -> None:
        template = "{% if Value == 'all' %}-A{% else %}-n {{ Value }}{% endif %}"
        assert evaluator.render(template, {"Value": "all"}) == "-A"

    def test_jinja_not_expression(self, evaluator: ExpressionEvaluator) -> None:
        assert evaluator.render("{{ not Value }}", {"Value": ""}) == "True"

    def test_quote_filter(self, evaluator: ExpressionEvaluator) -> None:
        assert evaluator.render("{{ Value | quote }}", {"Value": "a b"}) == "'a b'"

    def test_no_markers_returned_as_is(self, evaluator: ExpressionEvaluator) -> None:
        assert evaluator.render("--static", {}) == "--static"

    def test_attribute_access_on_values(self, evaluator: ExpressionEvaluator) -> None:
        assert evaluator.render("{{ Value.upper() }}", {"Value": "x"}) == "X"

    @pytest.mark.parametrize(
        "template,expected",
        [
            ("{{ block }}", "b"),
            ("{{ with }}/{{ define }}", "w/d"),
            ("{{ template | upper }}", "T"),
            ('{{ range ~ "-x" }}', "r-x"),
        ],
    )
    def test_names_shared_with_go_keywords(
        self, evaluator: ExpressionEvaluator, template: str, expected: str
    ) -> None:
        """Variables named like Go actions are plain references without Go arguments."""
        values = {"block": "b", "with": "w", "define": "d", "template": "t", "range": "r"}
        assert evaluator.render(template, values) == expected


class TestErrors:
    """Parse and render failures surface as TemplateRenderError."""

    def test_unclosed_action(self, evaluator: ExpressionEvaluator) -> None:
        with pytest.raises(TemplateRenderError):
            evaluator.render("{{.invalid syntax", {"Value": "x"})

    def test_undefined_field(self, evaluator: ExpressionEvaluator) -> None:
        with pytest.raises(TemplateRenderError) as exc_info:
            evaluator.render("{{.missing}}", {"Value": "x"})
        assert "available fields" in exc_info.value.reason

    def test_missing_end(self, evaluator: ExpressionEvaluator) -> None:
        with pytest.raises(TemplateRenderError):
            evaluator.render("{{if .Value}}x", {"Value": "1"})

    @pytest.mark.parametrize("action", ["range .items", "with .x", "define \"t\"", "template \"t\""])
    def test_unsupported_actions(self, evaluator: ExpressionEvaluator, action: str) -> None:
        with pytest.raises(TemplateRenderError, match="unsupported action"):
            evaluator.render("{{" + action + "}}x{{end}}", {"items": "", "x": ""})

    def test_unknown_function(self, evaluator: ExpressionEvaluator) -> None:
        with pytest.raises(TemplateRenderError):
            evaluator.render("{{if printf .Value}}x{{end}}", {"Value": "1"})

    def test_dunder_access_blocked(self, evaluator: ExpressionEvaluator) -> None:
        with pytest.raises(TemplateRenderError, match="forbidden"):
            evaluator.render("{{ Value.__class__ }}", {"Value": "x"})

    @pytest.mark.parametrize(
        "template",
        ["{% for x in Value %}{{ x }}{% endfor %}", "{% set y = 1 %}", "{% import 'x' as y %}"],
    )
    def test_statements_outside_whitelist(self, evaluator: ExpressionEvaluator, template: str) -> None:
        with pytest.raises(TemplateRenderError, match="not allowed"):
            evaluator.render(template, {"Value": "ab"})

    def test_check_validates_syntax_only(self, evaluator: ExpressionEvaluator) -> None:
        evaluator.check("{{.undefined_is_fine_here}}")
        evaluator.check("no markers")
        with pytest.raises(TemplateRenderError):
            evaluator.check("{{if .x}}")


class TestConvertGoExpression:
    """Single-pipeline conversion."""

    @pytest.mark.parametrize(
        "go,jinja",
        [
            (".Value", "Value"),
            ('eq .Value "all"', '(Value == "all")'),
            ('eq .Value "a" "b"', '(Value == "a" or Value == "b")'),
            ("ne .a .b", "(a != b)"),
            ("lt .a 5", "(a < 5)"),
            ("and .a .b .c", "(a and b and c)"),
            ("not .a", "(not a)"),
            ("len .a", "(a | length)"),
            ("and .a (eq .b `x`)", "(a and ((b == 'x')))"),
            ("eq .a nil", "(a == none)"),
        ],
    )
    def test_conversions(self, go: str, jinja: str) -> None:
        assert convert_go_expression(go) == jinja

    @pytest.mark.parametrize("go", ["", "eq .a", "ne .a", ".a .b", "eq .a | len", "(eq .a .b"])
    def test_invalid(self, go: str) -> None:
        with pytest.raises(ExpressionSyntaxError):
            convert_go_expression(go)


class TestRules:
    """Rule pipeline ordering and custom rules."""

    def test_default_rule_order(self, evaluator: ExpressionEvaluator) -> None:
        types = [rule.rule_type for rule in evaluator.rules]
        assert types[:2] == [RuleType.SECURITY, RuleType.SECURITY]
        priorities = [rule.priority for rule in evaluator.rules]
        assert priorities == sorted(priorities)

    def test_go_rule_marks_metadata(self) -> None:
        context = GoActionRule().transform(RuleContext(expression="{{if .a}}x{{end}}"))
        assert context.metadata["go_syntax"] is True
        assert context.expression == "{% if a %}x{% endif %}"

    def test_dot_field_rule(self) -> None:
        context = DotFieldRule().transform(RuleContext(expression="{{.a}}.{{.b}}"))
        assert context.expression == "{{ a }}.{{ b }}"

    def test_custom_rule(self) -> None:
        class ShoutRule(TransformRule):
            rule_type = RuleType.SYNTAX
            priority = 30

            def applies_to(self, context: RuleContext) -> bool:
                return "{{" in context.expression

            def transform(self, context: RuleContext) -> RuleContext:
                context.expression = context.expression.replace("}}", " | upper }}")
                return context

            @property
            def description(self) -> str:
                return "Upper-case every output"

        evaluator = ExpressionEvaluator(rules=[ShoutRule()])
        assert evaluator.render("{{.Value}}", {"Value": "abc"}) == "ABC"

    def test_default_evaluator_shared(self) -> None:
        assert get_default_evaluator() is get_default_evaluator()
