"""
Snippet resolution engine.

Loads snippet configurations, resolves variable values (defaults,
transforms, boolean flags, computed compositions), validates candidate
values and substitutes them into command templates.
"""

from .computed import evaluate_computed
from .exceptions import (
    ComposeTemplateError,
    EnumMismatchError,
    ExpressionError,
    InvalidRegexValueError,
    InvalidValidationPatternError,
    NotANumberError,
    PatternMismatchError,
    RangeInvalidError,
    RequiredMissingError,
    SnippetError,
    TransformTemplateNotFoundError,
    ValidationFailedError,
    ValuePatternError,
)
from .load_result import LoadResult, LoadStatus
from .loader import (
    check_config_templates,
    default_config,
    dump_config,
    load_config,
    load_config_from_file,
    load_config_from_yaml,
    merge_configs,
    save_config,
)
from .processor import (
    SnippetProcessor,
    missing_variables,
    placeholders,
    process_template,
    resolve,
    resolve_value,
)
from .registry import SnippetRegistry
from .resolver import ExpressionEvaluator, TemplateRenderError
from .schema import (
    Settings,
    Snippet,
    SnippetConfig,
    SnippetSource,
    Transform,
    TransformTemplate,
    Validation,
    Variable,
    VariableType,
)
from .transforms import resolve_transform
from .validation import is_valid, validate, validate_with_config

__all__ = [
    # Schema
    "Snippet",
    "SnippetConfig",
    "SnippetSource",
    "Settings",
    "Transform",
    "TransformTemplate",
    "Validation",
    "Variable",
    "VariableType",
    # Loading
    "LoadResult",
    "LoadStatus",
    "load_config",
    "load_config_from_file",
    "load_config_from_yaml",
    "merge_configs",
    "check_config_templates",
    "default_config",
    "dump_config",
    "save_config",
    "SnippetRegistry",
    # Resolution
    "SnippetProcessor",
    "resolve",
    "resolve_value",
    "process_template",
    "resolve_transform",
    "evaluate_computed",
    "placeholders",
    "missing_variables",
    "ExpressionEvaluator",
    "TemplateRenderError",
    # Validation
    "validate",
    "validate_with_config",
    "is_valid",
    # Errors
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
