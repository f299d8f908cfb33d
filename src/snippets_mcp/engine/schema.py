"""
YAML snippet configuration schema with Pydantic v2 models.

This module defines the complete schema for snippet configuration files, including:
- Transforms (empty_value, value_pattern, true_value/false_value, compose)
- Validation rules (pattern, enum, range)
- Reusable transform templates and variable types
- Snippets with their ordered variable declarations
- Global settings (additional config files, interactive behaviour, selector)

All models are frozen: a loaded config is read-only input to the resolution
engine, which never mutates it.

Example configuration:
    transform_templates:
      kubectl-namespace:
        description: "Namespace flag, -A for all"
        transform:
          empty_value: ""
          value_pattern: '{{if eq .Value "all"}}-A{{else}}-n {{.Value}}{{end}}'

    variable_types:
      port:
        description: "TCP port"
        validation:
          range: [1, 65535]

    snippets:
      kubectl-get-pods:
        description: "List pods"
        command: "kubectl get pods <namespace>"
        variables:
          - name: namespace
            transformTemplate: kubectl-namespace
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from .load_result import LoadResult


def _stringify_scalar(v: Any) -> Any:
    """Accept unquoted YAML scalars such as ``default: 30``."""
    if v is None:
        return ""
    if isinstance(v, bool):
        return str(v).lower()
    if isinstance(v, (int, float)):
        return str(v)
    return v


class SnippetSource(str, Enum):
    """Where a snippet was loaded from (set by the loader, never persisted)."""

    GLOBAL = "global"
    LOCAL = "local"


class Transform(BaseModel):
    """
    Conditional transformation rules for a variable's raw value.

    Attributes:
        empty_value: Substitute used when the raw value is empty
        value_pattern: Expression template applied to a non-empty raw value,
            with the raw value bound to ``Value`` (``{{.Value}}`` / ``{{ Value }}``)
        true_value: Output for a truthy boolean variable
        false_value: Output for a falsy boolean variable
        compose: Expression template for computed variables, rendered against
            every variable's raw value
    """

    empty_value: str = Field(default="", description="Substitute for an empty raw value")
    value_pattern: str = Field(default="", description="Template for a non-empty raw value")
    true_value: str = Field(default="", description="Output when a boolean is truthy")
    false_value: str = Field(default="", description="Output when a boolean is falsy")
    compose: str = Field(default="", description="Template composing other raw values")

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator(
        "empty_value", "value_pattern", "true_value", "false_value", "compose", mode="before"
    )
    @classmethod
    def stringify_fields(cls, v: Any) -> Any:
        return _stringify_scalar(v)


class Validation(BaseModel):
    """
    Validation rules for a candidate value.

    Attributes:
        pattern: Regular expression the value must match (partial match)
        enum: Closed set of allowed literal values
        range: Two-element inclusive integer bound ``[min, max]``
    """

    pattern: str = Field(default="", description="Regular expression to match")
    enum: list[str] = Field(default_factory=list, description="Allowed literal values")
    range: list[int] = Field(default_factory=list, description="Inclusive [min, max] bound")

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("pattern", mode="before")
    @classmethod
    def stringify_pattern(cls, v: Any) -> Any:
        return _stringify_scalar(v)

    @field_validator("enum", mode="before")
    @classmethod
    def stringify_enum(cls, v: Any) -> Any:
        """YAML turns ``[1, 2]`` or ``[true, false]`` into non-strings; compare as text."""
        if isinstance(v, list):
            return [str(item).lower() if isinstance(item, bool) else str(item) for item in v]
        return v

    @property
    def has_range(self) -> bool:
        """Range applies only when exactly two bounds are declared."""
        return len(self.range) == 2


class Variable(BaseModel):
    """
    Template variable declaration within a snippet.

    Attributes:
        name: Variable name, matching the ``<name>`` placeholder
        description: Human-readable prompt text
        default_value: Value used when the raw value is empty (YAML key ``default``)
        required: Reject empty values during validation
        type: Variable type name (``boolean``, ``regex`` or a configured type)
        transform: Inline transform
        transform_template: Named transform reference (YAML key ``transformTemplate``),
            takes precedence over ``transform``
        validation: Inline validation rules
        computed: Value is composed from other variables instead of supplied
    """

    name: str = Field(description="Variable name", min_length=1)
    description: str = Field(default="", description="Human-readable description")
    default_value: str = Field(default="", alias="default", description="Default value")
    required: bool = Field(default=False, description="Whether a value is required")
    type: str = Field(default="", description="Variable type name")
    transform: Transform | None = Field(default=None, description="Inline transform")
    transform_template: str = Field(
        default="", alias="transformTemplate", description="Named transform template"
    )
    validation: Validation | None = Field(default=None, description="Validation rules")
    computed: bool = Field(default=False, description="Composed from other variables")

    model_config = {"extra": "forbid", "frozen": True, "populate_by_name": True}

    @field_validator("default_value", mode="before")
    @classmethod
    def stringify_default(cls, v: Any) -> Any:
        return _stringify_scalar(v)

    @property
    def placeholder(self) -> str:
        """Placeholder marker replaced by this variable's value."""
        return f"<{self.name}>"


class Snippet(BaseModel):
    """
    Stored command template with its variable declarations.

    Attributes:
        id: Snippet identifier
        name: Snippet name (defaults to its key in the config)
        description: Human-readable description
        command: Command template containing ``<name>`` placeholders
        variables: Ordered variable declarations
        tags: Free-form tags for filtering
        created_at: Creation timestamp
        updated_at: Last update timestamp
        source: Where the snippet was loaded from (not persisted)
    """

    id: str = Field(default="", description="Snippet identifier")
    name: str = Field(default="", description="Snippet name")
    description: str = Field(default="", description="Human-readable description")
    command: str = Field(default="", description="Command template")
    variables: list[Variable] = Field(default_factory=list, description="Variable declarations")
    tags: list[str] = Field(default_factory=list, description="Searchable tags")
    created_at: datetime | None = Field(default=None, description="Creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")
    source: SnippetSource = Field(default=SnippetSource.GLOBAL, exclude=True)

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("variables", "tags", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @model_validator(mode="after")
    def validate_unique_variable_names(self) -> "Snippet":
        """Variable names must be unique within a snippet."""
        seen: set[str] = set()
        for variable in self.variables:
            if variable.name in seen:
                raise ValueError(f"Duplicate variable '{variable.name}' in snippet")
            seen.add(variable.name)
        return self

    def get_variable(self, name: str) -> Variable | None:
        """Get a declared variable by name."""
        for variable in self.variables:
            if variable.name == name:
                return variable
        return None

    @property
    def variable_names(self) -> list[str]:
        return [variable.name for variable in self.variables]


class TransformTemplate(BaseModel):
    """Named, reusable transform shared across snippets."""

    description: str = Field(default="", description="Human-readable description")
    transform: Transform | None = Field(default=None, description="Transform rules")

    model_config = {"extra": "forbid", "frozen": True}


class VariableType(BaseModel):
    """
    Named, reusable bundle of default value, validation and transform.

    A variable referencing a type inherits its default, and the type's
    validation runs as a second pass next to the variable's own rules.
    """

    description: str = Field(default="", description="Human-readable description")
    validation: Validation | None = Field(default=None, description="Validation rules")
    default: str = Field(default="", description="Default value")
    transform: Transform | None = Field(default=None, description="Transform rules")

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("default", mode="before")
    @classmethod
    def stringify_default(cls, v: Any) -> Any:
        return _stringify_scalar(v)


class InteractiveSettings(BaseModel):
    """Interactive execution behaviour."""

    confirm_before_execute: bool = False
    show_final_command: bool = True

    model_config = {"extra": "forbid", "frozen": True}


class SelectorSettings(BaseModel):
    """External snippet selector (e.g. fzf)."""

    command: str = ""
    options: str = ""

    model_config = {"extra": "forbid", "frozen": True}


class Settings(BaseModel):
    """Global configuration settings."""

    additional_configs: list[str] = Field(
        default_factory=list, description="Extra config files or glob patterns to merge"
    )
    interactive: InteractiveSettings = Field(default_factory=InteractiveSettings)
    selector: SelectorSettings = Field(default_factory=SelectorSettings)

    model_config = {"extra": "forbid", "frozen": True}


class SnippetConfig(BaseModel):
    """
    Complete snippet configuration (one already-merged config file set).

    Attributes:
        transform_templates: Named transforms by name
        variable_types: Named variable types by name
        snippets: Snippets by name
        settings: Global settings
    """

    transform_templates: dict[str, TransformTemplate] = Field(default_factory=dict)
    variable_types: dict[str, VariableType] = Field(default_factory=dict)
    snippets: dict[str, Snippet] = Field(default_factory=dict)
    settings: Settings = Field(default_factory=Settings)

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("transform_templates", "variable_types", "snippets", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("settings", mode="before")
    @classmethod
    def none_settings(cls, v: Any) -> Any:
        return {} if v is None else v

    @model_validator(mode="after")
    def name_snippets_from_keys(self) -> "SnippetConfig":
        """Snippets without an explicit name take their config key."""
        for key, snippet in list(self.snippets.items()):
            if not snippet.name:
                self.snippets[key] = snippet.model_copy(update={"name": key})
        return self

    def get_variable_type(self, name: str) -> VariableType | None:
        """Get a variable type by name (None for empty or unknown names)."""
        if not name:
            return None
        return self.variable_types.get(name)

    @staticmethod
    def validate_yaml_dict(data: dict[str, Any]) -> LoadResult["SnippetConfig"]:
        """
        Validate a YAML dictionary against the schema.

        Args:
            data: Dictionary loaded from a YAML file

        Returns:
            LoadResult.success(SnippetConfig) if valid
            LoadResult.failure(error_message) with validation errors
        """
        try:
            config = SnippetConfig(**data)
            return LoadResult.success(config)
        except Exception as e:
            error_msg = str(e)
            if "validation error" in error_msg.lower():
                return LoadResult.failure(f"Config validation failed:\n{error_msg}")
            else:
                return LoadResult.failure(f"Config validation failed: {error_msg}")
