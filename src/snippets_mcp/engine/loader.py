"""
YAML config loader for snippet configurations.

This module loads snippet configuration files, validates them against the
SnippetConfig Pydantic models and merges them into the single, already-merged
config the resolution engine consumes.

Load order (later sources overwrite earlier ones by name, with a warning):
1. Main config file (default: ~/.config/cs/config.yaml)
2. Each ``settings.additional_configs`` entry (glob patterns, ``~`` expanded,
   relative to the main file's directory)
3. Local project snippets from ``.csnippets`` in the working directory
"""

import glob
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from .load_result import LoadResult
from .resolver import ExpressionEvaluator, TemplateRenderError, get_default_evaluator
from .schema import SelectorSettings, Settings, SnippetConfig, SnippetSource

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/cs/config.yaml")
LOCAL_SNIPPETS_FILE = ".csnippets"

BOOL_TAG = "tag:yaml.org,2002:bool"


class SnippetYamlLoader(yaml.SafeLoader):
    """
    SafeLoader that only reads ``true``/``false`` as booleans.

    PyYAML follows YAML 1.1, where unquoted yes/no/on/off are booleans too.
    Snippet values such as ``enum: [yes, no]`` or ``default: on`` must keep
    the text as written.
    """


SnippetYamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
SnippetYamlLoader.add_implicit_resolver(
    BOOL_TAG, re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"), list("tTfF")
)


def expand_path(path: str) -> str:
    """Expand a leading ``~`` to the home directory."""
    return os.path.expanduser(path) if path.startswith("~") else path


def load_config_from_yaml(yaml_content: str, source: str = "<string>") -> LoadResult[SnippetConfig]:
    """
    Load and validate a config from a YAML string.

    An empty document yields an empty config.

    Args:
        yaml_content: YAML content as string
        source: Source identifier for error messages (default: "<string>")

    Returns:
        LoadResult.success(SnippetConfig) if valid
        LoadResult.failure(error_message) with validation errors
    """
    try:
        data = yaml.load(yaml_content, Loader=SnippetYamlLoader)
    except yaml.YAMLError as e:
        return LoadResult.failure(f"Invalid YAML syntax in {source}: {e}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        return LoadResult.failure(
            f"Config {source} must be a YAML dictionary, got {type(data).__name__}"
        )

    result = SnippetConfig.validate_yaml_dict(data)
    if not result.is_success:
        return LoadResult.failure(f"Config validation failed in {source}:\n{result.error}")

    return result


def load_config_from_file(file_path: str | Path) -> LoadResult[SnippetConfig]:
    """
    Load and validate a single config file (no merging).

    Args:
        file_path: Path to YAML config file

    Returns:
        LoadResult.success(SnippetConfig) if valid
        LoadResult.failure(error_message) if missing, unreadable or invalid
    """
    path = Path(file_path)

    if not path.exists():
        return LoadResult.failure(f"Config file not found: {file_path}")

    if not path.is_file():
        return LoadResult.failure(f"Path is not a file: {file_path}")

    try:
        with open(path, encoding="utf-8") as f:
            yaml_content = f.read()
    except OSError as e:
        return LoadResult.failure(f"Failed to read file '{file_path}': {e}")

    return load_config_from_yaml(yaml_content, source=str(file_path))


def merge_configs(
    base: SnippetConfig,
    other: SnippetConfig,
    source_name: str = "",
    snippet_source: SnippetSource | None = None,
) -> SnippetConfig:
    """
    Merge ``other`` into ``base``, returning a new config.

    Transform templates, variable types and snippets from ``other`` overwrite
    entries of the same name (logged as warnings). Settings of ``base`` are kept.

    Args:
        base: Config merged so far
        other: Config being merged in
        source_name: File name for warnings
        snippet_source: Source tag applied to the merged-in snippets
    """
    sections: dict[str, dict[str, Any]] = {}
    for section, label in (
        ("transform_templates", "Transform template"),
        ("variable_types", "Variable type"),
        ("snippets", "Snippet"),
    ):
        merged = dict(getattr(base, section))
        for name, entry in getattr(other, section).items():
            if name in merged:
                logger.warning(f"{label} '{name}' from {source_name} overwrites existing entry")
            if snippet_source is not None and section == "snippets":
                entry = entry.model_copy(update={"source": snippet_source})
            merged[name] = entry
        sections[section] = merged

    return base.model_copy(update=sections)


def _additional_config_paths(pattern: str, base_dir: Path) -> list[Path]:
    config_path = expand_path(pattern)
    if not os.path.isabs(config_path):
        config_path = str(base_dir / config_path)

    matches = sorted(glob.glob(config_path))
    if not matches:
        # No glob match: treat as a literal path
        return [Path(config_path)]
    return [Path(match) for match in matches]


def load_config(
    file_path: str | Path = DEFAULT_CONFIG_PATH,
    cwd: str | Path | None = None,
    local_file: str = LOCAL_SNIPPETS_FILE,
) -> LoadResult[SnippetConfig]:
    """
    Load the main config and merge additional and local snippet files.

    Args:
        file_path: Main config file
        cwd: Directory searched for the local snippets file (default: current directory)
        local_file: Local snippets file name (default: ".csnippets")

    Returns:
        LoadResult.success(SnippetConfig) with ``metadata["files"]`` listing the
        files merged in order, or LoadResult.failure(error_message)

    Example:
        result = load_config("~/.config/cs/config.yaml")
        if result.is_success:
            processor = SnippetProcessor(result.value)
    """
    main_path = Path(expand_path(str(file_path)))
    result = load_config_from_file(main_path)
    if not result.is_success:
        return result

    config = result.unwrap()
    loaded_files = [str(main_path)]

    for pattern in config.settings.additional_configs:
        for path in _additional_config_paths(pattern, main_path.parent):
            if not path.exists():
                logger.warning(f"Additional config file not found: {path}")
                continue
            extra = load_config_from_file(path)
            if not extra.is_success:
                return LoadResult.failure(
                    f"loading additional config file {path}: {extra.error}"
                )
            config = merge_configs(config, extra.unwrap(), str(path))
            loaded_files.append(str(path))

    local_path = Path(cwd) / local_file if cwd is not None else Path(local_file)
    if local_path.is_file():
        local = load_config_from_file(local_path)
        if not local.is_success:
            return LoadResult.failure(
                f"loading local snippets from {local_path}: {local.error}"
            )
        config = merge_configs(config, local.unwrap(), str(local_path), SnippetSource.LOCAL)
        loaded_files.append(str(local_path))

    logger.info(
        f"Loaded {len(config.snippets)} snippets, {len(config.transform_templates)} "
        f"transform templates, {len(config.variable_types)} variable types "
        f"from {len(loaded_files)} file(s)"
    )
    return LoadResult.success(config, metadata={"files": loaded_files})


def check_config_templates(
    config: SnippetConfig, evaluator: ExpressionEvaluator | None = None
) -> list[str]:
    """
    Compile every value_pattern and compose template in the config.

    Returns:
        One message per template that fails to compile (empty when all are valid)
    """
    evaluator = evaluator or get_default_evaluator()
    transforms = [
        (f"transform template '{name}'", template.transform)
        for name, template in config.transform_templates.items()
    ]
    for snippet_name, snippet in config.snippets.items():
        for variable in snippet.variables:
            transforms.append(
                (f"snippet '{snippet_name}' variable '{variable.name}'", variable.transform)
            )

    errors: list[str] = []
    for label, transform in transforms:
        if transform is None:
            continue
        for field_name in ("value_pattern", "compose"):
            try:
                evaluator.check(getattr(transform, field_name))
            except TemplateRenderError as e:
                errors.append(f"{label} {field_name}: {e.reason}")
    return errors


def default_config() -> SnippetConfig:
    """Minimal stub config written when no config file exists yet."""
    return SnippetConfig(
        settings=Settings(
            additional_configs=["snippets/*.yaml"],
            selector=SelectorSettings(command="fzf", options="--height 40% --reverse --border --sort"),
        )
    )


def dump_config(config: SnippetConfig) -> str:
    """Serialize a config to YAML (YAML key names, defaults omitted)."""
    data = config.model_dump(mode="json", by_alias=True, exclude_defaults=True)
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)


def save_config(config: SnippetConfig, file_path: str | Path) -> None:
    """Write a config file, creating its directory if needed."""
    path = Path(expand_path(str(file_path)))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_config(config), encoding="utf-8")
