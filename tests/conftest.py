"""Shared test configuration for snippets-mcp tests.

Provides:
- A snippet config covering every resolution feature (transform templates,
  variable types, booleans, computed variables, validation rules)
- Helpers for writing config files into tmp_path
- A fake MCP context for calling tool functions directly
"""

from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from snippets_mcp.context import AppContext
from snippets_mcp.engine import SnippetConfig, SnippetProcessor, load_config_from_yaml

TEST_CONFIG_YAML = r"""
transform_templates:
  kubectl-namespace:
    description: "Namespace flag, -A for all namespaces"
    transform:
      empty_value: ""
      value_pattern: '{{if eq .Value "all"}}-A{{else}}-n {{.Value}}{{end}}'
  kubectl-output:
    description: "Output format flag"
    transform:
      empty_value: ""
      value_pattern: "-o {{.Value}}"

variable_types:
  test_port:
    description: "TCP port"
    default: 8080
    validation:
      range: [1, 65535]
  test_log_level:
    description: "Log level"
    default: info
    validation:
      enum: [debug, info, warn, error]
  test_environment:
    description: "Deployment environment"
    validation:
      enum: [dev, staging, prod]

snippets:
  simple-with-vars:
    description: "Echo a greeting"
    command: "echo <message> <name>"
    tags: [basic, echo]
    variables:
      - name: message
        description: "Greeting"
      - name: name
        description: "Who to greet"
        default: World

  simple-with-default:
    description: "Fetch a URL with a timeout"
    command: "curl <url> <timeout>"
    tags: [basic, http]
    variables:
      - name: url
      - name: timeout
        default: 30

  snippet-with-boolean:
    description: "Boolean flags"
    command: "app <verbose> <debug>"
    variables:
      - name: verbose
        type: boolean
        transform:
          true_value: "--verbose"
          false_value: ""
      - name: debug
        type: boolean
        transform:
          true_value: "-d"

  snippet-with-namespace:
    description: "List pods in a namespace"
    command: "kubectl get pods <namespace>"
    tags: [k8s]
    variables:
      - name: namespace
        transformTemplate: kubectl-namespace

  snippet-with-value-pattern:
    description: "Value pattern flag"
    command: "app <format>"
    variables:
      - name: format
        transform:
          value_pattern: "--format={{.Value}}"

  snippet-with-computed-simple:
    description: "Resource reference"
    command: "app <resource>"
    variables:
      - name: resource_type
      - name: resource_name
      - name: resource
        computed: true
        transform:
          compose: "{{.resource_type}}/{{.resource_name}}"

  snippet-with-computed-conditional:
    description: "Port mapping"
    command: "server <port_mapping>"
    variables:
      - name: host_port
      - name: target_port
      - name: port_mapping
        computed: true
        transform:
          compose: "{{.host_port}}:{{if .target_port}}{{.target_port}}{{else}}{{.host_port}}{{end}}"

  snippet-with-complex-computed:
    description: "Run a container"
    command: "docker run <docker_flags> <image_name>"
    tags: [docker]
    variables:
      - name: image_name
        required: true
      - name: port
      - name: volume
      - name: detach
        type: boolean
      - name: docker_flags
        computed: true
        transform:
          compose: '{{if eq .detach "true"}}-d {{end}}{{if .port}}-p {{.port}} {{end}}{{if .volume}}-v {{.volume}} {{end}}'

  snippet-with-multiple-transforms:
    description: "List pods with output options"
    command: "kubectl get pods <namespace> <output> <show_labels>"
    tags: [k8s, kubectl]
    variables:
      - name: namespace
        transformTemplate: kubectl-namespace
      - name: output
        transformTemplate: kubectl-output
      - name: show_labels
        type: boolean
        transform:
          true_value: "--show-labels"
          false_value: ""

  snippet-with-all-features:
    description: "Every feature at once"
    command: "complex-app <environment> <port> <verbose> <log_level> <extra_flag>"
    variables:
      - name: environment
        type: test_environment
        required: true
        transform:
          value_pattern: "--env={{.Value}}"
      - name: port
        type: test_port
        transform:
          value_pattern: "--port={{.Value}}"
      - name: verbose
        type: boolean
        transform:
          true_value: "--verbose"
      - name: log_level
        type: test_log_level
        transform:
          value_pattern: "--log={{ Value }}"
      - name: extra_flag

  snippet-with-enum:
    description: "Log level enum"
    command: "app --log-level <log_level>"
    variables:
      - name: log_level
        default: info
        validation:
          enum: [debug, info, warn, error]

  snippet-with-range:
    description: "Port from a variable type"
    command: "server --port <port>"
    variables:
      - name: port
        type: test_port

  snippet-with-pattern:
    description: "Semantic version"
    command: "deploy --version <version>"
    tags: [deploy]
    variables:
      - name: version
        default: "1.0.0"
        validation:
          pattern: '^v?\d+\.\d+\.\d+$'

  snippet-with-regex-type:
    description: "Search a file"
    command: "grep <pattern> file.txt"
    variables:
      - name: pattern
        type: regex
        required: true

  snippet-with-required:
    description: "Required greeting"
    command: "echo <name>!"
    variables:
      - name: name
        required: true
"""


@pytest.fixture
def config() -> SnippetConfig:
    """Config covering every resolution feature."""
    return load_config_from_yaml(TEST_CONFIG_YAML, source="conftest").unwrap()


@pytest.fixture
def processor(config: SnippetConfig) -> SnippetProcessor:
    return SnippetProcessor(config)


@pytest.fixture
def write_yaml(tmp_path: Path):
    """Write a YAML file relative to tmp_path and return its path."""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


def make_ctx(config: SnippetConfig) -> Any:
    """Minimal stand-in for the MCP Context passed to tool functions."""
    app_context = AppContext.from_config(config)
    return SimpleNamespace(request_context=SimpleNamespace(lifespan_context=app_context))


@pytest.fixture
def ctx(config: SnippetConfig) -> Any:
    return make_ctx(config)
