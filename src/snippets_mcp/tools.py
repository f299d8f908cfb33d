"""MCP tool implementations for snippet discovery and rendering.

This module exposes the snippet resolution engine via the MCP protocol.

Following official Anthropic MCP Python SDK patterns:
- Tool functions decorated with @mcp.tool()
- Flat parameter signatures with Annotated types for validation
- Async functions for all tools
- Clear docstrings (become tool descriptions)

Rendering only returns the final command string; executing it is left to
the caller.
"""

import json
from typing import Annotated, Any, Literal

from mcp.types import ToolAnnotations
from pydantic import Field

from .context import AppContextType
from .engine import SnippetError
from .formatting import (
    format_snippet_info_markdown,
    format_snippet_list_markdown,
    format_snippet_not_found_error,
)
from .server import mcp


def _as_raw_value(value: Any) -> str:
    """Coerce a JSON argument value to the raw string form the engine expects."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


# =============================================================================
# Discovery Tools
# =============================================================================


@mcp.tool(
    annotations=ToolAnnotations(
        title="List Snippets",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def list_snippets(
    tags: Annotated[
        list[str],
        Field(
            description="Filter by tags (ANY match). Empty list returns all snippets.",
            max_length=20,
        ),
    ] = [],
    format: Annotated[  # noqa: A002
        Literal["json", "markdown"],
        Field(description="Output format"),
    ] = "json",
    *,
    ctx: AppContextType,
) -> str:
    """List command snippets. Optional: tags (filter), format (json|markdown)."""
    registry = ctx.request_context.lifespan_context.registry

    snippets = registry.filter_by_tags(tags or [])

    if format == "markdown":
        return format_snippet_list_markdown(snippets, tags or None)
    else:
        return json.dumps(snippets)


@mcp.tool(
    annotations=ToolAnnotations(
        title="Search Snippets",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def search_snippets(
    query: Annotated[
        str,
        Field(description="Case-insensitive text matched against name, description, command and tags",
              max_length=200),
    ],
    *,
    ctx: AppContextType,
) -> dict[str, Any]:
    """Search snippets by text. Required: query."""
    registry = ctx.request_context.lifespan_context.registry
    matches = registry.search(query)
    return {
        "query": query,
        "count": len(matches),
        "snippets": registry.list_info(matches),
    }


@mcp.tool(
    annotations=ToolAnnotations(
        title="Get Snippet Info",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def get_snippet_info(
    snippet: Annotated[
        str,
        Field(description="Snippet name to inspect", min_length=1, max_length=200),
    ],
    format: Annotated[  # noqa: A002
        Literal["json", "markdown"],
        Field(description="Output format"),
    ] = "json",
    *,
    ctx: AppContextType,
) -> dict[str, Any] | str:
    """Get snippet details (command, variables, defaults). Required: snippet. Optional: format."""
    registry = ctx.request_context.lifespan_context.registry

    if snippet not in registry:
        return format_snippet_not_found_error(snippet, registry.list_names(), format)

    info = registry.get_info(snippet)
    if format == "markdown":
        return format_snippet_info_markdown(info)
    return info


@mcp.tool(
    annotations=ToolAnnotations(
        title="List Transform Templates",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def list_transform_templates(*, ctx: AppContextType) -> dict[str, Any]:
    """List named transform templates usable via transformTemplate."""
    config = ctx.request_context.lifespan_context.config
    return {
        name: {
            "description": template.description,
            "transform": (
                template.transform.model_dump(exclude_defaults=True) if template.transform else {}
            ),
        }
        for name, template in sorted(config.transform_templates.items())
    }


@mcp.tool(
    annotations=ToolAnnotations(
        title="List Variable Types",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def list_variable_types(*, ctx: AppContextType) -> dict[str, Any]:
    """List configured variable types (default value and validation rules)."""
    config = ctx.request_context.lifespan_context.config
    return {
        name: var_type.model_dump(exclude_defaults=True)
        for name, var_type in sorted(config.variable_types.items())
    }


# =============================================================================
# Rendering Tools
# =============================================================================


@mcp.tool(
    annotations=ToolAnnotations(
        title="Render Snippet",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def render_snippet(
    snippet: Annotated[
        str,
        Field(description="Snippet name (use list_snippets() to discover)", min_length=1, max_length=200),
    ],
    values: Annotated[
        dict[str, Any] | None,
        Field(description="Raw variable values by name. Missing variables are treated as empty."),
    ] = None,
    validate: Annotated[
        bool,
        Field(description="Validate values before rendering"),
    ] = True,
    *,
    ctx: AppContextType,
) -> dict[str, Any]:
    """Resolve a snippet's variables into the final command. Required: snippet. Optional: values."""
    app_ctx = ctx.request_context.lifespan_context
    registry = app_ctx.registry

    if snippet not in registry:
        return format_snippet_not_found_error(snippet, registry.list_names())

    raw_values = {name: _as_raw_value(value) for name, value in (values or {}).items()}

    try:
        command = app_ctx.processor.process_snippet(
            registry.get(snippet), raw_values, validate=validate
        )
    except SnippetError as e:
        return {"status": "failure", "snippet": snippet, **e.to_dict()}

    return {"status": "success", "snippet": snippet, "command": command}


@mcp.tool(
    annotations=ToolAnnotations(
        title="Validate Variable Value",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def validate_value(
    snippet: Annotated[
        str,
        Field(description="Snippet name", min_length=1, max_length=200),
    ],
    variable: Annotated[
        str,
        Field(description="Variable name declared by the snippet", min_length=1, max_length=200),
    ],
    value: Annotated[
        str,
        Field(description="Candidate value to check"),
    ] = "",
    *,
    ctx: AppContextType,
) -> dict[str, Any]:
    """Check one candidate value against a variable's rules. Required: snippet, variable."""
    app_ctx = ctx.request_context.lifespan_context
    registry = app_ctx.registry

    if snippet not in registry:
        return format_snippet_not_found_error(snippet, registry.list_names())

    snippet_def = registry.get(snippet)
    if snippet_def.get_variable(variable) is None:
        return {
            "status": "failure",
            "error": f"Variable '{variable}' not found in snippet '{snippet}'",
            "available_variables": snippet_def.variable_names,
        }

    try:
        app_ctx.processor.validate_value(snippet_def, variable, value)
    except SnippetError as e:
        return {"status": "success", "valid": False, **e.to_dict()}

    return {"status": "success", "valid": True, "variable": variable}
