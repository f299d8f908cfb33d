"""Shared formatting utilities for MCP tool responses.

All formatting logic for markdown and JSON responses is centralized here:
- Markdown format: Human-readable with headers and lists
- JSON format: Machine-readable structured data for programmatic access
"""

from typing import Any

# =============================================================================
# Markdown Formatting Utilities
# =============================================================================


def format_snippet_list_markdown(snippets: list[str], tags: list[str] | None = None) -> str:
    """Format snippet list as markdown.

    Args:
        snippets: List of snippet names
        tags: Optional tags used for filtering (for display)

    Returns:
        Markdown-formatted snippet list with headers
    """
    if not snippets:
        tag_msg = f" with tags: {', '.join(tags)}" if tags else ""
        return f"No snippets found{tag_msg}"

    header = f"## Available Snippets ({len(snippets)})"
    if tags:
        header += f"\n**Filtered by tags**: {', '.join(tags)}"

    snippet_list = "\n".join(f"- {name}" for name in snippets)
    return f"{header}\n\n{snippet_list}"


def format_snippet_info_markdown(info: dict[str, Any]) -> str:
    """Format snippet info (from SnippetRegistry.get_info) as markdown."""
    lines = [f"# Snippet: {info['name']}", ""]
    if info["description"]:
        lines.extend([info["description"], ""])

    lines.extend(["## Command", f"`{info['command']}`"])

    if info["tags"]:
        lines.append(f"- **Tags**: {', '.join(info['tags'])}")
    lines.append(f"- **Source**: {info['source']}")

    if info["variables"]:
        lines.append("")
        lines.append("## Variables")
        for var in info["variables"]:
            flags = []
            if var.get("required"):
                flags.append("required")
            if var.get("computed"):
                flags.append("computed")
            if var.get("type"):
                flags.append(f"type: {var['type']}")
            suffix = f" ({', '.join(flags)})" if flags else ""
            line = f"- **{var['name']}**{suffix}"
            if var["description"]:
                line += f": {var['description']}"
            if var["default"]:
                line += f" [default: `{var['default']}`]"
            lines.append(line)

    if info.get("undeclared"):
        lines.append("")
        lines.append(f"**Undeclared placeholders**: {', '.join(info['undeclared'])}")

    return "\n".join(lines)


# =============================================================================
# Error Formatting Utilities
# =============================================================================


def format_snippet_not_found_error(
    snippet_name: str, available: list[str], format_type: str = "json"
) -> dict[str, Any] | str:
    """Format snippet not found error with the available names.

    Args:
        snippet_name: The snippet name that was not found
        available: List of available snippet names
        format_type: Response format ("json" or "markdown")
    """
    if format_type == "markdown":
        snippet_list = "\n".join(f"- {name}" for name in available)
        return (
            f"**Error**: Snippet not found: `{snippet_name}`\n\n"
            f"**Available snippets:**\n{snippet_list}"
        )
    else:
        return {
            "status": "failure",
            "error": f"Snippet not found: {snippet_name}",
            "available_snippets": available,
        }


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "format_snippet_list_markdown",
    "format_snippet_info_markdown",
    "format_snippet_not_found_error",
]
