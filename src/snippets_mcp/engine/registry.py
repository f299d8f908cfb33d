"""
Snippet registry for discovering snippets in a loaded config.

This module provides the SnippetRegistry class, a read-only view over an
already-merged SnippetConfig used by the MCP tools.

Features:
- Retrieve snippets by name
- List all snippet names or filter by tags (any-tag match)
- Case-insensitive search over name, description, command and tags
- Filter by source (global config vs local .csnippets)
- Build metadata dictionaries for tool responses
"""

import logging
from typing import Any

from .processor import effective_default, missing_variables
from .schema import Snippet, SnippetConfig, SnippetSource

logger = logging.getLogger(__name__)


class SnippetRegistry:
    """
    Central registry over the snippets of one config.

    Example:
        registry = SnippetRegistry(load_config(path).unwrap())

        # Snippets tagged "k8s" or "docker"
        names = registry.filter_by_tags(["k8s", "docker"])

        # Metadata for MCP tools
        info = registry.get_info("kubectl-get-pods")
    """

    def __init__(self, config: SnippetConfig) -> None:
        self.config = config
        self._snippets: dict[str, Snippet] = dict(config.snippets)
        logger.debug(f"Registry initialized with {len(self._snippets)} snippets")

    def __contains__(self, name: object) -> bool:
        return name in self._snippets

    def __len__(self) -> int:
        return len(self._snippets)

    def get(self, name: str) -> Snippet:
        """
        Get snippet by name.

        Raises:
            KeyError: If snippet not found
        """
        if name not in self._snippets:
            available = sorted(self._snippets.keys())
            raise KeyError(f"Snippet '{name}' not found. Available snippets: {available}")
        return self._snippets[name]

    def list_names(self) -> list[str]:
        """Sorted list of all snippet names."""
        return sorted(self._snippets.keys())

    def filter_by_tags(self, tags: list[str]) -> list[str]:
        """
        List snippet names having ANY of the given tags.

        An empty tag list returns every snippet.
        """
        if not tags:
            return self.list_names()

        wanted = set(tags)
        return sorted(name for name, snippet in self._snippets.items() if wanted & set(snippet.tags))

    def search(self, query: str) -> list[str]:
        """
        Case-insensitive substring search over name, description, command and tags.

        Returns:
            Sorted matching snippet names (all snippets for an empty query)
        """
        needle = query.strip().lower()
        if not needle:
            return self.list_names()

        matches = []
        for name, snippet in self._snippets.items():
            haystack = [name, snippet.description, snippet.command, *snippet.tags]
            if any(needle in field.lower() for field in haystack):
                matches.append(name)
        return sorted(matches)

    def list_by_source(self, source: SnippetSource | str) -> list[str]:
        """List snippet names loaded from the given source ("global" or "local")."""
        source = SnippetSource(source)
        return sorted(name for name, snippet in self._snippets.items() if snippet.source == source)

    def get_info(self, name: str) -> dict[str, Any]:
        """
        Get snippet metadata as dictionary (for MCP tools).

        Returns:
            Dictionary with name, description, command, tags, source,
            variables (one entry per declaration, computed ones flagged)
            and ``undeclared`` placeholders no variable replaces.

        Raises:
            KeyError: If snippet not found
        """
        snippet = self.get(name)

        variables = []
        for variable in snippet.variables:
            entry: dict[str, Any] = {
                "name": variable.name,
                "description": variable.description,
                "required": variable.required,
                "default": effective_default(variable, self.config),
            }
            if variable.type:
                entry["type"] = variable.type
            if variable.transform_template:
                entry["transform_template"] = variable.transform_template
            if variable.computed:
                entry["computed"] = True
            if variable.validation is not None:
                entry["validation"] = variable.validation.model_dump(exclude_defaults=True)
            variables.append(entry)

        return {
            "name": name,
            "description": snippet.description,
            "command": snippet.command,
            "tags": list(snippet.tags),
            "source": snippet.source.value,
            "variables": variables,
            "undeclared": missing_variables(snippet),
        }

    def list_info(self, names: list[str] | None = None) -> list[dict[str, Any]]:
        """Metadata for the given names (default: all snippets, sorted)."""
        return [self.get_info(name) for name in (self.list_names() if names is None else names)]


__all__ = ["SnippetRegistry"]
