"""Shared context types for MCP server.

This module contains context types used across server and tools modules,
separated to avoid circular imports.
"""

from dataclasses import dataclass, field

from mcp.server.fastmcp import Context
from mcp.server.session import ServerSession

from .engine import SnippetConfig, SnippetProcessor, SnippetRegistry


@dataclass
class AppContext:
    """Application context containing shared resources for MCP tools.

    Created during server startup and made available to all tools via the
    Context parameter. Everything here is read-only once loaded.
    """

    config: SnippetConfig
    registry: SnippetRegistry
    processor: SnippetProcessor
    loaded_files: list[str] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: SnippetConfig, loaded_files: list[str] | None = None) -> "AppContext":
        """Build the registry and processor for a loaded config."""
        return cls(
            config=config,
            registry=SnippetRegistry(config),
            processor=SnippetProcessor(config),
            loaded_files=loaded_files or [],
        )


# Type alias for MCP tool context parameter
AppContextType = Context[ServerSession, AppContext]


__all__ = ["AppContext", "AppContextType"]
