"""FastMCP server initialization for snippets-mcp.

This module initializes the MCP server and loads the snippet configuration
via lifespan context. All tool implementations are in the tools module.

Following the official Anthropic Python SDK patterns:
- Lifespan context manager for resource initialization
- Context injection for tool access to shared resources
- FastMCP server with stdio transport
"""

import logging
import os
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from .context import AppContext, AppContextType
from .engine import check_config_templates, default_config, load_config
from .engine.loader import DEFAULT_CONFIG_PATH, LOCAL_SNIPPETS_FILE

logger = logging.getLogger(__name__)

# =============================================================================
# Shared Resources and Lifespan Management
# =============================================================================


def get_config_path() -> Path:
    """Main config path from SNIPPETS_CONFIG (default: ~/.config/cs/config.yaml)."""
    return Path(os.getenv("SNIPPETS_CONFIG", str(DEFAULT_CONFIG_PATH))).expanduser()


def load_app_context(config_path: Path | None = None, cwd: Path | None = None) -> AppContext:
    """Load the snippet configuration and build the shared tool context.

    A missing main config is not fatal: the server starts with the default
    (empty) config so tools can still report what is available.

    Environment Variables:
        SNIPPETS_CONFIG: Main config file
        SNIPPETS_LOCAL_FILE: Local snippets file name (default: .csnippets)

    Raises:
        RuntimeError: If a config file exists but fails to load
    """
    config_path = config_path or get_config_path()
    local_file = os.getenv("SNIPPETS_LOCAL_FILE", LOCAL_SNIPPETS_FILE)

    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}, starting with default config")
        return AppContext.from_config(default_config())

    result = load_config(config_path, cwd=cwd, local_file=local_file)
    if not result.is_success:
        error_msg = f"Failed to load snippets: {result.error}"
        logger.error(error_msg)
        raise RuntimeError(
            f"{error_msg}\n"
            "Server cannot start with an invalid config. Please check:\n"
            "1. SNIPPETS_CONFIG points to a valid YAML file\n"
            "2. additional_configs entries follow the snippet schema\n"
            "3. The local .csnippets file (if any) is valid"
        )

    config = result.unwrap()
    for problem in check_config_templates(config):
        logger.warning(f"Invalid template: {problem}")

    return AppContext.from_config(config, result.metadata.get("files", []))


@asynccontextmanager
async def app_lifespan(_server: FastMCP) -> AsyncIterator[AppContext]:
    """Load the snippet config once and share it with every tool call.

    Args:
        _server: FastMCP server instance (unused, required by FastMCP signature)

    Yields:
        AppContext with the loaded config, registry and processor
    """
    logger.info("Initializing MCP server resources...")
    app_context = load_app_context()
    logger.info(
        f"Serving {len(app_context.registry)} snippets from "
        f"{len(app_context.loaded_files)} config file(s)"
    )

    try:
        yield app_context
    finally:
        # Config is in-memory and read-only; nothing to release
        logger.info("Shutting down MCP server...")


# Initialize MCP server with lifespan management
# Following Python MCP naming convention: {service}_mcp
mcp = FastMCP("snippets_mcp", lifespan=app_lifespan)


# =============================================================================
# Server Entry Point
# =============================================================================


def main() -> None:
    """Entry point for running the MCP server.

    Called via ``python -m snippets_mcp`` or the ``snippets-mcp`` script.
    Defaults to stdio transport for MCP protocol communication.
    """
    # Get log level from environment variable, default to INFO
    valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    log_level_str = os.getenv("SNIPPETS_LOG_LEVEL", "INFO").upper()

    if log_level_str not in valid_log_levels:
        print(
            f"Warning: Invalid SNIPPETS_LOG_LEVEL '{log_level_str}'. "
            f"Valid levels: {', '.join(sorted(valid_log_levels))}. "
            "Using INFO.",
            file=sys.stderr,
        )
        log_level_str = "INFO"

    log_level = getattr(logging, log_level_str)

    # Configure logging to stderr (MCP requirement)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    logger.info("Starting MCP server (press Ctrl+C to stop)...")

    try:
        mcp.run()
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down gracefully...")
    except Exception as e:
        logger.exception(f"Server error: {e}")
        sys.exit(1)

    logger.info("Server shutdown complete")


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "mcp",
    "main",
    "AppContext",
    "AppContextType",
    "load_app_context",
]
