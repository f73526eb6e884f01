"""
Workout history synchronization and progressive-overload analytics.

Fetches a user's workouts through an unreliable network with retries and a
persistent last-known-good cache, and turns per-set records into
per-exercise trends (best set, estimated 1RM, regression trend).

Served to assistants over the Model Context Protocol (MCP).

Supports two transport modes:
- stdio: For single-user local usage (default)
- http: For HTTP server deployment
"""

import logging
import os

from fastmcp import FastMCP

from workout_sync import tools
from workout_sync.client_factory import Engine, build_engine
from workout_sync.config import Settings


def create_app(engine: Engine = None) -> FastMCP:
    """Create and configure the MCP app with all tools registered."""
    app = FastMCP("Workout Sync v1.0")
    app = tools.register_tools(app, engine or build_engine())
    return app


def main():
    """Initialize the MCP server and run with configured transport.

    Environment variables:
    - MCP_TRANSPORT: 'stdio' (default) or 'http'
    - MCP_HOST: Host to bind to (default: '0.0.0.0')
    - MCP_PORT: Port for HTTP transport (default: 8081)
    """
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(build_engine(settings))

    transport = os.environ.get("MCP_TRANSPORT", "stdio")

    if transport == "http":
        host = os.environ.get("MCP_HOST", "0.0.0.0")
        port = int(os.environ.get("MCP_PORT", "8081"))
        app.run(transport="http", host=host, port=port)
    else:
        app.run()


if __name__ == "__main__":
    main()
