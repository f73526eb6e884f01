"""
Entry point for running workout_sync as a module.

Usage:
    python -m workout_sync                    # Run with stdio transport
    python -m workout_sync --http             # Run with HTTP transport
    python -m workout_sync --http --port 9000 # Run HTTP on custom port
"""

import argparse
import os

from workout_sync import main as run_server


def main():
    parser = argparse.ArgumentParser(
        description="Workout Sync MCP Server - workout history and progressive-overload analytics"
    )
    parser.add_argument(
        "--http",
        action="store_true",
        help="Use http transport instead of stdio"
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8081,
        help="Port for HTTP transport (default: 8081)"
    )

    args = parser.parse_args()

    if args.http:
        os.environ["MCP_TRANSPORT"] = "http"
        os.environ["MCP_HOST"] = args.host
        os.environ["MCP_PORT"] = str(args.port)
    else:
        os.environ["MCP_TRANSPORT"] = "stdio"

    run_server()


if __name__ == "__main__":
    main()
