"""Entry point for doc-versioning MCP server."""

import argparse
import asyncio
import logging

from doc_versioning import __version__
from doc_versioning.config import get_settings
from doc_versioning.server import create_server, initialize_services, shutdown_services


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="doc-versioning",
        description="doc-versioning - Document snapshots, diffs and restore via MCP",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args()


async def main() -> None:
    """Main entry point for the MCP server."""
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    await initialize_services(settings)

    mcp = create_server()

    try:
        # Use run_stdio_async() since we're already in an async context
        await mcp.run_stdio_async()
    finally:
        await shutdown_services()


def cli() -> None:
    """CLI entry point."""
    # Parse args first (handles --help and --version)
    parse_args()

    asyncio.run(main())


if __name__ == "__main__":
    cli()
