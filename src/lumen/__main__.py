"""Command-line entry point: ``lumen-mcp`` / ``python -m lumen``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from lumen import __version__
from lumen.config import resolve_config, resolve_workspace_root
from lumen.errors import ConfigurationError
from lumen.providers import get_provider
from lumen.server import SERVER_NAME, ServerContext, serve
from lumen.workspace import Workspace

logger = logging.getLogger("lumen")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="lumen-mcp",
        description="Serve Gemini answer tools and workspace file tools over MCP (stdio).",
    )
    parser.add_argument(
        "--workspace",
        help="Root directory for filesystem tools (default: $WORKSPACE_ROOT or cwd).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic log level (logs go to stderr).",
    )
    parser.add_argument("--version", action="version", version=__version__)
    return parser.parse_args(argv)


async def _run(context: ServerContext) -> None:
    try:
        await serve(context, version=__version__)
    finally:
        try:
            await context.provider.aclose()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            # Cleanup should never mask the primary failure.
            logger.warning("Provider cleanup failed: %s", exc)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    # stdout carries the protocol; diagnostics must go to stderr.
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    load_dotenv()

    try:
        config = resolve_config()
        workspace = Workspace(resolve_workspace_root(override=args.workspace))
        provider = get_provider(config)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        if e.hint:
            logger.error("Hint: %s", e.hint)
        return 1

    logger.info("Starting %s with %s", SERVER_NAME, config)
    logger.info("Workspace root: %s", workspace.root)
    context = ServerContext(config=config, provider=provider, workspace=workspace)
    try:
        asyncio.run(_run(context))
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down %s", SERVER_NAME)
    return 0


if __name__ == "__main__":
    sys.exit(main())
