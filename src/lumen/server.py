"""MCP server: tool listing and dispatch over stdio."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    CallToolRequest,
    CallToolResult,
    ErrorData,
    ServerResult,
    TextContent,
    Tool,
)
from pydantic import ValidationError

from lumen.errors import InvalidParamsError, LumenError
from lumen.execute import generate_text
from lumen.tools import ALL_TOOLS, TOOL_MAP, FilesystemTool

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from lumen.config import ProviderConfig
    from lumen.providers.base import Provider
    from lumen.tools import PromptTool
    from lumen.workspace import Workspace

logger = logging.getLogger(__name__)

SERVER_NAME = "lumen-mcp"


@dataclass(frozen=True)
class ServerContext:
    """Process-wide collaborators, built once at startup."""

    config: ProviderConfig
    provider: Provider
    workspace: Workspace
    sleep: Callable[[float], Awaitable[object]] | None = None


def _error(code: int, message: str) -> McpError:
    return McpError(ErrorData(code=code, message=message))


def _format_validation_error(exc: ValidationError) -> str:
    return ", ".join(
        f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
        for err in exc.errors()
    )


def list_tool_descriptions(model_id: str) -> list[Tool]:
    """Describe every tool, with the model id substituted into descriptions."""
    return [
        Tool(
            name=tool.name,
            description=tool.describe(model_id),
            inputSchema=tool.input_schema(),
        )
        for tool in ALL_TOOLS
    ]


async def _run_prompt_tool(tool: PromptTool, args: Any, context: ServerContext) -> str:
    # Reject a bad output path before paying for the model call.
    if tool.saves_as is not None:
        context.workspace.resolve(args.output_path)

    spec = tool.build_prompt(args, context.config.model)
    text = await generate_text(
        spec.history(),
        provider=context.provider,
        config=context.config,
        use_web_search=spec.use_web_search,
        sleep=context.sleep,
    )
    if tool.saves_as is None:
        return text

    await asyncio.to_thread(context.workspace.write_file, args.output_path, text)
    return f"Successfully generated {tool.saves_as} and saved to {args.output_path}"


async def dispatch_tool(
    name: str, arguments: dict[str, Any] | None, context: ServerContext
) -> str:
    """Run tool *name* and return its text result.

    Raises McpError with INVALID_PARAMS for caller mistakes, METHOD_NOT_FOUND
    for unknown tools and INTERNAL_ERROR for everything else.
    """
    tool = TOOL_MAP.get(name)
    if tool is None:
        raise _error(METHOD_NOT_FOUND, f"Unknown tool: {name}")

    try:
        args = tool.parse_args(arguments or {})
        if isinstance(tool, FilesystemTool):
            return await asyncio.to_thread(tool.run, context.workspace, args)
        return await _run_prompt_tool(tool, args, context)
    except ValidationError as e:
        raise _error(
            INVALID_PARAMS, f"Invalid arguments for {name}: {_format_validation_error(e)}"
        ) from e
    except InvalidParamsError as e:
        raise _error(INVALID_PARAMS, f"Invalid arguments for {name}: {e}") from e
    except FileNotFoundError as e:
        raise _error(INVALID_PARAMS, f"Path not found for tool {name}: {e}") from e
    except LumenError as e:
        logger.error("Tool %s failed: %s", name, e)
        raise _error(INTERNAL_ERROR, str(e)) from e
    except McpError:
        raise
    except Exception as e:
        logger.exception("Unexpected error in tool handler (%s)", name)
        raise _error(
            INTERNAL_ERROR, f"Unexpected server error during {name}: {e or 'Unknown'}"
        ) from e


def create_server(context: ServerContext, *, version: str | None = None) -> Server:
    """Build the MCP server bound to *context*."""
    server: Server = Server(SERVER_NAME, version=version)

    @server.list_tools()
    async def handle_list_tools() -> list[Tool]:
        return list_tool_descriptions(context.config.model)

    # Registered on the raw request table: the call_tool() decorator would turn
    # McpError into an isError result and drop its JSON-RPC error code.
    async def handle_call_tool(request: CallToolRequest) -> ServerResult:
        text = await dispatch_tool(
            request.params.name, request.params.arguments, context
        )
        return ServerResult(
            CallToolResult(content=[TextContent(type="text", text=text)], isError=False)
        )

    server.request_handlers[CallToolRequest] = handle_call_tool
    return server


async def serve(context: ServerContext, *, version: str | None = None) -> None:
    """Serve tools over stdio until the client disconnects."""
    server = create_server(context, version=version)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("%s connected via stdio", SERVER_NAME)
        await server.run(
            read_stream, write_stream, server.create_initialization_options()
        )
