#!/usr/bin/env python3
"""
Japanese TTS MCP Server

This script implements a standalone MCP server that exposes a remote
text-to-speech API as a ``speak`` tool.  Audio returned by the API is saved
to disk and played on the local machine.

Usage:
    python -m japanese_tts [--save-dir DIR] [--no-playback]

Example:
    BAIDU_TTS_API_URL=https://example.com/tts python -m japanese_tts --save-dir ~/tts
"""

import argparse
import asyncio
import json
import logging
import sys
from contextlib import AsyncExitStack
from typing import Any, Dict, List, Optional, Tuple

import mcp.server.stdio
from dotenv import load_dotenv
from mcp import types as mcp_types
from mcp.server.lowlevel import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from pydantic import ValidationError

from japanese_tts import __version__
from japanese_tts.config.schema_models import MODEL_TYPES, SynthesisRequest
from japanese_tts.config.settings import TTSConfig, load_config
from japanese_tts.logging_config import setup_logging
from japanese_tts.tools.tts.tts_service import SynthesisOrchestrator, SynthesisOutcome

logger = logging.getLogger(__name__)

SERVER_NAME = "JapaneseTTS"
ERROR_PREFIX = "TTS service error"


def list_tool_definitions() -> List[mcp_types.Tool]:
    """Tools advertised to MCP clients."""
    speak_schema = SynthesisRequest.model_json_schema(by_alias=True)
    return [
        mcp_types.Tool(
            name="speak",
            description="Convert text to speech, save it as an MP3 file and play it",
            inputSchema={
                "type": "object",
                "properties": speak_schema["properties"],
                "required": ["text"],
            },
        ),
        mcp_types.Tool(
            name="get_models",
            description="List the available TTS model types and their speakers",
            inputSchema={"type": "object", "properties": {}},
        ),
        mcp_types.Tool(
            name="get_config",
            description="Show the endpoint, model and save directory in use",
            inputSchema={"type": "object", "properties": {}},
        ),
    ]


def render_speak_outcome(outcome: SynthesisOutcome) -> List[mcp_types.TextContent]:
    """
    Turn a synthesis outcome into tool-call content.

    Raises:
        RuntimeError: For error outcomes, so the MCP runtime flags the
            result as an error
    """
    if not outcome.ok:
        raise RuntimeError(f"{ERROR_PREFIX}: {outcome.error}")

    result = outcome.result
    playback = outcome.playback
    details = f"file: {result.audio_file_path}, duration: {result.duration}"
    if playback is None or playback.succeeded:
        summary = f'Played speech: "{outcome.text}" ({details})'
    elif playback.attempted:
        summary = f'Saved speech: "{outcome.text}" ({details}); playback failed: {playback.error}'
    else:
        summary = f'Saved speech: "{outcome.text}" ({details})'

    return [
        mcp_types.TextContent(
            type="text",
            text=json.dumps({"text": outcome.text}, indent=2, ensure_ascii=False),
        ),
        mcp_types.TextContent(type="text", text=summary),
    ]


async def handle_tool_call(
    orchestrator: SynthesisOrchestrator, name: str, arguments: Optional[Dict[str, Any]]
) -> List[mcp_types.TextContent]:
    """Route a tool call to its implementation."""
    arguments = arguments or {}

    if name == "speak":
        try:
            request = SynthesisRequest.model_validate(arguments)
        except ValidationError as e:
            logger.warning(f"Rejected speak arguments: {e.error_count()} error(s)")
            raise ValueError(f"{ERROR_PREFIX}: invalid arguments: {e}") from e
        outcome = await orchestrator.synthesize(request)
        return render_speak_outcome(outcome)

    elif name == "get_models":
        models = {
            str(model_type): {
                "name": info["name"],
                "speakers": list(range(info["speakers"])),
                "description": info["description"],
            }
            for model_type, info in MODEL_TYPES.items()
        }
        return [
            mcp_types.TextContent(
                type="text", text=json.dumps(models, indent=2, ensure_ascii=False)
            )
        ]

    elif name == "get_config":
        config = orchestrator.config
        info = {
            "api_url": config.api_url,
            "save_directory": str(config.save_dir),
            "model": config.model,
            "playback": orchestrator.player.name,
        }
        return [mcp_types.TextContent(type="text", text=json.dumps(info, indent=2))]

    logger.warning(f"Unknown tool: {name}")
    raise ValueError(f"Tool '{name}' not implemented")


def setup_mcp_server(
    config: TTSConfig, orchestrator: Optional[SynthesisOrchestrator] = None
) -> Tuple[Server, SynthesisOrchestrator]:
    """
    Set up the MCP server for speech synthesis.

    Args:
        config: Resolved server configuration
        orchestrator: Orchestrator to use instead of one built from *config*

    Returns:
        Tuple of (Server, SynthesisOrchestrator)
    """
    orchestrator = orchestrator or SynthesisOrchestrator(config)

    app = Server(SERVER_NAME)

    @app.list_tools()
    async def list_tools() -> List[mcp_types.Tool]:
        """MCP handler to list available tools."""
        logger.debug("MCP Server: Received list_tools request")
        return list_tool_definitions()

    @app.call_tool()
    async def call_tool(
        name: str, arguments: Dict[str, Any]
    ) -> List[mcp_types.TextContent]:
        """MCP handler to execute a tool call."""
        logger.info(f"MCP Server: Received call_tool request for '{name}'")
        return await handle_tool_call(orchestrator, name, arguments)

    return app, orchestrator


async def run_server(config: TTSConfig) -> None:
    """Serve MCP requests on stdin/stdout until the client disconnects."""
    app, orchestrator = setup_mcp_server(config)

    async with AsyncExitStack() as exit_stack:
        read_stream, write_stream = await exit_stack.enter_async_context(
            mcp.server.stdio.stdio_server()
        )

        init_options = InitializationOptions(
            server_name=app.name,
            server_version=__version__,
            capabilities=app.get_capabilities(
                notification_options=NotificationOptions(),
                experimental_capabilities={},
            ),
        )

        logger.info("MCP Server started")
        logger.info(f"  - API URL: {config.api_url}")
        logger.info(f"  - Audio save directory: {config.save_dir}")
        logger.info(f"  - Playback: {orchestrator.player.name}")

        await app.run(read_stream, write_stream, init_options)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Japanese TTS MCP Server")
    parser.add_argument(
        "--save-dir",
        help="Directory for audio files (overrides BAIDU_TTS_SAVE_DIR)",
    )
    parser.add_argument(
        "--no-playback",
        action="store_true",
        help="Save audio without playing it",
    )
    parser.add_argument("--log-level", help="Log level (overrides LOG_LEVEL)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point."""
    args = parse_args(argv)

    load_dotenv()
    setup_logging(level=args.log_level)

    config = load_config(
        save_dir=args.save_dir,
        playback=False if args.no_playback else None,
    )

    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        logger.info("MCP Server interrupted by user")
    except Exception as e:
        logger.error(f"MCP Server failed: {str(e)}")
        return 1
    finally:
        logger.info("MCP Server exited")

    return 0


if __name__ == "__main__":
    sys.exit(main())
