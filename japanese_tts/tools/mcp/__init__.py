"""
MCP stdio server exposing the speech synthesis tools.
"""

from .tts_server import handle_tool_call, list_tool_definitions, main, setup_mcp_server

__all__ = ["handle_tool_call", "list_tool_definitions", "main", "setup_mcp_server"]
