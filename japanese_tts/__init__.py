"""
Japanese TTS - an MCP server that speaks text through a remote TTS API.
"""

__version__ = "1.0.0"
