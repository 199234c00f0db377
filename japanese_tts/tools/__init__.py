"""
Tools exposed by the Japanese TTS MCP server.
"""
