"""
Entry point for running the TTS MCP server directly.
"""

import sys

from japanese_tts.tools.mcp.tts_server import main

if __name__ == "__main__":
    sys.exit(main())
