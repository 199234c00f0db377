"""
Local audio playback.

Playback is best effort: a player never raises, it reports what happened
in a :class:`PlaybackResult` so the caller can log a failure and carry on.
The player for the current platform is chosen once at startup with
:func:`select_player`.
"""

import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import List, Optional

from .errors import PlaybackError

logger = logging.getLogger(__name__)

PLAYED = "played"
FAILED = "failed"
SKIPPED = "skipped"


@dataclass(frozen=True)
class PlaybackResult:
    """Outcome of one playback attempt."""

    status: str
    path: str
    error: Optional[PlaybackError] = None

    @property
    def succeeded(self) -> bool:
        return self.status == PLAYED

    @property
    def attempted(self) -> bool:
        return self.status != SKIPPED


class AudioPlayer:
    """Plays an audio file by spawning an external command."""

    name = "command"

    def command(self, path: str) -> List[str]:
        raise NotImplementedError

    async def play(self, path: str) -> PlaybackResult:
        argv = self.command(path)
        try:
            await self._run(argv)
        except PlaybackError as e:
            logger.error(f"Audio playback failed: {e}")
            return PlaybackResult(status=FAILED, path=path, error=e)

        logger.debug(f"Played {path} with {self.name}")
        return PlaybackResult(status=PLAYED, path=path)

    async def _run(self, argv: List[str]) -> None:
        # stdin/stdout belong to the MCP transport; never let the child touch them.
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise PlaybackError(f"Could not run {argv[0]}: {e}") from e

        _, stderr = await process.communicate()
        if process.returncode != 0:
            message = f"{argv[0]} exited with code {process.returncode}"
            detail = stderr.decode("utf-8", errors="replace").strip() if stderr else ""
            if detail:
                message = f"{message}: {detail}"
            raise PlaybackError(message)


class WindowsPlayer(AudioPlayer):
    """Hands the file to the default application via ``start``."""

    name = "start"

    def command(self, path: str) -> List[str]:
        # The empty argument is the window title expected by ``start``.
        return ["cmd", "/c", "start", "", path]


class MacPlayer(AudioPlayer):
    name = "afplay"

    def command(self, path: str) -> List[str]:
        return ["afplay", path]


class LinuxPlayer(AudioPlayer):
    name = "aplay"

    def command(self, path: str) -> List[str]:
        return ["aplay", path]


class NullPlayer(AudioPlayer):
    """Used when playback is disabled."""

    name = "disabled"

    async def play(self, path: str) -> PlaybackResult:
        return PlaybackResult(status=SKIPPED, path=path)


def select_player(platform: Optional[str] = None, enabled: bool = True) -> AudioPlayer:
    """
    Pick the playback strategy for a platform.

    Args:
        platform: ``sys.platform`` style identifier, defaults to the current one
        enabled: When False, return a player that never plays anything

    Returns:
        The player to use for the lifetime of the process
    """
    if not enabled:
        return NullPlayer()

    platform = platform or sys.platform
    if platform == "win32":
        return WindowsPlayer()
    if platform == "darwin":
        return MacPlayer()
    return LinuxPlayer()
