"""Error types raised while synthesizing, saving and playing speech."""


class TTSError(Exception):
    """Base class for synthesis failures."""


class RemoteAPIError(TTSError):
    """The synthesis endpoint failed or returned no audio."""


class AudioDecodeError(TTSError):
    """The returned audio payload is not valid base64."""


class FileWriteError(TTSError):
    """The decoded audio could not be written to disk."""


class PlaybackError(TTSError):
    """The playback command could not be run or exited with an error."""


def truncate_error(message: str, max_length: int = 200) -> str:
    """Truncate an error message if it exceeds *max_length*."""
    if len(message) <= max_length:
        return message
    return message[: max_length - 3] + "..."


def preview(text: str, max_length: int = 30) -> str:
    """Short form of request text for log lines."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
