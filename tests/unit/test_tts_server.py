"""Tests for the MCP tool routing of the TTS server."""

import asyncio
import base64
import json
import logging
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from mcp import types as mcp_types
from mcp.server.lowlevel import Server

from japanese_tts.config.settings import TTSConfig
from japanese_tts.tools.mcp.tts_server import (
    handle_tool_call,
    list_tool_definitions,
    main,
    parse_args,
    setup_mcp_server,
)
from japanese_tts.tools.tts.errors import PlaybackError
from japanese_tts.tools.tts.playback import FAILED, PLAYED, SKIPPED, PlaybackResult
from japanese_tts.tools.tts.tts_service import (
    SynthesisOrchestrator,
    SynthesisOutcome,
    SynthesisResult,
)


@pytest.fixture
def config(tmp_path):
    return TTSConfig(
        api_url="https://tts.example.com",
        api_key="secret-key",
        model="tts-model",
        save_dir=tmp_path,
    )


@pytest.fixture
def orchestrator(config):
    mock = MagicMock()
    mock.config = config
    mock.player.name = "aplay"
    mock.synthesize = AsyncMock()
    return mock


def _success(text, path="/tmp/tts-1.mp3", playback=None):
    return SynthesisOutcome(
        text=text,
        result=SynthesisResult(audio_file_path=path, duration=2.3),
        playback=playback or PlaybackResult(status=PLAYED, path=path),
    )


class TestListTools:
    def test_advertises_tools(self):
        tools = {tool.name: tool for tool in list_tool_definitions()}

        assert set(tools) == {"speak", "get_models", "get_config"}
        schema = tools["speak"].inputSchema
        assert schema["required"] == ["text"]
        assert set(schema["properties"]) == {
            "text",
            "modelType",
            "speakerId",
            "speed",
            "volume",
        }
        assert schema["properties"]["modelType"]["default"] == 10
        assert schema["properties"]["speed"]["maximum"] == 3


class TestSpeak:
    def test_success_content(self, orchestrator):
        orchestrator.synthesize.return_value = _success("こんにちは")

        content = asyncio.run(
            handle_tool_call(orchestrator, "speak", {"text": "こんにちは"})
        )

        assert json.loads(content[0].text) == {"text": "こんにちは"}
        assert "/tmp/tts-1.mp3" in content[1].text
        assert "2.3" in content[1].text
        assert content[1].text.startswith("Played speech")
        request = orchestrator.synthesize.await_args.args[0]
        assert request.text == "こんにちは"
        assert request.model_type == 10

    def test_passes_voice_parameters(self, orchestrator):
        orchestrator.synthesize.return_value = _success("hello")

        asyncio.run(
            handle_tool_call(
                orchestrator,
                "speak",
                {"text": "hello", "modelType": 101, "speakerId": 5, "speed": 0.8, "volume": 2.5},
            )
        )

        request = orchestrator.synthesize.await_args.args[0]
        assert (request.model_type, request.speaker_id) == (101, 5)
        assert (request.speed, request.volume) == (0.8, 2.5)

    def test_playback_failure_still_succeeds(self, orchestrator):
        playback = PlaybackResult(
            status=FAILED, path="/tmp/tts-1.mp3", error=PlaybackError("afplay exited with code 1")
        )
        orchestrator.synthesize.return_value = _success("hi", playback=playback)

        content = asyncio.run(handle_tool_call(orchestrator, "speak", {"text": "hi"}))

        assert json.loads(content[0].text) == {"text": "hi"}
        assert "playback failed: afplay exited with code 1" in content[1].text

    def test_skipped_playback(self, orchestrator):
        playback = PlaybackResult(status=SKIPPED, path="/tmp/tts-1.mp3")
        orchestrator.synthesize.return_value = _success("hi", playback=playback)

        content = asyncio.run(handle_tool_call(orchestrator, "speak", {"text": "hi"}))

        assert content[1].text.startswith("Saved speech")

    def test_error_outcome_raises(self, orchestrator):
        orchestrator.synthesize.return_value = SynthesisOutcome(
            text="hi", error="API error (500): boom", error_type="RemoteAPIError"
        )

        with pytest.raises(RuntimeError, match=r"^TTS service error: API error \(500\): boom$"):
            asyncio.run(handle_tool_call(orchestrator, "speak", {"text": "hi"}))

    @pytest.mark.parametrize("arguments", [None, {}, {"text": ""}, {"text": "hi", "speed": 9}])
    def test_invalid_arguments(self, orchestrator, arguments):
        with pytest.raises(ValueError, match="TTS service error: invalid arguments"):
            asyncio.run(handle_tool_call(orchestrator, "speak", arguments))

        orchestrator.synthesize.assert_not_awaited()


class TestInfoTools:
    def test_get_models(self, orchestrator):
        content = asyncio.run(handle_tool_call(orchestrator, "get_models", {}))

        models = json.loads(content[0].text)
        assert set(models) == {"8", "9", "10", "11", "101"}
        assert len(models["10"]["speakers"]) == 1104
        assert models["9"]["speakers"] == list(range(10))

    def test_get_config_hides_api_key(self, orchestrator, config):
        content = asyncio.run(handle_tool_call(orchestrator, "get_config", None))

        info = json.loads(content[0].text)
        assert info == {
            "api_url": "https://tts.example.com",
            "save_directory": str(config.save_dir),
            "model": "tts-model",
            "playback": "aplay",
        }
        assert "secret-key" not in content[0].text

    def test_unknown_tool(self, orchestrator):
        with pytest.raises(ValueError, match="not implemented"):
            asyncio.run(handle_tool_call(orchestrator, "sing", {}))


class TestServerSetup:
    def test_builds_server_with_orchestrator(self, config):
        app, orchestrator = setup_mcp_server(config)

        assert isinstance(app, Server)
        assert app.name == "JapaneseTTS"
        assert orchestrator.config is config

    def test_parse_args(self):
        args = parse_args(["--save-dir", "/data/tts", "--no-playback", "--log-level", "debug"])

        assert args.save_dir == "/data/tts"
        assert args.no_playback is True
        assert args.log_level == "debug"

    @patch("japanese_tts.tools.mcp.tts_server.run_server", new_callable=MagicMock)
    @patch("japanese_tts.tools.mcp.tts_server.asyncio.run")
    @patch("japanese_tts.tools.mcp.tts_server.setup_logging")
    @patch("japanese_tts.tools.mcp.tts_server.load_dotenv")
    def test_main_wires_flags_into_config(
        self, mock_dotenv, mock_logging, mock_run, mock_run_server, tmp_path
    ):
        with patch.dict("os.environ", {"BAIDU_TTS_API_URL": "https://tts.example.com"}):
            assert main(["--save-dir", str(tmp_path), "--no-playback"]) == 0

        mock_dotenv.assert_called_once()
        mock_logging.assert_called_once_with(level=None)
        config = mock_run_server.call_args.args[0]
        assert config.save_dir == tmp_path
        assert config.playback is False
        mock_run.assert_called_once_with(mock_run_server.return_value)

    @patch("japanese_tts.tools.mcp.tts_server.run_server", new_callable=MagicMock)
    @patch("japanese_tts.tools.mcp.tts_server.asyncio.run")
    @patch("japanese_tts.tools.mcp.tts_server.setup_logging")
    @patch("japanese_tts.tools.mcp.tts_server.load_dotenv")
    def test_main_leaves_startup_banner_to_server(
        self, mock_dotenv, mock_logging, mock_run, mock_run_server, tmp_path, caplog
    ):
        with caplog.at_level(logging.INFO, logger="japanese_tts.tools.mcp.tts_server"):
            main(["--save-dir", str(tmp_path)])

        banner = [r for r in caplog.records if str(tmp_path) in r.getMessage()]
        assert banner == []


def _call_tool_request(name, arguments):
    return mcp_types.CallToolRequest(
        method="tools/call",
        params=mcp_types.CallToolRequestParams(name=name, arguments=arguments),
    )


class TestCallToolProtocol:
    """Results as seen by an MCP client, through the server's request handler."""

    def _call(self, app, name, arguments):
        handler = app.request_handlers[mcp_types.CallToolRequest]
        response = asyncio.run(handler(_call_tool_request(name, arguments)))
        return response.root

    def _app(self, config, handler):
        player = MagicMock()
        player.name = "mock"
        player.play = AsyncMock(
            side_effect=lambda path: PlaybackResult(status=PLAYED, path=path)
        )
        orchestrator = SynthesisOrchestrator(
            config, player=player, transport=httpx.MockTransport(handler)
        )
        app, _ = setup_mcp_server(config, orchestrator)
        return app

    def test_remote_failure_is_flagged_as_error(self, config):
        app = self._app(config, lambda request: httpx.Response(500, text="boom"))

        result = self._call(app, "speak", {"text": "こんにちは"})

        assert result.isError is True
        assert len(result.content) == 1
        assert result.content[0].type == "text"
        assert result.content[0].text == "TTS service error: API error (500): boom"
        assert list(config.save_dir.glob("tts-*.mp3")) == []

    def test_success_echoes_text(self, config):
        audio = base64.b64encode(b"mp3-bytes").decode("ascii")
        app = self._app(
            config,
            lambda request: httpx.Response(
                200, json={"result": {"audio": audio, "duration": 2.3}}
            ),
        )

        result = self._call(app, "speak", {"text": "こんにちは"})

        assert result.isError is False
        assert json.loads(result.content[0].text) == {"text": "こんにちは"}
        assert "2.3" in result.content[1].text
        saved = list(config.save_dir.glob("tts-*.mp3"))
        assert len(saved) == 1 and saved[0].read_bytes() == b"mp3-bytes"
