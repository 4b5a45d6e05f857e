"""Tests for the serve() host entry point."""

import asyncio
from unittest.mock import patch

import pytest

from twitchcommander.config import Config
from twitchcommander.exceptions import DuplicateCommandError
from twitchcommander.main import serve
from twitchcommander.modules import BaseModule, command
from twitchcommander.responses import MessageResponse, ResponseType


class FakeSource:
    def __init__(self):
        self.callbacks = []
        self.sent = []

    def subscribe_receive(self, callback):
        self.callbacks.append(callback)

    async def send_message(self, channel, message):
        self.sent.append((channel, message))


class Hello(BaseModule):
    @command("hello")
    async def hello(self):
        await self.reply(f"hello {self.user.name}")


class AlsoHello(BaseModule):
    @command("hello")
    async def hello(self):
        pass


@pytest.fixture
def config(tmp_path, monkeypatch):
    monkeypatch.delenv("TWITCH_COMMAND_PREFIX", raising=False)
    (tmp_path / "settings.yaml").write_text(f"log_dir: {tmp_path / 'logs'}\n")
    return Config(config_dir=tmp_path)


@pytest.mark.asyncio
async def test_serve_dispatches_until_shutdown(config):
    source = FakeSource()
    shutdown = asyncio.Event()

    with patch("twitchcommander.main.setup_logging"):
        serve_task = asyncio.create_task(
            serve(source, [Hello], username="bot", config=config, shutdown_event=shutdown)
        )
        for _ in range(50):
            if source.callbacks:
                break
            await asyncio.sleep(0.01)
        assert len(source.callbacks) == 1

        await source.callbacks[0](MessageResponse(
            response_type=ResponseType.PRIVMSG, name="alice", channel="chan", message="!hello",
        ))
        for _ in range(50):
            if source.sent:
                break
            await asyncio.sleep(0.01)
        shutdown.set()
        commander = await asyncio.wait_for(serve_task, timeout=5)

    assert source.sent == [("chan", "hello alice")]
    assert commander.in_flight == 0


@pytest.mark.asyncio
async def test_serve_fails_fast_on_duplicate_commands(config):
    source = FakeSource()
    with patch("twitchcommander.main.setup_logging"):
        with pytest.raises(DuplicateCommandError):
            await serve(
                source, [Hello, AlsoHello], config=config, shutdown_event=asyncio.Event()
            )
    assert source.callbacks == []
