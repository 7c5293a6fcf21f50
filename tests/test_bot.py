import json
import random

import pytest

from debilek.bot import Bot, build_commands, load_config, main
from debilek.models import BotData, BotError, CommandInfo, Config, GreetingCommand
from debilek.voice import VoiceChannelAction, VoiceState


class _Backend:
    def __init__(self, fail_leave=False):
        self.played = []
        self.left = []
        self.fail_leave = fail_leave

    async def join_and_play(self, guild_id, channel_id, audio):
        self.played.append((guild_id, channel_id, audio))

    async def leave(self, guild_id):
        if self.fail_leave:
            raise RuntimeError("not connected")
        self.left.append(guild_id)


def _bot(tmp_path, backend, environ=None):
    flat = tmp_path / "aco.mp3"
    flat.write_bytes(b"aco-audio")
    opt_dir = tmp_path / "franta"
    opt_dir.mkdir()
    (opt_dir / "cus.mp3").write_bytes(b"cus-audio")
    audio_map = {
        "aco": CommandInfo.single(flat),
        "franta": CommandInfo.with_options({"cus": opt_dir / "cus.mp3"}),
    }
    config = Config(greetings={"_fallback": [GreetingCommand("franta", "cus")]})
    return Bot(
        data=BotData(audio_map=audio_map, config=config),
        backend=backend,
        rng=random.Random(0),
        environ=environ or {},
    )


def test_load_config_from_environ():
    raw = json.dumps({"greetings": {"_fallback": [{"command": "aco"}]}})
    config = load_config({"CONFIG": raw})
    assert config.greetings["_fallback"] == [GreetingCommand("aco")]


def test_load_config_missing():
    with pytest.raises(BotError, match="Config not provided."):
        load_config({})


def test_build_commands(tmp_path):
    audio_map = {"a": CommandInfo.single(tmp_path / "a.mp3"), "b": CommandInfo.with_options({})}
    commands = build_commands(audio_map)
    assert [(c.name, c.has_option) for c in commands] == [("a", False), ("b", True)]


@pytest.mark.asyncio
async def test_user_joined_is_greeted(tmp_path):
    backend = _Backend()
    bot = _bot(tmp_path, backend)
    new = VoiceState(user_id=5, guild_id=1, channel_id=2)
    action = await bot.on_voice_state_update(None, new, 99, None)
    assert action is VoiceChannelAction.USER_JOINED
    assert backend.played == [(1, 2, b"cus-audio")]


@pytest.mark.asyncio
async def test_left_empty_channel_leaves(tmp_path):
    backend = _Backend()
    bot = _bot(tmp_path, backend)
    old = VoiceState(user_id=5, guild_id=1, channel_id=2)
    new = VoiceState(user_id=5, guild_id=1, channel_id=None)
    states = {99: VoiceState(user_id=99, guild_id=1, channel_id=2)}
    action = await bot.on_voice_state_update(old, new, 99, states)
    assert action is VoiceChannelAction.USER_LEFT_EMPTY_CHANNEL
    assert backend.left == [1]


@pytest.mark.asyncio
async def test_leave_failure_is_not_raised(tmp_path):
    backend = _Backend(fail_leave=True)
    bot = _bot(tmp_path, backend)
    old = VoiceState(user_id=5, guild_id=1, channel_id=2)
    new = VoiceState(user_id=5, guild_id=1, channel_id=None)
    states = {99: VoiceState(user_id=99, guild_id=1, channel_id=2)}
    action = await bot.on_voice_state_update(old, new, 99, states)
    assert action is VoiceChannelAction.USER_LEFT_EMPTY_CHANNEL
    assert backend.left == []


@pytest.mark.asyncio
async def test_own_update_is_ignored(tmp_path):
    backend = _Backend()
    bot = _bot(tmp_path, backend)
    new = VoiceState(user_id=99, guild_id=1, channel_id=2)
    action = await bot.on_voice_state_update(None, new, 99, None)
    assert action is VoiceChannelAction.NONE
    assert backend.played == []


@pytest.mark.asyncio
async def test_run_asset_command_plays(tmp_path):
    backend = _Backend()
    bot = _bot(tmp_path, backend)
    state = VoiceState(user_id=5, guild_id=1, channel_id=2)
    reply = await bot.run_asset_command("franta", "cus", state)
    assert reply == "franta cus"
    assert backend.played == [(1, 2, b"cus-audio")]


@pytest.mark.asyncio
async def test_run_asset_command_unknown(tmp_path):
    bot = _bot(tmp_path, _Backend())
    state = VoiceState(user_id=5, guild_id=1, channel_id=2)
    with pytest.raises(BotError, match="Command nope asset not found"):
        await bot.run_asset_command("nope", None, state)


class _Response:
    status = 200

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def read(self):
        return b"speech"


class _Session:
    def get(self, url, params=None):
        return _Response()


@pytest.mark.asyncio
async def test_run_sound_command(tmp_path):
    backend = _Backend()
    env = {"TTS_KEY": "placeholder", "TTS_URL": "http://localhost/tts"}
    bot = _bot(tmp_path, backend, env)
    state = VoiceState(user_id=5, guild_id=1, channel_id=2)
    reply = await bot.run_sound_command(_Session(), "ahoj", state)
    assert reply == "ahoj"
    assert backend.played == [(1, 2, b"speech")]


@pytest.mark.asyncio
async def test_run_sound_command_needs_key(tmp_path):
    bot = _bot(tmp_path, _Backend(), {"TTS_URL": "http://localhost/tts"})
    state = VoiceState(user_id=5, guild_id=1, channel_id=2)
    with pytest.raises(BotError, match="TTS_KEY"):
        await bot.run_sound_command(_Session(), "ahoj", state)


def test_from_environment(tmp_path, monkeypatch):
    (tmp_path / "aco.mp3").write_bytes(b"x")
    monkeypatch.setenv("DISCORD_TOKEN", "token")
    monkeypatch.setenv("CONFIG", json.dumps({"greetings": {"_fallback": []}}))
    bot = Bot.from_environment(None, tmp_path)
    assert bot.token == "token"
    assert list(bot.commands) == ["aco"]


def test_from_environment_needs_token(tmp_path, monkeypatch):
    monkeypatch.delenv("DISCORD_TOKEN", raising=False)
    with pytest.raises(BotError, match="Invalid discord token."):
        Bot.from_environment(None, tmp_path)


def test_main_lists_commands(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assets = tmp_path / "assets"
    (assets / "franta").mkdir(parents=True)
    (assets / "franta" / "cus.mp3").write_bytes(b"x")
    monkeypatch.setenv("DISCORD_TOKEN", "token")
    monkeypatch.setenv("CONFIG", json.dumps({"greetings": {"_fallback": []}}))
    assert main(["--assets", str(assets)]) == 0
    out = capsys.readouterr().out
    assert "/franta <option>: Plays franta" in out


def test_main_reports_missing_config(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DISCORD_TOKEN", "token")
    monkeypatch.delenv("CONFIG", raising=False)
    assert main(["--assets", str(tmp_path)]) == 1
    assert "Config not provided." in capsys.readouterr().err