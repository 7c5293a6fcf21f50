"""The bot: configuration loading, command registry and event handling."""

from __future__ import annotations

import argparse
import logging
import os
import random
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from dotenv import load_dotenv

from debilek.assets import choose_greeting, discover_audio_structure, read_audio
from debilek.commands import AssetCommand, create_generic_asset_command, fetch_tts
from debilek.models import BotData, BotError, CommandInfo, Config
from debilek.voice import (
    VoiceBackend,
    VoiceChannelAction,
    VoiceState,
    get_voice_channel_action,
    play,
)

logger = logging.getLogger(__name__)


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Read the configuration from the ``CONFIG`` environment variable."""
    env = os.environ if environ is None else environ
    raw = env.get("CONFIG")
    if raw is None:
        raise BotError("Config not provided.")
    logger.info("%s", raw)
    return Config.from_json(raw)


def build_commands(audio_map: Mapping[str, CommandInfo]) -> list[AssetCommand]:
    """One asset command for each entry of the audio map."""
    return [create_generic_asset_command(name, info) for name, info in audio_map.items()]


def _require(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name)
    if value is None:
        raise BotError(f"Environment variable {name} not set.")
    return value


@dataclass
class Bot:
    """Bot state together with the handlers for its commands and events."""

    data: BotData
    backend: VoiceBackend | None = None
    token: str | None = None
    rng: random.Random | None = None
    environ: Mapping[str, str] = field(default_factory=lambda: os.environ)
    commands: dict[str, AssetCommand] = field(init=False)

    def __post_init__(self) -> None:
        self.commands = {command.name: command for command in build_commands(self.data.audio_map)}

    @classmethod
    def from_environment(
        cls, backend: VoiceBackend | None, assets_path: Path | str = "assets"
    ) -> Bot:
        """Build the bot from environment variables and the assets folder."""
        token = os.environ.get("DISCORD_TOKEN")
        if token is None:
            raise BotError("Invalid discord token.")
        config = load_config(os.environ)
        audio_map = discover_audio_structure(assets_path)
        return cls(data=BotData(audio_map=audio_map, config=config), backend=backend, token=token)

    def _backend(self) -> VoiceBackend:
        if self.backend is None:
            raise BotError("Failed to get voice client.")
        return self.backend

    async def on_voice_state_update(
        self,
        old: VoiceState | None,
        new: VoiceState,
        self_user_id: int,
        guild_voice_states: Mapping[int, VoiceState] | None,
    ) -> VoiceChannelAction:
        """Greet users who join, and leave channels that became empty."""
        action = get_voice_channel_action(old, new, self_user_id, guild_voice_states)
        if action is VoiceChannelAction.USER_JOINED:
            logger.info("User %s joined voice channel %s.", new.user_id, new.channel_id)
            audio = choose_greeting(new.user_id, self.data, self.rng)
            await play(self._backend(), new, audio)
        elif action is VoiceChannelAction.USER_LEFT_EMPTY_CHANNEL:
            logger.info(
                "User %s left voice channel %s, which is now empty.", new.user_id, new.channel_id
            )
            backend = self._backend()
            channel_id = old.channel_id if old is not None else None
            guild_id = new.guild_id if new.guild_id is not None else (old.guild_id if old else None)
            if guild_id is None:
                raise BotError("No guild ID.")
            try:
                await backend.leave(guild_id)
            except Exception as exc:
                logger.error("Failed to leave voice channel %s: %s", channel_id, exc)
            else:
                logger.info("Leaving voice channel %s.", channel_id)
        return action

    async def run_asset_command(
        self, name: str, option: str | None, voice_state: VoiceState
    ) -> str:
        """Play an asset in the caller's channel; returns the reply text."""
        command = self.commands.get(name)
        if command is None:
            raise BotError(f"Command {name} asset not found")
        path = command.resolve(self.data.audio_map, option)
        audio = read_audio(path)
        await play(self._backend(), voice_state, audio)
        return command.reply_text(option)

    async def run_sound_command(
        self,
        session: Any,
        text: str,
        voice_state: VoiceState,
        lang: str | None = None,
        gender: str | None = None,
    ) -> str:
        """Speak ``text`` in the caller's channel; returns the reply text."""
        key = _require(self.environ, "TTS_KEY")
        url = _require(self.environ, "TTS_URL")
        audio = await fetch_tts(session, url, key, text, lang, gender)
        await play(self._backend(), voice_state, audio)
        return text


def main(argv: list[str] | None = None) -> int:
    """Load the configuration and assets and list the commands the bot registers."""
    parser = argparse.ArgumentParser(prog="debilek")
    parser.add_argument("--assets", default="assets", help="folder holding the sound assets")
    args = parser.parse_args(argv)
    load_dotenv()
    try:
        bot = Bot.from_environment(None, args.assets)
    except BotError as exc:
        print(exc, file=sys.stderr)
        return 1
    for command in sorted(bot.commands.values(), key=lambda c: c.name):
        suffix = " <option>" if command.has_option else ""
        print(f"/{command.name}{suffix}: {command.description}")
    print("/sound <text> [lang] [gender]")
    return 0