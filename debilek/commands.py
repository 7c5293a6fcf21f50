"""Slash commands: generic asset commands and text-to-speech."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from debilek.models import BotError, CommandInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetCommand:
    """A command that plays a clip from the assets folder.

    Commands with ``has_option`` take one string option naming the clip to play.
    """

    name: str
    has_option: bool = False
    ephemeral: bool = True

    @property
    def description(self) -> str:
        return f"Plays {self.name}"

    def autocomplete(self, audio_map: Mapping[str, CommandInfo], partial: str) -> list[str]:
        """Option names of this command that contain ``partial``."""
        info = audio_map.get(self.name)
        if info is None or info.is_flat():
            return []
        return [name for name in info.options if partial in name]

    def resolve(self, audio_map: Mapping[str, CommandInfo], option: str | None = None) -> Path:
        """The file this command plays for the given option."""
        info = audio_map.get(self.name)
        if info is None:
            raise BotError(f"Command {self.name} asset not found")
        if info.path is not None:
            return info.path
        if option is None:
            raise BotError("Missing option.")
        try:
            return info.options[option]
        except KeyError:
            raise BotError(f"Option {option} not found") from None

    def reply_text(self, option: str | None = None) -> str:
        """The text sent back to the user after playing."""
        return f"{self.name} {option or ''}"


def create_generic_asset_command(command_name: str, command_info: CommandInfo) -> AssetCommand:
    """Create the command for an asset; option commands take a clip name."""
    return AssetCommand(name=command_name, has_option=not command_info.is_flat())


def build_tts_params(
    text: str, key: str, lang: str | None = None, gender: str | None = None
) -> list[tuple[str, str]]:
    """Query parameters of a text-to-speech request."""
    return [
        ("text", text),
        ("lang", "cs" if lang is None else lang),
        ("gender", "female" if gender is None else gender),
        ("engine", "g1"),
        ("key", key),
    ]


async def fetch_tts(
    session: Any,
    url: str,
    key: str,
    text: str,
    lang: str | None = None,
    gender: str | None = None,
) -> bytes:
    """Request spoken audio of ``text`` from the text-to-speech service."""
    params = build_tts_params(text, key, lang, gender)
    async with session.get(url, params=params) as response:
        if response.status >= 400:
            logger.error("Text to speech request failed with status %s", response.status)
            raise BotError("Text to speech request failed.")
        return await response.read()