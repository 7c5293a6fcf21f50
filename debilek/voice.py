"""Voice state handling: deciding how to react to voice updates and playing audio."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Mapping, Protocol

from debilek.models import BotError

logger = logging.getLogger(__name__)


class VoiceChannelAction(Enum):
    """What the bot should do after a voice state update."""

    NONE = auto()
    USER_JOINED = auto()
    USER_LEFT_EMPTY_CHANNEL = auto()


@dataclass(frozen=True)
class VoiceState:
    """A user's voice connection state."""

    user_id: int
    guild_id: int | None = None
    channel_id: int | None = None


class VoiceBackend(Protocol):
    """Connection to the voice service."""

    async def join_and_play(self, guild_id: int, channel_id: int, audio: bytes) -> None:
        """Join the voice channel and start playing the audio."""

    async def leave(self, guild_id: int) -> None:
        """Leave the voice channel the bot holds in the guild."""


def find_user_voice_state(
    voice_states: Mapping[int, VoiceState], user_id: int, in_guild: bool = True
) -> VoiceState:
    """The voice state of the user issuing a command."""
    if not in_guild:
        raise BotError("Piča však to ani není v guildě.")
    matching = [state for state in voice_states.values() if state.user_id == user_id]
    if not matching:
        raise BotError(
            "Hele debílku jeden, jednou sem ti to toleroval, ale teď už to vážně není vtipný. "
            "Okamžitě se přidej do voice channelu, nebo ti nechám zrušit celej kanál."
        )
    return matching[-1]


def get_voice_channel_action(
    old: VoiceState | None,
    new: VoiceState,
    self_user_id: int,
    guild_voice_states: Mapping[int, VoiceState] | None,
) -> VoiceChannelAction:
    """Decide how to react to a voice state update.

    ``guild_voice_states`` are the current voice states of the old state's guild,
    or None when that guild is not known.
    """
    if new.user_id == self_user_id:
        return VoiceChannelAction.NONE
    if old is None:
        if new.channel_id is not None:
            return VoiceChannelAction.USER_JOINED
        return VoiceChannelAction.NONE
    if old.channel_id == new.channel_id:
        return VoiceChannelAction.NONE
    if old.guild_id is None or guild_voice_states is None:
        return VoiceChannelAction.NONE
    bot_state = guild_voice_states.get(self_user_id)
    if bot_state is None:
        return VoiceChannelAction.NONE
    others = sum(
        1
        for user, state in guild_voice_states.items()
        if state.channel_id == bot_state.channel_id and user != self_user_id
    )
    return VoiceChannelAction.USER_LEFT_EMPTY_CHANNEL if others == 0 else VoiceChannelAction.NONE


async def play(backend: VoiceBackend, voice_state: VoiceState, audio: bytes) -> None:
    """Join the channel of ``voice_state`` and play the audio there."""
    if voice_state.guild_id is None:
        raise BotError("No guild ID.")
    if voice_state.channel_id is None:
        raise BotError("No channel ID.")
    try:
        await backend.join_and_play(voice_state.guild_id, voice_state.channel_id, audio)
    except Exception:
        logger.exception("Failed to join voice channel %s", voice_state.channel_id)
        raise
    logger.info("Successfully joined voice channel %s", voice_state.channel_id)