"""Data types shared by the bot: configuration, asset descriptions and bot state."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping


class BotError(Exception):
    """An error the bot reports back to the user or to the log."""


class AssetClass(Enum):
    """Families of built-in sound assets."""

    FRANTA = "franta"
    COJETYPICO = "cojetypico"
    DUFKA = "dufka"
    ZESRANE_HAJZLE = "zesrane"
    MISC = "misc"
    DOTA = "dota"


@dataclass(frozen=True)
class GreetingCommand:
    """One greeting: an asset command and, for option commands, the option to play."""

    command: str
    option: str | None = None
    label: str | None = None


def _optional_str(entry: Mapping[str, Any], key: str) -> str | None:
    value = entry.get(key)
    if value is not None and not isinstance(value, str):
        raise BotError(f"Invalid config: `{key}` must be a string")
    return value


def _parse_greeting(entry: Any) -> GreetingCommand:
    if not isinstance(entry, dict):
        raise BotError("Invalid config: a greeting must be an object")
    command = entry.get("command")
    if not isinstance(command, str):
        raise BotError("Invalid config: missing field `command`")
    return GreetingCommand(
        command=command,
        option=_optional_str(entry, "option"),
        label=_optional_str(entry, "_label"),
    )


@dataclass
class Config:
    """Bot configuration: greetings keyed by user id, with a ``_fallback`` entry."""

    greetings: dict[str, list[GreetingCommand]] = field(default_factory=dict)

    @classmethod
    def from_json(cls, raw: str | bytes) -> Config:
        """Parse the configuration from a JSON document."""
        try:
            document = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise BotError(f"Invalid config: {exc}") from exc
        if not isinstance(document, dict) or "greetings" not in document:
            raise BotError("Invalid config: missing field `greetings`")
        greetings_raw = document["greetings"]
        if not isinstance(greetings_raw, dict):
            raise BotError("Invalid config: `greetings` must be an object")
        greetings: dict[str, list[GreetingCommand]] = {}
        for key, entries in greetings_raw.items():
            if not isinstance(entries, list):
                raise BotError(f"Invalid config: greetings for {key} must be a list")
            greetings[key] = [_parse_greeting(entry) for entry in entries]
        return cls(greetings=greetings)


@dataclass
class CommandInfo:
    """An asset command: either a single file, or a set of named options."""

    path: Path | None = None
    options: dict[str, Path] = field(default_factory=dict)

    @classmethod
    def single(cls, path: Path | str) -> CommandInfo:
        """A command that plays one file."""
        return cls(path=Path(path))

    @classmethod
    def with_options(cls, options: Mapping[str, Path | str]) -> CommandInfo:
        """A command whose file is chosen by an option."""
        return cls(options={name: Path(p) for name, p in options.items()})

    def is_flat(self) -> bool:
        """True when the command plays a single file."""
        return self.path is not None


@dataclass
class BotData:
    """State shared by all command handlers."""

    audio_map: dict[str, CommandInfo]
    config: Config