# debilek

The core of a chat voice bot that greets people as they join a voice
channel, leaves once everyone else has gone, and plays sound clips or
text-to-speech on request.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Sound assets

Clips are discovered from an asset directory (`assets` by default). Every
file with an extension becomes part of a command:

- a file directly in the asset directory becomes a command named after the
  file stem that plays that one clip;
- a file in a sub-folder becomes an option of the command named after the
  folder, the option being the file stem.

```
assets/
  aco.mp3              -> command "aco"
  dota/lakad.mp3       -> command "dota", option "lakad"
  dota/nochill.mp3     -> command "dota", option "nochill"
```

If a folder has the same name as a top-level clip, the folder's files are
ignored and a warning is logged.

## Configuration

Settings come from the environment; the `debilek` command also reads a
`.env` file in the working directory.

- `DISCORD_TOKEN` — the bot token; it must be set.
- `CONFIG` — a JSON document describing greetings; it must be set.
- `TTS_KEY`, `TTS_URL` — key and endpoint of the text-to-speech service,
  used by `Bot.run_sound_command`.

`CONFIG` maps user ids to lists of greetings. The `_fallback` entry is
required and is used for anyone without an entry of their own:

```json
{
  "greetings": {
    "_fallback": [{"command": "franta", "option": "servus"}],
    "123456789": [{"command": "aco"}]
  }
}
```

Each greeting names a command and, for commands with options, the option to
play; an optional `_label` is kept as the greeting's label. One greeting is
picked at random whenever the user joins a channel. An invalid document
raises `BotError`.

## The command

```
debilek [--assets DIR]
```

Reads `.env`, checks that `DISCORD_TOKEN` and `CONFIG` are set and valid,
discovers the assets in `DIR` and prints the slash commands the bot offers,
one per line, followed by `/sound <text> [lang] [gender]`. On a missing or
invalid setting it prints the error to standard error and exits with
status 1.

## Using it as a library

- `debilek.models` — `Config` (with `Config.from_json`), `GreetingCommand`,
  `CommandInfo` (`CommandInfo.single`, `CommandInfo.with_options`,
  `is_flat`), `BotData` and the `BotError` exception.
- `debilek.assets` — `discover_audio_structure(base)` builds the map of
  command names to `CommandInfo`; `visit_dirs(directory)` maps folder names to
  file stems; `resolve_asset_path`, `read_audio` and
  `choose_greeting(user_id, data, rng)` pick and read the greeting clip for
  a user. It also holds built-in clip tables with `*_autocomplete(partial)`
  helpers built on `get_fitting_keys`.
- `debilek.voice` — `get_voice_channel_action(old, new, self_user_id,
  guild_voice_states)` returns a `VoiceChannelAction` (greet, leave, or
  nothing); `find_user_voice_state` finds the caller's `VoiceState`;
  `play(backend, voice_state, audio)` joins and plays through a
  `VoiceBackend`.
- `debilek.commands` — `create_generic_asset_command(name, info)` builds an
  `AssetCommand` with `autocomplete`, `resolve` and `reply_text`;
  `build_tts_params` and `fetch_tts` make the text-to-speech request
  through a session whose `get(url, params=...)` is an async context
  manager yielding a response with `status` and `read()`.
- `debilek.bot` — `Bot` ties these together: `Bot.from_environment`,
  `on_voice_state_update`, `run_asset_command` and `run_sound_command`;
  `load_config` and `build_commands` are available on their own.

## What it does not do

The package does not connect to a chat service, register slash commands
with one, or receive its events. It has no audio transport of its own:
joining, playing and leaving are left to a `VoiceBackend` that you supply,
and the HTTP session for text-to-speech is passed in by the caller. The
`debilek` command only checks the setup and lists the commands; it does
not run the bot.