"""Sound assets: built-in clip tables, asset discovery and greeting selection."""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Iterator, Mapping

from debilek.models import BotData, BotError, CommandInfo

logger = logging.getLogger(__name__)

_FRANTA_CUS = "franta\\cus.mp3"
_FRANTA_SERVUS = "franta\\servus.mp3"
_FRANTA_ZDRAVIMTE = "franta\\zdravimte.mp3"
_DUFKA_RASTAFA = "dufka\\rastafa.mp3"
_MISC_PANEMACO = "misc\\panemaco.mp3"
_MISC_STAVO = "misc\\stavo.mp3"

FRANTA_ASSETS: dict[str, str] = {
    "buzerante": "franta\\buzerante.mp3",
    "cus": _FRANTA_CUS,
    "cernakundo": "franta\\cernakundo.mp3",
    "gadze": "franta\\gadze.mp3",
    "jitrnice": "franta\\buzerante.mp3",
    "kaizer": "franta\\kaizer.mp3",
    "koniny": "franta\\koniny.mp3",
    "libusko": "franta\\libusko.mp3",
    "mekac": "franta\\mekac.mp3",
    "nejebe": "franta\\nejebe.mp3",
    "nesundas": "franta\\nesundas.mp3",
    "servus": _FRANTA_SERVUS,
    "zdravimte": _FRANTA_ZDRAVIMTE,
}

DUFKA_ASSETS: dict[str, str] = {"rastafa": _DUFKA_RASTAFA}

COJETYPICO_ASSETS: dict[str, str] = {
    "cojetypico": "cojetypico\\cojetypico.mp3",
    "rorodina": "cojetypico\\rorodina.mp3",
}

MISC_ASSETS: dict[str, str] = {
    "dalsiotazka": "misc\\dalsiotazka.mp3",
    "dobrabyla": "misc\\dobrabyla.mp3",
    "stavo": _MISC_STAVO,
    "aco": "misc\\aco.mp3",
    "panemaco": _MISC_PANEMACO,
}

ZESRANE_ASSETS: dict[str, str] = {
    "jatojebu": "zesrane\\jatojebu.mp3",
    "taktone": "misc\\taktone.mp3",
    "zesrane": "misc\\zesrane.mp3",
}

DOTA_ASSETS: dict[str, str] = {
    "easiestmoney": "dota\\easiestmoney.mp3",
    "echoslammajamma": "dota\\echoslammajamma.mp3",
    "lakad": "dota\\lakad.mp3",
    "nochill": "dota\\nochill.mp3",
    "ojojoj": "dota\\ojojoj.mp3",
}


def get_fitting_keys(assets: Mapping[str, str], partial: str) -> list[str]:
    """Keys whose asset path contains ``partial``; used for autocomplete."""
    return [key for key, value in assets.items() if partial in value]


def franta_autocomplete(partial: str) -> list[str]:
    return get_fitting_keys(FRANTA_ASSETS, partial)


def dufka_autocomplete(partial: str) -> list[str]:
    return get_fitting_keys(DUFKA_ASSETS, partial)


def cojetypico_autocomplete(partial: str) -> list[str]:
    return get_fitting_keys(COJETYPICO_ASSETS, partial)


def misc_autocomplete(partial: str) -> list[str]:
    return get_fitting_keys(MISC_ASSETS, partial)


def zesrane_autocomplete(partial: str) -> list[str]:
    return get_fitting_keys(ZESRANE_ASSETS, partial)


def dota_autocomplete(partial: str) -> list[str]:
    return get_fitting_keys(DOTA_ASSETS, partial)


def _has_extension(name: str) -> bool:
    return name.rfind(".") > 0


def _stem(name: str) -> str:
    index = name.rfind(".")
    return name[:index] if index > 0 else name


def _walk(path: Path, depth: int = 0) -> Iterator[Path]:
    yield path
    if depth > 0 and path.is_symlink():
        return
    if not path.is_dir():
        return
    try:
        children = sorted(path.iterdir())
    except OSError:
        return
    for child in children:
        yield from _walk(child, depth + 1)


def discover_audio_structure(base: Path | str) -> dict[str, CommandInfo]:
    """Map command names to assets found under ``base``.

    A file directly in ``base`` becomes a single-file command named by its stem;
    files in a sub-folder become options of a command named by the folder.
    """
    base = Path(base)
    audio_map: dict[str, CommandInfo] = {}
    for path in _walk(base):
        if not _has_extension(path.name):
            continue
        try:
            folder = path.parent.relative_to(base)
        except ValueError:
            continue
        folder_name = "" if folder == Path(".") else str(folder)
        stem = _stem(path.name)
        if not folder_name:
            audio_map[stem] = CommandInfo.single(path)
            continue
        info = audio_map.setdefault(folder_name, CommandInfo())
        if info.is_flat():
            logger.warning("Folder %r is clashing with %r. Ignoring...", folder_name, stem)
        else:
            info.options[stem] = path
    return audio_map


def _collect(directory: Path, asset_map: dict[str, list[str]]) -> None:
    if not directory.is_dir():
        return
    for path in sorted(directory.iterdir()):
        if path.is_dir():
            _collect(path, asset_map)
        elif path.is_file():
            command = path.parent.name
            if command:
                asset_map.setdefault(command, []).append(_stem(path.name))


def visit_dirs(directory: Path | str) -> dict[str, list[str]]:
    """Map each folder name under ``directory`` to the stems of the files it holds."""
    asset_map: dict[str, list[str]] = {}
    _collect(Path(directory), asset_map)
    return asset_map


def resolve_asset_path(
    audio_map: Mapping[str, CommandInfo], command_name: str, option: str | None = None
) -> Path:
    """The file a command plays, given the option for option commands."""
    info = audio_map.get(command_name)
    if info is None:
        raise BotError(f"No such asset - {command_name}")
    if info.path is not None:
        return info.path
    if option is None:
        raise BotError("No option specified.")
    try:
        return info.options[option]
    except KeyError:
        raise BotError(f"No such option - {option}") from None


def read_audio(path: Path | str) -> bytes:
    """Read an audio file's bytes."""
    logger.debug("Current dir: %s", Path.cwd())
    try:
        return Path(path).read_bytes()
    except OSError:
        raise BotError(f"File {path} not found.") from None


def choose_greeting(user_id: int | str, data: BotData, rng: random.Random | None = None) -> bytes:
    """Pick a greeting for a user, falling back to the shared ones, and read its audio."""
    greetings = data.config.greetings
    fallback = greetings.get("_fallback")
    if fallback is None:
        raise BotError("No fallback greetings defined.")
    choices = greetings.get(str(user_id), fallback)
    if not choices:
        raise BotError(f"No greetings defined for user {user_id}.")
    choice = (rng or random).choice(choices)
    path = resolve_asset_path(data.audio_map, choice.command, choice.option)
    return read_audio(path)