from __future__ import annotations

import tomllib
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Final, Mapping, MutableMapping, Optional, TypedDict

from chip8py.logger import log as _log
from chip8py.resources import config_file


class GeneralConfig(TypedDict):
    cycles_per_frame: int
    fps: int
    scale: int


class QuirksConfig(TypedDict):
    load_store_inclusive: bool
    jump_v0_checked: bool


class SoundConfig(TypedDict):
    enable: bool
    frequency: int
    volume: float


class Config(TypedDict):
    general: GeneralConfig
    quirks: QuirksConfig
    sound: SoundConfig
    keyboard: Dict[str, str]


# Logical keypad      Host keyboard
#   1 2 3 C             1 2 3 4
#   4 5 6 D             Q W E R
#   7 8 9 E             A S D F
#   A 0 B F             Z X C V
DEFAULT_CONFIG: Config = {
    "general": {"cycles_per_frame": 10, "fps": 60, "scale": 10},
    "quirks": {"load_store_inclusive": True, "jump_v0_checked": True},
    "sound": {"enable": True, "frequency": 440, "volume": 0.25},
    "keyboard": {
        "1": "1",
        "2": "2",
        "3": "3",
        "C": "4",
        "4": "q",
        "5": "w",
        "6": "e",
        "D": "r",
        "7": "a",
        "8": "s",
        "9": "d",
        "E": "f",
        "A": "z",
        "0": "x",
        "B": "c",
        "F": "v",
    },
}


@dataclass(frozen=True)
class Quirks:
    """Behaviour switches for instructions whose semantics differ between interpreters."""

    load_store_inclusive: bool = True  # FX55/FX65 cover V0..Vx instead of V0..Vx-1
    jump_v0_checked: bool = True  # BNNN rejects targets outside program memory

    @classmethod
    def from_config(cls, cfg: Config) -> "Quirks":
        return cls(
            load_store_inclusive=cfg["quirks"]["load_store_inclusive"],
            jump_v0_checked=cfg["quirks"]["jump_v0_checked"],
        )


def _deep_merge(
    target: MutableMapping[str, Any],
    overrides: Mapping[str, Any],
) -> MutableMapping[str, Any]:
    for key, value in overrides.items():
        if isinstance(target.get(key), dict) and isinstance(value, dict):
            _deep_merge(target[key], value)
        else:
            target[key] = value
    return target


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


# Host keys bound to frontend controls
RESERVED_KEYS: Final[frozenset] = frozenset({"escape", "p", "f1", "f5"})


def _validate_config(cfg: Config) -> None:
    for section in ("general", "quirks", "sound", "keyboard"):
        if not isinstance(cfg.get(section), dict):
            raise ValueError(f"[{section}] must be a table")

    for key in ("cycles_per_frame", "fps", "scale"):
        if not _is_positive_int(cfg["general"][key]):
            raise ValueError(f"general.{key} must be a positive integer")

    for key in ("load_store_inclusive", "jump_v0_checked"):
        if not isinstance(cfg["quirks"][key], bool):
            raise ValueError(f"quirks.{key} must be a boolean")

    if not isinstance(cfg["sound"]["enable"], bool):
        raise ValueError("sound.enable must be a boolean")

    if not _is_positive_int(cfg["sound"]["frequency"]):
        raise ValueError("sound.frequency must be a positive integer")

    volume = cfg["sound"]["volume"]
    if isinstance(volume, bool) or not isinstance(volume, (int, float)) or not 0.0 <= volume <= 1.0:
        raise ValueError("sound.volume must be a number between 0 and 1")

    seen: Dict[str, str] = {}
    indices: Dict[int, str] = {}
    for key, host_key in cfg["keyboard"].items():
        try:
            index = int(key, 16)
        except ValueError:
            raise ValueError(f"keyboard.{key} is not a hex digit") from None
        if not 0x0 <= index <= 0xF:
            raise ValueError(f"keyboard.{key} is not a keypad key (0-F)")
        if index in indices:
            raise ValueError(f"keyboard.{key} and keyboard.{indices[index]} name the same keypad key")
        indices[index] = key
        if not isinstance(host_key, str) or not host_key:
            raise ValueError(f"keyboard.{key} must be a non-empty key name")
        name = host_key.lower()
        if name in RESERVED_KEYS:
            raise ValueError(f"keyboard.{key}: {host_key!r} is reserved for emulator controls")
        if name in seen:
            raise ValueError(f"keyboard.{key} and keyboard.{seen[name]} share host key {host_key!r}")
        seen[name] = key


def keypad_mapping(cfg: Config) -> Dict[str, int]:
    """Return host key name -> logical key index."""
    return {host_key.lower(): int(key, 16) for key, host_key in cfg["keyboard"].items()}


def load_config(path: Optional[Path] = None) -> Config:
    path = config_file if path is None else path
    if not path.exists():
        return deepcopy(DEFAULT_CONFIG)

    config = deepcopy(DEFAULT_CONFIG)

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)

        _deep_merge(config, data)
        _validate_config(config)

    except (OSError, tomllib.TOMLDecodeError, ValueError) as e:
        _log.error(f"Failed to load config: {e}", exc_info=(type(e), e, e.__traceback__))
        return deepcopy(DEFAULT_CONFIG)

    return config
