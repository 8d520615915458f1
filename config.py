"""
config.py

Typed configuration loading and validation for Notefall.

What it covers
- Gameplay timing and scoring (turned into timing_model.GameRules)
- Which chart to load and where charts live
- Which instruments exist and which one plays the ambient random notes

Sources, lowest to highest priority: built-in defaults, one UTF-8 JSON file, NOTEFALL_* variables.
Nothing is written to disk.

Where the file is looked up
- If NOTEFALL_CONFIG_PATH is set, that file is used (and must exist).
- Otherwise Notefall searches these paths in order and uses the first one that exists:
  1) ./notefall_config.json (current working directory)
  2) <user config dir>/Notefall/Notefall/notefall_config.json
- If none exists, the built-in defaults are used.

Example config file (notefall_config.json)
{
  "gameplay": {
    "tick_rate_ms": 16,
    "note_fall_time_ms": 1800,
    "hit_window": 30,
    "hit_line_y": 350
  },
  "chart": {
    "song_name": "RockinRobin",
    "assets_dir": ""
  },
  "audio": {
    "random_note_instrument": "piano",
    "random_note_seed": 0
  }
}
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

import audio_triggers
import timing_model

CONFIG_FILE_NAME = "notefall_config.json"


class GameplayConfig(BaseModel):
    tick_rate_ms: int = Field(default=16, ge=1, description="Tick period in milliseconds.")
    note_fall_time_ms: float = Field(default=1800.0, gt=0, description="Time a note takes to fall from spawn to the hit line.")
    hit_window: float = Field(default=30.0, ge=0, description="Distance around the hit line that still counts as a hit.")
    hit_line_y: float = Field(default=350.0, gt=0, description="Vertical coordinate of the hit line.")
    score_increment: float = Field(default=1.0, ge=0)
    score_decrement: float = Field(default=1.0, ge=0)
    end_padding_ms: float = Field(default=2000.0, ge=0, description="Extra time after the last note before the game ends.")
    canvas_width: float = Field(default=200.0, gt=0)
    canvas_height: float = Field(default=400.0, gt=0)

    @model_validator(mode="after")
    def validate_hit_line_on_canvas(self) -> "GameplayConfig":
        if self.hit_line_y >= self.canvas_height:
            raise ValueError("hit_line_y must be inside the canvas (less than canvas_height)")
        return self

    def to_rules(self) -> timing_model.GameRules:
        return timing_model.GameRules(
            tick_rate_ms=int(self.tick_rate_ms),
            note_fall_time_ms=float(self.note_fall_time_ms),
            hit_window=float(self.hit_window),
            hit_line_y=float(self.hit_line_y),
            score_increment=float(self.score_increment),
            score_decrement=float(self.score_decrement),
            end_padding_ms=float(self.end_padding_ms),
            canvas_width=float(self.canvas_width),
            canvas_height=float(self.canvas_height),
        )


class ChartConfig(BaseModel):
    song_name: str = Field(default="RockinRobin", description="Chart file stem under the assets directory.")
    assets_dir: Optional[str] = Field(default=None, description="Directory holding <song_name>.csv files.")

    @field_validator("song_name")
    @classmethod
    def validate_song_name(cls, value: str) -> str:
        trimmed = (value or "").strip()
        if not trimmed:
            raise ValueError("song_name must be a non-empty string")
        return trimmed

    @field_validator("assets_dir")
    @classmethod
    def normalize_optional_path(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None


class AudioConfig(BaseModel):
    random_note_instrument: str = Field(default=audio_triggers.DEFAULT_RANDOM_NOTE_INSTRUMENT)
    random_note_seed: int = Field(default=0, ge=0)
    instruments: List[str] = Field(default_factory=lambda: list(audio_triggers.DEFAULT_INSTRUMENTS))

    @model_validator(mode="after")
    def validate_random_instrument_loaded(self) -> "AudioConfig":
        if self.random_note_instrument not in self.instruments:
            raise ValueError("random_note_instrument must be one of the configured instruments")
        return self


class AppConfig(BaseModel):
    gameplay: GameplayConfig = Field(default_factory=GameplayConfig)
    chart: ChartConfig = Field(default_factory=ChartConfig)
    audio: AudioConfig = Field(default_factory=AudioConfig)


# (environment variable, config section, key, converter)
ENVIRONMENT_OVERRIDES: Tuple[Tuple[str, str, str, Callable[[str], Any]], ...] = (
    ("NOTEFALL_SONG_NAME", "chart", "song_name", str),
    ("NOTEFALL_ASSETS_DIR", "chart", "assets_dir", str),
    ("NOTEFALL_TICK_RATE_MS", "gameplay", "tick_rate_ms", int),
    ("NOTEFALL_RANDOM_NOTE_INSTRUMENT", "audio", "random_note_instrument", str),
)


def _default_config_candidates() -> List[Path]:
    return [
        Path.cwd() / CONFIG_FILE_NAME,
        Path(user_config_dir("Notefall", "Notefall")) / CONFIG_FILE_NAME,
    ]


def _resolve_config_path() -> Optional[Path]:
    explicit_path_text = os.environ.get("NOTEFALL_CONFIG_PATH", "").strip()
    if explicit_path_text:
        return Path(explicit_path_text)
    return next((path for path in _default_config_candidates() if path.exists()), None)


def _read_config_json(config_path: Path) -> Dict[str, Any]:
    try:
        parsed = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exception:
        raise ValueError(f"Config file is not valid JSON: {config_path}. Error: {exception}") from exception
    except FileNotFoundError:
        raise
    except OSError as exception:
        raise OSError(f"Failed to read config file: {config_path}. Error: {exception}") from exception

    if not isinstance(parsed, dict):
        raise ValueError(f"Config file root must be a JSON object: {config_path}")
    return parsed


def _apply_environment_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Copy config_dict and apply any NOTEFALL_* overrides from ENVIRONMENT_OVERRIDES.

    Blank values are ignored, and so are integers that fail to parse.
    """
    updated_config: Dict[str, Any] = {}
    for section_name, section in config_dict.items():
        updated_config[section_name] = dict(section) if isinstance(section, dict) else section

    for env_name, section_name, key_name, convert in ENVIRONMENT_OVERRIDES:
        raw_value = os.environ.get(env_name, "").strip()
        if not raw_value:
            continue
        try:
            value = convert(raw_value)
        except ValueError:
            continue
        section = updated_config.get(section_name)
        if not isinstance(section, dict):
            section = {}
            updated_config[section_name] = section
        section[key_name] = value

    return updated_config


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, Optional[Path]]:
    resolved_path = Path(config_path) if config_path is not None else _resolve_config_path()
    raw_config = _read_config_json(resolved_path) if resolved_path is not None else {}

    try:
        config = AppConfig.model_validate(_apply_environment_overrides(raw_config))
    except ValidationError as exception:
        source_text = str(resolved_path) if resolved_path is not None else "defaults"
        raise ValueError(f"Config validation failed for {source_text}:\n{exception}") from exception

    return config, resolved_path


@lru_cache(maxsize=1)
def get_config() -> Tuple[AppConfig, Optional[Path]]:
    return load_config()


def to_json(config: AppConfig) -> str:
    return json.dumps(config.model_dump(), ensure_ascii=False, indent=2)


def main() -> int:
    """Print the effective config (file plus environment) as JSON."""
    try:
        config, resolved_path = load_config()
    except (OSError, ValueError) as exception:
        print(json.dumps({"ok": False, "error": str(exception)}, ensure_ascii=False, indent=2))
        return 2

    print(
        json.dumps(
            {
                "ok": True,
                "config_path": None if resolved_path is None else str(resolved_path),
                "config": config.model_dump(),
            },
            ensure_ascii=False,
            indent=2,
        )
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
