# -*- coding: utf-8 -*-
########################
# paths.py
########################
# Purpose:
# - Central filesystem path helpers for the app.
# - Defines where chart CSV files live relative to the project root.
#
# Design notes:
# - Keep path derivation consistent across modules.
# - No Qt usage. Return pathlib.Path only.
#
########################
# Interfaces:
# Public functions:
# - app_root_dir() -> pathlib.Path
# - assets_dir(override: Optional[str] = None) -> pathlib.Path
# - chart_path(song_name: str, assets_dir_override: Optional[str] = None) -> pathlib.Path
#
# Inputs:
# - None (derived from the launched Python entrypoint file location), or an explicit override.
#
# Outputs:
# - Paths used by notefall.py to locate charts.
#
########################

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional


def _entrypoint_file_path() -> Optional[Path]:
    """Best-effort resolution of the launched Python entrypoint file."""
    main_module = sys.modules.get("__main__")
    main_file = getattr(main_module, "__file__", None)
    if main_file:
        return Path(str(main_file)).resolve()

    argv0 = str(sys.argv[0] or "").strip()
    if argv0 and argv0 not in {"-c", "-m"}:
        try:
            return Path(argv0).resolve()
        except OSError:
            return None

    return None


def app_root_dir() -> Path:
    """Return the directory containing the launched .py file, or the working directory."""
    entrypoint_path = _entrypoint_file_path()
    if entrypoint_path is not None:
        return entrypoint_path.parent

    return Path.cwd().resolve()


def assets_dir(override: Optional[str] = None) -> Path:
    """Return the chart assets directory (not created automatically)."""
    if override:
        return Path(override).expanduser()
    return app_root_dir() / "assets"


def chart_path(song_name: str, assets_dir_override: Optional[str] = None) -> Path:
    stem = str(song_name).strip()
    if not stem:
        raise ValueError("song_name must be a non-empty string")
    return assets_dir(assets_dir_override) / f"{stem}.csv"
