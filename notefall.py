"""
notefall.py

Real entrypoint that launches the game. Supports headless runs for offline checks.

Integration
- Configures logging
- Loads config and resolves the chart (file, song name or built-in demo)
- Headless: runs HeadlessSession and prints a JSON summary with the derived timing
- Windowed: hands the chart to gameplay_harness.run_gui and starts the Qt event loop
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import chart_engine
import config
import game_session
import paths
import test_chart

logger = logging.getLogger("notefall")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, str(level_name).upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name!r}")
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _build_argument_parser() -> argparse.ArgumentParser:
    argument_parser = argparse.ArgumentParser(description="Notefall rhythm game")
    chart_group = argument_parser.add_mutually_exclusive_group()
    chart_group.add_argument("--chart", type=Path, help="Path to a chart CSV file.")
    chart_group.add_argument("--song", help="Chart name resolved under the assets directory.")
    chart_group.add_argument("--demo", choices=("easy", "medium", "hard"), help="Play a built-in demo chart.")
    argument_parser.add_argument("--headless", action="store_true", help="Simulate the chart without a window.")
    argument_parser.add_argument("--autoplay", action="store_true", help="Headless only: press every hittable lane.")
    argument_parser.add_argument("--config", type=Path, help="Path to a notefall_config.json file.")
    argument_parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...).")
    return argument_parser


def _resolve_chart(parsed_args: argparse.Namespace, app_config: config.AppConfig) -> chart_engine.Chart:
    rules = app_config.gameplay.to_rules()

    if parsed_args.demo:
        return test_chart.build_demo_chart(difficulty=parsed_args.demo, rules=rules)

    if parsed_args.chart is not None:
        return chart_engine.load_chart(parsed_args.chart, rules=rules)

    song_name = parsed_args.song or app_config.chart.song_name
    chart_file = paths.chart_path(song_name, app_config.chart.assets_dir)
    if not chart_file.exists():
        logger.warning("Chart %s not found, falling back to the easy demo chart", chart_file)
        return test_chart.build_demo_chart(difficulty="easy", rules=rules)
    return chart_engine.load_chart(chart_file, rules=rules)


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def main(argv: Optional[List[str]] = None) -> int:
    parsed_args = _build_argument_parser().parse_args(argv)

    try:
        _configure_logging(parsed_args.log_level)
        if parsed_args.config is None:
            app_config, config_path = config.get_config()
        else:
            app_config, config_path = config.load_config(parsed_args.config)
        chart = _resolve_chart(parsed_args, app_config)
    except (OSError, ValueError) as exception:
        _print_json({"ok": False, "error": str(exception)})
        return 2

    logger.debug("Using config from %s", config_path if config_path is not None else "defaults")
    rules = app_config.gameplay.to_rules()

    if parsed_args.headless:
        session = game_session.HeadlessSession(
            chart,
            rules=rules,
            autoplay=bool(parsed_args.autoplay),
            random_seed=int(app_config.audio.random_note_seed),
            random_note_instrument=app_config.audio.random_note_instrument,
        )
        summary = session.play()
        _print_json(
            {
                "ok": True,
                "chart": chart.name,
                "timing": dataclasses.asdict(rules.snapshot()),
                "summary": dataclasses.asdict(summary),
            }
        )
        return 0

    import audio_triggers
    import gameplay_harness

    instrument_bank = audio_triggers.InstrumentBank.with_logging_instruments(app_config.audio.instruments)
    return gameplay_harness.run_gui(
        chart,
        rules=rules,
        instrument_bank=instrument_bank,
        random_seed=int(app_config.audio.random_note_seed),
        random_note_instrument=app_config.audio.random_note_instrument,
    )


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
