import json

import pytest

import config
import timing_model


@pytest.fixture()
def config_file(clean_env, monkeypatch):
    path = clean_env / "notefall_config.json"
    monkeypatch.setattr(config, "_default_config_candidates", lambda: [path])
    return path


def test_defaults_when_no_file_exists(config_file):
    app_config, resolved_path = config.load_config()
    assert resolved_path is None
    assert app_config.chart.song_name == "RockinRobin"
    assert app_config.audio.random_note_instrument == "piano"
    assert app_config.gameplay.to_rules() == timing_model.DEFAULT_RULES


def test_file_values_are_loaded(config_file):
    config_file.write_text(
        json.dumps({"gameplay": {"tick_rate_ms": 10, "hit_window": 20}, "chart": {"song_name": " Demo "}}),
        encoding="utf-8",
    )
    app_config, resolved_path = config.load_config()
    assert resolved_path == config_file
    rules = app_config.gameplay.to_rules()
    assert rules.tick_rate_ms == 10
    assert rules.hit_window == 20.0
    assert app_config.chart.song_name == "Demo"


def test_environment_overrides(config_file, monkeypatch):
    monkeypatch.setenv("NOTEFALL_SONG_NAME", "FromEnv")
    monkeypatch.setenv("NOTEFALL_TICK_RATE_MS", "20")
    monkeypatch.setenv("NOTEFALL_RANDOM_NOTE_INSTRUMENT", "flute")
    monkeypatch.setenv("NOTEFALL_ASSETS_DIR", "  ")
    app_config, _path = config.load_config()
    assert app_config.chart.song_name == "FromEnv"
    assert app_config.chart.assets_dir is None
    assert app_config.gameplay.tick_rate_ms == 20
    assert app_config.audio.random_note_instrument == "flute"


def test_explicit_config_path_env(clean_env, monkeypatch):
    explicit = clean_env / "custom.json"
    explicit.write_text(json.dumps({"audio": {"random_note_seed": 9}}), encoding="utf-8")
    monkeypatch.setenv("NOTEFALL_CONFIG_PATH", str(explicit))
    app_config, resolved_path = config.load_config()
    assert resolved_path == explicit
    assert app_config.audio.random_note_seed == 9


@pytest.mark.parametrize(
    "payload",
    [
        {"gameplay": {"hit_line_y": 500}},
        {"gameplay": {"tick_rate_ms": 0}},
        {"chart": {"song_name": "   "}},
        {"audio": {"random_note_instrument": "kazoo"}},
    ],
)
def test_invalid_values_raise_value_error(config_file, payload):
    config_file.write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(ValueError, match="Config validation failed"):
        config.load_config()


def test_invalid_json_and_root(config_file):
    config_file.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="not valid JSON"):
        config.load_config()
    config_file.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError, match="JSON object"):
        config.load_config()


def test_get_config_is_cached(config_file):
    config.get_config.cache_clear()
    try:
        assert config.get_config() is config.get_config()
    finally:
        config.get_config.cache_clear()


def test_to_json_round_trips(config_file):
    app_config, _path = config.load_config()
    dumped = json.loads(config.to_json(app_config))
    assert config.AppConfig.model_validate(dumped) == app_config
