import json
from pathlib import Path

import pytest

from config.config_loader import DEFAULT_CONFIG, load_config, save_config, validate_config


def write_config(tmp_path, overrides):
    path = tmp_path / "runtime_config.json"
    config = {"output_directory": str(tmp_path / "logs")}
    config.update(overrides)
    path.write_text(json.dumps(config), encoding="utf-8")
    return path


def test_defaults_fill_missing_keys(tmp_path):
    config = load_config(str(write_config(tmp_path, {"speed_ms": 50})))
    assert config["speed_ms"] == 50
    assert config["max_steps"] == DEFAULT_CONFIG["max_steps"]
    assert (tmp_path / "logs").is_dir()


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.json"))


@pytest.mark.parametrize(
    "overrides, error",
    [
        ({"speed_ms": "fast"}, TypeError),
        ({"speed_ms": True}, TypeError),
        ({"log_steps": 1}, TypeError),
        ({"speed_ms": 0}, ValueError),
        ({"max_steps": -5}, ValueError),
        ({"tape_window": -1}, ValueError),
        ({"default_example": "busy-beaver"}, ValueError),
    ],
)
def test_invalid_values(tmp_path, overrides, error):
    with pytest.raises(error):
        load_config(str(write_config(tmp_path, overrides)))


def test_missing_key_is_reported():
    config = DEFAULT_CONFIG.copy()
    del config["speed_ms"]
    with pytest.raises(ValueError, match="speed_ms"):
        validate_config(config)


def test_save_round_trip(tmp_path):
    path = write_config(tmp_path, {})
    config = load_config(str(path))
    config["default_input"] = "111"
    save_config(config, str(path))
    assert load_config(str(path))["default_input"] == "111"


def test_shipped_config_is_valid():
    shipped = Path(__file__).resolve().parent.parent / "config" / "runtime_config.json"
    validate_config({**DEFAULT_CONFIG, **json.loads(shipped.read_text(encoding="utf-8"))})
