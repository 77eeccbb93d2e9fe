import json
import os
from datetime import datetime

from simulator.examples import EXAMPLES

DEFAULT_CONFIG_PATH = "config/runtime_config.json"

DEFAULT_CONFIG = {
    "speed_ms": 500,
    "max_steps": 10_000,
    "tape_window": 7,
    "default_example": "binary-increment",
    "default_input": None,
    "log_steps": False,
    "output_directory": "logs/",
    "log_file_prefix": "turing_",
}

# Expected types for validation
CONFIG_SCHEMA = {
    "speed_ms": int,
    "max_steps": int,
    "tape_window": int,
    "default_example": str,
    "default_input": (str, type(None)),
    "log_steps": bool,
    "output_directory": str,
    "log_file_prefix": str,
}

def validate_config(config):
    for key, expected_type in CONFIG_SCHEMA.items():
        if key not in config:
            raise ValueError(f"Missing required configuration key: {key}")
        value = config[key]
        # bool is an int subclass; don't let true/false pass as a number
        if not isinstance(value, expected_type) or (expected_type is int and isinstance(value, bool)):
            raise TypeError(f"Config key '{key}' expected {expected_type}, got {type(value)}.")

    if config["speed_ms"] <= 0:
        raise ValueError("speed_ms must be a positive number of milliseconds.")
    if config["max_steps"] <= 0:
        raise ValueError("max_steps must be at least 1.")
    if config["tape_window"] < 0:
        raise ValueError("tape_window must not be negative.")

    known = [example.id for example in EXAMPLES]
    if config["default_example"] not in known:
        raise ValueError(f"default_example must be one of {known}, got '{config['default_example']}'.")

def load_config(path=DEFAULT_CONFIG_PATH, verbose=False):
    if not os.path.exists(path):
        raise FileNotFoundError(f"Configuration file not found at: {path}")

    with open(path, "r", encoding="utf-8") as f:
        user_config = json.load(f)

    # Merge defaults with overrides
    config = DEFAULT_CONFIG.copy()
    config.update(user_config)

    validate_config(config)

    os.makedirs(config["output_directory"], exist_ok=True)

    if verbose:
        print(f"[{datetime.now()}] Loaded config:")
        for key, value in config.items():
            print(f"  {key}: {value}")

    return config

def save_config(config, path=DEFAULT_CONFIG_PATH):
    validate_config(config)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=4)
