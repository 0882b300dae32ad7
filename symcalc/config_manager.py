# config_manager.py
"""Load and save the JSON settings used by the engine and the UI."""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

config_json = Path(__file__).resolve().parent / "config.json"
ui_strings = Path(__file__).resolve().parent / "ui_strings.json"

# Used whenever config.json is missing, unreadable or lacks a key.
DEFAULT_SETTINGS = {
    "darkmode": False,
    "after_paste_enter": False,
    "show_error_estimate": True,
    "debug": False,
    "default_precision_bits": 128,
    "significant_digits": 12,
    # {python} is replaced by the running interpreter; {entry} names a function in {source}
    "backend_command": ["{python}", "-c", "import runpy, sys; print(runpy.run_path(sys.argv[1])[sys.argv[2]]())",
                        "{source}", "{entry}"],
    "backend_timeout": 10,
}


def load_setting_value(key_value):
    try:
        with open(config_json, 'r', encoding='utf-8') as f:
            settings_dict = json.load(f)

    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.warning("Could not read %s (%s); using defaults", config_json, e)
        settings_dict = {}

    settings_dict = {**DEFAULT_SETTINGS, **settings_dict}

    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value, 0)


def load_setting_description(key_value):
    try:
        with open(ui_strings, 'r', encoding='utf-8') as f:
            settings_dict = json.load(f)

    except (FileNotFoundError, json.JSONDecodeError):
        return {}

    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value, 0)


def save_setting(settings_dict):
    """Write all settings; returns the saved dict, or {} when writing failed."""
    try:
        with open(config_json, 'w', encoding='utf-8') as f:
            json.dump(settings_dict, f, indent=4)
            return settings_dict

    except (OSError, TypeError) as e:
        logger.error("Saving settings to %s failed: %s", config_json, e)
        return {}


def configure_logging(debug=None):
    """Install a stream handler on the package logger."""
    if debug is None:
        debug = bool(load_setting_value("debug"))
    package_logger = logging.getLogger("symcalc")
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    return package_logger
