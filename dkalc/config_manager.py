# config_manager.py
import json
from pathlib import Path

config_json = Path(__file__).resolve().parent / "config.json"


# Used for every key the config file does not provide
DEFAULT_SETTINGS = {
    "debug": False,
    "max_input_length": 256,
    "sqrt_max_iterations": 100,
    "cos_max_terms": 40,
    "placeholder": "-",
}


def load_setting_value(key_value):
    try:
        with open(config_json, 'r', encoding= 'utf-8') as f:
            settings_dict = json.load(f)

    except (FileNotFoundError, json.JSONDecodeError):
        settings_dict = {}

    merged = dict(DEFAULT_SETTINGS)
    merged.update(settings_dict)

    if key_value == "all":
        return merged

    else:
        return merged.get(key_value, 0)


def save_setting(settings_dict):
    try:
        with open (config_json, 'w', encoding= 'utf-8') as f:
            json.dump(settings_dict, f, indent=4)
            return settings_dict

    except (FileNotFoundError, PermissionError):
        return{}
