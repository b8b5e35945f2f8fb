import json
import os
import logging

from . import config

DEFAULT_SETTINGS = {
    "retain": config.DEFAULT_RETAIN,
    "log_level": "INFO",
}


def load_settings(settings_file=None):
    settings_file = settings_file or os.path.join(os.getcwd(), config.SETTINGS_FILENAME)
    if not os.path.exists(settings_file):
        logging.info(f"Settings file not found at {settings_file}, using default settings.")
        return dict(DEFAULT_SETTINGS)
    try:
        with open(settings_file, 'r', encoding='utf-8') as f:
            settings = json.load(f)
        if not isinstance(settings, dict):
            logging.error(f"Settings file {settings_file} must contain a JSON object. Returning default settings.")
            return dict(DEFAULT_SETTINGS)
        # Ensure all default keys exist
        for key, value in DEFAULT_SETTINGS.items():
            if key not in settings:
                settings[key] = value
        return settings
    except (json.JSONDecodeError, IOError) as e:
        logging.error(f"Failed to load settings file: {e}. Returning default settings.")
        return dict(DEFAULT_SETTINGS)
