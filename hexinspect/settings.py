"""
Application settings.

Settings live in a JSON file in the user's home directory. Loading merges the
file over DEFAULT_SETTINGS and drops anything it does not understand; saving
keeps unrelated keys that are already in the file. API keys are read from the
environment only and are never written to disk.
"""

import json
import logging
import os

logger = logging.getLogger(__name__)

SETTINGS_FILE = os.path.join(os.path.expanduser("~"), ".hexinspect_settings.json")

DEFAULT_SETTINGS = {
    "theme": "Dark",
    "endianness": "little",
    "ai_provider": "gemini",
    "debounce_ms": 100,
    "row_height": 24,
    "overscan_rows": 5,
    "max_file_size": 5 * 1024 * 1024,
    "max_total_size": 50 * 1024 * 1024,
    "gemini_model": "gemini-2.5-flash",
    "openai_model": "gpt-4o-mini",
    "request_timeout": 60,
}

AI_PROVIDERS = ("gemini", "openai", "unconfigured")

API_KEY_ENV = {
    "gemini": ("GEMINI_API_KEY", "API_KEY"),
    "openai": ("OPENAI_API_KEY",),
}


def _valid(key, value):
    default = DEFAULT_SETTINGS[key]
    if key == "endianness":
        return value in ("little", "big")
    if key == "ai_provider":
        return value in AI_PROVIDERS
    if isinstance(default, int):
        return isinstance(value, int) and not isinstance(value, bool) and value > 0
    return isinstance(value, type(default))


def load_settings(path=None):
    """Load settings from path (SETTINGS_FILE by default) merged over the defaults."""
    path = path or SETTINGS_FILE
    settings = dict(DEFAULT_SETTINGS)
    if not os.path.exists(path):
        return settings

    try:
        with open(path, 'r') as f:
            stored = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Error loading settings from %s: %s", path, e)
        return settings

    if not isinstance(stored, dict):
        logger.warning("Ignoring settings file %s: expected a JSON object", path)
        return settings

    for key, value in stored.items():
        if key not in DEFAULT_SETTINGS:
            continue
        if _valid(key, value):
            settings[key] = value
        else:
            logger.warning("Ignoring invalid setting %s=%r", key, value)
    return settings


def save_settings(settings, path=None):
    """Save known settings, preserving any other keys already in the file."""
    path = path or SETTINGS_FILE
    stored = {}
    try:
        if os.path.exists(path):
            with open(path, 'r') as f:
                stored = json.load(f)
            if not isinstance(stored, dict):
                stored = {}
    except (OSError, ValueError) as e:
        logger.warning("Overwriting unreadable settings file %s: %s", path, e)
        stored = {}

    stored.update({key: value for key, value in settings.items() if key in DEFAULT_SETTINGS})

    try:
        with open(path, 'w') as f:
            json.dump(stored, f, indent=2)
    except OSError as e:
        logger.error("Error saving settings to %s: %s", path, e)
        return False
    return True


def api_key(provider, environ=None):
    """Return the API key for provider from the environment, or None."""
    environ = os.environ if environ is None else environ
    for name in API_KEY_ENV.get(provider, ()):
        value = environ.get(name)
        if value:
            return value
    return None
