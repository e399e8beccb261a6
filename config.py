"""
Runtime settings for the Site Visit app.

Precedence (lowest -> highest):
  built-in defaults, data/settings.json, environment variables.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict

DATA_DIR = os.path.join(os.getcwd(), "data")
SETTINGS_FP = os.path.join(DATA_DIR, "settings.json")

DEFAULTS: Dict[str, Any] = {
    "api_url": "http://localhost:8000",
    "request_timeout": 60.0,
    "host": "127.0.0.1",
    "port": 8000,
    "maps_url_template": "https://maps.google.com/?q={lat},{lon}",
    "log_level": "INFO",
    "log_format": "text",
}

# setting name -> (env var, caster)
ENV_OVERRIDES = {
    "api_url": ("SITE_VISIT_API_URL", str),
    "request_timeout": ("SITE_VISIT_REQUEST_TIMEOUT", float),
    "host": ("SITE_VISIT_HOST", str),
    "port": ("SITE_VISIT_PORT", int),
    "maps_url_template": ("MAPS_URL_TEMPLATE", str),
    "log_level": ("LOG_LEVEL", str),
    "log_format": ("LOG_FORMAT", str),
}


def _read_json_safe(path: str, default=None):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return default if default is not None else {}
    except (OSError, ValueError):
        return default if default is not None else {}


def load_settings(path: str = SETTINGS_FP) -> Dict[str, Any]:
    """
    Merge defaults, the optional settings file and env overrides.
    Env values that fail to cast are ignored.
    """
    settings = dict(DEFAULTS)

    from_file = _read_json_safe(path, {})
    if isinstance(from_file, dict):
        for key, val in from_file.items():
            if key in DEFAULTS and val not in (None, ""):
                settings[key] = val

    for key, (env_name, cast) in ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw is None or raw.strip() == "":
            continue
        try:
            settings[key] = cast(raw.strip())
        except ValueError:
            continue

    settings["api_url"] = str(settings["api_url"]).rstrip("/")
    return settings


def maps_url(lat: Any, lon: Any, template: str | None = None) -> str:
    """Map-service link centred on (lat, lon), values substituted as given."""
    tpl = template or DEFAULTS["maps_url_template"]
    return tpl.format(lat=lat, lon=lon)
