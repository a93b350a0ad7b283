"""Configuration loading (YAML over built-in defaults)."""

import logging
import os

import yaml

from .markdown_compiler import DEFAULT_FONT, FONT_VARIANTS
from .document import LAYOUTS

logger = logging.getLogger(__name__)

DEFAULTS = {
    "font": DEFAULT_FONT,
    "layout": "default",
    "date_columns": ["Date"],
    "task_columns": ["Task"],
    "sheet_link_host_marker": "docs.google.com/spreadsheets",
    "sheet_link_csv_marker": "output=csv",
    "request_timeout": 15,
    "dedupe_by_date": True,
    "state_file": ".task_diary_state.json",
    "log_level": "INFO",
}


def load_config(config_path=None) -> dict:
    """Load configuration from a YAML file, falling back to ``DEFAULTS``."""
    config = dict(DEFAULTS)
    if config_path and os.path.exists(config_path):
        with open(config_path, "r") as f:
            user_config = yaml.safe_load(f) or {}
        if not isinstance(user_config, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")
        config.update(user_config)

    if config["font"] not in FONT_VARIANTS:
        logger.warning(f"Unknown font '{config['font']}', using {DEFAULT_FONT}")
        config["font"] = DEFAULT_FONT
    if config["layout"] not in LAYOUTS:
        logger.warning(f"Unknown layout '{config['layout']}', using default")
        config["layout"] = "default"
    for key in ("date_columns", "task_columns"):
        if isinstance(config[key], str):
            config[key] = [config[key]]
    return config
