#!/usr/bin/env python3
# lib/environment.py - Environment setup and configuration overrides

from __future__ import annotations
import os
import pathlib
from dataclasses import fields
from typing import Any, Dict, Mapping, Optional
from dotenv import load_dotenv

from audio_sentence_detector.lib.logging_config import InvalidConfigurationError
from audio_sentence_detector.processing.detection.data_structures import DetectorConfig

ENV_PREFIX = "SENTENCE_DETECTOR_"
LOG_LEVEL_ENV = ENV_PREFIX + "LOG_LEVEL"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

# formant_freq_ranges is fixed and not exposed to the environment
_ENV_FIELDS = {f.name: f for f in fields(DetectorConfig) if f.name != "formant_freq_ranges"}


def load_environment(dotenv_path: Optional[str | pathlib.Path] = None) -> None:
    """Load variables from a .env file without overriding the real environment."""
    load_dotenv(dotenv_path=dotenv_path, override=False)


def _parse_value(name: str, raw: str, default: Any) -> Any:
    text = raw.strip()
    if isinstance(default, bool):
        lowered = text.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise InvalidConfigurationError(f"{name} expects a boolean, got {raw!r}", field=name)
    try:
        if isinstance(default, int):
            return int(text)
        return float(text)
    except ValueError as e:
        raise InvalidConfigurationError(f"{name} expects a number, got {raw!r}", field=name, cause=e)


def config_overrides_from_env(
    environ: Optional[Mapping[str, str]] = None,
    prefix: str = ENV_PREFIX,
) -> Dict[str, Any]:
    """
    Collect DetectorConfig overrides from environment variables.

    ``SENTENCE_DETECTOR_MIN_SILENCE_DURATION=0.4`` overrides
    ``min_silence_duration``; values are parsed to the field's type.
    """
    environ = os.environ if environ is None else environ
    defaults = DetectorConfig()
    overrides: Dict[str, Any] = {}
    for name in _ENV_FIELDS:
        key = prefix + name.upper()
        if key in environ and environ[key].strip() != "":
            overrides[name] = _parse_value(name, environ[key], getattr(defaults, name))
    return overrides


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def default_log_level(environ: Optional[Mapping[str, str]] = None) -> str:
    """Log level from the environment; unknown names fall back to WARNING."""
    environ = os.environ if environ is None else environ
    level = environ.get(LOG_LEVEL_ENV, "WARNING").strip().upper()
    return level if level in LOG_LEVELS else "WARNING"


def ensure_outdir(path: str | pathlib.Path) -> pathlib.Path:
    out = pathlib.Path(path).expanduser().resolve()
    out.mkdir(parents=True, exist_ok=True)
    return out
