"""Utility functions for the domdiff engine."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError


def load_structured_file(path: str | Path) -> Any:
    """
    Load a YAML or JSON file.

    JSON is valid YAML, so both go through the YAML loader.

    Args:
        path: Path to the file

    Returns:
        The parsed document
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(str(path), f"failed to read file: {e}")

    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(str(path), f"failed to parse file: {e}")


def utc_timestamp() -> str:
    """Current UTC time in ISO 8601 with a Z suffix."""
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def elapsed_ms(start_time: float) -> int:
    """Milliseconds elapsed since a time.perf_counter() reading."""
    return int((time.perf_counter() - start_time) * 1000)


def shorten(value: Any, limit: int = 40, quote: bool = True) -> str:
    """Repr-like rendering of a value, truncated for messages."""
    if value is None:
        return "null"
    if isinstance(value, str) and quote:
        text = repr(value)
    else:
        text = str(value)
    if len(text) > limit:
        return text[:limit - 3] + "..."
    return text
