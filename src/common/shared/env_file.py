"""Minimal ``config.env`` reader used as a credential fallback."""

from __future__ import annotations

from pathlib import Path
from typing import Dict


def load_env_file(env_file_path: Path) -> Dict[str, str]:
    """
    Load key/value pairs from a ``.env`` style file.

    Supports ``KEY="VALUE"``, ``KEY='VALUE'`` and ``KEY=VALUE`` lines, plus an
    optional leading ``export``. Blank lines and ``#`` comments are ignored.

    Args:
        env_file_path: Path to the env file.

    Returns:
        Dictionary of key-value pairs; empty if the file does not exist.
    """
    env_vars: Dict[str, str] = {}
    if not env_file_path.exists():
        return env_vars

    with env_file_path.open("r", encoding="utf-8") as handle:
        for raw_line in handle:
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            if line.startswith("export "):
                line = line[len("export "):]
            key, value = line.split("=", 1)
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                value = value[1:-1]
            env_vars[key.strip()] = value

    return env_vars
