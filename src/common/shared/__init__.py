"""Shared utilities used by the deployment workflow and its CLI."""

from .env_file import load_env_file
from .logging_utils import get_logger, set_log_level
from .yaml_utils import load_yaml

__all__ = [
    "get_logger",
    "load_env_file",
    "load_yaml",
    "set_log_level",
]
