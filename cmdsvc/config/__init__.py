"""
Configuration for the command service.
"""

from .config import ServiceConfig, default_config_path
from .constants import ENV_PREFIX, MAX_CONFIG_SIZE_BYTES

__all__ = [
    "ServiceConfig",
    "default_config_path",
    "ENV_PREFIX",
    "MAX_CONFIG_SIZE_BYTES",
]
