"""
Configuration-related constants and resource limits.
"""

# Maximum config file size (10MB)
MAX_CONFIG_SIZE_BYTES = 10 * 1024 * 1024

# Prefix of environment variables overriding config values
ENV_PREFIX = "CMDSVC_"

# Config file suffixes tried, in order, when deriving the default path
CONFIG_SUFFIXES = (".yaml", ".yml", ".toml")

DEFAULT_POLL_INTERVAL = 0.1
DEFAULT_KILL_TIMEOUT = 10.0
