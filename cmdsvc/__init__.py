from importlib.metadata import PackageNotFoundError, version

from .config import ServiceConfig, default_config_path
from .core import (
    AggregateResult,
    CancellationFanout,
    CancellationToken,
    CommandSupervisor,
    ExitStatus,
    Outcome,
    OutcomeAggregator,
    OutcomeKind,
    StopSignal,
    SupervisorState,
)
from .dot_dict import DotDict
from .exceptions import (
    AggregationError,
    CmdSvcError,
    ConfigError,
    SpawnError,
    StopSignalError,
    TerminationError,
    WaitError,
)
from .host import ShutdownManager
from .service import CommandService

# Version is read from package metadata (pyproject.toml)
try:
    __version__ = version("cmdsvc")
except PackageNotFoundError:
    # Package not installed, use fallback (development mode)
    __version__ = "0.1.0-dev"

__all__ = [
    # Version
    "__version__",
    # Service
    "CommandService",
    "ServiceConfig",
    "default_config_path",
    "ShutdownManager",
    # Core
    "AggregateResult",
    "CancellationFanout",
    "CancellationToken",
    "CommandSupervisor",
    "ExitStatus",
    "Outcome",
    "OutcomeAggregator",
    "OutcomeKind",
    "StopSignal",
    "SupervisorState",
    "DotDict",
    # Exceptions
    "CmdSvcError",
    "ConfigError",
    "SpawnError",
    "WaitError",
    "TerminationError",
    "AggregationError",
    "StopSignalError",
]
