"""Core system components: config, scheduler, orchestrator."""

from momentum_rotation.core.config import Config, ConfigurationError
from momentum_rotation.core.scheduler import Scheduler

__all__ = [
    "Config",
    "ConfigurationError",
    "Scheduler",
]
