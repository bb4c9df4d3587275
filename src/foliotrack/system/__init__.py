"""
System configuration package.

Exports:
    - SystemConfig: Complete system configuration model
    - get_system_config: Get system config singleton
    - reload_system_config: Force reload system config
    - LoggerFactory: Factory for creating configured loggers
    - LoggingConfig: Logging configuration model
"""

from foliotrack.system.config import CacheConfig, SystemConfig, get_system_config, reload_system_config
from foliotrack.system.log_system import LoggerFactory, LoggingConfig

__all__ = [
    "CacheConfig",
    "SystemConfig",
    "get_system_config",
    "reload_system_config",
    "LoggerFactory",
    "LoggingConfig",
]
