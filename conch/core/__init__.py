"""
Conch Core Module

Configuration shared by the interpreter stages and the read-loop.
"""

from .config_loader import (
    Config,
    ConfigLoader,
    ShellConfig,
    ExecutorConfig,
    LoggingConfig,
    get_config,
)

__all__ = [
    'Config',
    'ConfigLoader',
    'ShellConfig',
    'ExecutorConfig',
    'LoggingConfig',
    'get_config',
]
