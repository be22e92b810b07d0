"""
Process-wide runtime settings.

Settings are held in module-level storage, read by the dispatcher (binding
cache) and by the package import (exit-time teardown hook). Tests swap them
with set_runtime_settings() and restore with reset_runtime_settings().
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RuntimeSettings:
    """Pluggable behaviors of the runtime.

    Attributes:
        cache_bindings: Memoize bare-name resolutions per concrete type.
        terminate_on_exit: Terminate every remaining root object at
            interpreter exit.
    """
    cache_bindings: bool = True
    terminate_on_exit: bool = True


_DEFAULT_SETTINGS = RuntimeSettings()
_runtime_settings: RuntimeSettings = _DEFAULT_SETTINGS


def get_runtime_settings() -> RuntimeSettings:
    """Get the active runtime settings."""
    return _runtime_settings


def set_runtime_settings(settings: RuntimeSettings) -> None:
    """Replace the active runtime settings.

    Args:
        settings: The new settings instance
    """
    global _runtime_settings
    _runtime_settings = settings


def reset_runtime_settings() -> None:
    """Restore the default runtime settings."""
    set_runtime_settings(_DEFAULT_SETTINGS)
