"""Settings for the event manager."""

from __future__ import annotations

import os
from dataclasses import dataclass

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class EventManagerConfig:
    # Raise TypeError for @listening methods whose signature can't take an event,
    # instead of skipping them.
    strict_signatures: bool = False
    # Only read by configure_logger(); the manager itself never changes logging setup.
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> EventManagerConfig:
        """Build a config from ``EVENTMANAGER_*`` environment variables."""
        strict = os.environ.get("EVENTMANAGER_STRICT_SIGNATURES", "")
        return cls(
            strict_signatures=strict.strip().lower() in _TRUTHY,
            log_level=os.environ.get("EVENTMANAGER_LOG_LEVEL", cls.log_level).upper(),
        )
