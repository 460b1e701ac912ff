"""Base event type fired through the event manager."""

from __future__ import annotations

from pydantic import BaseModel


class Event(BaseModel):
    """Base class for every event fired through an ``EventManager``.

    Subclasses declare their own payload fields. The ``cancelled`` flag is a
    cooperative signal between handlers: the manager never reads it, so a
    lower-priority handler sees whatever a higher-priority one left there
    and decides for itself whether to act.
    """

    cancelled: bool = False

    def set_cancelled(self, cancelled: bool) -> None:
        self.cancelled = cancelled

    def is_cancelled(self) -> bool:
        return self.cancelled
