"""Abstract telemetry sink interface.

The CLI depends on BaseSink, not on a concrete backend, so the metrics
endpoint can change without touching the coverage gate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from ciguard_telemetry.models import RunMetadata


class BaseSink(ABC):
    """Fire-and-forget destination for CI telemetry events.

    Implementations must never raise from send(): a telemetry outage cannot
    be allowed to change a gate decision.
    """

    @abstractmethod
    def send(self, event: dict, metadata: RunMetadata) -> bool:
        """Send one event. Returns True if the endpoint accepted it."""

    def send_all(self, events: Iterable[dict], metadata: RunMetadata) -> int:
        """Send each event independently and return how many were accepted."""
        return sum(1 for event in events if self.send(event, metadata))

    def close(self) -> None:
        """Release any resources held by the sink (HTTP connections).

        Default is a no-op so callers can always call close() safely.
        """
